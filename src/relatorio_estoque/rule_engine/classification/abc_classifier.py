import polars as pl
import structlog

from ...core.config import ParametrosRelatorio
from ...models.payload import CurvaAbcPayload, ItemAbc

logger = structlog.get_logger(__name__)

# Tolerância de ponto flutuante na comparação com os cortes (0.8000000001 ainda é A)
EPSILON = 1e-9


class ABCClassifier:
    """
    Calcula a Curva ABC de Consumo (Pareto).
    Entrada: consumo por produto no período (saídas em R$), já com a descrição.
    """

    def __init__(self, cortes: tuple[float, float] | None = None):
        self.cortes = cortes or ParametrosRelatorio().cortes_abc

    @staticmethod
    def calcular_abc_polars(df: pl.DataFrame, cortes: tuple[float, float]) -> pl.DataFrame:
        """
        Método Estático Puro: recebe consumo por produto e os cortes acumulados (0-1) de A e B.
        Colunas esperadas: 'descricao', 'consumo_valor'. Produtos sem consumo ficam de fora.
        """
        df = df.filter(pl.col("consumo_valor") > 0)

        if df.height == 0:
            return df.with_columns([
                pl.lit(None, dtype=pl.Float64).alias("percentual_acumulado"),
                pl.lit(None, dtype=pl.Utf8).alias("curva_abc"),
            ])

        # 1. Ordenar do maior para o menor (Pareto). Empate: descrição, depois id
        chaves = ["consumo_valor", "descricao"] + (["id"] if "id" in df.columns else [])
        df = df.sort(chaves, descending=[True] + [False] * (len(chaves) - 1))

        # 2. Acumulados
        total_geral = df["consumo_valor"].sum()

        df = df.with_columns([
            (pl.col("consumo_valor").cum_sum() / total_geral).alias("percentual_acumulado")
        ])

        # 3. Cortes. Ex: (0.80, 0.95)
        corte_a = cortes[0] + EPSILON
        corte_b = cortes[1] + EPSILON

        # 4. Classificação
        df = df.with_columns([
            pl.when(pl.col("percentual_acumulado") <= corte_a).then(pl.lit("A"))
            .when(pl.col("percentual_acumulado") <= corte_b).then(pl.lit("B"))
            .otherwise(pl.lit("C"))
            .alias("curva_abc")
        ])

        return df

    def run(self, df_consumo: pl.DataFrame) -> CurvaAbcPayload:
        """Classifica e monta as três curvas do payload."""
        df = self.calcular_abc_polars(df_consumo, self.cortes)

        curvas = {"A": [], "B": [], "C": []}
        for row in df.iter_rows(named=True):
            curvas[row["curva_abc"]].append(ItemAbc(
                product=row["descricao"],
                consumption_value=round(row["consumo_valor"], 2),
                percentage=round(row["percentual_acumulado"] * 100.0, 2),
            ))

        logger.info(
            "curva_abc_concluida",
            total_produtos=df.height,
            curva_a=len(curvas["A"]), curva_b=len(curvas["B"]), curva_c=len(curvas["C"]),
        )
        return CurvaAbcPayload(curve_a=curvas["A"], curve_b=curvas["B"], curve_c=curvas["C"])
