import polars as pl
import structlog
from typing import List

from ...models.payload import AlertaPayload, ItemParado, TipoAlerta

logger = structlog.get_logger(__name__)


def _qtd(valor: float) -> str:
    """Quantidade sem casas decimais desnecessárias (10.0 -> '10', 2.5 -> '2.5')."""
    return f"{valor:g}"


def _ordenar(df: pl.DataFrame, severidade: str) -> pl.DataFrame:
    # Maior severidade primeiro; empate por descrição e id (determinismo)
    return df.sort([severidade, "descricao", "id"], descending=[True, False, False])


class AlertBuilder:
    """
    Gera os alertas do relatório a partir da posição já marcada
    (colunas em_ruptura, em_excesso, sem_movimento e parado vindas do EstoqueMath).
    Ordem fixa: RUPTURA, EXCESSO, PARADO.
    """

    def __init__(self, dias_parado: int):
        self.dias_parado = dias_parado

    def rupturas(self, df: pl.DataFrame) -> pl.DataFrame:
        df = df.filter(pl.col("em_ruptura")).with_columns(
            (pl.col("estoque_minimo") - pl.col("saldo_atual")).alias("severidade")
        )
        return _ordenar(df, "severidade")

    def excessos(self, df: pl.DataFrame) -> pl.DataFrame:
        return _ordenar(df.filter(pl.col("em_excesso")), "valor_estoque")

    def parados(self, df: pl.DataFrame) -> pl.DataFrame:
        return _ordenar(df.filter(pl.col("sem_movimento")), "valor_estoque")

    def estoque_parado(self, df: pl.DataFrame) -> pl.DataFrame:
        # Só entra na lista quem ainda tem valor imobilizado
        return _ordenar(df.filter(pl.col("parado")), "valor_estoque")

    def gerar(self, df: pl.DataFrame) -> List[AlertaPayload]:
        alertas: List[AlertaPayload] = []

        for row in self.rupturas(df).iter_rows(named=True):
            consumo = row.get("consumo_medio_dia")
            alertas.append(AlertaPayload(
                type=TipoAlerta.RUPTURA,
                product=row["descricao"],
                current_stock=row["saldo_atual"],
                min_stock=row["estoque_minimo"],
                avg_consumption=round(consumo, 2) if consumo is not None else None,
                suggestion=(
                    f"Comprar urgente. Estoque abaixo do mínimo ({_qtd(row['estoque_minimo'])}). "
                    f"Repor ao menos {_qtd(row['severidade'])} un."
                ),
            ))

        for row in self.excessos(df).iter_rows(named=True):
            alertas.append(AlertaPayload(
                type=TipoAlerta.EXCESSO,
                product=row["descricao"],
                current_stock=row["saldo_atual"],
                min_stock=row["estoque_minimo"],
                suggestion=(
                    f"Avaliar redução de compras ou promoção. "
                    f"R$ {row['valor_estoque']:,.2f} imobilizados."
                ),
            ))

        for row in self.parados(df).iter_rows(named=True):
            alertas.append(AlertaPayload(
                type=TipoAlerta.PARADO,
                product=row["descricao"],
                current_stock=row["saldo_atual"],
                suggestion=(
                    f"Sem movimentação há {row['dias_sem_movimento']} dias "
                    f"(limite {self.dias_parado}). Avaliar liquidação ou transferência."
                ),
            ))

        logger.info("alertas_gerados", total=len(alertas))
        return alertas

    def itens_parados(self, df: pl.DataFrame) -> List[ItemParado]:
        return [
            ItemParado(
                product=row["descricao"],
                days_without_movement=int(row["dias_sem_movimento"]),
                value=round(row["valor_estoque"], 2),
            )
            for row in self.estoque_parado(df).iter_rows(named=True)
        ]
