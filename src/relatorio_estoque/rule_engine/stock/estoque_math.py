import polars as pl
from datetime import date
from typing import Iterable

from ...models.entidades import Movimentacao, Produto, SaldoEstoque

SCHEMA_PRODUTOS = {
    "id": pl.Utf8,
    "descricao": pl.Utf8,
    "estoque_minimo": pl.Float64,
    "pmed": pl.Float64,
    "ativo": pl.Boolean,
    "criado_em": pl.Date,
}

SCHEMA_MOVIMENTACOES = {
    "id": pl.Utf8,
    "produto_id": pl.Utf8,
    "tipo": pl.Utf8,
    "quantidade": pl.Float64,
    "valor_total": pl.Float64,
    "data_movimento": pl.Date,
}

SCHEMA_SALDOS = {
    "produto_id": pl.Utf8,
    "quantidade": pl.Float64,
}


class EstoqueMath:
    """Cálculos de posição de estoque sobre snapshots já carregados (sem I/O)."""

    # --- Conversão dos registros tipados para DataFrames ---

    @staticmethod
    def produtos_para_df(produtos: Iterable[Produto]) -> pl.DataFrame:
        produtos = list(produtos)
        return pl.DataFrame({
            "id": [p.id for p in produtos],
            "descricao": [p.descricao for p in produtos],
            "estoque_minimo": [float(p.estoque_minimo) for p in produtos],
            "pmed": [float(p.pmed) for p in produtos],
            "ativo": [p.ativo for p in produtos],
            "criado_em": [p.criado_em for p in produtos],
        }, schema=SCHEMA_PRODUTOS)

    @staticmethod
    def movimentacoes_para_df(movimentacoes: Iterable[Movimentacao]) -> pl.DataFrame:
        movimentacoes = list(movimentacoes)
        return pl.DataFrame({
            "id": [m.id for m in movimentacoes],
            "produto_id": [m.produto_id for m in movimentacoes],
            "tipo": [m.tipo.value for m in movimentacoes],
            "quantidade": [float(m.quantidade) for m in movimentacoes],
            "valor_total": [float(m.valor_total) for m in movimentacoes],
            "data_movimento": [m.data_movimento for m in movimentacoes],
        }, schema=SCHEMA_MOVIMENTACOES)

    @staticmethod
    def saldos_para_df(saldos: Iterable[SaldoEstoque]) -> pl.DataFrame:
        saldos = list(saldos)
        return pl.DataFrame({
            "produto_id": [s.produto_id for s in saldos],
            "quantidade": [float(s.quantidade) for s in saldos],
        }, schema=SCHEMA_SALDOS)

    # --- Regras ---

    @staticmethod
    def montar_posicao(df_produtos: pl.DataFrame, df_saldos: pl.DataFrame) -> pl.DataFrame:
        """
        Posição atual dos produtos ATIVOS: saldo somado entre locais e valor (saldo x pmed).
        Produto sem registro de saldo tem saldo 0.
        """
        saldos = (
            df_saldos
            .group_by("produto_id")
            .agg(pl.col("quantidade").sum().alias("saldo_atual"))
        )
        return (
            df_produtos
            .filter(pl.col("ativo"))
            .join(saldos, left_on="id", right_on="produto_id", how="left")
            .with_columns(pl.col("saldo_atual").fill_null(0.0))
            .with_columns((pl.col("saldo_atual") * pl.col("pmed")).alias("valor_estoque"))
        )

    @staticmethod
    def filtrar_periodo(df_mov: pl.DataFrame, inicio: date, fim: date) -> pl.DataFrame:
        """Movimentações com data dentro de [inicio, fim] (inclusivo)."""
        return df_mov.filter(
            (pl.col("data_movimento") >= inicio) & (pl.col("data_movimento") <= fim)
        )

    @staticmethod
    def total_por_tipo(df_periodo: pl.DataFrame, tipo: str) -> float:
        total = df_periodo.filter(pl.col("tipo") == tipo)["valor_total"].sum()
        return float(total or 0.0)

    @staticmethod
    def consumo_por_produto(df_periodo: pl.DataFrame) -> pl.DataFrame:
        """Consumo (saídas) por produto no período: valor e quantidade."""
        return (
            df_periodo
            .filter(pl.col("tipo") == "OUT")
            .group_by("produto_id")
            .agg([
                pl.col("valor_total").sum().alias("consumo_valor"),
                pl.col("quantidade").sum().alias("consumo_qtd"),
            ])
        )

    @staticmethod
    def calcular_dias_parado(df_posicao: pl.DataFrame, df_mov: pl.DataFrame, data_referencia: date) -> pl.DataFrame:
        """
        Dias desde a última movimentação (qualquer tipo) até a data de referência.
        Movimentações posteriores à referência são ignoradas.
        Produto que nunca movimentou conta a partir do cadastro; sem cadastro fica nulo.
        """
        ultimos = (
            df_mov
            .filter(pl.col("data_movimento") <= data_referencia)
            .group_by("produto_id")
            .agg(pl.col("data_movimento").max().alias("ultimo_movimento"))
        )
        return (
            df_posicao
            .join(ultimos, left_on="id", right_on="produto_id", how="left")
            .with_columns(
                pl.coalesce([pl.col("ultimo_movimento"), pl.col("criado_em")]).alias("data_base_parado")
            )
            .with_columns(
                (pl.lit(data_referencia, dtype=pl.Date) - pl.col("data_base_parado"))
                .dt.total_days()
                .alias("dias_sem_movimento")
            )
        )

    @staticmethod
    def marcar_situacao(df: pl.DataFrame, multiplo_excesso: float, dias_parado: int) -> pl.DataFrame:
        """
        Flags de situação por produto:
        - em_ruptura: saldo ABAIXO do mínimo (estrito)
        - em_excesso: mínimo > 0 e saldo acima de (multiplo x mínimo)
        - sem_movimento: sem movimento há mais de N dias (gera alerta PARADO)
        - parado: sem_movimento e ainda com valor em estoque (lista de estoque parado)
        """
        df = df.with_columns(
            (pl.col("dias_sem_movimento").fill_null(-1) > dias_parado).alias("sem_movimento")
        )
        return df.with_columns([
            (pl.col("saldo_atual") < pl.col("estoque_minimo")).alias("em_ruptura"),
            (
                (pl.col("estoque_minimo") > 0)
                & (pl.col("saldo_atual") > pl.col("estoque_minimo") * multiplo_excesso)
            ).alias("em_excesso"),
            (pl.col("sem_movimento") & (pl.col("valor_estoque") > 0)).alias("parado"),
        ])
