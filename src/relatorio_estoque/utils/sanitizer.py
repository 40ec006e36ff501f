# Arquivo: src/relatorio_estoque/utils/sanitizer.py
import polars as pl
import logging

def sanear_produtos(df: pl.DataFrame) -> pl.DataFrame:
    """
    Blindagem de Dados:
    Garante que números críticos para a matemática do relatório não quebrem o cálculo.
    """
    logger = logging.getLogger("Sanitizer")
    
    if df.height == 0:
        return df

    # 1. Custo médio (pmed): nulo ou negativo vira 0
    if "pmed" in df.columns:
        qtd_negativos = df.filter(pl.col("pmed") < 0).height
        if qtd_negativos > 0:
            logger.warning(f"⚠️ BLINDAGEM: Encontrados {qtd_negativos} produtos com PMED negativo. Forçados para 0.")
        
        df = df.with_columns(
            pl.when(pl.col("pmed").fill_null(0.0) < 0)
            .then(0.0)
            .otherwise(pl.col("pmed").fill_null(0.0))
            .alias("pmed")
        )
    
    # 2. Estoque mínimo: nulo ou negativo vira 0
    if "estoque_minimo" in df.columns:
        df = df.with_columns(
            pl.when(pl.col("estoque_minimo").fill_null(0.0) < 0)
            .then(0.0)
            .otherwise(pl.col("estoque_minimo").fill_null(0.0))
            .alias("estoque_minimo")
        )
    
    # 3. Ativo nulo = ativo (padrão do cadastro)
    if "ativo" in df.columns:
        df = df.with_columns(pl.col("ativo").fill_null(True))
    
    return df

def avisar_saldos_negativos(df_saldos: pl.DataFrame) -> int:
    """Saldos negativos indicam erro de lançamento. Mantemos o valor e apenas avisamos."""
    if df_saldos.height == 0 or "quantidade" not in df_saldos.columns:
        return 0
    qtd = df_saldos.filter(pl.col("quantidade") < 0).height
    if qtd > 0:
        logging.getLogger("Sanitizer").warning(
            f"⚠️ BLINDAGEM: {qtd} registros de saldo negativo. Verifique os lançamentos."
        )
    return qtd
