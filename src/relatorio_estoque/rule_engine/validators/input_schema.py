import pandera.polars as pa
import polars as pl

class ProdutosSchema(pa.DataFrameModel):
    """
    Contrato do catálogo antes de entrar no Motor de Relatório.
    Roda DEPOIS do sanitizer: custos e mínimos já não podem ser negativos.
    """
    
    id: str = pa.Field(unique=True)
    descricao: str
    
    # coerce=True converte inteiros vindos do banco (10 -> 10.0)
    estoque_minimo: float = pa.Field(ge=0.0, coerce=True)
    pmed: float = pa.Field(ge=0.0, coerce=True)
    
    ativo: bool
    criado_em: pl.Date = pa.Field(nullable=True)

    class Config:
        # strict=False permite colunas extras (saldo, valor, etc.)
        strict = False


class MovimentacoesSchema(pa.DataFrameModel):
    """Contrato das movimentações (entradas e saídas)."""
    
    produto_id: str
    tipo: str = pa.Field(isin=["IN", "OUT"])
    quantidade: float = pa.Field(coerce=True)
    valor_total: float = pa.Field(coerce=True)
    data_movimento: pl.Date

    class Config:
        strict = False
