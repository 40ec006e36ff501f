"""
Registros tipados lidos da fonte de dados.

Os dicionários vindos do banco (chaves camelCase) são convertidos aqui,
na fronteira, para modelos explícitos. Aceitamos tanto o alias do banco
('minStock') quanto o nome Python ('estoque_minimo').
"""
from datetime import date, datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


def para_data(valor):
    """Converte date/datetime/string ISO (com ou sem hora, com 'Z') para date."""
    if valor is None or valor == "":
        return None
    if isinstance(valor, datetime):
        return valor.date()
    if isinstance(valor, date):
        return valor
    if isinstance(valor, str):
        return datetime.fromisoformat(valor.strip().replace("Z", "+00:00")).date()
    return valor


class TipoMovimento(str, Enum):
    IN = "IN"
    OUT = "OUT"


class _Registro(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)


class Produto(_Registro):
    id: str
    descricao: str = Field(alias="description")
    estoque_minimo: float = Field(default=0.0, alias="minStock")
    pmed: float = 0.0
    ativo: bool = Field(default=True, alias="active")
    criado_em: Optional[date] = Field(default=None, alias="createdAt")

    @field_validator("id", mode="before")
    @classmethod
    def _id_texto(cls, v):
        return str(v)

    @field_validator("estoque_minimo", "pmed", mode="before")
    @classmethod
    def _nulo_vira_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("criado_em", mode="before")
    @classmethod
    def _data(cls, v):
        return para_data(v)


class Movimentacao(_Registro):
    id: str
    produto_id: str = Field(alias="productId")
    tipo: TipoMovimento = Field(alias="type")
    quantidade: float = Field(default=0.0, alias="quantity")
    valor_total: float = Field(default=0.0, alias="totalValue")
    data_movimento: date = Field(alias="movementDate")

    @field_validator("id", "produto_id", mode="before")
    @classmethod
    def _id_texto(cls, v):
        return str(v)

    @field_validator("quantidade", "valor_total", mode="before")
    @classmethod
    def _nulo_vira_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("data_movimento", mode="before")
    @classmethod
    def _data(cls, v):
        return para_data(v)


class SaldoEstoque(_Registro):
    produto_id: str = Field(alias="productId")
    local_id: Optional[str] = Field(default=None, alias="locationId")
    quantidade: float = Field(default=0.0, alias="quantity")

    @field_validator("produto_id", mode="before")
    @classmethod
    def _id_texto(cls, v):
        return str(v)

    @field_validator("quantidade", mode="before")
    @classmethod
    def _nulo_vira_zero(cls, v):
        return 0.0 if v is None else v


class Empresa(_Registro):
    id: Optional[str] = None
    nome: str = Field(default="", alias="name")
    cnpj: str = ""
    setor: str = Field(default="", alias="sectorName")
    email: Optional[str] = None
    email_setor: Optional[str] = Field(default=None, alias="sectorEmail")

    @field_validator("nome", "cnpj", "setor", mode="before")
    @classmethod
    def _nulo_vira_vazio(cls, v):
        return "" if v is None else v


class UsuarioAtual(_Registro):
    id: Optional[str] = None
    company_id: Optional[str] = Field(default=None, alias="companyId")
    nome: Optional[str] = Field(default=None, alias="name")
    email: Optional[str] = None
