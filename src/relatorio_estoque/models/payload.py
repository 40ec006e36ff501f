from enum import Enum
from typing import List, Optional
from pydantic import BaseModel, Field


class TipoAlerta(str, Enum):
    RUPTURA = "RUPTURA"
    EXCESSO = "EXCESSO"
    PARADO = "PARADO"


class EmpresaPayload(BaseModel):
    name: str
    cnpj: str
    sector: str


class PeriodoPayload(BaseModel):
    start: str
    end: str


class KpisPayload(BaseModel):
    total_items: int
    critical_stock_items: int
    excess_stock_items: int
    dead_stock_items_90d: int
    current_inventory_value: float
    total_purchases_period: float
    total_exits_period: float


class AlertaPayload(BaseModel):
    type: TipoAlerta
    product: str
    current_stock: float
    min_stock: Optional[float] = None
    avg_consumption: Optional[float] = None
    suggestion: str


class ItemAbc(BaseModel):
    product: str
    consumption_value: float
    # Percentual ACUMULADO do consumo (0-100) até este item
    percentage: float


class CurvaAbcPayload(BaseModel):
    curve_a: List[ItemAbc] = Field(default_factory=list)
    curve_b: List[ItemAbc] = Field(default_factory=list)
    curve_c: List[ItemAbc] = Field(default_factory=list)


class ItemParado(BaseModel):
    product: str
    days_without_movement: int
    value: float


class RegrasPayload(BaseModel):
    min_stock_method: str
    dead_stock_days: int
    excess_stock_multiple: float
    abc_cutoffs: dict


class AiReportPayload(BaseModel):
    """Snapshot estruturado do relatório. Não é persistido por quem o monta."""

    company: EmpresaPayload
    period: PeriodoPayload
    kpis: KpisPayload
    alerts: List[AlertaPayload]
    abc: CurvaAbcPayload
    dead_stock: List[ItemParado]
    rules: RegrasPayload
