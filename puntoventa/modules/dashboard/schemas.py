# puntoventa/modules/dashboard/schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional
from decimal import Decimal
from datetime import date


class ProductoStockBajo(BaseModel):
    id: int
    nombre: str
    sku: Optional[str] = None
    stock_actual: int
    stock_minimo: int


class MetaMes(BaseModel):
    mes: date
    monto_objetivo: Decimal
    progreso: Decimal = Field(..., description="Porcentaje de la meta alcanzado (0-100+)")
    faltante: Decimal


class DashboardResponse(BaseModel):
    ventas_hoy: Decimal
    ventas_mes: Decimal
    stock_bajo: List[ProductoStockBajo]
    stock_bajo_count: int
    clientes_activos: int
    meta: Optional[MetaMes] = None


class MetaRequest(BaseModel):
    monto_objetivo: Decimal = Field(..., gt=0, description="Meta de ventas del mes")
    mes: Optional[date] = Field(None, description="Cualquier día del mes (por defecto el actual)")
