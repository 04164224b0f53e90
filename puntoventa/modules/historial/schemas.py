# puntoventa/modules/historial/schemas.py
from pydantic import BaseModel
from typing import List, Optional
from decimal import Decimal
from datetime import datetime
from puntoventa.shared.schemas.common import BaseResponse
from puntoventa.modules.cotizaciones.schemas import ClienteResumen


class VentaHistorial(BaseModel):
    id: int
    created_at: datetime
    total: Decimal
    metodo_pago: str
    cliente_id: Optional[int] = None
    usuario_id: Optional[str] = None
    cliente: Optional[ClienteResumen] = None


class HistorialStats(BaseModel):
    total_ventas: Decimal
    cantidad_ventas: int
    promedio_venta: Decimal
    ventas_efectivo: int
    ventas_tarjeta: int


class HistorialResponse(BaseModel):
    periodo: str
    fecha_inicio: datetime
    fecha_fin: datetime
    ventas: List[VentaHistorial]
    stats: HistorialStats


class VentaItemDetalle(BaseModel):
    id: int
    producto_id: int
    cantidad: int
    precio_unitario: Decimal
    subtotal: Decimal
    producto_nombre: Optional[str] = None
    producto_sku: Optional[str] = None


class VentaDetalleResponse(VentaHistorial):
    items: List[VentaItemDetalle] = []


class AnulacionResponse(BaseResponse):
    venta_id: int
    items_count: int
    productos_devueltos: List[int]
    productos_omitidos: List[int] = []
