# puntoventa/modules/cotizaciones/schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from decimal import Decimal
from datetime import date, datetime
from puntoventa.shared.schemas.common import BaseResponse


class TipoRequest(BaseModel):
    tipo: Literal["personalizada", "estandar"]


class HeaderRequest(BaseModel):
    """Solo se aplican los campos enviados; deben corresponder al tipo actual"""
    cliente_id: Optional[int] = None
    valida_hasta: Optional[date] = None
    nombre_producto: Optional[str] = Field(None, max_length=255)


class ProductLineRequest(BaseModel):
    producto_id: int = Field(..., gt=0)


class ProductQuantityRequest(BaseModel):
    cantidad: int


class IngredientLineRequest(BaseModel):
    ingrediente_id: int = Field(..., gt=0)


class IngredientUpdateRequest(BaseModel):
    cantidad: Optional[Decimal] = Field(None, description="Mínimo 0.1")
    notas: Optional[str] = Field(None, max_length=500)


class EstadoRequest(BaseModel):
    estado: Literal["aceptada", "rechazada"]


class ProductLineResponse(BaseModel):
    producto_id: int
    nombre: str
    precio_unitario: Decimal
    cantidad: int
    subtotal: Decimal


class IngredientLineResponse(BaseModel):
    ingrediente_id: int
    nombre: str
    unidad_medida: Optional[str] = None
    precio_unitario: Decimal
    cantidad: Decimal
    notas: str = ""
    subtotal: Decimal


class QuotationFormResponse(BaseModel):
    tipo: str
    cliente_id: Optional[int] = None
    valida_hasta: Optional[date] = None
    nombre_producto: Optional[str] = None
    productos: List[ProductLineResponse]
    ingredientes: List[IngredientLineResponse]
    total_productos: Decimal
    total_ingredientes: Decimal
    total: Decimal
    submitting: bool = False
    success_message: Optional[str] = None


class ClienteResumen(BaseModel):
    id: int
    nombre: str
    email: Optional[str] = None
    telefono: Optional[str] = None


class CotizacionResponse(BaseModel):
    id: int
    created_at: datetime
    tipo: str
    estado: str
    total: Decimal
    cliente_id: Optional[int] = None
    valida_hasta: Optional[date] = None
    nombre_producto: Optional[str] = None
    usuario_id: Optional[str] = None
    cliente: Optional[ClienteResumen] = None


class CotizacionItemDetalle(BaseModel):
    id: int
    producto_id: int
    cantidad: int
    precio_unitario: Decimal
    subtotal: Decimal
    producto_nombre: Optional[str] = None
    producto_sku: Optional[str] = None


class CotizacionIngredienteDetalle(BaseModel):
    id: int
    ingrediente_id: int
    cantidad: Decimal
    precio_unitario: Decimal
    subtotal: Decimal
    notas: Optional[str] = None
    ingrediente_nombre: Optional[str] = None
    unidad_medida: Optional[str] = None


class CotizacionDetalleResponse(CotizacionResponse):
    items: List[CotizacionItemDetalle] = []
    ingredientes: List[CotizacionIngredienteDetalle] = []


class QuotationCommitResponse(BaseResponse):
    cotizacion_id: int
    tipo: str
    total: Decimal
    items_count: int
    ingredientes_count: int
    form: QuotationFormResponse
