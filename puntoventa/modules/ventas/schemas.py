# puntoventa/modules/ventas/schemas.py
from pydantic import BaseModel, Field
from typing import List, Optional, Literal
from decimal import Decimal
from datetime import datetime
from puntoventa.shared.schemas.common import BaseResponse


class ProductoVenta(BaseModel):
    id: int
    nombre: str
    sku: Optional[str] = None
    precio_venta: Decimal
    stock_actual: int
    stock_minimo: int = 0
    imagen_url: Optional[str] = None
    categoria_id: Optional[int] = None


class ClienteOption(BaseModel):
    id: int
    nombre: str
    email: Optional[str] = None
    telefono: Optional[str] = None


class CartItemRequest(BaseModel):
    producto_id: int = Field(..., gt=0)


class CartQuantityRequest(BaseModel):
    cantidad: int = Field(..., description="Cantidad deseada; se ajusta a [1, stock]")


class CheckoutOptionsRequest(BaseModel):
    cliente_id: Optional[int] = Field(None, description="Cliente de la venta (None = cliente general)")
    metodo_pago: Literal["efectivo", "tarjeta"] = "efectivo"


class CartLineResponse(BaseModel):
    producto_id: int
    nombre: str
    precio_unitario: Decimal
    cantidad: int
    stock_actual: int
    subtotal: Decimal


class CartResponse(BaseModel):
    items: List[CartLineResponse]
    total: Decimal
    items_count: int
    cliente_id: Optional[int] = None
    metodo_pago: str
    submitting: bool = False
    success_message: Optional[str] = None


class CheckoutResponse(BaseResponse):
    venta_id: int
    total: Decimal
    metodo_pago: str
    cliente_id: Optional[int] = None
    items_count: int
    created_at: Optional[datetime] = None
    cart: CartResponse
