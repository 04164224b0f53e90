# puntoventa/modules/productos/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import List, Optional
from decimal import Decimal
from datetime import datetime


class ProductoBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255)
    descripcion: Optional[str] = None
    precio_venta: Decimal = Field(..., ge=0)
    precio_costo: Decimal = Field(Decimal("0"), ge=0)
    stock_actual: int = Field(0, ge=0)
    stock_minimo: int = Field(0, ge=0)
    sku: Optional[str] = Field(None, max_length=100)
    categoria_id: Optional[int] = None

    @field_validator('nombre')
    @classmethod
    def validate_nombre(cls, v):
        if not v.strip():
            raise ValueError('El nombre es obligatorio')
        return v.strip()

    @field_validator('sku', 'descripcion')
    @classmethod
    def blank_to_none(cls, v):
        return v.strip() or None if v is not None else None


class ProductoCreate(ProductoBase):
    pass


class ProductoUpdate(ProductoBase):
    pass


class ProductoResponse(ProductoBase):
    id: int
    created_at: datetime
    imagen_url: Optional[str] = None


class ProductosStats(BaseModel):
    total_productos: int
    valor_inventario: Decimal
    stock_bajo: int


class ProductosListResponse(BaseModel):
    productos: List[ProductoResponse]
    stats: ProductosStats


class MovimientoResponse(BaseModel):
    id: int
    created_at: datetime
    producto_id: int
    tipo_movimiento: str
    cantidad: int
    justificacion: Optional[str] = None
    usuario_id: Optional[str] = None


class CategoriaBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255)
    descripcion: Optional[str] = None

    @field_validator('nombre')
    @classmethod
    def validate_nombre(cls, v):
        if not v.strip():
            raise ValueError('El nombre es obligatorio')
        return v.strip()


class CategoriaResponse(CategoriaBase):
    id: int
    created_at: datetime
