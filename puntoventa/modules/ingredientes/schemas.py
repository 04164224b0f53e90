# puntoventa/modules/ingredientes/schemas.py
from pydantic import BaseModel, Field, field_validator
from decimal import Decimal
from datetime import datetime


class IngredienteBase(BaseModel):
    nombre: str = Field(..., min_length=1, max_length=255)
    unidad_medida: str = Field("kg", max_length=20, description="kg, g, l, ml, unidad...")
    precio_unitario: Decimal = Field(..., ge=0)
    stock_actual: Decimal = Field(Decimal("0"), ge=0)

    @field_validator('nombre')
    @classmethod
    def validate_nombre(cls, v):
        if not v.strip():
            raise ValueError('El nombre es obligatorio')
        return v.strip()


class IngredienteRequest(IngredienteBase):
    activo: bool = True


class IngredienteResponse(IngredienteBase):
    id: int
    created_at: datetime
    activo: bool
