# puntoventa/modules/clientes/schemas.py
from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime


class ClienteBase(BaseModel):
    nombre: str = Field(..., max_length=255, description="Nombre del cliente")
    email: Optional[str] = Field(None, max_length=255)
    telefono: Optional[str] = Field(None, max_length=50)
    notas_cliente: Optional[str] = None

    @field_validator('email', 'telefono', 'notas_cliente')
    @classmethod
    def blank_to_none(cls, v):
        if v is None:
            return None
        return v.strip() or None


class ClienteRequest(ClienteBase):
    pass


class ClienteResponse(ClienteBase):
    id: int
    created_at: datetime
