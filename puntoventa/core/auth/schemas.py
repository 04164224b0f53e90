from pydantic import BaseModel, Field
from typing import Optional


class UserLogin(BaseModel):
    """Schema para login de usuario"""
    email: str = Field(..., description="Email del usuario")
    password: str = Field(..., min_length=6, description="Contraseña del usuario")

    class Config:
        json_schema_extra = {
            "example": {
                "email": "caja@saltysweety.com",
                "password": "caja1234"
            }
        }


class SessionUser(BaseModel):
    id: str
    email: Optional[str] = None


class SessionResponse(BaseModel):
    """Sesión activa devuelta por el proveedor de autenticación"""
    access_token: str
    token_type: str = "bearer"
    refresh_token: Optional[str] = None
    expires_in: Optional[int] = None
    user: SessionUser


class CurrentSession(BaseModel):
    """Usuario autenticado de la petición"""
    user_id: str
    email: Optional[str] = None
    access_token: str
