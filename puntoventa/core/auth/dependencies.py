from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.core.auth.service import AuthService

security = HTTPBearer()


class AuthenticationError(HTTPException):
    def __init__(self, detail: str = "Could not validate credentials"):
        super().__init__(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=detail,
            headers={"WWW-Authenticate": "Bearer"},
        )


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security)
) -> CurrentSession:
    """Obtener la sesión actual desde el token"""

    payload = AuthService.verify_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Token inválido o expirado")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Payload del token inválido")

    return CurrentSession(
        user_id=user_id,
        email=payload.get("email"),
        access_token=credentials.credentials
    )
