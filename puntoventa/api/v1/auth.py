from fastapi import APIRouter, Depends, HTTPException

from puntoventa.core.auth.service import AuthService, AuthProviderError, auth_service
from puntoventa.core.auth.schemas import UserLogin, SessionResponse, CurrentSession
from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.dependencies import get_page_states
from puntoventa.shared.services.page_state import PageStateStore
from puntoventa.shared.schemas.common import BaseResponse

router = APIRouter()


def get_auth_service() -> AuthService:
    return auth_service


@router.post("/login", response_model=SessionResponse)
async def login(
    user_login: UserLogin,
    service: AuthService = Depends(get_auth_service)
):
    """
    Iniciar sesión con email y contraseña

    **Body:**
    ```json
        {
            "email": "caja@saltysweety.com",
            "password": "caja1234"
        }
    ```
    """
    try:
        return service.sign_in(user_login.email, user_login.password)
    except AuthProviderError as e:
        raise HTTPException(
            status_code=e.status_code,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"} if e.status_code == 401 else None,
        )


@router.post("/logout", response_model=BaseResponse)
async def logout(
    current_user: CurrentSession = Depends(get_current_user),
    service: AuthService = Depends(get_auth_service),
    pages: PageStateStore = Depends(get_page_states)
):
    """Cerrar la sesión actual y descartar el estado de sus páginas"""
    service.sign_out(current_user.access_token)
    pages.discard(current_user.user_id)
    return BaseResponse(success=True, message="Sesión cerrada")


@router.get("/session", response_model=CurrentSession)
async def get_session(current_user: CurrentSession = Depends(get_current_user)):
    """Sesión activa del usuario"""
    return current_user
