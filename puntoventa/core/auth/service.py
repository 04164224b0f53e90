import logging
from typing import Optional

import httpx
from jose import jwt, JWTError

from puntoventa.config.settings import settings
from puntoventa.core.auth.schemas import SessionResponse, SessionUser

logger = logging.getLogger(__name__)


class AuthProviderError(Exception):
    """Error devuelto por el proveedor de autenticación"""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthService:
    """Sesiones delegadas al endpoint de autenticación de Supabase"""

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 client: Optional[httpx.Client] = None):
        self.base_url = (base_url or settings.supabase_auth_url).rstrip("/")
        self.api_key = api_key if api_key is not None else settings.supabase_anon_key
        self.client = client or httpx.Client(timeout=settings.request_timeout)

    def _get_headers(self, access_token: Optional[str] = None) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["apikey"] = self.api_key
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"
        return headers

    def sign_in(self, email: str, password: str) -> SessionResponse:
        """Iniciar sesión con email y contraseña"""
        try:
            response = self.client.post(
                f"{self.base_url}/token",
                params={"grant_type": "password"},
                json={"email": email, "password": password},
                headers=self._get_headers()
            )
        except httpx.HTTPError as e:
            logger.error(f"❌ Error conectando con el servicio de autenticación: {str(e)}")
            raise AuthProviderError("Servicio de autenticación no disponible", status_code=503)

        if response.status_code != 200:
            logger.warning(f"Inicio de sesión rechazado para {email}: HTTP {response.status_code}")
            raise AuthProviderError("Email o contraseña incorrectos")

        data = response.json()
        user = data.get("user") or {}
        logger.info(f"✅ Sesión iniciada: {user.get('email', email)}")
        return SessionResponse(
            access_token=data["access_token"],
            refresh_token=data.get("refresh_token"),
            expires_in=data.get("expires_in"),
            user=SessionUser(id=user.get("id", ""), email=user.get("email", email))
        )

    def sign_out(self, access_token: str) -> None:
        """Cerrar la sesión en el proveedor (los errores solo se registran)"""
        try:
            response = self.client.post(
                f"{self.base_url}/logout",
                headers=self._get_headers(access_token)
            )
            if response.status_code >= 400:
                logger.warning(f"Cierre de sesión respondió HTTP {response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"No se pudo cerrar la sesión remota: {str(e)}")

    @staticmethod
    def verify_token(token: str) -> Optional[dict]:
        """Verificar y decodificar token"""
        try:
            payload = jwt.decode(
                token,
                settings.supabase_jwt_secret,
                algorithms=[settings.jwt_algorithm],
                audience=settings.jwt_audience
            )
            return payload
        except JWTError:
            return None


auth_service = AuthService()
