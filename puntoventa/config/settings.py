# puntoventa/config/settings.py
from pydantic_settings import BaseSettings
from typing import Optional
import os

class Settings(BaseSettings):
    # App Info
    app_name: str = "Salty & Sweety POS API"
    version: str = "1.0.0"
    debug: bool = False
    log_level: str = os.getenv("LOG_LEVEL", "INFO")

    # Store remoto: "postgrest" (Supabase) o "sql" (SQLAlchemy con transacciones)
    store_backend: str = "postgrest"

    # Supabase
    supabase_url: str = os.getenv("SUPABASE_URL", "http://localhost:54321")
    supabase_anon_key: Optional[str] = None
    supabase_jwt_secret: str = os.getenv("SUPABASE_JWT_SECRET", "change-in-production")
    jwt_algorithm: str = "HS256"
    jwt_audience: str = "authenticated"

    # Database - solo para store_backend == "sql"
    database_url: str = os.getenv("DATABASE_URL", "sqlite:///./puntoventa.db")

    # External Services
    cloudinary_cloud_name: Optional[str] = None
    cloudinary_api_key: Optional[str] = None
    cloudinary_api_secret: Optional[str] = None
    cloudinary_folder: str = "puntoventa"

    # File Upload
    max_image_size: int = 10 * 1024 * 1024
    allowed_image_formats: set = {"image/jpeg", "image/png", "image/webp", "image/jpg"}

    # Server
    host: str = "0.0.0.0"
    port: int = int(os.getenv("PORT", 10000))
    request_timeout: int = 30

    # Comportamiento de páginas
    sale_success_seconds: int = 3
    view_stale_seconds: float = 2.0
    productos_grid_limit: int = 50
    productos_picker_limit: int = 20

    @property
    def supabase_rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"

    @property
    def supabase_auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = 'ignore'

settings = Settings()
