# puntoventa/shared/services/cloudinary_service.py
import re
import logging
from typing import Optional

import cloudinary
import cloudinary.uploader
import cloudinary.utils

from puntoventa.config.settings import settings
from puntoventa.core.exceptions import StoreError, ValidationError

logger = logging.getLogger(__name__)


class CloudinaryStorage:
    """Almacenamiento de imágenes de productos: upload(path, file) y get_public_url(path)"""

    def __init__(self):
        """Inicializar configuración de Cloudinary"""
        if not all([settings.cloudinary_cloud_name, settings.cloudinary_api_key, settings.cloudinary_api_secret]):
            logger.warning("⚠️ Cloudinary no está completamente configurado")
            self.configured = False
            return

        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True
        )
        self.configured = True
        logger.info("✅ Cloudinary configurado correctamente")

    def _public_id(self, path: str) -> str:
        """Ruta lógica (productos/<archivo>) a public_id dentro de la carpeta de la app"""
        stem = path.rsplit(".", 1)[0] if "." in path.rsplit("/", 1)[-1] else path
        parts = [self._sanitize_filename(p) for p in stem.split("/") if p]
        return "/".join([settings.cloudinary_folder] + parts)

    def validate_image(self, content: bytes, content_type: Optional[str]) -> None:
        if not content_type or content_type not in settings.allowed_image_formats:
            raise ValidationError("El archivo debe ser una imagen válida (jpeg, png o webp)")
        if len(content) > settings.max_image_size:
            raise ValidationError(
                f"La imagen no debe superar {settings.max_image_size // (1024 * 1024)}MB"
            )

    def upload(self, path: str, content: bytes, content_type: Optional[str] = None) -> None:
        """
        Subir una imagen en la ruta indicada (se sobrescribe si existe).

        Raises:
            ValidationError: Tipo o tamaño de archivo inválido
            StoreError: Cloudinary no configurado o error al subir
        """
        if not self.configured:
            raise StoreError("Cloudinary no está configurado correctamente", code="storage")
        self.validate_image(content, content_type)

        public_id = self._public_id(path)
        logger.info(f"📤 Subiendo imagen: {public_id}")
        try:
            result = cloudinary.uploader.upload(
                content,
                public_id=public_id,
                resource_type="image",
                overwrite=True,
                transformation=[{"width": 800, "height": 600, "crop": "fit", "quality": "auto:good"}],
                tags=["producto"]
            )
        except Exception as e:
            logger.error(f"❌ Error subiendo imagen a Cloudinary: {str(e)}")
            raise StoreError(f"Error subiendo imagen: {str(e)}", code="storage")

        if "secure_url" not in result:
            raise StoreError("Cloudinary no retornó URL válida", code="storage")
        logger.info(f"✅ Imagen subida: {result['secure_url']}")

    def get_public_url(self, path: str) -> str:
        url, _ = cloudinary.utils.cloudinary_url(self._public_id(path), secure=True)
        return url

    def delete(self, path: str) -> bool:
        if not self.configured:
            logger.warning("⚠️ Cloudinary no configurado, no se puede eliminar imagen")
            return False
        public_id = self._public_id(path)
        try:
            result = cloudinary.uploader.destroy(public_id)
        except Exception as e:
            logger.error(f"❌ Error eliminando imagen: {str(e)}")
            return False
        return result.get("result") == "ok"

    def _sanitize_filename(self, filename: str) -> str:
        """Limpiar nombre de archivo para uso seguro en Cloudinary"""
        sanitized = re.sub(r'[^a-zA-Z0-9_-]', '_', filename)[:50]
        return sanitized or "producto"
