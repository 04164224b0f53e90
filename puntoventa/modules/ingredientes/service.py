# puntoventa/modules/ingredientes/service.py
import logging
from typing import Any, Dict, List, Optional

from puntoventa.core.exceptions import NotFoundError
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .repository import IngredientesRepository
from .schemas import IngredienteRequest

logger = logging.getLogger(__name__)


class IngredientesService:
    """Ingredientes que se cotizan en las cotizaciones estándar y personalizadas"""

    def __init__(self, store: RemoteStore, views: ViewCache):
        self.repository = IngredientesRepository(store)
        self.views = views

    async def list_ingredients(self, term: Optional[str] = None, include_inactive: bool = False) -> List[Dict[str, Any]]:
        term = (term or "").strip() or None
        return self.views.get(
            ("ingredientes", term, include_inactive),
            lambda: self.repository.list_ingredients(term, include_inactive)
        )

    async def get_ingredient(self, ingrediente_id: int) -> Dict[str, Any]:
        ingrediente = self.repository.get_ingredient(ingrediente_id)
        if not ingrediente:
            raise NotFoundError(f"Ingrediente {ingrediente_id} no encontrado")
        return ingrediente

    async def create_ingredient(self, data: IngredienteRequest) -> Dict[str, Any]:
        ingrediente = self.repository.create_ingredient(data.model_dump())
        self.views.invalidate("ingredientes")
        return ingrediente

    async def update_ingredient(self, ingrediente_id: int, data: IngredienteRequest) -> Dict[str, Any]:
        ingrediente = self.repository.update_ingredient(ingrediente_id, data.model_dump())
        if ingrediente is None:
            raise NotFoundError(f"Ingrediente {ingrediente_id} no encontrado")
        self.views.invalidate("ingredientes")
        return ingrediente

    async def deactivate_ingredient(self, ingrediente_id: int) -> Dict[str, Any]:
        """Baja lógica: las cotizaciones existentes siguen apuntando al ingrediente"""
        ingrediente = self.repository.update_ingredient(ingrediente_id, {"activo": False})
        if ingrediente is None:
            raise NotFoundError(f"Ingrediente {ingrediente_id} no encontrado")
        self.views.invalidate("ingredientes")
        logger.info(f"Ingrediente #{ingrediente_id} desactivado")
        return ingrediente
