# puntoventa/modules/ingredientes/repository.py
from typing import Any, Dict, List, Optional

from puntoventa.shared.store import RemoteStore, Order, eq, ilike


class IngredientesRepository:
    def __init__(self, store: RemoteStore):
        self.store = store

    def list_ingredients(self, term: Optional[str] = None, include_inactive: bool = False) -> List[Dict[str, Any]]:
        filters = [] if include_inactive else [eq("activo", True)]
        if term:
            filters.append(ilike("nombre", term))
        return self.store.select("ingredientes", filters=filters, order=[Order("nombre")])

    def get_ingredient(self, ingrediente_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("ingredientes", [eq("id", ingrediente_id)])

    def create_ingredient(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("ingredientes", data)

    def update_ingredient(self, ingrediente_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.store.update("ingredientes", [eq("id", ingrediente_id)], data)
        return rows[0] if rows else None
