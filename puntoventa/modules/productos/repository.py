# puntoventa/modules/productos/repository.py
from typing import Any, Dict, List, Optional

from puntoventa.core.exceptions import StoreError, translate_store_error
from puntoventa.shared.store import RemoteStore, Order, eq, search


class ProductosRepository:
    """Catálogo de productos y categorías"""

    def __init__(self, store: RemoteStore):
        self.store = store

    # ==================== PRODUCTOS ====================

    def list_products(self, term: Optional[str] = None, categoria_id: Optional[int] = None) -> List[Dict[str, Any]]:
        filters = []
        if term:
            filters.append(search(["nombre", "sku"], term))
        if categoria_id:
            filters.append(eq("categoria_id", categoria_id))
        return self.store.select("productos", filters=filters, order=[Order("nombre")])

    def get_product(self, producto_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("productos", [eq("id", producto_id)])

    def create_product(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("productos", data)

    def update_product(self, producto_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.store.update("productos", [eq("id", producto_id)], data)
        return rows[0] if rows else None

    def delete_product(self, producto_id: int) -> None:
        try:
            self.store.delete("productos", [eq("id", producto_id)])
        except StoreError as e:
            raise translate_store_error(e, "productos")

    def get_movements(self, producto_id: int, limit: int = 50) -> List[Dict[str, Any]]:
        return self.store.select(
            "movimientos_inventario",
            filters=[eq("producto_id", producto_id)],
            order=[Order("created_at", ascending=False), Order("id", ascending=False)],
            limit=limit
        )

    # ==================== CATEGORÍAS ====================

    def list_categories(self) -> List[Dict[str, Any]]:
        return self.store.select("categorias", order=[Order("nombre")])

    def get_category(self, categoria_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("categorias", [eq("id", categoria_id)])

    def create_category(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("categorias", data)

    def update_category(self, categoria_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.store.update("categorias", [eq("id", categoria_id)], data)
        return rows[0] if rows else None

    def delete_category(self, categoria_id: int) -> None:
        try:
            self.store.delete("categorias", [eq("id", categoria_id)])
        except StoreError as e:
            raise translate_store_error(e, "categorias")
