# puntoventa/modules/cotizaciones/repository.py
from typing import Any, Dict, List, Optional

from puntoventa.shared.store import RemoteStore, Order, eq, in_, search


class CotizacionesRepository:
    """Acceso a cotizaciones, sus items y sus ingredientes"""

    def __init__(self, store: RemoteStore):
        self.store = store

    # ==================== LECTURAS ====================

    def list_quotations(self, estado: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = [eq("estado", estado)] if estado else []
        return self.store.select(
            "cotizaciones",
            filters=filters,
            order=[Order("created_at", ascending=False), Order("id", ascending=False)]
        )

    def get_quotation(self, cotizacion_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("cotizaciones", [eq("id", cotizacion_id)])

    def get_clients_by_ids(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not ids:
            return {}
        rows = self.store.select("clientes", filters=[in_("id", sorted(set(ids)))])
        return {row["id"]: row for row in rows}

    def get_items(self, cotizacion_id: int) -> List[Dict[str, Any]]:
        return self.store.select(
            "cotizacion_items",
            filters=[eq("cotizacion_id", cotizacion_id)],
            order=[Order("id")]
        )

    def get_ingredient_lines(self, cotizacion_id: int) -> List[Dict[str, Any]]:
        return self.store.select(
            "cotizacion_ingredientes",
            filters=[eq("cotizacion_id", cotizacion_id)],
            order=[Order("id")]
        )

    def get_products_by_ids(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not ids:
            return {}
        rows = self.store.select("productos", filters=[in_("id", sorted(set(ids)))])
        return {row["id"]: row for row in rows}

    def get_ingredients_by_ids(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not ids:
            return {}
        rows = self.store.select("ingredientes", filters=[in_("id", sorted(set(ids)))])
        return {row["id"]: row for row in rows}

    def get_client(self, cliente_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("clientes", [eq("id", cliente_id)], columns=["id", "nombre"])

    def get_product(self, producto_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("productos", [eq("id", producto_id)])

    def get_ingredient(self, ingrediente_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("ingredientes", [eq("id", ingrediente_id)])

    def search_products(self, term: Optional[str], limit: int) -> List[Dict[str, Any]]:
        """Selector de productos: sin filtro de stock"""
        filters = [search(["nombre", "sku"], term)] if term else []
        return self.store.select("productos", filters=filters, order=[Order("nombre")], limit=limit)

    # ==================== ESCRITURAS ====================

    def create_quotation(self, row: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("cotizaciones", row)

    def create_items(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.store.insert("cotizacion_items", rows)

    def create_ingredient_lines(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.store.insert("cotizacion_ingredientes", rows)

    def update_status(self, cotizacion_id: int, estado: str) -> List[Dict[str, Any]]:
        return self.store.update("cotizaciones", [eq("id", cotizacion_id)], {"estado": estado})

    def delete_items(self, cotizacion_id: int) -> None:
        self.store.delete("cotizacion_items", [eq("cotizacion_id", cotizacion_id)])

    def delete_ingredient_lines(self, cotizacion_id: int) -> None:
        self.store.delete("cotizacion_ingredientes", [eq("cotizacion_id", cotizacion_id)])

    def delete_quotation(self, cotizacion_id: int) -> None:
        self.store.delete("cotizaciones", [eq("id", cotizacion_id)])
