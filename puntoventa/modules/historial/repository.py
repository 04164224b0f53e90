# puntoventa/modules/historial/repository.py
from datetime import datetime
from typing import Any, Dict, List, Optional

from puntoventa.shared.store import RemoteStore, Order, eq, gte, in_, lte


class HistorialRepository:
    """Consultas y borrado de ventas registradas"""

    def __init__(self, store: RemoteStore):
        self.store = store

    def list_sales(
        self,
        inicio: datetime,
        fin: datetime,
        metodo_pago: Optional[str] = None,
        cliente_id: Optional[int] = None
    ) -> List[Dict[str, Any]]:
        filters = [gte("created_at", inicio), lte("created_at", fin)]
        if metodo_pago:
            filters.append(eq("metodo_pago", metodo_pago))
        if cliente_id:
            filters.append(eq("cliente_id", cliente_id))
        return self.store.select(
            "ventas",
            filters=filters,
            order=[Order("created_at", ascending=False), Order("id", ascending=False)]
        )

    def get_sale(self, venta_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("ventas", [eq("id", venta_id)])

    def get_sale_items(self, venta_id: int) -> List[Dict[str, Any]]:
        return self.store.select("venta_items", filters=[eq("venta_id", venta_id)], order=[Order("id")])

    def get_clients_by_ids(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not ids:
            return {}
        rows = self.store.select("clientes", filters=[in_("id", sorted(set(ids)))])
        return {row["id"]: row for row in rows}

    def get_products_by_ids(self, ids: List[int]) -> Dict[int, Dict[str, Any]]:
        if not ids:
            return {}
        rows = self.store.select("productos", filters=[in_("id", sorted(set(ids)))])
        return {row["id"]: row for row in rows}

    def delete_sale_items(self, venta_id: int) -> None:
        self.store.delete("venta_items", [eq("venta_id", venta_id)])

    def delete_sale(self, venta_id: int) -> None:
        self.store.delete("ventas", [eq("id", venta_id)])
