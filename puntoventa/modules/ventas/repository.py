# puntoventa/modules/ventas/repository.py
from typing import Any, Dict, List, Optional

from puntoventa.shared.store import RemoteStore, Order, eq, gt, search


class VentasRepository:
    """Acceso a productos, clientes y ventas para el punto de venta"""

    def __init__(self, store: RemoteStore):
        self.store = store

    def search_products_in_stock(self, term: Optional[str] = None, limit: int = 50) -> List[Dict[str, Any]]:
        """Productos con stock, por nombre; búsqueda opcional por nombre o SKU"""
        filters = [gt("stock_actual", 0)]
        if term:
            filters.append(search(["nombre", "sku"], term))
        return self.store.select(
            "productos",
            filters=filters,
            order=[Order("nombre")],
            limit=limit
        )

    def get_product(self, producto_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("productos", [eq("id", producto_id)])

    def list_clients(self) -> List[Dict[str, Any]]:
        return self.store.select("clientes", order=[Order("nombre")])

    def get_client(self, cliente_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("clientes", [eq("id", cliente_id)], columns=["id", "nombre"])

    def create_sale(self, venta: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("ventas", venta)

    def delete_sale(self, venta_id: int) -> None:
        self.store.delete("ventas", [eq("id", venta_id)])

    def create_sale_items(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return self.store.insert("venta_items", items)

    def delete_sale_items(self, venta_id: int) -> None:
        self.store.delete("venta_items", [eq("venta_id", venta_id)])
