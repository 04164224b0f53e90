# puntoventa/modules/dashboard/repository.py
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from puntoventa.shared.store import RemoteStore, Order, eq, gte
from puntoventa.modules.ventas.cart import to_decimal


class DashboardRepository:
    """Métricas agregadas para el panel principal"""

    def __init__(self, store: RemoteStore):
        self.store = store

    def sum_sales_since(self, since: datetime) -> Decimal:
        rows = self.store.select("ventas", filters=[gte("created_at", since)], columns=["total"])
        return sum((to_decimal(row["total"]) for row in rows), Decimal("0"))

    def get_low_stock_products(self) -> List[Dict[str, Any]]:
        """stock_actual <= stock_minimo; la comparación entre columnas se hace aquí"""
        rows = self.store.select("productos", order=[Order("stock_actual"), Order("nombre")])
        return [row for row in rows if row["stock_actual"] <= row["stock_minimo"]]

    def count_clients(self) -> int:
        return self.store.count("clientes")

    def get_goal(self, mes: date) -> Optional[Dict[str, Any]]:
        return self.store.select_one("metas", [eq("mes", mes)])

    def create_goal(self, mes: date, monto_objetivo: Decimal) -> Dict[str, Any]:
        return self.store.insert("metas", {"mes": mes, "monto_objetivo": monto_objetivo})

    def update_goal(self, meta_id: int, monto_objetivo: Decimal) -> List[Dict[str, Any]]:
        return self.store.update("metas", [eq("id", meta_id)], {"monto_objetivo": monto_objetivo})
