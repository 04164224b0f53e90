# puntoventa/modules/clientes/repository.py
from typing import Any, Dict, List, Optional

from puntoventa.core.exceptions import StoreError, translate_store_error
from puntoventa.shared.store import RemoteStore, Order, eq, search


class ClientesRepository:
    def __init__(self, store: RemoteStore):
        self.store = store

    def list_clients(self, term: Optional[str] = None) -> List[Dict[str, Any]]:
        filters = [search(["nombre", "email", "telefono"], term)] if term else []
        return self.store.select("clientes", filters=filters, order=[Order("nombre")])

    def get_client(self, cliente_id: int) -> Optional[Dict[str, Any]]:
        return self.store.select_one("clientes", [eq("id", cliente_id)])

    def create_client(self, data: Dict[str, Any]) -> Dict[str, Any]:
        return self.store.insert("clientes", data)

    def update_client(self, cliente_id: int, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        rows = self.store.update("clientes", [eq("id", cliente_id)], data)
        return rows[0] if rows else None

    def delete_client(self, cliente_id: int) -> None:
        try:
            self.store.delete("clientes", [eq("id", cliente_id)])
        except StoreError as e:
            raise translate_store_error(e, "clientes")
