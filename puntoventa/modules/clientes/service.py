# puntoventa/modules/clientes/service.py
import logging
from typing import Any, Dict, List, Optional

from puntoventa.core.exceptions import NotFoundError, ValidationError
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .repository import ClientesRepository
from .schemas import ClienteRequest

logger = logging.getLogger(__name__)

CLIENT_VIEWS = ("clientes", "clientesActivos")


class ClientesService:
    def __init__(self, store: RemoteStore, views: ViewCache):
        self.repository = ClientesRepository(store)
        self.views = views

    def _validated(self, data: ClienteRequest) -> Dict[str, Any]:
        values = data.model_dump()
        values["nombre"] = (values["nombre"] or "").strip()
        if not values["nombre"]:
            raise ValidationError("El nombre del cliente es obligatorio")
        return values

    async def list_clients(self, term: Optional[str] = None) -> List[Dict[str, Any]]:
        term = (term or "").strip() or None
        return self.views.get(("clientes", "lista", term), lambda: self.repository.list_clients(term))

    async def get_client(self, cliente_id: int) -> Dict[str, Any]:
        cliente = self.repository.get_client(cliente_id)
        if not cliente:
            raise NotFoundError(f"Cliente {cliente_id} no encontrado")
        return cliente

    async def create_client(self, data: ClienteRequest) -> Dict[str, Any]:
        cliente = self.repository.create_client(self._validated(data))
        self.views.invalidate(*CLIENT_VIEWS)
        logger.info(f"Cliente creado: {cliente['nombre']} (#{cliente['id']})")
        return cliente

    async def update_client(self, cliente_id: int, data: ClienteRequest) -> Dict[str, Any]:
        cliente = self.repository.update_client(cliente_id, self._validated(data))
        if cliente is None:
            raise NotFoundError(f"Cliente {cliente_id} no encontrado")
        self.views.invalidate(*CLIENT_VIEWS)
        return cliente

    async def delete_client(self, cliente_id: int) -> None:
        await self.get_client(cliente_id)
        self.repository.delete_client(cliente_id)
        self.views.invalidate(*CLIENT_VIEWS)
        logger.info(f"Cliente #{cliente_id} eliminado")
