from typing import Iterable, Optional, Tuple
import logging

from puntoventa.core.exceptions import NotFoundError, ValidationError
from puntoventa.shared.store import RemoteStore, eq, in_

logger = logging.getLogger(__name__)

TIPOS_MOVIMIENTO = frozenset(["venta", "ajuste", "devolucion", "compra_proveedor"])


class InventoryService:
    """Operaciones de stock de productos con su movimiento de inventario"""

    @staticmethod
    def validate_availability(
        store: RemoteStore,
        items: Iterable[Tuple[int, str, int]]
    ) -> None:
        """
        Verificar stock actual antes de registrar una venta.

        Args:
            store: Store remoto
            items: (producto_id, nombre, cantidad) por línea

        Raises:
            ValidationError: Si alguna línea supera el stock disponible
        """
        items = list(items)
        rows = store.select(
            "productos",
            filters=[in_("id", [pid for pid, _, _ in items])],
            columns=["id", "stock_actual"]
        )
        stock = {row["id"]: row["stock_actual"] for row in rows}

        unavailable = []
        for producto_id, nombre, cantidad in items:
            disponible = stock.get(producto_id, 0)
            if disponible < cantidad:
                unavailable.append(
                    f"Stock insuficiente para {nombre}. Stock disponible: {disponible}"
                )

        if unavailable:
            raise ValidationError(
                "\n".join(unavailable),
                details={"productos": [pid for pid, _, q in items if stock.get(pid, 0) < q]}
            )

    @staticmethod
    def record_movement(
        store: RemoteStore,
        producto_id: int,
        tipo_movimiento: str,
        cantidad: int,
        justificacion: str,
        usuario_id: Optional[str] = None
    ) -> dict:
        """Registrar un movimiento de inventario (solo inserción)"""
        if tipo_movimiento not in TIPOS_MOVIMIENTO:
            raise ValidationError(f"Tipo de movimiento inválido: {tipo_movimiento}")
        row = {
            "producto_id": producto_id,
            "tipo_movimiento": tipo_movimiento,
            "cantidad": cantidad,
            "justificacion": justificacion,
        }
        if usuario_id:
            row["usuario_id"] = usuario_id
        return store.insert("movimientos_inventario", row)

    @staticmethod
    def update_stock(store: RemoteStore, producto_id: int, delta: int) -> Tuple[int, int]:
        """
        Leer el stock actual y escribir stock + delta.

        El movimiento de inventario se registra aparte, como paso propio de la
        saga, para que cada escritura tenga su compensación. Sin control de
        concurrencia: la última escritura gana.

        Returns:
            (stock_antes, stock_despues)

        Raises:
            NotFoundError: Si el producto ya no existe
        """
        producto = store.select_one("productos", [eq("id", producto_id)], columns=["id", "stock_actual"])
        if not producto:
            raise NotFoundError(f"Producto {producto_id} no encontrado")

        stock_before = producto["stock_actual"]
        stock_after = stock_before + delta
        store.update("productos", [eq("id", producto_id)], {"stock_actual": stock_after})
        logger.debug(f"Stock producto {producto_id}: {stock_before} -> {stock_after}")
        return stock_before, stock_after

    @staticmethod
    def restore_stock(store: RemoteStore, producto_id: int, stock: int) -> None:
        """Volver a escribir un stock leído antes (compensación de update_stock)"""
        store.update("productos", [eq("id", producto_id)], {"stock_actual": stock})
        logger.debug(f"Stock producto {producto_id} restaurado a {stock}")
