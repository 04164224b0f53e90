# puntoventa/modules/historial/service.py
import logging
from datetime import date, datetime
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional, Tuple

from puntoventa.core.exceptions import NotFoundError, ValidationError
from puntoventa.shared.exports.csv_export import CSV_HEADERS, export_filename, format_fecha, format_total, sales_csv
from puntoventa.shared.exports.pdf_export import report_pdf
from puntoventa.shared.services.inventory_service import InventoryService
from puntoventa.shared.services.saga import Saga
from puntoventa.shared.services.view_cache import ViewCache, VIEWS_AFTER_SALE
from puntoventa.shared.store import RemoteStore
from puntoventa.modules.ventas.cart import to_decimal
from puntoventa.modules.ventas.state import METODOS_PAGO
from .periods import period_range
from .repository import HistorialRepository
from .schemas import AnulacionResponse

logger = logging.getLogger(__name__)


def compute_stats(ventas: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Totales del listado actual"""
    total = sum((to_decimal(v["total"]) for v in ventas), Decimal("0"))
    cantidad = len(ventas)
    promedio = (total / cantidad).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) if cantidad else Decimal("0")
    return {
        "total_ventas": total,
        "cantidad_ventas": cantidad,
        "promedio_venta": promedio,
        "ventas_efectivo": sum(1 for v in ventas if v["metodo_pago"] == "efectivo"),
        "ventas_tarjeta": sum(1 for v in ventas if v["metodo_pago"] == "tarjeta"),
    }


class HistorialService:
    """Historial de ventas: filtros, estadísticas, detalle, anulación y exportación"""

    def __init__(self, store: RemoteStore, views: ViewCache):
        self.store = store
        self.repository = HistorialRepository(store)
        self.views = views

    # ==================== CONSULTAS ====================

    async def get_history(
        self,
        periodo: str = "mes",
        fecha_inicio: Optional[date] = None,
        fecha_fin: Optional[date] = None,
        metodo_pago: Optional[str] = None,
        cliente_id: Optional[int] = None,
        now: Optional[datetime] = None
    ) -> Dict[str, Any]:
        inicio, fin = period_range(periodo, now, fecha_inicio, fecha_fin)
        if metodo_pago in (None, "", "todos"):
            metodo_pago = None
        elif metodo_pago not in METODOS_PAGO:
            raise ValidationError(f"Método de pago inválido: {metodo_pago}")

        key = ("ventas", inicio, fin, metodo_pago, cliente_id)
        ventas = self.views.get(key, lambda: self._fetch_sales(inicio, fin, metodo_pago, cliente_id))
        return {
            "periodo": periodo,
            "fecha_inicio": inicio,
            "fecha_fin": fin,
            "ventas": ventas,
            "stats": compute_stats(ventas),
        }

    def _fetch_sales(self, inicio, fin, metodo_pago, cliente_id) -> List[Dict[str, Any]]:
        ventas = self.repository.list_sales(inicio, fin, metodo_pago, cliente_id)
        clientes = self.repository.get_clients_by_ids([v["cliente_id"] for v in ventas if v.get("cliente_id")])
        return [dict(v, cliente=clientes.get(v.get("cliente_id"))) for v in ventas]

    async def get_sale_detail(self, venta_id: int) -> Dict[str, Any]:
        venta = self.repository.get_sale(venta_id)
        if not venta:
            raise NotFoundError(f"Venta {venta_id} no encontrada")

        cliente = None
        if venta.get("cliente_id"):
            cliente = self.repository.get_clients_by_ids([venta["cliente_id"]]).get(venta["cliente_id"])
        items = self.repository.get_sale_items(venta_id)
        productos = self.repository.get_products_by_ids([i["producto_id"] for i in items])

        return dict(
            venta,
            cliente=cliente,
            items=[
                dict(
                    item,
                    subtotal=to_decimal(item["precio_unitario"]) * item["cantidad"],
                    producto_nombre=(productos.get(item["producto_id"]) or {}).get("nombre"),
                    producto_sku=(productos.get(item["producto_id"]) or {}).get("sku"),
                )
                for item in items
            ]
        )

    # ==================== ANULACIÓN ====================

    async def annul_sale(self, venta_id: int, usuario_id: Optional[str] = None) -> AnulacionResponse:
        """
        Anular una venta: devolver el stock de cada item (con movimiento
        'devolucion'), borrar los items y borrar la venta.

        Los productos que ya no existen se omiten. Si un paso falla se
        revierten las devoluciones hechas; los borrados van al final.
        """
        venta = self.repository.get_sale(venta_id)
        if not venta:
            raise NotFoundError(f"Venta {venta_id} no encontrada")

        items = self.repository.get_sale_items(venta_id)
        ctx = self._annulment_saga(venta_id, items, usuario_id).run()

        devueltos = [i["producto_id"] for i in items if ctx.get(f"actualizar_stock:{i['id']}") is not None]
        omitidos = [i["producto_id"] for i in items if ctx.get(f"actualizar_stock:{i['id']}") is None]
        if omitidos:
            logger.warning(f"Venta #{venta_id}: productos inexistentes omitidos {omitidos}")

        self.views.invalidate(*VIEWS_AFTER_SALE)
        logger.info(f"✅ Venta #{venta_id} anulada ({len(items)} items)")
        return AnulacionResponse(
            success=True,
            message=f"Venta #{venta_id} anulada",
            venta_id=venta_id,
            items_count=len(items),
            productos_devueltos=devueltos,
            productos_omitidos=omitidos
        )

    def _annulment_saga(self, venta_id: int, items: List[Dict[str, Any]], usuario_id: Optional[str]) -> Saga:
        repo = self.repository
        saga = Saga("anulacion", self.store)

        for item in items:
            saga.step(
                f"actualizar_stock:{item['id']}",
                lambda ctx, item=item: self._return_stock(item),
                lambda ctx, result, item=item: self._restore_stock(item, result)
            )
            saga.step(
                f"registrar_movimiento:{item['id']}",
                lambda ctx, item=item: self._record_return(ctx, venta_id, item, usuario_id),
                lambda ctx, movimiento, item=item: self._undo_record(venta_id, item, movimiento, usuario_id)
            )
        saga.step("eliminar_items", lambda ctx: repo.delete_sale_items(venta_id))
        saga.step("eliminar_venta", lambda ctx: repo.delete_sale(venta_id))
        return saga

    def _return_stock(self, item: Dict[str, Any]) -> Optional[Tuple[int, int]]:
        try:
            return InventoryService.update_stock(self.store, item["producto_id"], item["cantidad"])
        except NotFoundError:
            return None

    def _restore_stock(self, item: Dict[str, Any], result: Optional[Tuple[int, int]]) -> None:
        if result is not None:
            InventoryService.restore_stock(self.store, item["producto_id"], result[0])

    def _record_return(self, ctx, venta_id: int, item: Dict[str, Any], usuario_id: Optional[str]) -> Optional[dict]:
        # producto omitido: sin stock devuelto no hay movimiento
        if ctx.get(f"actualizar_stock:{item['id']}") is None:
            return None
        return InventoryService.record_movement(
            self.store,
            item["producto_id"],
            "devolucion",
            item["cantidad"],
            f"Anulación de venta #{venta_id}",
            usuario_id
        )

    def _undo_record(self, venta_id: int, item: Dict[str, Any], movimiento, usuario_id: Optional[str]) -> None:
        if movimiento is None:
            return
        InventoryService.record_movement(
            self.store,
            item["producto_id"],
            "venta",
            -item["cantidad"],
            f"Reversión de anulación #{venta_id}",
            usuario_id
        )

    # ==================== EXPORTACIÓN ====================

    async def export_csv(self, **filters) -> Tuple[str, str]:
        """Returns: (nombre_archivo, contenido)"""
        history = await self.get_history(**filters)
        return export_filename("ventas", history["periodo"], "csv"), sales_csv(history["ventas"])

    async def export_pdf(self, **filters) -> Tuple[str, bytes]:
        history = await self.get_history(**filters)
        stats = history["stats"]
        rows = [
            [
                v["id"],
                format_fecha(v["created_at"]),
                (v.get("cliente") or {}).get("nombre") or "Cliente general",
                format_total(v["total"]),
                v["metodo_pago"],
            ]
            for v in history["ventas"]
        ]
        content = report_pdf(
            f"Historial de Ventas - {history['periodo']}",
            CSV_HEADERS,
            rows,
            stats=[
                ("Total ventas", f"${format_total(stats['total_ventas'])}"),
                ("Cantidad", stats["cantidad_ventas"]),
                ("Promedio", f"${format_total(stats['promedio_venta'])}"),
                ("Efectivo", stats["ventas_efectivo"]),
                ("Tarjeta", stats["ventas_tarjeta"]),
            ]
        )
        return export_filename("reporte", history["periodo"], "pdf"), content
