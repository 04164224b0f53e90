# puntoventa/modules/historial/router.py
from datetime import date
from typing import Optional
from fastapi import APIRouter, Depends, Query, Response

from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.core.dependencies import get_store, get_view_cache
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import HistorialService
from .schemas import HistorialResponse, VentaDetalleResponse, AnulacionResponse

router = APIRouter()


def get_historial_service(
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache)
) -> HistorialService:
    return HistorialService(store, views)


class HistorialFilters:
    """Parámetros de filtro compartidos por la lista y las exportaciones"""

    def __init__(
        self,
        periodo: str = Query("mes", description="hoy, semana, mes, año o personalizado"),
        fecha_inicio: Optional[date] = Query(None, description="Inicio (personalizado)"),
        fecha_fin: Optional[date] = Query(None, description="Fin inclusive (personalizado)"),
        metodo_pago: Optional[str] = Query("todos", description="todos, efectivo o tarjeta"),
        cliente_id: Optional[int] = Query(None, description="Filtrar por cliente")
    ):
        self.values = {
            "periodo": periodo,
            "fecha_inicio": fecha_inicio,
            "fecha_fin": fecha_fin,
            "metodo_pago": metodo_pago,
            "cliente_id": cliente_id,
        }


@router.get("/", response_model=HistorialResponse)
async def get_history(
    filters: HistorialFilters = Depends(),
    service: HistorialService = Depends(get_historial_service)
):
    """
    Ventas del periodo con estadísticas

    **Estadísticas:** total, cantidad, promedio, ventas en efectivo y con tarjeta
    """
    return await service.get_history(**filters.values)


@router.get("/export/csv")
async def export_csv(
    filters: HistorialFilters = Depends(),
    service: HistorialService = Depends(get_historial_service)
):
    filename, content = await service.export_csv(**filters.values)
    return Response(
        content,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/export/pdf")
async def export_pdf(
    filters: HistorialFilters = Depends(),
    service: HistorialService = Depends(get_historial_service)
):
    filename, content = await service.export_pdf(**filters.values)
    return Response(
        content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )


@router.get("/{venta_id}", response_model=VentaDetalleResponse)
async def get_sale_detail(
    venta_id: int,
    service: HistorialService = Depends(get_historial_service)
):
    """Venta con cliente e items (producto, cantidad, precio)"""
    return await service.get_sale_detail(venta_id)


@router.post("/{venta_id}/anular", response_model=AnulacionResponse)
async def annul_sale(
    venta_id: int,
    current_user: CurrentSession = Depends(get_current_user),
    service: HistorialService = Depends(get_historial_service)
):
    """
    Anular una venta

    - Devuelve el stock de cada producto con movimiento 'devolucion'
    - Elimina los items y la venta
    """
    return await service.annul_sale(venta_id, usuario_id=current_user.user_id)
