# puntoventa/modules/dashboard/router.py
from fastapi import APIRouter, Depends, Response

from puntoventa.core.dependencies import get_store, get_view_cache
from puntoventa.shared.schemas.common import BaseResponse
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore
from .service import DashboardService
from .schemas import DashboardResponse, MetaRequest

router = APIRouter()


def get_dashboard_service(
    store: RemoteStore = Depends(get_store),
    views: ViewCache = Depends(get_view_cache)
) -> DashboardService:
    return DashboardService(store, views)


@router.get("/", response_model=DashboardResponse)
async def get_dashboard(service: DashboardService = Depends(get_dashboard_service)):
    """
    Resumen del negocio

    - Ventas de hoy y del mes
    - Productos con stock bajo (stock_actual <= stock_minimo)
    - Total de clientes
    - Meta del mes y su progreso, si existe
    """
    return await service.get_dashboard()


@router.put("/meta", response_model=BaseResponse)
async def set_goal(
    request: MetaRequest,
    service: DashboardService = Depends(get_dashboard_service)
):
    meta = await service.set_goal(request.monto_objetivo, request.mes)
    return BaseResponse(success=True, message=f"Meta guardada: {meta['monto_objetivo']}")


@router.get("/export/pdf")
async def export_pdf(service: DashboardService = Depends(get_dashboard_service)):
    filename, content = await service.export_pdf()
    return Response(
        content,
        media_type="application/pdf",
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
