# puntoventa/core/dependencies.py
from fastapi import Depends, Request

from puntoventa.core.auth.dependencies import get_current_user
from puntoventa.core.auth.schemas import CurrentSession
from puntoventa.shared.services.cloudinary_service import CloudinaryStorage
from puntoventa.shared.services.page_state import PageStateStore
from puntoventa.shared.services.view_cache import ViewCache
from puntoventa.shared.store import RemoteStore


def get_store(
    request: Request,
    current_user: CurrentSession = Depends(get_current_user)
) -> RemoteStore:
    """Store remoto actuando con la sesión del usuario"""
    return request.app.state.store.with_token(current_user.access_token)


def get_view_cache(request: Request) -> ViewCache:
    return request.app.state.views


def get_page_states(request: Request) -> PageStateStore:
    return request.app.state.pages


def get_image_storage(request: Request) -> CloudinaryStorage:
    return request.app.state.images
