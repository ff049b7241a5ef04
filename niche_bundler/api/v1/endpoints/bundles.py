"""
Endpoints de administración de bundles.

CRUD de bundles por tienda más la búsqueda pública por handle que usa el
widget del storefront. Los errores (404, 409, 422) se propagan como
excepciones de la aplicación y los formatea el manejador global.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from niche_bundler.api.v1.schemas.bundle_schemas import (
    BundleCreate,
    BundleEnvelope,
    BundleListEnvelope,
    BundleResponse,
    BundleUpdate,
)
from niche_bundler.db.bundle_repository import BundleRepository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bundles", tags=["Bundles"])


def get_bundle_repository() -> BundleRepository:
    """Dependencia: repositorio sobre la conexión global."""
    return BundleRepository()


@router.post("", response_model=BundleEnvelope, status_code=status.HTTP_201_CREATED)
async def create_bundle(
    payload: BundleCreate,
    repository: BundleRepository = Depends(get_bundle_repository),
) -> BundleEnvelope:
    """
    Crea un bundle activo.

    Returns:
        ``{"bundle": Bundle}``
    """
    data = payload.model_dump()
    data["discount_type"] = payload.discount_type.value

    bundle = await repository.create(data)
    logger.info(f"📦 Bundle '{bundle.handle}' creado para {bundle.shop_domain}")
    return BundleEnvelope(bundle=BundleResponse.from_domain(bundle))


@router.get("", response_model=BundleListEnvelope)
async def list_bundles(
    shop: Optional[str] = Query(None, description="Filtrar por dominio de tienda"),
    repository: BundleRepository = Depends(get_bundle_repository),
) -> BundleListEnvelope:
    """Lista bundles, más recientes primero."""
    bundles = await repository.list_bundles(shop_domain=shop)
    return BundleListEnvelope(bundles=[BundleResponse.from_domain(bundle) for bundle in bundles])


@router.get("/handle/{handle}", response_model=BundleEnvelope)
async def get_bundle_by_handle(
    handle: str,
    shop: Optional[str] = Query(None, description="Dominio de tienda"),
    repository: BundleRepository = Depends(get_bundle_repository),
) -> BundleEnvelope:
    """
    Búsqueda pública usada por el widget. Solo coinciden bundles activos.
    """
    bundle = await repository.get_active_by_handle(handle, shop_domain=shop)
    return BundleEnvelope(bundle=BundleResponse.from_domain(bundle))


@router.get("/{bundle_id}", response_model=BundleEnvelope)
async def get_bundle(
    bundle_id: int,
    repository: BundleRepository = Depends(get_bundle_repository),
) -> BundleEnvelope:
    bundle = await repository.get_by_id(bundle_id)
    return BundleEnvelope(bundle=BundleResponse.from_domain(bundle))


@router.put("/{bundle_id}", response_model=BundleEnvelope)
async def update_bundle(
    bundle_id: int,
    payload: BundleUpdate,
    repository: BundleRepository = Depends(get_bundle_repository),
) -> BundleEnvelope:
    """Actualización parcial: solo se modifican los campos enviados."""
    bundle = await repository.update(bundle_id, payload.changes())
    return BundleEnvelope(bundle=BundleResponse.from_domain(bundle))


@router.delete("/{bundle_id}")
async def delete_bundle(
    bundle_id: int,
    repository: BundleRepository = Depends(get_bundle_repository),
) -> dict:
    await repository.delete(bundle_id)
    logger.info(f"🗑️ Bundle {bundle_id} eliminado")
    return {"success": True}


@router.post("/{bundle_id}/deactivate", response_model=BundleEnvelope)
async def deactivate_bundle(
    bundle_id: int,
    repository: BundleRepository = Depends(get_bundle_repository),
) -> BundleEnvelope:
    """Oculta el bundle del storefront sin borrarlo."""
    bundle = await repository.deactivate(bundle_id)
    return BundleEnvelope(bundle=BundleResponse.from_domain(bundle))
