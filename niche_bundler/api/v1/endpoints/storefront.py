"""
Endpoint público de datos de bundles para el storefront.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from niche_bundler.api.v1.endpoints.bundles import get_bundle_repository
from niche_bundler.api.v1.schemas.bundle_schemas import BundleResponse
from niche_bundler.db.bundle_repository import BundleRepository

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Storefront"])


@router.get("/bundle-data", response_model=List[BundleResponse])
async def bundle_data(
    shop: Optional[str] = Query(None, description="Dominio de tienda"),
    repository: BundleRepository = Depends(get_bundle_repository),
) -> List[BundleResponse]:
    """Bundles activos (opcionalmente de una tienda) como lista plana."""
    bundles = await repository.list_bundles(shop_domain=shop, active_only=True)
    logger.debug(f"bundle-data: {len(bundles)} bundles activos (shop={shop})")
    return [BundleResponse.from_domain(bundle) for bundle in bundles]
