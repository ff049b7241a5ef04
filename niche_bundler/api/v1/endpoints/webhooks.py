"""
Endpoints para webhooks de Shopify.

``app/uninstalled`` elimina todos los bundles de la tienda. Los webhooks de
productos e inventario se confirman con 200 sin procesarse.
"""

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import Response

from niche_bundler.api.v1.endpoints.bundles import get_bundle_repository
from niche_bundler.db.bundle_repository import BundleRepository
from niche_bundler.services.webhook_handler import handle_app_uninstalled, validate_webhook_request

logger = logging.getLogger(__name__)

# Router montado bajo /api/webhooks
router = APIRouter()

# Router montado en la raíz (/webhooks/...)
acknowledge_router = APIRouter(prefix="/webhooks")


@router.post("/app/uninstalled", status_code=status.HTTP_200_OK)
async def app_uninstalled_webhook(
    request: Request,
    repository: BundleRepository = Depends(get_bundle_repository),
) -> dict:
    """
    Elimina los bundles de la tienda indicada en ``X-Shopify-Shop-Domain``.
    """
    webhook = await validate_webhook_request(request)
    deleted = await handle_app_uninstalled(webhook, repository)
    return {"received": True, "shop_domain": webhook.resolved_shop_domain, "deleted_bundles": deleted}


@acknowledge_router.post("/products/update", status_code=status.HTTP_200_OK)
async def products_update_webhook(request: Request) -> Response:
    await validate_webhook_request(request)
    return Response(status_code=status.HTTP_200_OK)


@acknowledge_router.post("/inventory_levels/update", status_code=status.HTTP_200_OK)
async def inventory_levels_update_webhook(request: Request) -> Response:
    await validate_webhook_request(request)
    return Response(status_code=status.HTTP_200_OK)
