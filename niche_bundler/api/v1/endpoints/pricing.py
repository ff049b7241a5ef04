"""
Endpoint de cálculo de precio de bundles.

Es la única fuente de verdad del precio mostrado en el storefront: el
widget nunca calcula precios por su cuenta.
"""

import logging

from fastapi import APIRouter

from niche_bundler.api.v1.schemas.bundle_schemas import PriceRequest, PriceResponse
from niche_bundler.core.config import get_settings
from niche_bundler.core.logging_config import log_pricing_calculation
from niche_bundler.services.pricing_engine import calculate_price

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Pricing"])


@router.post("/bundle-price", response_model=PriceResponse)
async def bundle_price(payload: PriceRequest) -> PriceResponse:
    """
    Calcula precio original, descuento y precio final.

    Los precios y cantidades inválidos se normalizan (precio 0, cantidad 1)
    en lugar de rechazar la request. Un ``products`` ausente o que no sea
    lista se rechaza con 422.
    """
    settings = get_settings()
    result = calculate_price(
        payload.products,
        payload.discount_type,
        payload.discount_value,
        currency=settings.CURRENCY_CODE,
    )

    log_pricing_calculation(len(payload.products), payload.discount_type, result.to_dict())
    return PriceResponse.from_result(result, payload.products)
