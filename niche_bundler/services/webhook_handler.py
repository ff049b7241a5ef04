"""
Manejador de webhooks de Shopify.

Verifica la firma HMAC de los webhooks entrantes y procesa los topics
que afectan a los bundles: al desinstalar la app se eliminan todos los
bundles de la tienda. Los webhooks de productos e inventario solo se
confirman.
"""

import base64
import binascii
import hashlib
import hmac
import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Request

from niche_bundler.core.config import get_settings
from niche_bundler.core.logging_config import log_webhook_received
from niche_bundler.db.bundle_repository import BundleRepository
from niche_bundler.utils.error_handler import ValidationException, WebhookVerificationException

logger = logging.getLogger(__name__)

SHOP_DOMAIN_HEADER = "X-Shopify-Shop-Domain"
TOPIC_HEADER = "X-Shopify-Topic"
HMAC_HEADER = "X-Shopify-Hmac-Sha256"


@dataclass
class WebhookRequest:
    """Datos extraídos de una request de webhook ya validada."""

    topic: Optional[str]
    shop_domain: Optional[str]
    payload: Dict[str, Any]

    @property
    def resolved_shop_domain(self) -> Optional[str]:
        """Dominio del header o, si falta, el ``myshopify_domain`` del payload."""
        return self.shop_domain or self.payload.get("myshopify_domain")


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: Optional[str]) -> bool:
    """
    Verifica la firma HMAC del webhook.

    Args:
        payload: Payload del webhook en bytes
        signature: Firma HMAC del header (base64)
        secret: Secret compartido con Shopify

    Returns:
        bool: True si la firma es válida
    """
    if not secret or not signature:
        return False

    expected_signature = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).digest()

    try:
        received_signature = base64.b64decode(signature, validate=True)
    except (binascii.Error, ValueError):
        logger.warning("Webhook signature is not valid base64")
        return False

    # Comparación segura contra timing attacks
    return hmac.compare_digest(expected_signature, received_signature)


async def validate_webhook_request(request: Request) -> WebhookRequest:
    """
    Valida una request de webhook de Shopify.

    Si ``VERIFY_WEBHOOKS`` está activo la firma es obligatoria; si no, se
    verifica solo cuando llega firma y hay secret configurado.

    Raises:
        WebhookVerificationException: Si la firma falta o no coincide
        ValidationException: Si el cuerpo no es JSON válido
    """
    settings = get_settings()
    topic = request.headers.get(TOPIC_HEADER)
    signature = request.headers.get(HMAC_HEADER)
    shop_domain = request.headers.get(SHOP_DOMAIN_HEADER)

    payload_bytes = await request.body()

    must_verify = settings.VERIFY_WEBHOOKS or (signature and settings.SHOPIFY_WEBHOOK_SECRET)
    if must_verify and not verify_webhook_signature(payload_bytes, signature, settings.SHOPIFY_WEBHOOK_SECRET):
        raise WebhookVerificationException("Invalid webhook signature", topic=topic)

    payload: Dict[str, Any] = {}
    if payload_bytes:
        try:
            payload = json.loads(payload_bytes.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ValidationException(
                message=f"Invalid JSON payload: {str(e)}",
                field="body",
                expected_format="application/json",
            ) from e

        if not isinstance(payload, dict):
            raise ValidationException(
                message="Webhook payload must be a JSON object",
                field="body",
                invalid_value=type(payload).__name__,
                expected_format="JSON object",
            )

    log_webhook_received(topic or "unknown", shop_domain or "unknown")
    return WebhookRequest(topic=topic, shop_domain=shop_domain, payload=payload)


async def handle_app_uninstalled(webhook: WebhookRequest, repository: BundleRepository) -> int:
    """
    Elimina todos los bundles de la tienda que desinstaló la app.

    Returns:
        int: Número de bundles eliminados

    Raises:
        ValidationException: Si falta el header con el dominio de la tienda
    """
    shop_domain = webhook.resolved_shop_domain
    if not shop_domain:
        raise ValidationException(
            message=f"Missing {SHOP_DOMAIN_HEADER} header",
            field=SHOP_DOMAIN_HEADER,
        )

    deleted = await repository.delete_by_shop(shop_domain)
    logger.info(f"🗑️ App uninstalled from {shop_domain}: {deleted} bundles removed")
    return deleted
