"""
Configuración centralizada de routers para la aplicación FastAPI.

Este módulo se encarga de registrar todos los routers de la API,
configurar endpoints base y organizar las rutas de manera estructurada.
"""

import logging
from datetime import datetime, timezone

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from niche_bundler.api.v1.endpoints.bundles import router as bundles_router
from niche_bundler.api.v1.endpoints.pricing import router as pricing_router
from niche_bundler.api.v1.endpoints.storefront import router as storefront_router
from niche_bundler.api.v1.endpoints.webhooks import acknowledge_router as webhooks_ack_router
from niche_bundler.api.v1.endpoints.webhooks import router as webhooks_router
from niche_bundler.core.config import get_settings
from niche_bundler.core.health import get_health_status
from niche_bundler.version import version_info

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


def create_root_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints raíz de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    @app.get("/", tags=["Root"], summary="API Info")
    async def root():
        """
        Endpoint raíz que proporciona información básica de la API.
        """
        return {
            "message": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "status": "running",
            "documentation": "/docs" if (settings.DEBUG or settings.ENABLE_DOCS) else "disabled",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "endpoints": {
                "health": "/health",
                "bundles": f"{API_PREFIX}/bundles",
                "bundle_price": f"{API_PREFIX}/bundle-price",
                "bundle_data": "/bundle-data",
                "webhooks": f"{API_PREFIX}/webhooks",
            },
        }

    @app.get("/ping", tags=["Root"], summary="Simple Ping")
    async def ping():
        return {"message": "pong", "timestamp": datetime.now(timezone.utc).isoformat()}


def create_health_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints de health check.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    @app.get("/health", tags=["Health"], summary="Health Check")
    async def health_check():
        """
        Estado de la API y de la base de datos de bundles.

        Returns:
            200 si todo está sano, 503 si la base de datos no responde
        """
        health_status = await get_health_status()
        healthy = health_status["overall"]

        return JSONResponse(
            status_code=200 if healthy else 503,
            content={
                "status": "ok" if healthy else "unhealthy",
                "message": f"{settings.APP_NAME} is running",
                "version": settings.APP_VERSION,
                "environment": settings.ENVIRONMENT,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "uptime": health_status["uptime"],
                "services": health_status["services"],
            },
        )


def create_info_endpoints(app: FastAPI) -> None:
    """
    Crea endpoints informativos adicionales.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    @app.get("/version", tags=["Info"], summary="Version Info")
    async def version():
        return {
            **version_info(),
            "name": settings.APP_NAME,
            "environment": settings.ENVIRONMENT,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }


def configure_api_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la API.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando routers de API...")

    app.include_router(
        bundles_router,
        prefix=API_PREFIX,
        responses={
            404: {"description": "Bundle not found"},
            409: {"description": "Duplicate bundle handle"},
            422: {"description": "Invalid bundle payload"},
        },
    )
    logger.info("✅ Router de bundles configurado")

    app.include_router(pricing_router, prefix=API_PREFIX, responses={422: {"description": "Invalid price request"}})
    logger.info("✅ Router de precios configurado")

    app.include_router(storefront_router)
    logger.info("✅ Router de storefront configurado")

    app.include_router(
        webhooks_router,
        prefix=f"{API_PREFIX}/webhooks",
        tags=["Webhooks"],
        responses={401: {"description": "Invalid webhook signature"}},
    )
    app.include_router(webhooks_ack_router, tags=["Webhooks"])
    logger.info("✅ Router de webhooks configurado")


def configure_all_routers(app: FastAPI) -> None:
    """
    Configura todos los routers de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando todos los routers...")

    create_root_endpoints(app)
    create_health_endpoints(app)
    create_info_endpoints(app)
    configure_api_routers(app)

    logger.info("✅ Todos los routers configurados correctamente")
