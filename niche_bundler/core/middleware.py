"""
Configuración de Middleware para la aplicación FastAPI.

Este módulo centraliza la configuración de middleware:
- CORS (el widget llama a la API desde el dominio de cada tienda)
- TrustedHost
- Request logging con request id y tiempo de proceso
"""

import logging
import time
import uuid

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware

from niche_bundler.core.config import get_settings

logger = logging.getLogger(__name__)


def configure_cors_middleware(app: FastAPI) -> None:
    """
    Configura middleware CORS para permitir requests cross-origin.

    Los endpoints públicos se consumen desde cualquier storefront, por eso
    se permiten todos los orígenes sin credenciales.

    Args:
        app: Instancia de FastAPI
    """
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=False,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=[
            "Accept",
            "Content-Type",
            "Authorization",
            "X-Request-ID",
        ],
        expose_headers=["X-Process-Time", "X-Request-ID"],
    )

    logger.info("✅ CORS configurado - Origins permitidos: *")


def configure_trusted_host_middleware(app: FastAPI) -> None:
    """
    Configura middleware TrustedHost para validar hosts permitidos.
    Solo se aplica en producción.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()
    if settings.is_production and settings.ALLOWED_HOSTS:
        allowed_hosts = settings.ALLOWED_HOSTS + ["localhost", "127.0.0.1"]

        app.add_middleware(TrustedHostMiddleware, allowed_hosts=allowed_hosts)

        logger.info(f"✅ TrustedHost configurado - Hosts permitidos: {allowed_hosts}")


def configure_request_logging_middleware(app: FastAPI) -> None:
    """
    Configura middleware para logging de todas las requests/responses.

    Args:
        app: Instancia de FastAPI
    """
    slow_threshold = get_settings().SLOW_REQUEST_THRESHOLD

    @app.middleware("http")
    async def log_requests_middleware(request: Request, call_next):
        """
        Middleware que loggea información de cada request/response.

        Returns:
            Response con headers X-Process-Time y X-Request-ID
        """
        request_id = request.headers.get("X-Request-ID") or generate_request_id()
        request.state.request_id = request_id

        start_time = time.time()
        client_ip = get_client_ip(request)

        logger.info(f"📨 [{request_id}] {request.method} {request.url.path} - Client: {client_ip}")

        if request.url.query:
            logger.debug(f"🔍 [{request_id}] Query params: {request.url.query}")

        try:
            response = await call_next(request)
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"❌ [{request_id}] {request.method} {request.url.path} - Error: {str(e)} - Time: {process_time:.3f}s"
            )
            raise

        process_time = time.time() - start_time

        status_emoji = get_status_emoji(response.status_code)
        logger.info(
            f"{status_emoji} [{request_id}] {request.method} {request.url.path} - "
            f"Status: {response.status_code} - "
            f"Time: {process_time:.3f}s"
        )

        response.headers["X-Process-Time"] = f"{process_time:.3f}"
        response.headers["X-Request-ID"] = request_id

        if process_time > slow_threshold:
            logger.warning(f"🐌 [{request_id}] Slow request detected: {process_time:.3f}s > {slow_threshold}s")

        return response


def configure_all_middleware(app: FastAPI) -> None:
    """
    Configura todos los middlewares de la aplicación.
    El orden importa: se ejecutan en orden inverso al que se agregan.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando middlewares...")

    # 1. Request logging
    configure_request_logging_middleware(app)

    # 2. TrustedHost (solo producción)
    configure_trusted_host_middleware(app)

    # 3. CORS (último en agregarse, primero en ejecutarse para OPTIONS)
    configure_cors_middleware(app)

    logger.info("✅ Todos los middlewares configurados correctamente")


# Funciones auxiliares


def generate_request_id() -> str:
    """
    Genera un ID único para cada request.

    Returns:
        str: ID único de 8 caracteres
    """
    return str(uuid.uuid4())[:8]


def get_client_ip(request: Request) -> str:
    """
    Obtiene la IP real del cliente considerando proxies.

    Args:
        request: Request de FastAPI

    Returns:
        str: IP del cliente
    """
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        # Tomar la primera IP en caso de múltiples proxies
        return forwarded_for.split(",")[0].strip()

    real_ip = request.headers.get("X-Real-IP")
    if real_ip:
        return real_ip

    if request.client:
        return request.client.host

    return "unknown"


def get_status_emoji(status_code: int) -> str:
    """
    Obtiene emoji apropiado según el código de estado HTTP.
    """
    if 200 <= status_code < 300:
        return "✅"
    elif 300 <= status_code < 400:
        return "↩️"
    elif 400 <= status_code < 500:
        return "⚠️"
    elif 500 <= status_code < 600:
        return "❌"
    else:
        return "📤"
