"""
Manejadores de excepciones centralizados para la aplicación FastAPI.

Este módulo define los manejadores de excepciones personalizados y globales,
proporcionando respuestas consistentes y logging apropiado para los errores
de bundles, webhooks, validación y base de datos.
"""

import logging
import traceback
from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from niche_bundler.core.config import get_settings
from niche_bundler.utils.error_handler import (
    AppException,
    DatabaseException,
    ValidationException,
    WebhookVerificationException,
    log_error,
)

logger = logging.getLogger(__name__)


def _envelope(request: Request, error_type: str, message: Any, **fields) -> Dict[str, Any]:
    return {
        "error": True,
        "error_type": error_type,
        "message": message,
        **fields,
        "path": str(request.url.path),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "request_id": getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID"),
    }


async def app_exception_handler(request: Request, exc: AppException) -> JSONResponse:
    """
    Manejador para excepciones personalizadas de la aplicación.

    Args:
        request: Request de FastAPI
        exc: Excepción personalizada de la app

    Returns:
        JSONResponse: Respuesta JSON con error formateado
    """
    settings = get_settings()
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        f"App Exception: {exc.message} - Code: {exc.error_code.value} - URL: {request.url} - Details: {exc.details}",
    )

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(
            request,
            "application_error",
            exc.message,
            error_code=exc.error_code.value,
            details=exc.details if settings.DEBUG else None,
        ),
    )


async def validation_exception_handler(request: Request, exc: ValidationException) -> JSONResponse:
    """
    Manejador para errores de validación de datos.

    Args:
        request: Request de FastAPI
        exc: Excepción de validación

    Returns:
        JSONResponse: Respuesta JSON con detalles de validación
    """
    settings = get_settings()
    logger.warning(f"Validation Exception: {exc.message} - Field: {exc.field} - URL: {request.url}")

    return JSONResponse(
        status_code=422,
        content=_envelope(
            request,
            "validation_error",
            exc.message,
            error_code=exc.error_code.value,
            field=exc.field,
            expected_format=exc.expected_format,
            details=exc.details if settings.DEBUG else None,
        ),
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Manejador para payloads rechazados por los modelos Pydantic de la API.
    """
    logger.warning(f"Request validation failed: {len(exc.errors())} errors - URL: {request.url}")

    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
            "type": error.get("type"),
        }
        for error in exc.errors()
    ]

    return JSONResponse(
        status_code=422,
        content=_envelope(
            request,
            "validation_error",
            "Request validation failed",
            error_code="VALIDATION_ERROR",
            details={"errors": errors},
        ),
    )


async def webhook_verification_exception_handler(
    request: Request, exc: WebhookVerificationException
) -> JSONResponse:
    """
    Manejador para webhooks con firma inválida.
    """
    logger.warning(f"🔒 Webhook rejected: {exc.message} - Topic: {exc.topic} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, "webhook_error", exc.message, error_code=exc.error_code.value),
    )


async def database_exception_handler(request: Request, exc: DatabaseException) -> JSONResponse:
    """
    Manejador para errores de la base de datos de bundles.
    """
    settings = get_settings()
    log_error(exc, context={"path": str(request.url.path), "operation": exc.operation})

    message = exc.message if settings.DEBUG else "Database temporarily unavailable"
    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(
            request,
            "database_error",
            message,
            error_code=exc.error_code.value,
            retry_suggested=exc.is_retryable,
        ),
        headers={"Retry-After": "5"},
    )


async def starlette_http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Manejador para HTTPException de Starlette/FastAPI.

    Args:
        request: Request de FastAPI
        exc: StarletteHTTPException

    Returns:
        JSONResponse: Respuesta JSON estandarizada
    """
    logger.warning(f"HTTP Exception: {exc.status_code} - {exc.detail} - URL: {request.url}")

    return JSONResponse(
        status_code=exc.status_code,
        content=_envelope(request, "http_error", exc.detail, status_code=exc.status_code),
        headers=getattr(exc, "headers", None),
    )


async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Manejador global para excepciones no capturadas.

    Args:
        request: Request de FastAPI
        exc: Excepción no manejada

    Returns:
        JSONResponse: Respuesta JSON de error interno
    """
    settings = get_settings()
    log_error(exc, context={"path": str(request.url.path), "method": request.method})

    # Respuesta genérica (sin exponer detalles internos)
    error_message = "Internal server error occurred"
    if settings.DEBUG:
        error_message = f"{type(exc).__name__}: {str(exc)}"

    return JSONResponse(
        status_code=500,
        content=_envelope(
            request,
            "internal_server_error",
            error_message,
            error_code="UNKNOWN_ERROR",
            traceback=traceback.format_exc() if settings.DEBUG else None,
        ),
    )


def configure_exception_handlers(app: FastAPI) -> None:
    """
    Configura todos los manejadores de excepciones de la aplicación.

    Args:
        app: Instancia de FastAPI
    """
    logger.info("🔧 Configurando manejadores de excepciones...")

    # Manejadores específicos (orden de especificidad)
    app.add_exception_handler(ValidationException, validation_exception_handler)
    app.add_exception_handler(WebhookVerificationException, webhook_verification_exception_handler)
    app.add_exception_handler(DatabaseException, database_exception_handler)
    app.add_exception_handler(AppException, app_exception_handler)

    # Manejadores HTTP estándar
    app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, starlette_http_exception_handler)

    # Manejador global (debe ser el último)
    app.add_exception_handler(Exception, global_exception_handler)

    logger.info("✅ Manejadores de excepciones configurados correctamente")
