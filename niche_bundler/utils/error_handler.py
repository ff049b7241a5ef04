"""
Sistema de manejo de errores personalizado.

Este módulo define todas las excepciones personalizadas de la aplicación
y proporciona utilidades para manejo consistente de errores.
"""

import logging
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class ErrorCode(Enum):
    """
    Códigos de error estandardizados para la aplicación.
    """

    # Errores generales
    UNKNOWN_ERROR = "UNKNOWN_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"

    # Errores de persistencia
    DATABASE_CONNECTION_FAILED = "DATABASE_CONNECTION_FAILED"
    DATABASE_QUERY_FAILED = "DATABASE_QUERY_FAILED"

    # Errores de bundles
    BUNDLE_NOT_FOUND = "BUNDLE_NOT_FOUND"
    DUPLICATE_BUNDLE_HANDLE = "DUPLICATE_BUNDLE_HANDLE"

    # Errores de webhooks
    INVALID_WEBHOOK_SIGNATURE = "INVALID_WEBHOOK_SIGNATURE"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Errores del widget de storefront
    STOREFRONT_TRANSPORT_ERROR = "STOREFRONT_TRANSPORT_ERROR"


class ErrorSeverity(Enum):
    """
    Niveles de severidad para errores.
    """

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class AppException(Exception):
    """
    Excepción base para todas las excepciones personalizadas de la aplicación.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.UNKNOWN_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        is_retryable: bool = False,
        is_critical: bool = False,
    ):
        """
        Inicializa la excepción.

        Args:
            message: Mensaje de error
            error_code: Código de error estandardizado
            details: Información adicional del error
            status_code: Código HTTP asociado
            severity: Severidad del error
            is_retryable: Si la operación puede reintentarse
            is_critical: Si requiere alerta inmediata
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        self.severity = severity
        self.is_retryable = is_retryable
        self.is_critical = is_critical
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convierte la excepción a diccionario.

        Returns:
            Dict: Representación de la excepción
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code.value,
            "details": self.details,
            "status_code": self.status_code,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
            "is_critical": self.is_critical,
            "timestamp": self.timestamp.isoformat(),
        }

    def __str__(self) -> str:
        """String representation del error."""
        return f"{self.error_code.value}: {self.message}"


class ValidationException(AppException):
    """
    Excepción para errores de validación de datos.
    """

    def __init__(
        self,
        message: str,
        field: str,
        invalid_value: Any = None,
        expected_format: Optional[str] = None,
        **kwargs,
    ):
        """
        Inicializa la excepción de validación.

        Args:
            message: Mensaje de error
            field: Campo que falló la validación
            invalid_value: Valor que causó el error
            expected_format: Formato esperado
            **kwargs: Argumentos adicionales para AppException
        """
        super().__init__(
            message=message,
            error_code=ErrorCode.VALIDATION_ERROR,
            status_code=422,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.field = field
        self.invalid_value = invalid_value
        self.expected_format = expected_format

        self.details.update(
            {
                "field": field,
                "invalid_value": str(invalid_value) if invalid_value is not None else None,
                "expected_format": expected_format,
            }
        )


class BundleNotFoundException(AppException):
    """
    Excepción cuando un bundle no existe (o no está activo para lookups públicos).
    """

    def __init__(
        self,
        message: str = "Bundle not found",
        bundle_id: Optional[int] = None,
        handle: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.BUNDLE_NOT_FOUND,
            status_code=404,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.bundle_id = bundle_id
        self.handle = handle

        self.details.update({"bundle_id": bundle_id, "handle": handle})


class DuplicateBundleException(AppException):
    """
    Excepción cuando el handle ya existe dentro de la misma tienda.
    """

    def __init__(self, handle: str, shop_domain: str, **kwargs):
        super().__init__(
            message=f"Bundle handle '{handle}' already exists for shop {shop_domain}",
            error_code=ErrorCode.DUPLICATE_BUNDLE_HANDLE,
            status_code=409,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.handle = handle
        self.shop_domain = shop_domain

        self.details.update({"handle": handle, "shop_domain": shop_domain})


class DatabaseException(AppException):
    """
    Excepción para errores de conexión o consulta en la base de datos de bundles.
    """

    def __init__(
        self,
        message: str,
        operation: str = "query",
        **kwargs,
    ):
        """
        Inicializa la excepción de base de datos.

        Args:
            message: Mensaje de error
            operation: Operación que falló (initialization, query, close...)
            **kwargs: Argumentos adicionales para AppException
        """
        error_code = (
            ErrorCode.DATABASE_CONNECTION_FAILED
            if operation in ("initialization", "session_creation", "close")
            else ErrorCode.DATABASE_QUERY_FAILED
        )
        super().__init__(
            message=message,
            error_code=error_code,
            status_code=503,
            severity=ErrorSeverity.HIGH,
            is_retryable=True,
            is_critical=error_code == ErrorCode.DATABASE_CONNECTION_FAILED,
            **kwargs,
        )
        self.operation = operation

        self.details.update({"operation": operation})


class WebhookVerificationException(AppException):
    """
    Excepción para webhooks con firma HMAC inválida o headers faltantes.
    """

    def __init__(self, message: str, topic: Optional[str] = None, **kwargs):
        super().__init__(
            message=message,
            error_code=ErrorCode.INVALID_WEBHOOK_SIGNATURE,
            status_code=401,
            severity=ErrorSeverity.MEDIUM,
            **kwargs,
        )
        self.topic = topic

        self.details.update({"topic": topic})


class WidgetConfigurationException(AppException):
    """
    Excepción para un widget de storefront sin los atributos requeridos.
    """

    def __init__(self, missing_attributes: list, **kwargs):
        super().__init__(
            message=f"Widget element is missing required attributes: {missing_attributes}",
            error_code=ErrorCode.CONFIGURATION_ERROR,
            status_code=400,
            severity=ErrorSeverity.LOW,
            **kwargs,
        )
        self.missing_attributes = missing_attributes

        self.details.update({"missing_attributes": missing_attributes})


class StorefrontTransportException(AppException):
    """
    Excepción para fallos de red, de parseo o respuestas no exitosas
    en las llamadas del widget (fetch de bundle, precio, carrito).
    """

    def __init__(
        self,
        message: str,
        url: Optional[str] = None,
        response_code: Optional[int] = None,
        **kwargs,
    ):
        super().__init__(
            message=message,
            error_code=ErrorCode.STOREFRONT_TRANSPORT_ERROR,
            status_code=502,
            severity=ErrorSeverity.MEDIUM,
            is_retryable=True,
            **kwargs,
        )
        self.url = url
        self.response_code = response_code

        self.details.update({"url": url, "response_code": response_code})


# === FUNCIONES DE UTILIDAD ===


def log_error(
    exception: Exception,
    context: Optional[Dict[str, Any]] = None,
    level: int = logging.ERROR,
) -> None:
    """
    Loggea un error de manera consistente.

    Args:
        exception: Excepción a loggear
        context: Contexto adicional
        level: Nivel de logging
    """
    context = context or {}

    log_data = {
        "exception_type": type(exception).__name__,
        "exception_message": str(exception),
        "traceback": traceback.format_exc(),
        **context,
    }

    if isinstance(exception, AppException):
        message = f"{exception.error_code.value}: {exception.message}"
        log_data.update(
            {
                "error_code": exception.error_code.value,
                "severity": exception.severity.value,
                "is_retryable": exception.is_retryable,
                "is_critical": exception.is_critical,
            }
        )
    else:
        message = f"Unhandled exception: {type(exception).__name__}: {str(exception)}"

    logger.log(level, message, extra=log_data)
