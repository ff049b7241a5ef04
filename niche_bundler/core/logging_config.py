"""
Configuración del sistema de logging.

Este módulo configura el logging de la aplicación con:
- Consola con colores en modo debug
- Archivo rotativo y archivo separado de errores (si LOG_FILE_PATH está definido)
- Logging estructurado en JSON para producción
- Helpers para registros estructurados de precios y webhooks
"""

import json
import logging
import logging.config
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

from niche_bundler.core.config import get_settings

# Atributos estándar de LogRecord que no se copian como "extra"
_RESERVED_RECORD_ATTRS = {
    "name",
    "msg",
    "args",
    "levelname",
    "levelno",
    "pathname",
    "filename",
    "module",
    "exc_info",
    "exc_text",
    "stack_info",
    "lineno",
    "funcName",
    "created",
    "msecs",
    "relativeCreated",
    "thread",
    "threadName",
    "processName",
    "process",
    "message",
    "taskName",
}


class ColoredFormatter(logging.Formatter):
    """
    Formatter personalizado que agrega colores a los logs en consola.
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Verde
        "WARNING": "\033[33m",  # Amarillo
        "ERROR": "\033[31m",  # Rojo
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
    }

    def format(self, record):
        formatted = super().format(record)

        # Color solo si es TTY
        if hasattr(sys.stderr, "isatty") and sys.stderr.isatty():
            color = self.COLORS.get(record.levelname, self.COLORS["RESET"])
            reset = self.COLORS["RESET"]
            formatted = formatted.replace(record.levelname, f"{color}{record.levelname}{reset}")

        return formatted


class StructuredFormatter(logging.Formatter):
    """
    Formatter para logging estructurado en JSON.
    Útil para sistemas de monitoreo como ELK Stack.
    """

    def format(self, record):
        settings = get_settings()
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "app_name": settings.APP_NAME,
            "app_version": settings.APP_VERSION,
            "environment": settings.ENVIRONMENT,
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__,
                "message": str(record.exc_info[1]),
                "traceback": self.formatException(record.exc_info),
            }

        extra_fields = {
            key: value for key, value in record.__dict__.items() if key not in _RESERVED_RECORD_ATTRS
        }
        if extra_fields:
            log_entry["extra"] = extra_fields

        return json.dumps(log_entry, ensure_ascii=False, default=str)


def setup_logging() -> None:
    """
    Configura el sistema de logging completo de la aplicación.
    """
    settings = get_settings()

    if settings.LOG_FILE_PATH:
        Path(settings.LOG_FILE_PATH).parent.mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_configuration())
    configure_specific_loggers()

    logger = logging.getLogger(__name__)
    logger.info(f"Sistema de logging configurado - Nivel: {settings.LOG_LEVEL}")
    if settings.LOG_FILE_PATH:
        logger.info(f"Logs guardándose en: {settings.LOG_FILE_PATH}")


def get_logging_configuration() -> Dict[str, Any]:
    """
    Genera configuración completa de logging.

    Returns:
        Dict: Configuración para logging.config.dictConfig
    """
    settings = get_settings()

    config: Dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": settings.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "detailed": {
                "format": ("%(asctime)s - %(name)s - %(levelname)s - %(module)s.%(funcName)s:%(lineno)d - %(message)s"),
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "colored": {
                "()": ColoredFormatter,
                "format": settings.LOG_FORMAT,
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {"()": StructuredFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.LOG_LEVEL,
                "formatter": "colored" if settings.DEBUG else "standard",
                "stream": "ext://sys.stdout",
            }
        },
        "loggers": {
            "uvicorn.access": {"level": "INFO", "handlers": ["console"], "propagate": False},
            "uvicorn.error": {"level": "INFO", "handlers": ["console"], "propagate": False},
        },
        "root": {"level": settings.LOG_LEVEL, "handlers": ["console"]},
    }

    if settings.LOG_FILE_PATH:
        rotation = {
            "maxBytes": settings.LOG_MAX_SIZE_MB * 1024 * 1024,
            "backupCount": settings.LOG_BACKUP_COUNT,
            "encoding": "utf-8",
        }
        config["handlers"]["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": settings.LOG_LEVEL,
            "formatter": "detailed",
            "filename": settings.LOG_FILE_PATH,
            **rotation,
        }
        config["handlers"]["error_file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "ERROR",
            "formatter": "detailed",
            "filename": settings.LOG_FILE_PATH.replace(".log", "_errors.log"),
            **rotation,
        }
        config["root"]["handlers"].extend(["file", "error_file"])

        if settings.is_production:
            config["handlers"]["json_file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "INFO",
                "formatter": "json",
                "filename": settings.LOG_FILE_PATH.replace(".log", ".json"),
                **rotation,
            }
            config["root"]["handlers"].append("json_file")

    return config


def configure_specific_loggers() -> None:
    """
    Configura loggers específicos para diferentes módulos.
    """
    settings = get_settings()

    logging.getLogger("niche_bundler.services").setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)
    logging.getLogger("niche_bundler.db").setLevel(logging.INFO)

    # Reducir verbosidad de librerías externas
    for logger_name in ("httpx", "httpcore", "aiosqlite"):
        logging.getLogger(logger_name).setLevel(logging.WARNING)

    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.DATABASE_ECHO else logging.WARNING)


def log_pricing_calculation(items_count: int, discount_type: Any, result: Dict[str, str], **kwargs) -> None:
    """
    Logger específico para cálculos de precio de bundles.

    Args:
        items_count: Número de líneas del bundle
        discount_type: Tipo de descuento recibido
        result: Montos calculados (strings con dos decimales)
        **kwargs: Datos adicionales
    """
    logger = logging.getLogger("niche_bundler.pricing")

    extra_data = {
        "items_count": items_count,
        "discount_type": str(discount_type),
        **result,
        **kwargs,
    }

    logger.info(
        f"Bundle priced: {items_count} items, {discount_type} -> final {result.get('final_price')}",
        extra=extra_data,
    )


def log_webhook_received(webhook_type: str, shop: str, **kwargs) -> None:
    """
    Logger específico para webhooks recibidos.

    Args:
        webhook_type: Tipo de webhook
        shop: Shop de Shopify
        **kwargs: Datos adicionales
    """
    logger = logging.getLogger("niche_bundler.webhooks")

    extra_data = {
        "webhook_type": webhook_type,
        "shop": shop,
        "webhook_timestamp": datetime.now(timezone.utc).isoformat(),
        **kwargs,
    }

    logger.info(f"Webhook received: {webhook_type} from {shop}", extra=extra_data)
