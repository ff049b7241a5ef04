"""
Gestión del ciclo de vida de la aplicación FastAPI.

Este módulo maneja los eventos de startup y shutdown de la aplicación:
configuración de logging, inicialización de la base de datos de bundles
(incluida la creación de tablas) y cierre ordenado de conexiones.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from niche_bundler.core.config import get_settings
from niche_bundler.core.health import reset_uptime
from niche_bundler.core.logging_config import setup_logging
from niche_bundler.db.connection import get_db_connection
from niche_bundler.version import version_string

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestión del ciclo de vida de la aplicación.
    Maneja eventos de startup y shutdown de manera ordenada.

    Args:
        app: Instancia de FastAPI
    """
    settings = get_settings()

    # === STARTUP ===
    await startup_configure_logging()
    logger.info(f"🚀 Iniciando {settings.APP_NAME} {version_string()}...")

    try:
        await startup_verify_configuration()
        await startup_initialize_database()
        reset_uptime()
        startup_log_configuration()
        logger.info("🎉 Aplicación iniciada correctamente")
    except Exception as e:
        logger.error(f"❌ Error durante el startup: {e}")
        await shutdown_close_connections()
        raise

    # === YIELD (aplicación corriendo) ===
    yield

    # === SHUTDOWN ===
    logger.info(f"🛑 Cerrando {settings.APP_NAME}...")

    try:
        await shutdown_close_connections()
        logger.info("👋 Aplicación cerrada correctamente")
    except Exception as e:
        logger.error(f"❌ Error durante el shutdown: {e}")


# === FUNCIONES DE STARTUP ===


async def startup_configure_logging():
    """Configura el sistema de logging."""
    setup_logging()
    logger.info("✅ Sistema de logging configurado")


async def startup_verify_configuration():
    """Verifica la configuración y avisa de combinaciones inconsistentes."""
    settings = get_settings()

    if settings.VERIFY_WEBHOOKS and not settings.SHOPIFY_WEBHOOK_SECRET:
        logger.warning("⚠️ VERIFY_WEBHOOKS activo sin SHOPIFY_WEBHOOK_SECRET: todos los webhooks serán rechazados")

    if not settings.is_shopify_enabled:
        logger.info("ℹ️ Credenciales de Shopify no configuradas")

    if settings.is_production and settings.DEBUG:
        logger.warning("⚠️ DEBUG activo en producción")

    logger.info("✅ Configuración verificada")


async def startup_initialize_database():
    """Inicializa la conexión y crea las tablas que falten."""
    conn_db = get_db_connection()
    await conn_db.initialize(create_tables=True)

    health_info = await conn_db.health_check()
    logger.info(f"✅ Base de datos de bundles lista: {health_info['response_time_ms']}ms")


def startup_log_configuration():
    """Loggea la configuración activa."""
    settings = get_settings()
    logger.info("🔧 Configuración activa:")
    logger.info(f"   - Entorno: {settings.ENVIRONMENT}")
    logger.info(f"   - Debug: {settings.DEBUG}")
    logger.info(f"   - Base de datos: {'sqlite' if settings.is_sqlite else 'server'}")
    logger.info(f"   - Verificación de webhooks: {settings.VERIFY_WEBHOOKS}")
    logger.info(f"   - Moneda: {settings.CURRENCY_CODE}")


# === FUNCIONES DE SHUTDOWN ===


async def shutdown_close_connections():
    """Cierra la conexión a la base de datos de bundles."""
    conn_db = get_db_connection()
    if conn_db.engine is not None:
        await conn_db.close()
        logger.info("✅ Conexión a base de datos cerrada")
