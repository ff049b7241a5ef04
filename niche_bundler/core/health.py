"""
Sistema de health checks para monitoreo de servicios.

Verifica la base de datos de bundles y reporta el uptime de la aplicación.
"""

import asyncio
import logging
import time
from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable, Dict

from niche_bundler.db.connection import get_db_connection

logger = logging.getLogger(__name__)

# Variable global para tracking de uptime
_app_start_time = datetime.now(timezone.utc)


async def get_health_status() -> Dict[str, Any]:
    """
    Obtiene el estado de salud de todos los servicios.

    Returns:
        Dict: ``overall`` (bool), ``services`` y ``uptime``
    """
    checks = {"database": check_database_health}

    results = await asyncio.gather(
        *(run_health_check_with_timeout(name, check, timeout=2.0) for name, check in checks.items())
    )
    services = dict(zip(checks.keys(), results))

    return {
        "overall": all(result["status"] == "healthy" for result in services.values()),
        "services": services,
        "uptime": get_uptime_info(),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


async def run_health_check_with_timeout(
    service_name: str, check_func: Callable[[], Awaitable[bool]], timeout: float
) -> Dict[str, Any]:
    """
    Ejecuta una verificación de salud individual con timeout específico.

    Args:
        service_name: Nombre del servicio
        check_func: Función de verificación
        timeout: Timeout en segundos

    Returns:
        Dict: Resultado de la verificación
    """
    start_time = time.time()

    try:
        result = await asyncio.wait_for(check_func(), timeout=timeout)
        latency_ms = (time.time() - start_time) * 1000

        return {
            "status": "healthy" if result else "unhealthy",
            "latency_ms": round(latency_ms, 2),
        }

    except asyncio.TimeoutError:
        latency_ms = (time.time() - start_time) * 1000
        logger.warning(f"Health check timeout for {service_name} after {timeout}s")

        return {
            "status": "timeout",
            "error": f"Health check timeout after {timeout}s",
            "latency_ms": round(latency_ms, 2),
        }

    except Exception as e:
        latency_ms = (time.time() - start_time) * 1000
        logger.error(f"Health check failed for {service_name}: {e}")

        return {
            "status": "unhealthy",
            "error": str(e),
            "latency_ms": round(latency_ms, 2),
        }


async def check_database_health() -> bool:
    """
    Verifica la conectividad con la base de datos de bundles.

    Returns:
        bool: True si la base responde a ``SELECT 1``
    """
    return await get_db_connection().test_connection()


def get_uptime_info() -> Dict[str, Any]:
    """
    Obtiene información de uptime de la aplicación.

    Returns:
        Dict: Información de uptime
    """
    current_time = datetime.now(timezone.utc)
    uptime_delta = current_time - _app_start_time

    return {
        "start_time": _app_start_time.isoformat(),
        "uptime_seconds": int(uptime_delta.total_seconds()),
        "uptime_human": format_uptime(uptime_delta),
    }


def format_uptime(uptime_delta: timedelta) -> str:
    """
    Formatea el uptime en formato legible (``1d 2h 3m 4s``).
    """
    days = uptime_delta.days
    hours, remainder = divmod(uptime_delta.seconds, 3600)
    minutes, seconds = divmod(remainder, 60)

    parts = []
    if days:
        parts.append(f"{days}d")
    if hours:
        parts.append(f"{hours}h")
    if minutes:
        parts.append(f"{minutes}m")
    if seconds or not parts:
        parts.append(f"{seconds}s")

    return " ".join(parts)


def reset_uptime() -> None:
    """Reinicia el contador de uptime (al arrancar la aplicación)."""
    global _app_start_time
    _app_start_time = datetime.now(timezone.utc)
