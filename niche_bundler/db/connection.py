# niche_bundler/db/connection.py
"""
Clase ConnDB para gestión exclusiva de conexiones a la base de datos de bundles.

Esta clase maneja únicamente la conexión, configuración del pool,
creación de tablas y ciclo de vida de las conexiones.
"""

import logging
import time
from typing import Optional

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from niche_bundler.core.config import get_settings
from niche_bundler.db.models import Base
from niche_bundler.utils.error_handler import DatabaseException

logger = logging.getLogger(__name__)


class ConnDB:
    """
    Gestión de conexiones a la base de datos de bundles.

    Una instancia global se obtiene con ``get_db_connection()``; los tests
    pueden crear instancias propias con otra URL de base de datos.
    """

    def __init__(self, database_url: Optional[str] = None, echo: Optional[bool] = None):
        """
        Inicializa la clase ConnDB.

        Args:
            database_url: URL SQLAlchemy async (por defecto settings.DATABASE_URL)
            echo: Log de queries SQL (por defecto settings.DATABASE_ECHO)
        """
        settings = get_settings()
        self.connection_string = database_url or settings.DATABASE_URL
        self.echo = settings.DATABASE_ECHO if echo is None else echo
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._connection_tested = False
        logger.info("ConnDB instance created")

    def _engine_options(self) -> dict:
        """Opciones del engine según el backend configurado."""
        if self.connection_string.startswith("sqlite"):
            options = {"connect_args": {"check_same_thread": False}}
            # Una base en memoria solo existe dentro de una conexión
            if ":memory:" in self.connection_string:
                options["poolclass"] = StaticPool
            return options

        settings = get_settings()
        return {
            "pool_size": settings.DATABASE_POOL_SIZE,
            "max_overflow": 20,
            "pool_pre_ping": True,
            "pool_recycle": 3600,
            "pool_timeout": 30,
        }

    async def initialize(self, create_tables: bool = True):
        """
        Inicializa el engine de base de datos y el pool de conexiones.

        Args:
            create_tables: Si crear las tablas que falten

        Raises:
            DatabaseException: Si falla la inicialización
        """
        try:
            if self.engine is not None:
                logger.info("Database connection already initialized")
                return

            logger.info("Initializing database connection...")

            self.engine = create_async_engine(
                self.connection_string,
                echo=self.echo,
                future=True,
                **self._engine_options(),
            )

            self.session_factory = async_sessionmaker(
                self.engine, class_=AsyncSession, expire_on_commit=False, autoflush=True
            )

            if create_tables:
                async with self.engine.begin() as conn:
                    await conn.run_sync(Base.metadata.create_all)

            await self._test_connection()

            logger.info("Database connection initialized successfully")

        except Exception as e:
            logger.error(f"Failed to initialize database connection: {e}")
            await self._cleanup_failed_initialization()
            raise DatabaseException(
                message=f"Failed to initialize database connection: {str(e)}",
                operation="initialization",
            ) from e

    async def _test_connection(self):
        """
        Prueba la conexión a la base de datos.

        Raises:
            DatabaseException: Si la prueba de conexión falla
        """
        async with self.get_session() as session:
            result = await session.execute(text("SELECT 1"))
            if result.scalar() != 1:
                raise DatabaseException(
                    message="Connection test returned unexpected value",
                    operation="initialization",
                )

        self._connection_tested = True

    async def _cleanup_failed_initialization(self):
        """Limpia recursos en caso de fallo de inicialización."""
        try:
            if self.engine:
                await self.engine.dispose()
        except Exception as e:
            logger.error(f"Error during cleanup of failed initialization: {e}")
        finally:
            self.engine = None
            self.session_factory = None
            self._connection_tested = False

    def get_session(self) -> AsyncSession:
        """
        Obtiene una nueva sesión de base de datos.

        Returns:
            AsyncSession: Sesión asíncrona de SQLAlchemy

        Raises:
            DatabaseException: Si no hay conexión inicializada
        """
        if self.engine is None or self.session_factory is None:
            raise DatabaseException(
                message="Database connection not initialized. Call initialize() first.",
                operation="session_creation",
            )

        return self.session_factory()

    def is_initialized(self) -> bool:
        """
        Verifica si la conexión está inicializada.

        Returns:
            bool: True si está inicializada y probada
        """
        return self.engine is not None and self.session_factory is not None and self._connection_tested

    async def test_connection(self) -> bool:
        """
        Prueba la conexión a la base de datos de forma no destructiva.

        Returns:
            bool: True si la conexión funciona correctamente
        """
        try:
            if not self.is_initialized():
                return False

            async with self.get_session() as session:
                result = await session.execute(text("SELECT 1"))
                return result.scalar() == 1

        except Exception as e:
            logger.error(f"Connection test failed: {e}")
            return False

    async def close(self):
        """
        Cierra la conexión y limpia todos los recursos.
        """
        try:
            logger.info("Closing database connection...")

            if self.engine:
                await self.engine.dispose()
                logger.info("Database engine disposed")

            self.engine = None
            self.session_factory = None
            self._connection_tested = False

            logger.info("Database connection closed successfully")

        except Exception as e:
            logger.error(f"Error closing database connection: {e}")
            raise DatabaseException(
                message=f"Error closing database connection: {str(e)}",
                operation="close",
            ) from e

    async def health_check(self) -> dict:
        """
        Realiza un health check completo de la conexión.

        Returns:
            dict: Estado de salud de la conexión
        """
        health_info = {
            "connection_initialized": self.is_initialized(),
            "test_passed": False,
            "response_time_ms": None,
        }

        start_time = time.time()
        health_info["test_passed"] = await self.test_connection()
        health_info["response_time_ms"] = round((time.time() - start_time) * 1000, 2)

        return health_info

    def __repr__(self) -> str:
        """Representación detallada de la conexión."""
        return (
            f"ConnDB(initialized={self.is_initialized()}, "
            f"engine={self.engine is not None}, "
            f"session_factory={self.session_factory is not None})"
        )


# Instancia global
_conn_db_instance: Optional[ConnDB] = None


def get_db_connection() -> ConnDB:
    """
    Obtiene la instancia global de ConnDB.

    Returns:
        ConnDB: Instancia de conexión a base de datos
    """
    global _conn_db_instance

    if _conn_db_instance is None:
        _conn_db_instance = ConnDB()

    return _conn_db_instance


def set_db_connection(conn_db: Optional[ConnDB]) -> None:
    """Reemplaza la instancia global (útil para testing)."""
    global _conn_db_instance
    _conn_db_instance = conn_db


async def initialize_database():
    """
    Función de conveniencia para inicializar la base de datos.
    """
    await get_db_connection().initialize()


async def close_database():
    """
    Función de conveniencia para cerrar la base de datos.
    """
    await get_db_connection().close()
