"""
Módulo de acceso a la base de datos de bundles.

- ConnDB: Gestión exclusiva de conexiones
- BundleRepository: Operaciones de persistencia de bundles
"""

from niche_bundler.db.bundle_repository import BundleRepository
from niche_bundler.db.connection import (
    ConnDB,
    close_database,
    get_db_connection,
    initialize_database,
    set_db_connection,
)

__all__ = [
    "ConnDB",
    "get_db_connection",
    "set_db_connection",
    "initialize_database",
    "close_database",
    "BundleRepository",
]
