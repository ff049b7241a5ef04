"""
Bundle Repository.

Persistence operations for bundles: create, list, lookup by id or public
handle, partial update, deactivation, deletion and per-shop cascade delete
(app uninstall).
"""

import functools
import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from niche_bundler.db.connection import ConnDB, get_db_connection
from niche_bundler.db.models import BundleRecord
from niche_bundler.domain.models.bundle import BundleDomain
from niche_bundler.utils.error_handler import (
    AppException,
    BundleNotFoundException,
    DatabaseException,
    DuplicateBundleException,
    ValidationException,
)

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("title", "handle", "products", "discount_type", "discount_value", "active")


def log_operation(operation_name: Optional[str] = None) -> Callable:
    """
    Decorator for logging repository operations and mapping driver errors.

    Args:
        operation_name: Optional custom name for the operation

    Returns:
        Decorated function with logging
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            op_name = operation_name or f"{self.__class__.__name__}.{func.__name__}"
            logger.debug(f"Starting operation: {op_name}")

            try:
                result = await func(self, *args, **kwargs)
                logger.debug(f"Operation successful: {op_name}")
                return result
            except AppException:
                raise
            except SQLAlchemyError as e:
                logger.error(f"Operation failed: {op_name} - {e}")
                raise DatabaseException(message=f"{op_name} failed: {str(e)}", operation="query") from e

        return wrapper

    return decorator


def _record_to_domain(record: BundleRecord) -> BundleDomain:
    return BundleDomain.from_dict(
        {
            "id": record.id,
            "title": record.title,
            "handle": record.handle,
            "products": record.products,
            "discount_type": record.discount_type,
            "discount_value": record.discount_value,
            "active": record.active,
            "shop_domain": record.shop_domain,
            "created_at": record.created_at,
            "updated_at": record.updated_at,
        }
    )


def _build_domain(data: Dict[str, Any]) -> BundleDomain:
    """Build and validate a domain bundle, mapping invariant violations to 422."""
    try:
        return BundleDomain.from_dict(data)
    except (KeyError, ValueError, ArithmeticError) as e:
        raise ValidationException(message=f"Invalid bundle: {e}", field="bundle") from e


class BundleRepository:
    """
    Repository for the ``bundles`` table.

    All methods open their own session and return ``BundleDomain`` objects.
    """

    def __init__(self, conn_db: Optional[ConnDB] = None):
        """
        Args:
            conn_db: Optional database connection. If not provided, uses global connection.
        """
        self.conn_db: ConnDB = conn_db or get_db_connection()

    @log_operation()
    async def create(self, data: Dict[str, Any]) -> BundleDomain:
        """
        Insert a new, active bundle.

        Raises:
            ValidationException: If the bundle breaks a domain invariant
            DuplicateBundleException: If the handle is taken in this shop
        """
        bundle = _build_domain({**data, "active": data.get("active", True)})
        now = datetime.now(timezone.utc)

        record = BundleRecord(
            title=bundle.title,
            handle=bundle.handle,
            products=[product.to_dict() for product in bundle.products],
            discount_type=bundle.discount.type.value,
            discount_value=bundle.discount.value,
            active=bundle.active,
            shop_domain=bundle.shop_domain,
            created_at=now,
            updated_at=now,
        )

        async with self.conn_db.get_session() as session:
            session.add(record)
            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateBundleException(handle=bundle.handle, shop_domain=bundle.shop_domain) from e
            await session.refresh(record)

        logger.info(f"Bundle created: id={record.id} handle={record.handle} shop={record.shop_domain}")
        return _record_to_domain(record)

    @log_operation()
    async def list_bundles(self, shop_domain: Optional[str] = None, active_only: bool = False) -> List[BundleDomain]:
        """Bundles, newest first, optionally filtered by shop and active flag."""
        query = select(BundleRecord).order_by(BundleRecord.created_at.desc(), BundleRecord.id.desc())
        if shop_domain:
            query = query.where(BundleRecord.shop_domain == shop_domain)
        if active_only:
            query = query.where(BundleRecord.active.is_(True))

        async with self.conn_db.get_session() as session:
            result = await session.execute(query)
            return [_record_to_domain(record) for record in result.scalars().all()]

    @log_operation()
    async def get_by_id(self, bundle_id: int) -> BundleDomain:
        """
        Raises:
            BundleNotFoundException: If no bundle has this id
        """
        async with self.conn_db.get_session() as session:
            record = await session.get(BundleRecord, bundle_id)
            if record is None:
                raise BundleNotFoundException(bundle_id=bundle_id)
            return _record_to_domain(record)

    @log_operation()
    async def get_active_by_handle(self, handle: str, shop_domain: Optional[str] = None) -> BundleDomain:
        """
        Public lookup used by the storefront widget. Inactive bundles do not match.

        Raises:
            BundleNotFoundException: If no active bundle has this handle
        """
        query = select(BundleRecord).where(BundleRecord.handle == handle, BundleRecord.active.is_(True))
        if shop_domain:
            query = query.where(BundleRecord.shop_domain == shop_domain)
        query = query.order_by(BundleRecord.id).limit(1)

        async with self.conn_db.get_session() as session:
            result = await session.execute(query)
            record = result.scalars().first()
            if record is None:
                raise BundleNotFoundException(handle=handle)
            return _record_to_domain(record)

    @log_operation()
    async def update(self, bundle_id: int, changes: Dict[str, Any]) -> BundleDomain:
        """
        Apply a partial update. Unknown keys are ignored, ``updated_at`` is refreshed.

        Raises:
            BundleNotFoundException: If no bundle has this id
            ValidationException: If the merged bundle breaks a domain invariant
            DuplicateBundleException: If the new handle is taken in this shop
        """
        changes = {key: value for key, value in changes.items() if key in UPDATABLE_FIELDS}

        async with self.conn_db.get_session() as session:
            record = await session.get(BundleRecord, bundle_id)
            if record is None:
                raise BundleNotFoundException(bundle_id=bundle_id)

            merged = _build_domain({**_record_to_domain(record).to_dict(), **changes})

            record.title = merged.title
            record.handle = merged.handle
            record.products = [product.to_dict() for product in merged.products]
            record.discount_type = merged.discount.type.value
            record.discount_value = Decimal(merged.discount.value)
            record.active = merged.active
            record.updated_at = datetime.now(timezone.utc)

            try:
                await session.commit()
            except IntegrityError as e:
                await session.rollback()
                raise DuplicateBundleException(handle=merged.handle, shop_domain=merged.shop_domain) from e
            await session.refresh(record)

        logger.info(f"Bundle updated: id={bundle_id} fields={sorted(changes)}")
        return _record_to_domain(record)

    async def deactivate(self, bundle_id: int) -> BundleDomain:
        """Hide a bundle from the storefront without deleting it."""
        return await self.update(bundle_id, {"active": False})

    @log_operation()
    async def delete(self, bundle_id: int) -> None:
        """
        Raises:
            BundleNotFoundException: If no bundle has this id
        """
        async with self.conn_db.get_session() as session:
            result = await session.execute(delete(BundleRecord).where(BundleRecord.id == bundle_id))
            await session.commit()
            if result.rowcount == 0:
                raise BundleNotFoundException(bundle_id=bundle_id)

        logger.info(f"Bundle deleted: id={bundle_id}")

    @log_operation()
    async def delete_by_shop(self, shop_domain: str) -> int:
        """Delete every bundle owned by a shop. Returns the number of rows removed."""
        async with self.conn_db.get_session() as session:
            result = await session.execute(delete(BundleRecord).where(BundleRecord.shop_domain == shop_domain))
            await session.commit()

        deleted = result.rowcount or 0
        logger.info(f"Deleted {deleted} bundles for shop {shop_domain}")
        return deleted
