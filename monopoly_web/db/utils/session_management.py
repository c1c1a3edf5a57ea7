"""
Utilities for committing database work and translating driver errors.
"""
from typing import Any, Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from monopoly_web.db.exceptions import (
    CheckViolationError,
    ConcurrencyConflictError,
    DuplicateRecordError,
    ForeignKeyViolationError,
    IntegrityViolationError,
    RestrictedDeleteError,
)

# PostgreSQL SQLSTATE codes
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"


def _sqlstate(error: IntegrityError) -> Optional[str]:
    orig = error.orig
    for candidate in (orig, getattr(orig, "__cause__", None)):
        if candidate is None:
            continue
        code = getattr(candidate, "sqlstate", None) or getattr(candidate, "pgcode", None)
        if code:
            return str(code)
    return None


def translate_integrity_error(
    error: IntegrityError,
    table: Optional[str] = None,
    deleting: bool = False,
) -> IntegrityViolationError:
    """
    Map a driver IntegrityError onto the persistence exception hierarchy.

    Args:
        error: The SQLAlchemy IntegrityError
        table: Table the statement targeted, for the error details
        deleting: True when the failing statement was a DELETE, so a
            foreign-key failure means the row is still referenced

    Returns:
        The translated exception (not raised)
    """
    detail = str(error.orig) if error.orig is not None else str(error)
    details: dict[str, Any] = {"detail": detail}
    if table:
        details["table"] = table

    code = _sqlstate(error)
    lowered = detail.lower()

    if code == UNIQUE_VIOLATION or "unique constraint" in lowered or "duplicate key" in lowered:
        return DuplicateRecordError(f"Duplicate {table or 'record'}", details)
    if code == FOREIGN_KEY_VIOLATION or "foreign key constraint" in lowered:
        if deleting:
            return RestrictedDeleteError(f"{table or 'Record'} is still referenced", details)
        return ForeignKeyViolationError(f"Invalid reference on {table or 'record'}", details)
    if code == CHECK_VIOLATION or "check constraint" in lowered:
        return CheckViolationError(f"Value out of range on {table or 'record'}", details)
    return IntegrityViolationError(f"Integrity violation on {table or 'record'}", details)


async def commit_or_raise(
    session: AsyncSession,
    table: Optional[str] = None,
    deleting: bool = False,
) -> None:
    """
    Commit the session, translating constraint and version failures.

    The session is rolled back before any translated error is raised.
    """
    try:
        await session.commit()
    except IntegrityError as e:
        await session.rollback()
        translated = translate_integrity_error(e, table=table, deleting=deleting)
        logger.warning(f"Commit rejected: {translated}")
        raise translated from e
    except StaleDataError as e:
        await session.rollback()
        logger.warning(f"Stale write detected on {table or 'record'}: {e}")
        raise ConcurrencyConflictError(
            f"{table or 'Record'} was modified concurrently",
            {"table": table, "detail": str(e)} if table else {"detail": str(e)},
        ) from e
    except Exception:
        await session.rollback()
        raise


async def flush_or_raise(session: AsyncSession, table: Optional[str] = None) -> None:
    """Flush pending changes with the same translation as commit_or_raise."""
    try:
        await session.flush()
    except IntegrityError as e:
        await session.rollback()
        raise translate_integrity_error(e, table=table) from e
    except StaleDataError as e:
        await session.rollback()
        raise ConcurrencyConflictError(
            f"{table or 'Record'} was modified concurrently",
            {"detail": str(e)},
        ) from e
