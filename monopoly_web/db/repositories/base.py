from typing import Any, Generic, Type, TypeVar

from loguru import logger
from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.db.base import Base
from monopoly_web.db.exceptions import (
    ConcurrencyConflictError,
    RecordNotFoundError,
)
from monopoly_web.db.utils.session_management import commit_or_raise, translate_integrity_error

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Base class for data access layer.

    Composite primary keys are passed as tuples in primary-key column order,
    e.g. ``(game_id, player_session_id)`` for GamePlayer.
    """

    def __init__(self, model: Type[ModelType]):
        self.model = model
        self.table_name = model.__tablename__
        self._pk_attributes = [
            getattr(model, column.key) for column in model.__mapper__.primary_key
        ]

    @property
    def is_versioned(self) -> bool:
        return self.model.__mapper__.version_id_col is not None

    def _pk_clause(self, pk: Any):
        values = pk if isinstance(pk, tuple) else (pk,)
        if len(values) != len(self._pk_attributes):
            raise ValueError(
                f"{self.model.__name__} key needs {len(self._pk_attributes)} values, got {len(values)}"
            )
        return and_(*(attr == value for attr, value in zip(self._pk_attributes, values)))

    async def get(self, session: AsyncSession, pk: Any) -> ModelType | None:
        """Get a single record by primary key."""
        return await session.get(self.model, pk)

    async def get_or_raise(self, session: AsyncSession, pk: Any) -> ModelType:
        """Get a single record by primary key or raise RecordNotFoundError."""
        instance = await session.get(self.model, pk)
        if instance is None:
            raise RecordNotFoundError(
                f"{self.model.__name__} not found",
                {"table": self.table_name, "key": str(pk)},
            )
        return instance

    async def reload(self, session: AsyncSession, pk: Any) -> ModelType | None:
        """Get a record, overwriting any stale copy held in the session."""
        return await session.get(self.model, pk, populate_existing=True)

    async def get_by_attribute(self, session: AsyncSession, attribute: str | None = None, value: Any = None, expression: Any | None = None) -> ModelType | None:
        """Get a single record by an attribute or a complex expression."""
        if expression is not None:
            stmt = select(self.model).where(expression)
        elif attribute is not None:
            stmt = select(self.model).where(getattr(self.model, attribute) == value)
        else:
            raise ValueError("Either attribute/value or expression must be provided")
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_by(self, session: AsyncSession, *criteria: Any, order_by: Any = None) -> list[ModelType]:
        """List records matching all criteria."""
        stmt = select(self.model).where(*criteria)
        if order_by is not None:
            stmt = stmt.order_by(order_by)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def create(self, session: AsyncSession, data: dict) -> ModelType:
        """Create a new record."""
        instance = self.model(**data)
        session.add(instance)
        await commit_or_raise(session, table=self.table_name)
        return instance

    async def save(self, session: AsyncSession, instance: ModelType) -> ModelType:
        """
        Flush changes made to a loaded instance.

        Versioned models are checked by the unit of work: a row changed by
        someone else since it was loaded raises ConcurrencyConflictError.
        """
        session.add(instance)
        await commit_or_raise(session, table=self.table_name)
        return instance

    async def update(self, session: AsyncSession, pk: Any, data: dict) -> ModelType | None:
        """Update a record by primary key (unversioned models only)."""
        if self.is_versioned:
            raise TypeError(f"{self.model.__name__} is version-stamped; use update_versioned()")
        stmt = (
            update(self.model)
            .where(self._pk_clause(pk))
            .values(**data)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(stmt)
        except IntegrityError as e:
            await session.rollback()
            raise translate_integrity_error(e, table=self.table_name) from e
        await commit_or_raise(session, table=self.table_name)
        if result.rowcount == 0:
            return None
        return await self.reload(session, pk)

    async def update_versioned(
        self, session: AsyncSession, pk: Any, expected_version: int, data: dict
    ) -> ModelType:
        """
        Update a version-stamped record only if it still carries expected_version.

        Returns:
            The refreshed record with its new version

        Raises:
            RecordNotFoundError: if no row has this key
            ConcurrencyConflictError: if the row's version moved on
        """
        if "version" in data:
            raise ValueError("version is managed by update_versioned()")
        version_attr = getattr(self.model, "version")
        stmt = (
            update(self.model)
            .where(self._pk_clause(pk), version_attr == expected_version)
            .values(**data, version=version_attr + 1)
            .execution_options(synchronize_session=False)
        )
        try:
            result = await session.execute(stmt)
        except IntegrityError as e:
            await session.rollback()
            raise translate_integrity_error(e, table=self.table_name) from e

        if result.rowcount == 0:
            await session.rollback()
            current = await self.reload(session, pk)
            if current is None:
                raise RecordNotFoundError(
                    f"{self.model.__name__} not found",
                    {"table": self.table_name, "key": str(pk)},
                )
            logger.warning(
                f"Stale write on {self.table_name} {pk}: expected v{expected_version}, found v{current.version}"
            )
            raise ConcurrencyConflictError(
                f"{self.model.__name__} was modified concurrently",
                {"table": self.table_name, "key": str(pk)},
                expected_version=expected_version,
                actual_version=current.version,
            )

        await commit_or_raise(session, table=self.table_name)
        return await self.reload(session, pk)

    async def delete(self, session: AsyncSession, pk: Any) -> bool:
        """Delete a record by primary key. Referenced rows raise RestrictedDeleteError."""
        stmt = delete(self.model).where(self._pk_clause(pk))
        try:
            result = await session.execute(stmt)
        except IntegrityError as e:
            await session.rollback()
            raise translate_integrity_error(e, table=self.table_name, deleting=True) from e
        await commit_or_raise(session, table=self.table_name, deleting=True)
        return result.rowcount > 0
