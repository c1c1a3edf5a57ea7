import json
import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.db.exceptions import InvalidInputError
from monopoly_web.db.models import GameEventLog
from monopoly_web.db.repositories.base import BaseRepository
from monopoly_web.db.utils.session_management import commit_or_raise

MAX_EVENT_TYPE_LENGTH = 64


def _json_default(value: Any) -> Any:
    # UUIDs and datetimes show up in most payloads
    if isinstance(value, uuid.UUID):
        return str(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


class GameEventRepository(BaseRepository[GameEventLog]):
    """Repository for the append-only game event stream."""

    def __init__(self):
        super().__init__(GameEventLog)

    def stage_event(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        event_type: str,
        payload: Any = None,
    ) -> GameEventLog:
        """Add an event to the session without committing."""
        if not event_type or len(event_type) > MAX_EVENT_TYPE_LENGTH:
            raise InvalidInputError(
                f"Event type must be 1-{MAX_EVENT_TYPE_LENGTH} characters",
                {"event_type": event_type},
            )
        event = GameEventLog(
            game_id=game_id,
            event_type=event_type,
            payload_json=json.dumps(payload, default=_json_default) if payload is not None else None,
        )
        session.add(event)
        return event

    async def log_event(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        event_type: str,
        payload: Any = None,
    ) -> GameEventLog:
        """
        Append an event to a game's stream.

        Args:
            session: Database session
            game_id: Game the event belongs to
            event_type: Short code, e.g. "PLAYER_MOVED"
            payload: JSON-serializable details

        Returns:
            The stored event
        """
        event = self.stage_event(session, game_id, event_type, payload)
        await commit_or_raise(session, table=self.table_name)
        return event

    async def list_events(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        after_id: int = 0,
        limit: int | None = None,
    ) -> list[GameEventLog]:
        """
        Get events newer than after_id in the order they were logged.

        Clients pass the last id they saw to catch up after a reconnect.
        """
        query = (
            select(GameEventLog)
            .where(GameEventLog.game_id == game_id, GameEventLog.id > after_id)
            .order_by(GameEventLog.id)
        )
        if limit is not None:
            query = query.limit(limit)
        result = await session.execute(query)
        return list(result.scalars().all())


game_event_repo = GameEventRepository()
