import secrets
import uuid

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.db.base import utcnow
from monopoly_web.db.exceptions import InvalidInputError
from monopoly_web.db.models import PlayerSession
from monopoly_web.db.repositories.base import BaseRepository

MAX_DISPLAY_NAME_LENGTH = 32


def generate_session_token() -> str:
    """Random URL-safe token that fits player_sessions.session_token."""
    return secrets.token_urlsafe(32)


class PlayerSessionRepository(BaseRepository[PlayerSession]):
    def __init__(self):
        super().__init__(PlayerSession)

    async def create_session(self, session: AsyncSession, display_name: str) -> PlayerSession:
        """Create a player identity with a fresh secret token."""
        name = (display_name or "").strip()
        if not name or len(name) > MAX_DISPLAY_NAME_LENGTH:
            raise InvalidInputError(
                f"Display name must be 1-{MAX_DISPLAY_NAME_LENGTH} characters",
                {"display_name": display_name},
            )
        player = await self.create(
            session,
            {"display_name": name, "session_token": generate_session_token()},
        )
        logger.info(f"Created player session {player.id} ({player.display_name})")
        return player

    async def get_by_token(self, session: AsyncSession, token: str) -> PlayerSession | None:
        return await self.get_by_attribute(session, "session_token", token)

    async def touch(self, session: AsyncSession, player_id: uuid.UUID) -> PlayerSession | None:
        """Record that the player was seen just now."""
        return await self.update(session, player_id, {"last_seen_at": utcnow()})

    async def delete_session(self, session: AsyncSession, player_id: uuid.UUID) -> bool:
        """
        Delete a player identity.

        Room memberships go with it and chat lines keep their copied name.
        Raises RestrictedDeleteError while the player owns a room or has
        game state.
        """
        deleted = await self.delete(session, player_id)
        if deleted:
            logger.info(f"Deleted player session {player_id}")
        return deleted


player_session_repo = PlayerSessionRepository()
