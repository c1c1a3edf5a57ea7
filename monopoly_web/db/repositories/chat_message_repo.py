import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.db.exceptions import InvalidInputError
from monopoly_web.db.models import ChatMessage, PlayerSession
from monopoly_web.db.repositories.base import BaseRepository

MAX_MESSAGE_LENGTH = 500


class ChatMessageRepository(BaseRepository[ChatMessage]):
    """Repository for room chat. Messages are append-only."""

    def __init__(self):
        super().__init__(ChatMessage)

    async def post_message(
        self,
        session: AsyncSession,
        room_id: uuid.UUID,
        player: PlayerSession,
        message: str,
    ) -> ChatMessage:
        """
        Append a chat line to a room.

        Args:
            session: Database session
            room_id: Room the message is posted to
            player: Sender; the display name is copied onto the message
            message: Text, 1-500 characters after trimming

        Returns:
            The stored message
        """
        text = (message or "").strip()
        if not text or len(text) > MAX_MESSAGE_LENGTH:
            raise InvalidInputError(
                f"Message must be 1-{MAX_MESSAGE_LENGTH} characters",
                {"length": len(text)},
            )
        return await self.create(
            session,
            {
                "room_id": room_id,
                "player_session_id": player.id,
                "player_name": player.display_name,
                "message": text,
            },
        )

    async def list_messages(
        self,
        session: AsyncSession,
        room_id: uuid.UUID,
        limit: int = 50,
    ) -> list[ChatMessage]:
        """
        Get the most recent messages of a room, oldest first.
        """
        query = (
            select(ChatMessage)
            .where(ChatMessage.room_id == room_id)
            .order_by(ChatMessage.sent_at.desc(), ChatMessage.id.desc())
            .limit(limit)
        )
        result = await session.execute(query)
        return list(reversed(result.scalars().all()))


chat_message_repo = ChatMessageRepository()
