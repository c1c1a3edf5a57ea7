import secrets
import uuid

from loguru import logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.core.config import get_settings
from monopoly_web.db.exceptions import InvalidInputError, InvalidStateError, RecordNotFoundError
from monopoly_web.db.models import Room, RoomPlayer, RoomStatus
from monopoly_web.db.repositories.base import BaseRepository
from monopoly_web.db.utils.session_management import commit_or_raise, flush_or_raise

# No 0/O or 1/I so codes survive being read aloud
ROOM_CODE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"
MAX_ROOM_CODE_LENGTH = 10
MAX_CODE_ATTEMPTS = 10


def generate_room_code(length: int) -> str:
    return "".join(secrets.choice(ROOM_CODE_ALPHABET) for _ in range(length))


def normalize_room_code(code: str) -> str:
    return (code or "").strip().upper()


class RoomRepository(BaseRepository[Room]):
    """Repository for lobbies and their rosters."""

    def __init__(self):
        super().__init__(Room)

    async def get_by_code(self, session: AsyncSession, code: str) -> Room | None:
        return await self.get_by_attribute(session, "code", normalize_room_code(code))

    async def _unused_code(self, session: AsyncSession) -> str:
        length = get_settings().ROOM_CODE_LENGTH
        for _ in range(MAX_CODE_ATTEMPTS):
            candidate = generate_room_code(length)
            if await self.get_by_code(session, candidate) is None:
                return candidate
        raise InvalidStateError("Could not find a free room code", {"length": length})

    async def create_room(
        self,
        session: AsyncSession,
        owner_id: uuid.UUID,
        code: str | None = None,
        max_players: int | None = None,
        token: str | None = None,
    ) -> Room:
        """
        Create a waiting room with its owner seated first.

        Args:
            session: Database session
            owner_id: PlayerSession that owns the room
            code: Explicit room code; a taken code raises DuplicateRecordError
            max_players: Seat limit (2-8), defaults to the configured value
            token: Owner's playing piece

        Returns:
            The new room
        """
        settings = get_settings()
        max_players = max_players if max_players is not None else settings.DEFAULT_MAX_PLAYERS
        if not 2 <= max_players <= 8:
            raise InvalidInputError("max_players must be between 2 and 8", {"max_players": max_players})

        if code is None:
            code = await self._unused_code(session)
        else:
            code = normalize_room_code(code)
            if not code or len(code) > MAX_ROOM_CODE_LENGTH or not code.isalnum():
                raise InvalidInputError("Room code must be 1-10 letters or digits", {"code": code})

        room = Room(code=code, owner_player_session_id=owner_id, max_players=max_players)
        room.players.append(
            RoomPlayer(player_session_id=owner_id, join_order=0, token=token, is_owner=True)
        )
        session.add(room)
        await commit_or_raise(session, table=self.table_name)
        logger.info(f"Room {room.code} created by {owner_id}")
        return room

    async def get_membership(
        self, session: AsyncSession, room_id: uuid.UUID, player_id: uuid.UUID
    ) -> RoomPlayer | None:
        return await session.get(RoomPlayer, (room_id, player_id), populate_existing=True)

    async def list_players(self, session: AsyncSession, room_id: uuid.UUID) -> list[RoomPlayer]:
        """Roster in join order."""
        stmt = (
            select(RoomPlayer)
            .where(RoomPlayer.room_id == room_id)
            .order_by(RoomPlayer.join_order)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def count_players(self, session: AsyncSession, room_id: uuid.UUID) -> int:
        stmt = select(func.count()).select_from(RoomPlayer).where(RoomPlayer.room_id == room_id)
        return (await session.execute(stmt)).scalar_one()

    async def join_room(
        self,
        session: AsyncSession,
        room_id: uuid.UUID,
        player_id: uuid.UUID,
        token: str | None = None,
    ) -> RoomPlayer:
        """
        Seat a player in a waiting room.

        Joining again is a reconnect: the existing seat is marked connected.

        Raises:
            RecordNotFoundError: unknown room
            InvalidStateError: room already started/finished, or full
        """
        room = await self.reload(session, room_id)
        if room is None:
            raise RecordNotFoundError("Room not found", {"room_id": str(room_id)})

        membership = await self.get_membership(session, room_id, player_id)
        if membership is not None:
            membership.is_connected = True
            await commit_or_raise(session, table="room_players")
            return membership

        if room.status != RoomStatus.WAITING:
            raise InvalidStateError(
                f"Room {room.code} is not accepting players",
                {"room_id": str(room_id), "status": room.status},
            )

        seated = await self.count_players(session, room_id)
        if seated >= room.max_players:
            raise InvalidStateError(
                f"Room {room.code} is full",
                {"room_id": str(room_id), "max_players": room.max_players},
            )

        stmt = select(func.coalesce(func.max(RoomPlayer.join_order), -1)).where(
            RoomPlayer.room_id == room_id
        )
        next_order = (await session.execute(stmt)).scalar_one() + 1

        membership = RoomPlayer(
            room_id=room_id,
            player_session_id=player_id,
            join_order=next_order,
            token=token,
            is_owner=False,
        )
        session.add(membership)
        await commit_or_raise(session, table="room_players")
        logger.info(f"Player {player_id} joined room {room.code} in seat {next_order}")
        return membership

    async def leave_room(self, session: AsyncSession, room_id: uuid.UUID, player_id: uuid.UUID) -> bool:
        """
        Remove a player from a room.

        In a waiting room the seat is freed and ownership passes to the next
        seat; the last player out deletes the room. Once a game has started
        the seat is kept (game state refers to it) and only marked
        disconnected.

        Returns:
            False if the player was not in the room
        """
        membership = await self.get_membership(session, room_id, player_id)
        if membership is None:
            return False
        room = await self.reload(session, room_id)
        if room is None:
            raise RecordNotFoundError("Room not found", {"room_id": str(room_id)})

        if room.status != RoomStatus.WAITING:
            membership.is_connected = False
            await commit_or_raise(session, table="room_players")
            return True

        was_owner = membership.is_owner
        await session.delete(membership)
        await flush_or_raise(session, table="room_players")

        remaining = await self.list_players(session, room_id)
        if not remaining:
            logger.info(f"Last player left room {room.code}; deleting it")
            await self.delete(session, room_id)
            return True

        if was_owner:
            successor = remaining[0]
            successor.is_owner = True
            room.owner_player_session_id = successor.player_session_id
            logger.info(f"Room {room.code} ownership passed to {successor.player_session_id}")

        await commit_or_raise(session, table=self.table_name)
        return True

    async def set_connected(
        self, session: AsyncSession, room_id: uuid.UUID, player_id: uuid.UUID, connected: bool
    ) -> RoomPlayer | None:
        membership = await self.get_membership(session, room_id, player_id)
        if membership is None:
            return None
        membership.is_connected = connected
        await commit_or_raise(session, table="room_players")
        return membership

    async def delete_room(self, session: AsyncSession, room_id: uuid.UUID) -> bool:
        """Delete a room together with its roster, chat and game."""
        deleted = await self.delete(session, room_id)
        if deleted:
            logger.info(f"Deleted room {room_id}")
        return deleted


room_repo = RoomRepository()
