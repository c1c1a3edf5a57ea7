import random
import uuid
from typing import Any

from loguru import logger
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from monopoly_web.core.config import get_settings
from monopoly_web.db.base import utcnow
from monopoly_web.db.exceptions import InvalidInputError, InvalidStateError, RecordNotFoundError
from monopoly_web.db.models import (
    DiceRoll,
    Game,
    GamePlayer,
    GameSpaceState,
    GameStatus,
    Room,
    RoomPlayer,
    RoomStatus,
)
from monopoly_web.db.repositories.base import BaseRepository
from monopoly_web.db.repositories.board import board_repo
from monopoly_web.db.repositories.deck import deck_repo
from monopoly_web.db.repositories.game_event_repo import game_event_repo
from monopoly_web.db.utils.session_management import commit_or_raise, flush_or_raise

# Columns a caller may change through update_player / update_space
PLAYER_FIELDS = {
    "cash",
    "position",
    "in_jail",
    "jail_turns",
    "consecutive_doubles",
    "auto_roll_strikes",
    "is_bankrupt",
    "bankrupt_at",
    "token",
}
SPACE_FIELDS = {"owner_player_session_id", "houses", "has_hotel", "is_mortgaged"}


def _check_fields(changes: dict, allowed: set, what: str) -> None:
    unknown = set(changes) - allowed
    if unknown:
        raise InvalidInputError(f"Cannot update {what} fields: {sorted(unknown)}", {"fields": sorted(unknown)})
    if not changes:
        raise InvalidInputError(f"No {what} fields to update")


class GameRepository(BaseRepository[Game]):
    """
    Repository for games and their per-game state.

    Game, GamePlayer and GameSpaceState writes go through update_versioned:
    callers pass the version they read and get ConcurrencyConflictError if
    another writer got there first.
    """

    def __init__(self):
        super().__init__(Game)
        self.players = BaseRepository(GamePlayer)
        self.spaces = BaseRepository(GameSpaceState)
        self.dice = BaseRepository(DiceRoll)

    async def start_game(self, session: AsyncSession, room_id: uuid.UUID, seed: int | None = None) -> Game:
        """
        Start the match for a room.

        Creates the game, one player row per seat (turn order = join order),
        one state row per buyable space and both shuffled decks, and marks
        the room started, all in one transaction.

        Args:
            session: Database session
            room_id: Room to start
            seed: Shuffle seed; the same seed gives the same deck order

        Raises:
            RecordNotFoundError: unknown room
            InvalidStateError: room finished, too few players, or no static data seeded
            DuplicateRecordError: the room already has a game
        """
        settings = get_settings()
        room = await session.get(Room, room_id, populate_existing=True)
        if room is None:
            raise RecordNotFoundError("Room not found", {"room_id": str(room_id)})
        if room.status == RoomStatus.FINISHED:
            raise InvalidStateError("Room is finished", {"room_id": str(room_id)})

        roster = list(
            (
                await session.execute(
                    select(RoomPlayer).where(RoomPlayer.room_id == room_id).order_by(RoomPlayer.join_order)
                )
            ).scalars().all()
        )
        if len(roster) < settings.MIN_PLAYERS:
            raise InvalidStateError(
                f"A game needs at least {settings.MIN_PLAYERS} players",
                {"room_id": str(room_id), "players": len(roster)},
            )

        spaces = await board_repo.list_buyable_spaces(session)
        if not spaces:
            raise InvalidStateError("No board spaces defined; seed the board first")

        game = Game(room_id=room_id, current_player_session_id=roster[0].player_session_id)
        session.add(game)
        # Surfaces a second start as DuplicateRecordError before anything else is staged
        await flush_or_raise(session, table=self.table_name)

        try:
            session.add_all(
                GamePlayer(
                    game_id=game.id,
                    player_session_id=seat.player_session_id,
                    turn_order=turn_order,
                    cash=settings.STARTING_CASH,
                    token=seat.token,
                )
                for turn_order, seat in enumerate(roster)
            )
            session.add_all(GameSpaceState(game_id=game.id, board_space_id=space.id) for space in spaces)
            await deck_repo.build_decks(session, game.id, random.Random(seed))
        except InvalidStateError:
            await session.rollback()
            raise

        room.status = RoomStatus.STARTED.value
        room.started_at = utcnow()
        game_event_repo.stage_event(
            session,
            game.id,
            "GAME_STARTED",
            {"players": [seat.player_session_id for seat in roster]},
        )
        await commit_or_raise(session, table=self.table_name)
        logger.info(f"Game {game.id} started in room {room.code} with {len(roster)} players")
        return game

    async def get_for_room(self, session: AsyncSession, room_id: uuid.UUID) -> Game | None:
        return await self.get_by_attribute(session, "room_id", room_id)

    async def list_players(self, session: AsyncSession, game_id: uuid.UUID) -> list[GamePlayer]:
        """Players in turn order."""
        return await self.players.list_by(
            session, GamePlayer.game_id == game_id, order_by=GamePlayer.turn_order
        )

    async def get_player(self, session: AsyncSession, game_id: uuid.UUID, player_id: uuid.UUID) -> GamePlayer | None:
        return await self.players.reload(session, (game_id, player_id))

    async def list_space_states(
        self, session: AsyncSession, game_id: uuid.UUID, owner_id: uuid.UUID | None = None
    ) -> list[GameSpaceState]:
        criteria = [GameSpaceState.game_id == game_id]
        if owner_id is not None:
            criteria.append(GameSpaceState.owner_player_session_id == owner_id)
        return await self.spaces.list_by(session, *criteria, order_by=GameSpaceState.board_space_id)

    async def get_space_state(
        self, session: AsyncSession, game_id: uuid.UUID, board_space_id: int
    ) -> GameSpaceState | None:
        return await self.spaces.reload(session, (game_id, board_space_id))

    async def update_player(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        player_id: uuid.UUID,
        expected_version: int,
        **changes: Any,
    ) -> GamePlayer:
        """
        Change a player's game state if it is still at expected_version.

        Marking a player bankrupt stamps bankrupt_at unless one is given.
        """
        _check_fields(changes, PLAYER_FIELDS, "player")
        if changes.get("is_bankrupt") and "bankrupt_at" not in changes:
            changes["bankrupt_at"] = utcnow()
        return await self.players.update_versioned(session, (game_id, player_id), expected_version, changes)

    async def update_space(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        board_space_id: int,
        expected_version: int,
        **changes: Any,
    ) -> GameSpaceState:
        """Change ownership/development of a space if it is still at expected_version."""
        _check_fields(changes, SPACE_FIELDS, "space")
        return await self.spaces.update_versioned(session, (game_id, board_space_id), expected_version, changes)

    async def advance_turn(self, session: AsyncSession, game_id: uuid.UUID, expected_version: int) -> Game:
        """
        Hand the turn to the next non-bankrupt player in turn order.

        Raises:
            InvalidStateError: game not in progress or nobody left to play
            ConcurrencyConflictError: the game moved on since expected_version
        """
        game = await self.reload(session, game_id)
        if game is None:
            raise RecordNotFoundError("Game not found", {"game_id": str(game_id)})
        if game.status != GameStatus.IN_PROGRESS:
            raise InvalidStateError("Game is not in progress", {"game_id": str(game_id), "status": game.status})

        players = await self.list_players(session, game_id)
        active = [p for p in players if not p.is_bankrupt]
        if not active:
            raise InvalidStateError("No active players left", {"game_id": str(game_id)})

        current_order = next(
            (p.turn_order for p in players if p.player_session_id == game.current_player_session_id),
            -1,
        )
        following = [p for p in active if p.turn_order > current_order]
        next_player = following[0] if following else active[0]

        updated = await self.update_versioned(
            session,
            game_id,
            expected_version,
            {
                "turn_number": game.turn_number + 1,
                "current_player_session_id": next_player.player_session_id,
                "turn_started_at": utcnow(),
            },
        )
        logger.debug(f"Game {game_id} turn {updated.turn_number}: {next_player.player_session_id}")
        return updated

    async def finish_game(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        expected_version: int,
        winner_id: uuid.UUID | None = None,
        status: GameStatus = GameStatus.FINISHED,
    ) -> Game:
        """Close a game (finished or aborted) and its room in one transaction."""
        status = GameStatus(status)
        if status == GameStatus.IN_PROGRESS:
            raise InvalidInputError("A game cannot be finished as in progress")
        game = await self.reload(session, game_id)
        if game is None:
            raise RecordNotFoundError("Game not found", {"game_id": str(game_id)})
        if game.status != GameStatus.IN_PROGRESS:
            raise InvalidStateError("Game already closed", {"game_id": str(game_id), "status": game.status})

        room = await session.get(Room, game.room_id)
        room.status = RoomStatus.FINISHED.value
        room.finished_at = utcnow()

        # The room change rides in the same commit and is rolled back on conflict
        updated = await self.update_versioned(
            session,
            game_id,
            expected_version,
            {"status": status.value, "winner_player_session_id": winner_id},
        )
        logger.info(f"Game {game_id} closed as {status.value}, winner={winner_id}")
        return updated

    async def record_dice_roll(
        self,
        session: AsyncSession,
        game_id: uuid.UUID,
        player_id: uuid.UUID,
        die1: int,
        die2: int,
        is_auto_roll: bool = False,
        turn_number: int | None = None,
    ) -> DiceRoll:
        """Append a roll to the log. Dice outside 1-6 raise CheckViolationError."""
        if turn_number is None:
            game = await self.reload(session, game_id)
            if game is None:
                raise RecordNotFoundError("Game not found", {"game_id": str(game_id)})
            turn_number = game.turn_number
        return await self.dice.create(
            session,
            {
                "game_id": game_id,
                "player_session_id": player_id,
                "turn_number": turn_number,
                "die1": die1,
                "die2": die2,
                "is_auto_roll": is_auto_roll,
            },
        )

    async def list_dice_rolls(
        self, session: AsyncSession, game_id: uuid.UUID, turn_number: int | None = None
    ) -> list[DiceRoll]:
        criteria = [DiceRoll.game_id == game_id]
        if turn_number is not None:
            criteria.append(DiceRoll.turn_number == turn_number)
        return await self.dice.list_by(session, *criteria, order_by=DiceRoll.id)

    async def delete_game(self, session: AsyncSession, game_id: uuid.UUID) -> bool:
        """Delete a game and, by cascade, all of its per-game state."""
        return await self.delete(session, game_id)


game_repo = GameRepository()
