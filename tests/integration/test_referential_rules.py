import uuid

import pytest
from sqlalchemy import func, select

from monopoly_web.db.exceptions import (
    CheckViolationError,
    DuplicateRecordError,
    ForeignKeyViolationError,
    RestrictedDeleteError,
)
from monopoly_web.db.models import (
    BoardSpaceDefinition,
    ChatMessage,
    DiceRoll,
    Game,
    GameDeckCardOrder,
    GameDeckState,
    GameEventLog,
    GamePlayer,
    GameSpaceState,
    PlayerSession,
    Room,
    RoomPlayer,
    TradeOffer,
    TradeOfferProperty,
)
from monopoly_web.db.repositories import (
    board_repo,
    chat_message_repo,
    game_repo,
    player_session_repo,
    room_repo,
    trade_offer_repo,
)

PER_GAME_TABLES = (
    GamePlayer,
    GameSpaceState,
    GameDeckState,
    GameDeckCardOrder,
    DiceRoll,
    GameEventLog,
    TradeOffer,
    TradeOfferProperty,
)


async def count_rows(session, model, *criteria):
    stmt = select(func.count()).select_from(model)
    if criteria:
        stmt = stmt.where(*criteria)
    return (await session.execute(stmt)).scalar_one()


async def populate_game(session, game_id, alice_id, bob_id):
    """Give a started game some rows in every per-game table."""
    await game_repo.record_dice_roll(session, game_id, alice_id, 3, 4)
    mediterranean = await board_repo.get_space_by_index(session, 1)
    await trade_offer_repo.create_offer(
        session, game_id, alice_id, bob_id, from_cash=50, to_gives=[mediterranean.id]
    )


@pytest.mark.referential
async def test_duplicate_board_index_is_rejected(seeded_board, test_session):
    with pytest.raises(DuplicateRecordError):
        await board_repo.create(
            test_session,
            {"index": 5, "name": "Second Reading", "space_type": "railroad", "color_group": "none"},
        )
    assert await count_rows(test_session, BoardSpaceDefinition) == 40


@pytest.mark.referential
async def test_board_index_range_is_checked(test_session):
    with pytest.raises(CheckViolationError):
        await board_repo.create(
            test_session,
            {"index": 40, "name": "Off the board", "space_type": "go", "color_group": "none"},
        )


@pytest.mark.referential
async def test_seeding_is_idempotent(test_session):
    assert await board_repo.seed_board_spaces(test_session) == 40
    assert await board_repo.seed_cards(test_session) == 32
    assert await board_repo.seed_board_spaces(test_session) == 0
    assert await board_repo.seed_cards(test_session) == 0

    buyable = await board_repo.list_buyable_spaces(test_session)
    assert len(buyable) == 28
    assert all(space.is_buyable for space in buyable)


@pytest.mark.referential
async def test_deleting_room_cascades_everything(started_game, test_session, test_room, test_player, test_player2):
    room_id, game_id = test_room.id, started_game.id
    alice_id, bob_id = test_player.id, test_player2.id
    await chat_message_repo.post_message(test_session, room_id, test_player, "gg")
    await populate_game(test_session, game_id, alice_id, bob_id)
    for model in PER_GAME_TABLES:
        assert await count_rows(test_session, model) > 0, model.__tablename__

    assert await room_repo.delete_room(test_session, room_id)

    assert await count_rows(test_session, Room) == 0
    assert await count_rows(test_session, RoomPlayer) == 0
    assert await count_rows(test_session, ChatMessage) == 0
    assert await count_rows(test_session, Game) == 0
    for model in PER_GAME_TABLES:
        assert await count_rows(test_session, model) == 0, model.__tablename__
    # Player identities and static data survive
    assert await count_rows(test_session, PlayerSession) == 2
    assert await count_rows(test_session, BoardSpaceDefinition) == 40


@pytest.mark.referential
async def test_deleting_game_keeps_room(started_game, test_session, test_room, test_player, test_player2):
    room_id, game_id = test_room.id, started_game.id
    await populate_game(test_session, game_id, test_player.id, test_player2.id)

    assert await game_repo.delete_game(test_session, game_id)

    assert await count_rows(test_session, Room, Room.id == room_id) == 1
    assert await count_rows(test_session, RoomPlayer) == 2
    for model in PER_GAME_TABLES:
        assert await count_rows(test_session, model) == 0, model.__tablename__


@pytest.mark.referential
async def test_room_owner_cannot_be_deleted(test_session, test_room, test_player):
    alice_id = test_player.id

    with pytest.raises(RestrictedDeleteError):
        await player_session_repo.delete_session(test_session, alice_id)

    assert await count_rows(test_session, PlayerSession, PlayerSession.id == alice_id) == 1
    assert await count_rows(test_session, RoomPlayer) == 2


@pytest.mark.referential
async def test_game_participant_cannot_be_deleted(started_game, test_session, test_player2):
    bob_id = test_player2.id

    with pytest.raises(RestrictedDeleteError):
        await player_session_repo.delete_session(test_session, bob_id)


@pytest.mark.referential
async def test_deleting_player_clears_chat_author(test_session, test_room, test_player2):
    room_id, bob_id = test_room.id, test_player2.id
    await chat_message_repo.post_message(test_session, room_id, test_player2, "brb")

    assert await player_session_repo.delete_session(test_session, bob_id)

    messages = await chat_message_repo.list_messages(test_session, room_id)
    assert len(messages) == 1
    await test_session.refresh(messages[0])
    assert messages[0].player_session_id is None
    assert messages[0].player_name == "Bob"
    assert await count_rows(test_session, RoomPlayer, RoomPlayer.player_session_id == bob_id) == 0


@pytest.mark.referential
async def test_board_space_in_use_cannot_be_deleted(started_game, test_session):
    boardwalk = await board_repo.get_space_by_index(test_session, 39)
    boardwalk_id = boardwalk.id

    with pytest.raises(RestrictedDeleteError):
        await board_repo.delete_space(test_session, boardwalk_id)

    assert await count_rows(test_session, BoardSpaceDefinition, BoardSpaceDefinition.id == boardwalk_id) == 1


@pytest.mark.referential
async def test_unused_board_space_can_be_deleted(seeded_board, test_session):
    go = await board_repo.get_space_by_index(test_session, 0)
    assert await board_repo.delete_space(test_session, go.id)
    assert await board_repo.get_space_by_index(test_session, 0) is None


@pytest.mark.referential
async def test_card_in_a_deck_cannot_be_deleted(started_game, test_session):
    cards = await board_repo.list_cards(test_session, "chance")
    card_id = cards[0].id

    with pytest.raises(RestrictedDeleteError):
        await board_repo.delete_card(test_session, card_id)


@pytest.mark.referential
async def test_unknown_reference_is_rejected(test_session, test_player):
    alice_id = test_player.id
    room = await room_repo.create_room(test_session, alice_id)
    room_id = room.id

    with pytest.raises(ForeignKeyViolationError):
        await room_repo.join_room(test_session, room_id, uuid.uuid4())
