import pytest
from sqlalchemy import func, select

from monopoly_web.db.exceptions import DuplicateRecordError, InvalidInputError, InvalidStateError
from monopoly_web.db.models import ChatMessage, Room, RoomPlayer, RoomStatus
from monopoly_web.db.repositories import chat_message_repo, game_repo, player_session_repo, room_repo


@pytest.mark.lobby
async def test_create_session_issues_unique_tokens(test_session):
    alice = await player_session_repo.create_session(test_session, "  Alice ")
    bob = await player_session_repo.create_session(test_session, "Alice")

    assert alice.display_name == "Alice"
    assert alice.session_token != bob.session_token
    found = await player_session_repo.get_by_token(test_session, alice.session_token)
    assert found.id == alice.id


@pytest.mark.lobby
async def test_display_name_length_is_checked(test_session):
    with pytest.raises(InvalidInputError):
        await player_session_repo.create_session(test_session, "x" * 33)
    with pytest.raises(InvalidInputError):
        await player_session_repo.create_session(test_session, "   ")


@pytest.mark.lobby
async def test_touch_updates_last_seen(test_session, test_player):
    before = test_player.last_seen_at
    touched = await player_session_repo.touch(test_session, test_player.id)
    assert touched.last_seen_at >= before


@pytest.mark.lobby
async def test_create_room_seats_owner_first(test_session, test_player):
    room = await room_repo.create_room(test_session, test_player.id, token="dog")

    assert len(room.code) == 6
    assert room.status == RoomStatus.WAITING
    roster = await room_repo.list_players(test_session, room.id)
    assert [(seat.player_session_id, seat.join_order, seat.is_owner) for seat in roster] == [
        (test_player.id, 0, True)
    ]
    found = await room_repo.get_by_code(test_session, room.code.lower())
    assert found.id == room.id


@pytest.mark.lobby
async def test_duplicate_room_code_is_rejected(test_session, test_player, test_player2):
    player2_id = test_player2.id
    await room_repo.create_room(test_session, test_player.id, code="ABCD12")

    with pytest.raises(DuplicateRecordError):
        await room_repo.create_room(test_session, player2_id, code="abcd12")

    count = (await test_session.execute(select(func.count()).select_from(Room))).scalar_one()
    assert count == 1


@pytest.mark.lobby
async def test_room_code_and_capacity_are_validated(test_session, test_player):
    with pytest.raises(InvalidInputError):
        await room_repo.create_room(test_session, test_player.id, code="BAD-CODE")
    with pytest.raises(InvalidInputError):
        await room_repo.create_room(test_session, test_player.id, max_players=9)


@pytest.mark.lobby
async def test_join_order_and_reconnect(test_session, test_room, test_player2):
    room_id = test_room.id
    carol = await player_session_repo.create_session(test_session, "Carol")

    seat = await room_repo.join_room(test_session, room_id, carol.id)
    assert seat.join_order == 2

    await room_repo.set_connected(test_session, room_id, test_player2.id, False)
    again = await room_repo.join_room(test_session, room_id, test_player2.id)
    assert again.join_order == 1
    assert again.is_connected
    assert await room_repo.count_players(test_session, room_id) == 3


@pytest.mark.lobby
async def test_full_room_rejects_new_players(test_session, test_player):
    room = await room_repo.create_room(test_session, test_player.id, max_players=2)
    room_id = room.id
    bob = await player_session_repo.create_session(test_session, "Bob")
    carol = await player_session_repo.create_session(test_session, "Carol")
    await room_repo.join_room(test_session, room_id, bob.id)

    with pytest.raises(InvalidStateError):
        await room_repo.join_room(test_session, room_id, carol.id)


@pytest.mark.lobby
async def test_started_room_rejects_new_players(started_game, test_session, test_room):
    room_id = test_room.id
    carol = await player_session_repo.create_session(test_session, "Carol")

    with pytest.raises(InvalidStateError):
        await room_repo.join_room(test_session, room_id, carol.id)


@pytest.mark.lobby
async def test_owner_leaving_passes_ownership(test_session, test_room, test_player, test_player2):
    room_id = test_room.id
    assert await room_repo.leave_room(test_session, room_id, test_player.id)

    room = await room_repo.reload(test_session, room_id)
    assert room.owner_player_session_id == test_player2.id
    roster = await room_repo.list_players(test_session, room_id)
    assert [(seat.player_session_id, seat.is_owner) for seat in roster] == [(test_player2.id, True)]


@pytest.mark.lobby
async def test_last_player_leaving_deletes_room(test_session, test_room, test_player, test_player2):
    room_id = test_room.id
    await room_repo.leave_room(test_session, room_id, test_player.id)
    await room_repo.leave_room(test_session, room_id, test_player2.id)

    assert await room_repo.reload(test_session, room_id) is None
    assert not await room_repo.leave_room(test_session, room_id, test_player.id)


@pytest.mark.lobby
async def test_leaving_started_room_keeps_seat(started_game, test_session, test_room, test_player2):
    room_id = test_room.id
    assert await room_repo.leave_room(test_session, room_id, test_player2.id)

    seat = await test_session.get(RoomPlayer, (room_id, test_player2.id), populate_existing=True)
    assert seat is not None
    assert not seat.is_connected


@pytest.mark.lobby
async def test_chat_messages_in_order(test_session, test_room, test_player, test_player2):
    await chat_message_repo.post_message(test_session, test_room.id, test_player, " hello ")
    await chat_message_repo.post_message(test_session, test_room.id, test_player2, "hi")
    await chat_message_repo.post_message(test_session, test_room.id, test_player, "ready?")

    messages = await chat_message_repo.list_messages(test_session, test_room.id)
    assert [(m.player_name, m.message) for m in messages] == [
        ("Alice", "hello"),
        ("Bob", "hi"),
        ("Alice", "ready?"),
    ]
    latest = await chat_message_repo.list_messages(test_session, test_room.id, limit=2)
    assert [m.message for m in latest] == ["hi", "ready?"]


@pytest.mark.lobby
async def test_chat_message_length_is_checked(test_session, test_room, test_player):
    with pytest.raises(InvalidInputError):
        await chat_message_repo.post_message(test_session, test_room.id, test_player, "x" * 501)
    with pytest.raises(InvalidInputError):
        await chat_message_repo.post_message(test_session, test_room.id, test_player, "  ")

    count = (await test_session.execute(select(func.count()).select_from(ChatMessage))).scalar_one()
    assert count == 0


@pytest.mark.lobby
async def test_join_sees_start_from_another_session(seeded_board, test_session, test_session_maker, test_room):
    room_id = test_room.id
    carol = await player_session_repo.create_session(test_session, "Carol")
    carol_id = carol.id

    # test_session still holds the room as waiting
    async with test_session_maker() as other:
        await game_repo.start_game(other, room_id)

    with pytest.raises(InvalidStateError):
        await room_repo.join_room(test_session, room_id, carol_id)
    assert await room_repo.count_players(test_session, room_id) == 2


@pytest.mark.lobby
async def test_leave_sees_start_from_another_session(seeded_board, test_session, test_session_maker, test_room, test_player2):
    room_id, bob_id = test_room.id, test_player2.id

    async with test_session_maker() as other:
        await game_repo.start_game(other, room_id)

    assert await room_repo.leave_room(test_session, room_id, bob_id) is True

    seat = await room_repo.get_membership(test_session, room_id, bob_id)
    assert seat is not None
    assert seat.is_connected is False
