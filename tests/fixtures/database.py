import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.pool import StaticPool

from monopoly_web.db.base import Base, create_engine_for_url
from monopoly_web.db.repositories import board_repo, game_repo, player_session_repo, room_repo


@pytest.fixture
async def test_engine():
    """Create an in-memory SQLite engine with foreign keys enforced."""
    engine = create_engine_for_url(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Drop tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
async def test_session_maker(test_engine):
    """Create a session factory for the test database."""
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


@pytest.fixture
async def test_session(test_session_maker):
    """Create a new session for a test."""
    async with test_session_maker() as session:
        yield session


@pytest.fixture
async def seeded_board(test_session):
    """Seed the standard 40 spaces and both card decks."""
    await board_repo.seed_board_spaces(test_session)
    await board_repo.seed_cards(test_session)
    return test_session


@pytest.fixture
async def test_player(test_session):
    """Create a player session."""
    return await player_session_repo.create_session(test_session, "Alice")


@pytest.fixture
async def test_player2(test_session):
    """Create a second player session."""
    return await player_session_repo.create_session(test_session, "Bob")


@pytest.fixture
async def test_room(test_session, test_player, test_player2):
    """Create a waiting room owned by test_player with test_player2 seated."""
    room = await room_repo.create_room(test_session, test_player.id, code="ROOM01", token="car")
    await room_repo.join_room(test_session, room.id, test_player2.id, token="hat")
    return room


@pytest.fixture
async def started_game(seeded_board, test_session, test_room):
    """Start a game in test_room with a fixed shuffle seed."""
    return await game_repo.start_game(test_session, test_room.id, seed=42)
