from loguru import logger

from monopoly_web.core.config import Settings
from monopoly_web.db.base import process_database_url
from monopoly_web.db.repositories.room import ROOM_CODE_ALPHABET, generate_room_code, normalize_room_code


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("DATABASE_URL", raising=False)
    monkeypatch.delenv("STARTING_CASH", raising=False)
    settings = Settings(_env_file=None)
    assert settings.STARTING_CASH == 1500
    assert settings.DEFAULT_MAX_PLAYERS == 8
    assert settings.MIN_PLAYERS == 2
    assert settings.ROOM_CODE_LENGTH == 6
    assert settings.db_url.startswith("sqlite+aiosqlite")


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql://u:p@db/monopoly")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("ROOM_CODE_LENGTH", "20")
    settings = Settings(_env_file=None)
    assert settings.db_url == "postgresql://u:p@db/monopoly"
    assert settings.LOG_LEVEL == "DEBUG"
    # Codes must fit rooms.code
    assert settings.ROOM_CODE_LENGTH == 6


def test_database_url_gets_async_driver():
    assert process_database_url("postgres://u:p@db/x") == "postgresql+asyncpg://u:p@db/x"
    assert process_database_url("postgresql://u:p@db/x") == "postgresql+asyncpg://u:p@db/x"
    assert process_database_url("sqlite:///./x.db") == "sqlite+aiosqlite:///./x.db"
    assert process_database_url("sqlite+aiosqlite:///./x.db") == "sqlite+aiosqlite:///./x.db"


def test_room_codes():
    code = generate_room_code(6)
    assert len(code) == 6
    assert set(code) <= set(ROOM_CODE_ALPHABET)
    assert normalize_room_code("  abc123 ") == "ABC123"
    assert normalize_room_code(None) == ""


def test_asyncpg_url_passes_through_quietly():
    warnings = []
    handler_id = logger.add(warnings.append, level="WARNING")
    try:
        url = process_database_url("postgresql+asyncpg://u:p@db/x")
    finally:
        logger.remove(handler_id)

    assert url == "postgresql+asyncpg://u:p@db/x"
    assert warnings == []
