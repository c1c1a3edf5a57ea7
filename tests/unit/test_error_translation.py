import pytest
from sqlalchemy.exc import IntegrityError

from monopoly_web.db.exceptions import (
    CheckViolationError,
    ConcurrencyConflictError,
    DuplicateRecordError,
    ForeignKeyViolationError,
    IntegrityViolationError,
    PersistenceError,
    RestrictedDeleteError,
)
from monopoly_web.db.utils.session_management import translate_integrity_error


class FakeDriverError(Exception):
    """Stands in for a DBAPI exception carrying a SQLSTATE."""

    def __init__(self, message, sqlstate=None):
        super().__init__(message)
        self.sqlstate = sqlstate


def make_error(message, sqlstate=None):
    return IntegrityError("INSERT ...", {}, FakeDriverError(message, sqlstate))


@pytest.mark.parametrize(
    "message, expected",
    [
        ("UNIQUE constraint failed: rooms.code", DuplicateRecordError),
        ("FOREIGN KEY constraint failed", ForeignKeyViolationError),
        ("CHECK constraint failed: ck_dice_rolls_die1_range", CheckViolationError),
        ("NOT NULL constraint failed: rooms.code", IntegrityViolationError),
    ],
)
def test_sqlite_messages(message, expected):
    translated = translate_integrity_error(make_error(message), table="rooms")
    assert type(translated) is expected
    assert translated.details["table"] == "rooms"
    assert message in translated.details["detail"]


@pytest.mark.parametrize(
    "sqlstate, expected",
    [
        ("23505", DuplicateRecordError),
        ("23503", ForeignKeyViolationError),
        ("23514", CheckViolationError),
    ],
)
def test_postgres_sqlstate(sqlstate, expected):
    translated = translate_integrity_error(make_error("violation", sqlstate))
    assert type(translated) is expected


def test_foreign_key_failure_on_delete_is_restricted_delete():
    translated = translate_integrity_error(
        make_error("FOREIGN KEY constraint failed"), table="player_sessions", deleting=True
    )
    assert isinstance(translated, RestrictedDeleteError)
    assert isinstance(translated, ForeignKeyViolationError)


def test_exception_serialization():
    error = ConcurrencyConflictError(
        "Game was modified concurrently",
        {"table": "games"},
        expected_version=1,
        actual_version=2,
    )
    assert isinstance(error, PersistenceError)
    assert error.to_dict() == {
        "error_type": "ConcurrencyConflictError",
        "message": "Game was modified concurrently",
        "details": {"table": "games", "expected_version": 1, "actual_version": 2},
    }
    assert "expected_version" in str(error)
