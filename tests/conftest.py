import pytest
import sys
import os

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

# Import fixtures so they're available to all tests
from tests.fixtures.database import (
    test_engine,
    test_session_maker,
    test_session,
    seeded_board,
    test_player,
    test_player2,
    test_room,
    started_game,
)


# Configure pytest
def pytest_configure(config):
    config.addinivalue_line(
        "markers", "lobby: tests related to rooms, seats and chat"
    )
    config.addinivalue_line(
        "markers", "game_state: tests related to game creation and per-game state"
    )
    config.addinivalue_line(
        "markers", "concurrency: tests related to version-stamped writes"
    )
    config.addinivalue_line(
        "markers", "referential: tests related to cascade, restrict and set-null rules"
    )
    config.addinivalue_line(
        "markers", "web: tests related to the web bootstrap"
    )
