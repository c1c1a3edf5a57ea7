from .base import BaseRepository
from .player_session import player_session_repo
from .room import room_repo
from .chat_message_repo import chat_message_repo
from .board import board_repo
from .deck import deck_repo
from .game_event_repo import game_event_repo
from .game import game_repo
from .trade import trade_offer_repo

__all__ = [
    "BaseRepository",
    "player_session_repo",
    "room_repo",
    "chat_message_repo",
    "board_repo",
    "deck_repo",
    "game_event_repo",
    "game_repo",
    "trade_offer_repo",
]
