from monopoly_web.db.models.enums import (
    RoomStatus,
    GameStatus,
    SpaceType,
    ColorGroup,
    DeckType,
    TradeOfferStatus,
)
from monopoly_web.db.models.player_session import PlayerSession
from monopoly_web.db.models.room import Room, RoomPlayer
from monopoly_web.db.models.chat_message import ChatMessage
from monopoly_web.db.models.board_space import BoardSpaceDefinition
from monopoly_web.db.models.card import CardDefinition
from monopoly_web.db.models.game import Game, GamePlayer
from monopoly_web.db.models.game_space_state import GameSpaceState
from monopoly_web.db.models.deck import GameDeckState, GameDeckCardOrder
from monopoly_web.db.models.dice_roll import DiceRoll
from monopoly_web.db.models.game_event import GameEventLog
from monopoly_web.db.models.trade_offer import TradeOffer, TradeOfferProperty

__all__ = [
    "RoomStatus",
    "GameStatus",
    "SpaceType",
    "ColorGroup",
    "DeckType",
    "TradeOfferStatus",
    "PlayerSession",
    "Room",
    "RoomPlayer",
    "ChatMessage",
    "BoardSpaceDefinition",
    "CardDefinition",
    "Game",
    "GamePlayer",
    "GameSpaceState",
    "GameDeckState",
    "GameDeckCardOrder",
    "DiceRoll",
    "GameEventLog",
    "TradeOffer",
    "TradeOfferProperty",
]
