from enum import Enum


class RoomStatus(str, Enum):
    """Lobby lifecycle."""
    WAITING = "waiting"
    STARTED = "started"
    FINISHED = "finished"


class GameStatus(str, Enum):
    """Match lifecycle."""
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"
    ABORTED = "aborted"


class SpaceType(str, Enum):
    """Kind of board space."""
    GO = "go"
    PROPERTY = "property"
    RAILROAD = "railroad"
    UTILITY = "utility"
    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"
    TAX = "tax"
    JAIL = "jail"
    FREE_PARKING = "free_parking"
    GO_TO_JAIL = "go_to_jail"


# Spaces that get a GameSpaceState row when a game starts
BUYABLE_SPACE_TYPES = (SpaceType.PROPERTY, SpaceType.RAILROAD, SpaceType.UTILITY)


class ColorGroup(str, Enum):
    """Property color set."""
    NONE = "none"
    BROWN = "brown"
    LIGHT_BLUE = "light_blue"
    PINK = "pink"
    ORANGE = "orange"
    RED = "red"
    YELLOW = "yellow"
    GREEN = "green"
    DARK_BLUE = "dark_blue"


class DeckType(str, Enum):
    """Card deck."""
    CHANCE = "chance"
    COMMUNITY_CHEST = "community_chest"


class TradeOfferStatus(str, Enum):
    """Trade offer lifecycle. Only PENDING offers can change status."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    CANCELLED = "cancelled"
    EXPIRED = "expired"
