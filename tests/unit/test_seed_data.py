from collections import Counter

from monopoly_web.db.models import BoardSpaceDefinition, CardDefinition, DiceRoll, SpaceType
from monopoly_web.db.seed_data import (
    BOARD_SIZE,
    BOARD_SPACES,
    CHANCE_CARDS,
    COMMUNITY_CHEST_CARDS,
    board_space_rows,
)


def test_board_covers_every_index_once():
    indexes = [space[0] for space in BOARD_SPACES]
    assert indexes == list(range(BOARD_SIZE))


def test_board_space_types_are_known():
    known = {t.value for t in SpaceType}
    for space in BOARD_SPACES:
        assert space[2] in known, f"unknown space type on {space[1]}"


def test_buyable_space_counts():
    counts = Counter(space[2] for space in BOARD_SPACES)
    assert counts["property"] == 22
    assert counts["railroad"] == 4
    assert counts["utility"] == 2


def test_board_space_rows_derive_mortgage_and_rents():
    rows = {row["index"]: row for row in board_space_rows()}

    boardwalk = rows[39]
    assert boardwalk["purchase_price"] == 400
    assert boardwalk["mortgage_value"] == 200
    assert boardwalk["rent0"] == 50
    assert boardwalk["rent_hotel"] == 2000

    reading = rows[5]
    assert reading["rent3"] == 200
    assert reading["rent4"] is None
    assert reading["rent_hotel"] is None

    go = rows[0]
    assert go["purchase_price"] is None
    assert go["mortgage_value"] is None

    assert rows[4]["tax_amount"] == 200


def test_decks_have_sixteen_cards_in_sequence():
    for deck in (CHANCE_CARDS, COMMUNITY_CHEST_CARDS):
        assert [card[0] for card in deck] == list(range(1, 17))
        for _, text, action_code, _ in deck:
            assert 0 < len(text) <= 256
            assert action_code and len(action_code) <= 64


def test_model_helpers():
    """Model convenience properties work on unsaved instances."""
    street = BoardSpaceDefinition(**board_space_rows()[1])
    assert street.is_buyable
    assert street.rents == [2, 10, 30, 90, 160, 250]

    chance = BoardSpaceDefinition(**board_space_rows()[7])
    assert not chance.is_buyable

    card = CardDefinition(deck_type="chance", sequence=1, text="Advance to Go", action_json='{"to": 0}')
    assert card.action_params == {"to": 0}
    assert CardDefinition(deck_type="chance", sequence=2, text="x").action_params == {}

    roll = DiceRoll(die1=3, die2=3)
    assert roll.total == 6
    assert roll.is_double
