"""
Static board and card definitions for the standard edition.

All monetary values are in game dollars. These rows are seeded once and
shared by every game.
"""

BOARD_SIZE = 40

# Format: (index, name, space_type, color_group, price, rents, house_cost, tax)
# Rents are [base, 1 house, 2 houses, 3 houses, 4 houses, hotel] for streets
# and [1, 2, 3, 4 railroads owned] for railroads.
BOARD_SPACES = [
    (0, "GO", "go", "none", None, None, None, None),
    (1, "Mediterranean Avenue", "property", "brown", 60, [2, 10, 30, 90, 160, 250], 50, None),
    (2, "Community Chest", "community_chest", "none", None, None, None, None),
    (3, "Baltic Avenue", "property", "brown", 60, [4, 20, 60, 180, 320, 450], 50, None),
    (4, "Income Tax", "tax", "none", None, None, None, 200),
    (5, "Reading Railroad", "railroad", "none", 200, [25, 50, 100, 200], None, None),
    (6, "Oriental Avenue", "property", "light_blue", 100, [6, 30, 90, 270, 400, 550], 50, None),
    (7, "Chance", "chance", "none", None, None, None, None),
    (8, "Vermont Avenue", "property", "light_blue", 100, [6, 30, 90, 270, 400, 550], 50, None),
    (9, "Connecticut Avenue", "property", "light_blue", 120, [8, 40, 100, 300, 450, 600], 50, None),
    (10, "Jail / Just Visiting", "jail", "none", None, None, None, None),
    (11, "St. Charles Place", "property", "pink", 140, [10, 50, 150, 450, 625, 750], 100, None),
    (12, "Electric Company", "utility", "none", 150, None, None, None),
    (13, "States Avenue", "property", "pink", 140, [10, 50, 150, 450, 625, 750], 100, None),
    (14, "Virginia Avenue", "property", "pink", 160, [12, 60, 180, 500, 700, 900], 100, None),
    (15, "Pennsylvania Railroad", "railroad", "none", 200, [25, 50, 100, 200], None, None),
    (16, "St. James Place", "property", "orange", 180, [14, 70, 200, 550, 750, 950], 100, None),
    (17, "Community Chest", "community_chest", "none", None, None, None, None),
    (18, "Tennessee Avenue", "property", "orange", 180, [14, 70, 200, 550, 750, 950], 100, None),
    (19, "New York Avenue", "property", "orange", 200, [16, 80, 220, 600, 800, 1000], 100, None),
    (20, "Free Parking", "free_parking", "none", None, None, None, None),
    (21, "Kentucky Avenue", "property", "red", 220, [18, 90, 250, 700, 875, 1050], 150, None),
    (22, "Chance", "chance", "none", None, None, None, None),
    (23, "Indiana Avenue", "property", "red", 220, [18, 90, 250, 700, 875, 1050], 150, None),
    (24, "Illinois Avenue", "property", "red", 240, [20, 100, 300, 750, 925, 1100], 150, None),
    (25, "B & O Railroad", "railroad", "none", 200, [25, 50, 100, 200], None, None),
    (26, "Atlantic Avenue", "property", "yellow", 260, [22, 110, 330, 800, 975, 1150], 150, None),
    (27, "Ventnor Avenue", "property", "yellow", 260, [22, 110, 330, 800, 975, 1150], 150, None),
    (28, "Water Works", "utility", "none", 150, None, None, None),
    (29, "Marvin Gardens", "property", "yellow", 280, [24, 120, 360, 850, 1025, 1200], 150, None),
    (30, "Go To Jail", "go_to_jail", "none", None, None, None, None),
    (31, "Pacific Avenue", "property", "green", 300, [26, 130, 390, 900, 1100, 1275], 200, None),
    (32, "North Carolina Avenue", "property", "green", 300, [26, 130, 390, 900, 1100, 1275], 200, None),
    (33, "Community Chest", "community_chest", "none", None, None, None, None),
    (34, "Pennsylvania Avenue", "property", "green", 320, [28, 150, 450, 1000, 1200, 1400], 200, None),
    (35, "Short Line", "railroad", "none", 200, [25, 50, 100, 200], None, None),
    (36, "Chance", "chance", "none", None, None, None, None),
    (37, "Park Place", "property", "dark_blue", 350, [35, 175, 500, 1100, 1300, 1500], 200, None),
    (38, "Luxury Tax", "tax", "none", None, None, None, 100),
    (39, "Boardwalk", "property", "dark_blue", 400, [50, 200, 600, 1400, 1700, 2000], 200, None),
]

# Format: (sequence, text, action_code, action params)
CHANCE_CARDS = [
    (1, "Advance to Go (Collect $200).", "MOVE_TO", {"to": 0}),
    (2, "Advance to Illinois Avenue. If you pass Go, collect $200.", "MOVE_TO", {"to": 24}),
    (3, "Advance to St. Charles Place. If you pass Go, collect $200.", "MOVE_TO", {"to": 11}),
    (4, "Advance to nearest Utility. If unowned, you may buy it. If owned, throw dice and pay owner "
        "10 times the amount thrown.", "MOVE_TO_NEAREST", {"kind": "utility", "rent_multiplier": 10}),
    (5, "Advance to nearest Railroad. If unowned, you may buy it. If owned, pay owner twice the rental.",
     "MOVE_TO_NEAREST", {"kind": "railroad", "rent_multiplier": 2}),
    (6, "Bank pays you dividend of $50.", "COLLECT", {"amount": 50}),
    (7, "Get Out of Jail Free.", "JAIL_FREE", {"keep": True}),
    (8, "Go Back 3 Spaces.", "MOVE_BACK", {"spaces": 3}),
    (9, "Go to Jail. Go directly to Jail, do not pass Go, do not collect $200.", "GO_TO_JAIL", {}),
    (10, "Make general repairs on all your property. For each house pay $25. For each hotel pay $100.",
     "REPAIRS", {"per_house": 25, "per_hotel": 100}),
    (11, "Speeding fine $15.", "PAY_BANK", {"amount": 15}),
    (12, "Take a trip to Reading Railroad. If you pass Go, collect $200.", "MOVE_TO", {"to": 5}),
    (13, "You have been elected Chairman of the Board. Pay each player $50.", "PAY_EACH_PLAYER", {"amount": 50}),
    (14, "Your building loan matures. Collect $150.", "COLLECT", {"amount": 150}),
    (15, "Advance to Boardwalk.", "MOVE_TO", {"to": 39}),
    (16, "Advance to nearest Railroad. If unowned, you may buy it. If owned, pay owner twice the rental.",
     "MOVE_TO_NEAREST", {"kind": "railroad", "rent_multiplier": 2}),
]

COMMUNITY_CHEST_CARDS = [
    (1, "Advance to Go (Collect $200).", "MOVE_TO", {"to": 0}),
    (2, "Bank error in your favor. Collect $200.", "COLLECT", {"amount": 200}),
    (3, "Doctor's fee. Pay $50.", "PAY_BANK", {"amount": 50}),
    (4, "From sale of stock you get $50.", "COLLECT", {"amount": 50}),
    (5, "Get Out of Jail Free.", "JAIL_FREE", {"keep": True}),
    (6, "Go to Jail. Go directly to jail, do not pass Go, do not collect $200.", "GO_TO_JAIL", {}),
    (7, "Holiday fund matures. Receive $100.", "COLLECT", {"amount": 100}),
    (8, "Income tax refund. Collect $20.", "COLLECT", {"amount": 20}),
    (9, "It is your birthday. Collect $10 from every player.", "COLLECT_FROM_EACH_PLAYER", {"amount": 10}),
    (10, "Life insurance matures. Collect $100.", "COLLECT", {"amount": 100}),
    (11, "Pay hospital fees of $100.", "PAY_BANK", {"amount": 100}),
    (12, "Pay school fees of $50.", "PAY_BANK", {"amount": 50}),
    (13, "Receive $25 consultancy fee.", "COLLECT", {"amount": 25}),
    (14, "You are assessed for street repair. $40 per house. $115 per hotel.",
     "REPAIRS", {"per_house": 40, "per_hotel": 115}),
    (15, "You have won second prize in a beauty contest. Collect $10.", "COLLECT", {"amount": 10}),
    (16, "You inherit $100.", "COLLECT", {"amount": 100}),
]


def board_space_rows() -> list[dict]:
    """BOARD_SPACES as column dicts for BoardSpaceDefinition."""
    rows = []
    for index, name, space_type, color_group, price, rents, house_cost, tax in BOARD_SPACES:
        row = {
            "index": index,
            "name": name,
            "space_type": space_type,
            "color_group": color_group,
            "purchase_price": price,
            "mortgage_value": price // 2 if price else None,
            "house_cost": house_cost,
            "tax_amount": tax,
        }
        rent_values = list(rents or [])
        for slot, key in enumerate(("rent0", "rent1", "rent2", "rent3", "rent4", "rent_hotel")):
            row[key] = rent_values[slot] if slot < len(rent_values) else None
        rows.append(row)
    return rows
