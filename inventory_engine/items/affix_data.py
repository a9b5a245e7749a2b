"""
Name fragments and secondary-effect archetypes for procedurally randomized items.
"""

# Prepended to EPIC/LEGENDARY item names ("Ancient Longsword")
NAME_PREFIXES = [
    "Ancient",
    "Gleaming",
    "Runed",
    "Savage",
    "Blessed",
    "Shadowforged",
    "Stormcalled",
    "Vicious",
]

# Appended as "of <suffix>" ("Longsword of the Bear")
NAME_SUFFIXES = [
    "the Bear",
    "the Fox",
    "the Phoenix",
    "Embers",
    "the Tides",
    "Ruin",
    "Valor",
    "the Void",
]

# Secondary effects rolled onto high level equippable items.
# "description" and "data" are formatted with power (and percent / element where used).
RANDOM_EFFECTS = {
    "damageBoost": {
        "description": "Increases damage by {power}%",
        "data": lambda power, **_: {"damageMultiplier": 1 + power / 100},
    },
    "criticalChance": {
        "description": "Increases critical hit chance by {power}%",
        "data": lambda power, **_: {"critChance": power},
    },
    "healthRegen": {
        "description": "Regenerates {power} health per second",
        "data": lambda power, **_: {"healthRegen": power},
    },
    "moveSpeed": {
        "description": "Increases movement speed by {power}%",
        "data": lambda power, **_: {"moveSpeedBonus": power / 100},
    },
    "elementalDamage": {
        "description": "Adds {power} {element} damage",
        "data": lambda power, element=None, **_: {"elementalDamage": {"type": element, "amount": power}},
    },
    "thorns": {
        "description": "Returns {power} damage to attackers",
        "data": lambda power, **_: {"thorns": power},
    },
    "lifeSteal": {
        "description": "{percent}% of damage dealt is converted to health",
        "data": lambda power, percent=1, **_: {"lifeSteal": percent / 100},
    },
}
