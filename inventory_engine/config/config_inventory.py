"""
config/config_inventory.py
Container sizes, weight limits and manager settings.
"""

# --- Inventory ---
INVENTORY_DEFAULT_WIDTH = 6
INVENTORY_DEFAULT_HEIGHT = 4
INVENTORY_DEFAULT_MAX_SLOTS = 24
INVENTORY_DEFAULT_MAX_WEIGHT = 100.0
GRID_CELL_SIZE = 1.0
GRID_CELL_PADDING = 0.0

# Slot affinities. GENERIC slots accept any item.
SLOT_TYPE_GENERIC = "GENERIC"
SLOT_TYPE_MAINHAND = "MAINHAND"
SLOT_TYPE_OFFHAND = "OFFHAND"
EQUIPMENT_SLOT_TYPES = ["MAINHAND", "OFFHAND", "HEAD", "CHEST", "LEGS", "FEET", "HANDS", "NECK", "RING"]

# --- Manager ---
MANAGER_MAX_TRANSFER_DISTANCE = 5.0
MANAGER_DEFAULT_MAX_WEIGHT = 100.0
MANAGER_DEFAULT_MAX_SLOTS = 20
MANAGER_MAX_TRANSACTION_HISTORY = 100

# --- Character ---
CHARACTER_GRID_WIDTH = 5
CHARACTER_GRID_HEIGHT = 6
CHARACTER_MAX_WEIGHT = 150.0
CHARACTER_QUICK_SLOT_COUNT = 5

CURRENCY_DEFAULTS = {
    "gold": {"amount": 0, "max": 999999},
    "gems": {"amount": 0, "max": 9999},
}

# Stat weights used when comparing equipment for auto-equip.
# Class entries are merged over DEFAULT.
CHARACTER_STAT_WEIGHTS = {
    "DEFAULT": {
        "attack": 1, "defense": 1, "health": 0.5, "mana": 0.5, "strength": 1,
        "dexterity": 1, "intelligence": 1, "critChance": 2, "critDamage": 1.5,
    },
    "WARRIOR": {"strength": 2, "defense": 1.5, "health": 1, "intelligence": 0.5},
    "MAGE": {"intelligence": 2, "mana": 1.5, "health": 0.7, "strength": 0.5, "defense": 0.8},
    "ROGUE": {"dexterity": 2, "critChance": 2.5, "critDamage": 2, "attack": 1.5, "defense": 0.7},
    "CLERIC": {"intelligence": 1.5, "strength": 1, "defense": 1.2, "health": 1.2, "mana": 1.5},
}

# --- Logging ---
LOG_LEVEL = 1  # LogLevel.INFO
