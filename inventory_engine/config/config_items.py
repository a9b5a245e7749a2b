"""
config/config_items.py
Item model defaults, rarity scaling and procedural item generation settings.
"""

# --- Rarity ---
RARITY_ORDER = ["JUNK", "COMMON", "UNCOMMON", "RARE", "EPIC", "LEGENDARY"]

# Multiplier applied to numeric stats and value when a quality is forced
QUALITY_MULTIPLIERS = {
    "JUNK": 0.7,
    "COMMON": 1.0,
    "UNCOMMON": 1.2,
    "RARE": 1.5,
    "EPIC": 2.0,
    "LEGENDARY": 3.0,
}

TOOLTIP_COLORS = {
    "JUNK": "#9d9d9d",
    "COMMON": "#ffffff",
    "UNCOMMON": "#1eff00",
    "RARE": "#0070dd",
    "EPIC": "#a335ee",
    "LEGENDARY": "#ff8000",
}

# Randomization level at or above which each rarity is assigned
RARITY_LEVEL_THRESHOLDS = [
    (9, "LEGENDARY"),
    (7, "EPIC"),
    (5, "RARE"),
    (3, "UNCOMMON"),
]

# --- Item Defaults ---
ITEM_DEFAULT_STACKABLE = True
ITEM_DEFAULT_MAX_STACK = 99
ITEM_DEFAULT_WEIGHT = 0.1

# Per-type defaults merged under catalog templates
ITEM_TYPE_DEFAULTS = {
    "WEAPON": {"stackable": False, "max_stack_size": 1, "is_equippable": True, "weight": 3.0},
    "ARMOR": {"stackable": False, "max_stack_size": 1, "is_equippable": True, "weight": 5.0},
    "ACCESSORY": {"stackable": False, "max_stack_size": 1, "is_equippable": True, "weight": 0.5},
    "CONSUMABLE": {"stackable": True, "max_stack_size": 20, "is_consumable": True, "weight": 0.2},
    "MATERIAL": {"stackable": True, "max_stack_size": 100, "weight": 0.1},
    "MISC": {"stackable": True, "max_stack_size": 50, "weight": 0.5},
}

# Loot category -> item types it draws from
ITEM_CATEGORIES = {
    "weapons": ["WEAPON"],
    "armor": ["ARMOR"],
    "accessories": ["ACCESSORY"],
    "consumables": ["CONSUMABLE"],
    "materials": ["MATERIAL"],
    "equipment": ["WEAPON", "ARMOR", "ACCESSORY"],
    "usable": ["CONSUMABLE", "MATERIAL"],
    "misc": ["MISC"],
}

# --- Randomization ---
RANDOM_STAT_BASE_MULTIPLIER = 0.8
RANDOM_STAT_LEVEL_MULTIPLIER = 0.05
RANDOM_STAT_SPREAD = 0.4
RANDOM_VALUE_LEVEL_MULTIPLIER = 0.2
RANDOM_COLOR_BASE_VARIANCE = 0.1
RANDOM_COLOR_LEVEL_VARIANCE = 0.02
RANDOM_HUE_SHIFT = 10
RANDOM_SAT_LIGHT_SHIFT = 0.1
RANDOM_EFFECT_MIN_LEVEL = 6
RANDOM_NAME_MIN_RARITY = "EPIC"
RANDOM_LEVEL_MIN = 1
RANDOM_LEVEL_MAX = 10

ELEMENTAL_TYPES = ["fire", "ice", "lightning", "poison"]

