"""
config/config_loot.py
Drop chances, quality distribution and loot category weights.
"""

LOOT_BASE_DROP_RATE = 0.3
LOOT_LEVEL_SCALING = 0.05
LOOT_GLOBAL_DROP_MODIFIER = 1.0
LOOT_LEVEL_DIFFERENCE_MODIFIER = 0.1

LOOT_QUALITY_CHANCES = {
    "JUNK": 0.2,
    "COMMON": 0.5,
    "UNCOMMON": 0.2,
    "RARE": 0.08,
    "EPIC": 0.015,
    "LEGENDARY": 0.005,
}

LOOT_SPECIAL_CONDITION_MODIFIERS = {
    "boss": 2.0,
    "eliteEnemy": 1.5,
    "playerLuck": 0.01,
    "treasureChest": 1.3,
    "questReward": 1.5,
    "hardMode": 1.25,
}

# Quality shift as (step_factor, clamp) per tier. Negative steps are floored
# at the clamp, positive steps are capped by it.
LOOT_LEVEL_QUALITY_SHIFT = {
    "JUNK": (-0.5, 0.05),
    "COMMON": (-0.5, 0.2),
    "UNCOMMON": (0.2, 0.4),
    "RARE": (0.15, 0.25),
    "EPIC": (0.1, 0.15),
    "LEGENDARY": (0.05, 0.05),
}

LOOT_LUCK_QUALITY_SHIFT = {
    "JUNK": (-0.5, 0.0),
    "COMMON": (-0.3, 0.1),
    "UNCOMMON": (0.1, 0.5),
    "RARE": (0.3, 0.3),
    "EPIC": (0.2, 0.2),
    "LEGENDARY": (0.2, 0.1),
}

LOOT_MODIFIER_QUALITY_SHIFT = {
    "JUNK": (-0.3, 0.0),
    "COMMON": (-0.2, 0.1),
    "RARE": (0.2, 0.3),
    "EPIC": (0.2, 0.2),
    "LEGENDARY": (0.1, 0.1),
}

# --- Enemy loot ---
ENEMY_BASE_ITEM_COUNT = {"boss": 3, "elite": 2, "normal": 1}
ENEMY_EXTRA_ITEM_CHANCE = {"boss": 0.7, "elite": 0.4, "normal": 0.1}
ENEMY_MAX_EXTRA_ITEMS = 3
ENEMY_LEVEL_DIVISOR = 5

ENEMY_CATEGORY_WEIGHTS = {
    "humanoid": {"weapons": 0.25, "armor": 0.25, "consumables": 0.2, "accessories": 0.1, "materials": 0.1, "misc": 0.1},
    "beast": {"materials": 0.4, "consumables": 0.3, "accessories": 0.15, "misc": 0.15},
    "undead": {"weapons": 0.2, "armor": 0.15, "accessories": 0.25, "consumables": 0.2, "materials": 0.1, "misc": 0.1},
    "elemental": {"accessories": 0.3, "materials": 0.35, "consumables": 0.2, "misc": 0.15},
    "magical": {"accessories": 0.35, "consumables": 0.25, "materials": 0.2, "weapons": 0.1, "armor": 0.1},
    "default": {"weapons": 0.2, "armor": 0.2, "accessories": 0.15, "consumables": 0.2, "materials": 0.15, "misc": 0.1},
}

# --- Containers ---
CONTAINER_BASE_ITEM_COUNT = {"treasureChest": 3, "default": 1}
CONTAINER_EXTRA_ITEM_CHANCE = {"treasureChest": 0.5, "default": 0.2}
CONTAINER_MAX_EXTRA_ITEMS = 4
CONTAINER_CATEGORY_WEIGHTS = {"equipment": 0.4, "consumables": 0.3, "materials": 0.2, "weapons": 0.1}

# --- Quests ---
QUEST_CATEGORY_WEIGHTS = {"weapons": 0.3, "armor": 0.3, "accessories": 0.2, "consumables": 0.1, "materials": 0.1}
QUEST_LEVEL_DIVISOR = 3

# Materials drop in larger piles
LOOT_STACK_BASE = {"MATERIAL": 3, "default": 1}
