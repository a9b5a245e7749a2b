# inventory_engine/items/item_factory.py
import random
import time
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence, Type

import pygame

from inventory_engine.config import (
    ELEMENTAL_TYPES, QUALITY_MULTIPLIERS, RANDOM_COLOR_BASE_VARIANCE, RANDOM_COLOR_LEVEL_VARIANCE,
    RANDOM_EFFECT_MIN_LEVEL, RANDOM_HUE_SHIFT, RANDOM_NAME_MIN_RARITY, RANDOM_SAT_LIGHT_SHIFT, RANDOM_STAT_BASE_MULTIPLIER, RANDOM_STAT_LEVEL_MULTIPLIER,
    RANDOM_STAT_SPREAD, RANDOM_VALUE_LEVEL_MULTIPLIER, RARITY_LEVEL_THRESHOLDS, TOOLTIP_COLORS
)
from inventory_engine.items.affix_data import NAME_PREFIXES, NAME_SUFFIXES, RANDOM_EFFECTS
from inventory_engine.items.armor import Accessory, Armor
from inventory_engine.items.consumable import Consumable, Material
from inventory_engine.items.item import Item, Rarity
from inventory_engine.items.loot_models import LootDrop
from inventory_engine.items.weapon import Weapon
from inventory_engine.utils.events import EventEmitter, FactoryEvent
from inventory_engine.utils.logger import Logger
from inventory_engine.utils.utils import clamp, round_half_up

if TYPE_CHECKING:
    from inventory_engine.items.catalog import ItemCatalog

# --- Define Class Mapping at Module Level ---
ITEM_CLASS_MAP: Dict[str, Type[Item]] = {
     "Item": Item,
     "Weapon": Weapon,
     "Armor": Armor,
     "Accessory": Accessory,
     "Consumable": Consumable,
     "Material": Material,
}

# Item type -> class used when a template does not name one
ITEM_TYPE_CLASS_MAP: Dict[str, Type[Item]] = {
    "WEAPON": Weapon,
    "ARMOR": Armor,
    "ACCESSORY": Accessory,
    "CONSUMABLE": Consumable,
    "MATERIAL": Material,
}


def _pick(options: Sequence[Any]) -> Any:
    return options[int(random.random() * len(options))]


def build_item(data: Dict[str, Any]) -> Optional[Item]:
    """
    Creates an item instance from template/serialized data.
    "class" (or a class-name "type") selects the class; otherwise item_type does.
    Keys the item model does not know are kept in the item's properties.
    """
    data = dict(data)
    class_name = data.pop("class", None)
    type_value = data.get("type")
    if class_name is None and type_value in ITEM_CLASS_MAP:
        class_name = type_value
    item_type = str(data.get("item_type") or (type_value if type_value not in ITEM_CLASS_MAP else "") or "MISC").upper()
    data["item_type"] = item_type

    cls = ITEM_CLASS_MAP.get(class_name) if class_name else ITEM_TYPE_CLASS_MAP.get(item_type, Item)
    if cls is None:
        Logger.warning("ItemFactory", f"Unknown item class '{class_name}'. Using base Item.")
        cls = Item

    known = set(Item._FIELDS) | {"id", "obj_id", "name", "description", "properties", "type"}
    extras = {key: value for key, value in data.items() if key not in known}
    if extras:
        properties = dict(data.get("properties", {}))
        properties.update(extras)
        data["properties"] = properties

    try:
        return cls.from_dict(data)
    except (TypeError, ValueError) as e:
        Logger.error("ItemFactory", f"Error creating item from {data.get('id')}: {e}")
        return None


class ItemFactory(EventEmitter):
    """Creates item instances from catalog templates and applies randomization and quality."""

    EVENT_TYPES = (FactoryEvent,)

    def __init__(self, catalog: Optional['ItemCatalog'] = None,
                 prefixes: Optional[List[str]] = None, suffixes: Optional[List[str]] = None,
                 quality_modifiers: Optional[Dict[str, float]] = None):
        self.catalog = catalog
        self.prefixes = list(NAME_PREFIXES if prefixes is None else prefixes)
        self.suffixes = list(NAME_SUFFIXES if suffixes is None else suffixes)
        self.quality_modifiers = dict(QUALITY_MULTIPLIERS)
        if quality_modifiers:
            self.quality_modifiers.update(quality_modifiers)

    def set_catalog(self, catalog: 'ItemCatalog'):
        self.catalog = catalog

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> Optional[Item]:
        """Rebuilds an item from Item.to_dict() output."""
        return build_item(data)

    # --- Creation ---

    def create_item(self, template_id: str, **options) -> Optional[Item]:
        """
        Clones a catalog template and customizes the copy.

        Options, applied in this order:
            properties, stats, effects, tags, metadata -- see _apply_custom_options
            randomize (bool), randomize_level (1-10)
            quantity (int)
            quality (rarity name)
            generate_unique_id (bool) -- suffix the id so the instance never stacks
        """
        if not self.catalog:
            Logger.error("ItemFactory", "ItemFactory requires a catalog to create items.")
            return None

        template = self.catalog.get_item_by_id(template_id)
        if not template:
            Logger.error("ItemFactory", f"Template item not found: {template_id}")
            return None

        item = template.clone()

        if options.get("generate_unique_id"):
            item.obj_id = f"{item.obj_id}_{int(time.time() * 1000)}_{int(random.random() * 1000)}"

        self._apply_custom_options(item, options)

        if options.get("randomize"):
            self._randomize_item(item, options.get("randomize_level", 1))

        if options.get("quantity") is not None:
            item.quantity = options["quantity"]

        if options.get("quality"):
            self._apply_quality_modifier(item, options["quality"])

        self.emit(FactoryEvent.ITEM_CREATED, item=item)
        return item

    def _apply_custom_options(self, item: Item, options: Dict[str, Any]):
        for key, value in (options.get("properties") or {}).items():
            if key == "rarity":
                item.rarity = Rarity.parse(value, item.rarity)
            elif hasattr(item, key) and not callable(getattr(item, key)):
                setattr(item, key, value)
            else:
                item.update_property(key, value)

        # Numbers are deltas, anything else replaces
        for stat, value in (options.get("stats") or {}).items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                item.stats[stat] = item.stats.get(stat, 0) + value
            else:
                item.stats[stat] = value

        if options.get("effects"):
            item.effects = item.effects + [dict(e) for e in options["effects"]]

        for tag in options.get("tags") or []:
            if tag not in item.tags:
                item.tags.append(tag)

        if options.get("metadata"):
            item.metadata = {**item.metadata, **options["metadata"]}

    def _randomize_item(self, item: Item, level: float):
        item.rarity = Rarity.COMMON
        for threshold, rarity_name in RARITY_LEVEL_THRESHOLDS:
            if level >= threshold:
                item.rarity = Rarity[rarity_name]
                break

        if item.is_equippable and item.stats:
            multiplier = (RANDOM_STAT_BASE_MULTIPLIER + level * RANDOM_STAT_LEVEL_MULTIPLIER
                          + random.random() * RANDOM_STAT_SPREAD)
            self._scale_stats(item, multiplier)

        if item.rarity >= Rarity[RANDOM_NAME_MIN_RARITY]:
            self._randomize_name(item)

        if item.color is not None:
            item.color = self._randomize_color(item.color, level)

        item.value = round_half_up(item.value * (1 + level * RANDOM_VALUE_LEVEL_MULTIPLIER))

        if level >= RANDOM_EFFECT_MIN_LEVEL and item.is_equippable:
            effect = self._generate_random_effect(level)
            if effect:
                item.effects.append(effect)

    @staticmethod
    def _scale_stats(item: Item, multiplier: float):
        for stat, value in item.stats.items():
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                item.stats[stat] = round_half_up(value * multiplier)

    def _randomize_color(self, color: Any, level: float) -> Any:
        """Perturbs color in its own representation: rgb/hsl dicts, '#rrggbb' strings or 0xRRGGBB ints."""
        variance = RANDOM_COLOR_BASE_VARIANCE + level * RANDOM_COLOR_LEVEL_VARIANCE

        def jitter(spread: float) -> float:
            return random.random() * spread * 2 - spread

        if isinstance(color, dict):
            if "r" in color:
                return {**color, **{c: clamp(color[c] + jitter(variance), 0, 1) for c in ("r", "g", "b")}}
            if "h" in color:
                return {
                    **color,
                    "h": (color["h"] + jitter(RANDOM_HUE_SHIFT)) % 360,
                    "s": clamp(color["s"] + jitter(RANDOM_SAT_LIGHT_SHIFT), 0, 1),
                    "l": clamp(color["l"] + jitter(RANDOM_SAT_LIGHT_SHIFT), 0, 1),
                }
            return color

        if isinstance(color, (str, int)) and not isinstance(color, bool):
            try:
                if isinstance(color, int):
                    rgb = pygame.Color((color >> 16) & 0xFF, (color >> 8) & 0xFF, color & 0xFF)
                else:
                    rgb = pygame.Color(color)
            except ValueError:
                Logger.warning("ItemFactory", f"Unrecognized color '{color}', left unchanged.")
                return color

            for channel in ("r", "g", "b"):
                shifted = getattr(rgb, channel) + jitter(variance) * 255
                setattr(rgb, channel, int(clamp(round(shifted), 0, 255)))

            if isinstance(color, int):
                return (rgb.r << 16) | (rgb.g << 8) | rgb.b
            return f"#{rgb.r:02x}{rgb.g:02x}{rgb.b:02x}"
        return color

    def _apply_quality_modifier(self, item: Item, quality: Any):
        quality = Rarity.lookup(quality)
        if quality is None:
            Logger.warning("ItemFactory", f"Unknown quality for {item.obj_id}; rarity left unchanged.")
            modifier = 1.0
        else:
            modifier = self.quality_modifiers.get(quality.name, 1.0)

        if item.is_equippable and item.stats:
            self._scale_stats(item, modifier)
        item.value = round_half_up(item.value * modifier)

        # Quality only ever raises rarity
        if quality is not None and quality > item.rarity:
            item.rarity = quality

        item.tooltip_color = TOOLTIP_COLORS.get(item.rarity.name, TOOLTIP_COLORS["COMMON"])

    def _randomize_name(self, item: Item):
        if not self.prefixes and not self.suffixes:
            return

        new_name = item.name
        if self.prefixes and random.random() > 0.5:
            new_name = f"{_pick(self.prefixes)} {new_name}"
        if self.suffixes and random.random() > 0.5:
            new_name = f"{new_name} of {_pick(self.suffixes)}"
        item.name = new_name

    def _generate_random_effect(self, level: float) -> Optional[Dict[str, Any]]:
        effect_type = _pick(list(RANDOM_EFFECTS.keys()))
        archetype = RANDOM_EFFECTS[effect_type]
        power = round_half_up(level * (0.5 + random.random() * 0.5))

        params: Dict[str, Any] = {"power": power}
        if effect_type == "elementalDamage":
            params["element"] = _pick(ELEMENTAL_TYPES)
        if effect_type == "lifeSteal":
            params["percent"] = max(1, round_half_up(power / 2))

        return {
            "id": f"random_{effect_type}_{int(time.time() * 1000)}",
            "name": f"Random {effect_type}",
            "type": effect_type,
            "description": archetype["description"].format(**params),
            "data": archetype["data"](**params),
        }

    def create_multiple(self, template_id: str, count: int, **options) -> List[Item]:
        items = []
        for _ in range(count):
            item = self.create_item(template_id, **options)
            if item:
                items.append(item)
        return items

    def create_random_item(self, category: str, **options) -> Optional[Item]:
        """Picks a random template from category. Randomizes unless randomize=False is passed."""
        if not self.catalog:
            Logger.error("ItemFactory", "ItemFactory requires a catalog to create items.")
            return None

        candidates = self.catalog.get_items_by_category(category)
        if not candidates:
            Logger.warning("ItemFactory", f"No items found in category: {category}")
            return None

        template = _pick(candidates)
        if options.get("randomize") is not False:
            options["randomize"] = True
        return self.create_item(template.obj_id, **options)

    def get_loot_table(self, table_id: str):
        if not self.catalog:
            return None
        return next((t for t in self.catalog.get_loot_tables() if t.table_id == table_id), None)

    def create_loot(self, table_id: str, **options) -> List[LootDrop]:
        """Rolls a catalog loot table. Custom options and randomization apply to every drop."""
        if not self.catalog:
            Logger.error("ItemFactory", "ItemFactory requires a catalog to create loot.")
            return []

        table = self.get_loot_table(table_id)
        if not table:
            Logger.warning("ItemFactory", f"Loot table not found: {table_id}")
            return []

        loot = []
        for item_id, count in table.roll():
            template = self.catalog.get_item_by_id(item_id)
            if not template:
                Logger.warning("ItemFactory", f"Loot table '{table_id}' references unknown item '{item_id}'.")
                continue
            item = template.clone()
            self._apply_custom_options(item, options)
            if options.get("randomize"):
                self._randomize_item(item, options.get("randomize_level", 1))
            item.quantity = count
            loot.append(LootDrop(item=item, quantity=count))
        return loot

    def create_set_items(self, set_id: str, **options) -> List[Item]:
        """Creates every piece of an equipment set at the set's rarity."""
        if not self.catalog:
            Logger.error("ItemFactory", "ItemFactory requires a catalog to create set items.")
            return []

        set_data = self.catalog.get_equipment_set(set_id)
        if not set_data or not set_data.get("pieces"):
            Logger.error("ItemFactory", f"Equipment set not found or has no pieces: {set_id}")
            return []

        piece_options = dict(options)
        piece_options["quality"] = set_data.get("rarity", "COMMON")
        piece_options["metadata"] = {**(options.get("metadata") or {}), "setId": set_id}

        items = [self.create_item(piece_id, **piece_options) for piece_id in set_data["pieces"]]
        return [item for item in items if item is not None]
