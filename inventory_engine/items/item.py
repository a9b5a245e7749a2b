# inventory_engine/items/item.py
import copy
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple, Union

from inventory_engine.config import (
    ITEM_DEFAULT_MAX_STACK, ITEM_DEFAULT_STACKABLE, ITEM_DEFAULT_WEIGHT, TOOLTIP_COLORS
)
from inventory_engine.game_object import GameObject


class Rarity(IntEnum):
    JUNK = 0
    COMMON = 1
    UNCOMMON = 2
    RARE = 3
    EPIC = 4
    LEGENDARY = 5

    def __str__(self) -> str:
        return self.name

    @classmethod
    def lookup(cls, value: Union['Rarity', str, int, None]) -> Optional['Rarity']:
        """Accepts a member, a case-insensitive name or an int. None when unrecognized."""
        if value is None: return None
        if isinstance(value, cls): return value
        if isinstance(value, str):
            return cls.__members__.get(value.strip().upper())
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            return None

    @classmethod
    def parse(cls, value: Union['Rarity', str, int, None], default: 'Rarity' = None) -> 'Rarity':
        """Like lookup, but unknown values give default (COMMON)."""
        rarity = cls.lookup(value)
        if rarity is not None: return rarity
        return default if default is not None else cls.COMMON


class Item(GameObject):
    """
    Base class for every item the engine stores.

    Instances are created per-stack from catalog templates. All units in one
    slot share a single Item instance; the slot tracks the quantity.
    """

    # Attributes serialized by to_dict, in order. Everything else lives in properties.
    _FIELDS = (
        "item_type", "sub_type", "rarity", "value", "weight", "stackable", "max_stack_size",
        "equip_slot", "is_equippable", "is_two_handed", "is_consumable", "is_quest_item",
        "durability", "max_durability", "required_level", "set_id", "cooldown",
        "stats", "effects", "tags", "metadata", "width", "height",
        "icon", "model", "color", "scale", "attachment_point", "attachment_offset",
        "attachment_rotation", "tooltip_color", "quantity",
    )

    def __init__(self, obj_id: Optional[str] = None, name: str = "Unknown Item",
                 description: str = "", item_type: str = "MISC", sub_type: str = "",
                 rarity: Union[Rarity, str, int] = Rarity.COMMON,
                 value: int = 0, weight: float = ITEM_DEFAULT_WEIGHT,
                 stackable: bool = ITEM_DEFAULT_STACKABLE,
                 max_stack_size: int = ITEM_DEFAULT_MAX_STACK,
                 equip_slot: Optional[str] = None, is_equippable: bool = False,
                 is_two_handed: bool = False, is_consumable: bool = False,
                 is_quest_item: bool = False,
                 durability: Optional[float] = None, max_durability: Optional[float] = None,
                 required_level: int = 0, set_id: Optional[str] = None, cooldown: float = 0,
                 stats: Optional[Dict[str, float]] = None,
                 effects: Optional[List[Dict[str, Any]]] = None,
                 tags: Optional[List[str]] = None,
                 metadata: Optional[Dict[str, Any]] = None,
                 width: int = 1, height: int = 1,
                 icon: Optional[str] = None, model: Optional[str] = None,
                 color: Any = None, scale: float = 1.0,
                 attachment_point: Optional[str] = None,
                 attachment_offset: Optional[Dict[str, float]] = None,
                 attachment_rotation: Optional[Dict[str, float]] = None,
                 tooltip_color: Optional[str] = None, quantity: int = 1,
                 **kwargs):
        super().__init__(obj_id, name, description)
        self.item_type = (item_type or "MISC").upper()
        self.sub_type = sub_type
        self.rarity = Rarity.parse(rarity)
        self.value = value
        self.weight = weight
        self.stackable = stackable
        self.max_stack_size = max(1, int(max_stack_size)) if stackable else 1
        self.equip_slot = equip_slot.upper() if equip_slot else None
        self.is_equippable = is_equippable
        self.is_two_handed = is_two_handed
        self.is_consumable = is_consumable
        self.is_quest_item = is_quest_item
        self.durability = durability
        self.max_durability = max_durability if max_durability is not None else durability
        self.required_level = required_level
        self.set_id = set_id
        self.cooldown = cooldown
        self.stats: Dict[str, float] = dict(stats or {})
        self.effects: List[Dict[str, Any]] = [dict(e) for e in (effects or [])]
        self.tags: List[str] = list(tags or [])
        self.metadata: Dict[str, Any] = dict(metadata or {})
        self.width = max(1, int(width))
        self.height = max(1, int(height))

        # Visual descriptor, consumed by rendering only
        self.icon = icon
        self.model = model
        self.color = color
        self.scale = scale
        self.attachment_point = attachment_point
        self.attachment_offset = dict(attachment_offset or {"x": 0, "y": 0, "z": 0})
        self.attachment_rotation = dict(attachment_rotation or {"x": 0, "y": 0, "z": 0})
        self.tooltip_color = tooltip_color

        # Factory-side quantity hint; inventories track real quantities per slot
        self.quantity = quantity
        self.is_equipped = False
        self.owner = None

        for key, extra in kwargs.items():
            if key not in ("id", "type"):
                self.update_property(key, extra)

    # --- Queries ---

    def get_stat(self, stat_name: str) -> float:
        return self.stats.get(stat_name, 0)

    def has_tag(self, tag: str) -> bool:
        return tag in self.tags

    def can_equip(self) -> bool:
        return self.is_equippable and not self.is_equipped

    def is_broken(self) -> bool:
        return self.durability is not None and self.durability <= 0

    def get_tooltip_color(self) -> str:
        return self.tooltip_color or TOOLTIP_COLORS.get(self.rarity.name, TOOLTIP_COLORS["COMMON"])

    def get_footprint(self) -> Tuple[int, int]:
        return self.width, self.height

    def stacking_key(self) -> Tuple[Any, ...]:
        return (self.obj_id, self.durability)

    def can_stack_with(self, other: Optional['Item']) -> bool:
        """Stack compatibility: same id, both stackable, not equipped, same wear, no noStack flag."""
        if other is None: return False
        if not self.stackable or not other.stackable:
            return False
        if self.obj_id != other.obj_id:
            return False
        if self.is_equipped or other.is_equipped:
            return False
        if (self.durability is not None and other.durability is not None
                and self.durability != other.durability):
            return False
        if self.metadata.get("noStack") or other.metadata.get("noStack"):
            return False
        return True

    # --- Behaviour ---

    def on_equip(self):
        self.is_equipped = True

    def on_unequip(self):
        self.is_equipped = False

    def use(self, target: Any = None) -> bool:
        """
        Applies the item's effects to target. Only consumables can be used.
        Each effect dict is passed to target.apply_item_effect(effect, item) when
        the target exposes it; callables under "apply" are invoked directly.
        """
        if not self.is_consumable:
            return False

        for effect in self.effects:
            apply = effect.get("apply")
            if callable(apply):
                apply(target, self)
            elif target is not None and hasattr(target, "apply_item_effect"):
                target.apply_item_effect(effect, self)
        return True

    def damage(self, amount: float) -> bool:
        """Reduces durability. Returns True once the item is broken."""
        if self.durability is None or self.max_durability is None:
            return False
        self.durability = max(0, self.durability - amount)
        return self.durability <= 0

    def repair(self, amount: float) -> bool:
        if self.durability is None or self.max_durability is None:
            return False
        if self.durability >= self.max_durability:
            return False
        self.durability = min(self.max_durability, self.durability + amount)
        return True

    def split(self, amount: int) -> Optional['Item']:
        """Splits amount off the factory-side quantity into a new instance."""
        if amount <= 0 or amount >= self.quantity:
            return None
        new_stack = self.clone()
        new_stack.quantity = amount
        self.quantity -= amount
        return new_stack

    def set_owner(self, owner: Any):
        self.owner = owner

    def clone(self) -> 'Item':
        """Deep copy. The clone is never equipped and has no owner."""
        clone = self.__class__.from_dict(self.to_dict())
        # to_dict drops callables; the clone shares them by reference
        clone.effects = [
            {k: v if callable(v) else copy.deepcopy(v) for k, v in effect.items()}
            for effect in self.effects
        ]
        clone.is_equipped = False
        clone.owner = None
        return clone

    def get_description(self) -> str:
        desc = f"{self.name} ({self.rarity.name})"
        if self.description:
            desc += f"\n{self.description}"

        if self.is_equippable:
            desc += f"\nEquip: {self.equip_slot}"
            if self.stats:
                desc += "\nStats:"
                for stat, stat_value in self.stats.items():
                    sign = "+" if stat_value > 0 else ""
                    desc += f"\n  {stat}: {sign}{stat_value}"
            if self.required_level > 0:
                desc += f"\nRequires Level: {self.required_level}"
            if self.set_id:
                desc += f"\nPart of set: {self.set_id}"

        if self.is_consumable:
            desc += "\nConsumable"
            described = [e["description"] for e in self.effects if e.get("description")]
            if described:
                desc += "\nEffects:" + "".join(f"\n  {d}" for d in described)

        if self.durability is not None and self.max_durability is not None:
            desc += f"\nDurability: {self.durability}/{self.max_durability}"
        if self.value > 0:
            desc += f"\nValue: {self.value} gold"
        if self.weight > 0:
            desc += f"\nWeight: {self.weight}"
        return desc

    # --- Serialization ---

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        for key in self._FIELDS:
            data[key] = copy.deepcopy(getattr(self, key))
        data["rarity"] = self.rarity.name
        # Callables inside effects cannot be serialized
        data["effects"] = [
            {k: v for k, v in effect.items() if not callable(v)} for effect in self.effects
        ]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Item':
        kwargs = {key: copy.deepcopy(data[key]) for key in cls._FIELDS if key in data}
        item = cls(
            obj_id=data.get("obj_id") or data.get("id"),
            name=data.get("name", "Unknown Item"),
            description=data.get("description", ""),
            **kwargs
        )
        item.properties.update(copy.deepcopy(data.get("properties", {})))
        return item

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} {self.obj_id} '{self.name}' {self.rarity.name}>"
