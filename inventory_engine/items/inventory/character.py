# inventory_engine/items/inventory/character.py
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from inventory_engine.config import (
    CHARACTER_GRID_HEIGHT, CHARACTER_GRID_WIDTH, CHARACTER_MAX_WEIGHT, CHARACTER_QUICK_SLOT_COUNT,
    CHARACTER_STAT_WEIGHTS, CURRENCY_DEFAULTS
)
from inventory_engine.items.item import Item
from inventory_engine.utils.events import CharacterEvent, EquipmentEvent, Event, InventoryEvent
from inventory_engine.utils.logger import Logger
from .core import Inventory
from .persistence import ItemLoader, resolve_item


@dataclass
class QuickSlot:
    """Hotbar entry pointing at an item held in the inventory."""
    index: int
    item: Optional[Item] = None
    quantity: int = 0
    cooldown: float = 0.0
    is_selected: bool = False

    @property
    def is_empty(self) -> bool:
        return self.item is None

    def reset(self):
        self.item = None
        self.quantity = 0
        self.cooldown = 0.0

    def to_dict(self) -> Dict[str, Any]:
        if self.is_empty:
            return {"index": self.index, "isEmpty": True}
        return {"index": self.index, "itemId": self.item.obj_id, "isEmpty": False}


class CharacterInventory(Inventory):
    """
    A character's bag: a grid inventory plus currencies, quick slots and an
    optional equipment collaborator.

    The equipment object must provide equip_item(item), unequip_slot(slot_type),
    get_slot(slot_type), get_equipped_items() and emit EquipmentEvent
    notifications (EquipmentLoadout does).
    """

    EVENT_TYPES = (InventoryEvent, CharacterEvent)

    def __init__(self, inventory_id: Optional[str] = None, name: str = "Character Inventory",
                 is_grid_based: bool = True,
                 width: int = CHARACTER_GRID_WIDTH, height: int = CHARACTER_GRID_HEIGHT,
                 max_weight: Optional[float] = CHARACTER_MAX_WEIGHT,
                 equipment: Any = None,
                 max_quick_slots: int = CHARACTER_QUICK_SLOT_COUNT,
                 auto_equip_better_items: bool = False, auto_equip_new_items: bool = False,
                 currencies: Optional[Dict[str, Dict[str, Any]]] = None,
                 max_currencies: Optional[Dict[str, int]] = None,
                 **kwargs):
        super().__init__(inventory_id=inventory_id, name=name, is_grid_based=is_grid_based,
                         width=width, height=height, max_weight=max_weight, **kwargs)

        self.equipment = None
        self.auto_equip_better_items = auto_equip_better_items
        self.auto_equip_new_items = auto_equip_new_items
        self._handling_equipment = False

        self.max_quick_slots = max_quick_slots
        self.quick_slots: List[QuickSlot] = [QuickSlot(index=i) for i in range(max_quick_slots)]

        self.max_currencies = dict(max_currencies or {})
        self.currencies: Dict[str, Dict[str, Any]] = {}
        self._init_currencies(currencies)

        self.subscribe(InventoryEvent.ITEM_ADDED, self._check_auto_equip)
        if equipment is not None:
            self.connect_equipment(equipment)

    def _init_currencies(self, currencies: Optional[Dict[str, Dict[str, Any]]]):
        if currencies is None:
            currencies = {
                name: {"amount": 0, "max": self.max_currencies.get(name, data["max"])}
                for name, data in CURRENCY_DEFAULTS.items()
            }
        for name, data in currencies.items():
            self.currencies[name] = {
                "amount": data.get("amount", 0),
                "max": data.get("max") or self.max_currencies.get(name),
            }

    # --- Equipment hookup ---

    def connect_equipment(self, equipment: Any):
        if equipment is None:
            return
        if self.equipment is not None:
            self._disconnect_equipment()
        self.equipment = equipment
        if self.owner is not None and hasattr(equipment, "connect_to_owner"):
            equipment.connect_to_owner(self.owner)
        equipment.subscribe(EquipmentEvent.ITEM_EQUIPPED, self._on_item_equipped)
        equipment.subscribe(EquipmentEvent.ITEM_UNEQUIPPED, self._on_item_unequipped)

    def _disconnect_equipment(self):
        self.equipment.unsubscribe(EquipmentEvent.ITEM_EQUIPPED, self._on_item_equipped)
        self.equipment.unsubscribe(EquipmentEvent.ITEM_UNEQUIPPED, self._on_item_unequipped)
        self.equipment = None

    def set_owner(self, owner: Any):
        super().set_owner(owner)
        if self.equipment is not None and hasattr(self.equipment, "connect_to_owner"):
            self.equipment.connect_to_owner(owner)

    def _on_item_equipped(self, event: Event):
        item = event.get("item")
        if item is None:
            return
        source = event.get("source_item") or item
        # Only the instance that came out of this bag is removed from it
        bag_slot = next((slot for slot in self.slots if slot.item is source and not slot.locked), None)
        if bag_slot is None and source.stackable:
            bag_slot = next((slot for slot in self.find_item_slots(source.obj_id)
                             if not slot.locked and slot.item.can_stack_with(source)), None)
        if bag_slot is None:
            return

        self._handling_equipment = True
        try:
            self.remove_item_from_slot(bag_slot, 1)
        finally:
            self._handling_equipment = False
        self.emit(CharacterEvent.ITEM_EQUIPPED, item=item, slot=event.get("slot"))

    def _on_item_unequipped(self, event: Event):
        item = event.get("item")
        if item is None:
            return
        self._handling_equipment = True
        try:
            added = self.add_item(item, 1)
        finally:
            self._handling_equipment = False

        if added == 0:
            Logger.info("CharacterInventory", f"{self.id}: no room for unequipped {item.name}, dropping it.")
            self.emit(CharacterEvent.ITEM_DROPPED, item=item, reason="inventory_full")
        else:
            self.emit(CharacterEvent.ITEM_UNEQUIPPED, item=item, slot=event.get("slot"))

    def _check_auto_equip(self, event: Event):
        if self.equipment is None or self._handling_equipment or self._sorting:
            return
        if not (self.auto_equip_better_items or self.auto_equip_new_items):
            return

        item = event.get("item")
        if item is None or not item.is_equippable or not item.equip_slot:
            return
        equip_slot = self.equipment.get_slot(item.equip_slot)
        if equip_slot is None:
            return

        if self.auto_equip_new_items and equip_slot.is_empty():
            self.equip_item(item)
            return

        if self.auto_equip_better_items:
            current = equip_slot.item
            if current is None or self._compare_items(item, current) > 0:
                self.equip_item(item)

    def _compare_items(self, item_a: Item, item_b: Item) -> float:
        """Positive when item_a is better: rarity first, then weighted stat score."""
        if item_a.rarity != item_b.rarity:
            return int(item_a.rarity) - int(item_b.rarity)
        return self._calculate_stat_score(item_a) - self._calculate_stat_score(item_b)

    def _calculate_stat_score(self, item: Item) -> float:
        weights = self._get_stat_weights()
        return sum(value * weights.get(stat, 1) for stat, value in item.stats.items())

    def _get_stat_weights(self) -> Dict[str, float]:
        weights = dict(CHARACTER_STAT_WEIGHTS["DEFAULT"])
        character_class = getattr(self.owner, "character_class", None) if self.owner is not None else None
        if character_class:
            weights.update(CHARACTER_STAT_WEIGHTS.get(str(character_class).upper(), {}))
        return weights

    def equip_item(self, item: Optional[Item]) -> bool:
        """Equips an item held in this bag through the connected equipment."""
        if self.equipment is None or item is None or not item.is_equippable:
            return False
        if not self.has_item(item.obj_id):
            return False
        return bool(self.equipment.equip_item(item))

    def unequip_slot(self, slot_type: str) -> bool:
        """Unequips into this bag. Refuses when the bag could not take the item back."""
        if self.equipment is None:
            return False
        equip_slot = self.equipment.get_slot(slot_type)
        if equip_slot is None or equip_slot.item is None:
            return False
        if not self.can_add_item(equip_slot.item, 1):
            return False
        return self.equipment.unequip_slot(slot_type) is not None

    # --- Currency ---

    def add_currency(self, currency_type: str, amount: int) -> int:
        """Adds currency up to its cap. Returns the amount actually added."""
        if not currency_type or amount <= 0:
            return 0

        data = self.currencies.get(currency_type)
        if data is None:
            data = {"amount": 0, "max": self.max_currencies.get(currency_type)}
            self.currencies[currency_type] = data

        current = data["amount"]
        new_amount = current + amount if data["max"] is None else min(current + amount, data["max"])
        added = new_amount - current
        if added <= 0:
            return 0

        data["amount"] = new_amount
        self.emit(CharacterEvent.CURRENCY_ADDED, currency_type=currency_type, amount=added)
        return added

    def remove_currency(self, currency_type: str, amount: int) -> bool:
        """All-or-nothing."""
        if not currency_type or amount <= 0:
            return False
        data = self.currencies.get(currency_type)
        if data is None or data["amount"] < amount:
            return False
        data["amount"] -= amount
        self.emit(CharacterEvent.CURRENCY_REMOVED, currency_type=currency_type, amount=amount)
        return True

    def get_currency(self, currency_type: str) -> int:
        data = self.currencies.get(currency_type)
        return data["amount"] if data else 0

    # --- Quick slots ---

    def get_quick_slot(self, slot_index: int) -> Optional[QuickSlot]:
        if 0 <= slot_index < len(self.quick_slots):
            return self.quick_slots[slot_index]
        return None

    def set_quick_slot(self, slot_index: int, item: Optional[Item]) -> bool:
        quick_slot = self.get_quick_slot(slot_index)
        if quick_slot is None or item is None:
            return False
        if not self.has_item(item.obj_id):
            return False

        quick_slot.reset()
        quick_slot.item = self.get_item_instance(item.obj_id)
        quick_slot.quantity = self.get_item_count(item.obj_id)
        self.emit(CharacterEvent.QUICK_SLOT_SET, slot_index=slot_index, item=quick_slot.item)
        return True

    def clear_quick_slot(self, slot_index: int) -> bool:
        quick_slot = self.get_quick_slot(slot_index)
        if quick_slot is None or quick_slot.is_empty:
            return False
        old_item = quick_slot.item
        quick_slot.reset()
        self.emit(CharacterEvent.QUICK_SLOT_CLEARED, slot_index=slot_index, old_item=old_item)
        return True

    def use_quick_slot(self, slot_index: int) -> bool:
        quick_slot = self.get_quick_slot(slot_index)
        if quick_slot is None or quick_slot.is_empty:
            return False
        if quick_slot.cooldown > 0:
            return False

        item = quick_slot.item
        if not self.has_item(item.obj_id):
            self.clear_quick_slot(slot_index)
            return False

        if not item.use(self.owner):
            return False

        if item.is_consumable:
            self.remove_item(item.obj_id, 1)
            quick_slot.quantity = self.get_item_count(item.obj_id)
            if quick_slot.quantity <= 0:
                self.clear_quick_slot(slot_index)
        if item.cooldown:
            quick_slot.cooldown = item.cooldown

        self.emit(CharacterEvent.QUICK_SLOT_USED, slot_index=slot_index, item=item)
        return True

    def select_quick_slot(self, slot_index: int) -> bool:
        if self.get_quick_slot(slot_index) is None:
            return False
        for quick_slot in self.quick_slots:
            quick_slot.is_selected = quick_slot.index == slot_index
        self.emit(CharacterEvent.QUICK_SLOT_SELECTED, slot_index=slot_index)
        return True

    def update_quick_slots(self, delta_time: float):
        """Ticks cooldowns down and keeps quantities in step with the bag."""
        for quick_slot in self.quick_slots:
            if quick_slot.cooldown > 0:
                quick_slot.cooldown = max(0.0, quick_slot.cooldown - delta_time)
                if quick_slot.cooldown == 0:
                    self.emit(CharacterEvent.QUICK_SLOT_COOLDOWN_COMPLETE,
                              slot_index=quick_slot.index, item=quick_slot.item)

            if not quick_slot.is_empty:
                count = self.get_item_count(quick_slot.item.obj_id)
                if count != quick_slot.quantity:
                    quick_slot.quantity = count
                    if count <= 0:
                        self.clear_quick_slot(quick_slot.index)

    def update(self, delta_time: float):
        super().update(delta_time)
        self.update_quick_slots(delta_time)
        if self.equipment is not None and hasattr(self.equipment, "update"):
            self.equipment.update(delta_time)

    def get_all_character_items(self) -> List[Dict[str, Any]]:
        """Bag contents followed by equipped items (quantity 1, equipped True)."""
        items = self.get_all_items()
        if self.equipment is not None:
            for item in self.equipment.get_equipped_items().values():
                items.append({"item": item, "quantity": 1, "equipped": True})
        return items

    # --- Persistence ---

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["currencies"] = {
            name: {"amount": entry["amount"], "max": entry["max"]}
            for name, entry in self.currencies.items()
        }
        data["quickSlots"] = [quick_slot.to_dict() for quick_slot in self.quick_slots]
        data["autoEquipBetterItems"] = self.auto_equip_better_items
        data["autoEquipNewItems"] = self.auto_equip_new_items
        return data

    async def from_dict(self, data: Dict[str, Any], item_loader: ItemLoader) -> bool:
        if not await super().from_dict(data, item_loader):
            return False

        if "currencies" in data:
            self.currencies = {
                name: {"amount": entry.get("amount", 0), "max": entry.get("max")}
                for name, entry in data["currencies"].items()
            }

        for quick_slot in self.quick_slots:
            quick_slot.reset()
        for slot_data in data.get("quickSlots", []):
            if slot_data.get("isEmpty", True):
                continue
            item = await resolve_item(item_loader, slot_data.get("itemId"))
            if item is not None:
                self.set_quick_slot(slot_data.get("index", -1), item)

        if "autoEquipBetterItems" in data:
            self.auto_equip_better_items = data["autoEquipBetterItems"]
        if "autoEquipNewItems" in data:
            self.auto_equip_new_items = data["autoEquipNewItems"]
        return True

    def destroy(self):
        if self.equipment is not None:
            self._disconnect_equipment()
        self.quick_slots = []
        self.currencies.clear()
        super().destroy()
