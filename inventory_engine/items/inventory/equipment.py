# inventory_engine/items/inventory/equipment.py
from typing import Any, Dict, List, Optional, Union

from inventory_engine.config import EQUIPMENT_SLOT_TYPES, SLOT_TYPE_MAINHAND, SLOT_TYPE_OFFHAND
from inventory_engine.items.item import Item
from inventory_engine.utils.events import EquipmentEvent, InventoryEvent
from inventory_engine.utils.logger import Logger
from .core import Inventory
from .slot import InventorySlot


class EquipmentLoadout(Inventory):
    """
    Worn equipment: one typed slot per body location, no weight ceiling.

    This is the equipment collaborator CharacterInventory listens to. Equipping
    a two-handed main hand weapon displaces the off hand, and equipping an off
    hand item displaces a two-handed main hand weapon.
    """

    EVENT_TYPES = (InventoryEvent, EquipmentEvent)

    def __init__(self, inventory_id: Optional[str] = None, name: str = "Equipment",
                 slot_types: Optional[List[str]] = None, owner: Any = None):
        slot_types = slot_types or EQUIPMENT_SLOT_TYPES
        super().__init__(
            inventory_id=inventory_id, name=name, is_grid_based=False, max_weight=None,
            owner=owner, slot_configs=[{"slot_type": slot_type} for slot_type in slot_types],
        )

    def get_slot(self, slot_ref: Union[str, int]) -> Optional[InventorySlot]:
        """Accepts a slot type ("MAINHAND") or a slot index."""
        if isinstance(slot_ref, str):
            return self.get_slot_by_type(slot_ref)
        return super().get_slot(slot_ref)

    def connect_to_owner(self, owner: Any):
        self.set_owner(owner)

    def _displaced_by(self, item: Item, slot: InventorySlot) -> List[InventorySlot]:
        displaced = [slot] if slot.item is not None else []
        if slot.slot_type == SLOT_TYPE_MAINHAND and item.is_two_handed:
            offhand = self.get_slot_by_type(SLOT_TYPE_OFFHAND)
            if offhand is not None and offhand.item is not None:
                displaced.append(offhand)
        if slot.slot_type == SLOT_TYPE_OFFHAND:
            mainhand = self.get_slot_by_type(SLOT_TYPE_MAINHAND)
            if mainhand is not None and mainhand.item is not None and mainhand.item.is_two_handed:
                displaced.append(mainhand)
        return displaced

    def equip_item(self, item: Optional[Item]) -> bool:
        if item is None or not item.is_equippable or not item.equip_slot:
            Logger.warning("EquipmentLoadout", f"Cannot equip {item.name if item else None}: not equippable.")
            return False

        slot = self.get_slot_by_type(item.equip_slot)
        if slot is None:
            Logger.warning("EquipmentLoadout", f"Cannot equip {item.name}: no {item.equip_slot} slot.")
            return False
        if slot.locked:
            return False

        displaced = self._displaced_by(item, slot)
        if any(other.locked for other in displaced):
            return False

        removed = []
        for other in displaced:
            old_item, _ = other.clear_item()
            removed.append((old_item, other))

        # Stackable items are equipped as their own instance so bag stacks stay unequipped
        equipped = item.clone() if item.stackable else item
        if not slot.set_item(equipped, 1):
            Logger.warning("EquipmentLoadout", f"Slot {slot.slot_type} rejected {item.name}.")
            for old_item, other in removed:
                other.set_item(old_item, 1)
            return False

        equipped.on_equip()
        self.emit(EquipmentEvent.ITEM_EQUIPPED, item=equipped, source_item=item, slot=slot)
        for old_item, other in removed:
            old_item.on_unequip()
            self.emit(EquipmentEvent.ITEM_UNEQUIPPED, item=old_item, slot=other)
        return True

    def unequip_slot(self, slot_type: str) -> Optional[Item]:
        """Empties the slot and returns what it held."""
        slot = self.get_slot_by_type(slot_type)
        if slot is None or slot.item is None:
            return None
        item, _ = slot.clear_item()
        if item is None:
            return None
        item.on_unequip()
        self.emit(EquipmentEvent.ITEM_UNEQUIPPED, item=item, slot=slot)
        return item

    def get_equipped_items(self) -> Dict[str, Item]:
        return {slot.slot_type: slot.item for slot in self.slots if slot.item is not None}

    def get_equipped_stats(self) -> Dict[str, float]:
        """Sum of stats over every equipped item."""
        totals: Dict[str, float] = {}
        for item in self.get_equipped_items().values():
            for stat, value in item.stats.items():
                totals[stat] = totals.get(stat, 0) + value
        return totals
