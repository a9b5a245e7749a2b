# inventory_engine/items/inventory/display.py
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, cast

from inventory_engine.items.item import Item
from inventory_engine.utils.events import InventoryEvent
from inventory_engine.utils.logger import Logger

if TYPE_CHECKING:
    from inventory_engine.items.inventory.core import Inventory

SortKey = Callable[[Tuple[Item, int]], Any]


# Helper for sorting: type ascending, rarity descending, then name and id
def default_sort_key(entry: Tuple[Item, int]):
    item, quantity = entry
    return (item.item_type, -int(item.rarity), item.name, item.obj_id, -quantity)


class InventoryDisplayMixin:
    """Mixin for ordering the inventory and generating text representations of it."""

    def sort_items(self, key: Optional[SortKey] = None) -> bool:
        """
        Re-packs unlocked contents in key order. Grid inventories delegate to the grid;
        list inventories clear and re-add through add_item. Sorting an already sorted
        inventory leaves the layout unchanged.
        """
        inventory = cast('Inventory', self)
        key = key or inventory.sort_key or default_sort_key

        inventory._sorting = True
        try:
            if inventory.grid is not None:
                sorted_ok = inventory.grid.sort_items(key)
            else:
                sorted_ok = self._sort_slot_list(key)
        finally:
            inventory._sorting = False

        if sorted_ok:
            inventory.emit(InventoryEvent.INVENTORY_SORTED, inventory=inventory)
        return sorted_ok

    def _sort_slot_list(self, key: SortKey) -> bool:
        inventory = cast('Inventory', self)

        original = [(slot, slot.item, slot.quantity) for slot in inventory.slots
                    if slot.item is not None and not slot.locked]
        for slot, _, _ in original:
            slot.clear_item()

        entries = sorted(((item, quantity) for _, item, quantity in original), key=key)
        for item, quantity in entries:
            if inventory.add_item(item, quantity) < quantity:
                Logger.warning("Inventory", f"{inventory.id}: sorted layout does not fit. Restoring previous layout.")
                for slot in inventory.slots:
                    if slot.item is not None and not slot.locked:
                        slot.clear_item()
                for slot, original_item, original_quantity in original:
                    slot.set_item(original_item, original_quantity)
                return False
        return True

    def list_items(self) -> str:
        inventory = cast('Inventory', self)

        lines: List[str] = []
        for slot in inventory.slots:
            if slot.item is None:
                continue
            if slot.item.stackable and slot.quantity > 1:
                item_text = f"- {slot.item.name} (x{slot.quantity})"
            else:
                item_text = f"- {slot.item.name}"
            # Add weight info per item/stack
            item_text += f" [{slot.stack_weight:.1f} wt]"
            lines.append(item_text)

        if not lines:
            return f"{inventory.name} is empty."

        total_weight = inventory.get_total_weight()
        if inventory.has_weight_limit():
            weight_text = f"{total_weight:.1f}/{inventory.max_weight:.1f}"
            if total_weight / inventory.max_weight >= 0.9:
                weight_text += " (heavy)"
        else:
            weight_text = f"{total_weight:.1f}"

        used_slots = len(inventory.get_occupied_slots())
        slot_text = f"{used_slots}/{inventory.max_slots}"

        return "\n".join(lines) + f"\n\nTotal weight: {weight_text}\nSlots used: {slot_text}"
