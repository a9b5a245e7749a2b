# inventory_engine/items/inventory/persistence.py
import asyncio
import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, Optional, Union, cast

from inventory_engine.items.item import Item
from inventory_engine.utils.events import InventoryEvent
from inventory_engine.utils.logger import Logger

if TYPE_CHECKING:
    from inventory_engine.items.inventory.core import Inventory

ItemLoader = Callable[[str], Union[Optional[Item], Awaitable[Optional[Item]]]]


async def resolve_item(item_loader: ItemLoader, item_id: str) -> Optional[Item]:
    """Calls the loader and awaits its result when it returns an awaitable."""
    result = item_loader(item_id)
    if inspect.isawaitable(result):
        result = await result
    return result


class InventoryPersistenceMixin:
    """Mixin handling JSON-shaped serialization/deserialization."""

    def to_dict(self) -> Dict[str, Any]:
        """Serialize slot contents as item references keyed by id and slot index."""
        inventory = cast('Inventory', self)

        items_data = [
            {"itemId": slot.item.obj_id, "quantity": slot.quantity, "slotIndex": slot.index}
            for slot in inventory.slots if slot.item is not None
        ]
        return {
            "id": inventory.id,
            "name": inventory.name,
            "isGridBased": inventory.is_grid_based,
            "width": inventory.width,
            "height": inventory.height,
            "maxWeight": inventory.max_weight,
            "currentWeight": inventory.current_weight,
            "items": items_data,
        }

    async def from_dict(self, data: Dict[str, Any], item_loader: ItemLoader) -> bool:
        """
        Replaces the contents with the serialized ones. Items are resolved concurrently.

        Best-effort: every entry that resolves is inserted, failures are logged and not
        rolled back. Returns True only if every entry resolved and was inserted in full.
        """
        inventory = cast('Inventory', self)
        if not data or item_loader is None:
            return False

        inventory.clear()
        inventory.id = data.get("id") or inventory.id
        inventory.name = data.get("name") or inventory.name
        if "maxWeight" in data:
            inventory.max_weight = data["maxWeight"]

        width, height = data.get("width"), data.get("height")
        if inventory.grid is not None and width and height \
                and (width, height) != (inventory.width, inventory.height):
            inventory.resize(width, height)

        entries = data.get("items", [])
        results = await asyncio.gather(
            *(resolve_item(item_loader, entry.get("itemId")) for entry in entries),
            return_exceptions=True
        )

        success = True
        for entry, item in zip(entries, results):
            item_id = entry.get("itemId")
            if isinstance(item, BaseException):
                Logger.warning("Inventory", f"{inventory.id}: loading item '{item_id}' raised {item!r}")
                success = False
                continue
            if item is None:
                Logger.warning("Inventory", f"{inventory.id}: failed to load item '{item_id}'")
                success = False
                continue
            if not self._restore_entry(item, entry.get("quantity", 1), entry.get("slotIndex")):
                Logger.warning("Inventory", f"{inventory.id}: could not restore {item_id} in full")
                success = False

        inventory.emit(InventoryEvent.INVENTORY_LOADED, success=success, data=data)
        return success

    def _restore_entry(self, item: Item, quantity: int, slot_index: Optional[int]) -> bool:
        inventory = cast('Inventory', self)

        # The recorded slot is used when it is free and the weight fits
        slot = inventory.get_slot(slot_index) if slot_index is not None else None
        if slot is not None and slot.is_empty() and inventory._max_affordable(item, quantity) == quantity:
            if slot.set_item(item, quantity):
                placed = slot.quantity
                if placed >= quantity:
                    return True
                return inventory.add_item(item, quantity - placed) == quantity - placed

        return inventory.add_item(item, quantity) == quantity
