# inventory_engine/items/inventory/core.py
import math
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple, Union

from inventory_engine.config import (
    INVENTORY_DEFAULT_HEIGHT, INVENTORY_DEFAULT_MAX_SLOTS, INVENTORY_DEFAULT_MAX_WEIGHT,
    INVENTORY_DEFAULT_WIDTH
)
from inventory_engine.items.item import Item
from inventory_engine.utils.events import Event, EventEmitter, GridEvent, InventoryEvent, SlotEvent
from inventory_engine.utils.logger import Logger
from .display import InventoryDisplayMixin
from .grid import InventoryGrid
from .persistence import InventoryPersistenceMixin
from .slot import InventorySlot

ItemRef = Union[str, Item]

# Slack for float comparisons on weight
WEIGHT_EPSILON = 1e-9


def _item_id(item_ref: Optional[ItemRef]) -> Optional[str]:
    if item_ref is None: return None
    return item_ref.obj_id if isinstance(item_ref, Item) else item_ref


class Inventory(EventEmitter, InventoryDisplayMixin, InventoryPersistenceMixin):
    """
    Manages a collection of items in inventory slots, grid-backed or list-backed.

    current_weight is maintained incrementally from slot change notifications, so
    it stays equal to sum(item.weight * quantity) whatever path mutated a slot.
    Mixins handle display strings, sorting and serialization.
    """

    EVENT_TYPES = (InventoryEvent,)

    def __init__(self, inventory_id: Optional[str] = None, name: str = "Inventory",
                 is_grid_based: bool = True,
                 width: int = INVENTORY_DEFAULT_WIDTH, height: int = INVENTORY_DEFAULT_HEIGHT,
                 max_slots: int = INVENTORY_DEFAULT_MAX_SLOTS,
                 max_weight: Optional[float] = INVENTORY_DEFAULT_MAX_WEIGHT,
                 owner: Any = None, auto_sort: bool = False,
                 sort_key: Optional[Callable[[Tuple[Item, int]], Any]] = None,
                 slot_configs: Optional[List[Dict[str, Any]]] = None):
        self.id = inventory_id or f"inventory_{uuid.uuid4().hex[:8]}"
        self.name = name
        self.is_grid_based = is_grid_based
        self.max_weight = max_weight
        self.current_weight = 0.0
        self.owner = owner
        self.auto_sort = auto_sort
        self.sort_key = sort_key
        self.is_destroyed = False
        self._sorting = False

        self.grid: Optional[InventoryGrid] = None
        self._slots: List[InventorySlot] = []

        if is_grid_based:
            self.grid = InventoryGrid(width, height, inventory=self)
            self.grid.subscribe(GridEvent.GRID_RESIZED, self._on_grid_resized)
            for slot in self.grid.slots:
                self._attach_slot(slot)
        else:
            configs = slot_configs if slot_configs is not None else [{} for _ in range(max_slots)]
            for index, config in enumerate(configs):
                slot = InventorySlot(index=index, inventory=self, **config)
                self._slots.append(slot)
                self._attach_slot(slot)

        self.emit(InventoryEvent.INVENTORY_INITIALIZED, inventory=self)

    # --- Slot bookkeeping ---

    @property
    def slots(self) -> List[InventorySlot]:
        return self.grid.slots if self.grid is not None else self._slots

    @property
    def width(self) -> int:
        return self.grid.width if self.grid is not None else len(self._slots)

    @property
    def height(self) -> int:
        return self.grid.height if self.grid is not None else 1

    @property
    def max_slots(self) -> int:
        return len(self.slots)

    def _attach_slot(self, slot: InventorySlot):
        slot.inventory = self
        slot.subscribe(SlotEvent.ITEM_CHANGED, self._on_slot_changed)

    def _on_slot_changed(self, event: Event):
        self.current_weight += event.get("weight", 0.0) - event.get("previous_weight", 0.0)
        if abs(self.current_weight) < WEIGHT_EPSILON:
            self.current_weight = 0.0

    def _on_grid_resized(self, event: Event):
        for slot in event.get("added_slots", []):
            self._attach_slot(slot)

    def has_weight_limit(self) -> bool:
        return self.max_weight is not None and self.max_weight > 0

    def set_owner(self, owner: Any):
        self.owner = owner
        self.emit(InventoryEvent.OWNER_CHANGED, owner=owner)

    # --- Slot queries ---

    def get_slot_count(self) -> int:
        return len(self.slots)

    def get_slot(self, index: int) -> Optional[InventorySlot]:
        if 0 <= index < len(self.slots):
            return self.slots[index]
        return None

    def get_all_slots(self) -> List[InventorySlot]:
        return list(self.slots)

    def get_occupied_slots(self) -> List[InventorySlot]:
        return [slot for slot in self.slots if slot.item is not None]

    def get_empty_slots(self) -> List[InventorySlot]:
        return [slot for slot in self.slots if slot.item is None and slot.covered_by is None]

    def has_empty_slots(self) -> bool:
        return any(not slot.locked for slot in self.get_empty_slots())

    def is_full(self) -> bool:
        """No free slot and every stack at its limit."""
        if self.has_empty_slots():
            return False
        return all(slot.is_full() for slot in self.get_occupied_slots())

    def get_slot_by_type(self, slot_type: str) -> Optional[InventorySlot]:
        slot_type = slot_type.upper()
        for slot in self.slots:
            if slot.slot_type == slot_type:
                return slot
        return None

    # --- Capacity arithmetic (pure) ---

    def _max_affordable(self, item: Item, quantity: int) -> int:
        if not self.has_weight_limit() or item.weight <= 0:
            return quantity
        if self.current_weight + item.weight * quantity <= self.max_weight + WEIGHT_EPSILON:
            return quantity
        spare = self.max_weight - self.current_weight
        return max(0, min(quantity, math.floor(spare / item.weight + WEIGHT_EPSILON)))

    def _count_placeable(self, item: Item, quantity: int) -> int:
        """How many units add_item would place given unlimited weight."""
        if self.grid is not None:
            return self.grid.count_placeable(item, quantity)

        remaining = quantity
        for slot in self.slots:
            if slot.item is not None and not slot.locked and slot.item.can_stack_with(item):
                remaining -= min(remaining, slot.get_remaining_space())
        for slot in self.slots:
            if remaining <= 0:
                break
            if slot.item is None and slot.can_accept(item):
                remaining -= min(remaining, item.max_stack_size)
        return quantity - remaining

    def count_addable(self, item: Optional[Item], quantity: int = 1) -> int:
        """Exactly what add_item(item, quantity) would return, without mutating anything."""
        if item is None or quantity <= 0:
            return 0
        affordable = self._max_affordable(item, quantity)
        if affordable <= 0:
            return 0
        return self._count_placeable(item, affordable)

    def can_add_item(self, item: Optional[Item], quantity: int = 1) -> bool:
        return quantity > 0 and self.count_addable(item, quantity) >= quantity

    # --- Mutation ---

    def add_item(self, item: Optional[Item], quantity: int = 1) -> int:
        """
        Adds up to quantity units and returns how many were added.

        The weight ceiling truncates the request first. Existing compatible stacks
        fill before new slots are used. Anything not delivered is reported through
        INVENTORY_WEIGHT_EXCEEDED or INVENTORY_FULL.
        """
        if item is None or quantity <= 0:
            return 0

        affordable = self._max_affordable(item, quantity)
        if affordable <= 0:
            Logger.debug("Inventory", f"{self.id}: {item.name} x{quantity} exceeds weight limit.")
            self.emit(InventoryEvent.INVENTORY_WEIGHT_EXCEEDED, item=item, quantity=quantity,
                      undelivered=quantity, current_weight=self.current_weight, max_weight=self.max_weight)
            return 0

        remaining = affordable
        for slot in self.slots:
            if remaining <= 0:
                break
            if slot.item is None or slot.locked or slot.is_full():
                continue
            if slot.item.can_stack_with(item):
                remaining = slot.add_quantity(remaining)

        if remaining > 0:
            if self.grid is not None:
                while remaining > 0:
                    placed = self.grid.auto_place_item(item, remaining)
                    if placed <= 0:
                        break
                    remaining -= placed
            else:
                for slot in self.slots:
                    if remaining <= 0:
                        break
                    if slot.item is None and slot.can_accept(item):
                        amount = min(remaining, item.max_stack_size)
                        if slot.set_item(item, amount):
                            remaining -= amount

        added = affordable - remaining

        if added > 0 and not self._sorting:
            self.emit(InventoryEvent.ITEM_ADDED, item=item, quantity=added)
        if affordable < quantity:
            self.emit(InventoryEvent.INVENTORY_WEIGHT_EXCEEDED, item=item, quantity=quantity,
                      undelivered=quantity - affordable, current_weight=self.current_weight,
                      max_weight=self.max_weight)
        if added < quantity:
            reason = "no_space" if remaining > 0 else "weight_limit"
            Logger.debug("Inventory", f"{self.id}: {quantity - added} {item.name} undelivered ({reason}).")
            self.emit(InventoryEvent.INVENTORY_FULL, item=item, quantity=quantity,
                      undelivered=quantity - added, reason=reason)

        if added > 0 and self.auto_sort and not self._sorting:
            self.sort_items()
        return added

    def _matching_slots(self, item_ref: ItemRef) -> List[InventorySlot]:
        item_id = _item_id(item_ref)
        return [slot for slot in self.slots if slot.item is not None and slot.item.obj_id == item_id]

    def remove_item_stacks(self, item_ref: Optional[ItemRef], quantity: int = 1) -> List[Tuple[Item, int]]:
        """Removes up to quantity units, smallest stacks first. Returns (instance, amount) per slot drained."""
        if item_ref is None or quantity <= 0:
            return []
        candidates = sorted(
            (slot for slot in self._matching_slots(item_ref) if not slot.locked),
            key=lambda s: s.quantity
        )
        drained = []
        removed = 0
        for slot in candidates:
            if removed >= quantity:
                break
            item = slot.item
            taken = slot.remove_quantity(quantity - removed)
            if taken > 0:
                drained.append((item, taken))
                removed += taken

        if removed > 0 and not self._sorting:
            self.emit(InventoryEvent.ITEM_REMOVED, item=drained[-1][0], item_id=_item_id(item_ref),
                      quantity=removed)
        return drained

    def remove_item(self, item_ref: Optional[ItemRef], quantity: int = 1) -> int:
        """Removes up to quantity units, draining the smallest stacks first. Returns the amount removed."""
        return sum(amount for _, amount in self.remove_item_stacks(item_ref, quantity))

    def remove_item_from_slot(self, slot: Union[InventorySlot, int], quantity: int = 1) -> int:
        if isinstance(slot, int):
            slot = self.get_slot(slot)
        if slot is None or slot.inventory is not self or slot.item is None:
            return 0
        item = slot.item
        removed = slot.remove_quantity(quantity)
        if removed > 0:
            self.emit(InventoryEvent.ITEM_REMOVED, item=item, item_id=item.obj_id,
                      quantity=removed, slot=slot)
        return removed

    def transfer_item(self, target: 'Inventory', item_ref: Optional[ItemRef], quantity: int = 1) -> bool:
        """
        Moves quantity units into target. Availability and target capacity are checked
        first. Anything the target does not take is put back here.
        """
        if target is None or target is self or item_ref is None or quantity <= 0:
            return False

        item_id = _item_id(item_ref)
        if not self.has_item(item_id, quantity):
            return False
        instance = self.get_item_instance(item_id)
        if instance is None or not target.can_add_item(instance, quantity):
            return False

        drained = self.remove_item_stacks(item_id, quantity)
        if not drained:
            return False

        # Each drained stack travels as its own instance
        added = 0
        for item, amount in drained:
            delivered = target.add_item(item, amount)
            added += delivered
            if delivered < amount:
                returned = self.add_item(item, amount - delivered)
                if returned < amount - delivered:
                    Logger.error("Inventory", f"{self.id}: lost {amount - delivered - returned} {item.name} during transfer rollback.")

        self.emit(InventoryEvent.ITEM_TRANSFERRED, item=instance, item_id=item_id, quantity=added,
                  source_inventory=self, target_inventory=target)
        return added == quantity

    def clear(self) -> List[Tuple[Item, int]]:
        """Empties every unlocked slot. Returns what was removed."""
        removed = []
        for slot in self.slots:
            if slot.item is not None and not slot.locked:
                removed.append(slot.clear_item())
        self.emit(InventoryEvent.INVENTORY_CLEARED, removed=removed)
        return removed

    def resize(self, new_width: int, new_height: int) -> bool:
        """Grid inventories only. Fails without change if occupied cells would be cut off."""
        if self.grid is None:
            return False
        if not self.grid.resize(new_width, new_height):
            return False
        self.emit(InventoryEvent.INVENTORY_RESIZED, width=new_width, height=new_height)
        return True

    def update(self, delta_time: float):
        """Per-frame hook. Plain inventories have nothing time-based."""
        pass

    def destroy(self):
        if self.is_destroyed:
            return
        for slot in self.slots:
            slot.clear_listeners()
            slot.inventory = None
        if self.grid is not None:
            self.grid.clear_listeners()
        self.is_destroyed = True
        self.emit(InventoryEvent.INVENTORY_DESTROYED, inventory_id=self.id)
        self.clear_listeners()

    # --- Item queries ---

    def get_item_count(self, item_ref: Optional[ItemRef]) -> int:
        return sum(slot.quantity for slot in self._matching_slots(item_ref)) if item_ref else 0

    def has_item(self, item_ref: Optional[ItemRef], quantity: int = 1) -> bool:
        return self.get_item_count(item_ref) >= quantity

    def get_item_instance(self, item_id: str) -> Optional[Item]:
        slots = self._matching_slots(item_id)
        return slots[0].item if slots else None

    def find_item_slots(self, item_ref: ItemRef) -> List[InventorySlot]:
        return self._matching_slots(item_ref)

    def get_all_items(self) -> List[Dict[str, Any]]:
        return [
            {"item": slot.item, "quantity": slot.quantity, "slot_index": slot.index}
            for slot in self.slots if slot.item is not None
        ]

    def get_unique_items(self) -> List[Dict[str, Any]]:
        """One entry per item id with the summed quantity, in first-seen order."""
        totals: Dict[str, Dict[str, Any]] = {}
        for slot in self.slots:
            if slot.item is None:
                continue
            entry = totals.setdefault(slot.item.obj_id, {"item": slot.item, "quantity": 0})
            entry["quantity"] += slot.quantity
        return list(totals.values())

    def has_item_type(self, item_type: str) -> bool:
        item_type = item_type.upper()
        return any(slot.item is not None and slot.item.item_type == item_type for slot in self.slots)

    def get_items_by_type(self, item_type: str) -> List[Dict[str, Any]]:
        item_type = item_type.upper()
        return [entry for entry in self.get_all_items() if entry["item"].item_type == item_type]

    def get_total_value(self) -> float:
        return sum(slot.item.value * slot.quantity for slot in self.slots if slot.item is not None)

    def get_total_weight(self) -> float:
        return self.current_weight

    def __str__(self) -> str:
        limit = f"{self.max_weight:.1f}" if self.has_weight_limit() else "unlimited"
        return (f"{self.name} ({len(self.get_occupied_slots())}/{self.max_slots} slots, "
                f"{self.current_weight:.1f}/{limit} wt)")
