# inventory_engine/items/inventory/grid.py
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from inventory_engine.config import GRID_CELL_PADDING, GRID_CELL_SIZE
from inventory_engine.items.item import Item
from inventory_engine.utils.events import EventEmitter, GridEvent
from inventory_engine.utils.logger import Logger
from .slot import InventorySlot

Cell = Tuple[int, int]


class InventoryGrid(EventEmitter):
    """
    Width x height arrangement of slots, one distinct slot per cell.

    Items larger than 1x1 are anchored at their top-left cell; the other cells
    of the footprint are marked with covered_by and hold no item of their own.
    """

    EVENT_TYPES = (GridEvent,)

    def __init__(self, width: int, height: int, inventory: Any = None,
                 cell_size: float = GRID_CELL_SIZE, padding: float = GRID_CELL_PADDING):
        if width < 1 or height < 1:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.inventory = inventory
        self.cell_size = cell_size
        self.padding = padding
        self._cells: Dict[Cell, InventorySlot] = {}
        self.slots: List[InventorySlot] = []

        for y in range(height):
            for x in range(width):
                self._cells[(x, y)] = self._create_slot(x, y)
        self._reindex()
        self.emit(GridEvent.GRID_INITIALIZED, width=width, height=height)

    def _create_slot(self, x: int, y: int) -> InventorySlot:
        return InventorySlot(x=x, y=y, inventory=self.inventory, grid=self)

    def _reindex(self):
        self.slots = [self._cells[(x, y)] for y in range(self.height) for x in range(self.width)]
        for index, slot in enumerate(self.slots):
            slot.index = index

    # --- Lookup ---

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_slot_at(self, x: int, y: int) -> Optional[InventorySlot]:
        return self._cells.get((x, y)) if self.in_bounds(x, y) else None

    def get_all_slots(self) -> List[InventorySlot]:
        return list(self.slots)

    def get_region(self, x: int, y: int, width: int, height: int) -> List[InventorySlot]:
        """Slots inside the rectangle, clipped to the grid."""
        return [
            self._cells[(cx, cy)]
            for cy in range(max(0, y), min(self.height, y + height))
            for cx in range(max(0, x), min(self.width, x + width))
        ]

    @staticmethod
    def _occupant(slot: InventorySlot) -> Optional[InventorySlot]:
        """The anchor slot whose item fills this cell, if any."""
        if slot.covered_by is not None:
            return slot.covered_by
        return slot if slot.item is not None else None

    def is_region_empty(self, x: int, y: int, width: int, height: int,
                        ignore: Optional[InventorySlot] = None) -> bool:
        """
        True when the whole rectangle is inside the grid and every cell is free.
        Locked cells count as taken. Cells filled by the ignore anchor count as free.
        """
        if x is None or y is None:
            return False
        if x < 0 or y < 0 or x + width > self.width or y + height > self.height:
            return False
        for slot in self.get_region(x, y, width, height):
            if slot.locked and slot is not ignore:
                return False
            occupant = self._occupant(slot)
            if occupant is not None and occupant is not ignore:
                return False
        return True

    def find_first_empty_slot(self) -> Optional[InventorySlot]:
        for slot in self.slots:
            if slot.item is None and slot.covered_by is None and not slot.locked:
                return slot
        return None

    def find_empty_region(self, width: int = 1, height: int = 1) -> Optional[Cell]:
        """Top-left cell of the first free width x height rectangle, scanning row-major."""
        if width == 1 and height == 1:
            slot = self.find_first_empty_slot()
            return (slot.x, slot.y) if slot else None

        for y in range(self.height - height + 1):
            for x in range(self.width - width + 1):
                if self.is_region_empty(x, y, width, height):
                    return (x, y)
        return None

    def _find_anchor_for(self, item: Item) -> Optional[InventorySlot]:
        """First free anchor whose slot also passes its own acceptance rules."""
        for y in range(self.height - item.height + 1):
            for x in range(self.width - item.width + 1):
                slot = self._cells[(x, y)]
                if slot.item is None and self.is_region_empty(x, y, item.width, item.height) \
                        and slot.can_accept(item):
                    return slot
        return None

    # --- Footprints (called by slots) ---

    def claim_footprint(self, anchor: InventorySlot):
        if anchor.item is None:
            return
        for slot in self.get_region(anchor.x, anchor.y, anchor.item.width, anchor.item.height):
            if slot is not anchor:
                slot.covered_by = anchor

    def release_footprint(self, anchor: InventorySlot):
        for slot in self.slots:
            if slot.covered_by is anchor:
                slot.covered_by = None

    def get_slots_for_item(self, item: Item) -> List[InventorySlot]:
        """Anchor and covered cells of every placement of this item instance."""
        result = []
        for slot in self.slots:
            anchor = self._occupant(slot)
            if anchor is not None and anchor.item is item:
                result.append(slot)
        return result

    # --- Placement ---

    def place_item(self, item: Item, x: int, y: int, quantity: int = 1) -> bool:
        slot = self.get_slot_at(x, y)
        if slot is None or slot.item is not None:
            return False
        if not slot.set_item(item, quantity):
            return False
        self.emit(GridEvent.ITEM_PLACED, item=item, x=x, y=y, quantity=slot.quantity)
        return True

    def find_item_slot(self, item: Item) -> Optional[InventorySlot]:
        for slot in self.slots:
            if slot.item is item:
                return slot
        return None

    def find_item_position(self, item: Item) -> Optional[Cell]:
        slot = self.find_item_slot(item)
        return (slot.x, slot.y) if slot else None

    def contains_item(self, item: Item) -> bool:
        return self.find_item_slot(item) is not None

    def remove_item(self, item: Item) -> int:
        """Removes the first placement of this instance. Returns the quantity removed."""
        slot = self.find_item_slot(item)
        if slot is None:
            return 0
        removed_item, quantity = slot.clear_item()
        if removed_item is None:
            return 0
        self.emit(GridEvent.ITEM_REMOVED, item=removed_item, x=slot.x, y=slot.y, quantity=quantity)
        return quantity

    def move_item(self, item: Item, new_x: int, new_y: int) -> bool:
        """Moves a placed item to a new anchor. Its own current footprint does not block the move."""
        source = self.find_item_slot(item)
        target = self.get_slot_at(new_x, new_y)
        if source is None or target is None:
            return False
        if target is source:
            return True
        if source.locked or target.item is not None:
            return False
        if target.covered_by not in (None, source):
            return False
        if not self.is_region_empty(new_x, new_y, item.width, item.height, ignore=source):
            return False

        old_x, old_y = source.x, source.y
        moved_item, quantity = source.clear_item()
        if not target.set_item(moved_item, quantity):
            # Target rules rejected it; the old footprint is still free
            source.set_item(moved_item, quantity)
            return False
        self.emit(GridEvent.ITEM_MOVED, item=item, from_x=old_x, from_y=old_y, x=new_x, y=new_y)
        return True

    def auto_place_item(self, item: Item, quantity: int = 1) -> int:
        """
        Places up to quantity units and returns how many were placed.

        Existing compatible stacks are topped up first, in discovery order. Whatever
        remains goes into the first free region, limited to one slot's stack size.
        """
        if item is None or quantity <= 0:
            return 0

        remaining = quantity
        for slot in self.slots:
            if remaining <= 0:
                break
            if slot.item is None or slot.locked or slot.is_full():
                continue
            if not slot.item.can_stack_with(item):
                continue
            remaining = slot.add_quantity(remaining)

        if remaining > 0:
            anchor = self._find_anchor_for(item)
            if anchor is not None:
                amount = min(remaining, item.max_stack_size)
                if anchor.set_item(item, amount):
                    remaining -= amount
                    self.emit(GridEvent.ITEM_PLACED, item=item, x=anchor.x, y=anchor.y, quantity=amount)

        return quantity - remaining

    def count_placeable(self, item: Item, quantity: int) -> int:
        """How many of quantity repeated auto-placement would fit, computed without mutating."""
        if item is None or quantity <= 0:
            return 0

        capacity = 0
        for slot in self.slots:
            if slot.item is not None and not slot.locked and slot.item.can_stack_with(item):
                capacity += slot.get_remaining_space()
        if capacity >= quantity:
            return quantity

        # Simulate new anchors on a copy of the occupancy map
        taken: Set[Cell] = {
            (slot.x, slot.y) for slot in self.slots
            if slot.locked or self._occupant(slot) is not None
        }
        for y in range(self.height - item.height + 1):
            for x in range(self.width - item.width + 1):
                if capacity >= quantity:
                    return quantity
                footprint = {(x + dx, y + dy) for dy in range(item.height) for dx in range(item.width)}
                if footprint & taken:
                    continue
                if not self._cells[(x, y)].can_accept(item):
                    continue
                taken |= footprint
                capacity += item.max_stack_size
        return min(quantity, capacity)

    def can_accept_item(self, item: Item, quantity: int = 1) -> bool:
        return self.count_placeable(item, quantity) >= quantity

    # --- Whole grid ---

    def get_occupied_slots(self) -> List[InventorySlot]:
        return [slot for slot in self.slots if slot.item is not None]

    def get_empty_slots(self) -> List[InventorySlot]:
        return [slot for slot in self.slots if slot.item is None and slot.covered_by is None]

    def get_empty_slots_count(self) -> int:
        return len(self.get_empty_slots())

    def is_full(self) -> bool:
        return self.find_first_empty_slot() is None

    def get_total_weight(self) -> float:
        return sum(slot.stack_weight for slot in self.slots)

    def clear(self) -> List[Tuple[Item, int]]:
        """Empties every unlocked slot. Returns what was removed."""
        removed = []
        for slot in self.slots:
            if slot.item is not None and not slot.locked:
                item, quantity = slot.clear_item()
                removed.append((item, quantity))
        self.emit(GridEvent.GRID_CLEARED, removed=removed)
        return removed

    def sort_items(self, key: Optional[Callable[[Tuple[Item, int]], Any]] = None) -> bool:
        """
        Re-packs unlocked contents in key order (default: name). If the new order
        cannot fit everything, the original layout is restored and False returned.
        """
        from .display import default_sort_key

        original = [(slot, slot.item, slot.quantity) for slot in self.slots
                    if slot.item is not None and not slot.locked]
        for slot, _, _ in original:
            slot.clear_item()

        entries = sorted(((item, quantity) for _, item, quantity in original), key=key or default_sort_key)
        for item, quantity in entries:
            remaining = quantity
            while remaining > 0:
                placed = self.auto_place_item(item, remaining)
                if placed <= 0:
                    break
                remaining -= placed
            if remaining > 0:
                Logger.warning("InventoryGrid", "Sorted layout does not fit. Restoring previous layout.")
                for slot in self.slots:
                    if slot.item is not None and not slot.locked:
                        slot.clear_item()
                for slot, original_item, original_quantity in original:
                    slot.set_item(original_item, original_quantity)
                return False

        self.emit(GridEvent.GRID_SORTED)
        return True

    def resize(self, new_width: int, new_height: int) -> bool:
        """Changes dimensions. Refuses without any change if a used cell would fall outside."""
        if new_width < 1 or new_height < 1:
            Logger.warning("InventoryGrid", f"Invalid grid size {new_width}x{new_height}")
            return False

        for (x, y), slot in self._cells.items():
            if (x >= new_width or y >= new_height) and (slot.item is not None or slot.covered_by is not None):
                Logger.warning("InventoryGrid", f"Cannot resize to {new_width}x{new_height}: cell ({x}, {y}) is in use.")
                return False

        old_width, old_height = self.width, self.height
        removed = [slot for (x, y), slot in self._cells.items() if x >= new_width or y >= new_height]
        cells = {cell: slot for cell, slot in self._cells.items() if cell[0] < new_width and cell[1] < new_height}
        added = []
        for y in range(new_height):
            for x in range(new_width):
                if (x, y) not in cells:
                    slot = self._create_slot(x, y)
                    cells[(x, y)] = slot
                    added.append(slot)

        self._cells = cells
        self.width = new_width
        self.height = new_height
        self._reindex()
        for slot in removed:
            slot.clear_listeners()
            slot.grid = None
        self.emit(GridEvent.GRID_RESIZED, old_width=old_width, old_height=old_height,
                  width=new_width, height=new_height, added_slots=added, removed_slots=removed)
        return True

    # --- Coordinates ---

    def grid_to_world(self, x: int, y: int) -> Tuple[float, float]:
        step = self.cell_size + self.padding
        return x * step, y * step

    def world_to_grid(self, world_x: float, world_y: float) -> Optional[Cell]:
        step = self.cell_size + self.padding
        x = int(world_x // step)
        y = int(world_y // step)
        return (x, y) if self.in_bounds(x, y) else None
