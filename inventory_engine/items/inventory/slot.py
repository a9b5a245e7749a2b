# inventory_engine/items/inventory/slot.py
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from inventory_engine.config import SLOT_TYPE_GENERIC, SLOT_TYPE_MAINHAND, SLOT_TYPE_OFFHAND
from inventory_engine.items.item import Item
from inventory_engine.utils.events import EventEmitter, SlotEvent
from inventory_engine.utils.logger import Logger

if TYPE_CHECKING:
    from inventory_engine.items.inventory.grid import InventoryGrid


class InventorySlot(EventEmitter):
    """
    Represents a single slot in an inventory that can hold one item identity.

    Grid slots know their (x, y) cell and owning grid. Every slot may know its
    owning inventory, which it uses only through get_slot_by_type() to enforce
    the two-handed weapon rule.
    """

    EVENT_TYPES = (SlotEvent,)

    def __init__(self, index: int = 0, x: Optional[int] = None, y: Optional[int] = None,
                 slot_type: str = SLOT_TYPE_GENERIC, inventory: Any = None,
                 grid: Optional['InventoryGrid'] = None,
                 accepts_only: Optional[List[str]] = None,
                 rejects_types: Optional[List[str]] = None,
                 locked: bool = False, hidden: bool = False,
                 attachment_bone: Optional[str] = None,
                 attachment_offset: Optional[Dict[str, float]] = None,
                 attachment_rotation: Optional[Dict[str, float]] = None):
        self.index = index
        self.x = x
        self.y = y
        self.slot_type = (slot_type or SLOT_TYPE_GENERIC).upper()
        self.inventory = inventory
        self.grid = grid
        self.accepts_only = [t.upper() for t in (accepts_only or [])]
        self.rejects_types = [t.upper() for t in (rejects_types or [])]
        self.locked = locked
        self.hidden = hidden
        self.highlighted = False
        self.selected = False

        # Descriptive only, consumed by rendering
        self.attachment_bone = attachment_bone
        self.attachment_offset = dict(attachment_offset or {"x": 0, "y": 0, "z": 0})
        self.attachment_rotation = dict(attachment_rotation or {"x": 0, "y": 0, "z": 0})

        self.item: Optional[Item] = None
        self.quantity = 0
        # Set on secondary cells of a multi-cell item; points at the anchor slot
        self.covered_by: Optional['InventorySlot'] = None

    @property
    def id(self) -> str:
        if self.x is not None and self.y is not None:
            return f"slot_{self.x}_{self.y}"
        return f"slot_{self.index}"

    @property
    def capacity(self) -> int:
        return self.item.max_stack_size if self.item else 1

    @property
    def stack_weight(self) -> float:
        return self.item.weight * self.quantity if self.item else 0.0

    # --- Acceptance ---

    def can_accept(self, item: Optional[Item]) -> bool:
        if item is None:
            return False
        if self.locked or self.covered_by is not None:
            return False
        if self.accepts_only and item.item_type not in self.accepts_only:
            return False
        if item.item_type in self.rejects_types:
            return False
        if self.slot_type != SLOT_TYPE_GENERIC and item.equip_slot != self.slot_type:
            return False

        if self.inventory is not None:
            if self.slot_type == SLOT_TYPE_MAINHAND and item.is_two_handed:
                offhand = self.inventory.get_slot_by_type(SLOT_TYPE_OFFHAND)
                if offhand is not None and offhand is not self and offhand.item is not None:
                    return False
            if self.slot_type == SLOT_TYPE_OFFHAND:
                mainhand = self.inventory.get_slot_by_type(SLOT_TYPE_MAINHAND)
                if (mainhand is not None and mainhand is not self and mainhand.item is not None
                        and mainhand.item.is_two_handed):
                    return False

        # Anchor cells need the whole footprint free
        if self.grid is not None and (item.width > 1 or item.height > 1):
            if not self.grid.is_region_empty(self.x, self.y, item.width, item.height, ignore=self):
                return False
        return True

    # --- Mutation ---

    def _notify(self, previous_item: Optional[Item], previous_quantity: int):
        previous_weight = previous_item.weight * previous_quantity if previous_item else 0.0
        self.emit(
            SlotEvent.ITEM_CHANGED,
            slot=self,
            item=self.item,
            quantity=self.quantity,
            previous_item=previous_item,
            previous_quantity=previous_quantity,
            previous_weight=previous_weight,
            weight=self.stack_weight,
        )

    def _vacate(self):
        if self.grid is not None:
            self.grid.release_footprint(self)

    def set_item(self, item: Optional[Item], quantity: int = 1) -> bool:
        """Binds item to this slot, replacing anything held. Quantity is clamped to the stack limit."""
        if not self.can_accept(item):
            Logger.debug("InventorySlot", f"{self.id} cannot accept item {item.name if item else None}")
            return False
        if quantity <= 0:
            Logger.debug("InventorySlot", f"{self.id} rejected non-positive quantity {quantity}")
            return False

        previous_item, previous_quantity = self.item, self.quantity
        if previous_item is not None and previous_item is not item:
            self._vacate()
        self.item = item
        self.quantity = min(quantity, item.max_stack_size)
        if self.grid is not None:
            self.grid.claim_footprint(self)
        self._notify(previous_item, previous_quantity)
        return True

    def clear_item(self) -> Tuple[Optional[Item], int]:
        """Empties the slot. Returns what it held. Locked slots refuse and return (None, 0)."""
        if self.locked or self.item is None:
            return None, 0

        previous_item, previous_quantity = self.item, self.quantity
        self._vacate()
        self.item = None
        self.quantity = 0
        self._notify(previous_item, previous_quantity)
        return previous_item, previous_quantity

    def add_quantity(self, amount: int) -> int:
        """Adds to the current stack. Returns the amount that did not fit."""
        if self.item is None or self.locked or amount <= 0:
            return max(0, amount)

        added = min(amount, self.get_remaining_space())
        if added <= 0:
            return amount

        previous_quantity = self.quantity
        self.quantity += added
        self._notify(self.item, previous_quantity)
        return amount - added

    def remove_quantity(self, amount: int) -> int:
        """Removes up to amount. Returns the amount actually removed. Reaching zero clears the slot."""
        if self.item is None or self.locked or amount <= 0:
            return 0

        removed = min(amount, self.quantity)
        previous_item, previous_quantity = self.item, self.quantity
        self.quantity -= removed
        if self.quantity <= 0:
            self._vacate()
            self.item = None
            self.quantity = 0
        self._notify(previous_item, previous_quantity)
        return removed

    def transfer_to(self, target: Optional['InventorySlot'], amount: Optional[int] = None) -> bool:
        """
        Moves up to amount units into target, all-or-nothing on validation.
        Both sides are validated before either is touched.
        """
        if self.item is None or target is None or target is self:
            return False
        if self.locked or target.locked:
            return False

        amount = self.quantity if amount is None else min(amount, self.quantity)
        if amount <= 0:
            return False
        if not target.can_accept(self.item):
            return False

        if target.is_empty():
            moved = min(amount, self.item.max_stack_size)
        elif self.item.can_stack_with(target.item):
            moved = min(amount, target.get_remaining_space())
        else:
            return False
        if moved <= 0:
            return False

        item = self.item
        if moved == self.quantity:
            # Release the source footprint first so the target region can reuse it
            self.remove_quantity(moved)
            if target.is_empty():
                target.set_item(item, moved)
            else:
                target.add_quantity(moved)
        else:
            if target.is_empty():
                target.set_item(item, moved)
            else:
                target.add_quantity(moved)
            self.remove_quantity(moved)
        return True

    def swap_with(self, other: Optional['InventorySlot']) -> bool:
        """Exchanges contents with other. Fails without mutation if either side rejects."""
        if other is None or other is self:
            return False
        if self.locked or other.locked:
            return False
        # Multi-cell items move through InventoryGrid.move_item
        for item in (self.item, other.item):
            if item is not None and (item.width > 1 or item.height > 1) and (self.grid or other.grid):
                return False

        if self.item is not None and not other._accepts_in_place_of(self.item, other.item):
            return False
        if other.item is not None and not self._accepts_in_place_of(other.item, self.item):
            return False

        mine = (self.item, self.quantity)
        theirs = (other.item, other.quantity)
        self.item, self.quantity = theirs
        other.item, other.quantity = mine
        self._notify(*mine)
        other._notify(*theirs)
        return True

    def _accepts_in_place_of(self, incoming: Item, outgoing: Optional[Item]) -> bool:
        """can_accept evaluated as if outgoing had already left this slot."""
        held, held_quantity = self.item, self.quantity
        self.item, self.quantity = None, 0
        try:
            return self.can_accept(incoming)
        finally:
            self.item, self.quantity = held, held_quantity

    # --- Queries ---

    def is_empty(self) -> bool:
        return self.item is None

    def is_full(self) -> bool:
        return self.item is not None and self.quantity >= self.capacity

    def get_remaining_space(self) -> int:
        if self.item is None:
            return 0
        return max(0, self.capacity - self.quantity)

    def get_position(self) -> Tuple[Optional[int], Optional[int]]:
        return self.x, self.y

    def set_position(self, x: int, y: int):
        self.x = x
        self.y = y

    # --- State flags ---

    def _set_flag(self, name: str, value: bool):
        if getattr(self, name) == value:
            return
        setattr(self, name, value)
        self.emit(SlotEvent.SLOT_STATE_CHANGED, slot=self, flag=name, value=value)

    def set_locked(self, locked: bool):
        self._set_flag("locked", locked)

    def set_hidden(self, hidden: bool):
        self._set_flag("hidden", hidden)

    def set_highlighted(self, highlighted: bool):
        self._set_flag("highlighted", highlighted)

    def set_selected(self, selected: bool):
        self._set_flag("selected", selected)

    def get_attachment_data(self) -> Dict[str, Any]:
        return {
            "bone": self.attachment_bone,
            "offset": dict(self.attachment_offset),
            "rotation": dict(self.attachment_rotation),
        }

    def set_attachment_data(self, data: Dict[str, Any]):
        if "bone" in data:
            self.attachment_bone = data["bone"]
        if "offset" in data:
            self.attachment_offset = dict(data["offset"])
        if "rotation" in data:
            self.attachment_rotation = dict(data["rotation"])

    def get_visual_descriptor(self) -> Optional[Dict[str, Any]]:
        """Data the rendering layer needs to show what this slot holds."""
        if self.item is None:
            return None
        return {
            "model": self.item.model,
            "icon": self.item.icon,
            "color": self.item.color,
            "scale": self.item.scale,
            "attachment": self.get_attachment_data(),
        }

    def clone(self) -> 'InventorySlot':
        """Copies configuration, never contents."""
        return InventorySlot(
            index=self.index, x=self.x, y=self.y, slot_type=self.slot_type,
            accepts_only=list(self.accepts_only), rejects_types=list(self.rejects_types),
            locked=self.locked, hidden=self.hidden, attachment_bone=self.attachment_bone,
            attachment_offset=self.attachment_offset, attachment_rotation=self.attachment_rotation,
        )

    def __str__(self) -> str:
        if self.item is None:
            return f"{self.id}: empty"
        return f"{self.id}: {self.item.name} x{self.quantity}"
