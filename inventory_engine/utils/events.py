# inventory_engine/utils/events.py
"""
Notification plumbing shared by slots, grids, inventories and managers.

Each stateful entity declares the closed set of event kinds it may emit
(EVENT_TYPES). Subscribing to anything outside that set is a programming
error and raises ValueError.
"""
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple, Type

from inventory_engine.utils.logger import Logger


class SlotEvent(str, Enum):
    ITEM_CHANGED = "item_changed"
    SLOT_STATE_CHANGED = "slot_state_changed"

    def __str__(self) -> str:
        return self.value


class GridEvent(str, Enum):
    GRID_INITIALIZED = "grid_initialized"
    GRID_RESIZED = "grid_resized"
    GRID_SORTED = "grid_sorted"
    GRID_CLEARED = "grid_cleared"
    ITEM_PLACED = "item_placed"
    ITEM_MOVED = "item_moved"
    ITEM_REMOVED = "item_removed"

    def __str__(self) -> str:
        return self.value


class InventoryEvent(str, Enum):
    INVENTORY_INITIALIZED = "inventory_initialized"
    ITEM_ADDED = "item_added"
    ITEM_REMOVED = "item_removed"
    ITEM_TRANSFERRED = "item_transferred"
    INVENTORY_FULL = "inventory_full"
    INVENTORY_WEIGHT_EXCEEDED = "inventory_weight_exceeded"
    INVENTORY_SORTED = "inventory_sorted"
    INVENTORY_CLEARED = "inventory_cleared"
    INVENTORY_DESTROYED = "inventory_destroyed"
    INVENTORY_LOADED = "inventory_loaded"
    INVENTORY_RESIZED = "inventory_resized"
    OWNER_CHANGED = "inventory_owner_changed"

    def __str__(self) -> str:
        return self.value


class CharacterEvent(str, Enum):
    ITEM_EQUIPPED = "item_equipped"
    ITEM_UNEQUIPPED = "item_unequipped"
    ITEM_DROPPED = "item_dropped"
    CURRENCY_ADDED = "currency_added"
    CURRENCY_REMOVED = "currency_removed"
    QUICK_SLOT_SET = "quick_slot_set"
    QUICK_SLOT_CLEARED = "quick_slot_cleared"
    QUICK_SLOT_USED = "quick_slot_used"
    QUICK_SLOT_SELECTED = "quick_slot_selected"
    QUICK_SLOT_COOLDOWN_COMPLETE = "quick_slot_cooldown_complete"

    def __str__(self) -> str:
        return self.value


class EquipmentEvent(str, Enum):
    ITEM_EQUIPPED = "item_equipped"
    ITEM_UNEQUIPPED = "item_unequipped"

    def __str__(self) -> str:
        return self.value


class ManagerEvent(str, Enum):
    INVENTORY_CREATED = "inventory_created"
    INVENTORY_DELETED = "inventory_deleted"
    ITEM_MOVED = "item_moved"
    LOOT_GENERATED = "loot_generated"

    def __str__(self) -> str:
        return self.value


class FactoryEvent(str, Enum):
    ITEM_CREATED = "item_created"

    def __str__(self) -> str:
        return self.value


class LootEvent(str, Enum):
    LOOT_GENERATED = "loot_generated"
    LOOT_SPAWNED = "loot_spawned"

    def __str__(self) -> str:
        return self.value


@dataclass
class Event:
    type: Enum
    source: Any
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: float = field(default_factory=time.time)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


Listener = Callable[[Event], None]


class EventEmitter:
    """Observer mixin. Subclasses set EVENT_TYPES to the enum classes they emit."""

    EVENT_TYPES: Tuple[Type[Enum], ...] = ()

    def _ensure_listeners(self) -> Dict[Enum, List[Listener]]:
        # Mixins may be initialised in any order, so create lazily
        listeners = self.__dict__.get("_listeners")
        if listeners is None:
            listeners = {}
            self.__dict__["_listeners"] = listeners
        return listeners

    def _check_event_type(self, event_type: Enum):
        if not isinstance(event_type, self.EVENT_TYPES):
            allowed = ", ".join(cls.__name__ for cls in self.EVENT_TYPES) or "none"
            raise ValueError(
                f"{type(self).__name__} does not emit '{event_type}' (allowed: {allowed})"
            )

    def subscribe(self, event_type: Enum, callback: Listener) -> Listener:
        """Registers callback for event_type. Returns the callback for later unsubscribe."""
        self._check_event_type(event_type)
        self._ensure_listeners().setdefault(event_type, []).append(callback)
        return callback

    def unsubscribe(self, event_type: Enum, callback: Listener) -> bool:
        listeners = self._ensure_listeners().get(event_type, [])
        if callback in listeners:
            listeners.remove(callback)
            return True
        return False

    def clear_listeners(self):
        self._ensure_listeners().clear()

    def emit(self, event_type: Enum, **data) -> Event:
        self._check_event_type(event_type)
        event = Event(type=event_type, source=self, data=data)
        # Copy so listeners may unsubscribe while being notified
        for callback in list(self._ensure_listeners().get(event_type, [])):
            try:
                callback(event)
            except Exception as e:
                Logger.error(type(self).__name__, f"Listener for '{event_type}' failed: {e}")
        return event
