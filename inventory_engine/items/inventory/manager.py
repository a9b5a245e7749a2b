# inventory_engine/items/inventory/manager.py
import time
from collections import deque
from dataclasses import asdict, dataclass, field
from typing import Any, Deque, Dict, List, Optional, Type, Union

from pygame.math import Vector3

from inventory_engine.config import (
    MANAGER_DEFAULT_MAX_SLOTS, MANAGER_DEFAULT_MAX_WEIGHT, MANAGER_MAX_TRANSACTION_HISTORY,
    MANAGER_MAX_TRANSFER_DISTANCE
)
from inventory_engine.items.item import Item
from inventory_engine.items.loot_models import LootDrop, LootTable
from inventory_engine.utils.events import EventEmitter, ManagerEvent
from inventory_engine.utils.logger import Logger
from inventory_engine.utils.utils import as_position
from .core import Inventory
from .slot import InventorySlot


@dataclass
class TransactionRecord:
    type: str
    item_id: str
    item_name: str
    count: int
    source_id: Optional[str] = None
    target_id: Optional[str] = None
    loot_table_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


class InventoryManager(EventEmitter):
    """
    Registry of named inventories plus cross-inventory moves, loot table
    rolls and a bounded transaction log.
    """

    EVENT_TYPES = (ManagerEvent,)

    def __init__(self, catalog: Any = None, factory: Any = None,
                 max_item_transfer_distance: float = MANAGER_MAX_TRANSFER_DISTANCE,
                 enable_weight_limits: bool = True,
                 default_max_weight: float = MANAGER_DEFAULT_MAX_WEIGHT,
                 default_max_slots: int = MANAGER_DEFAULT_MAX_SLOTS,
                 max_transaction_history: int = MANAGER_MAX_TRANSACTION_HISTORY):
        self.catalog = catalog
        self.factory = factory
        self.inventories: Dict[str, Inventory] = {}
        self.loot_tables: Dict[str, LootTable] = {}
        self.settings = {
            "max_item_transfer_distance": max_item_transfer_distance,
            "enable_weight_limits": enable_weight_limits,
            "default_max_weight": default_max_weight,
            "default_max_slots": default_max_slots,
        }
        self.transaction_history: Deque[TransactionRecord] = deque(maxlen=max_transaction_history)

        if catalog is not None and hasattr(catalog, "get_loot_tables"):
            self._load_loot_tables()

    def _load_loot_tables(self):
        for table in self.catalog.get_loot_tables() or []:
            self.register_loot_table(table.table_id, table)
            Logger.debug("InventoryManager", f"Registered loot table: {table.name}")

    def register_loot_table(self, table_id: str, table_data: Union[LootTable, Dict[str, Any]]) -> LootTable:
        if isinstance(table_data, LootTable):
            table = LootTable(table_id=table_id, name=table_data.name, entries=list(table_data.entries),
                              min_rolls=table_data.min_rolls, max_rolls=table_data.max_rolls)
        else:
            table = LootTable.from_dict(table_data, table_id=table_id)
        self.loot_tables[table_id] = table
        return table

    # --- Registry ---

    def create_inventory(self, inventory_id: str, inventory_cls: Type[Inventory] = Inventory,
                         **config) -> Inventory:
        """Creates and registers an inventory. A duplicate id returns the existing instance."""
        existing = self.inventories.get(inventory_id)
        if existing is not None:
            Logger.warning("InventoryManager", f"Inventory with ID {inventory_id} already exists. Returning existing inventory.")
            return existing

        # Manager defaults apply to plain inventories; subclasses keep their own
        if inventory_cls is Inventory:
            if self.settings["enable_weight_limits"]:
                config.setdefault("max_weight", self.settings["default_max_weight"])
            else:
                config["max_weight"] = None
            config.setdefault("max_slots", self.settings["default_max_slots"])

        inventory = inventory_cls(inventory_id=inventory_id, **config)
        self.inventories[inventory_id] = inventory
        Logger.debug("InventoryManager", f"Created inventory: {inventory_id} with {inventory.max_slots} slots")
        self.emit(ManagerEvent.INVENTORY_CREATED, inventory_id=inventory_id, inventory=inventory)
        return inventory

    def get_inventory(self, inventory_id: str) -> Optional[Inventory]:
        return self.inventories.get(inventory_id)

    def delete_inventory(self, inventory_id: str) -> bool:
        inventory = self.inventories.pop(inventory_id, None)
        if inventory is None:
            return False
        inventory.destroy()
        Logger.debug("InventoryManager", f"Deleted inventory: {inventory_id}")
        self.emit(ManagerEvent.INVENTORY_DELETED, inventory_id=inventory_id)
        return True

    # --- Moves ---

    def move_item(self, source_id: str, target_id: str, item_id: str, count: int = 1,
                  source_slot: Optional[InventorySlot] = None) -> bool:
        """
        Moves count units between registered inventories. With source_slot the units
        come out of that slot and any shortfall goes back into it. Never loses items.
        """
        source = self.get_inventory(source_id)
        target = self.get_inventory(target_id)
        if source is None or target is None or count <= 0:
            return False

        if source_slot is not None:
            if (source_slot.inventory is not source or source_slot.item is None
                    or source_slot.item.obj_id != item_id or source_slot.quantity < count):
                return False
            item = source_slot.item
        else:
            if source.get_item_count(item_id) < count:
                return False
            item = source.get_item_instance(item_id) or self.find_item_by_id(item_id)

        if item is None:
            return False
        if not target.can_add_item(item, count):
            return False

        if source_slot is not None:
            drained = [(item, source.remove_item_from_slot(source_slot, count))]
        else:
            drained = source.remove_item_stacks(item_id, count)

        removed = sum(amount for _, amount in drained)
        if removed < count:
            for drained_item, amount in drained:
                if amount > 0:
                    self._return_to_source(source, drained_item, amount, source_slot)
            return False

        added = 0
        for drained_item, amount in drained:
            delivered = target.add_item(drained_item, amount)
            added += delivered
            if delivered < amount:
                self._return_to_source(source, drained_item, amount - delivered, source_slot)

        self._record_transaction(TransactionRecord(
            type="MOVE", source_id=source_id, target_id=target_id,
            item_id=item_id, item_name=item.name, count=added,
        ))
        self.emit(ManagerEvent.ITEM_MOVED, source_id=source_id, target_id=target_id,
                  item=item, item_id=item_id, count=added)
        return added == count

    def _return_to_source(self, source: Inventory, item: Item, quantity: int,
                          source_slot: Optional[InventorySlot]):
        if source_slot is not None and not source_slot.locked:
            if source_slot.is_empty():
                if source_slot.set_item(item, quantity):
                    quantity -= source_slot.quantity
            elif source_slot.item.can_stack_with(item):
                quantity = source_slot.add_quantity(quantity)
        if quantity > 0:
            returned = source.add_item(item, quantity)
            if returned < quantity:
                Logger.error("InventoryManager", f"Lost {quantity - returned} {item.name} returning to {source.id}.")

    # --- Loot ---

    def _create_loot_item(self, item_id: str) -> Optional[Item]:
        if self.factory is not None:
            return self.factory.create_item(item_id)
        template = self.find_item_by_id(item_id)
        return template.clone() if template is not None else None

    def generate_loot(self, inventory_id: str, table_id: str) -> List[LootDrop]:
        """
        Rolls the table into the inventory. Returns what was actually delivered;
        anything the inventory could not take is not re-queued.
        """
        inventory = self.get_inventory(inventory_id)
        table = self.loot_tables.get(table_id)
        if inventory is None or table is None:
            return []
        if self.factory is None and self.catalog is None:
            Logger.warning("InventoryManager", "No item catalog configured; cannot generate loot.")
            return []

        drops: List[LootDrop] = []
        for item_id, count in table.roll():
            item = self._create_loot_item(item_id)
            if item is None:
                Logger.warning("InventoryManager", f"Loot table {table_id} references unknown item '{item_id}'")
                continue

            added = inventory.add_item(item, count)
            if added > 0:
                drops.append(LootDrop(item=item, quantity=added))
                self._record_transaction(TransactionRecord(
                    type="LOOT_GENERATED", target_id=inventory_id, item_id=item.obj_id,
                    item_name=item.name, count=added, loot_table_id=table_id,
                ))

        self.emit(ManagerEvent.LOOT_GENERATED, inventory_id=inventory_id, table_id=table_id, drops=drops)
        return drops

    # --- Range ---

    @staticmethod
    def _owner_position(inventory: Inventory) -> Optional[Vector3]:
        owner = inventory.owner
        if owner is None:
            return None
        raw = owner.get("position") if isinstance(owner, dict) else getattr(owner, "position", None)
        position = as_position(raw)
        return Vector3(position) if position is not None else None

    def are_inventories_in_range(self, inventory_id_1: str, inventory_id_2: str) -> bool:
        first = self.get_inventory(inventory_id_1)
        second = self.get_inventory(inventory_id_2)
        if first is None or second is None:
            return False

        # Without positions on both owners, assume they are in range
        pos1 = self._owner_position(first)
        pos2 = self._owner_position(second)
        if pos1 is None or pos2 is None:
            return True

        max_distance = self.settings["max_item_transfer_distance"]
        return pos1.distance_squared_to(pos2) <= max_distance * max_distance

    # --- Transactions ---

    def _record_transaction(self, record: TransactionRecord):
        self.transaction_history.append(record)

    def get_transaction_history(self) -> List[TransactionRecord]:
        return list(self.transaction_history)

    def clear_transaction_history(self):
        self.transaction_history.clear()

    # --- Queries ---

    def find_item_by_id(self, item_id: str) -> Optional[Item]:
        if self.catalog is None or not hasattr(self.catalog, "get_item_by_id"):
            return None
        return self.catalog.get_item_by_id(item_id)

    def find_inventories_with_item(self, item_id: str) -> List[str]:
        if not item_id:
            return []
        return [inventory_id for inventory_id, inventory in self.inventories.items()
                if inventory.get_item_count(item_id) > 0]

    def update(self, delta_time: float):
        for inventory in list(self.inventories.values()):
            inventory.update(delta_time)

    def destroy(self):
        for inventory in list(self.inventories.values()):
            inventory.destroy()
        self.inventories.clear()
        self.loot_tables.clear()
        self.transaction_history.clear()
        self.clear_listeners()
        Logger.debug("InventoryManager", "Inventory manager destroyed")
