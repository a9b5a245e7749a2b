# inventory_engine/items/inventory/__init__.py
"""
Inventory Package.
Manages slots, grid placement, weight limits, character extensions and serialization.
"""
from .slot import InventorySlot
from .grid import InventoryGrid
from .core import Inventory
from .display import default_sort_key
from .character import CharacterInventory, QuickSlot
from .equipment import EquipmentLoadout
from .manager import InventoryManager, TransactionRecord
