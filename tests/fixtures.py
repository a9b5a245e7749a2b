# tests/fixtures.py
import copy
import os
import sys
import unittest
from typing import Any, Dict, List, Optional

# Get the absolute path to the project root (one level up from tests/)
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))

# Insert root into sys.path so we can import 'inventory_engine'
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from inventory_engine.items.catalog import ItemDatabase
from inventory_engine.items.inventory import Inventory, InventoryManager
from inventory_engine.items.item import Item
from inventory_engine.items.item_factory import ItemFactory
from inventory_engine.utils.events import Event
from inventory_engine.utils.logger import Logger, LogLevel

TEST_CATALOG: Dict[str, Any] = {
    "items": [
        {"id": "iron_sword", "name": "Iron Sword", "type": "WEAPON", "value": 50, "weight": 3.0,
         "stats": {"attack": 10}, "color": "#808080"},
        {"id": "steel_sword", "name": "Steel Sword", "type": "WEAPON", "rarity": "UNCOMMON",
         "value": 120, "weight": 3.5, "stats": {"attack": 14}},
        {"id": "great_axe", "name": "Great Axe", "type": "WEAPON", "is_two_handed": True,
         "value": 200, "weight": 8.0, "stats": {"attack": 22}},
        {"id": "wooden_shield", "name": "Wooden Shield", "type": "ARMOR", "equip_slot": "OFFHAND",
         "value": 30, "weight": 4.0, "stats": {"defense": 5}},
        {"id": "leather_cap", "name": "Leather Cap", "type": "ARMOR", "equip_slot": "HEAD",
         "value": 15, "weight": 1.0, "stats": {"defense": 2}},
        {"id": "silver_ring", "name": "Silver Ring", "type": "ACCESSORY", "equip_slot": "RING",
         "value": 80, "stats": {"critChance": 2}},
        {"id": "health_potion", "name": "Health Potion", "type": "CONSUMABLE", "value": 10,
         "cooldown": 1.5, "effects": [{"type": "heal", "amount": 25, "description": "Restores 25 health"}]},
        {"id": "iron_ore", "name": "Iron Ore", "type": "MATERIAL", "value": 2},
        {"id": "pebble", "name": "Pebble", "type": "MISC", "max_stack_size": 5, "weight": 0.1},
        {"id": "crate", "name": "Crate", "type": "MISC", "stackable": False, "width": 2, "height": 2,
         "weight": 6.0},
    ],
    "loot_tables": {
        "goblin_drops": {
            "name": "Goblin Drops",
            "entries": [
                {"itemId": "iron_ore", "weight": 3, "minCount": 1, "maxCount": 3},
                {"itemId": "health_potion", "weight": 1},
            ],
            "minRolls": 1,
            "maxRolls": 2,
        },
        "nothing": {
            "name": "Nothing",
            "entries": [{"itemId": "iron_ore", "weight": 0}],
        },
    },
    "equipment_sets": {
        "iron_set": {
            "name": "Iron Set",
            "pieces": ["iron_sword", "leather_cap"],
            "bonuses": {"2": {"defense": 3}},
            "rarity": "RARE",
        },
    },
}


def build_test_catalog() -> ItemDatabase:
    return ItemDatabase.from_dict(copy.deepcopy(TEST_CATALOG))


class EventRecorder:
    """Collects events so tests can assert on what an entity emitted."""

    def __init__(self):
        self.events: List[Event] = []

    def __call__(self, event: Event):
        self.events.append(event)

    def of_type(self, event_type) -> List[Event]:
        return [event for event in self.events if event.type == event_type]

    def last(self, event_type) -> Optional[Event]:
        matching = self.of_type(event_type)
        return matching[-1] if matching else None


class InventoryTestBase(unittest.TestCase):
    """Base class for inventory tests: a fresh catalog, factory and manager per test."""

    def setUp(self):
        """Runs before EVERY test function."""
        # Keep test output quiet; history still records everything
        self._previous_log_level = Logger.get_level()
        Logger.set_level(LogLevel.CRITICAL + 1)

        self.catalog = build_test_catalog()
        self.factory = ItemFactory(self.catalog)
        self.manager = InventoryManager(catalog=self.catalog, factory=self.factory)
        # Tests only see what they log themselves
        Logger.clear_history()

    def tearDown(self):
        self.manager.destroy()
        Logger.set_level(self._previous_log_level)

    def make(self, item_id: str, **options) -> Item:
        item = self.factory.create_item(item_id, **options)
        self.assertIsNotNone(item, f"Fixture item '{item_id}' could not be created")
        return item

    def record(self, emitter, *event_types) -> EventRecorder:
        recorder = EventRecorder()
        for event_type in event_types:
            emitter.subscribe(event_type, recorder)
        return recorder

    def assertWeightConsistent(self, inventory: Inventory):
        """current_weight must equal the sum over slots of weight * quantity."""
        expected = sum(slot.item.weight * slot.quantity for slot in inventory.slots if slot.item)
        self.assertAlmostEqual(inventory.current_weight, expected, places=6)

    def assertStacksBounded(self, inventory: Inventory):
        for slot in inventory.slots:
            limit = slot.item.max_stack_size if slot.item else 1
            self.assertGreaterEqual(slot.quantity, 0)
            self.assertLessEqual(slot.quantity, limit, f"{slot} exceeds its stack limit")

    def assertLogged(self, level: int, substring: str):
        messages = [message for _, _, message in Logger.get_history(level)]
        self.assertTrue(any(substring in message for message in messages),
                        f"Expected a log entry containing '{substring}', got {messages}")
