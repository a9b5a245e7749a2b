# tests/test_inventory_persistence.py
import asyncio
import unittest

from tests.fixtures import build_test_catalog
from inventory_engine.items.inventory import CharacterInventory, EquipmentLoadout, Inventory
from inventory_engine.items.item_factory import ItemFactory
from inventory_engine.utils.events import InventoryEvent
from inventory_engine.utils.logger import Logger, LogLevel


class TestInventoryPersistence(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self._previous_log_level = Logger.get_level()
        Logger.set_level(LogLevel.CRITICAL + 1)
        Logger.clear_history()
        self.catalog = build_test_catalog()
        self.factory = ItemFactory(self.catalog)

    def tearDown(self):
        Logger.set_level(self._previous_log_level)

    def _filled(self) -> Inventory:
        inventory = Inventory(inventory_id="chest", name="Chest", width=4, height=3, max_weight=80)
        inventory.add_item(self.factory.create_item("iron_ore"), 12)
        inventory.get_slot(6).set_item(self.factory.create_item("iron_sword"), 1)
        inventory.add_item(self.factory.create_item("health_potion"), 3)
        return inventory

    def test_to_dict_shape(self):
        data = self._filled().to_dict()
        self.assertEqual(data["id"], "chest")
        self.assertTrue(data["isGridBased"])
        self.assertEqual((data["width"], data["height"], data["maxWeight"]), (4, 3, 80))
        self.assertIn({"itemId": "iron_sword", "quantity": 1, "slotIndex": 6}, data["items"])
        self.assertAlmostEqual(data["currentWeight"], 12 * 0.1 + 3.0 + 3 * 0.2)

    async def test_round_trip_with_sync_loader(self):
        data = self._filled().to_dict()
        restored = Inventory(width=2, height=2)

        self.assertTrue(await restored.from_dict(data, self.catalog.create_item))
        self.assertEqual(restored.id, "chest")
        self.assertEqual((restored.width, restored.height), (4, 3))
        self.assertEqual(restored.get_item_count("iron_ore"), 12)
        self.assertEqual(restored.get_slot(6).item.obj_id, "iron_sword")
        self.assertAlmostEqual(restored.current_weight, data["currentWeight"])

    async def test_async_loader_is_awaited(self):
        data = self._filled().to_dict()
        calls = []

        async def load(item_id):
            calls.append(item_id)
            await asyncio.sleep(0)
            return self.catalog.create_item(item_id)

        restored = Inventory()
        self.assertTrue(await restored.from_dict(data, load))
        self.assertEqual(len(calls), len(data["items"]))
        self.assertEqual(restored.get_item_count("health_potion"), 3)

    async def test_unknown_item_is_skipped(self):
        """Entries that cannot be resolved are logged; the rest still load."""
        data = self._filled().to_dict()
        data["items"].append({"itemId": "ghost", "quantity": 1, "slotIndex": 11})
        restored = Inventory()
        recorder = []
        restored.subscribe(InventoryEvent.INVENTORY_LOADED, recorder.append)

        self.assertFalse(await restored.from_dict(data, self.catalog.create_item))
        self.assertEqual(restored.get_item_count("iron_ore"), 12)
        self.assertFalse(recorder[0].get("success"))
        self.assertTrue(any("ghost" in message for _, _, message in Logger.get_history(LogLevel.WARNING)))

    async def test_loader_exception_is_contained(self):
        data = self._filled().to_dict()

        def flaky(item_id):
            if item_id == "iron_sword":
                raise ConnectionError("catalog offline")
            return self.catalog.create_item(item_id)

        restored = Inventory()
        self.assertFalse(await restored.from_dict(data, flaky))
        self.assertEqual(restored.get_item_count("iron_sword"), 0)
        self.assertEqual(restored.get_item_count("health_potion"), 3)

    async def test_occupied_slot_falls_back_to_add(self):
        data = {"id": "box", "items": [
            {"itemId": "iron_sword", "quantity": 1, "slotIndex": 0},
            {"itemId": "leather_cap", "quantity": 1, "slotIndex": 0},
        ]}
        restored = Inventory(width=3, height=1, max_weight=None)
        self.assertTrue(await restored.from_dict(data, self.catalog.create_item))
        self.assertEqual(restored.get_slot(0).item.obj_id, "iron_sword")
        self.assertEqual(restored.get_slot(1).item.obj_id, "leather_cap")

    async def test_loading_replaces_previous_contents(self):
        restored = Inventory()
        restored.add_item(self.factory.create_item("pebble"), 4)
        self.assertTrue(await restored.from_dict({"items": []}, self.catalog.create_item))
        self.assertEqual(restored.get_item_count("pebble"), 0)

    async def test_missing_data_or_loader(self):
        inventory = Inventory()
        self.assertFalse(await inventory.from_dict({}, self.catalog.create_item))
        self.assertFalse(await inventory.from_dict({"items": []}, None))

    async def test_character_round_trip(self):
        character = CharacterInventory(inventory_id="hero_bag", auto_equip_new_items=True)
        character.add_item(self.factory.create_item("health_potion"), 4)
        character.add_currency("gold", 250)
        character.add_currency("shards", 3)
        character.set_quick_slot(2, self.factory.create_item("health_potion"))
        data = character.to_dict()

        self.assertEqual(data["quickSlots"][2], {"index": 2, "itemId": "health_potion", "isEmpty": False})
        self.assertEqual(data["quickSlots"][0], {"index": 0, "isEmpty": True})

        restored = CharacterInventory(equipment=EquipmentLoadout())
        self.assertTrue(await restored.from_dict(data, self.catalog.create_item))
        self.assertEqual(restored.get_currency("gold"), 250)
        self.assertEqual(restored.get_currency("shards"), 3)
        self.assertTrue(restored.auto_equip_new_items)
        quick = restored.get_quick_slot(2)
        self.assertEqual(quick.item.obj_id, "health_potion")
        self.assertEqual(quick.quantity, 4)


if __name__ == '__main__':
    unittest.main()
