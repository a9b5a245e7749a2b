# tests/test_catalog.py
import json
import os
import tempfile
import unittest

from tests.fixtures import TEST_CATALOG, InventoryTestBase
from inventory_engine.items.catalog import ItemCatalog, ItemDatabase
from inventory_engine.items.item import Item
from inventory_engine.utils.logger import LogLevel


class TestItemDatabase(InventoryTestBase):

    def test_satisfies_catalog_protocol(self):
        self.assertIsInstance(self.catalog, ItemCatalog)

    def test_lookup_and_categories(self):
        self.assertEqual(self.catalog.get_item_by_id("iron_sword").name, "Iron Sword")
        self.assertIsNone(self.catalog.get_item_by_id("nope"))
        equipment = {item.obj_id for item in self.catalog.get_items_by_category("equipment")}
        self.assertEqual(equipment, {"iron_sword", "steel_sword", "great_axe", "wooden_shield",
                                     "leather_cap", "silver_ring"})
        self.assertEqual(self.catalog.get_items_by_category("unknown"), [])

    def test_register_item_requires_id(self):
        self.assertIsNone(self.catalog.register_item({"name": "Nameless"}))
        self.assertLogged(LogLevel.ERROR, "without an id")

    def test_register_instance_and_overwrite(self):
        self.catalog.register_item(Item(obj_id="iron_ore", name="Better Ore"))
        self.assertEqual(self.catalog.get_item_by_id("iron_ore").name, "Better Ore")

    def test_create_item_is_a_copy(self):
        copy = self.catalog.create_item("leather_cap")
        self.assertIsNot(copy, self.catalog.get_item_by_id("leather_cap"))
        self.assertIsNone(self.catalog.create_item("nope"))

    def test_find_items(self):
        self.assertEqual([i.obj_id for i in self.catalog.find_items(rarity="uncommon")], ["steel_sword"])
        self.assertEqual([i.obj_id for i in self.catalog.find_items(name="sword", item_type="weapon")],
                         ["iron_sword", "steel_sword"])

    def test_equipment_sets(self):
        iron_set = self.catalog.get_equipment_set("iron_set")
        self.assertEqual(iron_set["rarity"], "RARE")
        self.assertEqual(self.catalog.find_set_for_item("leather_cap")["id"], "iron_set")
        self.assertIsNone(self.catalog.find_set_for_item("great_axe"))
        self.assertEqual(self.catalog.get_active_set_bonuses(["iron_sword"]), [])
        self.assertEqual(self.catalog.get_active_set_bonuses(["iron_sword", "leather_cap"]), [{"defense": 3}])

    def test_custom_item_type_defaults(self):
        database = ItemDatabase.from_dict({
            "item_types": {"GEM": {"max_stack_size": 10, "weight": 0.05}},
            "categories": {"valuables": ["GEM"]},
            "items": [{"id": "ruby", "type": "GEM", "value": 300}],
        })
        ruby = database.get_item_by_id("ruby")
        self.assertEqual(ruby.max_stack_size, 10)
        self.assertEqual([i.obj_id for i in database.get_items_by_category("valuables")], ["ruby"])

    def test_load_from_file(self):
        with tempfile.TemporaryDirectory() as folder:
            path = os.path.join(folder, "items.json")
            with open(path, "w") as f:
                json.dump(TEST_CATALOG, f)
            database = ItemDatabase.load_from_file(path)
            self.assertEqual(len(database.get_all_items()), len(TEST_CATALOG["items"]))
            self.assertIsNotNone(database.get_loot_table("goblin_drops"))

            broken = os.path.join(folder, "broken.json")
            with open(broken, "w") as f:
                f.write("{not json")
            self.assertEqual(ItemDatabase.load_from_file(broken).get_all_items(), [])

        self.assertEqual(ItemDatabase.load_from_file("/does/not/exist.json").get_all_items(), [])


if __name__ == '__main__':
    unittest.main()
