# tests/test_item.py
import unittest

from tests.fixtures import InventoryTestBase
from inventory_engine.items.armor import Armor
from inventory_engine.items.consumable import Consumable
from inventory_engine.items.item import Item, Rarity
from inventory_engine.items.weapon import Weapon


class TestItemModel(unittest.TestCase):

    def test_defaults(self):
        item = Item(obj_id="thing", name="Thing")
        self.assertEqual(item.item_type, "MISC")
        self.assertEqual(item.rarity, Rarity.COMMON)
        self.assertTrue(item.stackable)
        self.assertEqual(item.max_stack_size, 99)
        self.assertEqual(item.get_footprint(), (1, 1))

    def test_non_stackable_forces_stack_of_one(self):
        item = Item(obj_id="relic", stackable=False, max_stack_size=40)
        self.assertEqual(item.max_stack_size, 1)

    def test_weapon_never_stacks(self):
        """Weapons ignore a stackable template flag."""
        sword = Weapon(obj_id="sword", stackable=True, max_stack_size=10)
        self.assertFalse(sword.stackable)
        self.assertEqual(sword.max_stack_size, 1)
        self.assertEqual(sword.equip_slot, "MAINHAND")
        self.assertTrue(sword.is_equippable)

    def test_rarity_parse(self):
        self.assertEqual(Rarity.parse("epic"), Rarity.EPIC)
        self.assertEqual(Rarity.parse(3), Rarity.RARE)
        self.assertEqual(Rarity.parse("mythic"), Rarity.COMMON)
        self.assertEqual(Rarity.parse(None, Rarity.JUNK), Rarity.JUNK)
        self.assertTrue(Rarity.LEGENDARY > Rarity.EPIC)

    def test_stack_compatibility(self):
        a = Item(obj_id="ore")
        b = Item(obj_id="ore")
        self.assertTrue(a.can_stack_with(b))

        self.assertFalse(a.can_stack_with(Item(obj_id="gem")))
        self.assertFalse(a.can_stack_with(None))

        b.is_equipped = True
        self.assertFalse(a.can_stack_with(b))

        worn = Item(obj_id="ore", durability=5)
        fresh = Item(obj_id="ore", durability=10)
        self.assertFalse(worn.can_stack_with(fresh))

        flagged = Item(obj_id="ore", metadata={"noStack": True})
        self.assertFalse(a.can_stack_with(flagged))

    def test_clone_is_independent_and_unequipped(self):
        original = Armor(obj_id="cap", name="Cap", equip_slot="HEAD", stats={"defense": 2})
        original.on_equip()
        original.set_owner("hero")

        copy = original.clone()
        self.assertIsInstance(copy, Armor)
        self.assertEqual(copy.obj_id, "cap")
        self.assertEqual(copy.equip_slot, "HEAD")
        self.assertFalse(copy.is_equipped)
        self.assertIsNone(copy.owner)

        copy.stats["defense"] = 99
        self.assertEqual(original.stats["defense"], 2)

    def test_use_only_for_consumables(self):
        """use() applies effects to the target and never changes quantities."""
        applied = []

        class Target:
            def apply_item_effect(self, effect, item):
                applied.append((effect["type"], item.obj_id))

        potion = Consumable(obj_id="potion", effects=[{"type": "heal", "amount": 5}])
        self.assertTrue(potion.use(Target()))
        self.assertEqual(applied, [("heal", "potion")])
        self.assertEqual(potion.quantity, 1)

        rock = Item(obj_id="rock")
        self.assertFalse(rock.use(Target()))

    def test_callable_effect(self):
        hits = []
        potion = Consumable(obj_id="potion", effects=[{"type": "custom", "apply": lambda t, i: hits.append(t)}])
        potion.use("target")
        self.assertEqual(hits, ["target"])
        # Callables are dropped from serialized effects
        self.assertNotIn("apply", potion.to_dict()["effects"][0])

    def test_durability(self):
        blade = Weapon(obj_id="blade", durability=10, stats={"damage": 7})
        self.assertEqual(blade.damage_value, 7)
        self.assertFalse(blade.damage(4))
        self.assertTrue(blade.repair(2))
        self.assertEqual(blade.durability, 8)
        self.assertTrue(blade.damage(20))
        self.assertTrue(blade.is_broken())
        self.assertEqual(blade.damage_value, 0)

    def test_split(self):
        ore = Item(obj_id="ore", quantity=10)
        part = ore.split(4)
        self.assertEqual((ore.quantity, part.quantity), (6, 4))
        self.assertEqual(part.stacking_key(), ore.stacking_key())
        self.assertIsNone(ore.split(6))
        self.assertIsNone(ore.split(0))

    def test_description_mentions_stats_and_value(self):
        sword = Weapon(obj_id="sword", name="Sword", value=12, stats={"attack": 4})
        text = sword.get_description()
        self.assertIn("Sword (COMMON)", text)
        self.assertIn("attack: +4", text)
        self.assertIn("Value: 12 gold", text)

    def test_tooltip_color_follows_rarity(self):
        self.assertEqual(Item(rarity="LEGENDARY").get_tooltip_color(), "#ff8000")
        self.assertEqual(Item(tooltip_color="#123456").get_tooltip_color(), "#123456")


class TestCatalogTemplates(InventoryTestBase):

    def test_type_defaults_fill_template(self):
        ore = self.catalog.get_item_by_id("iron_ore")
        self.assertEqual(ore.max_stack_size, 100)
        self.assertAlmostEqual(ore.weight, 0.1)

        potion = self.catalog.get_item_by_id("health_potion")
        self.assertTrue(potion.is_consumable)
        self.assertEqual(potion.max_stack_size, 20)
        self.assertEqual(potion.cooldown, 1.5)

    def test_serialization_round_trip_keeps_class(self):
        axe = self.make("great_axe")
        rebuilt = self.factory.from_dict(axe.to_dict())
        self.assertIsInstance(rebuilt, Weapon)
        self.assertTrue(rebuilt.is_two_handed)
        self.assertEqual(rebuilt.stats, {"attack": 22})


if __name__ == '__main__':
    unittest.main()
