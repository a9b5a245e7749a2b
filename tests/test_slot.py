# tests/test_slot.py
import unittest
from unittest.mock import MagicMock

from tests.fixtures import InventoryTestBase
from inventory_engine.items.inventory import InventorySlot
from inventory_engine.utils.events import SlotEvent


class TestInventorySlot(InventoryTestBase):

    def test_set_item_clamps_to_stack_limit(self):
        slot = InventorySlot()
        pebble = self.make("pebble")
        self.assertTrue(slot.set_item(pebble, 9))
        self.assertEqual(slot.quantity, 5)
        self.assertTrue(slot.is_full())
        self.assertEqual(slot.get_remaining_space(), 0)

    def test_rejects_non_positive_quantity(self):
        slot = InventorySlot()
        self.assertFalse(slot.set_item(self.make("pebble"), 0))
        self.assertTrue(slot.is_empty())

    def test_add_and_remove_quantity(self):
        slot = InventorySlot()
        slot.set_item(self.make("pebble"), 2)
        self.assertEqual(slot.add_quantity(6), 3, "Overflow beyond the stack limit is returned")
        self.assertEqual(slot.quantity, 5)

        self.assertEqual(slot.remove_quantity(2), 2)
        self.assertEqual(slot.remove_quantity(10), 3)
        self.assertTrue(slot.is_empty())
        self.assertEqual(slot.quantity, 0)

    def test_change_event_reports_weights(self):
        slot = InventorySlot()
        recorder = self.record(slot, SlotEvent.ITEM_CHANGED)
        slot.set_item(self.make("iron_sword"), 1)
        slot.clear_item()

        first, second = recorder.events
        self.assertAlmostEqual(first.get("weight"), 3.0)
        self.assertAlmostEqual(first.get("previous_weight"), 0.0)
        self.assertAlmostEqual(second.get("weight"), 0.0)
        self.assertAlmostEqual(second.get("previous_weight"), 3.0)

    def test_type_filters(self):
        only_weapons = InventorySlot(accepts_only=["weapon"])
        self.assertTrue(only_weapons.can_accept(self.make("iron_sword")))
        self.assertFalse(only_weapons.can_accept(self.make("iron_ore")))

        no_materials = InventorySlot(rejects_types=["MATERIAL"])
        self.assertFalse(no_materials.can_accept(self.make("iron_ore")))
        self.assertTrue(no_materials.can_accept(self.make("pebble")))

    def test_typed_slot_requires_matching_equip_slot(self):
        head = InventorySlot(slot_type="HEAD")
        self.assertTrue(head.can_accept(self.make("leather_cap")))
        self.assertFalse(head.can_accept(self.make("iron_sword")))

    def test_locked_slot_is_frozen(self):
        slot = InventorySlot()
        slot.set_item(self.make("pebble"), 2)
        slot.set_locked(True)

        self.assertFalse(slot.set_item(self.make("iron_ore"), 1))
        self.assertEqual(slot.clear_item(), (None, 0))
        self.assertEqual(slot.add_quantity(1), 1)
        self.assertEqual(slot.remove_quantity(1), 0)
        self.assertEqual(slot.quantity, 2)

    def test_state_change_event_only_on_change(self):
        slot = InventorySlot()
        recorder = self.record(slot, SlotEvent.SLOT_STATE_CHANGED)
        slot.set_highlighted(True)
        slot.set_highlighted(True)
        slot.set_hidden(False)
        self.assertEqual(len(recorder.events), 1)
        self.assertEqual(recorder.events[0].get("flag"), "highlighted")

    def test_two_handed_blocked_by_offhand(self):
        """A two-handed weapon cannot go into the main hand while the off hand is used."""
        mainhand = InventorySlot(slot_type="MAINHAND")
        offhand = InventorySlot(slot_type="OFFHAND")
        owner = MagicMock()
        owner.get_slot_by_type.side_effect = lambda t: {"MAINHAND": mainhand, "OFFHAND": offhand}[t]
        mainhand.inventory = owner
        offhand.inventory = owner

        offhand.item = self.make("wooden_shield")
        offhand.quantity = 1
        self.assertFalse(mainhand.can_accept(self.make("great_axe")))
        self.assertTrue(mainhand.can_accept(self.make("iron_sword")))

        offhand.item, offhand.quantity = None, 0
        mainhand.set_item(self.make("great_axe"), 1)
        self.assertFalse(offhand.can_accept(self.make("wooden_shield")))

    def test_transfer_partial_into_stack(self):
        source = InventorySlot(index=0)
        target = InventorySlot(index=1)
        source.set_item(self.make("pebble"), 4)
        target.set_item(self.make("pebble"), 3)

        self.assertTrue(source.transfer_to(target))
        self.assertEqual(target.quantity, 5)
        self.assertEqual(source.quantity, 2)

    def test_transfer_into_empty_moves_instance(self):
        source = InventorySlot(index=0)
        target = InventorySlot(index=1)
        pebble = self.make("pebble")
        source.set_item(pebble, 3)

        self.assertTrue(source.transfer_to(target, 3))
        self.assertIs(target.item, pebble)
        self.assertTrue(source.is_empty())

    def test_transfer_rejected_leaves_both_untouched(self):
        source = InventorySlot(index=0)
        target = InventorySlot(index=1, accepts_only=["WEAPON"])
        source.set_item(self.make("pebble"), 3)

        self.assertFalse(source.transfer_to(target))
        self.assertEqual(source.quantity, 3)
        self.assertTrue(target.is_empty())

    def test_swap(self):
        a = InventorySlot(index=0)
        b = InventorySlot(index=1)
        ore = self.make("iron_ore")
        sword = self.make("iron_sword")
        a.set_item(ore, 7)
        b.set_item(sword, 1)

        self.assertTrue(a.swap_with(b))
        self.assertIs(a.item, sword)
        self.assertEqual(b.quantity, 7)

    def test_swap_respects_filters(self):
        a = InventorySlot(index=0, accepts_only=["MATERIAL"])
        b = InventorySlot(index=1)
        a.set_item(self.make("iron_ore"), 2)
        b.set_item(self.make("iron_sword"), 1)

        self.assertFalse(a.swap_with(b))
        self.assertEqual(a.item.obj_id, "iron_ore")

    def test_clone_copies_configuration_only(self):
        slot = InventorySlot(index=3, slot_type="head", accepts_only=["ARMOR"], attachment_bone="head_bone")
        slot.set_item(self.make("leather_cap"), 1)
        copy = slot.clone()
        self.assertTrue(copy.is_empty())
        self.assertEqual(copy.slot_type, "HEAD")
        self.assertEqual(copy.get_attachment_data()["bone"], "head_bone")

    def test_visual_descriptor(self):
        slot = InventorySlot()
        self.assertIsNone(slot.get_visual_descriptor())
        slot.set_item(self.make("iron_sword"), 1)
        self.assertEqual(slot.get_visual_descriptor()["color"], "#808080")


if __name__ == '__main__':
    unittest.main()
