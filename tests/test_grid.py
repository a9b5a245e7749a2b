# tests/test_grid.py
import unittest

from tests.fixtures import InventoryTestBase
from inventory_engine.items.inventory import InventoryGrid
from inventory_engine.utils.events import GridEvent


class TestInventoryGrid(InventoryTestBase):

    def test_one_distinct_slot_per_cell(self):
        grid = InventoryGrid(3, 2)
        self.assertEqual(len(grid.slots), 6)
        self.assertEqual(len({id(slot) for slot in grid.slots}), 6)
        self.assertEqual(grid.get_slot_at(2, 1).index, 5)
        self.assertIsNone(grid.get_slot_at(3, 0))

    def test_invalid_dimensions(self):
        with self.assertRaises(ValueError):
            InventoryGrid(0, 4)

    def test_multi_cell_item_covers_footprint(self):
        """A 2x2 item anchors at its top-left cell and marks the other three cells."""
        grid = InventoryGrid(3, 3)
        crate = self.make("crate")
        self.assertTrue(grid.place_item(crate, 1, 1))

        anchor = grid.get_slot_at(1, 1)
        for x, y in ((2, 1), (1, 2), (2, 2)):
            self.assertIs(grid.get_slot_at(x, y).covered_by, anchor)
            self.assertIsNone(grid.get_slot_at(x, y).item)
        self.assertEqual(len(grid.get_slots_for_item(crate)), 4)
        self.assertEqual(grid.get_empty_slots_count(), 5)

        # No other item may land on a covered cell
        self.assertFalse(grid.place_item(self.make("pebble"), 2, 2))

    def test_multi_cell_item_must_fit_inside_grid(self):
        grid = InventoryGrid(3, 3)
        self.assertFalse(grid.place_item(self.make("crate"), 2, 2))
        self.assertTrue(grid.get_slot_at(2, 2).is_empty())

    def test_removing_releases_footprint(self):
        grid = InventoryGrid(2, 2)
        crate = self.make("crate")
        grid.place_item(crate, 0, 0)
        self.assertTrue(grid.is_full())

        self.assertEqual(grid.remove_item(crate), 1)
        self.assertFalse(grid.is_full())
        self.assertTrue(all(slot.covered_by is None for slot in grid.slots))

    def test_auto_place_fills_stacks_then_new_slots(self):
        grid = InventoryGrid(2, 2)
        pebble = self.make("pebble")
        grid.place_item(pebble, 1, 1, quantity=3)

        placed = grid.auto_place_item(self.make("pebble"), 4)
        self.assertEqual(placed, 4)
        self.assertEqual(grid.get_slot_at(1, 1).quantity, 5)
        self.assertEqual(grid.get_slot_at(0, 0).quantity, 2)

    def test_auto_place_uses_one_new_slot_per_call(self):
        grid = InventoryGrid(2, 2)
        self.assertEqual(grid.auto_place_item(self.make("pebble"), 12), 5)

    def test_auto_place_multi_cell(self):
        grid = InventoryGrid(3, 2)
        grid.place_item(self.make("pebble"), 0, 0)
        self.assertEqual(grid.auto_place_item(self.make("crate"), 1), 1)
        self.assertIsNotNone(grid.get_slot_at(1, 0).item)
        self.assertEqual(grid.auto_place_item(self.make("crate"), 1), 0)

    def test_count_placeable_matches_auto_place(self):
        grid = InventoryGrid(3, 3)
        grid.place_item(self.make("pebble"), 0, 0, quantity=4)
        grid.place_item(self.make("iron_sword"), 1, 1)

        pebble = self.make("pebble")
        predicted = grid.count_placeable(pebble, 50)
        placed = 0
        while True:
            step = grid.auto_place_item(pebble, 50 - placed)
            if step <= 0:
                break
            placed += step
        self.assertEqual(predicted, placed)
        self.assertEqual(placed, 1 + 7 * 5)

    def test_move_item_may_overlap_own_footprint(self):
        grid = InventoryGrid(3, 2)
        crate = self.make("crate")
        grid.place_item(crate, 0, 0)
        recorder = self.record(grid, GridEvent.ITEM_MOVED)

        self.assertTrue(grid.move_item(crate, 1, 0))
        self.assertEqual(grid.find_item_position(crate), (1, 0))
        self.assertIsNone(grid.get_slot_at(0, 0).covered_by)
        self.assertIs(grid.get_slot_at(2, 1).covered_by, grid.get_slot_at(1, 0))
        self.assertEqual(recorder.last(GridEvent.ITEM_MOVED).get("from_x"), 0)

    def test_move_item_blocked(self):
        grid = InventoryGrid(3, 2)
        crate = self.make("crate")
        grid.place_item(crate, 0, 0)
        grid.place_item(self.make("pebble"), 2, 1)
        self.assertFalse(grid.move_item(crate, 1, 0))
        self.assertEqual(grid.find_item_position(crate), (0, 0))

    def test_locked_cell_blocks_region(self):
        grid = InventoryGrid(2, 2)
        grid.get_slot_at(1, 1).set_locked(True)
        self.assertIsNone(grid.find_empty_region(2, 2))
        self.assertEqual(grid.count_placeable(self.make("crate"), 1), 0)

    def test_resize_grow_and_refuse_shrink(self):
        grid = InventoryGrid(2, 2)
        grid.place_item(self.make("pebble"), 1, 1)
        recorder = self.record(grid, GridEvent.GRID_RESIZED)

        self.assertTrue(grid.resize(3, 3))
        self.assertEqual(len(grid.slots), 9)
        self.assertEqual(len(recorder.last(GridEvent.GRID_RESIZED).get("added_slots")), 5)
        self.assertIsNotNone(grid.get_slot_at(1, 1).item)

        self.assertFalse(grid.resize(1, 1))
        self.assertEqual((grid.width, grid.height), (3, 3))

    def test_sort_is_idempotent(self):
        grid = InventoryGrid(3, 2)
        grid.place_item(self.make("iron_ore"), 2, 1, quantity=4)
        grid.place_item(self.make("iron_sword"), 0, 1)
        grid.place_item(self.make("health_potion"), 1, 0, quantity=2)

        self.assertTrue(grid.sort_items())
        first = [(s.index, s.item.obj_id if s.item else None, s.quantity) for s in grid.slots]
        self.assertTrue(grid.sort_items())
        second = [(s.index, s.item.obj_id if s.item else None, s.quantity) for s in grid.slots]
        self.assertEqual(first, second)
        # Type order: CONSUMABLE, MATERIAL, WEAPON
        self.assertEqual([s.item.obj_id for s in grid.get_occupied_slots()],
                         ["health_potion", "iron_ore", "iron_sword"])

    def test_coordinate_conversion(self):
        grid = InventoryGrid(4, 4, cell_size=2.0, padding=0.5)
        self.assertEqual(grid.grid_to_world(2, 1), (5.0, 2.5))
        self.assertEqual(grid.world_to_grid(5.1, 2.6), (2, 1))
        self.assertIsNone(grid.world_to_grid(50, 0))


if __name__ == '__main__':
    unittest.main()
