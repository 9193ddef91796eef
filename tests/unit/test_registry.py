#!/usr/bin/env python3
"""
Slot Registry Unit Tests

Tests for allocation order, plate uniqueness, check-out and snapshot restore.
"""

import unittest
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add the src directory to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2] / "src"))

from slotkeeper.domain.models import LicensePlate, VehicleType, ParkingSlot
from slotkeeper.domain.registry import SlotRegistry, DEFAULT_CAPACITY
from slotkeeper.exceptions import (
    DuplicateEntryError, InvalidInputError, SlotNotFoundError, SlotOccupiedError
)


T0 = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)


def plate(value):
    return LicensePlate(value)


class TestSlotRegistryAllocation(unittest.TestCase):
    """Unit tests for free slot search and check-in"""

    def setUp(self):
        self.registry = SlotRegistry()

    def test_default_capacity(self):
        self.assertEqual(DEFAULT_CAPACITY, 50)
        self.assertEqual(self.registry.capacity, 50)
        self.assertEqual(len(self.registry.slots), 50)
        self.assertEqual(self.registry.available_count, 50)
        self.assertEqual(self.registry.total_revenue, 0.0)

    def test_invalid_capacity(self):
        for bad in (0, -5):
            with self.assertRaises(InvalidInputError):
                SlotRegistry(bad)

    def test_first_free_slot_is_lowest_index(self):
        self.assertEqual(self.registry.find_free_slot(), 0)

        for k in range(5):
            self.registry.check_in(k, plate(f"CAR{k}"), VehicleType.CAR, T0)
            self.assertEqual(self.registry.find_free_slot(), k + 1)

    def test_freed_slot_is_reused_first(self):
        for k in range(4):
            self.registry.check_in(k, plate(f"CAR{k}"), VehicleType.CAR, T0)
        self.registry.check_out(1)

        self.assertEqual(self.registry.find_free_slot(), 1)

    def test_check_in_returns_occupied_slot(self):
        slot = self.registry.check_in(0, plate("ABC123"), VehicleType.MOTORCYCLE, T0)

        self.assertEqual(slot.number, 1)
        self.assertTrue(slot.is_occupied)
        self.assertEqual(self.registry.find_by_plate(plate("ABC123")), 0)
        self.assertEqual(self.registry.occupied_count, 1)

    def test_duplicate_plate_rejected_without_mutation(self):
        self.registry.check_in(0, plate("ABC123"), VehicleType.CAR, T0)

        with self.assertRaises(DuplicateEntryError) as ctx:
            self.registry.check_in(1, plate("ABC123"), VehicleType.TRUCK, T0)

        self.assertEqual(ctx.exception.slot_number, 1)
        self.assertFalse(self.registry.get_slot(1).is_occupied)
        self.assertEqual(self.registry.occupied_count, 1)

    def test_plate_matching_is_case_sensitive(self):
        self.registry.check_in(0, plate("ABC123"), VehicleType.CAR, T0)
        self.registry.check_in(1, plate("abc123"), VehicleType.CAR, T0)

        self.assertEqual(self.registry.find_by_plate(plate("abc123")), 1)

    def test_occupied_slot_rejected(self):
        self.registry.check_in(0, plate("ABC123"), VehicleType.CAR, T0)

        with self.assertRaises(SlotOccupiedError):
            self.registry.check_in(0, plate("XYZ999"), VehicleType.CAR, T0)
        self.assertIsNone(self.registry.find_by_plate(plate("XYZ999")))

    def test_index_out_of_range(self):
        for bad in (-1, 50, True, "1"):
            with self.assertRaises(InvalidInputError, msg=f"index={bad!r}"):
                self.registry.check_in(bad, plate("ABC123"), VehicleType.CAR, T0)

    def test_full_registry(self):
        registry = SlotRegistry(3)
        for k in range(3):
            registry.check_in(k, plate(f"CAR{k}"), VehicleType.CAR, T0)

        self.assertIsNone(registry.find_free_slot())
        self.assertEqual(registry.available_count, 0)
        self.assertEqual(registry.get_occupancy_rate(), 100.0)


class TestSlotRegistryCheckOut(unittest.TestCase):
    """Unit tests for check-out and revenue"""

    def setUp(self):
        self.registry = SlotRegistry()

    def test_check_out_returns_captured_fields(self):
        self.registry.check_in(3, plate("ABC123"), VehicleType.TRUCK, T0)

        vehicle_type, entry_time = self.registry.check_out(3)

        self.assertIs(vehicle_type, VehicleType.TRUCK)
        self.assertEqual(entry_time, T0)
        self.assertFalse(self.registry.get_slot(3).is_occupied)
        self.assertIsNone(self.registry.find_by_plate(plate("ABC123")))

    def test_check_out_never_used_slot(self):
        with self.assertRaises(SlotNotFoundError):
            self.registry.check_out(7)

    def test_check_out_twice(self):
        self.registry.check_in(0, plate("ABC123"), VehicleType.CAR, T0)
        self.registry.check_out(0)
        with self.assertRaises(SlotNotFoundError):
            self.registry.check_out(0)

    def test_record_revenue_accumulates(self):
        self.registry.record_revenue(800.0)
        self.assertEqual(self.registry.record_revenue(300.0), 1100.0)
        self.assertEqual(self.registry.total_revenue, 1100.0)

    def test_negative_revenue_rejected(self):
        with self.assertRaises(InvalidInputError):
            self.registry.record_revenue(-1.0)
        self.assertEqual(self.registry.total_revenue, 0.0)

    def test_non_finite_revenue_rejected(self):
        self.registry.record_revenue(1e308)

        for amount in (float("inf"), float("nan"), 1e308):
            with self.assertRaises(InvalidInputError, msg=repr(amount)):
                self.registry.record_revenue(amount)
        self.assertEqual(self.registry.total_revenue, 1e308)

    def test_check_revenue_does_not_record(self):
        self.registry.record_revenue(100.0)
        self.assertEqual(self.registry.check_revenue(50.0), 150.0)
        self.assertEqual(self.registry.total_revenue, 100.0)

    def test_occupancy_rate(self):
        registry = SlotRegistry(4)
        registry.check_in(0, plate("ABC123"), VehicleType.CAR, T0)
        self.assertEqual(registry.get_occupancy_rate(), 25.0)


class TestSlotRegistryRestore(unittest.TestCase):
    """Unit tests for replacing the registry state from a snapshot"""

    def _slots(self, capacity, occupied=()):
        slots = [ParkingSlot(index) for index in range(capacity)]
        for index, value in occupied:
            slots[index].occupy(plate(value), VehicleType.CAR, T0 + timedelta(minutes=index))
        return slots

    def test_restore(self):
        registry = SlotRegistry(5)
        registry.restore(self._slots(5, [(0, "ABC123"), (3, "XYZ999")]), 1234.5)

        self.assertEqual(registry.occupied_count, 2)
        self.assertEqual(registry.find_by_plate(plate("XYZ999")), 3)
        self.assertEqual(registry.find_free_slot(), 1)
        self.assertEqual(registry.total_revenue, 1234.5)

    def test_restore_wrong_size(self):
        registry = SlotRegistry(5)
        with self.assertRaises(InvalidInputError):
            registry.restore(self._slots(4), 0.0)

    def test_restore_duplicate_plates(self):
        registry = SlotRegistry(5)
        with self.assertRaises(InvalidInputError):
            registry.restore(self._slots(5, [(0, "ABC123"), (1, "ABC123")]), 0.0)
        self.assertEqual(registry.occupied_count, 0)

    def test_restore_negative_revenue(self):
        registry = SlotRegistry(5)
        with self.assertRaises(InvalidInputError):
            registry.restore(self._slots(5), -10.0)

    def test_restore_out_of_order(self):
        registry = SlotRegistry(3)
        slots = self._slots(3)
        slots.reverse()
        with self.assertRaises(InvalidInputError):
            registry.restore(slots, 0.0)


if __name__ == '__main__':
    unittest.main()
