# File: src/slotkeeper/domain/registry.py
"""
Slot Registry - aggregate root for parking occupancy

Key Concepts:
- Fixed capacity chosen at construction; slots are never added or removed
- Allocation always goes to the lowest-indexed free slot (ascending scan)
- Plates are unique among occupied slots
- Cumulative revenue lives next to the slots because both are persisted as
  one snapshot
"""

from typing import List, Optional, Sequence, Tuple
from datetime import datetime
import logging
import math

from .models import ParkingSlot, LicensePlate, VehicleType
from ..exceptions import (
    DuplicateEntryError, InvalidInputError, SlotNotFoundError, SlotOccupiedError
)


DEFAULT_CAPACITY = 50


class SlotRegistry:
    """
    Aggregate Root: fixed-size collection of parking slots plus revenue total
    Enforces the occupancy rules for check-in and check-out
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise InvalidInputError(f"Capacity must be positive, got: {capacity}")

        self._slots: List[ParkingSlot] = [ParkingSlot(index) for index in range(capacity)]
        self._total_revenue: float = 0.0
        self._logger = logging.getLogger(self.__class__.__name__)

        self._logger.debug(f"Initialized registry with {capacity} slots")

    # ========================================================================
    # LOOKUPS
    # ========================================================================

    def find_free_slot(self) -> Optional[int]:
        """Index of the lowest-numbered free slot, or None when full"""
        for slot in self._slots:
            if not slot.is_occupied:
                return slot.index
        return None

    def find_by_plate(self, plate: LicensePlate) -> Optional[int]:
        """Index of the occupied slot holding this plate, or None"""
        for slot in self._slots:
            if slot.matches(plate):
                return slot.index
        return None

    def get_slot(self, index: int) -> ParkingSlot:
        self._check_index(index)
        return self._slots[index]

    # ========================================================================
    # STATE CHANGES
    # ========================================================================

    def check_in(
        self,
        index: int,
        plate: LicensePlate,
        vehicle_type: VehicleType,
        timestamp: datetime
    ) -> ParkingSlot:
        """
        Occupy a free slot
        Raises: SlotOccupiedError / DuplicateEntryError without touching state
        """
        slot = self.get_slot(index)

        existing = self.find_by_plate(plate)
        if existing is not None:
            raise DuplicateEntryError(
                f"Vehicle {plate} is already parked in slot {existing + 1}",
                slot_number=existing + 1
            )
        if slot.is_occupied:
            raise SlotOccupiedError(f"Slot {slot.number} is already occupied")

        slot.occupy(plate, vehicle_type, timestamp)
        self._logger.info(f"Vehicle {plate} ({vehicle_type}) checked in to slot {slot.number}")
        return slot

    def check_out(self, index: int) -> Tuple[VehicleType, datetime]:
        """
        Free an occupied slot
        Returns: (vehicle_type, entry_time) captured before clearing
        Raises: SlotNotFoundError if the slot is not occupied
        """
        slot = self.get_slot(index)
        if not slot.is_occupied:
            raise SlotNotFoundError(f"Slot {slot.number} is not occupied")

        plate, vehicle_type, entry_time = slot.plate, slot.vehicle_type, slot.entry_time
        slot.vacate()
        self._logger.info(f"Vehicle {plate} left slot {slot.number}")
        return vehicle_type, entry_time

    def check_revenue(self, amount: float) -> float:
        """
        Running total after adding amount, without recording it
        Raises: InvalidInputError for a negative or non-finite amount or total
        """
        if not math.isfinite(amount) or amount < 0:
            raise InvalidInputError(f"Revenue amount must be finite and non-negative: {amount}")
        total = self._total_revenue + amount
        if not math.isfinite(total):
            raise InvalidInputError(f"Revenue total would overflow adding {amount}")
        return total

    def record_revenue(self, amount: float) -> float:
        """Add a completed check-out fee to the running total"""
        self._total_revenue = self.check_revenue(amount)
        return self._total_revenue

    def restore(self, slots: Sequence[ParkingSlot], total_revenue: float) -> None:
        """
        Replace the whole state with a loaded snapshot
        The snapshot must match capacity and keep plates unique
        """
        if len(slots) != self.capacity:
            raise InvalidInputError(
                f"Snapshot holds {len(slots)} slots, registry capacity is {self.capacity}"
            )
        if total_revenue < 0:
            raise InvalidInputError(f"Snapshot revenue cannot be negative: {total_revenue}")

        plates = [slot.plate for slot in slots if slot.is_occupied]
        if len(plates) != len(set(plates)):
            raise InvalidInputError("Snapshot holds the same plate in more than one slot")

        for position, slot in enumerate(slots):
            if slot.index != position:
                raise InvalidInputError(f"Snapshot slot {slot.number} is out of order")

        self._slots = list(slots)
        self._total_revenue = float(total_revenue)
        self._logger.info(
            f"Restored {self.occupied_count} occupied slots, revenue {self._total_revenue:.2f}"
        )

    # ========================================================================
    # QUERY METHODS (Read-only)
    # ========================================================================

    @property
    def capacity(self) -> int:
        return len(self._slots)

    @property
    def slots(self) -> Tuple[ParkingSlot, ...]:
        """All slots in ascending index order"""
        return tuple(self._slots)

    @property
    def total_revenue(self) -> float:
        return self._total_revenue

    @property
    def occupied_count(self) -> int:
        return sum(1 for slot in self._slots if slot.is_occupied)

    @property
    def available_count(self) -> int:
        return self.capacity - self.occupied_count

    def get_occupancy_rate(self) -> float:
        """Occupancy rate (0-100)"""
        return (self.occupied_count / self.capacity) * 100.0

    def _check_index(self, index: int) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < self.capacity:
            raise InvalidInputError(f"Slot index must be 0-{self.capacity - 1}, got: {index!r}")

    def __str__(self) -> str:
        return f"SlotRegistry: {self.occupied_count}/{self.capacity} occupied"
