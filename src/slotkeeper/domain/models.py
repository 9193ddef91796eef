# File: src/slotkeeper/domain/models.py
"""
Domain Models for SlotKeeper

This module contains:
1. Enums: the closed set of vehicle types
2. Value Objects: license plates and tariff rates (immutable, validated)
3. Entities: the parking slot with its occupied/free lifecycle

Timestamps are kept as timezone-aware UTC datetimes truncated to whole
seconds, which is the resolution the state snapshot stores.
"""

from dataclasses import dataclass
from typing import Optional, Dict, Any, Union
from datetime import datetime, timezone
from enum import Enum
import math
import re

from ..exceptions import InvalidInputError, SlotOccupiedError


# ============================================================================
# TIME HELPERS
# ============================================================================

def to_utc(moment: datetime) -> datetime:
    """Normalize a datetime to aware UTC; naive values are taken as local time"""
    if moment.tzinfo is None:
        moment = moment.astimezone()
    return moment.astimezone(timezone.utc)


def utc_now() -> datetime:
    """Current time, truncated to whole seconds"""
    return datetime.now(timezone.utc).replace(microsecond=0)


# ============================================================================
# ENUMS FOR DOMAIN TYPES
# ============================================================================

class VehicleType(Enum):
    """
    Enumeration of vehicle types
    Each type has its own tariff; the tag is the persisted representation
    """
    CAR = "car"
    MOTORCYCLE = "motorcycle"
    TRUCK = "truck"

    @property
    def tag(self) -> int:
        """Stable small-integer tag used by the snapshot and the menu"""
        return list(VehicleType).index(self)

    @classmethod
    def from_tag(cls, tag: int) -> 'VehicleType':
        """Map a persisted/menu tag back to a vehicle type"""
        members = list(cls)
        if isinstance(tag, bool) or not isinstance(tag, int) or not 0 <= tag < len(members):
            raise InvalidInputError(f"Vehicle type tag must be 0-{len(members) - 1}, got: {tag!r}")
        return members[tag]

    @classmethod
    def parse(cls, value: Union['VehicleType', int, str]) -> 'VehicleType':
        """
        Parse operator input into a vehicle type
        Accepts a member, a tag ("0", 2) or a name ("car", "Truck")
        """
        if isinstance(value, cls):
            return value
        if isinstance(value, int):
            return cls.from_tag(value)
        if isinstance(value, str):
            text = value.strip()
            if text.isdigit():
                return cls.from_tag(int(text))
            for member in cls:
                if text.lower() in (member.value, str(member).lower()):
                    return member
        raise InvalidInputError(f"Unknown vehicle type: {value!r}")

    def __str__(self) -> str:
        """Human-readable string representation"""
        names = {
            VehicleType.CAR: "Car",
            VehicleType.MOTORCYCLE: "Motorcycle",
            VehicleType.TRUCK: "Truck",
        }
        return names[self]


# ============================================================================
# VALUE OBJECTS
# ============================================================================

@dataclass(frozen=True)
class LicensePlate:
    """
    Value Object: vehicle plate used as the uniqueness key among occupied slots
    Matching is exact and case-sensitive
    """
    value: str

    MAX_LENGTH = 7

    def __post_init__(self):
        if not isinstance(self.value, str):
            raise InvalidInputError(f"License plate must be text, got: {self.value!r}")
        # Printable ASCII without whitespace, so the plate fits the snapshot field
        if not re.fullmatch(r'[\x21-\x7e]{1,%d}' % self.MAX_LENGTH, self.value):
            raise InvalidInputError(
                f"License plate must be 1-{self.MAX_LENGTH} printable characters "
                f"without spaces, got: {self.value!r}"
            )

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class TariffRate:
    """
    Value Object: (first hour, extra hour) pricing for one vehicle type
    The first hour rate covers the first hour or any fraction of it
    """
    first_hour_rate: float
    extra_hour_rate: float

    def __post_init__(self):
        for name in ("first_hour_rate", "extra_hour_rate"):
            raw = getattr(self, name)
            if isinstance(raw, bool):
                raise InvalidInputError(f"{name} must be a number, got: {raw!r}")
            try:
                value = float(raw)
            except (TypeError, ValueError):
                raise InvalidInputError(f"{name} must be a number, got: {raw!r}") from None
            if not math.isfinite(value) or value < 0:
                raise InvalidInputError(f"{name} must be a finite non-negative number, got: {raw!r}")
            object.__setattr__(self, name, value)

    def to_dict(self) -> Dict[str, float]:
        return {
            "first_hour_rate": self.first_hour_rate,
            "extra_hour_rate": self.extra_hour_rate,
        }


# ============================================================================
# DOMAIN ENTITIES
# ============================================================================

class ParkingSlot:
    """
    Entity: one physical parking space, identified by its index
    Toggles between free and occupied; never deleted
    """

    def __init__(self, index: int):
        if index < 0:
            raise InvalidInputError("Slot index cannot be negative")
        self.index = index
        self.is_occupied = False
        self._plate: Optional[LicensePlate] = None
        self._vehicle_type: Optional[VehicleType] = None
        self._entry_time: Optional[datetime] = None

    @property
    def number(self) -> int:
        """1-based slot number shown to operators"""
        return self.index + 1

    # Occupancy fields are meaningless on a free slot, so they read as None
    @property
    def plate(self) -> Optional[LicensePlate]:
        return self._plate if self.is_occupied else None

    @property
    def vehicle_type(self) -> Optional[VehicleType]:
        return self._vehicle_type if self.is_occupied else None

    @property
    def entry_time(self) -> Optional[datetime]:
        return self._entry_time if self.is_occupied else None

    def occupy(self, plate: LicensePlate, vehicle_type: VehicleType, entry_time: datetime) -> None:
        """
        Occupy the slot with a vehicle
        Raises: SlotOccupiedError if slot is already occupied
        """
        if self.is_occupied:
            raise SlotOccupiedError(f"Slot {self.number} is already occupied")

        self._plate = plate
        self._vehicle_type = vehicle_type
        self._entry_time = to_utc(entry_time).replace(microsecond=0)
        self.is_occupied = True

    def vacate(self) -> None:
        """Free the slot and drop its occupancy fields"""
        self.is_occupied = False
        self._plate = None
        self._vehicle_type = None
        self._entry_time = None

    def matches(self, plate: LicensePlate) -> bool:
        return self.is_occupied and self._plate == plate

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization"""
        return {
            "number": self.number,
            "is_occupied": self.is_occupied,
            "plate": self.plate.value if self.plate else None,
            "vehicle_type": self.vehicle_type.value if self.vehicle_type else None,
            "entry_time": self.entry_time.isoformat() if self.entry_time else None,
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParkingSlot):
            return NotImplemented
        return (
            self.index == other.index
            and self.is_occupied == other.is_occupied
            and self.plate == other.plate
            and self.vehicle_type == other.vehicle_type
            and self.entry_time == other.entry_time
        )

    def __repr__(self) -> str:
        if not self.is_occupied:
            return f"ParkingSlot(number={self.number}, free)"
        return (
            f"ParkingSlot(number={self.number}, plate={self._plate.value!r}, "
            f"type={self._vehicle_type.value}, entry={self._entry_time.isoformat()})"
        )

    def __str__(self) -> str:
        status = f"Occupied by {self._plate}" if self.is_occupied else "Free"
        return f"Slot {self.number} - {status}"
