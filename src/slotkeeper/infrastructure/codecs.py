# File: src/slotkeeper/infrastructure/codecs.py
"""
Codecs for the two persisted resources

State snapshot layout (little-endian, no padding):

    header   4s magic | H format version | H slot count
    record   8s plate (NUL padded) | B vehicle type tag | q entry epoch seconds | B occupied
             ... one record per slot, ascending index ...
    trailer  d total revenue

Free slots are written with a zeroed record body so two snapshots of the
same state are byte-identical.

Tariff configuration is plain text, one "first_hour extra_hour" line per
vehicle type in enumeration order. Floats are written with repr() so a
save/load cycle reproduces them exactly.
"""

from typing import List, Sequence, Tuple
from datetime import datetime, timezone
import math
import struct

from ..domain.models import ParkingSlot, LicensePlate, VehicleType, TariffRate
from ..domain.tariffs import TariffTable


MAGIC = b"SLKP"
FORMAT_VERSION = 1

HEADER = struct.Struct("<4sHH")
SLOT_RECORD = struct.Struct("<8sBqB")
TRAILER = struct.Struct("<d")


class SnapshotFormatError(ValueError):
    """Snapshot bytes do not describe a state this build can load"""
    pass


def snapshot_size(capacity: int) -> int:
    """Exact encoded size for a registry of the given capacity"""
    return HEADER.size + capacity * SLOT_RECORD.size + TRAILER.size


def encode_snapshot(slots: Sequence[ParkingSlot], total_revenue: float) -> bytes:
    """Serialize every slot, occupied or not, followed by the revenue total"""
    parts = [HEADER.pack(MAGIC, FORMAT_VERSION, len(slots))]
    for slot in slots:
        if slot.is_occupied:
            parts.append(SLOT_RECORD.pack(
                slot.plate.value.encode("ascii"),
                slot.vehicle_type.tag,
                int(slot.entry_time.timestamp()),
                1,
            ))
        else:
            parts.append(SLOT_RECORD.pack(b"", 0, 0, 0))
    parts.append(TRAILER.pack(float(total_revenue)))
    return b"".join(parts)


def decode_snapshot(data: bytes, capacity: int) -> Tuple[List[ParkingSlot], float]:
    """
    Rebuild slots and revenue from snapshot bytes
    Raises: SnapshotFormatError for short, foreign or inconsistent data
    """
    expected = snapshot_size(capacity)
    if len(data) < expected:
        raise SnapshotFormatError(f"Snapshot is {len(data)} bytes, expected {expected}")

    magic, version, count = HEADER.unpack_from(data, 0)
    if magic != MAGIC:
        raise SnapshotFormatError(f"Unknown snapshot magic: {magic!r}")
    if version != FORMAT_VERSION:
        raise SnapshotFormatError(f"Unsupported snapshot version: {version}")
    if count != capacity:
        raise SnapshotFormatError(f"Snapshot holds {count} slots, expected {capacity}")

    slots: List[ParkingSlot] = []
    offset = HEADER.size
    for index in range(count):
        raw_plate, tag, timestamp, occupied = SLOT_RECORD.unpack_from(data, offset)
        offset += SLOT_RECORD.size

        slot = ParkingSlot(index)
        if occupied not in (0, 1):
            raise SnapshotFormatError(f"Slot {index + 1} has an invalid occupied flag: {occupied}")
        if occupied:
            try:
                plate = LicensePlate(raw_plate.rstrip(b"\0").decode("ascii"))
                vehicle_type = VehicleType.from_tag(tag)
                entry_time = datetime.fromtimestamp(timestamp, tz=timezone.utc)
            except (ValueError, OverflowError, OSError) as e:
                raise SnapshotFormatError(f"Slot {index + 1} is corrupt: {e}") from e
            slot.occupy(plate, vehicle_type, entry_time)
        slots.append(slot)

    (total_revenue,) = TRAILER.unpack_from(data, offset)
    if not math.isfinite(total_revenue) or total_revenue < 0:
        raise SnapshotFormatError(f"Snapshot revenue is invalid: {total_revenue}")

    return slots, total_revenue


# ============================================================================
# TARIFF TEXT CODEC
# ============================================================================

def format_tariffs(tariffs: TariffTable) -> str:
    """One 'first extra' line per vehicle type, in enumeration order"""
    return "".join(
        f"{rate.first_hour_rate!r} {rate.extra_hour_rate!r}\n"
        for _, rate in tariffs.items()
    )


def apply_tariff_text(text: str, tariffs: TariffTable) -> int:
    """
    Overwrite tariff entries in order from configuration text
    Reading stops at the first malformed line; entries not reached keep their
    current values. Blank lines are skipped.
    Returns: number of vehicle types updated
    """
    lines = [line for line in text.splitlines() if line.strip()]
    applied = 0
    for vehicle_type, line in zip(VehicleType, lines):
        fields = line.split()
        if len(fields) != 2:
            break
        try:
            rate = TariffRate(float(fields[0]), float(fields[1]))
        except ValueError:
            break
        tariffs.set_rate(vehicle_type, rate.first_hour_rate, rate.extra_hour_rate)
        applied += 1
    return applied
