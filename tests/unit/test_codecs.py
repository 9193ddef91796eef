#!/usr/bin/env python3
"""
Snapshot Codec Unit Tests

Tests for the binary state snapshot layout and its validation.
"""

import unittest
import struct
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

# Add the src directory to the Python path
sys.path.append(str(Path(__file__).resolve().parents[2] / "src"))

from slotkeeper.domain.models import LicensePlate, VehicleType, ParkingSlot
from slotkeeper.infrastructure.codecs import (
    MAGIC, FORMAT_VERSION, HEADER, SLOT_RECORD, TRAILER,
    SnapshotFormatError, snapshot_size, encode_snapshot, decode_snapshot
)


T0 = datetime(2024, 3, 15, 9, 45, 30, tzinfo=timezone.utc)


def make_slots(capacity, occupied=()):
    slots = [ParkingSlot(index) for index in range(capacity)]
    for index, plate, vehicle_type, entry in occupied:
        slots[index].occupy(LicensePlate(plate), vehicle_type, entry)
    return slots


class TestSnapshotEncoding(unittest.TestCase):
    """Unit tests for encode_snapshot"""

    def test_layout_sizes(self):
        self.assertEqual(HEADER.size, 8)
        self.assertEqual(SLOT_RECORD.size, 18)
        self.assertEqual(TRAILER.size, 8)
        self.assertEqual(snapshot_size(50), 8 + 50 * 18 + 8)

    def test_empty_registry(self):
        data = encode_snapshot(make_slots(3), 0.0)

        self.assertEqual(len(data), snapshot_size(3))
        self.assertEqual(data[:HEADER.size], MAGIC + struct.pack("<HH", FORMAT_VERSION, 3))
        self.assertEqual(data[HEADER.size:-TRAILER.size], bytes(3 * SLOT_RECORD.size))
        self.assertEqual(data[-TRAILER.size:], struct.pack("<d", 0.0))

    def test_occupied_record(self):
        slots = make_slots(2, [(1, "ABC123", VehicleType.TRUCK, T0)])
        data = encode_snapshot(slots, 1500.25)

        record = SLOT_RECORD.unpack_from(data, HEADER.size + SLOT_RECORD.size)
        self.assertEqual(record, (b"ABC123\0\0", 2, int(T0.timestamp()), 1))
        self.assertEqual(TRAILER.unpack_from(data, len(data) - TRAILER.size), (1500.25,))

    def test_same_state_encodes_identically(self):
        first = encode_snapshot(make_slots(4, [(0, "A", VehicleType.CAR, T0)]), 10.0)
        second = encode_snapshot(make_slots(4, [(0, "A", VehicleType.CAR, T0)]), 10.0)
        self.assertEqual(first, second)


class TestSnapshotDecoding(unittest.TestCase):
    """Unit tests for decode_snapshot"""

    def test_round_trip(self):
        slots = make_slots(50, [
            (0, "ABC123", VehicleType.CAR, T0),
            (7, "XYZ9999", VehicleType.MOTORCYCLE, T0 + timedelta(hours=2)),
            (49, "T-1", VehicleType.TRUCK, T0 - timedelta(days=400)),
        ])

        decoded, revenue = decode_snapshot(encode_snapshot(slots, 98765.4321), 50)

        self.assertEqual(decoded, slots)
        self.assertEqual(revenue, 98765.4321)
        self.assertEqual(decoded[7].entry_time.tzinfo, timezone.utc)

    def test_round_trip_empty(self):
        slots = make_slots(50)
        decoded, revenue = decode_snapshot(encode_snapshot(slots, 0.0), 50)

        self.assertEqual(decoded, slots)
        self.assertEqual(revenue, 0.0)
        self.assertTrue(all(not slot.is_occupied for slot in decoded))

    def test_trailing_bytes_ignored(self):
        slots = make_slots(2, [(0, "ABC123", VehicleType.CAR, T0)])
        decoded, revenue = decode_snapshot(encode_snapshot(slots, 5.0) + b"junk", 2)

        self.assertEqual(decoded, slots)
        self.assertEqual(revenue, 5.0)

    def test_short_data(self):
        data = encode_snapshot(make_slots(2), 0.0)
        for cut in (0, 3, HEADER.size, len(data) - 1):
            with self.assertRaises(SnapshotFormatError, msg=f"length={cut}"):
                decode_snapshot(data[:cut], 2)

    def test_foreign_header(self):
        body = bytes(2 * SLOT_RECORD.size) + TRAILER.pack(0.0)
        cases = [
            HEADER.pack(b"NOPE", FORMAT_VERSION, 2),
            HEADER.pack(MAGIC, FORMAT_VERSION + 1, 2),
        ]
        for header in cases:
            with self.assertRaises(SnapshotFormatError):
                decode_snapshot(header + body, 2)

    def test_slot_count_mismatch(self):
        data = encode_snapshot(make_slots(3), 0.0)
        with self.assertRaises(SnapshotFormatError):
            decode_snapshot(data + bytes(100), 2)

    def test_corrupt_records(self):
        timestamp = int(T0.timestamp())
        cases = [
            SLOT_RECORD.pack(b"ABC123", 0, timestamp, 2),
            SLOT_RECORD.pack(b"ABC123", 3, timestamp, 1),
            SLOT_RECORD.pack(b"", 0, timestamp, 1),
            SLOT_RECORD.pack(b"AB C", 0, timestamp, 1),
            SLOT_RECORD.pack(b"\xff\xfe", 0, timestamp, 1),
            SLOT_RECORD.pack(b"ABC123", 0, 2 ** 62, 1),
        ]
        for record in cases:
            data = HEADER.pack(MAGIC, FORMAT_VERSION, 1) + record + TRAILER.pack(0.0)
            with self.assertRaises(SnapshotFormatError, msg=repr(record)):
                decode_snapshot(data, 1)

    def test_invalid_revenue(self):
        for revenue in (-1.0, float("nan"), float("inf")):
            data = encode_snapshot(make_slots(1), 0.0)[:-TRAILER.size] + TRAILER.pack(revenue)
            with self.assertRaises(SnapshotFormatError, msg=f"revenue={revenue}"):
                decode_snapshot(data, 1)

    def test_format_error_is_a_value_error(self):
        with self.assertRaises(ValueError):
            decode_snapshot(b"", 1)


if __name__ == '__main__':
    unittest.main()
