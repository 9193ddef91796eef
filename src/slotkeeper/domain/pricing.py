# File: src/slotkeeper/domain/pricing.py
"""
Fee calculation for SlotKeeper

Billing policy:
- Elapsed time is measured in real-valued hours
- Billed hours are the ceiling of elapsed hours, never less than one
- The first billed hour costs the first hour rate, each further hour the
  extra hour rate

Zero or negative elapsed time (exit recorded before entry after a clock
change) is billed as one hour. That is the minimum-charge policy, not a
rounding bug.
"""

from datetime import datetime
import math

from .models import VehicleType, to_utc
from .tariffs import TariffTable


SECONDS_PER_HOUR = 3600.0


class ParkingFeeCalculator:
    """
    Domain Service: maps (vehicle type, entry, exit) to the amount due
    Stateless; reads rates from the given tariff table
    """

    @staticmethod
    def elapsed_hours(entry_time: datetime, exit_time: datetime) -> float:
        seconds = (to_utc(exit_time) - to_utc(entry_time)).total_seconds()
        return seconds / SECONDS_PER_HOUR

    @staticmethod
    def billed_hours(entry_time: datetime, exit_time: datetime) -> int:
        hours = ParkingFeeCalculator.elapsed_hours(entry_time, exit_time)
        return max(1, math.ceil(hours))

    @staticmethod
    def calculate_fee(
        vehicle_type: VehicleType,
        entry_time: datetime,
        exit_time: datetime,
        tariffs: TariffTable
    ) -> float:
        """Amount due for one stay"""
        rate = tariffs.get(vehicle_type)
        hours = ParkingFeeCalculator.billed_hours(entry_time, exit_time)
        if hours <= 1:
            return rate.first_hour_rate
        return rate.first_hour_rate + (hours - 1) * rate.extra_hour_rate
