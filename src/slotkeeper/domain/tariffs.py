# File: src/slotkeeper/domain/tariffs.py
"""
Tariff Table for SlotKeeper

Holds exactly one TariffRate per VehicleType, in the fixed enumeration order
(Car, Motorcycle, Truck). The table is created with the default rates and is
only ever overwritten entry by entry, which is what lets a partially
malformed configuration file leave later entries at their prior values.
"""

from typing import Dict, Iterator, List, Tuple
import logging

from .models import VehicleType, TariffRate


DEFAULT_RATES: Dict[VehicleType, TariffRate] = {
    VehicleType.CAR: TariffRate(500.0, 300.0),
    VehicleType.MOTORCYCLE: TariffRate(300.0, 150.0),
    VehicleType.TRUCK: TariffRate(800.0, 500.0),
}


class TariffTable:
    """Ordered per-vehicle-type pricing"""

    def __init__(self):
        self._rates: Dict[VehicleType, TariffRate] = {
            vehicle_type: DEFAULT_RATES[vehicle_type] for vehicle_type in VehicleType
        }
        self._logger = logging.getLogger(self.__class__.__name__)

    def get(self, vehicle_type: VehicleType) -> TariffRate:
        return self._rates[vehicle_type]

    def first_hour_rate(self, vehicle_type: VehicleType) -> float:
        return self._rates[vehicle_type].first_hour_rate

    def extra_hour_rate(self, vehicle_type: VehicleType) -> float:
        return self._rates[vehicle_type].extra_hour_rate

    def set_rate(self, vehicle_type: VehicleType, first_hour_rate: float, extra_hour_rate: float) -> TariffRate:
        """
        Overwrite the rates of one vehicle type
        Raises: InvalidInputError for non-numeric or negative rates
        """
        rate = TariffRate(first_hour_rate, extra_hour_rate)
        self._rates[vehicle_type] = rate
        self._logger.info(
            f"Tariff for {vehicle_type}: first hour {rate.first_hour_rate:.2f}, "
            f"extra hour {rate.extra_hour_rate:.2f}"
        )
        return rate

    def reset(self) -> None:
        """Restore the default rates"""
        self._rates = {vehicle_type: DEFAULT_RATES[vehicle_type] for vehicle_type in VehicleType}

    def items(self) -> List[Tuple[VehicleType, TariffRate]]:
        """(type, rate) pairs in enumeration order"""
        return [(vehicle_type, self._rates[vehicle_type]) for vehicle_type in VehicleType]

    def __iter__(self) -> Iterator[VehicleType]:
        return iter(VehicleType)

    def __len__(self) -> int:
        return len(self._rates)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, TariffTable):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        parts = ", ".join(
            f"{vehicle_type.value}={rate.first_hour_rate:g}/{rate.extra_hour_rate:g}"
            for vehicle_type, rate in self.items()
        )
        return f"TariffTable({parts})"
