# File: src/slotkeeper/application/parking_service.py
"""
Parking Application Service

Orchestrates the domain objects for the use cases the menu offers:
1. Vehicle check-in and check-out (with fee and revenue)
2. Slot status listing and plate search
3. Tariff display and editing
4. Revenue reporting
5. Loading state at startup and saving it at shutdown

Inputs from the operator are validated here, before anything is mutated.
Domain failures surface as SlotKeeperError subclasses for the caller to
report.
"""

from typing import Callable, List, Optional, Union
from datetime import datetime
import logging

from ..domain.models import LicensePlate, VehicleType, ParkingSlot, utc_now
from ..domain.pricing import ParkingFeeCalculator
from ..domain.registry import SlotRegistry
from ..domain.tariffs import TariffTable
from ..exceptions import ParkingLotFullError, PersistenceUnavailableError, SlotNotFoundError
from ..infrastructure.repositories import (
    StateRepository, TariffRepository, InMemoryStateRepository, InMemoryTariffRepository
)
from .dtos import CheckInResultDTO, ReceiptDTO, SlotSummaryDTO, TariffDTO, RevenueReportDTO


Clock = Callable[[], datetime]


class ParkingService:
    """
    Main application service for the parking lot

    Collaborators are injected so the service can run against files in
    production and in-memory repositories and a fixed clock in tests.
    """

    def __init__(
        self,
        registry: Optional[SlotRegistry] = None,
        tariffs: Optional[TariffTable] = None,
        state_repository: Optional[StateRepository] = None,
        tariff_repository: Optional[TariffRepository] = None,
        clock: Optional[Clock] = None
    ):
        self.registry = registry or SlotRegistry()
        self.tariffs = tariffs or TariffTable()
        self.state_repository = state_repository or InMemoryStateRepository()
        self.tariff_repository = tariff_repository or InMemoryTariffRepository()
        self.clock = clock or utc_now
        self.logger = logging.getLogger(self.__class__.__name__)

    # ========================================================================
    # PARKING OPERATIONS
    # ========================================================================

    def check_in(self, plate: str, vehicle_type: Union[VehicleType, int, str]) -> CheckInResultDTO:
        """
        Park a vehicle in the lowest-numbered free slot
        Raises: InvalidInputError, ParkingLotFullError, DuplicateEntryError
        """
        license_plate = LicensePlate(plate)
        parsed_type = VehicleType.parse(vehicle_type)

        index = self.registry.find_free_slot()
        if index is None:
            raise ParkingLotFullError("No free slots available")

        slot = self.registry.check_in(index, license_plate, parsed_type, self.clock())
        return CheckInResultDTO(
            slot_number=slot.number,
            plate=slot.plate.value,
            vehicle_type=slot.vehicle_type,
            entry_time=slot.entry_time,
        )

    def check_out(self, plate: str) -> ReceiptDTO:
        """
        Release the vehicle's slot, bill the stay and add it to revenue
        Raises: InvalidInputError, SlotNotFoundError
        """
        license_plate = LicensePlate(plate)
        index = self._require_slot(license_plate)

        exit_time = self.clock()
        slot = self.registry.get_slot(index)
        fee = ParkingFeeCalculator.calculate_fee(slot.vehicle_type, slot.entry_time, exit_time, self.tariffs)
        # Billing must be accepted before the slot is released
        self.registry.check_revenue(fee)

        vehicle_type, entry_time = self.registry.check_out(index)
        self.registry.record_revenue(fee)

        receipt = ReceiptDTO(
            slot_number=index + 1,
            plate=license_plate.value,
            vehicle_type=vehicle_type,
            entry_time=entry_time,
            exit_time=exit_time,
            billed_hours=ParkingFeeCalculator.billed_hours(entry_time, exit_time),
            fee=fee,
        )
        self.logger.info(f"Checked out {license_plate} from slot {receipt.slot_number}, fee {fee:.2f}")
        return receipt

    def list_slots(self) -> List[SlotSummaryDTO]:
        """Every slot in ascending order"""
        return [self._summarize(slot) for slot in self.registry.slots]

    def find_by_plate(self, plate: str) -> SlotSummaryDTO:
        """
        Locate a parked vehicle
        Raises: InvalidInputError, SlotNotFoundError
        """
        index = self._require_slot(LicensePlate(plate))
        return self._summarize(self.registry.get_slot(index))

    # ========================================================================
    # TARIFFS AND REVENUE
    # ========================================================================

    def get_tariffs(self) -> List[TariffDTO]:
        return [
            TariffDTO(
                vehicle_type=vehicle_type,
                first_hour_rate=rate.first_hour_rate,
                extra_hour_rate=rate.extra_hour_rate,
            )
            for vehicle_type, rate in self.tariffs.items()
        ]

    def set_tariff(
        self,
        vehicle_type: Union[VehicleType, int, str],
        first_hour_rate: float,
        extra_hour_rate: float
    ) -> TariffDTO:
        """
        Overwrite the rates of one vehicle type
        Raises: InvalidInputError
        """
        parsed_type = VehicleType.parse(vehicle_type)
        rate = self.tariffs.set_rate(parsed_type, first_hour_rate, extra_hour_rate)
        return TariffDTO(
            vehicle_type=parsed_type,
            first_hour_rate=rate.first_hour_rate,
            extra_hour_rate=rate.extra_hour_rate,
        )

    def get_total_revenue(self) -> float:
        return self.registry.total_revenue

    def get_revenue_report(self) -> RevenueReportDTO:
        return RevenueReportDTO(
            total_revenue=self.registry.total_revenue,
            capacity=self.registry.capacity,
            occupied_slots=self.registry.occupied_count,
            available_slots=self.registry.available_count,
            occupancy_rate=self.registry.get_occupancy_rate(),
        )

    # ========================================================================
    # PERSISTENCE
    # ========================================================================

    def load_state(self) -> bool:
        return self.state_repository.load(self.registry)

    def save_state(self) -> None:
        """Raises: PersistenceUnavailableError"""
        self.state_repository.save(self.registry)

    def load_tariffs(self) -> int:
        return self.tariff_repository.load(self.tariffs)

    def save_tariffs(self) -> None:
        """Raises: PersistenceUnavailableError"""
        self.tariff_repository.save(self.tariffs)

    def startup(self) -> None:
        """Recover occupancy, revenue and custom rates from the previous run"""
        restored = self.load_state()
        applied = self.load_tariffs()
        self.logger.info(
            f"Startup: state {'restored' if restored else 'empty'}, "
            f"{applied} tariff entries loaded"
        )

    def shutdown(self) -> List[str]:
        """
        Persist state and tariffs
        Returns: warnings for resources that could not be written; the
        in-memory state is left untouched either way
        """
        warnings = []
        for save in (self.save_state, self.save_tariffs):
            try:
                save()
            except PersistenceUnavailableError as e:
                self.logger.warning(str(e))
                warnings.append(str(e))
        return warnings

    # ========================================================================
    # INTERNAL HELPER METHODS
    # ========================================================================

    def _require_slot(self, plate: LicensePlate) -> int:
        index = self.registry.find_by_plate(plate)
        if index is None:
            raise SlotNotFoundError(f"Vehicle {plate} not found")
        return index

    @staticmethod
    def _summarize(slot: ParkingSlot) -> SlotSummaryDTO:
        return SlotSummaryDTO(
            slot_number=slot.number,
            is_occupied=slot.is_occupied,
            plate=slot.plate.value if slot.plate else None,
            vehicle_type=slot.vehicle_type,
            entry_time=slot.entry_time,
        )
