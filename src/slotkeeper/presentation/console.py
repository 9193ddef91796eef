# File: src/slotkeeper/presentation/console.py
"""
Console menu for SlotKeeper

Text front end for the parking attendant. Every action goes through the
command processor, so a rejected action prints its message and the menu
comes back. End of input is treated as "save and exit".

Menu:
1. Check in vehicle
2. Check out vehicle
3. Show slot status
4. Find vehicle by plate
5. Modify tariffs
6. Show total revenue
7. Save and exit
"""

from datetime import datetime
from typing import Any, Callable, Dict, Optional, TextIO
import logging
import sys

from ..application.commands import (
    CommandProcessor, CommandResult, CheckInCommand, CheckOutCommand,
    ListSlotsCommand, FindVehicleCommand, UpdateTariffCommand, RevenueReportCommand
)
from ..application.parking_service import ParkingService
from ..domain.models import VehicleType


TIME_FORMAT = "%Y-%m-%d %H:%M:%S"


def format_time(moment: Optional[datetime]) -> str:
    """Local wall-clock rendering of a stored UTC timestamp"""
    if moment is None:
        return "-" * 19
    return moment.astimezone().strftime(TIME_FORMAT)


class ConsoleMenu:
    """Interactive menu loop over a parking service"""

    EXIT_OPTION = "7"

    def __init__(
        self,
        service: ParkingService,
        input_stream: Optional[TextIO] = None,
        output_stream: Optional[TextIO] = None,
        currency_symbol: str = "$"
    ):
        self.service = service
        self.processor = CommandProcessor(service)
        self.input_stream = input_stream or sys.stdin
        self.output_stream = output_stream or sys.stdout
        self.currency_symbol = currency_symbol
        self.logger = logging.getLogger(self.__class__.__name__)

        self.actions: Dict[str, Callable[[], None]] = {
            "1": self.check_in,
            "2": self.check_out,
            "3": self.show_status,
            "4": self.find_vehicle,
            "5": self.modify_tariffs,
            "6": self.show_revenue,
        }

    # ========================================================================
    # MAIN LOOP
    # ========================================================================

    def run(self) -> None:
        """Show the menu until the operator exits or input ends, then save"""
        while True:
            self._show_menu()
            choice = self._prompt("Select an option: ")
            if choice is None or choice == self.EXIT_OPTION:
                break

            action = self.actions.get(choice)
            if action is None:
                self._print("Invalid option.")
                continue
            action()

        self.save_and_exit()

    def _show_menu(self) -> None:
        self._print("")
        self._print("===== PARKING LOT MANAGER =====")
        self._print("1. Check in vehicle")
        self._print("2. Check out vehicle")
        self._print("3. Show slot status")
        self._print("4. Find vehicle by plate")
        self._print("5. Modify tariffs")
        self._print("6. Show total revenue")
        self._print("7. Save and exit")

    # ========================================================================
    # ACTIONS
    # ========================================================================

    def check_in(self) -> None:
        if self.service.registry.find_free_slot() is None:
            self._print("Error: No free slots available")
            return

        plate = self._prompt("Enter the license plate (e.g. ABC123): ")
        if plate is None:
            return
        options = "\n".join(f"  {vehicle_type.tag}. {vehicle_type}" for vehicle_type in VehicleType)
        vehicle_type = self._prompt(f"Select vehicle type:\n{options}\n  > ")
        if vehicle_type is None:
            return

        result = self.processor.process(CheckInCommand(plate, vehicle_type))
        if self._report_failure(result):
            return
        data = result.data
        self._print(
            f"Vehicle checked in to slot {data['slot_number']} "
            f"({data['vehicle_type']}) at {format_time(data['entry_time'])}"
        )

    def check_out(self) -> None:
        plate = self._prompt("Enter the plate of the vehicle leaving: ")
        if plate is None:
            return

        result = self.processor.process(CheckOutCommand(plate))
        if self._report_failure(result):
            return
        self._print(self.format_receipt(result.data))

    def show_status(self) -> None:
        result = self.processor.process(ListSlotsCommand())
        if self._report_failure(result):
            return

        self._print("")
        self._print("---- Slot status ----")
        self._print("Slot  | Status   | Plate   | Type       | Entry time")
        self._print("------+----------+---------+------------+--------------------")
        for slot in result.data["slots"]:
            if slot["is_occupied"]:
                self._print(
                    f"{slot['slot_number']:5d} | Occupied | {slot['plate']:<7} | "
                    f"{str(slot['vehicle_type']):<10} | {format_time(slot['entry_time'])}"
                )
            else:
                self._print(
                    f"{slot['slot_number']:5d} | Free     | {'-' * 7} | {'-' * 10} | {format_time(None)}"
                )

    def find_vehicle(self) -> None:
        plate = self._prompt("Enter the plate to search for: ")
        if plate is None:
            return

        result = self.processor.process(FindVehicleCommand(plate))
        if self._report_failure(result):
            return
        data = result.data
        self._print(f"Vehicle found in slot {data['slot_number']}")
        self._print(f"Type       : {data['vehicle_type']}")
        self._print(f"Entry time : {format_time(data['entry_time'])}")

    def modify_tariffs(self) -> None:
        """Walk through every vehicle type; a blank answer keeps the current rate"""
        self._print("")
        self._print("---- Modify tariffs ----")
        for tariff in self.service.get_tariffs():
            self._print(f"{tariff.vehicle_type}:")
            first = self._prompt(
                f"  Current first hour rate: {self._money(tariff.first_hour_rate)} | New: "
            )
            if first is None:
                return
            extra = self._prompt(
                f"  Current extra hour rate: {self._money(tariff.extra_hour_rate)} | New: "
            )
            if extra is None:
                return

            result = self.processor.process(UpdateTariffCommand(
                tariff.vehicle_type,
                first or tariff.first_hour_rate,
                extra or tariff.extra_hour_rate,
            ))
            if self._report_failure(result):
                self._print(f"  {tariff.vehicle_type} rates left unchanged.")
        self._print("Tariff review finished.")

    def show_revenue(self) -> None:
        result = self.processor.process(RevenueReportCommand())
        if self._report_failure(result):
            return
        data = result.data
        self._print("")
        self._print(f"Total revenue: {self._money(data['total_revenue'])}")
        self._print(
            f"Occupancy    : {data['occupied_slots']}/{data['capacity']} "
            f"({data['occupancy_rate']:.1f}%)"
        )

    def save_and_exit(self) -> None:
        self._print("Saving and exiting...")
        self.logger.info("Operator requested exit")
        for warning in self.service.shutdown():
            self._print(f"Warning: {warning}")

    # ========================================================================
    # FORMATTING HELPERS
    # ========================================================================

    def format_receipt(self, receipt: Dict[str, Any]) -> str:
        """Exit ticket text"""
        lines = [
            "",
            "------ Exit ticket ------",
            f"Slot         : {receipt['slot_number']}",
            f"Plate        : {receipt['plate']}",
            f"Type         : {receipt['vehicle_type']}",
            f"Entry time   : {format_time(receipt['entry_time'])}",
            f"Exit time    : {format_time(receipt['exit_time'])}",
            f"Billed hours : {receipt['billed_hours']}",
            f"Amount due   : {self._money(receipt['fee'])}",
            "-------------------------",
        ]
        return "\n".join(lines)

    def _money(self, amount: float) -> str:
        return f"{self.currency_symbol}{amount:.2f}"

    def _report_failure(self, result: CommandResult) -> bool:
        if result.success:
            return False
        self._print(f"Error: {result.error_message}")
        return True

    def _prompt(self, text: str) -> Optional[str]:
        """Read one stripped line; None at end of input"""
        self.output_stream.write(text)
        self.output_stream.flush()
        line = self.input_stream.readline()
        if not line:
            return None
        return line.strip()

    def _print(self, text: str) -> None:
        self.output_stream.write(text + "\n")
