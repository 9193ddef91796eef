# File: src/slotkeeper/application/commands.py
"""
Command Pattern Implementation for SlotKeeper

Each menu action is wrapped in a command object that validates its own
parameters and then runs against the parking service. The processor is the
single place where domain errors are turned into failed results, so one bad
action never ends the menu loop.

Command Types:
1. Parking Commands - check-in, check-out
2. Query Commands - slot listing, plate search, revenue report
3. Tariff Commands - rate updates
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple, Union
import logging
import uuid

from ..domain.models import LicensePlate, TariffRate, VehicleType
from ..exceptions import SlotKeeperError
from .parking_service import ParkingService


# ============================================================================
# COMMAND RESULT
# ============================================================================

@dataclass
class CommandResult:
    """Outcome of one processed command"""
    success: bool
    command_id: str
    command_type: str
    executed_at: datetime
    data: Optional[Dict[str, Any]] = None
    message: Optional[str] = None
    error_message: Optional[str] = None
    error_type: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "success": self.success,
            "command_id": self.command_id,
            "command_type": self.command_type,
            "executed_at": self.executed_at.isoformat(),
            "data": self.data,
            "message": self.message,
            "error_message": self.error_message,
            "error_type": self.error_type,
        }


# ============================================================================
# COMMAND BASE CLASS
# ============================================================================

class Command(ABC):
    """
    Abstract base class for all commands

    A command represents one operator action. Commands are named in the
    imperative (e.g., CheckInCommand).
    """

    def __init__(self, command_id: Optional[str] = None):
        self.command_id = command_id or str(uuid.uuid4())
        self.executed_at: Optional[datetime] = None
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def execute(self, service: ParkingService) -> CommandResult:
        """
        Run the command against the service
        Raises: SlotKeeperError when the service rejects the action
        """
        pass

    @abstractmethod
    def validate(self) -> Tuple[bool, List[str]]:
        """
        Validate command parameters before execution

        Returns: (is_valid, error_messages)
        """
        pass

    def get_description(self) -> str:
        """Get human-readable command description"""
        return self.__class__.__name__.replace("Command", "")

    def _success(self, data: Optional[Dict[str, Any]] = None, message: Optional[str] = None) -> CommandResult:
        self.executed_at = datetime.now()
        return CommandResult(
            success=True,
            command_id=self.command_id,
            command_type=self.__class__.__name__,
            executed_at=self.executed_at,
            data=data,
            message=message,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert command to dictionary for logging"""
        return {
            "command_id": self.command_id,
            "command_type": self.__class__.__name__,
            "description": self.get_description(),
            "executed_at": self.executed_at.isoformat() if self.executed_at else None,
        }


def _plate_errors(plate: str) -> List[str]:
    try:
        LicensePlate(plate)
    except ValueError as e:
        return [str(e)]
    return []


def _vehicle_type_errors(vehicle_type: Union[VehicleType, int, str]) -> List[str]:
    try:
        VehicleType.parse(vehicle_type)
    except ValueError as e:
        return [str(e)]
    return []


# ============================================================================
# PARKING COMMANDS
# ============================================================================

class CheckInCommand(Command):
    """
    Command: Park a vehicle in the first free slot

    Business Operation: Vehicle Entry and Slot Allocation
    """

    def __init__(self, plate: str, vehicle_type: Union[VehicleType, int, str]):
        super().__init__()
        self.plate = plate
        self.vehicle_type = vehicle_type

    def execute(self, service: ParkingService) -> CommandResult:
        self.logger.info(f"Executing CheckInCommand for {self.plate}")
        result = service.check_in(self.plate, self.vehicle_type)
        return self._success(
            data=result.to_dict(),
            message=f"Vehicle {result.plate} parked in slot {result.slot_number}",
        )

    def validate(self) -> Tuple[bool, List[str]]:
        errors = _plate_errors(self.plate) + _vehicle_type_errors(self.vehicle_type)
        return len(errors) == 0, errors

    def get_description(self) -> str:
        return f"Check In {self.plate}"


class CheckOutCommand(Command):
    """
    Command: Release a vehicle's slot and bill the stay

    Business Operation: Vehicle Exit and Payment
    """

    def __init__(self, plate: str):
        super().__init__()
        self.plate = plate

    def execute(self, service: ParkingService) -> CommandResult:
        self.logger.info(f"Executing CheckOutCommand for {self.plate}")
        receipt = service.check_out(self.plate)
        return self._success(
            data=receipt.to_dict(),
            message=f"Vehicle {receipt.plate} left slot {receipt.slot_number}",
        )

    def validate(self) -> Tuple[bool, List[str]]:
        errors = _plate_errors(self.plate)
        return len(errors) == 0, errors

    def get_description(self) -> str:
        return f"Check Out {self.plate}"


# ============================================================================
# QUERY COMMANDS
# ============================================================================

class ListSlotsCommand(Command):
    """Command: List every slot, or only the occupied ones"""

    def __init__(self, occupied_only: bool = False):
        super().__init__()
        self.occupied_only = occupied_only

    def execute(self, service: ParkingService) -> CommandResult:
        slots = service.list_slots()
        if self.occupied_only:
            slots = [slot for slot in slots if slot.is_occupied]
        return self._success(data={"slots": [slot.to_dict() for slot in slots]})

    def validate(self) -> Tuple[bool, List[str]]:
        return True, []


class FindVehicleCommand(Command):
    """Command: Locate a parked vehicle by plate"""

    def __init__(self, plate: str):
        super().__init__()
        self.plate = plate

    def execute(self, service: ParkingService) -> CommandResult:
        slot = service.find_by_plate(self.plate)
        return self._success(
            data=slot.to_dict(),
            message=f"Vehicle {slot.plate} is in slot {slot.slot_number}",
        )

    def validate(self) -> Tuple[bool, List[str]]:
        errors = _plate_errors(self.plate)
        return len(errors) == 0, errors

    def get_description(self) -> str:
        return f"Find Vehicle {self.plate}"


class RevenueReportCommand(Command):
    """Command: Report cumulative revenue and occupancy"""

    def execute(self, service: ParkingService) -> CommandResult:
        report = service.get_revenue_report()
        return self._success(data=report.to_dict())

    def validate(self) -> Tuple[bool, List[str]]:
        return True, []


# ============================================================================
# TARIFF COMMANDS
# ============================================================================

class UpdateTariffCommand(Command):
    """
    Command: Overwrite the rates of one vehicle type

    Business Operation: Pricing Administration
    """

    def __init__(
        self,
        vehicle_type: Union[VehicleType, int, str],
        first_hour_rate: Union[float, str],
        extra_hour_rate: Union[float, str]
    ):
        super().__init__()
        self.vehicle_type = vehicle_type
        self.first_hour_rate = first_hour_rate
        self.extra_hour_rate = extra_hour_rate

    def execute(self, service: ParkingService) -> CommandResult:
        rate = TariffRate(self.first_hour_rate, self.extra_hour_rate)
        tariff = service.set_tariff(self.vehicle_type, rate.first_hour_rate, rate.extra_hour_rate)
        return self._success(
            data=tariff.to_dict(),
            message=f"Tariff for {tariff.vehicle_type} updated",
        )

    def validate(self) -> Tuple[bool, List[str]]:
        errors = _vehicle_type_errors(self.vehicle_type)
        try:
            TariffRate(self.first_hour_rate, self.extra_hour_rate)
        except ValueError as e:
            errors.append(str(e))
        return len(errors) == 0, errors

    def get_description(self) -> str:
        return f"Update Tariff {self.vehicle_type}"


# ============================================================================
# COMMAND PROCESSOR
# ============================================================================

class CommandProcessor:
    """
    Processes commands with features like:
    - Validation before execution
    - Containment of domain errors
    - Command logging and history
    """

    def __init__(self, service: ParkingService, max_history_size: int = 1000):
        self.service = service
        self.logger = logging.getLogger(self.__class__.__name__)
        self.command_history: List[Command] = []
        self.max_history_size = max_history_size

    def process(self, command: Command) -> CommandResult:
        """
        Validate and execute a command

        Returns: the command's result, or a failed result carrying the
        validation messages or the domain error
        """
        self.logger.info(f"Processing command: {command.get_description()}")

        is_valid, errors = command.validate()
        if not is_valid:
            self.logger.warning(f"Rejected {command.get_description()}: {'; '.join(errors)}")
            return self._failure(command, "; ".join(errors), "InvalidInputError")

        try:
            result = command.execute(self.service)
        except SlotKeeperError as e:
            self.logger.warning(f"{command.get_description()} failed: {e}")
            return self._failure(command, str(e), e.__class__.__name__)

        self._add_to_history(command)
        return result

    def process_batch(self, commands: List[Command]) -> List[CommandResult]:
        """Process commands in order; a failure does not stop the batch"""
        return [self.process(command) for command in commands]

    def get_history(self, limit: Optional[int] = None) -> List[Dict[str, Any]]:
        """Successfully executed commands, most recent last"""
        history = self.command_history[-limit:] if limit else self.command_history
        return [command.to_dict() for command in history]

    def clear_history(self) -> None:
        self.command_history.clear()

    def _add_to_history(self, command: Command) -> None:
        self.command_history.append(command)
        if len(self.command_history) > self.max_history_size:
            self.command_history.pop(0)

    @staticmethod
    def _failure(command: Command, message: str, error_type: str) -> CommandResult:
        return CommandResult(
            success=False,
            command_id=command.command_id,
            command_type=command.__class__.__name__,
            executed_at=datetime.now(),
            error_message=message,
            error_type=error_type,
        )
