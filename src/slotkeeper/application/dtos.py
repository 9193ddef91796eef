# File: src/slotkeeper/application/dtos.py
"""
Data Transfer Objects (DTOs) for SlotKeeper

DTOs carry results from the parking service to the menu layer:
- Output DTOs for check-in, check-out receipts, slot listings and reports
- Tariff DTOs for showing and editing rates

DTO Principles:
- Immutable (frozen pydantic models)
- Validation at creation
- No business logic, only data
"""

from typing import Any, Dict, Optional
from datetime import datetime
import json

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..domain.models import VehicleType


# ============================================================================
# BASE DTO CLASSES
# ============================================================================

class BaseDTO(BaseModel):
    """Base DTO with common functionality"""

    model_config = ConfigDict(frozen=True, from_attributes=True)

    def to_dict(self, exclude_none: bool = False, **kwargs) -> Dict[str, Any]:
        """Convert DTO to dictionary"""
        data = self.model_dump(**kwargs)
        if exclude_none:
            data = {k: v for k, v in data.items() if v is not None}
        return data

    def to_json(self, **kwargs) -> str:
        """Convert DTO to JSON string"""
        return self.model_dump_json(**kwargs)

    @classmethod
    def from_json(cls, json_str: str) -> 'BaseDTO':
        """Create DTO from JSON string"""
        return cls(**json.loads(json_str))


# ============================================================================
# PARKING OPERATION DTOs
# ============================================================================

class CheckInResultDTO(BaseDTO):
    """DTO for a completed check-in"""
    slot_number: int = Field(ge=1, description="1-based slot number")
    plate: str = Field(min_length=1, description="License plate")
    vehicle_type: VehicleType = Field(description="Vehicle type")
    entry_time: datetime = Field(description="Entry time (UTC)")


class ReceiptDTO(BaseDTO):
    """DTO for the exit ticket of a completed check-out"""
    slot_number: int = Field(ge=1, description="1-based slot number")
    plate: str = Field(min_length=1, description="License plate")
    vehicle_type: VehicleType = Field(description="Vehicle type")
    entry_time: datetime = Field(description="Entry time (UTC)")
    exit_time: datetime = Field(description="Exit time (UTC)")
    billed_hours: int = Field(ge=1, description="Hours charged")
    fee: float = Field(ge=0, description="Amount due")


class SlotSummaryDTO(BaseDTO):
    """DTO for one line of the slot status listing"""
    slot_number: int = Field(ge=1, description="1-based slot number")
    is_occupied: bool = Field(description="Occupancy flag")
    plate: Optional[str] = Field(default=None, description="License plate when occupied")
    vehicle_type: Optional[VehicleType] = Field(default=None, description="Vehicle type when occupied")
    entry_time: Optional[datetime] = Field(default=None, description="Entry time when occupied")

    @model_validator(mode="after")
    def validate_occupancy_fields(self):
        """Free slots carry no vehicle data; occupied slots carry all of it"""
        fields = (self.plate, self.vehicle_type, self.entry_time)
        if self.is_occupied and any(value is None for value in fields):
            raise ValueError(f"Occupied slot {self.slot_number} is missing vehicle data")
        if not self.is_occupied and any(value is not None for value in fields):
            raise ValueError(f"Free slot {self.slot_number} cannot carry vehicle data")
        return self


# ============================================================================
# BILLING DTOs
# ============================================================================

class TariffDTO(BaseDTO):
    """DTO for the rates of one vehicle type"""
    vehicle_type: VehicleType = Field(description="Vehicle type")
    first_hour_rate: float = Field(ge=0, description="First hour or fraction")
    extra_hour_rate: float = Field(ge=0, description="Each further hour or fraction")


class RevenueReportDTO(BaseDTO):
    """DTO for the revenue report"""
    total_revenue: float = Field(ge=0, description="Cumulative revenue across runs")
    capacity: int = Field(ge=1, description="Total slots")
    occupied_slots: int = Field(ge=0, description="Occupied slots")
    available_slots: int = Field(ge=0, description="Free slots")
    occupancy_rate: float = Field(ge=0, le=100, description="Occupied share in percent")
