# File: src/slotkeeper/exceptions.py
"""Exception hierarchy for SlotKeeper."""


class SlotKeeperError(Exception):
    """Base exception for all SlotKeeper errors"""
    pass


class SlotNotFoundError(SlotKeeperError):
    """No slot matches the request (unknown plate, free slot on check-out)"""
    pass


class ParkingLotFullError(SlotNotFoundError):
    """Free slot search exhausted every slot"""
    pass


class DuplicateEntryError(SlotKeeperError):
    """Plate is already checked in"""

    def __init__(self, message: str, slot_number: int = None):
        self.slot_number = slot_number
        super().__init__(message)


class SlotOccupiedError(SlotKeeperError):
    """Check-in targeted a slot that is not free"""
    pass


class InvalidInputError(SlotKeeperError, ValueError):
    """Input rejected before any mutation"""
    pass


class PersistenceUnavailableError(SlotKeeperError):
    """A persisted resource could not be written"""

    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(message)


class ConfigurationError(SlotKeeperError):
    """Settings file exists but cannot be used"""
    pass
