# File: src/slotkeeper/infrastructure/repositories.py
"""
Repository Pattern Implementation for SlotKeeper

Repositories move the two persisted resources in and out of the domain
objects while hiding where the bytes live:

1. State repositories - slot registry + cumulative revenue (binary snapshot)
2. Tariff repositories - tariff table (plain text)

Storage Implementations:
- File*Repository - local files, written atomically via a temporary sibling
- InMemory*Repository - for testing and development

Loading never fails the caller: a missing or malformed resource leaves the
domain object as it was. Saving raises PersistenceUnavailableError when the
resource cannot be written.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Union
import logging
import os
import tempfile

from ..domain.registry import SlotRegistry
from ..domain.tariffs import TariffTable
from ..exceptions import InvalidInputError, PersistenceUnavailableError
from .codecs import (
    SnapshotFormatError, encode_snapshot, decode_snapshot,
    format_tariffs, apply_tariff_text
)


# ============================================================================
# REPOSITORY INTERFACES
# ============================================================================

class StateRepository(ABC):
    """Persists the slot registry and its revenue total as one snapshot"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def read(self) -> Optional[bytes]:
        """Raw snapshot bytes, or None when nothing has been stored"""
        pass

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Store raw snapshot bytes"""
        pass

    def load(self, registry: SlotRegistry) -> bool:
        """
        Populate the registry from the stored snapshot
        Returns: True if a snapshot was applied, False on the first-run path
        """
        data = self.read()
        if data is None:
            self.logger.info("No saved state found, starting with an empty lot")
            return False

        try:
            slots, total_revenue = decode_snapshot(data, registry.capacity)
            registry.restore(slots, total_revenue)
        except (SnapshotFormatError, InvalidInputError) as e:
            self.logger.warning(f"Ignoring unusable saved state: {e}")
            return False
        return True

    def save(self, registry: SlotRegistry) -> None:
        """
        Store the registry snapshot
        Raises: PersistenceUnavailableError if the snapshot cannot be written
        """
        self.write(encode_snapshot(registry.slots, registry.total_revenue))
        self.logger.info(
            f"Saved state: {registry.occupied_count} occupied, "
            f"revenue {registry.total_revenue:.2f}"
        )


class TariffRepository(ABC):
    """Persists the tariff table as plain text"""

    def __init__(self):
        self.logger = logging.getLogger(self.__class__.__name__)

    @abstractmethod
    def read(self) -> Optional[str]:
        """Configuration text, or None when nothing has been stored"""
        pass

    @abstractmethod
    def write(self, text: str) -> None:
        """Store configuration text"""
        pass

    def load(self, tariffs: TariffTable) -> int:
        """
        Overwrite tariff entries from the stored configuration
        Returns: number of vehicle types read before the end or the first bad line
        """
        text = self.read()
        if text is None:
            self.logger.info("No tariff configuration found, keeping current rates")
            return 0

        applied = apply_tariff_text(text, tariffs)
        if applied < len(tariffs):
            self.logger.warning(
                f"Tariff configuration incomplete: {applied} of {len(tariffs)} entries read, "
                f"the rest keep their current rates"
            )
        return applied

    def save(self, tariffs: TariffTable) -> None:
        """
        Store every tariff entry
        Raises: PersistenceUnavailableError if the configuration cannot be written
        """
        self.write(format_tariffs(tariffs))
        self.logger.info("Saved tariff configuration")


# ============================================================================
# FILE IMPLEMENTATIONS
# ============================================================================

def _write_atomically(path: Path, data: bytes) -> None:
    """Write to a temporary sibling, then rename over the target"""
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(temp_name, path)
        except BaseException:
            if os.path.exists(temp_name):
                os.unlink(temp_name)
            raise
    except OSError as e:
        raise PersistenceUnavailableError(f"Cannot write {path}: {e.strerror or e}", path=str(path)) from e


class FileStateRepository(StateRepository):
    """State snapshot stored in a local binary file"""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

    def read(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            self.logger.warning(f"Cannot read {self.path}: {e}")
            return None

    def write(self, data: bytes) -> None:
        _write_atomically(self.path, data)


class TextFileTariffRepository(TariffRepository):
    """Tariff configuration stored in a local text file"""

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)

    def read(self) -> Optional[str]:
        try:
            return self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning(f"Cannot read {self.path}: {e}")
            return None

    def write(self, text: str) -> None:
        _write_atomically(self.path, text.encode("utf-8"))


# ============================================================================
# IN-MEMORY IMPLEMENTATIONS
# ============================================================================

class InMemoryStateRepository(StateRepository):
    """Keeps the encoded snapshot in memory"""

    def __init__(self, data: Optional[bytes] = None):
        super().__init__()
        self.data = data

    def read(self) -> Optional[bytes]:
        return self.data

    def write(self, data: bytes) -> None:
        self.data = data


class InMemoryTariffRepository(TariffRepository):
    """Keeps the configuration text in memory"""

    def __init__(self, text: Optional[str] = None):
        super().__init__()
        self.text = text

    def read(self) -> Optional[str]:
        return self.text

    def write(self, text: str) -> None:
        self.text = text
