"""Key-value stores and the persistence adapter for application records."""

import json
import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from pydantic import ValidationError as PydanticValidationError

from ..utils.config import config
from .errors import (
    PersistenceError,
    PersistenceReadError,
    PersistenceWriteError,
    StorageQuotaExceeded,
)
from .models import ApplicationRecord, RecordList

logger = logging.getLogger(__name__)


class KeyValueStore(ABC):
    """Text key-value store with local-storage semantics.

    Implementations may raise on writes (quota exceeded, disk errors);
    reads return None for absent keys.
    """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the text stored under key, or None."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key, replacing any previous value."""
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key; absent keys are ignored."""
        pass


class MemoryStore(KeyValueStore):
    """In-process store, optionally limited to a number of UTF-8 bytes."""

    def __init__(self, initial: Optional[Dict[str, str]] = None, quota_bytes: Optional[int] = None):
        self.items: Dict[str, str] = dict(initial or {})
        self.quota_bytes = quota_bytes

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self.quota_bytes is not None:
            others = sum(len(v.encode("utf-8")) for k, v in self.items.items() if k != key)
            if others + len(value.encode("utf-8")) > self.quota_bytes:
                raise StorageQuotaExceeded(f"Storage quota of {self.quota_bytes} bytes exceeded")
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


class FileStore(KeyValueStore):
    """Store backed by a single JSON object file (one file per profile)."""

    def __init__(self, path: Optional[Path] = None):
        """Initialize file store.

        Args:
            path: JSON file to use. Defaults to the configured storage path
        """
        self.path = Path(path).expanduser() if path else config.storage_path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read_all(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except (OSError, ValueError) as e:
            raise PersistenceReadError(f"Unreadable storage file {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceReadError(f"Storage file {self.path} does not hold an object")
        return data

    def _write_all(self, items: Dict[str, str]) -> None:
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        tmp_path.write_text(json.dumps(items, ensure_ascii=False, indent=2), encoding="utf-8")
        os.replace(tmp_path, self.path)

    def _read_for_write(self) -> Dict[str, str]:
        """Current contents, or {} when the file is unreadable.

        An unreadable file is moved aside to ``<name>.corrupt`` so the next
        write starts a fresh profile instead of failing forever.
        """
        try:
            return self._read_all()
        except PersistenceReadError as e:
            corrupt_path = self.path.with_name(self.path.name + ".corrupt")
            os.replace(self.path, corrupt_path)
            logger.warning(f"{e}; moved it to {corrupt_path}")
            return {}

    def get_item(self, key: str) -> Optional[str]:
        value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set_item(self, key: str, value: str) -> None:
        items = self._read_for_write()
        items[key] = value
        self._write_all(items)

    def remove_item(self, key: str) -> None:
        items = self._read_for_write()
        if key in items:
            del items[key]
            self._write_all(items)


@dataclass
class LoadResult:
    """Outcome of ApplicationStorage.load().

    Attributes:
        records: Loaded records (empty on failure)
        migrated: True if the data came from the legacy key
        error: Read error, if the stored data could not be used
        duplicates: Stored records skipped because an earlier one had the same identity
    """
    records: List[ApplicationRecord] = field(default_factory=list)
    migrated: bool = False
    error: Optional[PersistenceReadError] = None
    duplicates: int = 0


class ApplicationStorage:
    """Serializes the record collection into a key-value store.

    Records are stored as a JSON list of ``{"titulo", "empresa", "status"}``
    objects under the current key. Data found only under the legacy key is
    moved to the current key the first time it is loaded.
    """

    def __init__(
        self,
        store: KeyValueStore,
        key: Optional[str] = None,
        legacy_key: Optional[str] = None
    ):
        self.store = store
        self.key = key or config.storage_key
        self.legacy_key = legacy_key or config.legacy_storage_key
        self.last_error: Optional[PersistenceError] = None

    @staticmethod
    def serialize(records: List[ApplicationRecord]) -> str:
        return json.dumps([r.to_storage() for r in records], ensure_ascii=False)

    @staticmethod
    def deserialize(text: str) -> List[ApplicationRecord]:
        """Decode stored text.

        Raises:
            PersistenceReadError: If the text is not a valid record list
        """
        try:
            return RecordList.validate_json(text)
        except PydanticValidationError as e:
            raise PersistenceReadError(f"Invalid stored applications: {e.error_count()} error(s)") from e

    @staticmethod
    def unique(records: List[ApplicationRecord]) -> Tuple[List[ApplicationRecord], int]:
        """Keep the first record of each identity.

        Returns:
            Tuple of (kept records, number of skipped duplicates)
        """
        seen = set()
        kept = []
        for record in records:
            if record.identity in seen:
                logger.warning(f"Skipping duplicate stored application {record.title!r} at {record.company!r}")
                continue
            seen.add(record.identity)
            kept.append(record)
        return kept, len(records) - len(kept)

    def load(self) -> LoadResult:
        """Read records, migrating legacy data when needed."""
        try:
            current = self.store.get_item(self.key)
            if current:
                records, duplicates = self.unique(self.deserialize(current))
                logger.info(f"Loaded {len(records)} applications from '{self.key}'")
                return LoadResult(records=records, duplicates=duplicates)

            legacy = self.store.get_item(self.legacy_key)
            if legacy:
                records, duplicates = self.unique(self.deserialize(legacy))
                if self.save(records):
                    self.store.remove_item(self.legacy_key)
                    logger.info(f"Migrated {len(records)} applications from '{self.legacy_key}' to '{self.key}'")
                else:
                    logger.warning(f"Kept legacy key '{self.legacy_key}': writing '{self.key}' failed")
                return LoadResult(records=records, migrated=True, duplicates=duplicates)

        except PersistenceReadError as e:
            logger.error(f"Failed to load applications: {e}")
            self.last_error = e
            return LoadResult(error=e)
        except Exception as e:
            logger.error(f"Failed to load applications: {e}")
            error = PersistenceReadError(str(e))
            self.last_error = error
            return LoadResult(error=error)

        return LoadResult()

    def save(self, records: List[ApplicationRecord]) -> bool:
        """Write records under the current key.

        Returns:
            bool: True if written; on failure the error is kept in last_error
        """
        try:
            self.store.set_item(self.key, self.serialize(records))
            self.last_error = None
            logger.debug(f"Saved {len(records)} applications to '{self.key}'")
            return True
        except Exception as e:
            logger.error(f"Failed to save applications: {e}")
            self.last_error = PersistenceWriteError(str(e))
            return False

    def clear(self) -> bool:
        """Remove current and legacy keys.

        Returns:
            bool: True if both keys were removed
        """
        try:
            self.store.remove_item(self.key)
            self.store.remove_item(self.legacy_key)
            self.last_error = None
            logger.warning(f"Cleared stored applications ('{self.key}', '{self.legacy_key}')")
            return True
        except Exception as e:
            logger.error(f"Failed to clear stored applications: {e}")
            self.last_error = PersistenceWriteError(str(e))
            return False
