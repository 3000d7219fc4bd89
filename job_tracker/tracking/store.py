"""In-memory record store for job applications."""

import logging
from typing import Callable, Dict, List, Optional, Tuple, Union

from .errors import PersistenceWriteError, ValidationError
from .models import (
    ApplicationRecord,
    ApplicationStatus,
    FilterSpec,
    SortSpec,
    identity_key,
)
from .storage import ApplicationStorage

logger = logging.getLogger(__name__)

Notifier = Callable[[str, bool], None]


def log_notifier(message: str, is_error: bool = False) -> None:
    """Default notification sink: write the notice to the log."""
    if is_error:
        logger.warning(message)
    else:
        logger.info(message)


class RecordStore:
    """Owns the application collection and the active filter/sort state.

    Records are kept newest first. Each successful mutation is saved through
    the persistence adapter and reported to the notifier; failed mutations
    leave the collection untouched and report an error notice.

    Indices accepted by set_status() and delete() are positions in
    ``records`` (the unfiltered, unsorted collection). They are only valid
    until the next mutation; use index_of() to translate a displayed record.
    """

    def __init__(self, storage: ApplicationStorage, notify: Optional[Notifier] = None):
        """Initialize record store.

        Args:
            storage: Persistence adapter used after every mutation
            notify: Receives (message, is_error) after every outcome
        """
        self.storage = storage
        self.notify = notify or log_notifier
        self.records: List[ApplicationRecord] = []
        self.filter = FilterSpec()
        self.sort = SortSpec()
        self._positions: Optional[Dict[Tuple[str, str], int]] = None

    def __len__(self) -> int:
        return len(self.records)

    def load(self) -> bool:
        """Replace the collection with the persisted one.

        Returns:
            bool: False if stored data was unreadable (collection left empty)
        """
        result = self.storage.load()
        self.records = list(result.records)
        self._invalidate()

        if result.error is not None:
            self.notify("Failed to load saved applications.", True)
            return False
        if result.duplicates:
            self.notify(f"Skipped {result.duplicates} duplicate saved application(s).", True)
        if result.migrated:
            if isinstance(self.storage.last_error, PersistenceWriteError):
                self.notify("Error saving data.", True)
            self.notify("Old data migrated.", False)
        return True

    def index_of(self, title: str, company: str) -> Optional[int]:
        """Master position of the record with this identity, or None."""
        if self._positions is None:
            self._positions = {}
            for i, record in enumerate(self.records):
                self._positions.setdefault(record.identity, i)
        return self._positions.get(identity_key(title, company))

    def is_duplicate(self, title: str, company: str) -> bool:
        return self.index_of(title, company) is not None

    def create(self, title: str, company: str) -> bool:
        """Add a new application at the top of the collection.

        Args:
            title: Position title (trimmed before storing)
            company: Company name (trimmed before storing)

        Returns:
            bool: True if the application was added
        """
        try:
            if not (title or "").strip() or not (company or "").strip():
                raise ValidationError("Title and Company are required.")
            if self.is_duplicate(title, company):
                raise ValidationError("Duplicate application.")
        except ValidationError as e:
            logger.debug(f"Rejected new application {title!r} at {company!r}: {e}")
            self.notify(str(e), True)
            return False

        record = ApplicationRecord(title=title.strip(), company=company.strip())
        self.records.insert(0, record)
        self._invalidate()
        logger.info(f"Added application: {record.title} at {record.company}")
        self._save_and_notify("Application added!")
        return True

    def set_status(self, index: int, new_status: Union[ApplicationStatus, str]) -> bool:
        """Change the status of the record at a master index.

        On failure the record keeps its status; the caller is expected to
        restore whatever value it displayed.

        Returns:
            bool: True if the status was updated
        """
        status = ApplicationStatus.coerce(new_status)
        try:
            if status is None:
                raise ValidationError("Invalid status.")
            record = self._record_at(index)
        except ValidationError as e:
            logger.debug(f"Rejected status change at {index}: {e}")
            self.notify(str(e), True)
            return False

        record.status = status
        logger.info(f"Updated {record.title} at {record.company} to '{status.value}'")
        self._save_and_notify(f'Status updated to "{status.value}".')
        return True

    def delete(self, index: int) -> bool:
        """Remove the record at a master index.

        Confirmation is the caller's responsibility.

        Returns:
            bool: True if a record was removed
        """
        try:
            record = self._record_at(index)
        except ValidationError as e:
            self.notify(str(e), True)
            return False

        del self.records[index]
        self._invalidate()
        logger.info(f"Deleted application: {record.title} at {record.company}")
        self._save_and_notify("Deleted.")
        return True

    def reset(self) -> bool:
        """Drop every record, restore default filter/sort and erase storage.

        Returns:
            bool: True if storage was erased as well
        """
        self.records = []
        self.filter = FilterSpec()
        self.sort = SortSpec()
        self._invalidate()

        if not self.storage.clear():
            self.notify("Error clearing saved data.", True)
            return False
        self.notify("Data erased.", False)
        return True

    def _record_at(self, index: int) -> ApplicationRecord:
        if not isinstance(index, int) or not 0 <= index < len(self.records):
            raise ValidationError(f"No application at position {index}.")
        return self.records[index]

    def _invalidate(self):
        self._positions = None

    def _save_and_notify(self, message: str):
        # In-memory state stays authoritative when the save fails
        if not self.storage.save(self.records):
            self.notify("Error saving data.", True)
        self.notify(message, False)
