"""Command dispatch: user intents mapped to state transitions on the store."""

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, List, Literal, Optional, Tuple, Union

from ..utils.config import config
from ..utils.debounce import Debouncer
from .errors import ValidationError
from .export import export_json, export_report
from .kpi import summarize
from .models import ApplicationRecord, ApplicationStatus, FilterSpec, KPISummary
from .query import visible_rows
from .store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateRecord:
    title: str
    company: str


@dataclass(frozen=True)
class SetStatus:
    index: int
    status: Union[ApplicationStatus, str]


@dataclass(frozen=True)
class DeleteRecord:
    index: int


@dataclass(frozen=True)
class SetSearch:
    text: str
    immediate: bool = False


@dataclass(frozen=True)
class SetStatusFilter:
    status: Union[ApplicationStatus, str, None]


@dataclass(frozen=True)
class ToggleSort:
    field: str


@dataclass(frozen=True)
class ClearFilters:
    pass


@dataclass(frozen=True)
class Export:
    kind: Literal["json", "report"]
    out: Optional[Path] = None


@dataclass(frozen=True)
class Reset:
    pass


Intent = Union[
    CreateRecord, SetStatus, DeleteRecord, SetSearch, SetStatusFilter,
    ToggleSort, ClearFilters, Export, Reset,
]


class TrackerController:
    """Single owner of tracker state, driven by intents.

    Presentation code builds intents from user gestures and calls dispatch();
    it reads back view() and kpis() to render. Search text goes through a
    debouncer so a burst of keystrokes triggers one recompute.
    """

    def __init__(
        self,
        store: RecordStore,
        on_change: Optional[Callable[[], None]] = None,
        debounce_seconds: Optional[float] = None,
        timer_factory: Callable[..., Any] = threading.Timer
    ):
        """Initialize controller.

        Args:
            store: Record store holding records, filter and sort
            on_change: Called after every state change (re-render hook)
            debounce_seconds: Search quiet window, defaults to config
            timer_factory: Scheduler for the debounced search
        """
        self.store = store
        self.on_change = on_change
        if debounce_seconds is None:
            debounce_seconds = config.debounce_seconds
        self.search_debouncer = Debouncer(self._apply_search, debounce_seconds, timer_factory)

        self._handlers = {
            CreateRecord: self._create,
            SetStatus: self._set_status,
            DeleteRecord: self._delete,
            SetSearch: self._set_search,
            SetStatusFilter: self._set_status_filter,
            ToggleSort: self._toggle_sort,
            ClearFilters: self._clear_filters,
            Export: self._export,
            Reset: self._reset,
        }

    def dispatch(self, intent: Intent) -> Any:
        """Run the state transition for an intent.

        Returns:
            bool for mutations and filter/sort changes, the export text or
            confirmation for Export (None if the export failed)
        """
        handler = self._handlers.get(type(intent))
        if handler is None:
            raise TypeError(f"Unknown intent: {intent!r}")
        logger.debug(f"Dispatching {intent!r}")
        return handler(intent)

    def view(self) -> List[Tuple[int, ApplicationRecord]]:
        """Displayed rows as (master index, record), filtered and sorted."""
        return visible_rows(self.store.records, self.store.filter, self.store.sort)

    def kpis(self) -> KPISummary:
        return summarize(self.store.records)

    def _changed(self):
        if self.on_change is not None:
            self.on_change()

    def _create(self, intent: CreateRecord) -> bool:
        ok = self.store.create(intent.title, intent.company)
        if ok:
            self._changed()
        return ok

    def _set_status(self, intent: SetStatus) -> bool:
        ok = self.store.set_status(intent.index, intent.status)
        # Re-render either way so a rejected value is replaced by the stored one
        self._changed()
        return ok

    def _delete(self, intent: DeleteRecord) -> bool:
        ok = self.store.delete(intent.index)
        if ok:
            self._changed()
        return ok

    def _set_search(self, intent: SetSearch) -> bool:
        if intent.immediate:
            self.search_debouncer.cancel()
            self._apply_search(intent.text)
        else:
            self.search_debouncer.trigger(intent.text)
        return True

    def _apply_search(self, text: str):
        self.store.filter.search = text or ""
        self._changed()

    def _set_status_filter(self, intent: SetStatusFilter) -> bool:
        if intent.status in (None, ""):
            self.store.filter.status = None
        else:
            status = ApplicationStatus.coerce(intent.status)
            if status is None:
                self.store.notify("Invalid status.", True)
                return False
            self.store.filter.status = status
        self._changed()
        return True

    def _toggle_sort(self, intent: ToggleSort) -> bool:
        try:
            self.store.sort = self.store.sort.toggled(intent.field)
        except ValidationError as e:
            self.store.notify(str(e), True)
            return False
        self._changed()
        return True

    def _clear_filters(self, intent: ClearFilters) -> bool:
        self.search_debouncer.cancel()
        self.store.filter = FilterSpec()
        self._changed()
        return True

    def _export(self, intent: Export) -> Optional[str]:
        exporters = {"json": export_json, "report": export_report}
        exporter = exporters.get(intent.kind)
        if exporter is None:
            self.store.notify(f"Unsupported export format: {intent.kind}", True)
            return None

        try:
            output = exporter(self.store.records, out=intent.out)
        except OSError as e:
            logger.error(f"Export failed: {e}")
            self.store.notify("Export failed.", True)
            return None

        if intent.out:
            self.store.notify(f"Exported to {Path(intent.out).name}", False)
        return output

    def _reset(self, intent: Reset) -> bool:
        self.search_debouncer.cancel()
        ok = self.store.reset()
        self._changed()
        return ok
