"""Job application tracking - records, persistence, queries, KPIs and export."""

from .dispatcher import (
    ClearFilters,
    CreateRecord,
    DeleteRecord,
    Export,
    Reset,
    SetSearch,
    SetStatus,
    SetStatusFilter,
    ToggleSort,
    TrackerController,
)
from .models import ApplicationRecord, ApplicationStatus, FilterSpec, KPISummary, SortSpec
from .storage import ApplicationStorage, FileStore, MemoryStore
from .store import RecordStore

__all__ = [
    'ApplicationRecord',
    'ApplicationStatus',
    'ApplicationStorage',
    'ClearFilters',
    'CreateRecord',
    'DeleteRecord',
    'Export',
    'FileStore',
    'FilterSpec',
    'KPISummary',
    'MemoryStore',
    'RecordStore',
    'Reset',
    'SetSearch',
    'SetStatus',
    'SetStatusFilter',
    'SortSpec',
    'ToggleSort',
    'TrackerController',
]
