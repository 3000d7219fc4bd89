"""Filtering and sorting of the record collection into a display view."""

from typing import Callable, List, Sequence, Tuple

from .models import ApplicationRecord, FilterSpec, SortSpec


def matches(record: ApplicationRecord, filter_spec: FilterSpec) -> bool:
    """Check a record against both the search text and the status filter."""
    query = (filter_spec.search or "").lower()
    if query and query not in f"{record.title} {record.company}".lower():
        return False
    if filter_spec.status is not None and record.status != filter_spec.status:
        return False
    return True


def sort_key(field: str) -> Callable[[ApplicationRecord], object]:
    """Key function for a sort field.

    Status sorts by its position in the progression, text fields
    case-insensitively.
    """
    if field == "status":
        return lambda record: record.status.rank
    return lambda record: (getattr(record, field) or "").lower()


def visible_rows(
    records: Sequence[ApplicationRecord],
    filter_spec: FilterSpec,
    sort_spec: SortSpec
) -> List[Tuple[int, ApplicationRecord]]:
    """Filtered, sorted view paired with each record's master index.

    The indices are positions in ``records`` and are only valid until the
    next mutation of the collection.
    """
    rows = [(index, record) for index, record in enumerate(records) if matches(record, filter_spec)]
    key = sort_key(sort_spec.field)
    # sorted() is stable for reverse=True too, so equal keys keep collection order
    return sorted(rows, key=lambda row: key(row[1]), reverse=not sort_spec.ascending)


def apply(
    records: Sequence[ApplicationRecord],
    filter_spec: FilterSpec,
    sort_spec: SortSpec
) -> List[ApplicationRecord]:
    """Return the filtered, sorted records without touching the collection."""
    return [record for _, record in visible_rows(records, filter_spec, sort_spec)]
