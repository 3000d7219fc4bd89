"""Data models for tracked job applications."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from .errors import ValidationError


class ApplicationStatus(str, Enum):
    """Progress stage of an application.

    Declaration order is the progression used for sorting; the first member is
    the status given to new records. Values are the labels persisted in storage.
    """
    NOT_STARTED = "Não Iniciado"
    IN_PROGRESS = "Em Andamento"
    APPROVED = "Aprovado"
    REJECTED = "Reprovado"

    @property
    def rank(self) -> int:
        return STATUS_ORDER.index(self)

    @classmethod
    def default(cls) -> "ApplicationStatus":
        return STATUS_ORDER[0]

    @classmethod
    def coerce(cls, value: Union["ApplicationStatus", str, None]) -> Optional["ApplicationStatus"]:
        """Return the member matching value exactly, or None if there is none."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for status in cls:
                if status.value == value:
                    return status
        return None


STATUS_ORDER: List[ApplicationStatus] = list(ApplicationStatus)

SortField = Literal["title", "company", "status"]
SortDirection = Literal["asc", "desc"]

SORT_FIELDS: Tuple[str, ...] = ("title", "company", "status")
SORT_DIRECTIONS: Tuple[str, ...] = ("asc", "desc")


def identity_key(title: str, company: str) -> Tuple[str, str]:
    """Case-insensitive, whitespace-trimmed identity of an application."""
    return (title.strip().lower(), company.strip().lower())


class ApplicationRecord(BaseModel):
    """A single job application.

    Attributes:
        title: Position applied for (serialized as ``titulo``)
        company: Hiring company (serialized as ``empresa``)
        status: Current progress stage
    """
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        validate_assignment=True,
    )

    title: str = Field(alias="titulo", min_length=1)
    company: str = Field(alias="empresa", min_length=1)
    status: ApplicationStatus = Field(default_factory=ApplicationStatus.default)

    @property
    def identity(self) -> Tuple[str, str]:
        return identity_key(self.title, self.company)

    def to_storage(self) -> dict:
        """Plain dict with exactly the three persisted fields."""
        return self.model_dump(by_alias=True, mode="json")


RecordList = TypeAdapter(List[ApplicationRecord])


@dataclass
class FilterSpec:
    """Active search text and status filter. Empty values match everything."""
    search: str = ""
    status: Optional[ApplicationStatus] = None

    @property
    def active(self) -> bool:
        return bool(self.search) or self.status is not None


@dataclass
class SortSpec:
    """Column and direction of the displayed table."""
    field: SortField = "title"
    direction: SortDirection = "asc"

    def __post_init__(self):
        if self.field not in SORT_FIELDS:
            raise ValidationError(f"Unknown sort field: {self.field}")
        if self.direction not in SORT_DIRECTIONS:
            raise ValidationError(f"Unknown sort direction: {self.direction}")

    @property
    def ascending(self) -> bool:
        return self.direction == "asc"

    def toggled(self, field: str) -> "SortSpec":
        """Sort spec after clicking a column header.

        The active column flips direction; any other column becomes active
        in ascending order.
        """
        if field == self.field:
            return SortSpec(field=self.field, direction="desc" if self.ascending else "asc")
        return SortSpec(field=field, direction="asc")


@dataclass
class KPISummary:
    """Aggregate counts over the whole collection."""
    total: int = 0
    counts: Dict[ApplicationStatus, int] = field(default_factory=dict)
    percentages: Dict[ApplicationStatus, int] = field(default_factory=dict)
