from __future__ import annotations

from typing import Annotated, Any, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

ReportStatus = Literal["passing", "warning", "failing", "info"]
LifecycleStatus = Literal["unread", "read", "dismissed"]

REPORT_STATUSES: frozenset[str] = frozenset({"passing", "warning", "failing", "info"})
LIFECYCLE_STATUSES: frozenset[str] = frozenset({"unread", "read", "dismissed"})
DEFAULT_LIFECYCLE_STATUS = "unread"


# ---------------------------------------------------------------------------
# Sections
#
# Only the fields each shape requires are declared. Anything else (title,
# element fields inside lists) is kept as-is through extra="allow" and is
# never validated.
# ---------------------------------------------------------------------------


class _Section(BaseModel):
    model_config = ConfigDict(extra="allow", strict=True, frozen=True)


class MarkdownSection(_Section):
    type: Literal["markdown"]
    content: str


class NoteSection(_Section):
    type: Literal["note"]
    content: str


class MetricsSection(_Section):
    type: Literal["metrics"]
    items: List[Any]


class TableSection(_Section):
    type: Literal["table"]
    columns: List[Any]
    rows: List[Any]


class CriteriaSection(_Section):
    type: Literal["criteria"]
    items: List[Any]


class RankedListSection(_Section):
    type: Literal["ranked-list"]
    columns: List[Any]
    rows: List[Any]


ReportSection = Annotated[
    Union[
        MarkdownSection,
        NoteSection,
        MetricsSection,
        TableSection,
        CriteriaSection,
        RankedListSection,
    ],
    Field(discriminator="type"),
]

SECTION_ADAPTER: TypeAdapter[ReportSection] = TypeAdapter(ReportSection)


# ---------------------------------------------------------------------------
# Reports
# ---------------------------------------------------------------------------


class ReportSummary(BaseModel):
    """Report metadata, as returned by listings."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    title: str
    category: str = "general"
    status: ReportStatus = "info"
    summary: str = ""
    updated_at: str = Field(alias="updatedAt")
    source: Optional[str] = None
    tags: Optional[List[str]] = None
    lifecycle_status: Optional[LifecycleStatus] = Field(default=None, alias="lifecycleStatus")

    def to_dict(self) -> dict:
        """Wire form: camelCase keys, absent optional keys omitted."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Report(ReportSummary):
    sections: List[ReportSection] = Field(default_factory=list)
