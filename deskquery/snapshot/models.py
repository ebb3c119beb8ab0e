"""Snapshot data models: items, derived aggregates and the snapshot itself."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)

SECONDS_PER_DAY = 24 * 60 * 60


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


class _CamelModel(BaseModel):
    # Persisted blobs use camelCase keys
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ItemKind(str, Enum):
    """Kind of support record."""

    TICKET = "ticket"
    CONVERSATION = "conversation"


class SnapshotItem(_CamelModel):
    """One ticket or conversation in a snapshot."""

    id: str
    kind: ItemKind = ItemKind.TICKET
    title: str = ""
    body_preview: str = ""
    state: str = "unknown"
    priority: bool | str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime
    assignee: str | None = None
    organization: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> str:
        return str(value)

    @field_validator("created_at", "updated_at")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @property
    def priority_label(self) -> str:
        """Priority as a label; boolean flags map to high/normal."""
        if isinstance(self.priority, bool):
            return "high" if self.priority else "normal"
        if not self.priority:
            return "normal"
        return self.priority.lower()

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> "SnapshotItem":
        """Build an item from a raw vendor record.

        Accepts ticket-style records (subject/description/status) and
        conversation-style records (state, boolean priority, nested source).
        """
        source = record.get("source") or {}
        is_conversation = (
            record.get("kind") == ItemKind.CONVERSATION.value
            or record.get("type") == "conversation"
            or bool(source)
        )
        tags = record.get("tags") or []
        if isinstance(tags, dict):
            tags = [t.get("name", "") for t in tags.get("tags", [])]

        created_at = record.get("created_at", record.get("createdAt"))
        updated_at = record.get("updated_at", record.get("updatedAt", created_at))

        return cls(
            id=record["id"],
            kind=ItemKind.CONVERSATION if is_conversation else ItemKind.TICKET,
            title=record.get("title") or record.get("subject") or source.get("subject") or "Untitled",
            body_preview=record.get("body_preview")
            or record.get("bodyPreview")
            or record.get("description")
            or source.get("body")
            or "",
            state=record.get("state") or record.get("status") or "unknown",
            priority=record.get("priority"),
            tags=[str(t) for t in tags if t],
            created_at=created_at,
            updated_at=updated_at,
            assignee=_optional_str(record.get("assignee", record.get("assignee_id"))),
            organization=_optional_str(record.get("organization", record.get("organization_id"))),
        )


def _optional_str(value: Any) -> str | None:
    return None if value is None else str(value)


class AgeBuckets(_CamelModel):
    """Item counts by age since creation."""

    less_than_24h: int = Field(default=0, alias="lessThan24h")
    less_than_7d: int = Field(default=0, alias="lessThan7d")
    less_than_30d: int = Field(default=0, alias="lessThan30d")
    older_than_30d: int = Field(default=0, alias="olderThan30d")

    def total(self) -> int:
        return self.less_than_24h + self.less_than_7d + self.less_than_30d + self.older_than_30d


class Aggregates(_CamelModel):
    """Counts derived from a snapshot's items."""

    by_state: dict[str, int] = Field(default_factory=dict)
    by_priority: dict[str, int] = Field(default_factory=dict)
    by_kind: dict[str, int] = Field(default_factory=dict)
    by_age: AgeBuckets = Field(default_factory=AgeBuckets)

    @classmethod
    def from_items(cls, items: list[SnapshotItem], now: datetime) -> "Aggregates":
        """Recompute aggregates; ages are measured relative to ``now``."""
        by_state: dict[str, int] = {}
        by_priority: dict[str, int] = {}
        by_kind: dict[str, int] = {}
        by_age = AgeBuckets()

        for item in items:
            by_state[item.state] = by_state.get(item.state, 0) + 1
            by_priority[item.priority_label] = by_priority.get(item.priority_label, 0) + 1
            by_kind[item.kind.value] = by_kind.get(item.kind.value, 0) + 1

            age_days = (now - item.created_at).total_seconds() / SECONDS_PER_DAY
            if age_days < 1:
                by_age.less_than_24h += 1
            elif age_days < 7:
                by_age.less_than_7d += 1
            elif age_days < 30:
                by_age.less_than_30d += 1
            else:
                by_age.older_than_30d += 1

        return cls(by_state=by_state, by_priority=by_priority, by_kind=by_kind, by_age=by_age)


class Snapshot(_CamelModel):
    """Periodically refreshed copy of the ticket/conversation dataset.

    Aggregates are always a pure function of ``items`` and ``last_updated``:
    they are derived when absent and recomputed when a stored copy drifted.
    """

    last_updated: datetime
    items: list[SnapshotItem] = Field(default_factory=list)
    aggregates: Aggregates | None = None

    @field_validator("last_updated")
    @classmethod
    def _ensure_aware(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @model_validator(mode="after")
    def _derive_aggregates(self) -> "Snapshot":
        expected = Aggregates.from_items(self.items, self.last_updated)
        if self.aggregates is not None and self.aggregates != expected:
            logger.warning(
                f"Stored aggregates for snapshot {self.last_updated.isoformat()} drifted from items; recomputing"
            )
        self.aggregates = expected
        return self

    @classmethod
    def build(cls, items: list[SnapshotItem], now: datetime | None = None) -> "Snapshot":
        """Create a snapshot stamped at ``now``."""
        return cls(last_updated=now or utc_now(), items=items)

    @classmethod
    def from_blob(cls, data: dict[str, Any]) -> "Snapshot":
        return cls.model_validate(data)

    def to_blob(self) -> dict[str, Any]:
        """JSON-ready representation for the tiered store."""
        blob = self.model_dump(mode="json", by_alias=True)
        blob["itemCount"] = self.item_count
        return blob

    @property
    def item_count(self) -> int:
        return len(self.items)

    def count_by_kind(self, kind: ItemKind) -> int:
        return self.aggregates.by_kind.get(kind.value, 0)

    def is_consistent(self) -> bool:
        """Check that aggregates match a fresh recomputation from items."""
        return (
            self.aggregates == Aggregates.from_items(self.items, self.last_updated)
            and sum(self.aggregates.by_state.values()) == self.item_count
            and sum(self.aggregates.by_priority.values()) == self.item_count
            and self.aggregates.by_age.total() == self.item_count
        )
