"""Core data models for log entries.

Entries are a tagged union keyed by :class:`EntryType`: every variant
shares the common fields of :class:`BaseEntry` and adds only the fields
that mean something for its type (completion for actions, wall-clock
times for events, source metadata for machine-generated entries).

All entries are frozen. ``entry_date`` is the calendar day the entry
belongs to, fixed at creation; edits produce a new instance via
:func:`dataclasses.replace` and never change the day.
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from datetime import date, datetime, time
from enum import StrEnum
from typing import Any, ClassVar, Union

from daybook.core.exceptions import ValidationError

DATE_KEY_FORMAT = "%Y-%m-%d"


class EntryType(StrEnum):
    """Closed set of entry kinds."""

    NOTE = "NOTE"
    SKILL = "SKILL"
    ACTION = "ACTION"
    EVENT = "EVENT"
    COMMIT = "COMMIT"
    GOAL = "GOAL"  # goal/milestone completion


def date_key(day: date) -> str:
    """Bucket key for *day* (``YYYY-MM-DD``)."""
    return day.strftime(DATE_KEY_FORMAT)


def parse_date(value: str | date) -> date:
    if isinstance(value, date):
        return value
    return date.fromisoformat(value[:10])


def _parse_time(value: str | None) -> time | None:
    if not value:
        return None
    return time.fromisoformat(value)


def _parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


_COLOR_HEX = frozenset("0123456789abcdefABCDEF")


def check_color(color: str) -> None:
    """Raise ValidationError unless *color* is a ``#rrggbb`` hex value."""
    if len(color) != 7 or color[0] != "#" or not set(color[1:]) <= _COLOR_HEX:
        raise ValidationError(f"Color must be a #rrggbb hex value, got {color!r}")


@dataclass(frozen=True)
class Tag:
    id: int
    name: str
    color: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Tag:
        return cls(id=data["id"], name=data["name"], color=data.get("color") or "")


@dataclass(frozen=True)
class BaseEntry:
    """Fields shared by every entry variant."""

    id: int
    title: str
    entry_date: date
    content: str | None = None
    mood: int | None = None
    tags: tuple[Tag, ...] = ()
    created_at: datetime | None = None
    updated_at: datetime | None = None

    type: ClassVar[EntryType] = EntryType.NOTE

    def __post_init__(self):
        if self.mood is not None and not 1 <= self.mood <= 5:
            raise ValueError(f"mood must be between 1 and 5, got {self.mood}")

    @property
    def date_key(self) -> str:
        return date_key(self.entry_date)

    def to_dict(self) -> dict[str, Any]:
        """Wire representation (camelCase keys, ISO strings)."""
        data: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "content": self.content,
            "entryType": self.type.value,
            "entryDate": self.date_key,
            "mood": self.mood,
            "tags": [{"id": t.id, "name": t.name, "color": t.color} for t in self.tags],
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
        }
        data.update(self._variant_dict())
        return data

    def _variant_dict(self) -> dict[str, Any]:
        return {}


@dataclass(frozen=True)
class NoteEntry(BaseEntry):
    type: ClassVar[EntryType] = EntryType.NOTE


@dataclass(frozen=True)
class SkillEntry(BaseEntry):
    type: ClassVar[EntryType] = EntryType.SKILL


@dataclass(frozen=True)
class ActionEntry(BaseEntry):
    completed: bool = False

    type: ClassVar[EntryType] = EntryType.ACTION

    def _variant_dict(self) -> dict[str, Any]:
        return {"isCompleted": self.completed}


@dataclass(frozen=True)
class EventEntry(BaseEntry):
    start_time: time | None = None
    end_time: time | None = None

    type: ClassVar[EntryType] = EntryType.EVENT

    def _variant_dict(self) -> dict[str, Any]:
        return {
            "startTime": self.start_time.strftime("%H:%M") if self.start_time else None,
            "endTime": self.end_time.strftime("%H:%M") if self.end_time else None,
        }


@dataclass(frozen=True)
class CommitEntry(BaseEntry):
    """Machine-generated digest of commits pushed on one day."""

    commits: tuple[dict[str, Any], ...] = ()
    source: dict[str, Any] = field(default_factory=dict)

    type: ClassVar[EntryType] = EntryType.COMMIT

    def _variant_dict(self) -> dict[str, Any]:
        return {"commits": list(self.commits), "sourceMetadata": self.source}


@dataclass(frozen=True)
class GoalEntry(BaseEntry):
    """Machine-generated record of a completed goal or milestone."""

    source: dict[str, Any] = field(default_factory=dict)

    type: ClassVar[EntryType] = EntryType.GOAL

    def _variant_dict(self) -> dict[str, Any]:
        return {"sourceMetadata": self.source}


Entry = Union[NoteEntry, SkillEntry, ActionEntry, EventEntry, CommitEntry, GoalEntry]

ENTRY_CLASSES: dict[EntryType, type[BaseEntry]] = {
    EntryType.NOTE: NoteEntry,
    EntryType.SKILL: SkillEntry,
    EntryType.ACTION: ActionEntry,
    EntryType.EVENT: EventEntry,
    EntryType.COMMIT: CommitEntry,
    EntryType.GOAL: GoalEntry,
}


def entry_from_dict(data: dict[str, Any]) -> Entry:
    """Build the right entry variant from a wire dict.

    Raises:
        ValueError: If the type tag is unknown or required keys are missing.
    """
    try:
        entry_type = EntryType(str(data.get("entryType", "NOTE")).upper())
    except ValueError:
        raise ValueError(f"Unknown entry type: {data.get('entryType')!r}") from None

    common: dict[str, Any] = {
        "id": data["id"],
        "title": data["title"],
        "entry_date": parse_date(data["entryDate"]),
        "content": data.get("content"),
        "mood": data.get("mood"),
        "tags": tuple(Tag.from_dict(t) for t in data.get("tags") or []),
        "created_at": _parse_datetime(data.get("createdAt")),
        "updated_at": _parse_datetime(data.get("updatedAt")),
    }
    source = data.get("sourceMetadata") or {}

    if entry_type is EntryType.ACTION:
        return ActionEntry(**common, completed=bool(data.get("isCompleted", False)))
    if entry_type is EntryType.EVENT:
        return EventEntry(
            **common,
            start_time=_parse_time(data.get("startTime")),
            end_time=_parse_time(data.get("endTime")),
        )
    if entry_type is EntryType.COMMIT:
        commits = data.get("commits") or source.get("commits") or []
        return CommitEntry(**common, commits=tuple(commits), source=source)
    if entry_type is EntryType.GOAL:
        return GoalEntry(**common, source=source)
    return ENTRY_CLASSES[entry_type](**common)  # type: ignore[return-value]


# ── Requests ─────────────────────────────────────────────────────────


@dataclass
class EntryDraft:
    """Payload for creating an entry. Validated before any network call."""

    title: str
    entry_type: EntryType
    entry_date: date
    content: str | None = None
    start_time: time | None = None
    end_time: time | None = None
    completed: bool = False
    mood: int | None = None
    tags: list[str] = field(default_factory=list)

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Title is required")
        if self.mood is not None and not 1 <= self.mood <= 5:
            raise ValidationError("Mood must be between 1 and 5")
        if self.entry_type in (EntryType.COMMIT, EntryType.GOAL):
            raise ValidationError(f"{self.entry_type.value} entries are created by the server")
        if self.start_time and self.end_time and self.end_time < self.start_time:
            raise ValidationError("End time is before start time")

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "title": self.title.strip(),
            "entryType": self.entry_type.value,
            "entryDate": date_key(self.entry_date),
            "tags": list(self.tags),
        }
        if self.content:
            data["content"] = self.content
        if self.mood is not None:
            data["mood"] = self.mood
        if self.entry_type is EntryType.ACTION:
            data["isCompleted"] = self.completed
        if self.entry_type is EntryType.EVENT:
            if self.start_time:
                data["startTime"] = self.start_time.strftime("%H:%M")
            if self.end_time:
                data["endTime"] = self.end_time.strftime("%H:%M")
        return data


@dataclass
class EntryPatch:
    """Partial update. Only fields that are set are sent.

    There is deliberately no ``entry_date``: moving an entry to another
    day is not an update.
    """

    title: str | None = None
    content: str | None = None
    start_time: time | None = None
    end_time: time | None = None
    completed: bool | None = None
    mood: int | None = None
    tags: list[str] | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EntryPatch:
        """Build a patch from loosely-typed input (CLI, forms).

        Raises:
            ValidationError: On unknown keys, including any date field.
        """
        if "entry_date" in data or "entryDate" in data:
            raise ValidationError("Moving an entry to a different day is not supported")
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ValidationError(f"Unknown fields in update: {sorted(unknown)}")
        return cls(**data)

    def validate(self) -> None:
        if self.title is not None and not self.title.strip():
            raise ValidationError("Title cannot be empty")
        if self.mood is not None and not 1 <= self.mood <= 5:
            raise ValidationError("Mood must be between 1 and 5")

    def to_dict(self) -> dict[str, Any]:
        wire_names = {
            "title": "title",
            "content": "content",
            "start_time": "startTime",
            "end_time": "endTime",
            "completed": "isCompleted",
            "mood": "mood",
            "tags": "tags",
        }
        data: dict[str, Any] = {}
        for name, wire in wire_names.items():
            value = getattr(self, name)
            if value is None:
                continue
            if isinstance(value, time):
                value = value.strftime("%H:%M")
            data[wire] = value
        return data
