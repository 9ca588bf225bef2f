"""Goals, milestones and progress classification.

Progress and deadline state are never stored on a :class:`Goal`; they are
derived on demand by :func:`goal_progress` from ``(milestones, status,
target_date, today)`` so they cannot go stale when a milestone is toggled.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from daybook.core.exceptions import ValidationError

from .models import check_color, date_key, parse_date

NO_DEADLINE = 2**53 - 1
"""Sentinel for ``days_until_deadline`` when a goal has no target date."""

URGENT_WINDOW_DAYS = 7


class GoalStatus(StrEnum):
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    ARCHIVED = "ARCHIVED"


class DeadlineBadge(StrEnum):
    """How a goal's deadline should be displayed."""

    NONE = "none"  # no target date
    OVERDUE = "overdue"
    URGENT = "urgent"  # due within URGENT_WINDOW_DAYS
    DATE = "date"  # plain date display


@dataclass(frozen=True)
class Milestone:
    id: int
    title: str
    completed: bool = False
    completed_at: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Milestone:
        completed_at = data.get("completedAt")
        return cls(
            id=data["id"],
            title=data["title"],
            completed=bool(data.get("isCompleted", False)),
            completed_at=datetime.fromisoformat(completed_at.replace("Z", "+00:00")) if completed_at else None,
        )


@dataclass(frozen=True)
class Goal:
    id: int
    title: str
    status: GoalStatus = GoalStatus.ACTIVE
    type: str = "PERSONAL"
    description: str | None = None
    color: str = "#818cf8"
    target_date: date | None = None
    milestones: tuple[Milestone, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Goal:
        target = data.get("targetDate")
        return cls(
            id=data["id"],
            title=data["title"],
            status=GoalStatus(str(data.get("status", "ACTIVE")).upper()),
            type=data.get("type") or "PERSONAL",
            description=data.get("description"),
            color=data.get("color") or "#818cf8",
            target_date=parse_date(target) if target else None,
            milestones=tuple(Milestone.from_dict(m) for m in data.get("milestones") or []),
        )


@dataclass
class GoalDraft:
    """Payload for creating a goal. Validated before any network call."""

    title: str
    type: str = "PERSONAL"
    description: str | None = None
    color: str = "#818cf8"
    target_date: date | None = None

    def validate(self) -> None:
        if not self.title or not self.title.strip():
            raise ValidationError("Title is required")
        check_color(self.color)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"title": self.title.strip(), "type": self.type, "color": self.color}
        if self.description and self.description.strip():
            data["description"] = self.description.strip()
        if self.target_date is not None:
            data["targetDate"] = date_key(self.target_date)
        return data


@dataclass
class GoalPatch:
    """Partial goal update; status changes go through their own endpoint."""

    title: str | None = None
    type: str | None = None
    description: str | None = None
    color: str | None = None
    target_date: date | None = None

    def validate(self) -> None:
        if self.title is not None and not self.title.strip():
            raise ValidationError("Title cannot be empty")
        if self.color is not None:
            check_color(self.color)

    def is_empty(self) -> bool:
        return not self.to_dict()

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.title is not None:
            data["title"] = self.title.strip()
        if self.type is not None:
            data["type"] = self.type
        if self.description is not None:
            data["description"] = self.description
        if self.color is not None:
            data["color"] = self.color
        if self.target_date is not None:
            data["targetDate"] = date_key(self.target_date)
        return data


@dataclass(frozen=True)
class GoalProgress:
    """Derived view of a goal at a given evaluation date."""

    completed_milestones: int
    total_milestones: int
    percent: int
    overdue: bool
    days_until_deadline: int
    badge: DeadlineBadge
    badge_text: str

    @property
    def all_done(self) -> bool:
        return self.total_milestones > 0 and self.percent == 100


def progress_percent(completed: int, total: int) -> int:
    """Percentage rounded half-up; 0 when there are no milestones."""
    if total <= 0:
        return 0
    return int(100 * completed / total + 0.5)


def is_overdue(status: GoalStatus, target_date: date | None, today: date) -> bool:
    """Only active goals can be overdue; completed/archived never are."""
    return target_date is not None and target_date < today and status is GoalStatus.ACTIVE


def days_until(target_date: date | None, today: date) -> int:
    if target_date is None:
        return NO_DEADLINE
    return (target_date - today).days


def deadline_badge(status: GoalStatus, target_date: date | None, today: date) -> tuple[DeadlineBadge, str]:
    """Classify a deadline for display.

    Returns:
        ``(badge, text)``, e.g. ``(OVERDUE, "3 days overdue")`` or
        ``(URGENT, "2 days left")``.
    """
    if target_date is None:
        return DeadlineBadge.NONE, ""
    remaining = days_until(target_date, today)
    if is_overdue(status, target_date, today):
        n = abs(remaining)
        return DeadlineBadge.OVERDUE, f"{n} day{'s' if n != 1 else ''} overdue"
    if 0 <= remaining <= URGENT_WINDOW_DAYS:
        return DeadlineBadge.URGENT, f"{remaining} day{'s' if remaining != 1 else ''} left"
    return DeadlineBadge.DATE, f"{target_date:%b} {target_date.day}, {target_date.year}"


def goal_progress(goal: Goal, today: date) -> GoalProgress:
    """Derive progress, overdue state and deadline badge for *goal*."""
    total = len(goal.milestones)
    completed = sum(1 for m in goal.milestones if m.completed)
    badge, text = deadline_badge(goal.status, goal.target_date, today)
    return GoalProgress(
        completed_milestones=completed,
        total_milestones=total,
        percent=progress_percent(completed, total),
        overdue=is_overdue(goal.status, goal.target_date, today),
        days_until_deadline=days_until(goal.target_date, today),
        badge=badge,
        badge_text=text,
    )


@dataclass(frozen=True)
class GoalSummary:
    active: int = 0
    completed: int = 0
    archived: int = 0
    overdue: int = 0

    @property
    def total(self) -> int:
        return self.active + self.completed + self.archived


def summarize_goals(goals: list[Goal], today: date) -> GoalSummary:
    counts = Counter(g.status for g in goals)
    return GoalSummary(
        active=counts[GoalStatus.ACTIVE],
        completed=counts[GoalStatus.COMPLETED],
        archived=counts[GoalStatus.ARCHIVED],
        overdue=sum(1 for g in goals if is_overdue(g.status, g.target_date, today)),
    )


def milestone_dates(goals: list[Goal]) -> set[date]:
    """Days on which at least one milestone was completed (calendar markers)."""
    return {
        m.completed_at.date()
        for g in goals
        for m in g.milestones
        if m.completed and m.completed_at is not None
    }
