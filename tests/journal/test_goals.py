"""Tests for goal progress and deadline classification."""

from datetime import date, datetime, timedelta

import pytest

from daybook.core.exceptions import ValidationError
from daybook.journal.goals import (
    NO_DEADLINE,
    DeadlineBadge,
    Goal,
    GoalDraft,
    GoalPatch,
    GoalStatus,
    Milestone,
    deadline_badge,
    goal_progress,
    is_overdue,
    milestone_dates,
    progress_percent,
    summarize_goals,
)

TODAY = date(2026, 10, 17)


def _milestones(done, total):
    return tuple(Milestone(id=i, title=f"m{i}", completed=i < done) for i in range(total))


@pytest.mark.smoke
class TestGoalProgress:
    def test_no_milestones_is_zero_percent(self):
        progress = goal_progress(Goal(id=1, title="Empty"), TODAY)
        assert progress.percent == 0
        assert progress.total_milestones == 0
        assert not progress.all_done

    @pytest.mark.parametrize(
        ("done", "total", "percent"),
        [(1, 3, 33), (2, 3, 67), (1, 2, 50), (1, 8, 13), (3, 3, 100), (0, 4, 0)],
    )
    def test_percent_rounds_half_up(self, done, total, percent):
        progress = goal_progress(Goal(id=1, title="g", milestones=_milestones(done, total)), TODAY)
        assert progress.percent == percent
        assert progress.completed_milestones == done

    def test_all_done(self):
        assert goal_progress(Goal(id=1, title="g", milestones=_milestones(2, 2)), TODAY).all_done

    def test_overdue_only_when_active(self):
        yesterday = TODAY - timedelta(days=1)
        active = Goal(id=1, title="g", target_date=yesterday)
        completed = Goal(id=2, title="g", target_date=yesterday, status=GoalStatus.COMPLETED)

        assert goal_progress(active, TODAY).overdue is True
        assert goal_progress(completed, TODAY).overdue is False

    def test_due_today_is_not_overdue(self):
        assert is_overdue(GoalStatus.ACTIVE, TODAY, TODAY) is False

    def test_no_deadline(self):
        progress = goal_progress(Goal(id=1, title="g"), TODAY)
        assert progress.days_until_deadline == NO_DEADLINE
        assert progress.badge is DeadlineBadge.NONE
        assert progress.badge_text == ""
        assert progress.overdue is False


class TestDeadlineBadge:
    def test_overdue_text(self):
        assert deadline_badge(GoalStatus.ACTIVE, TODAY - timedelta(days=3), TODAY) == (
            DeadlineBadge.OVERDUE,
            "3 days overdue",
        )
        assert deadline_badge(GoalStatus.ACTIVE, TODAY - timedelta(days=1), TODAY)[1] == "1 day overdue"

    def test_urgent_window(self):
        assert deadline_badge(GoalStatus.ACTIVE, TODAY, TODAY) == (DeadlineBadge.URGENT, "0 days left")
        assert deadline_badge(GoalStatus.ACTIVE, TODAY + timedelta(days=1), TODAY)[1] == "1 day left"
        assert deadline_badge(GoalStatus.ACTIVE, TODAY + timedelta(days=7), TODAY)[0] is DeadlineBadge.URGENT

    def test_plain_date_beyond_window(self):
        badge, text = deadline_badge(GoalStatus.ACTIVE, date(2026, 12, 5), TODAY)
        assert badge is DeadlineBadge.DATE
        assert text == "Dec 5, 2026"

    def test_past_deadline_of_completed_goal_shows_date(self):
        badge, _ = deadline_badge(GoalStatus.COMPLETED, TODAY - timedelta(days=3), TODAY)
        assert badge is DeadlineBadge.DATE


class TestHelpers:
    def test_progress_percent_zero_total(self):
        assert progress_percent(0, 0) == 0

    def test_summarize_goals(self, sample_goals, today):
        summary = summarize_goals(sample_goals, today)
        assert summary.active == 2
        assert summary.completed == 1
        assert summary.archived == 1
        assert summary.overdue == 1
        assert summary.total == 4

    def test_milestone_dates(self):
        goals = [
            Goal(
                id=1,
                title="g",
                milestones=(
                    Milestone(id=1, title="a", completed=True, completed_at=datetime(2026, 10, 2, 22, 0)),
                    Milestone(id=2, title="b", completed=False, completed_at=datetime(2026, 10, 3, 9, 0)),
                    Milestone(id=3, title="c", completed=True),
                ),
            )
        ]
        assert milestone_dates(goals) == {date(2026, 10, 2)}

    def test_goal_from_dict(self):
        goal = Goal.from_dict(
            {
                "id": 9,
                "title": "Ship v1",
                "status": "active",
                "targetDate": "2026-11-01",
                "milestones": [{"id": 1, "title": "Beta", "isCompleted": True, "completedAt": "2026-10-01T10:00:00Z"}],
            }
        )
        assert goal.status is GoalStatus.ACTIVE
        assert goal.type == "PERSONAL"
        assert goal.target_date == date(2026, 11, 1)
        assert goal.milestones[0].completed_at.date() == date(2026, 10, 1)


class TestGoalPayloads:
    def test_draft_wire_format(self):
        draft = GoalDraft(title="  Ship v1 ", type="WORK", description=" ", target_date=date(2026, 11, 1))
        draft.validate()
        assert draft.to_dict() == {"title": "Ship v1", "type": "WORK", "color": "#818cf8", "targetDate": "2026-11-01"}

    @pytest.mark.parametrize("draft", [GoalDraft(title=" "), GoalDraft(title="Ship", color="indigo")])
    def test_invalid_draft(self, draft):
        with pytest.raises(ValidationError):
            draft.validate()

    def test_patch_sends_only_set_fields(self):
        patch = GoalPatch(title="Ship v2", target_date=date(2026, 12, 1))
        assert patch.to_dict() == {"title": "Ship v2", "targetDate": "2026-12-01"}
        assert GoalPatch().is_empty()

    def test_patch_rejects_blank_title(self):
        with pytest.raises(ValidationError):
            GoalPatch(title="").validate()
