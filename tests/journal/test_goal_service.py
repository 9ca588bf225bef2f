"""Tests for GoalService."""

from datetime import date, datetime

import pytest

from daybook.core.exceptions import MutationError, TransientFetchError, ValidationError
from daybook.journal.goal_service import GoalService
from daybook.journal.goals import DeadlineBadge, Goal, GoalDraft, GoalPatch, GoalStatus, Milestone


@pytest.fixture
def service(backend, sample_goals, today):
    for goal in sample_goals:
        backend.goals[goal.id] = goal
    return GoalService(backend, today=lambda: today)


@pytest.mark.smoke
class TestGoalService:
    async def test_list_goals_filters_by_status(self, service):
        active = await service.list_goals(GoalStatus.ACTIVE)
        assert [g.id for g in active] == [1, 3]
        assert len(await service.list_goals()) == 4

    async def test_summary(self, service):
        summary = await service.summary()
        assert (summary.active, summary.completed, summary.archived, summary.overdue) == (2, 1, 1, 1)

    async def test_progress_is_derived(self, service):
        goal = (await service.list_goals())[0]
        progress = service.progress(goal)
        assert progress.percent == 50
        assert progress.overdue is True
        assert progress.badge is DeadlineBadge.OVERDUE
        assert progress.badge_text == "3 days overdue"

    async def test_toggle_milestone_recomputes_progress(self, service):
        goal = (await service.list_goals())[0]

        updated = await service.toggle_milestone(goal, 12)

        assert service.progress(updated).percent == 100
        assert service.progress(goal).percent == 50

    async def test_toggle_unknown_milestone(self, service, backend):
        goal = (await service.list_goals())[0]
        with pytest.raises(ValidationError):
            await service.toggle_milestone(goal, 999)
        assert backend.count("update_milestone") == 0

    async def test_completing_goal_clears_overdue(self, service):
        updated = await service.set_status(1, GoalStatus.COMPLETED)
        assert service.progress(updated).overdue is False

    async def test_add_and_delete_milestone(self, service):
        goal = await service.add_milestone(3, "  Read the book ")
        assert [m.title for m in goal.milestones] == ["Read the book"]
        assert service.progress(goal).percent == 0

        goal = await service.delete_milestone(3, goal.milestones[0].id)
        assert goal.milestones == ()

    async def test_blank_milestone_title(self, service, backend):
        with pytest.raises(ValidationError):
            await service.add_milestone(3, " ")
        assert backend.count("add_milestone") == 0

    async def test_create_update_delete_goal(self, service, backend):
        goal = await service.create_goal(GoalDraft(title=" Learn Go ", type="LEARNING", target_date=date(2026, 12, 1)))
        assert goal.title == "Learn Go"
        assert backend.goals[goal.id].type == "LEARNING"

        goal = await service.update_goal(goal.id, GoalPatch(title="Learn Go well"))
        assert goal.title == "Learn Go well"
        assert goal.target_date == date(2026, 12, 1)

        await service.delete_goal(goal.id)
        assert goal.id not in backend.goals

    async def test_invalid_goal_never_reaches_backend(self, service, backend):
        with pytest.raises(ValidationError):
            await service.create_goal(GoalDraft(title=""))
        with pytest.raises(ValidationError):
            await service.update_goal(1, GoalPatch())
        assert backend.count("create_goal") == 0
        assert backend.count("update_goal") == 0


class TestFailures:
    async def test_list_failure(self, service, backend):
        backend.failing.add("fetch_goals")
        with pytest.raises(TransientFetchError):
            await service.list_goals()

    async def test_milestone_dates_empty_on_failure(self, service, backend):
        backend.failing.add("fetch_goals")
        assert await service.milestone_dates() == set()

    async def test_milestone_dates(self, service, backend):
        backend.goals[5] = Goal(
            id=5,
            title="Ship",
            milestones=(Milestone(id=51, title="Beta", completed=True, completed_at=datetime(2026, 10, 2, 9)),),
        )
        dates = await service.milestone_dates()
        assert [d.isoformat() for d in dates] == ["2026-10-02"]

    async def test_mutation_failure(self, service, backend):
        backend.failing.add("update_goal_status")
        with pytest.raises(MutationError):
            await service.set_status(1, GoalStatus.ARCHIVED)

    async def test_goal_mutation_failures(self, service, backend):
        backend.failing.update({"create_goal", "delete_goal"})
        with pytest.raises(MutationError):
            await service.create_goal(GoalDraft(title="Ship"))
        with pytest.raises(MutationError, match="delete goal 1"):
            await service.delete_goal(1)
        assert 1 in backend.goals
