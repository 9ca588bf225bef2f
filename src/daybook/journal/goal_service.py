"""Goal fetching, goal and milestone mutations.

Goals are not cached: every mutation returns the server's updated goal,
and progress is recomputed from it with :func:`goal_progress`.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date

from loguru import logger

from daybook.core.exceptions import MutationError, TransientFetchError, ValidationError

from .goals import (
    Goal,
    GoalDraft,
    GoalPatch,
    GoalProgress,
    GoalStatus,
    GoalSummary,
    goal_progress,
    milestone_dates,
    summarize_goals,
)
from .store import DaybookBackend


class GoalService:
    """Thin async facade over the goal endpoints of a :class:`DaybookBackend`."""

    def __init__(self, backend: DaybookBackend, today: Callable[[], date] = date.today):
        self.backend = backend
        self._today = today

    async def list_goals(self, status: GoalStatus | None = None) -> list[Goal]:
        try:
            return await self.backend.fetch_goals(status)
        except Exception as e:
            logger.warning(f"Failed to load goals: {e}")
            raise TransientFetchError(f"Failed to load goals: {e}") from e

    async def summary(self) -> GoalSummary:
        return summarize_goals(await self.list_goals(), self._today())

    async def milestone_dates(self) -> set[date]:
        """Milestone completion days for calendar markers; empty on failure."""
        try:
            return milestone_dates(await self.list_goals())
        except TransientFetchError:
            return set()

    def progress(self, goal: Goal) -> GoalProgress:
        return goal_progress(goal, self._today())

    async def create_goal(self, draft: GoalDraft) -> Goal:
        """Validate *draft* and create it.

        Raises:
            ValidationError: Before any network call, for an invalid draft.
            MutationError: If the server rejects the create.
        """
        draft.validate()
        goal = await self._mutate("create goal", self.backend.create_goal(draft))
        logger.info(f"Created goal {goal.id}: {goal.title}")
        return goal

    async def update_goal(self, goal_id: int, patch: GoalPatch) -> Goal:
        patch.validate()
        if patch.is_empty():
            raise ValidationError("Nothing to update")
        return await self._mutate(f"update goal {goal_id}", self.backend.update_goal(goal_id, patch))

    async def delete_goal(self, goal_id: int) -> None:
        try:
            await self.backend.delete_goal(goal_id)
        except Exception as e:
            logger.warning(f"Could not delete goal {goal_id}: {e}")
            raise MutationError(f"Could not delete goal {goal_id}: {e}") from e

    async def set_status(self, goal_id: int, status: GoalStatus) -> Goal:
        return await self._mutate(f"set status of goal {goal_id}", self.backend.update_goal_status(goal_id, status))

    async def add_milestone(self, goal_id: int, title: str) -> Goal:
        if not title or not title.strip():
            raise ValidationError("Milestone title is required")
        return await self._mutate(f"add milestone to goal {goal_id}", self.backend.add_milestone(goal_id, title.strip()))

    async def toggle_milestone(self, goal: Goal, milestone_id: int) -> Goal:
        milestone = next((m for m in goal.milestones if m.id == milestone_id), None)
        if milestone is None:
            raise ValidationError(f"Goal {goal.id} has no milestone {milestone_id}")
        return await self._mutate(
            f"toggle milestone {milestone_id}",
            self.backend.update_milestone(goal.id, milestone_id, completed=not milestone.completed),
        )

    async def delete_milestone(self, goal_id: int, milestone_id: int) -> Goal:
        return await self._mutate(
            f"delete milestone {milestone_id}", self.backend.delete_milestone(goal_id, milestone_id)
        )

    @staticmethod
    async def _mutate(action: str, call) -> Goal:
        try:
            return await call
        except Exception as e:
            logger.warning(f"Could not {action}: {e}")
            raise MutationError(f"Could not {action}: {e}") from e
