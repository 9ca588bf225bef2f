"""Date-indexed entry cache and the views derived from it.

Provides entry and goal models, the DaybookBackend protocol, the
TemporalCache store, pure calendar/heatmap/goal-progress/stats builders,
the debounced SearchPipeline, and the range browser and tag/goal services.
"""

from .browse import EntryBrowser, group_by_date
from .cache import TemporalCache
from .calendar import CalendarCell, CalendarGrid, DatePreset, build_month_grid, preset_range
from .config import CacheConfig, SearchConfig
from .goal_service import GoalService
from .goals import Goal, GoalDraft, GoalPatch, GoalProgress, GoalStatus, Milestone, goal_progress
from .heatmap import HeatmapDay, HeatmapSnapshot, HeatmapView, build_heatmap
from .models import Entry, EntryDraft, EntryPatch, EntryType, Tag, entry_from_dict
from .search import SearchPipeline, SearchState
from .stats import Stats, StatsService
from .store import DaybookBackend
from .tag_service import TagService

__all__ = [
    "CacheConfig",
    "CalendarCell",
    "CalendarGrid",
    "DatePreset",
    "DaybookBackend",
    "Entry",
    "EntryBrowser",
    "EntryDraft",
    "EntryPatch",
    "EntryType",
    "Goal",
    "GoalDraft",
    "GoalPatch",
    "GoalProgress",
    "GoalService",
    "GoalStatus",
    "HeatmapDay",
    "HeatmapSnapshot",
    "HeatmapView",
    "Milestone",
    "SearchConfig",
    "SearchPipeline",
    "SearchState",
    "Stats",
    "StatsService",
    "Tag",
    "TagService",
    "TemporalCache",
    "build_heatmap",
    "build_month_grid",
    "entry_from_dict",
    "goal_progress",
    "group_by_date",
    "preset_range",
]
