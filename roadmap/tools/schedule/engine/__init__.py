from .capacity import (
    CapacityBand,
    CapacityReport,
    aggregate_capacity,
    classify,
    daily_hours,
    format_hours,
    utilization,
    weekly_project_hours,
)
from .dates import (
    format_date,
    format_date_medium,
    format_date_short,
    is_same_day,
    parse_date,
    to_date_input_value,
    week_days,
)
from .flatten import (
    day_span,
    flatten_project,
    flatten_projects,
    resolve_group_hours,
    synthetic_slices,
)
from .nodes import (
    CapBlock,
    DividerBlock,
    GroupNode,
    NodeStatus,
    ProjectSchedule,
    TaskBlock,
    TaskNode,
)
from .progress import (
    build_phase_progress_blocks,
    build_progress_blocks,
    milestone_range,
    progress_summary,
)

__all__ = [
    "parse_date",
    "format_date",
    "format_date_short",
    "format_date_medium",
    "to_date_input_value",
    "is_same_day",
    "week_days",
    "day_span",
    "resolve_group_hours",
    "synthetic_slices",
    "flatten_project",
    "flatten_projects",
    "aggregate_capacity",
    "daily_hours",
    "weekly_project_hours",
    "utilization",
    "classify",
    "format_hours",
    "CapacityBand",
    "CapacityReport",
    "milestone_range",
    "build_progress_blocks",
    "build_phase_progress_blocks",
    "progress_summary",
    "NodeStatus",
    "TaskNode",
    "GroupNode",
    "ProjectSchedule",
    "CapBlock",
    "DividerBlock",
    "TaskBlock",
]
