"""Turn a project's task groups into a fully dated project -> group -> task tree.

Every field that upstream data may leave blank is resolved through an ordered
tier table (first tier that yields a value wins):

hours per group:  explicit -> children -> default
group dates:      explicit -> children -> synthetic
task dates:       explicit -> group window -> synthetic

Synthetic dates slice the project window evenly between groups. A project
without a usable window is anchored at its start date or at ``today`` and its
groups are laid out back to back.
"""
from dataclasses import dataclass
from datetime import date
from typing import Callable, List, Optional, Sequence, Tuple
import logging
import math

from roadmap import config
from roadmap.app.db.models import MilestoneMarkerModel, ProjectModel, TaskGroupModel, TaskModel, normalize_status

from .dates import add_days, days_between, to_calendar_date
from .nodes import GroupNode, MilestoneMarker, NodeStatus, ProjectSchedule, SubtaskRef, TaskNode

logger = logging.getLogger(__name__)

DateRange = Tuple[date, date]


def day_span(hours: float) -> int:
    """Whole working days needed for `hours`; never less than one."""
    return max(1, int(math.ceil(hours / config.HOURS_PER_DAY)))


def task_hours(task: TaskModel) -> float:
    return task.estimated_hours or config.HOURS_PER_DAY


# ------------------------------
# Hours tiers
# ------------------------------

def _explicit_group_hours(group: TaskGroupModel) -> Optional[float]:
    return group.estimated_hours or None


def _children_hours(group: TaskGroupModel) -> Optional[float]:
    total = sum((t.estimated_hours or 0.0) for t in group.tasks)
    return total if total > 0 else None


def _default_group_hours(group: TaskGroupModel) -> Optional[float]:
    return max(len(group.tasks), 1) * config.HOURS_PER_DAY


GROUP_HOURS_TIERS: List[Tuple[str, Callable[[TaskGroupModel], Optional[float]]]] = [
    ("explicit", _explicit_group_hours),
    ("children", _children_hours),
    ("default", _default_group_hours),
]


def resolve_group_hours(group: TaskGroupModel) -> Tuple[str, float]:
    """Return (tier, hours) for a task group."""
    for tier, rule in GROUP_HOURS_TIERS:
        hours = rule(group)
        if hours is not None:
            return tier, float(hours)
    # The default tier always answers.
    raise AssertionError("no hours tier matched")


# ------------------------------
# Synthetic windows
# ------------------------------

def project_window(project: ProjectModel) -> Tuple[Optional[date], Optional[date]]:
    """Parsed (start, end) of the project; end is dropped when it precedes start."""
    start = to_calendar_date(project.start_date)
    end = to_calendar_date(project.end_date)
    if start and end and end < start:
        logger.debug("project %s ends before it starts; ignoring end date", project.id)
        end = None
    return start, end


def synthetic_slices(
    start: Optional[date],
    end: Optional[date],
    spans: Sequence[int],
    today: date,
) -> List[DateRange]:
    """Split the project window into one slice per group, in group order.

    With both bounds, slice i starts at start + floor(i * total_days / n), where
    total_days counts both ends, and runs to the day before the next slice (the
    last slice ends on `end`). Otherwise slices of `spans[i]` days are stacked
    from `start`, or from `today` when the project has no start date.
    """
    n = len(spans)
    if n == 0:
        return []
    if start and end:
        total_days = days_between(start, end) + 1
        starts = [add_days(start, (i * total_days) // n) for i in range(n)]
        slices: List[DateRange] = []
        for i, s in enumerate(starts):
            e = end if i == n - 1 else add_days(starts[i + 1], -1)
            # more groups than days: keep the slice at least one day long
            slices.append((s, max(s, e)))
        return slices

    anchor = start or today
    slices = []
    cursor = anchor
    for span in spans:
        e = add_days(cursor, span - 1)
        slices.append((cursor, e))
        cursor = add_days(e, 1)
    return slices


def distribute(window: DateRange, index: int, count: int, span: int) -> DateRange:
    """Place item `index` of `count` evenly inside `window`, clamped to its end."""
    ws, we = window
    width = days_between(ws, we) + 1
    offset = (index * width) // max(1, count)
    start = add_days(ws, offset)
    end = min(add_days(start, span - 1), we)
    return start, max(start, end)


# ------------------------------
# Date tiers
# ------------------------------

@dataclass(frozen=True)
class _GroupContext:
    index: int
    group: TaskGroupModel
    explicit: Optional[DateRange]
    synthetic: DateRange


def _explicit_group_window(group: TaskGroupModel) -> Optional[DateRange]:
    start = to_calendar_date(group.start_date)
    end = to_calendar_date(group.end_date)
    if start and end:
        return start, end
    return None


def _explicit_task_dates(task: TaskModel, index: int, count: int, ctx: _GroupContext) -> Optional[DateRange]:
    start = to_calendar_date(task.start_date)
    if not start:
        return None
    return start, add_days(start, day_span(task_hours(task)) - 1)


def _group_window_task_dates(task: TaskModel, index: int, count: int, ctx: _GroupContext) -> Optional[DateRange]:
    if not ctx.explicit:
        return None
    return distribute(ctx.explicit, index, count, day_span(task_hours(task)))


def _synthetic_task_dates(task: TaskModel, index: int, count: int, ctx: _GroupContext) -> Optional[DateRange]:
    return distribute(ctx.synthetic, index, count, day_span(task_hours(task)))


TASK_DATE_TIERS = [
    ("explicit", _explicit_task_dates),
    ("group_window", _group_window_task_dates),
    ("synthetic", _synthetic_task_dates),
]


def resolve_task_dates(task: TaskModel, index: int, count: int, ctx: _GroupContext) -> Tuple[str, DateRange]:
    for tier, rule in TASK_DATE_TIERS:
        rng = rule(task, index, count, ctx)
        if rng is not None:
            return tier, rng
    raise AssertionError("no task date tier matched")


def _explicit_group_dates(ctx: _GroupContext, children: List[TaskNode]) -> Optional[DateRange]:
    return ctx.explicit


def _children_group_dates(ctx: _GroupContext, children: List[TaskNode]) -> Optional[DateRange]:
    if not children or not any(to_calendar_date(t.start_date) for t in ctx.group.tasks):
        return None
    return min(c.start_date for c in children), max(c.end_date for c in children)


def _synthetic_group_dates(ctx: _GroupContext, children: List[TaskNode]) -> Optional[DateRange]:
    return ctx.synthetic


GROUP_DATE_TIERS = [
    ("explicit", _explicit_group_dates),
    ("children", _children_group_dates),
    ("synthetic", _synthetic_group_dates),
]


def resolve_group_dates(ctx: _GroupContext, children: List[TaskNode]) -> Tuple[str, DateRange]:
    for tier, rule in GROUP_DATE_TIERS:
        rng = rule(ctx, children)
        if rng is not None:
            return tier, rng
    raise AssertionError("no group date tier matched")


# ------------------------------
# Status
# ------------------------------

def infer_group_status(tasks: Sequence[TaskModel]) -> NodeStatus:
    if not tasks:
        return NodeStatus.TODO
    done = sum(1 for t in tasks if t.done)
    if done == 0:
        return NodeStatus.TODO
    if done == len(tasks):
        return NodeStatus.DONE
    return NodeStatus.IN_PROGRESS


# ------------------------------
# Flattening
# ------------------------------

def _build_group(ctx: _GroupContext, hours: float) -> GroupNode:
    group = ctx.group
    gi = ctx.index
    count = len(group.tasks)
    children: List[TaskNode] = []
    for ti, task in enumerate(group.tasks):
        _, (start, end) = resolve_task_dates(task, ti, count, ctx)
        children.append(TaskNode(
            id=f"task-{group.name}-{gi}-{ti}",
            name=task.name,
            status=NodeStatus.DONE if task.done else NodeStatus.TODO,
            hours=task_hours(task),
            start_date=start,
            end_date=end,
        ))
    _, (start, end) = resolve_group_dates(ctx, children)
    return GroupNode(
        id=f"group-{group.name}-{gi}",
        name=group.name,
        milestone=normalize_status(group.milestone) or group.milestone,
        status=infer_group_status(group.tasks),
        hours=hours,
        start_date=start,
        end_date=end,
        children=children,
        subtasks=[SubtaskRef(name=t.name, done=t.done) for t in group.tasks],
    )


def _marker(m: MilestoneMarkerModel) -> MilestoneMarker:
    return MilestoneMarker(name=m.name, target_date=to_calendar_date(m.target_date), icon=m.icon)


def flatten_project(project: ProjectModel, today: Optional[date] = None) -> ProjectSchedule:
    """Build the schedule tree for one project.

    `today` anchors projects that have no start date; it defaults to the
    current local date.
    """
    today = today or date.today()
    start, end = project_window(project)
    if start is None:
        logger.debug("project %s has no start date; anchoring schedule at %s", project.id, today)

    hours = [resolve_group_hours(g)[1] for g in project.task_groups]
    slices = synthetic_slices(start, end, [day_span(h) for h in hours], today)

    groups: List[GroupNode] = []
    for gi, group in enumerate(project.task_groups):
        ctx = _GroupContext(
            index=gi,
            group=group,
            explicit=_explicit_group_window(group),
            synthetic=slices[gi],
        )
        groups.append(_build_group(ctx, hours[gi]))

    if groups:
        sched_start = min(g.start_date for g in groups)
        sched_end = max(g.end_date for g in groups)
    else:
        sched_start = start or today
        sched_end = end or sched_start

    return ProjectSchedule(
        id=project.id,
        name=project.name,
        status=normalize_status(project.status) or project.status,
        hours=sum(hours),
        start_date=sched_start,
        end_date=sched_end,
        tasks=groups,
        milestones=[_marker(m) for m in project.milestones],
    )


def flatten_projects(projects: Sequence[ProjectModel], today: Optional[date] = None) -> List[ProjectSchedule]:
    today = today or date.today()
    return [flatten_project(p, today=today) for p in projects]
