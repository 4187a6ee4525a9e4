from typing import List, Optional, Union
import math

from roadmap.app.db.models import (
    MILESTONE_ORDER,
    Milestone,
    ProjectModel,
    TaskGroupModel,
    milestone_color,
    normalize_status,
)

from .nodes import CapBlock, DividerBlock, EngineModel, ProgressBlock, TaskBlock

Block = Union[CapBlock, DividerBlock, TaskBlock]


class ProgressSummary(EngineModel):
    total: int
    completed: int
    pct: int
    phase: Optional[str] = None
    blocks: List[ProgressBlock]


def milestone_range(start: Optional[str], end: Optional[str]) -> List[str]:
    """Inclusive slice of the milestone order between start and end.

    Unknown, equal or reversed bounds degrade to [start].
    """
    start = normalize_status(start) or Milestone.REQUESTED.value
    end = normalize_status(end) or Milestone.LIVE.value
    if start not in MILESTONE_ORDER or end not in MILESTONE_ORDER:
        return [start]
    si = MILESTONE_ORDER.index(start)
    ei = MILESTONE_ORDER.index(end)
    if si >= ei:
        return [start]
    return MILESTONE_ORDER[si:ei + 1]


def build_progress_blocks(project: ProjectModel) -> List[Block]:
    """Cap, then one block per task in group order, with a divider wherever the
    milestone changes between consecutive groups."""
    first = milestone_range(project.start_milestone, project.end_milestone)[0]
    blocks: List[Block] = [CapBlock(milestone=first, color=milestone_color(first))]

    prev: Optional[str] = None
    for gi, group in enumerate(project.task_groups):
        ms = normalize_status(group.milestone) or group.milestone
        color = milestone_color(ms)
        if prev is not None and ms != prev:
            blocks.append(DividerBlock(milestone=ms, color=color, group_index=gi))
        prev = ms
        for task in group.tasks:
            blocks.append(TaskBlock(milestone=ms, color=color, done=task.done, group_index=gi))
    return blocks


def current_phase(project: ProjectModel) -> str:
    return normalize_status(project.status) or project.status


def current_phase_groups(project: ProjectModel) -> List[TaskGroupModel]:
    phase = current_phase(project)
    return [g for g in project.task_groups if normalize_status(g.milestone) == phase]


def build_phase_progress_blocks(project: ProjectModel) -> List[Block]:
    """Blocks for the groups of the project's current phase only."""
    phase = current_phase(project)
    color = milestone_color(phase)
    blocks: List[Block] = [CapBlock(milestone=phase, color=color)]
    for gi, group in enumerate(project.task_groups):
        if normalize_status(group.milestone) != phase:
            continue
        for task in group.tasks:
            blocks.append(TaskBlock(milestone=phase, color=color, done=task.done, group_index=gi))
    return blocks


def progress_summary(project: ProjectModel, current_phase_only: bool = False) -> ProgressSummary:
    """Counts and blocks for the progress bar.

    The phase view is used only when the current phase has tasks; otherwise the
    full milestone range is shown.
    """
    phase_groups = current_phase_groups(project) if current_phase_only else []
    phase_total = sum(len(g.tasks) for g in phase_groups)
    if current_phase_only and phase_total > 0:
        blocks = build_phase_progress_blocks(project)
        total = phase_total
        completed = sum(1 for g in phase_groups for t in g.tasks if t.done)
        phase: Optional[str] = current_phase(project)
    else:
        blocks = build_progress_blocks(project)
        total = sum(len(g.tasks) for g in project.task_groups)
        completed = sum(1 for g in project.task_groups for t in g.tasks if t.done)
        phase = None
    # half rounds up
    pct = int(math.floor(completed / total * 100 + 0.5)) if total else 0
    return ProgressSummary(total=total, completed=completed, pct=pct, phase=phase, blocks=blocks)
