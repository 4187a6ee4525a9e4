from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple, Union
import logging
import math

from pydantic import Field, computed_field

from roadmap import config
from roadmap.app.db.models import ProjectModel

from .dates import add_days, days_between
from .flatten import flatten_project
from .nodes import EngineModel, ProjectSchedule

logger = logging.getLogger(__name__)


class CapacityBand(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"
    NOMINAL = "nominal"


class Utilization(EngineModel):
    used: float
    total: float
    pct: float
    band: CapacityBand

    @computed_field(alias="remaining")
    @property
    def remaining(self) -> float:
        return max(self.total - self.used, 0.0)

    @computed_field(alias="barPct")
    @property
    def bar_pct(self) -> float:
        return min(self.pct, 100.0)


class DayLoad(EngineModel):
    day: date
    hours: float
    is_weekend: bool
    project_ids: List[int] = Field(default_factory=list)
    utilization: Utilization


class ProjectLoad(EngineModel):
    project_id: int
    name: str
    hours: float
    total_hours: float
    start_date: date
    end_date: date


class CapacityReport(EngineModel):
    start: date
    end: date
    days: List[DayLoad]
    projects: List[ProjectLoad]
    weekday_hours: float
    utilization: Utilization
    over_capacity: bool


def classify(pct: float) -> CapacityBand:
    """Severity band for a utilization percentage."""
    if pct > 90:
        return CapacityBand.CRITICAL
    if pct > 75:
        return CapacityBand.WARNING
    if pct > 50:
        return CapacityBand.INFO
    return CapacityBand.NOMINAL


def utilization(used: float, total: float) -> Utilization:
    pct = (used / total * 100.0) if total else 0.0
    return Utilization(used=used, total=total, pct=pct, band=classify(pct))


def format_hours(hours: float) -> str:
    return f"{round(hours, 1)}h"


def _span_days(start: date, end: date) -> int:
    return max(1, days_between(start, end) + 1)


def work_items(schedule: ProjectSchedule) -> List[Tuple[float, date, date]]:
    """(hours, start, end) for every leaf of the schedule.

    A group's children carry the work; a group without children stands in for
    itself.
    """
    items: List[Tuple[float, date, date]] = []
    for group in schedule.tasks:
        if group.children:
            items.extend((c.hours, c.start_date, c.end_date) for c in group.children)
        else:
            items.append((group.hours, group.start_date, group.end_date))
    return items


def project_load(schedule: ProjectSchedule) -> Optional[Tuple[float, date, date]]:
    """Total hours and the date extremes over a project's work items."""
    items = work_items(schedule)
    if not items:
        return None
    total = math.fsum(h for h, _, _ in items)
    return total, min(s for _, s, _ in items), max(e for _, _, e in items)


def _as_schedule(project: Union[ProjectSchedule, ProjectModel], today: Optional[date]) -> ProjectSchedule:
    if isinstance(project, ProjectSchedule):
        return project
    return flatten_project(project, today=today)


def window_days(start: date, days: int) -> List[date]:
    return [add_days(start, i) for i in range(max(days, 1))]


def daily_hours(schedules: Sequence[ProjectSchedule], days: Sequence[date]) -> Dict[date, Tuple[float, List[int]]]:
    """Hours per window day, prorated evenly over each work item's own span."""
    acc: Dict[date, List[float]] = {d: [] for d in days}
    contributors: Dict[date, set] = {d: set() for d in days}
    for sched in schedules:
        for hours, start, end in work_items(sched):
            per_day = hours / _span_days(start, end)
            for d in days:
                if start <= d <= end:
                    acc[d].append(per_day)
                    contributors[d].add(sched.id)
    # fsum keeps the total independent of project order
    return {d: (math.fsum(acc[d]), sorted(contributors[d])) for d in days}


def weekly_project_hours(schedules: Sequence[ProjectSchedule], win_start: date, win_end: date) -> List[ProjectLoad]:
    """Per-project hours for projects overlapping the window, largest first.

    A project contributes its daily rate times seven, capped at its total.
    """
    out: List[ProjectLoad] = []
    for sched in schedules:
        load = project_load(sched)
        if load is None:
            continue
        total, start, end = load
        if end < win_start or start > win_end:
            continue
        per_day = total / _span_days(start, end)
        out.append(ProjectLoad(
            project_id=sched.id,
            name=sched.name,
            hours=min(total, per_day * 7),
            total_hours=total,
            start_date=start,
            end_date=end,
        ))
    return sorted(out, key=lambda p: (-p.hours, p.project_id))


def aggregate_capacity(
    projects: Sequence[Union[ProjectSchedule, ProjectModel]],
    start: date,
    days: Optional[int] = None,
    today: Optional[date] = None,
) -> CapacityReport:
    """Capacity overview for `days` calendar days from `start` (7 or 14 in the UI)."""
    days = days or config.CAPACITY_WINDOW_DAYS
    schedules = [_as_schedule(p, today) for p in projects]
    window = window_days(start, days)
    per_day = daily_hours(schedules, window)

    day_loads: List[DayLoad] = []
    weekday: List[float] = []
    for d in window:
        hours, ids = per_day[d]
        is_weekend = d.weekday() >= 5
        if not is_weekend:
            weekday.append(hours)
        day_loads.append(DayLoad(
            day=d,
            hours=hours,
            is_weekend=is_weekend,
            project_ids=ids,
            utilization=utilization(hours, config.DAY_CAPACITY_HOURS),
        ))

    weekday_hours = math.fsum(weekday)
    # weekly baseline, scaled to the number of weekdays in the window
    capacity = config.WEEK_CAPACITY_HOURS * len(weekday) / 5
    overall = utilization(weekday_hours, capacity)
    logger.debug("capacity %s..%s: %.1fh of %.1fh", window[0], window[-1], weekday_hours, capacity)

    return CapacityReport(
        start=window[0],
        end=window[-1],
        days=day_loads,
        projects=weekly_project_hours(schedules, window[0], window[-1]),
        weekday_hours=weekday_hours,
        utilization=overall,
        over_capacity=weekday_hours > capacity * config.OVER_CAPACITY_RATIO,
    )
