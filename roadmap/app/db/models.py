from datetime import date, datetime
from enum import Enum
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


# Dates arrive as DATE columns, ISO timestamps or free-form strings; malformed
# values are kept and resolved by the scheduling engine.
DateInput = Union[datetime, date, str]


class Milestone(str, Enum):
    REQUESTED = "Requested"
    PLANNING = "Planning"
    DEV = "Dev"
    BETA = "Beta"
    LIVE = "Live"


MILESTONE_ORDER: List[str] = [m.value for m in Milestone]

# Stored status labels -> short milestone names
DB_STATUS_TO_SHORT = {
    "Requested": "Requested",
    "In Planning": "Planning",
    "In Development": "Dev",
    "In Beta Testing": "Beta",
    "Live": "Live",
}

MILESTONE_COLORS = {
    "Requested": "#8B91A0",
    "Planning": "#F6C244",
    "Dev": "#5AA2FF",
    "Beta": "#D14B06",
    "Live": "#90E35E",
}
DEFAULT_MILESTONE_COLOR = MILESTONE_COLORS["Requested"]


def normalize_status(status: Optional[str]) -> Optional[str]:
    """Map a stored status label ("In Development") to its milestone name ("Dev").
    Unknown values are returned unchanged."""
    if status is None:
        return None
    return DB_STATUS_TO_SHORT.get(status, status)


def milestone_color(milestone: Optional[str]) -> str:
    return MILESTONE_COLORS.get(normalize_status(milestone) or "", DEFAULT_MILESTONE_COLOR)


class RecordModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TaskModel(RecordModel):
    name: str
    done: bool = False
    estimated_hours: Optional[float] = None
    start_date: Optional[DateInput] = None


class TaskGroupModel(RecordModel):
    name: str
    milestone: str = Milestone.REQUESTED.value
    start_date: Optional[DateInput] = None
    end_date: Optional[DateInput] = None
    estimated_hours: Optional[float] = None
    tasks: List[TaskModel] = Field(default_factory=list)


class MilestoneMarkerModel(RecordModel):
    name: str
    target_date: Optional[DateInput] = None
    icon: str = "◆"


class ProjectModel(RecordModel):
    id: int
    name: str
    status: str = Milestone.REQUESTED.value
    start_date: Optional[DateInput] = None
    end_date: Optional[DateInput] = None
    date_label: Optional[str] = None
    start_milestone: str = Milestone.REQUESTED.value
    end_milestone: str = Milestone.LIVE.value
    task_groups: List[TaskGroupModel] = Field(default_factory=list)
    milestones: List[MilestoneMarkerModel] = Field(default_factory=list)
