from datetime import date
from enum import Enum
from typing import Annotated, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class NodeStatus(str, Enum):
    TODO = "Todo"
    IN_PROGRESS = "In Progress"
    DONE = "Done"


class EngineModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


# ------------------------------
# Schedule tree
# ------------------------------

class TaskNode(EngineModel):
    id: str
    name: str
    status: NodeStatus
    hours: float
    start_date: date
    end_date: date
    is_group: Literal[False] = False


class SubtaskRef(EngineModel):
    name: str
    done: bool


class GroupNode(EngineModel):
    id: str
    name: str
    milestone: str
    status: NodeStatus
    hours: float
    start_date: date
    end_date: date
    is_group: Literal[True] = True
    children: List[TaskNode] = Field(default_factory=list)
    subtasks: List[SubtaskRef] = Field(default_factory=list)

    @property
    def day_span(self) -> int:
        return (self.end_date - self.start_date).days + 1


class MilestoneMarker(EngineModel):
    name: str
    target_date: Optional[date] = None
    icon: str = "◆"


class ProjectSchedule(EngineModel):
    id: int
    name: str
    status: str
    hours: float
    start_date: date
    end_date: date
    tasks: List[GroupNode] = Field(default_factory=list)
    milestones: List[MilestoneMarker] = Field(default_factory=list)


# ------------------------------
# Progress bar blocks
# ------------------------------

class CapBlock(EngineModel):
    type: Literal["cap"] = "cap"
    milestone: str
    color: str
    position: Literal["start"] = "start"


class DividerBlock(EngineModel):
    type: Literal["divider"] = "divider"
    milestone: str
    color: str
    group_index: int


class TaskBlock(EngineModel):
    type: Literal["task"] = "task"
    milestone: str
    color: str
    done: bool
    group_index: int


ProgressBlock = Annotated[Union[CapBlock, DividerBlock, TaskBlock], Field(discriminator="type")]
