"""
Tests for the milestone progress-bar block builder.
"""
import pytest

from roadmap.app.db.models import MILESTONE_COLORS, milestone_color, normalize_status
from roadmap.tools.schedule.engine.nodes import CapBlock, DividerBlock, TaskBlock
from roadmap.tools.schedule.engine.progress import (
    build_phase_progress_blocks,
    build_progress_blocks,
    milestone_range,
    progress_summary,
)


def group(name, milestone, done_flags):
    return {"name": name, "milestone": milestone, "tasks": [{"name": f"{name}{i}", "done": f} for i, f in enumerate(done_flags)]}


@pytest.fixture
def four_phase_project(make_project):
    return make_project(
        status="In Development",
        startMilestone="Planning",
        endMilestone="Live",
        taskGroups=[
            group("Plan", "Planning", [True, True]),
            group("Build", "Dev", [True, False, False]),
            group("Test", "Beta", [False]),
            group("Ship", "Live", [False]),
        ],
    )


class TestMilestoneRange:
    def test_forward_range(self):
        assert milestone_range("Planning", "Live") == ["Planning", "Dev", "Beta", "Live"]
        assert milestone_range("Requested", "Dev") == ["Requested", "Planning", "Dev"]

    def test_long_labels_are_normalized(self):
        assert milestone_range("In Planning", "In Beta Testing") == ["Planning", "Dev", "Beta"]

    def test_reversed_range_degrades_to_start(self):
        assert milestone_range("Beta", "Planning") == ["Beta"]

    def test_equal_bounds(self):
        assert milestone_range("Dev", "Dev") == ["Dev"]

    def test_unknown_bound(self):
        assert milestone_range("Someday", "Live") == ["Someday"]

    def test_missing_bounds_use_defaults(self):
        assert milestone_range(None, None) == ["Requested", "Planning", "Dev", "Beta", "Live"]


class TestBuildProgressBlocks:
    def test_cap_dividers_and_tasks(self, four_phase_project):
        blocks = build_progress_blocks(four_phase_project)
        kinds = [b.type for b in blocks]
        assert kinds.count("cap") == 1
        assert kinds.count("divider") == 3
        assert kinds.count("task") == 7
        assert kinds == [
            "cap", "task", "task",
            "divider", "task", "task", "task",
            "divider", "task",
            "divider", "task",
        ]

    def test_cap_is_first_milestone_of_range(self, four_phase_project):
        cap = build_progress_blocks(four_phase_project)[0]
        assert isinstance(cap, CapBlock)
        assert cap.milestone == "Planning"
        assert cap.position == "start"
        assert cap.color == MILESTONE_COLORS["Planning"]

    def test_dividers_carry_new_milestone_and_group_index(self, four_phase_project):
        dividers = [b for b in build_progress_blocks(four_phase_project) if isinstance(b, DividerBlock)]
        assert [(b.milestone, b.group_index) for b in dividers] == [("Dev", 1), ("Beta", 2), ("Live", 3)]

    def test_task_blocks(self, four_phase_project):
        tasks = [b for b in build_progress_blocks(four_phase_project) if isinstance(b, TaskBlock)]
        assert [b.done for b in tasks] == [True, True, True, False, False, False, False]
        assert [b.group_index for b in tasks] == [0, 0, 1, 1, 1, 2, 3]
        assert tasks[2].color == MILESTONE_COLORS["Dev"]
        assert tasks[2].milestone == "Dev"

    def test_no_divider_between_groups_of_same_milestone(self, make_project):
        project = make_project(taskGroups=[group("A", "Dev", [False]), group("B", "Dev", [True])])
        assert [b.type for b in build_progress_blocks(project)] == ["cap", "task", "task"]

    def test_divider_for_empty_group(self, make_project):
        project = make_project(taskGroups=[group("A", "Dev", [False]), group("B", "Beta", [])])
        blocks = build_progress_blocks(project)
        assert [b.type for b in blocks] == ["cap", "task", "divider"]

    def test_reversed_range_does_not_raise(self, make_project):
        project = make_project(
            startMilestone="Live", endMilestone="Planning",
            taskGroups=[group("A", "Dev", [False])],
        )
        blocks = build_progress_blocks(project)
        assert blocks[0].milestone == "Live"
        assert [b.type for b in blocks] == ["cap", "task"]

    def test_unknown_group_milestone_gets_default_color(self, make_project):
        project = make_project(taskGroups=[group("A", "Paused", [False])])
        task = build_progress_blocks(project)[1]
        assert task.milestone == "Paused"
        assert task.color == MILESTONE_COLORS["Requested"]

    def test_no_groups(self, make_project):
        assert [b.type for b in build_progress_blocks(make_project())] == ["cap"]


class TestPhaseProgressBlocks:
    def test_only_current_phase_groups(self, four_phase_project):
        blocks = build_phase_progress_blocks(four_phase_project)
        assert blocks[0].type == "cap"
        assert blocks[0].milestone == "Dev"
        tasks = blocks[1:]
        assert all(isinstance(b, TaskBlock) for b in tasks)
        assert [b.group_index for b in tasks] == [1, 1, 1]
        assert all(b.color == MILESTONE_COLORS["Dev"] for b in tasks)

    def test_phase_keeps_group_index_from_full_list(self, make_project):
        project = make_project(status="Beta", taskGroups=[
            group("A", "Beta", [True]), group("B", "Dev", [False]), group("C", "Beta", [False]),
        ])
        tasks = build_phase_progress_blocks(project)[1:]
        assert [b.group_index for b in tasks] == [0, 2]
        assert not any(b.type == "divider" for b in tasks)


class TestProgressSummary:
    def test_full_range(self, four_phase_project):
        summary = progress_summary(four_phase_project)
        assert (summary.total, summary.completed, summary.pct) == (7, 3, 43)
        assert summary.phase is None
        assert len(summary.blocks) == 11

    def test_current_phase(self, four_phase_project):
        summary = progress_summary(four_phase_project, current_phase_only=True)
        assert (summary.total, summary.completed, summary.pct) == (3, 1, 33)
        assert summary.phase == "Dev"
        assert len(summary.blocks) == 4

    def test_phase_without_tasks_falls_back_to_full_range(self, make_project):
        project = make_project(status="Live", taskGroups=[group("A", "Dev", [True]), group("B", "Live", [])])
        summary = progress_summary(project, current_phase_only=True)
        assert summary.phase is None
        assert summary.total == 1
        assert summary.pct == 100

    def test_half_rounds_up(self, make_project):
        project = make_project(taskGroups=[group("A", "Dev", [True] + [False] * 7)])
        assert progress_summary(project).pct == 13

    def test_empty_project(self, make_project):
        summary = progress_summary(make_project())
        assert (summary.total, summary.completed, summary.pct) == (0, 0, 0)

    def test_camel_case_output(self, four_phase_project):
        data = progress_summary(four_phase_project).model_dump(mode="json", by_alias=True)
        divider = data["blocks"][3]
        assert divider == {"type": "divider", "milestone": "Dev", "color": MILESTONE_COLORS["Dev"], "groupIndex": 1}


class TestStatusLabels:
    def test_normalize_status(self):
        assert normalize_status("In Development") == "Dev"
        assert normalize_status("In Beta Testing") == "Beta"
        assert normalize_status("Live") == "Live"
        assert normalize_status("Paused") == "Paused"
        assert normalize_status(None) is None

    def test_milestone_color(self):
        assert milestone_color("In Planning") == MILESTONE_COLORS["Planning"]
        assert milestone_color("Paused") == MILESTONE_COLORS["Requested"]
        assert milestone_color(None) == MILESTONE_COLORS["Requested"]
