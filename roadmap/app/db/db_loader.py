from typing import Dict, List

from sqlalchemy import text

from .models import MilestoneMarkerModel, ProjectModel, TaskGroupModel, TaskModel

_PROJECT_COLUMNS = """
    id, name, status, start_date, end_date, date_label, start_milestone, end_milestone
"""


def _hours(value):
    # NUMERIC columns may come back as Decimal
    return float(value) if value is not None else None


def _load_groups(session, project_ids: List[int]) -> Dict[int, List[TaskGroupModel]]:
    if not project_ids:
        return {}
    params = {f"p{i}": pid for i, pid in enumerate(project_ids)}
    placeholders = ", ".join(f":{k}" for k in params)
    group_rows = session.execute(text(f"""
        SELECT id, project_id, name, milestone, start_date, end_date, estimated_hours
        FROM project_task_groups
        WHERE project_id IN ({placeholders})
        ORDER BY project_id, sort_order, id
    """), params).fetchall()

    task_rows = session.execute(text(f"""
        SELECT t.task_group_id, t.name, t.done, t.estimated_hours
        FROM project_tasks t
        JOIN project_task_groups tg ON tg.id = t.task_group_id
        WHERE tg.project_id IN ({placeholders})
        ORDER BY t.task_group_id, t.sort_order, t.id
    """), params).fetchall()

    tasks_by_group: Dict[int, List[TaskModel]] = {}
    for row in task_rows:
        tasks_by_group.setdefault(row.task_group_id, []).append(TaskModel(
            name=row.name,
            done=bool(row.done),
            estimated_hours=_hours(row.estimated_hours),
        ))

    groups: Dict[int, List[TaskGroupModel]] = {}
    for row in group_rows:
        groups.setdefault(row.project_id, []).append(TaskGroupModel(
            name=row.name,
            milestone=row.milestone,
            start_date=row.start_date,
            end_date=row.end_date,
            estimated_hours=_hours(row.estimated_hours),
            tasks=tasks_by_group.get(row.id, []),
        ))
    return groups


def _load_milestones(session, project_ids: List[int]) -> Dict[int, List[MilestoneMarkerModel]]:
    if not project_ids:
        return {}
    params = {f"p{i}": pid for i, pid in enumerate(project_ids)}
    placeholders = ", ".join(f":{k}" for k in params)
    rows = session.execute(text(f"""
        SELECT project_id, name, target_date, icon
        FROM project_milestones
        WHERE project_id IN ({placeholders})
        ORDER BY project_id, sort_order, id
    """), params).fetchall()
    out: Dict[int, List[MilestoneMarkerModel]] = {}
    for row in rows:
        out.setdefault(row.project_id, []).append(MilestoneMarkerModel(
            name=row.name,
            target_date=row.target_date,
            icon=row.icon or "◆",
        ))
    return out


def _to_project(row, groups, milestones) -> ProjectModel:
    return ProjectModel(
        id=row.id,
        name=row.name,
        status=row.status or "Requested",
        start_date=row.start_date,
        end_date=row.end_date,
        date_label=row.date_label,
        start_milestone=row.start_milestone or "Requested",
        end_milestone=row.end_milestone or "Live",
        task_groups=groups.get(row.id, []),
        milestones=milestones.get(row.id, []),
    )


def load_project_from_db(session, project_id: int) -> ProjectModel:
    """Load one project with its ordered task groups, tasks and milestones.
    Raises LookupError if the project does not exist."""
    row = session.execute(text(f"""
        SELECT {_PROJECT_COLUMNS} FROM changelog_projects WHERE id = :pid
    """), {"pid": project_id}).fetchone()
    if not row:
        raise LookupError(f"project {project_id} not found")
    groups = _load_groups(session, [row.id])
    milestones = _load_milestones(session, [row.id])
    return _to_project(row, groups, milestones)


def load_all_projects(session) -> List[ProjectModel]:
    rows = session.execute(text(f"""
        SELECT {_PROJECT_COLUMNS} FROM changelog_projects ORDER BY id
    """)).fetchall()
    ids = [r.id for r in rows]
    groups = _load_groups(session, ids)
    milestones = _load_milestones(session, ids)
    return [_to_project(r, groups, milestones) for r in rows]
