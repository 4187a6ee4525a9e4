from datetime import date
from typing import List, Optional
import logging

from fastapi import Depends, FastAPI, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy.orm import Session

from roadmap import config
from roadmap.app.db.database import get_db
from roadmap.app.db.db_loader import load_all_projects, load_project_from_db
from roadmap.app.db.models import ProjectModel
from roadmap.tools.schedule.engine import (
    aggregate_capacity,
    flatten_project,
    progress_summary,
    to_date_input_value,
    week_days,
)
from roadmap.tools.schedule.engine.dates import to_calendar_date

logging.basicConfig(level=config.LOG_LEVEL)
logger = logging.getLogger("api")

app = FastAPI(title="Roadmap Scheduler")

# Enable CORS for local frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ALLOW_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CapacityPreviewRequest(BaseModel):
    projects: List[ProjectModel]
    start: Optional[str] = None
    days: Optional[int] = None
    today: Optional[str] = None


def _parse_query_date(value: Optional[str], name: str) -> Optional[date]:
    if value is None:
        return None
    parsed = to_calendar_date(value)
    if parsed is None:
        raise HTTPException(status_code=422, detail=f"Invalid {name}: {value!r}; expected YYYY-MM-DD")
    return parsed


def _window_days(days: Optional[int]) -> int:
    if days is None:
        days = config.CAPACITY_WINDOW_DAYS
    if days not in (7, 14):
        raise HTTPException(status_code=422, detail="days must be 7 or 14")
    return days


def _load_project(db: Session, project_id: int) -> ProjectModel:
    try:
        return load_project_from_db(db, project_id)
    except LookupError:
        raise HTTPException(status_code=404, detail=f"Project {project_id} not found")


@app.get("/")
async def root():
    return {"message": "Roadmap scheduler"}


@app.get("/projects/{project_id}/schedule")
def project_schedule(
    project_id: int,
    today: Optional[str] = Query(None, description="Anchor date for undated projects, YYYY-MM-DD"),
    db: Session = Depends(get_db),
):
    """Fully dated project -> group -> task tree for timeline and calendar views."""
    try:
        anchor = _parse_query_date(today, "today")
        project = _load_project(db, project_id)
        return flatten_project(project, today=anchor).model_dump(mode="json", by_alias=True)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("/projects/%s/schedule failed: %s", project_id, e)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/projects/{project_id}/progress")
def project_progress(
    project_id: int,
    current_phase_only: bool = Query(False, alias="currentPhaseOnly"),
    db: Session = Depends(get_db),
):
    """Blocks and counts for the compact milestone progress bar."""
    try:
        project = _load_project(db, project_id)
        return progress_summary(project, current_phase_only=current_phase_only).model_dump(mode="json", by_alias=True)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("/projects/%s/progress failed: %s", project_id, e)
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/capacity")
def capacity(
    start: Optional[str] = Query(None, description="First day of the window; defaults to this week's Monday"),
    days: Optional[int] = Query(None, description="Window length, 7 or 14"),
    today: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    """Hours per day and per project across all projects for the visible window."""
    try:
        anchor = _parse_query_date(today, "today") or date.today()
        window_start = _parse_query_date(start, "start") or week_days(anchor)[0]
        window = _window_days(days)
        projects = load_all_projects(db)
        report = aggregate_capacity(projects, window_start, days=window, today=anchor)
        logger.info("capacity from %s: %d projects", to_date_input_value(window_start), len(projects))
        return report.model_dump(mode="json", by_alias=True)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("/capacity failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/schedule/preview")
def schedule_preview(project: ProjectModel, today: Optional[str] = Query(None)):
    """Schedule an unsaved project, e.g. while editing task groups."""
    try:
        anchor = _parse_query_date(today, "today")
        return flatten_project(project, today=anchor).model_dump(mode="json", by_alias=True)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("/schedule/preview failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


@app.post("/capacity/preview")
def capacity_preview(request: CapacityPreviewRequest):
    try:
        anchor = _parse_query_date(request.today, "today") or date.today()
        window_start = _parse_query_date(request.start, "start") or week_days(anchor)[0]
        window = _window_days(request.days)
        report = aggregate_capacity(request.projects, window_start, days=window, today=anchor)
        return report.model_dump(mode="json", by_alias=True)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("/capacity/preview failed: %s", e)
        raise HTTPException(status_code=500, detail=str(e))


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host=config.UVICORN_HOST, port=config.UVICORN_PORT)
