#!/usr/bin/env python3
"""
Score job endpoints - trigger and monitor the nightly score recomputation.
"""

import logging
from fastapi import APIRouter, Depends

from core.app_context import AppContext
from core.exceptions import JobAlreadyRunningError
from ..dependencies import get_app_context
from ..models.responses import (
    ScoreJobTriggerResponse,
    ScoreJobStatusResponse,
    CourseResultSummary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/score-job", tags=["score-job"])


@router.post("/run", response_model=ScoreJobTriggerResponse, status_code=202)
def run_score_job(ctx: AppContext = Depends(get_app_context)):
    """
    Start a score job run in the background.

    Rejected with 409 while a run is in progress.
    """
    if not ctx.scheduler.trigger_async(source="web"):
        raise JobAlreadyRunningError("Score job is already running")

    return ScoreJobTriggerResponse(success=True, message="Score job started")


@router.get("/status", response_model=ScoreJobStatusResponse)
def get_score_job_status(ctx: AppContext = Depends(get_app_context)):
    scheduler = ctx.scheduler
    report = scheduler.last_report

    courses = []
    if report is not None:
        courses = [
            CourseResultSummary(
                course_id=r.course_id,
                course_name=r.course_name,
                success=r.success,
                items_updated=r.items_updated,
                duration_ms=r.duration_ms,
                error=r.error
            )
            for r in report.results
        ]

    return ScoreJobStatusResponse(
        state=scheduler.state.value,
        next_run_at=scheduler.next_run_at,
        last_started_at=scheduler.last_started_at,
        last_finished_at=scheduler.last_finished_at,
        last_error=scheduler.last_error,
        items_updated=report.items_updated if report is not None else None,
        courses=courses
    )
