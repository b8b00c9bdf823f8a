#!/usr/bin/env python3
"""
Stage endpoints - close a stage and redistribute mentors.
"""

import logging
from typing import Optional
from fastapi import APIRouter, Depends

from core.app_context import AppContext
from ..dependencies import get_app_context
from ..models.requests import TaskCheckersRequest
from ..models.responses import StageCloseResponse, TaskCheckersResponse, TaskCheckerAssignment

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/courses/{course_id}", tags=["stages"])


@router.post("/stages/{stage_id}/close", response_model=StageCloseResponse)
def close_stage(
    course_id: int,
    stage_id: int,
    ctx: AppContext = Depends(get_app_context)
):
    """
    Close a stage and return the next-cycle mentor ordering.

    Errors (unknown course or stage, no active mentors) are returned to the
    caller directly; nothing is retried.
    """
    logger.info(f"Close stage requested: course={course_id} stage={stage_id}")
    result = ctx.shuffle_service.close_stage(course_id, stage_id)
    return StageCloseResponse(
        success=True,
        course_id=result.course_id,
        stage_id=result.stage_id,
        mentor_ids_next=result.mentor_ids_next
    )


@router.post("/tasks/{course_task_id}/checkers", response_model=TaskCheckersResponse)
def assign_task_checkers(
    course_id: int,
    course_task_id: int,
    body: Optional[TaskCheckersRequest] = None,
    ctx: AppContext = Depends(get_app_context)
):
    """Distribute review duties of a course task over the mentors."""
    mentor_ids = body.mentor_ids if body else None
    plan = ctx.shuffle_service.assign_task_checkers(course_id, course_task_id, mentor_ids)
    return TaskCheckersResponse(
        success=True,
        course_task_id=course_task_id,
        assignments=[
            TaskCheckerAssignment(student_id=student_id, mentor_id=mentor_id)
            for student_id, mentor_id in plan
        ]
    )
