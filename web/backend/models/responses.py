#!/usr/bin/env python3
"""
Response models for API endpoints.
"""

from datetime import datetime
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional


class StageCloseResponse(BaseModel):
    """Response after closing a stage."""
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "success": True,
                "course_id": 11,
                "stage_id": 3,
                "mentor_ids_next": [42, 7, 19]
            }
        }
    )

    success: bool
    course_id: int
    stage_id: int
    mentor_ids_next: List[int]


class TaskCheckerAssignment(BaseModel):
    student_id: int
    mentor_id: int


class TaskCheckersResponse(BaseModel):
    """Response after distributing task checkers."""
    success: bool
    course_task_id: int
    assignments: List[TaskCheckerAssignment]


class ScoreJobTriggerResponse(BaseModel):
    """Response after requesting a score job run."""
    success: bool
    message: str


class CourseResultSummary(BaseModel):
    course_id: int
    course_name: str
    success: bool
    items_updated: int = Field(ge=0)
    duration_ms: int = Field(ge=0)
    error: Optional[str] = None


class ScoreJobStatusResponse(BaseModel):
    """Current scheduler state and the outcome of the last run."""
    state: str  # "idle", "running"
    next_run_at: Optional[datetime] = None
    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_error: Optional[str] = None
    items_updated: Optional[int] = None
    courses: List[CourseResultSummary] = Field(default_factory=list)
