#!/usr/bin/env python3
"""
Request models for API endpoints.
"""

from pydantic import BaseModel, Field
from typing import List, Optional


class TaskCheckersRequest(BaseModel):
    """Request to distribute the checkers of a course task."""
    mentor_ids: Optional[List[int]] = Field(
        None,
        description="Mentor ordering to use; omit to shuffle a fresh one"
    )
