"""API route handlers."""

from .stages import router as stages_router
from .score_job import router as score_job_router
