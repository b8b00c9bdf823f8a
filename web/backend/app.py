#!/usr/bin/env python3
"""
CourseRank admin API - FastAPI Application

Administrative surface of the score engine: close stages (mentor shuffle),
distribute task checkers, trigger and monitor the score job.

Usage:
    uv run python -m web.backend.app

Then open:
    - http://localhost:8080/docs - API Documentation (Swagger UI)
"""

import logging

from fastapi import FastAPI

from .exceptions import register_exception_handlers
from .routers import stages_router, score_job_router

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(
        title="CourseRank API",
        description="Administrative API of the course score engine",
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc"
    )

    register_exception_handlers(app)

    app.include_router(stages_router)
    app.include_router(score_job_router)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "service": "courserank-api"}

    return app


app = create_app()


def main():
    """Run the web server with the nightly scheduler armed in-process."""
    import uvicorn
    from .dependencies import get_app_context

    ctx = get_app_context()
    config = ctx.config
    if config.schedule.enabled:
        ctx.scheduler.start()

    logger.info(f"Starting CourseRank API on {config.web.host}:{config.web.port}")
    try:
        uvicorn.run(
            app,
            host=config.web.host,
            port=config.web.port,
            log_level="info"
        )
    finally:
        ctx.scheduler.stop(timeout=30)


if __name__ == "__main__":
    main()
