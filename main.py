import os
import sys
import signal
import logging
import argparse
import threading

from core.config_loader import load_config
from core.app_context import AppContext
from core.exceptions import ShuffleError

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

shutdown_requested = threading.Event()

def signal_handler(sig, frame):
    logger.info("Shutdown signal received")
    shutdown_requested.set()


def run_daemon(ctx: AppContext):
    """Arm the daily score job and block until SIGINT/SIGTERM."""
    if not ctx.config.schedule.enabled:
        logger.info("Score job schedule disabled in config, nothing to do")
        return

    ctx.scheduler.start()
    while not shutdown_requested.is_set():
        shutdown_requested.wait(5)
    ctx.scheduler.stop(timeout=30)


def run_once(ctx: AppContext) -> int:
    """Run the score job immediately in the foreground."""
    if not ctx.scheduler.run_now(source="manual"):
        logger.error("Score job is already running")
        return 1

    report = ctx.scheduler.last_report
    if report is None:
        logger.error(f"Score job did not complete: {ctx.scheduler.last_error}")
        return 1
    for result in report.results:
        status = "ok" if result.success else f"FAILED ({result.error})"
        logger.info(
            f"  {result.course_name}: {result.items_updated} updated "
            f"in {result.duration_ms}ms - {status}"
        )
    return 1 if report.failed_courses else 0


def run_shuffle(ctx: AppContext, course_id: int, stage_id=None) -> int:
    try:
        if stage_id is not None:
            result = ctx.shuffle_service.close_stage(course_id, stage_id)
            mentor_ids = result.mentor_ids_next
        else:
            mentor_ids = ctx.shuffle_service.shuffle(course_id)
    except ShuffleError as e:
        logger.error(f"Shuffle failed: {e}")
        return 1

    logger.info(f"Next mentor order for course {course_id}: {mentor_ids}")
    return 0


def main():
    parser = argparse.ArgumentParser(description="CourseRank score job driver")
    parser.add_argument('--mode', type=str, choices=['daemon', 'once', 'shuffle'], default='daemon',
                      help='daemon: run nightly (default), once: score all courses now, '
                           'shuffle: reshuffle mentors of a course')
    parser.add_argument('--config', type=str, default='config.yaml', help='Path to config.yaml')
    parser.add_argument('--course-id', type=int, help='Course for --mode shuffle')
    parser.add_argument('--stage-id', type=int, help='Close this stage before shuffling')
    args = parser.parse_args()

    if args.mode == 'shuffle' and args.course_id is None:
        parser.error("--course-id is required with --mode shuffle")

    signal.signal(signal.SIGINT, signal_handler)
    signal.signal(signal.SIGTERM, signal_handler)

    logger.info(f"Main driver starting in {args.mode.upper()} mode...")

    config = load_config(args.config)

    # The engine is created on import, so the configured URL must be in place first
    os.environ.setdefault("DATABASE_URL", config.database.url)
    from database.init_db import init_db

    # Initialize DB (with retry logic)
    init_db()
    ctx = AppContext.build(config)

    if args.mode == 'once':
        return run_once(ctx)
    if args.mode == 'shuffle':
        return run_shuffle(ctx, args.course_id, args.stage_id)

    run_daemon(ctx)
    return 0

if __name__ == "__main__":
    sys.exit(main())
