import contextlib
import logging
from typing import Iterator

from database.database import SessionLocal
from database.repository import SchoolRepository

logger = logging.getLogger(__name__)


@contextlib.contextmanager
def school_uow() -> Iterator[SchoolRepository]:
    """One transaction over the school tables.

    The score job opens one of these per fetch and one per course write; the
    shuffle service one per admin action. Leaving the block normally commits,
    leaving it through an exception rolls back and re-raises.

        with school_uow() as repo:
            stage = repo.courses.get_stage(course_id, stage_id)
            repo.courses.close_stage(stage)
    """
    session = SessionLocal()
    try:
        yield SchoolRepository(session)
        session.commit()
    except Exception:
        logger.debug("Rolling back school unit of work")
        session.rollback()
        raise
    finally:
        session.close()
