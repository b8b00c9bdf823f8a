"""Cross-process guard for the score job.

The in-process scheduler state only protects one interpreter. When the daemon
and a manual `--mode once` run share a host, both take this file lock first;
whoever gets it second is rejected.
"""

import os
import fcntl
import json
import logging
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

logger = logging.getLogger(__name__)

DEFAULT_LOCK_FILE = "score_job.lock"


class JobRunLock:
    """Non-blocking exclusive flock; the holder's identity is kept in the file."""

    def __init__(self, lock_file: str = DEFAULT_LOCK_FILE):
        self.lock_file = lock_file
        self._handle: Optional[IO[str]] = None

    @property
    def held(self) -> bool:
        return self._handle is not None

    def acquire(self, source: str, metadata: Optional[Dict[str, Any]] = None) -> bool:
        """Take the lock and record who holds it.

        Returns:
            False when another open handle (usually another process) holds it.
        """
        if self.held:
            return True

        handle = open(self.lock_file, "a+")
        try:
            fcntl.flock(handle, fcntl.LOCK_EX | fcntl.LOCK_NB)
        except OSError as e:
            handle.close()
            if not isinstance(e, BlockingIOError):
                logger.error(f"Could not lock {self.lock_file}: {e}")
            return False

        owner = dict(metadata or {})
        owner.update(
            source=source,
            pid=os.getpid(),
            acquired_at=datetime.now(timezone.utc).isoformat()
        )
        handle.seek(0)
        handle.truncate()
        json.dump(owner, handle)
        handle.flush()

        self._handle = handle
        logger.debug(f"Score job lock {self.lock_file} taken by {source}")
        return True

    def release(self) -> None:
        if not self.held:
            return
        handle, self._handle = self._handle, None
        try:
            handle.seek(0)
            handle.truncate()
            fcntl.flock(handle, fcntl.LOCK_UN)
        except OSError as e:
            logger.error(f"Error releasing score job lock {self.lock_file}: {e}")
        finally:
            handle.close()

    def get_lock_info(self) -> Optional[Dict[str, Any]]:
        """Owner record of the current holder, None when free or unreadable."""
        try:
            with open(self.lock_file) as f:
                content = f.read().strip()
        except FileNotFoundError:
            return None
        if not content:
            return None
        try:
            return json.loads(content)
        except ValueError:
            logger.warning(f"Unreadable owner record in {self.lock_file}")
            return None
