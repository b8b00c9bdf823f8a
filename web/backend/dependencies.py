#!/usr/bin/env python3
"""
FastAPI dependencies for dependency injection.
"""

import os
from functools import lru_cache

from core.app_context import AppContext
from core.config_loader import load_config


@lru_cache()
def get_app_context() -> AppContext:
    """
    Build the application context once per process.

    Tests override this dependency with a context wired to fakes.
    """
    config = load_config(os.environ.get("COURSERANK_CONFIG", "config.yaml"))
    os.environ.setdefault("DATABASE_URL", config.database.url)
    return AppContext.build(config)
