"""
Pytest configuration and fixtures.

This file provides pytest-specific configuration and fixtures.
For standard test utilities, see tests/__init__.py
"""

import contextlib

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database.models import Base
from database.repository import SchoolRepository


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "db: marks tests as requiring database (deselect with '-m \"not db\"')"
    )


@pytest.fixture
def sqlite_engine(tmp_path):
    """
    File-backed SQLite engine with the full schema.

    A file (not :memory:) so that every thread of the score job gets its
    own connection to the same database.
    """
    engine = create_engine(f"sqlite:///{tmp_path / 'courserank_test.db'}")
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(sqlite_engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=sqlite_engine)


@pytest.fixture
def uow_factory(session_factory):
    """Same contract as database.uow.school_uow, bound to the SQLite engine."""

    @contextlib.contextmanager
    def _uow():
        session = session_factory()
        try:
            yield SchoolRepository(session)
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    return _uow
