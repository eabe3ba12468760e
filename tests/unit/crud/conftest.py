"""Shared fixtures for crud unit tests"""

import pytest
from sqlalchemy import create_engine
from sqlmodel import SQLModel, Session

from guidecheck.core.models import FileResult, RunReport
from guidecheck.crud import models  # noqa: F401


@pytest.fixture(name="engine")
def engine_fixture():
    """In-memory SQLite engine with all tables created."""
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False})
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    """Fresh session per test; changes are not committed."""
    with Session(engine) as s:
        yield s


@pytest.fixture(name="report")
def report_fixture():
    """Three files, the second one failing."""
    return RunReport(results=[
        FileResult(path="_legacy/a.md", version="legacy", code=0, duration=1.5),
        FileResult(path="_legacy/b.md", version="legacy", code=101, duration=2.0),
        FileResult(path="_stable/a.md", version="stable", code=0, duration=0.5),
    ])
