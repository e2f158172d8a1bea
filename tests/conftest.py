# tests/conftest.py
# This file is part of Sightline - Live Console Views
#
# Test configuration and shared fixtures for pytest

"""Test configuration and shared fixtures for Sightline tests.

This module provides pytest configuration, fixtures, and record factories
for testing the console view engine. It ensures proper module path setup
and provides common test infrastructure for all test modules.

The configuration handles:
- Python path setup for module imports
- Record factories for log messages and network tasks
- Stores, schedulers and view models wired for deterministic stepping
"""

import sys
from pathlib import Path

import pytest

# Ensure project modules can be imported
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from model.record import Level, Record, RecordKind, TaskState  # noqa: E402


def make_log(rid, created_at=0.0, level=Level.INFO, label="app", message="", task_id=None, session="s1"):
    """Factory for log message records."""
    return Record(
        rid=rid,
        kind=RecordKind.LOG,
        created_at=created_at,
        session=session,
        level=level,
        label=label,
        message=message,
        task_id=task_id,
    )


def make_task(
    rid,
    created_at=0.0,
    url="https://api.example.com/v1/items",
    host="api.example.com",
    method="GET",
    status_code=200,
    duration=0.1,
    state=TaskState.SUCCESS,
    session="s1",
    **fields,
):
    """Factory for network task records."""
    return Record(
        rid=rid,
        kind=RecordKind.TASK,
        created_at=created_at,
        session=session,
        url=url,
        host=host,
        method=method,
        status_code=status_code,
        duration=duration,
        state=state,
        **fields,
    )


def make_logs(count, start=0, prefix="m", **fields):
    """`count` log records with increasing creation times."""
    return [make_log(f"{prefix}{i}", created_at=float(i), **fields) for i in range(start, start + count)]


@pytest.fixture(scope="session", autouse=True)
def setup_test_environment():
    """Initialize test environment and verify module availability.

    Automatically runs before any tests to ensure the testing environment
    is properly configured. Skips the entire test session if critical
    modules cannot be imported.

    Yields:
        None: Control to test execution
    """
    try:
        import core  # noqa: F401
        import predicate  # noqa: F401
        import store  # noqa: F401
        import utils  # noqa: F401
    except ImportError as e:
        pytest.skip(f"Cannot import required modules: {e}")

    yield


@pytest.fixture
def scheduler():
    """Virtual-clock scheduler starting at t=0."""
    from core.scheduler import ManualScheduler

    return ManualScheduler()


@pytest.fixture
def mixed_records():
    """600 log messages and 400 network tasks, none attached to a task.

    Every tenth message is an error and every fifth task failed.
    """
    records = []
    for i in range(600):
        level = Level.ERROR if i % 10 == 0 else Level.INFO
        records.append(make_log(f"m{i}", created_at=float(i), level=level, message=f"message {i}"))
    for i in range(400):
        state = TaskState.FAILURE if i % 5 == 0 else TaskState.SUCCESS
        records.append(
            make_task(
                f"t{i}",
                created_at=600.0 + i,
                url=f"https://api.example.com/v1/items/{i}",
                state=state,
                status_code=500 if state is TaskState.FAILURE else 200,
            )
        )
    return records


@pytest.fixture
def mixed_store(mixed_records):
    from store.memory import MemoryRecordStore

    return MemoryRecordStore(mixed_records)
