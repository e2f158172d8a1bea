# core/__init__.py
# This file is part of Sightline - Live Console Views
#
# Core module public API for the incremental console view engine

"""Core components for incremental filtered views over a record log.

This module provides the live query machinery behind a console list:
criteria that change as the user types, a query engine that keeps a live
result set in step with an append-only record store, and a view model
that exposes a bounded window of that result set to a rendering layer.
All state transitions of a view model are serialized onto one scheduler.

Primary Components:
    CriteriaModel: Current criteria with throttled change events
    QueryEngine: Predicate building, live query and badge counts
    ConsoleListViewModel: Orchestrates criteria, query and visible window
    ManualScheduler: Virtual-clock scheduler for tests and batch runs
    AsyncioScheduler: Scheduler running on an asyncio event loop
    Throttle: Trailing-edge coalescing of rapid changes

Example:
    >>> from core import ConsoleListViewModel, ManualScheduler
    >>> from store import MemoryRecordStore
    >>> scheduler = ManualScheduler()
    >>> view_model = ConsoleListViewModel(MemoryRecordStore(records), scheduler)
    >>> view_model.criteria_model.set_filter_term("timeout")
    >>> scheduler.advance(0.25)
    >>> view_model.visible_entities
"""

from .scheduler import ManualScheduler, AsyncioScheduler, TimerHandle, Scheduler
from .throttle import Throttle
from .criteria_model import CriteriaModel
from .engine import QueryEngine, ResultSet, RefreshResult, InvariantViolation
from .viewmodel import ConsoleListViewModel, ListUpdate

__all__ = [
    "ManualScheduler",
    "AsyncioScheduler",
    "TimerHandle",
    "Scheduler",
    "Throttle",
    "CriteriaModel",
    "QueryEngine",
    "ResultSet",
    "RefreshResult",
    "InvariantViolation",
    "ConsoleListViewModel",
    "ListUpdate",
]

__version__ = "1.0.0"
__description__ = "Core components for incremental console views"
