# store/network_logger.py
# This file is part of Sightline - Live Console Views
#
# Network task recording and its registration guard

"""Recording of network tasks into a record store.

``NetworkLogger`` turns task lifecycle calls into records: a pending task
record when a request starts, then an updated task record and an attached
log message when it completes. It does not intercept any traffic; the
transport that performs requests is expected to call it.

``RegistrationContext`` is the guard that makes automatic registration
idempotent. It is an ordinary object passed to whoever wires the logger
into a transport, so independent contexts (tests, separate consoles) do
not share registration state.
"""

from __future__ import annotations
import itertools
import time
from dataclasses import replace
from typing import Callable, Optional

from model.record import Level, Record, RecordKind, TaskState
from utils.logger import get_logger
from .memory import MemoryRecordStore, StoreError


class NetworkLogger:
    """Writes network task records into a store.

    Args:
        store: Destination store
        session: Session id stamped on every record
        clock: Time source returning epoch seconds
    """

    def __init__(
        self,
        store: MemoryRecordStore,
        session: str = "",
        clock: Callable[[], float] = time.time,
    ):
        self.store = store
        self.session = session
        self._clock = clock
        self._ids = itertools.count(1)
        self.logger = get_logger()

    def task_started(self, url: str, method: str = "GET", request_size: int = 0) -> str:
        """Record a pending task and return its id."""
        rid = self._next_id("task")
        host = url.split("://", 1)[-1].split("/", 1)[0] or None
        self.store.append(
            Record(
                rid=rid,
                kind=RecordKind.TASK,
                created_at=self._clock(),
                session=self.session,
                url=url,
                host=host,
                method=method.upper(),
                request_size=request_size,
                state=TaskState.PENDING,
            )
        )
        return rid

    def task_completed(
        self,
        task_id: str,
        status_code: Optional[int] = None,
        error_code: int = 0,
        duration: Optional[float] = None,
        response_size: int = 0,
    ) -> Record:
        """Complete a pending task and attach a summary message to it.

        A task fails when it has an error code or a status code of 400 or
        above.

        Raises:
            StoreError: No task has the given id
        """
        task = self.store.get(task_id)
        if task is None or not task.is_task:
            raise StoreError(f"Unknown network task: {task_id}")

        failed = error_code != 0 or (status_code is not None and status_code >= 400)
        completed = replace(
            task,
            status_code=status_code,
            error_code=error_code,
            duration=duration,
            response_size=response_size,
            state=TaskState.FAILURE if failed else TaskState.SUCCESS,
        )
        self.store.update(completed)

        status = status_code if status_code is not None else f"error {error_code}"
        self.store.append(
            Record(
                rid=self._next_id("log"),
                kind=RecordKind.LOG,
                created_at=self._clock(),
                session=self.session,
                level=Level.ERROR if failed else Level.DEBUG,
                label="network",
                message=f"{completed.method} {completed.url} {status}",
                task_id=task_id,
            )
        )
        return completed

    def _next_id(self, prefix: str) -> str:
        while True:
            rid = f"{self.session or 'net'}-{prefix}-{next(self._ids)}"
            if rid not in self.store:
                return rid


class RegistrationContext:
    """Holds the logger registered for automatic task recording."""

    def __init__(self):
        self._registered: Optional[NetworkLogger] = None
        self.logger = get_logger()

    @property
    def registered(self) -> Optional[NetworkLogger]:
        return self._registered

    @property
    def is_enabled(self) -> bool:
        return self._registered is not None

    def enable_automatic_registration(self, logger: NetworkLogger) -> bool:
        """Register `logger`. Returns False if one is already registered."""
        if self._registered is not None:
            self.logger.error(
                "Automatic network registration is already enabled; ignoring"
            )
            return False
        self._registered = logger
        self.logger.debug("Automatic network registration enabled")
        return True

    def disable(self) -> None:
        self._registered = None
