# tests/store_tests/test_network_logger_scenarios.py

import itertools

import pytest

from model.record import Level, TaskState
from store import MemoryRecordStore, NetworkLogger, RegistrationContext, StoreError


def ticking_clock(start=100.0):
    counter = itertools.count()
    return lambda: start + next(counter)


class TestNetworkLogger:
    """Task lifecycle records written by the network logger."""

    def setup_method(self):
        self.store = MemoryRecordStore()
        self.logger = NetworkLogger(self.store, session="s1", clock=ticking_clock())

    def test_01_started_task_is_pending(self):
        rid = self.logger.task_started("https://api.example.com/v1/items", method="post", request_size=12)
        task = self.store.get(rid)
        assert task.is_task
        assert task.state is TaskState.PENDING
        assert task.host == "api.example.com"
        assert task.method == "POST"
        assert task.request_size == 12
        assert task.session == "s1"

    def test_02_successful_completion(self):
        rid = self.logger.task_started("https://api.example.com/v1/items")
        completed = self.logger.task_completed(rid, status_code=200, duration=0.3, response_size=512)
        assert completed.state is TaskState.SUCCESS
        assert self.store.get(rid) == completed

        messages = [r for r in self.store.records() if r.is_log]
        assert len(messages) == 1
        assert messages[0].task_id == rid
        assert messages[0].level is Level.DEBUG
        assert messages[0].label == "network"

    @pytest.mark.parametrize("status_code, error_code", [(500, 0), (404, 0), (None, -1001)])
    def test_03_failures(self, status_code, error_code):
        rid = self.logger.task_started("https://api.example.com/v1/items")
        completed = self.logger.task_completed(rid, status_code=status_code, error_code=error_code)
        assert completed.state is TaskState.FAILURE
        assert completed.is_error
        message = next(r for r in self.store.records() if r.is_log)
        assert message.level is Level.ERROR

    def test_04_unknown_task(self):
        with pytest.raises(StoreError):
            self.logger.task_completed("nope", status_code=200)

    def test_05_ids_do_not_collide(self):
        first = self.logger.task_started("https://a.example.com/")
        second = NetworkLogger(self.store, session="s1").task_started("https://b.example.com/")
        assert first != second
        assert len(self.store) == 2


class TestRegistrationContext:
    """Idempotent registration guard."""

    def test_01_first_registration_succeeds(self):
        context = RegistrationContext()
        logger = NetworkLogger(MemoryRecordStore())
        assert not context.is_enabled
        assert context.enable_automatic_registration(logger)
        assert context.registered is logger

    def test_02_second_registration_is_rejected(self):
        context = RegistrationContext()
        first = NetworkLogger(MemoryRecordStore())
        assert context.enable_automatic_registration(first)
        assert not context.enable_automatic_registration(NetworkLogger(MemoryRecordStore()))
        assert not context.enable_automatic_registration(first)
        assert context.registered is first

    def test_03_disable_allows_registering_again(self):
        context = RegistrationContext()
        context.enable_automatic_registration(NetworkLogger(MemoryRecordStore()))
        context.disable()
        assert not context.is_enabled
        replacement = NetworkLogger(MemoryRecordStore())
        assert context.enable_automatic_registration(replacement)
        assert context.registered is replacement

    def test_04_contexts_are_independent(self):
        one, two = RegistrationContext(), RegistrationContext()
        assert one.enable_automatic_registration(NetworkLogger(MemoryRecordStore()))
        assert two.enable_automatic_registration(NetworkLogger(MemoryRecordStore()))
