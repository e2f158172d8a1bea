# tests/core_tests/test_query_engine_scenarios.py

import pytest

from conftest import make_log, make_task
from core.engine import InvariantViolation, QueryEngine
from model.criteria import Criteria, GroupBy, Mode, SearchCriteria, SortOrder
from model.record import Level
from store.memory import MemoryRecordStore, StoreError


def ids(records):
    return [r.rid for r in records]


class TestQueryEngineScenarios:
    """Live query construction, refresh, counts and failure handling."""

    def setup_method(self):
        self.store = MemoryRecordStore(
            [
                make_log("m1", created_at=1, level=Level.INFO, label="app"),
                make_log("m2", created_at=2, level=Level.ERROR, label="db"),
                make_log("m3", created_at=3, level=Level.DEBUG, label="network", task_id="t1"),
                make_task("t1", created_at=4, duration=0.5),
                make_task("t2", created_at=5, duration=2.5),
            ]
        )
        self.engine = QueryEngine(self.store)

    def controller(self, mode=Mode.ALL, grouping=GroupBy.NONE, sort_key="created_at", order=SortOrder.DESCENDING, on_change=None):
        return self.engine.refresh_controller(mode, grouping, sort_key, order, on_change)

    def test_01_refresh_without_controller_is_an_invariant_violation(self):
        with pytest.raises(InvariantViolation):
            self.engine.refresh(Mode.ALL, Criteria())
        assert issubclass(InvariantViolation, AssertionError)

    def test_02_refresh_returns_ordered_results_and_counts(self):
        self.controller()
        result = self.engine.refresh(Mode.ALL, Criteria())
        assert ids(result.result_set) == ["t2", "t1", "m3", "m2", "m1"]
        assert result.result_set.sections is None
        assert result.log_count == 2
        assert result.task_count == 2

    def test_03_counts_are_independent_of_mode(self):
        criteria = Criteria(search=SearchCriteria(query="created_at >= 2"))
        counts = set()
        for mode in Mode:
            self.controller(mode)
            result = self.engine.refresh(mode, criteria)
            counts.add((result.log_count, result.task_count))
        assert counts == {(1, 2)}

    def test_04_sort_descriptors_put_group_key_first(self):
        self.controller(Mode.LOGS, GroupBy.LEVEL, "created_at", SortOrder.ASCENDING)
        result = self.engine.refresh(Mode.LOGS, Criteria())
        assert ids(result.result_set) == ["m2", "m1"]
        assert [s.name for s in result.result_set.sections] == ["error", "info"]

    def test_05_task_sort_key(self):
        self.controller(Mode.TASKS, sort_key="duration", order=SortOrder.ASCENDING)
        result = self.engine.refresh(Mode.TASKS, Criteria())
        assert ids(result.result_set) == ["t1", "t2"]

    def test_06_generations_increase(self):
        first = self.controller()
        second = self.controller()
        assert second == first + 1
        assert self.engine.is_current(second)
        assert not self.engine.is_current(first)

        a = self.engine.refresh(Mode.ALL, Criteria())
        b = self.engine.refresh(Mode.ALL, Criteria())
        assert b.generation == a.generation + 1
        assert a.result_set.records == b.result_set.records

    def test_07_change_notifications_carry_controller_generation(self):
        received = []
        generation = self.controller(on_change=lambda changes, gen: received.append((changes.inserted, gen)))
        self.engine.refresh(Mode.ALL, Criteria())
        self.store.append(make_log("m9", created_at=9))
        assert received == [(("m9",), generation)]
        assert ids(self.engine.current())[0] == "m9"

    def test_08_rebuilding_cancels_previous_subscription(self):
        received = []
        self.controller(on_change=lambda changes, gen: received.append(gen))
        self.engine.refresh(Mode.ALL, Criteria())
        self.controller()
        self.engine.refresh(Mode.ALL, Criteria())
        self.store.append(make_log("m9", created_at=9))
        assert received == []

    def test_09_fetch_failure_keeps_previous_result(self):
        self.controller()
        before = self.engine.refresh(Mode.ALL, Criteria())
        self.store.close()
        after = self.engine.refresh(Mode.ALL, Criteria(only_errors=True))
        assert after is None
        assert self.engine.last_result is before

    def test_10_malformed_query_keeps_previous_result(self):
        self.controller()
        before = self.engine.refresh(Mode.ALL, Criteria())
        after = self.engine.refresh(Mode.ALL, Criteria(search=SearchCriteria(query="level >=")))
        assert after is None
        assert self.engine.last_result is before
        assert self.engine.current().records == before.result_set.records

    def test_11_closed_store_refuses_new_controller(self):
        self.store.close()
        with pytest.raises(StoreError):
            self.controller()

    def test_12_build_predicate_is_exposed(self):
        assert QueryEngine.build_predicate(Mode.ALL, Criteria()) is None
        assert QueryEngine.build_predicate(Mode.LOGS, Criteria()) is not None
