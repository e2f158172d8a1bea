# tests/core_tests/test_criteria_model_scenarios.py

from core.criteria_model import CriteriaModel
from core.scheduler import ManualScheduler
from model.criteria import Criteria, SearchCriteria
from utils.config import ConsoleConfig


def labels(*names):
    return SearchCriteria(labels=frozenset(names))


class TestCriteriaModelScenarios:
    """
    Throttled delivery of criteria changes.
    Structured criteria are coalesced per 0.5 s, the filter term per
    0.25 s, and every only-errors edit is delivered on the next tick.
    """

    def setup_method(self):
        self.scheduler = ManualScheduler()
        self.model = CriteriaModel(self.scheduler)
        self.delivered = []
        self.subscription = self.model.subscribe(self.delivered.append)

    def test_01_snapshot_updates_immediately(self):
        self.model.update(labels("app"))
        self.model.set_filter_term("abc")
        self.model.set_only_errors(True)
        assert self.model.criteria == Criteria(labels("app"), True, "abc")
        assert self.delivered == []
        assert self.model.has_pending_changes

    def test_02_structured_edits_coalesce_to_latest(self):
        for name in ("a", "b", "c", "d"):
            self.model.update(labels(name))
            self.scheduler.advance(0.1)
        assert self.delivered == []
        self.scheduler.advance(0.2)
        assert len(self.delivered) == 1
        assert self.delivered[0].search == labels("d")

    def test_03_filter_term_uses_shorter_interval(self):
        for text in ("t", "ti", "tim"):
            self.model.set_filter_term(text)
        self.scheduler.advance(0.125)
        assert self.delivered == []
        self.scheduler.advance(0.125)
        assert [c.filter_term for c in self.delivered] == ["tim"]

    def test_04_only_errors_delivered_per_edit_on_next_tick(self):
        self.model.set_only_errors(True)
        self.model.set_only_errors(False)
        assert self.delivered == []
        self.scheduler.run_pending()
        assert len(self.delivered) == 2
        assert all(c.only_errors is False for c in self.delivered)

    def test_05_separate_bursts_deliver_separately(self):
        self.model.update(labels("a"))
        self.scheduler.advance(0.5)
        self.model.update(labels("b"))
        self.scheduler.advance(0.5)
        assert [c.search for c in self.delivered] == [labels("a"), labels("b")]

    def test_06_intervals_come_from_config(self):
        model = CriteriaModel(self.scheduler, config=ConsoleConfig(criteria_throttle=2.0))
        delivered = []
        model.subscribe(delivered.append)
        model.update(labels("a"))
        self.scheduler.advance(1.5)
        assert delivered == []
        self.scheduler.advance(0.5)
        assert len(delivered) == 1

    def test_07_close_drops_pending_changes(self):
        self.model.update(labels("a"))
        self.model.set_only_errors(True)
        self.model.set_filter_term("x")
        self.model.close()
        assert not self.model.has_pending_changes
        self.scheduler.advance(1.0)
        assert self.delivered == []

    def test_08_cancelled_subscription(self):
        self.subscription.cancel()
        self.model.update(labels("a"))
        self.scheduler.advance(1.0)
        assert self.delivered == []
