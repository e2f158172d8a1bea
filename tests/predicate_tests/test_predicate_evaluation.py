# tests/predicate_tests/test_predicate_evaluation.py

import pytest

from conftest import make_log, make_task
from model.criteria import Constraint, Criteria, Mode, Operator, SearchCriteria
from model.record import Level, TaskState
from predicate import build_predicate, holds, make_message_predicate, make_network_predicate, parse


def matches(text, record):
    return holds(parse(text), record)


class TestPredicateEvaluation:
    """Evaluation of comparisons and connectives against records."""

    def test_01_no_predicate_matches_everything(self):
        assert holds(None, make_log("m1"))
        assert holds(None, make_task("t1"))

    def test_02_level_ordering(self):
        record = make_log("m1", level=Level.ERROR)
        assert matches("level >= warning", record)
        assert matches("level > warning", record)
        assert not matches("level < error", record)
        assert matches("level == ERROR", record)

    def test_03_text_operators_ignore_case(self):
        record = make_log("m1", message="Request Timeout while syncing")
        assert matches("message ~ timeout", record)
        assert matches('message ^= "request"', record)
        assert matches('message !~ "disk"', record)
        assert not matches('message !~ "TIMEOUT"', record)
        assert matches("label == APP", make_log("m2", label="app"))

    def test_04_regex_search(self):
        task = make_task("t1", url="https://api.example.com/v1/users/42")
        assert matches("url =~ '/users/\\d+$'", task)
        assert not matches("url =~ '^/users'", task)

    def test_05_invalid_regex_is_matched_literally(self):
        record = make_log("m1", message="value is (unclosed")
        assert matches("message =~ '(unclosed'", record)

    def test_06_missing_fields(self):
        log = make_log("m1")
        assert not matches("status_code >= 400", log)
        assert not matches("url ~ api", log)
        assert matches("url != api", log)
        assert matches("url == null", log)
        assert not matches("url != null", log)

    def test_07_null_task_link(self):
        assert matches("task == null", make_log("m1"))
        assert not matches("task == null", make_log("m2", task_id="t1"))

    def test_08_unordered_values_never_satisfy_ranges(self):
        task = make_task("t1", state=TaskState.FAILURE)
        assert not matches("state > pending", task)
        assert matches("state != pending", task)

    def test_09_connectives(self):
        record = make_log("m1", level=Level.WARNING, label="db")
        assert matches("level >= warning & label == db", record)
        assert matches("label == ui | label == db", record)
        assert not matches("!(label == db)", record)
        assert matches("true", record)
        assert not matches("false", record)


class TestModePredicates:
    """Predicates built for each console mode from criteria."""

    def setup_method(self):
        self.plain = make_log("m1", level=Level.INFO, message="cache miss")
        self.failure = make_log("m2", level=Level.ERROR, message="disk full")
        self.attached = make_log("m3", level=Level.ERROR, label="network", message="GET /v1 500", task_id="t2")
        self.ok_task = make_task("t1", url="https://api.example.com/v1/items", host="api.example.com")
        self.failed_task = make_task(
            "t2", url="https://cdn.example.com/app.js", host="cdn.example.com", state=TaskState.FAILURE, status_code=500
        )
        self.records = [self.plain, self.failure, self.attached, self.ok_task, self.failed_task]

    def selected(self, mode, criteria):
        predicate = build_predicate(mode, criteria)
        return [r.rid for r in self.records if holds(predicate, r)]

    def test_01_empty_criteria(self):
        criteria = Criteria()
        assert build_predicate(Mode.ALL, criteria) is None
        assert make_message_predicate(criteria) is None
        assert make_network_predicate(criteria) is None
        assert self.selected(Mode.ALL, criteria) == ["m1", "m2", "m3", "t1", "t2"]
        assert self.selected(Mode.LOGS, criteria) == ["m1", "m2"]
        assert self.selected(Mode.TASKS, criteria) == ["t1", "t2"]

    def test_02_only_errors_per_kind(self):
        criteria = Criteria(only_errors=True)
        assert self.selected(Mode.ALL, criteria) == ["m2", "m3", "t2"]
        assert self.selected(Mode.LOGS, criteria) == ["m2"]
        assert self.selected(Mode.TASKS, criteria) == ["t2"]

    def test_03_filter_term_searches_messages_and_urls(self):
        criteria = Criteria(filter_term="CDN")
        assert self.selected(Mode.TASKS, criteria) == ["t2"]
        assert self.selected(Mode.LOGS, criteria) == []
        criteria = Criteria(filter_term="disk")
        assert self.selected(Mode.ALL, criteria) == ["m2"]

    def test_04_levels_labels_and_hosts(self):
        search = SearchCriteria(
            levels=frozenset({Level.ERROR}),
            labels=frozenset({"network"}),
            hosts=frozenset({"api.example.com"}),
        )
        criteria = Criteria(search=search)
        assert self.selected(Mode.ALL, criteria) == ["m3", "t1"]
        assert self.selected(Mode.LOGS, criteria) == []

    def test_05_constraints_apply_to_kinds_carrying_the_field(self):
        search = SearchCriteria(constraints=(Constraint("status_code", Operator.GE, 500),))
        criteria = Criteria(search=search)
        assert self.selected(Mode.TASKS, criteria) == ["t2"]
        # Messages have no status code, so the constraint leaves them alone
        assert self.selected(Mode.LOGS, criteria) == ["m1", "m2"]

    def test_06_time_range(self):
        records = [make_log(f"m{i}", created_at=float(i)) for i in range(10)]
        criteria = Criteria(search=SearchCriteria(start=3.0, end=5.0))
        predicate = build_predicate(Mode.LOGS, criteria)
        assert [r.rid for r in records if holds(predicate, r)] == ["m3", "m4", "m5"]

    def test_07_query_expression_applies_to_both_kinds(self):
        criteria = Criteria(search=SearchCriteria(query="session == s1 & created_at >= 0"))
        assert self.selected(Mode.ALL, criteria) == ["m1", "m2", "m3", "t1", "t2"]
        criteria = Criteria(search=SearchCriteria(query="level >= error"))
        assert self.selected(Mode.ALL, criteria) == ["m2", "m3"]

    @pytest.mark.parametrize(
        "criteria",
        [
            Criteria(),
            Criteria(only_errors=True),
            Criteria(filter_term="e"),
            Criteria(search=SearchCriteria(labels=frozenset({"app"}))),
            Criteria(search=SearchCriteria(query="message ~ disk | host ~ cdn")),
        ],
    )
    def test_08_logs_selection_is_contained_in_all(self, criteria):
        logs = set(self.selected(Mode.LOGS, criteria))
        everything = set(self.selected(Mode.ALL, criteria))
        assert logs <= everything
