"""Tests for the issues collector."""

import pytest

from vaulty.issues import (
    DeleteToken,
    IssueScope,
    IssueSeverity,
    IssuesCollector,
    IssuesCollectorError,
    RenderTemplate,
)


class TestAdd:
    """Idempotent, chainable registration."""

    def test_same_issue_twice_is_counted_once(self):
        collector = IssuesCollector()
        collector.add(message="Token not found", scope=IssueScope.TOKEN, source="main")
        collector.add(message="Token not found", scope=IssueScope.TOKEN, source="main")

        assert collector.counts().total == 1

    def test_fix_does_not_change_identity(self):
        collector = IssuesCollector()
        collector.add(message="Token is not used", severity="warn", source="main", fix=DeleteToken(name="main"))
        collector.add(message="Token is not used", severity="warn", source="main")

        issues = collector.get().issues
        assert len(issues) == 1
        assert issues[0].fix == DeleteToken(name="main")

    def test_different_source_is_a_different_issue(self):
        collector = IssuesCollector()
        collector.add(message="Secret not found", source="db").add(message="Secret not found", source="api")

        assert collector.counts().total == 2

    def test_add_returns_collector_for_chaining(self):
        collector = IssuesCollector()
        assert collector.add(message="x") is collector

    def test_default_issue_is_unknown_error(self):
        collector = IssuesCollector()
        collector.add()

        issue = collector.get().issues[0]
        assert issue.scope is IssueScope.UNKNOWN
        assert issue.severity is IssueSeverity.ERROR


class TestScoped:
    def test_scoped_view_shares_registry(self):
        collector = IssuesCollector()
        view = collector.scoped(scope=IssueScope.TEMPLATE, source=".env.vaulty")
        view.add(message="Output does not exist", severity="warn", fix=RenderTemplate(template=".env.vaulty"))

        issue = collector.get().issues[0]
        assert issue.scope is IssueScope.TEMPLATE
        assert issue.source == ".env.vaulty"

    def test_explicit_fields_override_view_defaults(self):
        view = IssuesCollector().scoped(scope=IssueScope.SECRET, source="db")
        view.add(message="Vault returned errors\n- denied", source="https://vault/v1/data/db")

        assert view.get().issues[0].source == "https://vault/v1/data/db"


class TestAddError:
    def test_unknown_error_becomes_error_issue(self):
        collector = IssuesCollector()
        collector.add_error(RuntimeError("boom"))

        issues = collector.get().issues
        assert [(i.message, i.severity) for i in issues] == [("boom", IssueSeverity.ERROR)]

    def test_collector_error_is_not_counted_twice(self):
        collector = IssuesCollector()
        error = collector.add(message="Token has expired", source="main").error()
        collector.add_error(error)

        assert collector.counts().total == 1

    def test_repeated_unknown_error_is_deduplicated(self):
        collector = IssuesCollector()
        collector.add_error(ValueError("same")).add_error(ValueError("same"))

        assert collector.counts().total == 1


class TestGet:
    @pytest.fixture
    def collector(self):
        collector = IssuesCollector()
        collector.add(message="Output is out of date", severity="warn", scope="template", fix=RenderTemplate("a"))
        collector.add(message="Token has expired", scope="token")
        collector.add(message="Invalid store file", severity="warn", scope="store")
        return collector

    def test_counts(self, collector):
        counts = collector.counts()

        assert (counts.total, counts.errors, counts.warnings, counts.fixes) == (3, 1, 2, 1)

    def test_filter_by_severity(self, collector):
        assert [i.message for i in collector.get(severity="error").issues] == ["Token has expired"]

    def test_filter_by_several_scopes(self, collector):
        messages = {i.message for i in collector.get(scope=["store", IssueScope.TEMPLATE]).issues}

        assert messages == {"Output is out of date", "Invalid store file"}

    def test_sorted_puts_errors_first(self, collector):
        ordered = collector.get().sorted()

        assert ordered[0].severity is IssueSeverity.ERROR
        assert [i.scope for i in ordered[1:]] == [IssueScope.STORE, IssueScope.TEMPLATE]

    def test_to_dict_is_sorted_and_counted(self, collector):
        data = collector.get().to_dict()

        assert data["counts"] == {"total": 3, "errors": 1, "warnings": 2, "fixes": 1}
        assert [i["message"] for i in data["issues"]] == [
            "Token has expired",
            "Invalid store file",
            "Output is out of date",
        ]
        assert data["issues"][2]["fix"] == "render a"
        assert data["issues"][0]["fix"] is None
        assert all(len(i["id"]) == 64 for i in data["issues"])

    def test_error_wraps_filtered_collection(self, collector):
        error = collector.error(severity="warn")

        assert isinstance(error, IssuesCollectorError)
        assert error.collection.counts.total == 2
