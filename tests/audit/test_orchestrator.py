"""Tests for the audit and fix passes."""

import pytest

from conftest import TOKEN_VALUE
from vaulty.audit.orchestrator import run_audit, run_fixes
from vaulty.issues import IssueScope, ResetStore


@pytest.fixture
def env_template(project):
    (project / ".env.vaulty").write_text("{{ secrets.db | keyValue }}")
    return project / ".env.vaulty"


@pytest.mark.asyncio
async def test_clean_project_has_no_issues(project, make_ctx):
    ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

    collector = await run_audit(ctx)

    assert collector.counts().total == 0


@pytest.mark.asyncio
async def test_every_service_reports(project, env_template, make_ctx, home):
    setup = make_ctx(project)
    await setup.store.add_tokens({"main": TOKEN_VALUE, "old": "hvs.old-value"})
    (home / ".vaulty-store").chmod(0o644)
    ctx = make_ctx(project)

    collector = await run_audit(ctx)

    found = {(issue.scope, issue.message) for issue in collector.get().issues}
    assert found == {
        (IssueScope.STORE, "Permissions are not valid (644 instead of 600)"),
        (IssueScope.TOKEN, "Token is not used"),
        (IssueScope.TEMPLATE, "Output does not exist"),
    }
    assert collector.counts().fixes == 3


@pytest.mark.asyncio
async def test_fatal_issue_does_not_hide_others(project, env_template, make_ctx, vault):
    vault.add_token(TOKEN_VALUE, expire_time="2000-01-01T00:00:00Z")
    ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

    collector = await run_audit(ctx)

    messages = {issue.message for issue in collector.get().issues}
    assert messages == {"Token has expired", "Output does not exist"}
    assert vault.secret_requests == []


@pytest.mark.asyncio
async def test_unexpected_error_is_recorded_as_unknown(project, make_ctx, monkeypatch):
    ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

    async def boom(*args, **kwargs):
        raise RuntimeError("boom")

    monkeypatch.setattr(ctx.templates, "get_templates", boom)

    collector = await run_audit(ctx)

    [issue] = collector.get(scope=IssueScope.UNKNOWN).issues
    assert issue.message == "boom"


@pytest.mark.asyncio
async def test_fixes_leave_a_clean_audit(project, env_template, make_ctx, home):
    setup = make_ctx(project)
    await setup.store.add_tokens({"main": TOKEN_VALUE, "old": "hvs.old-value"})
    (home / ".vaulty-store").chmod(0o644)

    report = await run_fixes(make_ctx(project))

    assert len(report.applied) == 3
    assert report.failed == []
    assert (project / ".env").read_text() == "A=1\nB=2"

    after = await run_audit(make_ctx(project))
    assert after.counts().total == 0


@pytest.mark.asyncio
async def test_dry_run_applies_nothing(project, env_template, make_ctx):
    report = await run_fixes(make_ctx(project, tokens={"main": TOKEN_VALUE}), dry_run=True)

    assert report.dry_run is True
    assert len(report.applied) == 1
    assert not (project / ".env").exists()


@pytest.mark.asyncio
async def test_destructive_fix_needs_confirmation(project, make_ctx, home):
    store = home / ".vaulty-store"
    store.write_text("projects: [broken\n")
    store.chmod(0o600)
    asked = []

    def refuse(issues):
        asked.extend(issue.fix for issue in issues)
        return False

    report = await run_fixes(make_ctx(project, tokens={"main": TOKEN_VALUE}), confirm_destructive=refuse)

    assert asked == [ResetStore()]
    assert [issue.fix for issue in report.skipped] == [ResetStore()]
    assert store.read_text() == "projects: [broken\n"
