"""End-to-end tests of the command line through typer's runner."""

import json

import pytest
import yaml
from typer.testing import CliRunner

from conftest import TOKEN_VALUE
from vaulty.cli.commands.helpers import runner as command_runner
from vaulty.cli.main import app
from vaulty.context import RunContext


@pytest.fixture
def cli(monkeypatch, vault):
    """Run the CLI against the fake vault."""

    def run_context(options):
        return RunContext(options, vault=vault.client())

    monkeypatch.setattr(command_runner, "RunContext", run_context)
    cli_runner = CliRunner()

    def invoke(*args, input=None):
        return cli_runner.invoke(app, list(args), input=input)

    return invoke


@pytest.fixture
def env_template(project):
    (project / ".env.vaulty").write_text("{{ secrets.db | keyValue }}")
    return project / ".env.vaulty"


def flat(text):
    return text.replace("\n", "")


def test_version(cli):
    result = cli("version")

    assert result.exit_code == 0
    assert "Vaulty" in result.output


def test_audit_report_lists_issues(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "audit", "report")

    assert result.exit_code == 0
    assert "Output does not exist" in result.output
    assert "vaulty audit fix" in result.output


def test_audit_report_as_json(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "audit", "report", "--json")

    assert result.exit_code == 0
    report = json.loads(result.output)
    [issue] = [issue for issue in report["issues"] if issue["message"] == "Output does not exist"]
    assert issue["source"] == ".env.vaulty"
    assert issue["fix"] == "render .env.vaulty"
    assert report["counts"]["total"] == len(report["issues"])
    assert report["counts"]["fixes"] >= 1


def test_audit_fix(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "audit", "fix")

    assert result.exit_code == 0
    assert "Applied: render .env.vaulty" in result.output
    assert (project / ".env").read_text() == "A=1\nB=2"


def test_templates_write_and_delete(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "templates", "write")

    assert result.exit_code == 0
    assert "1 output written" in result.output
    assert (project / ".env").read_text() == "A=1\nB=2"

    result = cli("--cwd", str(project), "templates", "delete", "**/*")

    assert result.exit_code == 0
    assert "1 output deleted" in result.output
    assert not (project / ".env").exists()


def test_templates_write_fails_with_bad_token(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", "main:hvs.revoked-value", "templates", "write")

    assert result.exit_code == 1
    assert "permission denied" in result.output
    assert not (project / ".env").exists()


def test_render_prints_without_writing(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "render")

    assert result.exit_code == 0
    assert "A=1" in result.output
    assert not (project / ".env").exists()


def test_tokens_save_and_delete(cli, project, home):
    result = cli("--cwd", str(project), "tokens", "save", "main:hvs.saved:value")

    assert result.exit_code == 0
    assert "1 token saved" in result.output
    stored = yaml.safe_load((home / ".vaulty-store").read_text())
    assert stored["projects"][str(project)]["tokens"] == {"main": "hvs.saved:value"}

    result = cli("--cwd", str(project), "--force", "tokens", "delete")

    assert result.exit_code == 0
    assert "1 token deleted" in result.output


def test_tokens_save_rejects_malformed_pair(cli, project):
    result = cli("--cwd", str(project), "tokens", "save", "novalue")

    assert result.exit_code != 0


def test_tokens_delete_can_be_declined(cli, project):
    cli("--cwd", str(project), "tokens", "save", "main:hvs.saved-value")

    result = cli("--cwd", str(project), "tokens", "delete", input="n\n")

    assert result.exit_code == 1
    assert "main" in result.output


def test_config_source(cli, project):
    result = cli("--cwd", str(project), "config", "source")

    assert result.exit_code == 0
    assert flat(result.output) == str(project / "vaulty.yaml")


def test_no_project_exits_with_error(cli, tmp_path):
    empty = tmp_path / "empty"
    empty.mkdir()

    result = cli("--cwd", str(empty), "config", "show")

    assert result.exit_code == 1
    assert "No project found" in flat(result.output)


def test_invalid_log_level(cli, project):
    result = cli("--cwd", str(project), "--log-level", "loud", "config", "source")

    assert result.exit_code != 0


def test_store_and_projects_commands(cli, project, home):
    cli("--cwd", str(project), "tokens", "save", "main:hvs.saved-value")

    result = cli("--cwd", str(project), "store", "source")
    assert flat(result.output) == str(home / ".vaulty-store")

    result = cli("--cwd", str(project), "projects", "list")
    assert flat(result.output) == str(project)

    result = cli("--cwd", str(project), "--force", "projects", "delete")
    assert result.exit_code == 0
    assert "Project deleted" in result.output

    result = cli("--cwd", str(project), "--force", "store", "reset")
    assert result.exit_code == 0
    assert yaml.safe_load((home / ".vaulty-store").read_text()) == {"projects": {}}


def test_secrets_show(cli, project):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "secrets", "show")

    assert result.exit_code == 0
    assert '"A": "1"' in result.output


def test_dry_run_fix_lists_fixes(cli, project, env_template):
    result = cli("--cwd", str(project), "--token", f"main:{TOKEN_VALUE}", "--dry-run", "audit", "fix")

    assert result.exit_code == 0
    assert "Would apply: render .env.vaulty" in result.output
    assert not (project / ".env").exists()
