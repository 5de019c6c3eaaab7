"""Shared test fixtures for Vaulty test suite."""

import shutil
import subprocess
from datetime import datetime, timedelta, timezone
from pathlib import Path

import httpx
import pytest
import yaml

from vaulty.context import CommandOptions, RunContext
from vaulty.vault.client import VaultClient

VAULT_ADDRESS = "https://vault.example.com"
TOKEN_VALUE = "hvs.main-token"


def future_expire_time() -> str:
    return (datetime.now(timezone.utc) + timedelta(days=1)).strftime("%Y-%m-%dT%H:%M:%S.123456789Z")


class FakeVault:
    """
    In-memory secrets manager served through ``httpx.MockTransport``.

    ``secrets`` maps ``namespace/path`` (or ``path``) to secret data,
    ``lookups`` maps token values to their lookup data.
    """

    def __init__(self):
        self.secrets: dict[str, dict | None] = {}
        self.destroyed: set[str] = set()
        self.lookups: dict[str, dict] = {}
        self.lease_ids: dict[str, str] = {}
        self.requests: list[httpx.Request] = []

    def add_token(self, value: str, lease_id: str = "", **lookup) -> None:
        self.lease_ids[value] = lease_id
        self.lookups[value] = {"expire_time": future_expire_time(), "renewable": False, "ttl": 86400, **lookup}

    @property
    def secret_requests(self) -> list[httpx.Request]:
        return [request for request in self.requests if "/data/" in request.url.path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        token = request.headers.get("X-Vault-Token")
        path = request.url.path

        if path == "/v1/auth/token/lookup-self":
            if token not in self.lookups:
                return httpx.Response(403, json={"errors": ["permission denied"]})
            return httpx.Response(200, json={"lease_id": self.lease_ids[token], "data": self.lookups[token]})

        if path == "/v1/auth/token/renew-self":
            if token not in self.lookups:
                return httpx.Response(403, json={"errors": ["permission denied"]})
            return httpx.Response(
                200,
                json={"lease_id": "", "renewable": True, "lease_duration": 3600, "auth": {"client_token": token}},
            )

        if token not in self.lookups:
            return httpx.Response(403, json={"errors": ["permission denied"]})

        key = path.removeprefix("/v1/").replace("/data/", "/", 1).removeprefix("data/")
        if key not in self.secrets:
            return httpx.Response(404, json={"errors": []})

        return httpx.Response(
            200,
            json={
                "data": {
                    "data": self.secrets[key],
                    "metadata": {
                        "created_time": "2024-01-01T00:00:00.000000Z",
                        "destroyed": key in self.destroyed,
                        "version": 1,
                    },
                }
            },
        )

    def client(self, timeout_seconds: float | None = None) -> VaultClient:
        return VaultClient(timeout_seconds=timeout_seconds, transport=httpx.MockTransport(self.handler))


def write_config(project: Path, config: dict) -> Path:
    path = project / "vaulty.yaml"
    path.write_text(yaml.safe_dump(config), encoding="utf-8")
    return path


@pytest.fixture(autouse=True)
def home(tmp_path, monkeypatch):
    """Isolate the store in a temporary home directory."""
    home_dir = tmp_path / "home"
    home_dir.mkdir()
    monkeypatch.setenv("HOME", str(home_dir))
    return home_dir


@pytest.fixture
def vault():
    fake = FakeVault()
    fake.add_token(TOKEN_VALUE)
    fake.secrets["app/db"] = {"A": "1", "B": "2"}
    return fake


@pytest.fixture
def project(tmp_path):
    """A project with one secret ``db`` read with the ``main`` token."""
    root = tmp_path / "project"
    root.mkdir()
    write_config(
        root,
        {
            "secrets": {
                "db": {"address": VAULT_ADDRESS, "path": "app/db", "token": "main"},
            }
        },
    )
    return root


@pytest.fixture
def make_ctx(vault):
    """Build a run context on a project with the fake vault."""

    def factory(cwd: Path, tokens: dict | None = None, **options) -> RunContext:
        command_options = CommandOptions(cwd=cwd, tokens=tokens if tokens is not None else {}, **options)
        return RunContext(command_options, vault=vault.client())

    return factory


@pytest.fixture
def git_repo():
    """Initialize a git repository in a directory, skipping without git."""
    if shutil.which("git") is None:
        pytest.skip("git is not installed")

    def init(path: Path) -> Path:
        subprocess.run(["git", "init", "-q", str(path)], check=True)
        return path

    return init
