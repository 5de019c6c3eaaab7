"""Tests for secret resolution."""

import pytest

from conftest import TOKEN_VALUE, VAULT_ADDRESS, write_config
from vaulty.issues import IssueScope, IssuesCollectorError
from vaulty.secrets.local_cache import read_local_secrets
from vaulty.secrets.secret_resolver import INVALID_NAME_MESSAGE


def secret_messages(ctx):
    return {(issue.source, issue.message) for issue in ctx.issues.get(scope=IssueScope.SECRET).issues}


class TestGetSecret:
    @pytest.mark.asyncio
    async def test_resolves_secret(self, project, make_ctx):
        ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

        secret = await ctx.secrets.get_secret("db")

        assert secret.data == {"A": "1", "B": "2"}
        assert secret.address == VAULT_ADDRESS
        assert secret.token.key == "main"
        assert secret.metadata.destroyed is False

    @pytest.mark.asyncio
    async def test_unknown_secret(self, project, make_ctx):
        ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

        with pytest.raises(IssuesCollectorError):
            await ctx.secrets.get_secret("nope")

        assert secret_messages(ctx) == {("nope", "Secret not found")}

    @pytest.mark.asyncio
    async def test_invalid_name_never_reaches_vault(self, tmp_path, make_ctx, vault):
        write_config(tmp_path, {"secrets": {"my-db": {"address": VAULT_ADDRESS, "path": "app/db", "token": "main"}}})
        ctx = make_ctx(tmp_path, tokens={"main": TOKEN_VALUE})

        with pytest.raises(IssuesCollectorError):
            await ctx.secrets.get_secret("my-db")

        assert secret_messages(ctx) == {("my-db", INVALID_NAME_MESSAGE)}
        assert vault.requests == []

    @pytest.mark.asyncio
    async def test_no_data(self, project, make_ctx, vault):
        vault.secrets["app/db"] = None
        ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

        with pytest.raises(IssuesCollectorError):
            await ctx.secrets.get_secret("db")

        assert secret_messages(ctx) == {("db", "Vault returned no data")}

    @pytest.mark.asyncio
    async def test_missing_path_has_no_data(self, project, make_ctx, vault):
        del vault.secrets["app/db"]
        ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

        with pytest.raises(IssuesCollectorError):
            await ctx.secrets.get_secret("db")

        assert secret_messages(ctx) == {("db", "Vault returned no data")}

    @pytest.mark.asyncio
    async def test_destroyed(self, project, make_ctx, vault):
        vault.destroyed.add("app/db")
        ctx = make_ctx(project, tokens={"main": TOKEN_VALUE})

        with pytest.raises(IssuesCollectorError):
            await ctx.secrets.get_secret("db")

        assert secret_messages(ctx) == {("db", "Secret has been destroyed")}


class TestGetSecrets:
    @pytest.mark.asyncio
    async def test_failure_does_not_block_siblings(self, tmp_path, make_ctx, vault):
        vault.secrets["app/api"] = {"KEY": "k"}
        write_config(
            tmp_path,
            {
                "secrets": {
                    "db": {"address": VAULT_ADDRESS, "path": "app/gone", "token": "main"},
                    "api": {"address": VAULT_ADDRESS, "path": "app/api", "token": "main"},
                }
            },
        )
        ctx = make_ctx(tmp_path, tokens={"main": TOKEN_VALUE})

        with pytest.raises(IssuesCollectorError):
            await ctx.secrets.get_secrets()

        assert secret_messages(ctx) == {("db", "Vault returned no data")}
        assert (await ctx.secrets.get_secret("api")).data == {"KEY": "k"}

    @pytest.mark.asyncio
    async def test_shared_token_is_looked_up_once(self, tmp_path, make_ctx, vault):
        vault.secrets["app/api"] = {"KEY": "k"}
        write_config(
            tmp_path,
            {
                "secrets": {
                    "db": {"address": VAULT_ADDRESS, "path": "app/db", "token": "main"},
                    "api": {"address": VAULT_ADDRESS, "path": "app/api", "token": "main"},
                }
            },
        )
        ctx = make_ctx(tmp_path, tokens={"main": TOKEN_VALUE})

        secrets = await ctx.secrets.get_secrets()

        assert [secret.key for secret in secrets] == ["db", "api"]
        lookups = [r for r in vault.requests if r.url.path.endswith("lookup-self")]
        assert len(lookups) == 1


class TestLocalSecrets:
    def test_reads_dotenv_cache(self, tmp_path):
        (tmp_path / ".vaulty.env").write_text("API_KEY=abc\nEMPTY=\n# comment\nQUOTED=\"a b\"\n")

        assert read_local_secrets(tmp_path) == {"API_KEY": "abc", "EMPTY": "", "QUOTED": "a b"}

    def test_missing_cache_is_empty(self, tmp_path):
        assert read_local_secrets(tmp_path) == {}

    @pytest.mark.asyncio
    async def test_from_project_root(self, project, make_ctx):
        (project / ".vaulty.env").write_text("X=1\n")

        assert await make_ctx(project).secrets.get_local_secrets() == {"X": "1"}
