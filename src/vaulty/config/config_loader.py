"""
Configuration loader.

Finds the project configuration file (explicit ``--config`` first, then
upward from the working directory), validates it and merges it over the
defaults. A broken file is reported and the defaults are used so that other
commands keep working; a missing project root stops the command.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from vaulty.config.models import Config, ConfigInput
from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.shared.domain.exceptions import ConfigurationError
from vaulty.shared.infrastructure.logging import get_logger

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)

CONFIG_FILENAMES = (
    "vaulty.yaml",
    "vaulty.yml",
    "vaulty.json",
    ".vaultyrc",
    ".vaultyrc.yaml",
    ".vaultyrc.yml",
    ".vaultyrc.json",
)

PROJECT_MARKERS = (
    "pyproject.toml",
    "package.json",
    "setup.py",
    "setup.cfg",
    ".git",
)


def find_up(names: tuple[str, ...], start: Path) -> Path | None:
    """Return the first ``names`` entry found in ``start`` or one of its ancestors."""
    for directory in (start, *start.parents):
        for name in names:
            candidate = directory / name
            if candidate.exists():
                return candidate
    return None


def format_validation_error(error: ValidationError) -> str:
    """
    Format every violation as ``- path: message``.

    Examples:
        - secrets.db.address: Invalid URL format
        - unknownKey: Extra inputs are not permitted
    """
    lines = []
    for item in error.errors():
        location = ".".join(str(part) for part in item.get("loc", ()))
        message = item.get("msg", "Invalid value").removeprefix("Value error, ")
        lines.append(f"- {location}: {message}" if location else f"- {message}")
    return "\n".join(lines)


class ConfigLoader:
    """Resolves the ``Config`` of the current run."""

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    def find_config_file(self) -> Path | None:
        explicit = self.ctx.options.config
        if explicit is not None:
            return explicit
        return find_up(CONFIG_FILENAMES, self.ctx.options.cwd)

    def get_default_config(self, config_path: Path | None = None) -> Config:
        """
        Build the default configuration.

        The project root is the directory of the config file when there is
        one, else the directory of the nearest project marker. It is ``None``
        when neither exists; callers treat that as fatal.
        """
        cwd = self.ctx.options.cwd
        anchor = config_path or find_up(PROJECT_MARKERS, cwd)
        project_root = anchor.parent if anchor is not None else None

        return Config(
            cwd=cwd,
            project_root=project_root,
            source=str(config_path) if config_path else "default",
        )

    async def get_config(self) -> Config:
        """Return the project configuration, computed once per run."""
        return await self.ctx.memoize(("config",), self._load)

    async def _load(self) -> Config:
        cwd = self.ctx.options.cwd
        config_path = self.find_config_file()
        default_config = self.get_default_config(config_path)
        issues = self.ctx.issues.scoped(scope=IssueScope.CONFIG, source=default_config.source)

        if self.ctx.options.config is not None and not self.ctx.options.config.is_file():
            raise issues.add(message="Configuration file not found").error()

        if default_config.project_root is None:
            raise issues.add(message=f"No project found from {cwd}").error()

        if config_path is None:
            logger.debug("config_file_not_found", cwd=str(cwd), project=str(default_config.project_root))
            return default_config

        try:
            raw = self._read(config_path)
        except ConfigurationError as e:
            logger.warning("config_read_failed", source=str(config_path), error=e.context.get("error"))
            issues.add(message=f"Invalid configuration file\n- {e}")
            return default_config

        try:
            config_input = ConfigInput.model_validate(raw)
        except ValidationError as e:
            logger.warning("config_validation_failed", source=str(config_path), errors=e.error_count())
            issues.add(
                message=f"Invalid configuration file\n{format_validation_error(e)}",
                severity=IssueSeverity.ERROR,
            )
            return default_config

        overrides = {
            name: value for name in ConfigInput.model_fields if (value := getattr(config_input, name)) is not None
        }
        config = default_config.model_copy(update=overrides)
        logger.debug(
            "config_loaded",
            source=str(config_path),
            project=str(config.project_root),
            secrets=len(config.secrets),
        )
        return config

    @staticmethod
    def _read(path: Path) -> Any:
        """
        Load the YAML (or JSON) document of ``path``; an empty file is ``{}``.

        Raises:
            ConfigurationError: When the file cannot be read or parsed.
        """
        try:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
            raise ConfigurationError("Unable to parse the file", context={"source": str(path), "error": str(e)}) from e
        return {} if data is None else data
