"""
Template service.

Discovers template files under the project root, derives the drift state of
each output (missing, out of date, not ignored by Git) and renders outputs.
Nothing about a template is stored; every call inspects the file system.
"""

from __future__ import annotations

import asyncio
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Any

from jinja2 import Environment

from vaulty.issues.application.collector import IssuesCollectorError
from vaulty.issues.domain.enums import IssueScope, IssueSeverity
from vaulty.issues.domain.fixes import RenderTemplate
from vaulty.shared.infrastructure.config import settings
from vaulty.shared.infrastructure.git import GitHelper
from vaulty.shared.infrastructure.ignore_matcher import IgnoreMatcher
from vaulty.shared.infrastructure.logging import get_logger
from vaulty.shared.utils.async_utils import gather_all
from vaulty.shared.utils.path_utils import (
    filter_paths,
    get_file_mode,
    get_last_update,
    is_path_writeable,
    split_patterns,
)
from vaulty.templates.engine import create_environment, render_template
from vaulty.templates.models import Template

if TYPE_CHECKING:
    from vaulty.context import RunContext

logger = get_logger(__name__)

DEFAULT_PATTERNS = ["**/*"]
NEW_OUTPUT_MODE = 0o600


def write_atomic(path: Path, content: str) -> None:
    """
    Replace ``path`` with ``content`` through a temporary sibling file.

    An existing file keeps its permission bits, a new one is created 0600.
    """
    mode = get_file_mode(path)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
            f.write(content)
        os.chmod(tmp_name, NEW_OUTPUT_MODE if mode is None else mode)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except OSError:
            pass
        raise


class TemplateService:
    """Template discovery, inspection and rendering for one run."""

    def __init__(self, ctx: RunContext, git: GitHelper | None = None):
        self.ctx = ctx
        self.git = git or GitHelper()
        self._env: Environment | None = None

    async def get_template(self, template: str) -> Template:
        """
        Inspect one template and register its drift issues.

        Raises:
            IssuesCollectorError: When the template is missing, its output is
                not writeable, or the output sits unignored in a Git work tree.
        """
        config = await self.ctx.config.get_config()
        issues = self.ctx.issues.scoped(scope=IssueScope.TEMPLATE, source=template)

        output = template.removesuffix(config.extension)
        template_path = config.project_root / template
        output_path = config.project_root / output

        if not template_path.is_file():
            raise issues.add(message="Template does not exist").error()

        if not is_path_writeable(output_path):
            raise issues.add(message="Output is not writeable").error()

        last_update = get_last_update(template_path)
        last_output = get_last_update(output_path)
        info = Template(
            template=template,
            template_path=template_path,
            last_update=last_update,
            output=output,
            output_path=output_path,
            last_output=last_output,
        )

        if not info.has_output:
            issues.add(
                message="Output does not exist",
                severity=IssueSeverity.WARN,
                fix=RenderTemplate(template=template),
            )
        elif info.is_stale:
            issues.add(
                message="Output is out of date",
                severity=IssueSeverity.WARN,
                fix=RenderTemplate(template=template),
            )

        if await self.git.is_inside_work_tree(output_path) and not await self.git.is_ignored(output_path):
            raise issues.add(message="Output is not ignored by Git").error()

        return info

    async def find_templates(self, filters: list[str] | None = None) -> list[str]:
        """Project-relative paths of the templates selected by ``filters``."""
        config = await self.ctx.config.get_config()
        extension = config.extension
        matcher = IgnoreMatcher(config.project_root, config.ignore_files, use_gitignore=config.gitignore)

        found = [
            path
            for path in await asyncio.to_thread(lambda: list(matcher.walk_files()))
            if path.endswith(extension)
            and Path(path).name != extension
            and Path(path).name != settings.local_cache_filename
        ]

        patterns = split_patterns(filters) or DEFAULT_PATTERNS
        selected = filter_paths(found, patterns)
        logger.debug("templates_found", found=len(found), selected=len(selected), patterns=patterns)
        return selected

    async def output_path(self, template: str) -> Path:
        config = await self.ctx.config.get_config()
        return config.project_root / template.removesuffix(config.extension)

    async def get_templates(self, filters: list[str] | None = None) -> list[Template]:
        """Inspect every selected template concurrently."""
        names = await self.find_templates(filters)
        return await gather_all(self.get_template(name) for name in names)

    def get_engine(self, project_root: Path) -> Environment:
        if self._env is None:
            self._env = create_environment(project_root)
        return self._env

    async def get_template_data(self) -> dict[str, Any]:
        """
        Data passed to every template.

        ``secrets`` maps secret names to their data, ``SECRETS`` holds the
        local cache values.
        """
        data = await self.ctx.memoize(("template_data",), self._load_template_data)
        return dict(data)

    async def _load_template_data(self) -> dict[str, Any]:
        secrets = await self.ctx.secrets.get_secrets()
        local = await self.ctx.secrets.get_local_secrets()
        return {
            "secrets": {secret.key: secret.data for secret in secrets},
            "SECRETS": local,
        }

    async def render(self, template: str) -> str:
        """Render ``template`` without writing it."""
        info = await self.get_template(template)
        try:
            return await self._render(info)
        except IssuesCollectorError:
            raise
        except Exception as e:
            issues = self.ctx.issues.scoped(scope=IssueScope.TEMPLATE, source=template)
            raise issues.add_error(e).error()

    async def _render(self, info: Template) -> str:
        config = await self.ctx.config.get_config()
        data = await self.get_template_data()
        return render_template(self.get_engine(config.project_root), info.template, data)

    async def write_template_output(self, template: str) -> Template:
        """
        Render ``template`` and replace its output.

        Failures are registered on the template and raised as
        ``IssuesCollectorError``.
        """
        issues = self.ctx.issues.scoped(scope=IssueScope.TEMPLATE, source=template)
        try:
            info = await self.get_template(template)
            content = await self._render(info)
            write_atomic(info.output_path, content)
        except IssuesCollectorError:
            raise
        except Exception as e:
            logger.warning("template_write_failed", template=template, error=str(e))
            raise issues.add_error(e).error()

        logger.info("template_written", template=template, output=info.output)
        return info

    async def write_templates(self, filters: list[str] | None = None, dry_run: bool = False) -> int:
        """
        Write every selected output. Failures are recorded without stopping
        the others; returns how many outputs were written.
        """
        names = await self.find_templates(filters)

        async def write(name: str) -> bool:
            if dry_run:
                logger.info("template_write_skipped", template=name, reason="dry_run")
                return True
            try:
                await self.write_template_output(name)
            except IssuesCollectorError:
                return False
            return True

        results = await asyncio.gather(*(write(name) for name in names))
        return sum(results)

    async def delete_template_output(self, template: str) -> bool:
        """Delete the output of ``template``. A missing output is not an error."""
        issues = self.ctx.issues.scoped(scope=IssueScope.TEMPLATE, source=template)
        output_path = await self.output_path(template)

        try:
            output_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as e:
            raise issues.add_error(e).error()

        logger.info("template_output_deleted", template=template, output=str(output_path))
        return True

    async def delete_templates(self, filters: list[str] | None = None, dry_run: bool = False) -> int:
        """Delete the outputs of every selected template; returns how many were deleted."""
        names = await self.find_templates(filters)

        async def delete(name: str) -> bool:
            if dry_run:
                return (await self.output_path(name)).exists()
            try:
                return await self.delete_template_output(name)
            except IssuesCollectorError:
                return False

        results = await asyncio.gather(*(delete(name) for name in names))
        return sum(results)
