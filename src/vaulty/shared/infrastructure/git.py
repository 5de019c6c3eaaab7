"""
Git helper for Vaulty.

Answers the two questions the template engine asks about an output file:
is it inside a work tree, and is it ignored by the repository rules.
A missing git executable means "not in a repository".
"""

import shutil
from pathlib import Path

from vaulty.shared.infrastructure.execution.command_executor import CommandExecutor
from vaulty.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


class GitHelper:
    def __init__(self, executor: CommandExecutor | None = None):
        self.git_cmd = shutil.which("git")
        self.executor = executor or CommandExecutor()

        if not self.git_cmd:
            logger.debug("git_executable_not_found")

    async def is_inside_work_tree(self, path: Path) -> bool:
        """Check whether ``path`` (a file that may not exist yet) lives in a git work tree."""
        if not self.git_cmd:
            return False

        directory = self._existing_parent(path)
        if directory is None:
            return False

        result = await self.executor.run_async(
            [self.git_cmd, "rev-parse", "--is-inside-work-tree"],
            cwd=directory,
        )
        return result.is_success and result.stdout.strip() == "true"

    async def is_ignored(self, path: Path) -> bool:
        """Check whether ``path`` matches the repository ignore rules."""
        if not self.git_cmd:
            return False

        directory = self._existing_parent(path)
        if directory is None:
            return False

        result = await self.executor.run_async(
            [self.git_cmd, "check-ignore", "-q", str(path)],
            cwd=directory,
        )
        return result.is_success

    @staticmethod
    def _existing_parent(path: Path) -> Path | None:
        directory = path.parent
        while not directory.exists():
            if directory.parent == directory:
                return None
            directory = directory.parent
        return directory
