"""
Ignore Matcher - Pattern Matching for File Exclusions.

Applies gitignore syntax from every ignore file selected by the project's
``ignoreFiles`` globs (``.gitignore``, ``.vaultyignore`` by default). Rules
of an ignore file are relative to the directory holding it and the last
matching rule wins, so ``!pattern`` re-includes a path.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from vaulty.shared.infrastructure.logging import get_logger
from vaulty.shared.utils.path_utils import match_glob

logger = get_logger(__name__)

ALWAYS_SKIPPED_DIRECTORIES = {".git"}


@dataclass(frozen=True)
class IgnoreRule:
    """A single parsed line of an ignore file."""

    base: str  # directory of the ignore file, relative to the project root ("" for root)
    pattern: str
    negated: bool = False
    directory_only: bool = False

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if self.directory_only and not is_dir:
            return False
        if self.base:
            if not rel_path.startswith(self.base + "/"):
                return False
            rel_path = rel_path[len(self.base) + 1 :]
        return match_glob(rel_path, self.pattern)


def parse_ignore_lines(lines: list[str], base: str = "") -> list[IgnoreRule]:
    """
    Parse gitignore lines into rules.

    Args:
        lines: Raw lines of the ignore file
        base: Directory of the ignore file relative to the project root

    Returns:
        Parsed rules in file order
    """
    rules: list[IgnoreRule] = []
    for raw in lines:
        line = raw.rstrip("\n").rstrip()
        if not line or line.startswith("#"):
            continue

        negated = line.startswith("!")
        if negated:
            line = line[1:]
        elif line.startswith("\\"):
            line = line[1:]

        directory_only = line.endswith("/")
        line = line.rstrip("/")
        if not line:
            continue

        # A slash anywhere but the end anchors the pattern to the ignore file directory
        if "/" in line:
            pattern = line.lstrip("/")
        else:
            pattern = f"**/{line}"

        rules.append(IgnoreRule(base=base, pattern=pattern, negated=negated, directory_only=directory_only))
    return rules


class IgnoreMatcher:
    """
    Matcher for ignore patterns collected while walking a project.

    Provides:
    - Loading of every ignore file whose path matches ``ignore_file_globs``
    - Directory pruning during discovery
    """

    def __init__(
        self,
        project_root: Path,
        ignore_file_globs: list[str] | None = None,
        use_gitignore: bool = True,
    ):
        """
        Initialize ignore matcher.

        Args:
            project_root: Project root directory
            ignore_file_globs: Glob patterns selecting ignore files
            use_gitignore: Whether ``.gitignore`` files take part
        """
        self.project_root = project_root
        globs = list(ignore_file_globs or [])
        if use_gitignore and "**/.gitignore" not in globs:
            globs.append("**/.gitignore")
        if not use_gitignore:
            globs = [g for g in globs if not g.endswith(".gitignore")]
        self.ignore_file_globs = globs

        self._rules: list[IgnoreRule] = []
        self._loaded_dirs: set[str] = set()

    def is_ignore_file(self, rel_path: str) -> bool:
        return any(match_glob(rel_path, pattern) for pattern in self.ignore_file_globs)

    def load_directory(self, rel_dir: str, filenames: list[str]) -> None:
        """Load the ignore files found directly inside ``rel_dir``."""
        if rel_dir in self._loaded_dirs:
            return
        self._loaded_dirs.add(rel_dir)

        for filename in sorted(filenames):
            rel_file = f"{rel_dir}/{filename}" if rel_dir else filename
            if not self.is_ignore_file(rel_file):
                continue

            path = self.project_root / rel_file
            try:
                lines = path.read_text(encoding="utf-8").splitlines()
            except (OSError, UnicodeDecodeError) as e:
                logger.warning("ignore_file_load_failed", path=str(path), error=str(e))
                continue

            rules = parse_ignore_lines(lines, base=rel_dir)
            self._rules.extend(rules)
            logger.debug("ignore_file_loaded", path=rel_file, rules=len(rules))

    def _matches(self, rel_path: str, is_dir: bool) -> bool:
        ignored = False
        for rule in self._rules:
            if rule.matches(rel_path, is_dir):
                ignored = not rule.negated
        return ignored

    def should_ignore_directory(self, rel_dir: str) -> bool:
        """
        Check if a directory (relative to the project root) should be pruned.
        """
        if rel_dir.split("/")[-1] in ALWAYS_SKIPPED_DIRECTORIES:
            return True
        return self._matches(rel_dir, is_dir=True)

    def walk_files(self):
        """
        Yield every non-ignored file path, relative to the project root.

        Ignored directories are pruned before descending.
        """
        for current, dirnames, filenames in os.walk(self.project_root, followlinks=False):
            rel_dir = Path(current).relative_to(self.project_root).as_posix()
            rel_dir = "" if rel_dir == "." else rel_dir
            self.load_directory(rel_dir, filenames)

            kept = []
            for name in sorted(dirnames):
                rel_child = f"{rel_dir}/{name}" if rel_dir else name
                if not self.should_ignore_directory(rel_child):
                    kept.append(name)
            dirnames[:] = kept

            for name in sorted(filenames):
                rel_file = f"{rel_dir}/{name}" if rel_dir else name
                if not self._matches(rel_file, is_dir=False):
                    yield rel_file
