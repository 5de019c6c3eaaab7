"""
Path utilities: glob matching and file stat helpers.
"""

import os
import re
from datetime import datetime, timezone
from functools import lru_cache
from pathlib import Path


def expand_braces(pattern: str) -> list[str]:
    """
    Expand ``{a,b}`` alternatives.

    Examples:
        >>> expand_braces("**/*.{js,json}")
        ['**/*.js', '**/*.json']
    """
    match = re.search(r"\{([^{}]*)\}", pattern)
    if not match:
        return [pattern]

    head, tail = pattern[: match.start()], pattern[match.end() :]
    expanded: list[str] = []
    for option in match.group(1).split(","):
        expanded.extend(expand_braces(f"{head}{option}{tail}"))
    return expanded


@lru_cache(maxsize=512)
def glob_to_regex(pattern: str) -> re.Pattern:
    """
    Translate a glob into a compiled regex.

    ``**`` crosses directory boundaries, ``*`` and ``?`` do not, dotfiles match.
    """
    parts: list[str] = []
    for alternative in expand_braces(pattern.replace("\\", "/")):
        i, n = 0, len(alternative)
        out = ""
        while i < n:
            char = alternative[i]
            if alternative.startswith("**/", i):
                out += "(?:.*/)?"
                i += 3
            elif alternative.startswith("**", i):
                out += ".*"
                i += 2
            elif char == "*":
                out += "[^/]*"
                i += 1
            elif char == "?":
                out += "[^/]"
                i += 1
            elif char == "[":
                end = alternative.find("]", i + 1)
                if end == -1:
                    out += re.escape(char)
                    i += 1
                else:
                    body = alternative[i + 1 : end]
                    if body.startswith("!"):
                        body = "^" + body[1:]
                    out += f"[{body}]"
                    i = end + 1
            else:
                out += re.escape(char)
                i += 1
        parts.append(out)

    return re.compile(r"\A(?:" + "|".join(parts) + r")\Z")


def match_glob(path: str, pattern: str) -> bool:
    """Match a relative POSIX path against a glob pattern."""
    return bool(glob_to_regex(pattern).match(path.replace("\\", "/")))


def filter_paths(paths: list[str], patterns: list[str]) -> list[str]:
    """
    Narrow ``paths`` with include/exclude globs, in order.

    A plain pattern adds its matches, a ``!`` pattern removes them. Order of
    the input ``paths`` is preserved.

    Examples:
        >>> filter_paths([".env.vaulty", "src/a.json.vaulty"], ["**/*", "!src/**"])
        ['.env.vaulty']
    """
    selected: set[str] = set()
    for pattern in patterns:
        if pattern.startswith("!"):
            selected -= {p for p in paths if match_glob(p, pattern[1:])}
        else:
            selected |= {p for p in paths if match_glob(p, pattern)}
    return [p for p in paths if p in selected]


def split_patterns(arguments: list[str] | None) -> list[str]:
    """Split CLI arguments holding several space separated patterns."""
    patterns: list[str] = []
    for argument in arguments or []:
        patterns.extend(part for part in argument.split() if part)
    return patterns


def get_file_mode(path: Path) -> int | None:
    """Permission bits of ``path`` or ``None`` if it cannot be stat'ed."""
    try:
        return path.stat().st_mode & 0o777
    except OSError:
        return None


def get_last_update(path: Path) -> datetime | None:
    """Modification time of ``path`` as an aware datetime, or ``None``."""
    try:
        return datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None


def is_path_writeable(path: Path) -> bool:
    """An existing file must be writeable, a missing one needs a writeable parent."""
    if path.exists():
        return os.access(path, os.W_OK)
    return os.access(path.parent, os.W_OK)
