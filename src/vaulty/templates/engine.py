"""
Template engine.

One Jinja environment per run, rooted at the project directory, without
autoescaping and keeping trailing newlines and line endings so a literal
template renders to exactly its own content.
"""

from __future__ import annotations

import functools
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader

from vaulty.shared.domain.exceptions import TemplateRenderError
from vaulty.templates.filters import FILTERS

NEWLINE_RE = re.compile(r"\r\n|\r|\n")


def wrap_filter(name: str, func: Callable[..., Any]) -> Callable[..., Any]:
    """Re-raise any filter failure as ``TemplateRenderError`` naming the filter."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except Exception as e:
            message = str(e) or type(e).__name__
            raise TemplateRenderError(f"{name} filter: {message}", context={"filter": name}) from e

    return wrapper


def create_environment(project_root: Path) -> Environment:
    env = Environment(
        loader=FileSystemLoader(str(project_root)),
        autoescape=False,
        keep_trailing_newline=True,
    )
    for name, func in FILTERS.items():
        env.filters[name] = wrap_filter(name, func)
    return env


def newline_sequence(source: str) -> str:
    """Line ending of the first line break in ``source``, ``"\\n"`` when there is none."""
    match = NEWLINE_RE.search(source)
    return match.group() if match else "\n"


def render_template(env: Environment, template: str, data: dict[str, Any]) -> str:
    """
    Render ``template`` (a POSIX path relative to the loader root).

    Jinja rewrites every line break to the environment's newline sequence, so
    a template with CRLF or CR line endings is rendered through an uncached
    overlay using its own line ending.
    """
    source, _, _ = env.loader.get_source(env, template)
    newline = newline_sequence(source)
    if newline != env.newline_sequence:
        env = env.overlay(newline_sequence=newline, cache_size=0)
    return env.get_template(template).render(data)
