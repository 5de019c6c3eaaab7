"""Template model."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from pathlib import Path


@dataclass
class Template:
    """A template file and the output rendered from it, both project-relative."""

    template: str
    template_path: Path
    last_update: datetime
    output: str
    output_path: Path
    last_output: datetime | None = None

    @property
    def has_output(self) -> bool:
        return self.last_output is not None

    @property
    def is_stale(self) -> bool:
        return self.last_output is not None and self.last_output < self.last_update
