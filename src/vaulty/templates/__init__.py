"""Template discovery, drift detection and rendering."""

from vaulty.templates.models import Template

__all__ = ["Template"]
