"""
Resilience Patterns for Vaulty.

Only the timeout pattern is needed: calls to the secrets manager are
bounded so a hung remote cannot block a whole audit.
"""

from .timeout import with_timeout_async

__all__ = [
    "with_timeout_async",
]
