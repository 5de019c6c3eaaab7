"""
Content Hasher Utility.

Derives stable identities from semantic fields so that equal records
collapse to one key regardless of dict ordering or insertion order.
"""

import hashlib
import json
from typing import Any


class ContentHasher:
    """
    Canonicalizes a mapping and hashes it.
    """

    @staticmethod
    def canonicalize(data: dict[str, Any]) -> str:
        """
        Serialize a mapping to canonical JSON.

        Keys are sorted, separators carry no whitespace and ``None`` values
        are dropped, so ``{"a": 1, "b": None}`` and ``{"a": 1}`` are the same.

        Args:
            data: JSON serializable mapping

        Returns:
            Canonical string suitable for hashing
        """
        cleaned = {key: value for key, value in data.items() if value is not None}
        return json.dumps(cleaned, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str)

    @staticmethod
    def calculate_hash(data: dict[str, Any]) -> str:
        """Calculate SHA-256 hex digest of the canonical form."""
        canonical = ContentHasher.canonicalize(data)
        return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
