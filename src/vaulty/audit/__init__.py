"""Audit orchestration and the fix pass."""
