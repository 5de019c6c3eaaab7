"""Token lifecycle: resolution, expiry checks and renewal."""

from vaulty.tokens.models import Token, parse_expire_time

__all__ = ["Token", "parse_expire_time"]
