"""Secret resolution from the secrets manager and the local cache."""

from vaulty.secrets.models import Secret

__all__ = ["Secret"]
