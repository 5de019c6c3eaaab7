"""Secrets manager (Vault) HTTP client."""

from vaulty.vault.client import VaultClient
from vaulty.vault.models import SecretMetadata, TokenMetadata, TokenRenewal, VaultSecret

__all__ = ["VaultClient", "VaultSecret", "SecretMetadata", "TokenMetadata", "TokenRenewal"]
