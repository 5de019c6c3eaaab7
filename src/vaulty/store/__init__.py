"""Local, permission restricted store of per-project token values."""

from vaulty.store.models import Store, StoreData, StoreProject

__all__ = ["Store", "StoreData", "StoreProject"]
