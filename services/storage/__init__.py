"""Storage layer for per-user ledger persistence."""

from .local_storage import LocalStorage, StorageError
from .storage_manager import StorageManager

__all__ = ["LocalStorage", "StorageError", "StorageManager"]
