"""
Storage Manager - namespaced key/value store over LocalStorage.

Keys are built as '{entityKind}_{userId}'. Entity kinds never contain an
underscore, so the first underscore always separates kind from user id.
Reads never raise: missing or corrupt values come back as None and the
corruption is logged and kept as the last warning for UI display, until
the same key is read or written successfully.

Values are encrypted at rest when LEDGER_ENCRYPTION_KEY (a Fernet key) is
set.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, List, Optional

from cryptography.fernet import Fernet

from ..app_config import get_secret
from ..utils import get_data_dir
from .local_storage import LocalStorage, StorageError

logger = logging.getLogger(__name__)


class StorageManager:
    """Per-user key/value persistence."""
    
    def __init__(self, base_dir: Optional[Path] = None, encryption_key: Optional[str] = None):
        """
        Initialize storage manager.
        
        Args:
            base_dir: Data directory. If None, uses LEDGER_DATA_DIR or default.
            encryption_key: Fernet key. If None, uses LEDGER_ENCRYPTION_KEY;
                no key means plaintext files.
        
        Raises:
            ValueError: If the encryption key is not a valid Fernet key
        """
        self.base_dir = Path(base_dir) if base_dir else self._get_default_path()
        key = encryption_key or get_secret("LEDGER_ENCRYPTION_KEY")
        self.local = LocalStorage(self.base_dir, Fernet(key) if key else None)
        self._last_warning: Optional[str] = None
        self._warning_key: Optional[str] = None
    
    @property
    def encrypted(self) -> bool:
        return self.local.encrypted
    
    @staticmethod
    def _get_default_path() -> Path:
        """Get default data path from environment or fallback."""
        env_path = get_secret("LEDGER_DATA_DIR")
        if env_path:
            return Path(env_path).expanduser().resolve()
        return get_data_dir().resolve()
    
    @staticmethod
    def make_key(entity_kind: str, user_id: str) -> str:
        """
        Build the storage key for an entity kind and user.
        
        Raises:
            ValueError: If either part is empty or unsafe as a file name
        """
        kind = str(entity_kind or "").strip()
        uid = str(user_id or "").strip()
        if not kind or not uid:
            raise ValueError("entity_kind and user_id are required")
        if "_" in kind:
            raise ValueError(f"Entity kind may not contain '_': {kind!r}")
        for part in (kind, uid):
            if "/" in part or "\\" in part or part.startswith("."):
                raise ValueError(f"Unsafe storage key part: {part!r}")
        return f"{kind}_{uid}"
    
    def get_last_warning(self) -> Optional[str]:
        """Get last warning message (for UI display)."""
        return self._last_warning
    
    def _set_warning(self, key: str, message: str) -> None:
        logger.warning(message)
        self._last_warning = message
        self._warning_key = key

    def _clear_warning(self, key: str) -> None:
        if self._warning_key == key:
            self._last_warning = None
            self._warning_key = None

    def get(self, entity_kind: str, user_id: str) -> Optional[Any]:
        """
        Read a value.

        Returns:
            Stored value, or None when missing or corrupt
        """
        key = self.make_key(entity_kind, user_id)
        try:
            value = self.local.load(key)
        except StorageError as e:
            self._set_warning(key, f"Stored data for '{key}' is unreadable and was ignored: {e}")
            return None
        self._clear_warning(key)
        return value

    def set(self, entity_kind: str, user_id: str, value: Any) -> Path:
        """Write a value (JSON-serializable). Visible to the next get()."""
        key = self.make_key(entity_kind, user_id)
        path = self.local.save(key, value)
        self._clear_warning(key)
        logger.debug("Saved %s", key)
        return path

    def encrypt_plaintext(self, user_id: str) -> int:
        """
        Re-save every plaintext key of user_id encrypted.

        Returns:
            Number of keys upgraded (0 when no encryption key is configured)
        """
        if not self.encrypted:
            return 0
        upgraded = 0
        for key in self.list_keys_for_user(user_id):
            if self.local.is_encrypted(key):
                continue
            try:
                value = self.local.load(key)
            except StorageError as e:
                self._set_warning(key, f"Stored data for '{key}' is unreadable and was not encrypted: {e}")
                continue
            self.local.save(key, value)
            upgraded += 1
        if upgraded:
            logger.info("Encrypted %d plaintext keys for %s", upgraded, user_id)
        return upgraded
    
    def remove(self, entity_kind: str, user_id: str) -> None:
        """Remove a value; no-op if absent."""
        key = self.make_key(entity_kind, user_id)
        if self.local.delete(key):
            logger.debug("Removed %s", key)
    
    def exists(self, entity_kind: str, user_id: str) -> bool:
        return self.local.exists(self.make_key(entity_kind, user_id))
    
    def list_keys_for_user(self, user_id: str) -> List[str]:
        """List every stored key that belongs to user_id."""
        uid = str(user_id or "").strip()
        keys = []
        for key in self.local.list_keys():
            kind, sep, owner = key.partition("_")
            if sep and kind and owner == uid:
                keys.append(key)
        return keys
    
    def list_kinds_for_user(self, user_id: str) -> List[str]:
        """Entity kinds stored for user_id."""
        return [key.partition("_")[0] for key in self.list_keys_for_user(user_id)]
    
    def get_path(self) -> Path:
        """Get path to the data directory."""
        return self.base_dir
    
    def get_mtime(self, entity_kind: str, user_id: str) -> str:
        """Get last modification time of one key."""
        return self.local.get_mtime(self.make_key(entity_kind, user_id))
