"""
Local file storage implementation.
Each key is persisted as its own JSON file inside one data directory.

With a Fernet key configured, values are written as an envelope
{"__fernet__": "<token>"} holding the encrypted JSON text. Plaintext files
written before a key was configured still load.
"""

from __future__ import annotations
import json
import os
from datetime import datetime
from pathlib import Path
from typing import Any, List, Optional

from cryptography.fernet import Fernet, InvalidToken

from ..utils import ensure_dir

ENVELOPE_KEY = "__fernet__"


class StorageError(Exception):
    """Raised when a stored file cannot be read back."""
    pass


def _is_envelope(payload: Any) -> bool:
    return isinstance(payload, dict) and list(payload) == [ENVELOPE_KEY]


class LocalStorage:
    """Handles local file operations for ledger keys."""
    
    def __init__(self, base_dir: Path, fernet: Optional[Fernet] = None):
        """
        Initialize local storage.
        
        Args:
            base_dir: Directory holding one <key>.json file per key
            fernet: Cipher for values at rest; None stores plaintext JSON
        """
        self.base_dir = Path(base_dir)
        self.fernet = fernet
    
    @property
    def encrypted(self) -> bool:
        return self.fernet is not None
    
    def path_for(self, key: str) -> Path:
        """Get file path for a key."""
        return self.base_dir / f"{key}.json"
    
    def exists(self, key: str) -> bool:
        """Check if a key has been written."""
        return self.path_for(key).exists()
    
    def _read_json(self, file_path: Path) -> Any:
        try:
            with file_path.open("r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StorageError(f"Malformed JSON in {file_path.name}: {e}")
        except (OSError, UnicodeDecodeError) as e:
            raise StorageError(f"Could not read {file_path.name}: {e}")
    
    def _decrypt(self, file_path: Path, token: Any) -> Any:
        if self.fernet is None:
            raise StorageError(f"{file_path.name} is encrypted and no encryption key is configured")
        if not isinstance(token, str):
            raise StorageError(f"Malformed encrypted value in {file_path.name}")
        try:
            text = self.fernet.decrypt(token.encode("ascii")).decode("utf-8")
            return json.loads(text)
        except InvalidToken:
            raise StorageError(f"Could not decrypt {file_path.name} (wrong key or damaged data)")
        except (UnicodeError, json.JSONDecodeError) as e:
            raise StorageError(f"Malformed encrypted value in {file_path.name}: {e}")
    
    def load(self, key: str) -> Optional[Any]:
        """
        Load a value from its JSON file.
        
        Returns:
            Decoded value, or None if the key was never written
            
        Raises:
            StorageError: If the file exists but cannot be decoded or decrypted
        """
        file_path = self.path_for(key)
        if not file_path.exists():
            return None
        
        payload = self._read_json(file_path)
        if _is_envelope(payload):
            return self._decrypt(file_path, payload[ENVELOPE_KEY])
        return payload
    
    def is_encrypted(self, key: str) -> bool:
        """True if the stored file for key is an encrypted envelope."""
        file_path = self.path_for(key)
        if not file_path.exists():
            return False
        try:
            return _is_envelope(self._read_json(file_path))
        except StorageError:
            return False
    
    def save(self, key: str, data: Any) -> Path:
        """
        Save a value with atomic write.
        
        Returns:
            Path to saved file
            
        Raises:
            IOError: If write fails
        """
        ensure_dir(self.base_dir)
        file_path = self.path_for(key)
        
        if self.fernet is not None:
            token = self.fernet.encrypt(json.dumps(data, ensure_ascii=False).encode("utf-8"))
            data = {ENVELOPE_KEY: token.decode("ascii")}
        
        # Atomic write: write to temp file first
        tmp_path = file_path.with_suffix(".json.tmp")
        
        with tmp_path.open("w", encoding="utf-8") as f:
            json.dump(data, f, ensure_ascii=False, indent=2)
            f.flush()
            os.fsync(f.fileno())
        
        # Replace original file atomically
        os.replace(tmp_path, file_path)
        
        if not file_path.exists():
            raise IOError(f"Failed to write {key} to {file_path}")
        
        return file_path
    
    def delete(self, key: str) -> bool:
        """Delete a key. Returns True if a file was removed."""
        file_path = self.path_for(key)
        if not file_path.exists():
            return False
        file_path.unlink()
        return True
    
    def list_keys(self) -> List[str]:
        """List all stored keys."""
        if not self.base_dir.exists():
            return []
        return sorted(p.stem for p in self.base_dir.glob("*.json"))
    
    def get_mtime(self, key: str) -> str:
        """
        Get last modification time as formatted string.
        
        Returns:
            Formatted timestamp or '(not created yet)'
        """
        file_path = self.path_for(key)
        if not file_path.exists():
            return "(not created yet)"
        
        timestamp = datetime.fromtimestamp(file_path.stat().st_mtime)
        return timestamp.strftime("%Y-%m-%d %H:%M:%S")
