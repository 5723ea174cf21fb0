# tools/export_user_data.py
"""
Dump every stored key of one user to a JSON file.

Usage (from project root):
    python tools/export_user_data.py <user_id> [out.json]
"""
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from services.storage import StorageManager


def export_user(storage: StorageManager, user_id: str, json_path: Path) -> dict:
    keys = storage.list_keys_for_user(user_id)
    out = {}
    for key in sorted(keys):
        kind = key.partition("_")[0]
        out[key] = storage.get(kind, user_id)

    json_path.parent.mkdir(parents=True, exist_ok=True)
    with open(json_path, "w", encoding="utf-8") as f:
        json.dump(out, f, ensure_ascii=False, indent=2)
    return out


def main():
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)
    user_id = sys.argv[1]
    json_path = Path(sys.argv[2]) if len(sys.argv) > 2 else Path(f"export_{user_id}.json")

    storage = StorageManager()
    data = export_user(storage, user_id, json_path)
    print(f"✅ Wrote {json_path} ({len(data)} keys from {storage.get_path()})")


if __name__ == "__main__":
    main()
