from __future__ import annotations
import json, os
from typing import Dict, Optional
from cvdesk.domain.ports import StoragePort


class StorageLocal(StoragePort):
    """Local filesystem storage for user prefs and the operator session (JSON)."""

    PREFS_FILE = "user_prefs.json"
    SESSION_FILE = "session.json"

    def __init__(self, root_dir: str = ".") -> None:
        self.root = root_dir

    # ---- User prefs ----
    def save_user_prefs(self, prefs: Dict) -> None:
        self._write(self.PREFS_FILE, prefs)

    def load_user_prefs(self) -> Dict:
        return self._read(self.PREFS_FILE) or {}

    # ---- Session ----
    def save_session(self, payload: Dict) -> None:
        self._write(self.SESSION_FILE, payload)

    def load_session(self) -> Optional[Dict]:
        return self._read(self.SESSION_FILE)

    def clear_session(self) -> None:
        path = os.path.join(self.root, self.SESSION_FILE)
        if os.path.exists(path):
            os.remove(path)

    # ---- helpers ----
    def _write(self, name: str, payload: Dict) -> None:
        os.makedirs(self.root, exist_ok=True)
        path = os.path.join(self.root, name)
        with open(path, "w", encoding="utf-8") as f:
            json.dump(payload, f, ensure_ascii=False, indent=2)

    def _read(self, name: str) -> Optional[Dict]:
        path = os.path.join(self.root, name)
        if not os.path.exists(path):
            return None
        with open(path, "r", encoding="utf-8") as f:
            payload = json.load(f)
        if not isinstance(payload, dict):
            raise ValueError(f"{name} must contain a JSON object")
        return payload
