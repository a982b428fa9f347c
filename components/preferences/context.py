"""Per-account UI preferences held by the running application.

The selected worker filter and the recently used workers live in one
``AppContext`` object. It is loaded from a JSON file when the application is
built, handed to endpoints as a dependency and written back on shutdown.
"""

import json
import logging
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

RECENT_WORKERS_LIMIT = 10


class WorkerPreferences(BaseModel):
    """Worker-related preferences of one account."""
    selected_worker_id: Optional[int] = None  # None means all workers
    recent_worker_ids: List[int] = []
    last_added_worker_id: Optional[int] = None


class AppContext:
    """Preferences of every account, keyed by user id."""

    def __init__(self, preferences: Optional[Dict[int, WorkerPreferences]] = None, path: Optional[Path] = None):
        self.preferences = preferences or {}
        self.path = path

    @classmethod
    def load(cls, path) -> "AppContext":
        """Read preferences from ``path``; a missing or broken file starts empty."""
        path = Path(path)
        if not path.exists():
            return cls(path=path)
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
            preferences = {int(user_id): WorkerPreferences(**data) for user_id, data in raw.items()}
        except (OSError, ValueError, ValidationError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", path, e)
            return cls(path=path)
        logger.info("Loaded preferences for %d account(s) from %s", len(preferences), path)
        return cls(preferences, path=path)

    def save(self, path=None) -> None:
        """Write preferences to ``path`` (or the file they were loaded from)."""
        target = Path(path) if path else self.path
        if target is None:
            return
        payload = {str(user_id): prefs.model_dump() for user_id, prefs in self.preferences.items()}
        target.write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Saved preferences for %d account(s) to %s", len(payload), target)

    def get(self, user_id: int) -> WorkerPreferences:
        return self.preferences.setdefault(user_id, WorkerPreferences())

    def select_worker(self, user_id: int, worker_id: Optional[int]) -> WorkerPreferences:
        prefs = self.get(user_id)
        prefs.selected_worker_id = worker_id
        return prefs

    def mark_used(self, user_id: int, worker_ids: List[int]) -> None:
        """Move workers to the front of the recently used list."""
        prefs = self.get(user_id)
        recent = [worker_id for worker_id in prefs.recent_worker_ids if worker_id not in worker_ids]
        prefs.recent_worker_ids = (list(dict.fromkeys(worker_ids)) + recent)[:RECENT_WORKERS_LIMIT]

    def mark_added(self, user_id: int, worker_id: int) -> None:
        self.get(user_id).last_added_worker_id = worker_id

    def forget_worker(self, user_id: int, worker_id: int) -> None:
        """Drop a deleted worker; a selection of it falls back to all workers."""
        prefs = self.get(user_id)
        if prefs.selected_worker_id == worker_id:
            prefs.selected_worker_id = None
        if prefs.last_added_worker_id == worker_id:
            prefs.last_added_worker_id = None
        prefs.recent_worker_ids = [wid for wid in prefs.recent_worker_ids if wid != worker_id]
