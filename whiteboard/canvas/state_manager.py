"""
Whiteboard State Manager
========================

Persists whiteboard sessions (grid snapshot and known shapes) as JSON files.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Dict, Any
from datetime import datetime
import uuid

logger = logging.getLogger(__name__)


class StateManager:
    """Stores one JSON record per whiteboard session."""

    def __init__(self, sessions_dir: Optional[Path] = None):
        self.sessions_dir = sessions_dir or Path("sessions")
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        self._cache: Dict[str, Dict[str, Any]] = {}
        logger.info(f"[STATE-MANAGER] Initialized with sessions_dir={self.sessions_dir}")

    def _session_path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    def create_session(
        self,
        session_id: Optional[str] = None,
        positioning_mode: str = "content_type"
    ) -> str:
        """Create a new session with an empty grid. Existing sessions are kept."""
        if session_id is None:
            session_id = str(uuid.uuid4())

        if self.get_session(session_id) is None:
            self._cache[session_id] = {
                "id": session_id,
                "created_at": datetime.now().isoformat(),
                "positioning_mode": positioning_mode,
                "grid": None,
                "shape_ids": [],
            }
            self._save_session(session_id)
            logger.info(f"[STATE-MANAGER] Created session {session_id} ({positioning_mode})")
        return session_id

    def get_session(self, session_id: str) -> Optional[Dict[str, Any]]:
        """Get a session record from the cache or disk."""
        if session_id in self._cache:
            return self._cache[session_id]

        session_path = self._session_path(session_id)
        if session_path.exists():
            with open(session_path) as f:
                self._cache[session_id] = json.load(f)
                return self._cache[session_id]
        return None

    def save_session_state(self, session_id: str, state: Dict[str, Any]) -> bool:
        """
        Persist a session's engine state after a batch.

        Args:
            session_id: Session to update
            state: positioning_mode, grid snapshot and shape_ids

        Returns:
            False if the session does not exist
        """
        session = self.get_session(session_id)
        if not session:
            return False

        session.update(state)
        session["updated_at"] = datetime.now().isoformat()
        self._save_session(session_id)
        return True

    def reset_grid(self, session_id: str) -> bool:
        """Clear the persisted grid snapshot and known shapes."""
        session = self.get_session(session_id)
        if not session:
            return False

        session["grid"] = None
        session["shape_ids"] = []
        session["updated_at"] = datetime.now().isoformat()
        self._save_session(session_id)
        logger.info(f"[STATE-MANAGER] Reset grid for session {session_id}")
        return True

    def delete_session(self, session_id: str) -> bool:
        """Remove a session from cache and disk."""
        self._cache.pop(session_id, None)
        session_path = self._session_path(session_id)
        if session_path.exists():
            session_path.unlink()
            return True
        return False

    def _save_session(self, session_id: str):
        """Save session to disk."""
        if session_id in self._cache:
            with open(self._session_path(session_id), "w") as f:
                json.dump(self._cache[session_id], f, indent=2)
