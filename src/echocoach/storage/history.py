"""File-backed interview history — one JSON document per session."""

from __future__ import annotations

from pathlib import Path

from pydantic import ValidationError

from echocoach.errors import StorageError
from echocoach.models.session import InterviewSession
from echocoach.utils.io import read_json, write_json
from echocoach.utils.progress import log_step, log_warning


class SessionStore:
    """Stores ``InterviewSession`` records under ``root``."""

    def __init__(self, root: Path | str):
        self.root = Path(root)

    def _path(self, session_id: str) -> Path:
        if not session_id or "/" in session_id or "\\" in session_id or session_id.startswith("."):
            raise StorageError(f"Invalid session id: {session_id!r}")
        return self.root / f"{session_id}.json"

    def save(self, session: InterviewSession) -> Path:
        path = self._path(session.id)
        try:
            write_json(path, session.model_dump(mode="json"))
        except OSError as e:
            raise StorageError(f"Failed to save session {session.id}: {e}") from e
        log_step("History", f"Saved session {session.id} ({len(session.answers)} answers)")
        return path

    def get(self, session_id: str) -> InterviewSession:
        path = self._path(session_id)
        if not path.exists():
            raise StorageError(f"Session not found: {session_id}")
        return self._load(path)

    def list_sessions(self) -> list[InterviewSession]:
        """All readable sessions, most recent first."""
        if not self.root.exists():
            return []
        sessions = []
        for path in self.root.glob("*.json"):
            try:
                sessions.append(self._load(path))
            except StorageError as e:
                log_warning(str(e))
        sessions.sort(key=lambda s: s.date, reverse=True)
        return sessions

    def delete(self, session_id: str) -> bool:
        path = self._path(session_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as e:
            raise StorageError(f"Failed to delete session {session_id}: {e}") from e
        log_step("History", f"Deleted session {session_id}")
        return True

    def delete_all(self) -> int:
        count = 0
        for session in self.list_sessions():
            count += int(self.delete(session.id))
        return count

    def _load(self, path: Path) -> InterviewSession:
        try:
            return InterviewSession(**read_json(path))
        except (OSError, ValueError, TypeError, ValidationError) as e:
            raise StorageError(f"Unreadable session file {path.name}: {e}") from e
