"""Viewer session management with in-memory storage."""

import time
import uuid
from dataclasses import dataclass, field

from config import settings
from models.display_model import BoundingBox
from models.graph_model import AssetGraph


@dataclass
class ViewerSession:
    """Per-client viewer state: the graph on screen plus overlay settings."""

    id: str
    created_at: float
    updated_at: float
    graph: AssetGraph | None = None
    group_visibility: dict[str, bool] = field(default_factory=dict)
    group_colors: dict[str, str] = field(default_factory=dict)
    bounds: dict[str, BoundingBox] = field(default_factory=dict)


class SessionManager:
    """Manages in-memory viewer sessions.

    All instances share the same session store so that routers
    can each instantiate SessionManager() independently.
    """

    _sessions: dict[str, ViewerSession] = {}

    def create_session(self) -> ViewerSession:
        """Create a new empty session."""
        self._cleanup_expired()
        if len(self._sessions) >= settings.max_sessions:
            self._evict_oldest()
        now = time.time()
        session = ViewerSession(id=uuid.uuid4().hex, created_at=now, updated_at=now)
        self._sessions[session.id] = session
        return session

    def get_session(self, session_id: str) -> ViewerSession | None:
        """Get a session by ID, returning None if not found or expired."""
        session = self._sessions.get(session_id)
        if session is None:
            return None
        if self._is_expired(session):
            del self._sessions[session_id]
            return None
        session.updated_at = time.time()
        return session

    def delete_session(self, session_id: str) -> bool:
        """Delete a session. Returns True if it existed."""
        return self._sessions.pop(session_id, None) is not None

    def store_graph(self, session: ViewerSession, graph: AssetGraph) -> None:
        """Replace the session's graph. Bounds of the old projection are dropped."""
        session.graph = graph
        session.bounds = {}
        session.updated_at = time.time()

    def _is_expired(self, session: ViewerSession) -> bool:
        return (time.time() - session.updated_at) > settings.session_ttl_seconds

    def _cleanup_expired(self) -> None:
        expired = [
            sid for sid, s in self._sessions.items() if self._is_expired(s)
        ]
        for sid in expired:
            del self._sessions[sid]

    def _evict_oldest(self) -> None:
        if not self._sessions:
            return
        oldest_id = min(self._sessions, key=lambda k: self._sessions[k].updated_at)
        del self._sessions[oldest_id]
