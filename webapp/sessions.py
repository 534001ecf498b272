from __future__ import annotations

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterator, List, Optional

from team_composer.engine import TeamCompositionEngine


def _now_iso() -> str:
    """Return current UTC timestamp as ISO string with second precision."""
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


@dataclass
class PlanningSession:
    name: str
    engine: TeamCompositionEngine
    created_at: str = field(default_factory=_now_iso)
    updated_at: str = field(default_factory=_now_iso)
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def to_dict(self) -> Dict[str, object]:
        return {
            "name": self.name,
            "project_id": self.engine.project_id,
            "team_size": len(self.engine.selection),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class SessionStore:
    """In-memory registry of planning sessions, one engine per project directory.

    Every operation on an engine runs while holding that session's lock, so
    an add followed by an analysis from another request never interleaves.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, PlanningSession] = {}
        self._lock = threading.Lock()

    def _get_or_create(self, name: str, factory: Callable[[], TeamCompositionEngine]) -> PlanningSession:
        with self._lock:
            session = self._sessions.get(name)
            if session is None:
                session = PlanningSession(name=name, engine=factory())
                self._sessions[name] = session
            return session

    @contextmanager
    def engine(self, name: str, factory: Callable[[], TeamCompositionEngine]) -> Iterator[TeamCompositionEngine]:
        session = self._get_or_create(name, factory)
        with session.lock:
            yield session.engine
            session.updated_at = _now_iso()

    def get(self, name: str) -> Optional[PlanningSession]:
        with self._lock:
            return self._sessions.get(name)

    def discard(self, name: str) -> bool:
        with self._lock:
            session = self._sessions.pop(name, None)
        if session is None:
            return False
        with session.lock:
            session.engine.teardown()
        return True

    def list_sessions(self) -> List[Dict[str, object]]:
        with self._lock:
            sessions = list(self._sessions.values())
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return [session.to_dict() for session in sessions]
