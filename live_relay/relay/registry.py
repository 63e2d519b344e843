"""Process-wide table of live relay sessions keyed by session id."""

from __future__ import annotations

import logging
import contextlib

from .session import RelaySession

logger = logging.getLogger(__name__)


class SessionRegistry:
    def __init__(self) -> None:
        self._sessions: dict[str, RelaySession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def add(self, session: RelaySession) -> None:
        if session.session_id in self._sessions:
            raise ValueError(f"session {session.session_id!r} already registered")
        self._sessions[session.session_id] = session

    def get(self, session_id: str) -> RelaySession | None:
        return self._sessions.get(session_id)

    def remove(self, session_id: str) -> RelaySession | None:
        return self._sessions.pop(session_id, None)

    async def close_all(self) -> None:
        sessions = list(self._sessions.values())
        self._sessions.clear()
        for session in sessions:
            with contextlib.suppress(Exception):
                await session.close()
        if sessions:
            logger.info("closed %d relay sessions on shutdown", len(sessions))


__all__ = ["SessionRegistry"]
