from __future__ import annotations

import logging
import time
from typing import Callable

from consent_service.session import ConsentFormSession

logger = logging.getLogger(__name__)


class FormSessionStore:
    """In-process registry of open consent forms.

    Forms live only in memory and are dropped after ``ttl_seconds`` without
    access. Nothing is persisted.
    """

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, ConsentFormSession] = {}
        self._expiry: dict[str, float] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _touch(self, form_id: str) -> None:
        self._expiry[form_id] = self._clock() + self.ttl_seconds

    def purge_expired(self) -> int:
        now = self._clock()
        expired = [form_id for form_id, deadline in self._expiry.items() if now > deadline]
        for form_id in expired:
            self._sessions.pop(form_id, None)
            self._expiry.pop(form_id, None)
        if expired:
            logger.info("Dropped %d idle form session(s)", len(expired))
        return len(expired)

    def add(self, session: ConsentFormSession) -> ConsentFormSession:
        self.purge_expired()
        self._sessions[session.form_id] = session
        self._touch(session.form_id)
        return session

    def get(self, form_id: str) -> ConsentFormSession | None:
        self.purge_expired()
        session = self._sessions.get(form_id)
        if session is not None:
            self._touch(form_id)
        return session

    def discard(self, form_id: str) -> bool:
        self._expiry.pop(form_id, None)
        return self._sessions.pop(form_id, None) is not None
