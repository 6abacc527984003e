from __future__ import annotations

import logging
import secrets
import threading
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Dict, Optional

from errors import InvalidTransition
from exercises import Level
from models import Student
from sequencer import RevealSequencer

logger = logging.getLogger("flashmath.auth")


@dataclass
class SessionContext:
    """Everything a logged-in student's requests need, created at login."""

    token: str
    student_id: int
    name: str
    classroom: Level
    flash_interval: float
    logged_in_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    practice: Optional[RevealSequencer] = None
    # set by logout; requests already past authentication must not reuse it
    closed: bool = False
    # one practice transition at a time per student
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def has_unsaved_progress(self) -> bool:
        return self.practice is not None and bool(self.practice.records)


class SessionRegistry:
    def __init__(self) -> None:
        self._contexts: Dict[str, SessionContext] = {}
        self._lock = threading.Lock()

    def login(self, student: Student) -> SessionContext:
        ctx = SessionContext(
            token=secrets.token_urlsafe(32),
            student_id=student.id,
            name=student.name,
            classroom=Level(student.classroom),
            flash_interval=student.flash_speed,
        )
        with self._lock:
            self._contexts[ctx.token] = ctx
        logger.info("student %s logged in", student.id)
        return ctx

    def get(self, token: Optional[str]) -> Optional[SessionContext]:
        if not token:
            return None
        with self._lock:
            return self._contexts.get(token)

    def logout(self, token: str) -> None:
        ctx = self.get(token)
        if ctx is None:
            return
        # Lock order is always ctx.lock, then the registry lock.
        with ctx.lock:
            if ctx.closed:
                return
            if ctx.has_unsaved_progress():
                raise InvalidTransition("Save or discard your practice progress before logging out.")
            if ctx.practice is not None:
                ctx.practice.exit()
                ctx.practice = None
            ctx.closed = True
            with self._lock:
                self._contexts.pop(token, None)
        logger.info("student %s logged out", ctx.student_id)

    def clear(self) -> None:
        with self._lock:
            self._contexts.clear()


registry = SessionRegistry()


def get_registry() -> SessionRegistry:
    return registry
