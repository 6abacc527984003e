"""Timed reveal of one exercise group, question by question.

Phases per question:

    idle --startup--> revealing(0) --interval--> ... revealing(n-1)
         --interval--> awaiting_input --submit--> feedback --delay--> idle (next)
                                                                  \\-> complete

A single deadline stands in for the one running timer. ``advance()`` reads
the clock and fires every transition that is due; deadlines chain from the
previous deadline, so the result does not depend on how often callers poll.
"""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from config import (
    FEEDBACK_DELAY_S,
    FLASH_INTERVAL_MAX,
    FLASH_INTERVAL_MIN,
    STARTUP_DELAY_S,
)
from errors import InvalidTransition, PersistenceError, ValidationError
from exercises import ExerciseGroup, Number, ProgressRecord, Question

logger = logging.getLogger("flashmath.practice")

Clock = Callable[[], float]
Persist = Callable[[List[ProgressRecord]], Any]

_INT_RE = re.compile(r"[+-]?[0-9]+")


class Phase(str, Enum):
    IDLE = "idle"
    REVEALING = "revealing"
    AWAITING_INPUT = "awaiting_input"
    FEEDBACK = "feedback"
    COMPLETE = "complete"  # save/discard decision pending
    CLOSED = "closed"


@dataclass(frozen=True)
class SequencerEvent:
    kind: str  # question | reveal | input_ready | feedback | complete
    at: float
    question_id: Optional[int] = None
    index: Optional[int] = None
    value: Optional[Number] = None
    is_correct: Optional[bool] = None


def is_correct_response(response: str, correct_answer: Number) -> bool:
    """Integer comparison; anything that is not an integer is simply wrong."""
    s = (response or "").strip()
    if not _INT_RE.fullmatch(s):
        return False
    try:
        value = int(s)
    except ValueError:
        # longer than the interpreter's int-conversion digit limit
        return False
    return value == correct_answer


def check_flash_interval(seconds: float) -> float:
    if not (FLASH_INTERVAL_MIN <= seconds <= FLASH_INTERVAL_MAX):
        raise ValidationError(
            f"Flash speed must be between {FLASH_INTERVAL_MIN:g} and {FLASH_INTERVAL_MAX:g} seconds"
        )
    return float(seconds)


class RevealSequencer:
    def __init__(
        self,
        exercise: ExerciseGroup,
        student_id: int,
        flash_interval: float,
        *,
        clock: Clock = time.monotonic,
        startup_delay: float = STARTUP_DELAY_S,
        feedback_delay: float = FEEDBACK_DELAY_S,
    ):
        if not exercise.questions:
            raise ValidationError(f"Exercise group {exercise.group!r} has no questions")
        self.exercise = exercise
        self.student_id = student_id
        self.flash_interval = check_flash_interval(flash_interval)
        self.startup_delay = startup_delay
        self.feedback_delay = feedback_delay
        self._clock = clock

        self._records: List[ProgressRecord] = []
        self._phase = Phase.IDLE
        self._question_index = 0
        self._stimulus_index = -1
        self._last_outcome: Optional[bool] = None
        self._deadline: Optional[float] = self._clock() + startup_delay

    # --- Read-only views ----------------------------------------------------------

    @property
    def phase(self) -> Phase:
        return self._phase

    @property
    def records(self) -> List[ProgressRecord]:
        return list(self._records)

    @property
    def question(self) -> Question:
        return self.exercise.questions[self._question_index]

    @property
    def needs_decision(self) -> bool:
        return self._phase == Phase.COMPLETE and bool(self._records)

    @property
    def timer_pending(self) -> bool:
        return self._deadline is not None

    @property
    def visible_number(self) -> Optional[Number]:
        if self._phase != Phase.REVEALING:
            return None
        return self.question.numbers[self._stimulus_index]

    def snapshot(self) -> Dict[str, Any]:
        questions = self.exercise.questions
        active = self._phase not in (Phase.COMPLETE, Phase.CLOSED)
        return {
            "phase": self._phase.value,
            "level": self.exercise.level.value,
            "group": self.exercise.group,
            "question_index": self._question_index,
            "question_id": self.question.id if active else None,
            "question_count": len(questions),
            "stimulus_index": self._stimulus_index if self._phase == Phase.REVEALING else None,
            "stimulus_count": len(self.question.numbers) if active else None,
            "visible_number": self.visible_number,
            "last_outcome": self._last_outcome if self._phase == Phase.FEEDBACK else None,
            "pending_records": len(self._records),
            "needs_decision": self.needs_decision,
        }

    # --- Time-driven transitions --------------------------------------------------

    def advance(self) -> List[SequencerEvent]:
        now = self._clock()
        events: List[SequencerEvent] = []
        while self._deadline is not None and now >= self._deadline:
            events.append(self._fire(self._deadline))
        return events

    def _fire(self, at: float) -> SequencerEvent:
        q = self.question

        if self._phase == Phase.IDLE:
            self._phase = Phase.REVEALING
            self._stimulus_index = 0
            self._deadline = at + self.flash_interval
            return SequencerEvent("reveal", at, q.id, 0, q.numbers[0])

        if self._phase == Phase.REVEALING:
            nxt = self._stimulus_index + 1
            if nxt < len(q.numbers):
                self._stimulus_index = nxt
                self._deadline = at + self.flash_interval
                return SequencerEvent("reveal", at, q.id, nxt, q.numbers[nxt])
            self._phase = Phase.AWAITING_INPUT
            self._stimulus_index = -1
            self._deadline = None
            return SequencerEvent("input_ready", at, q.id)

        if self._phase == Phase.FEEDBACK:
            if self._question_index + 1 < len(self.exercise.questions):
                self._question_index += 1
                self._phase = Phase.IDLE
                self._last_outcome = None
                self._deadline = at + self.startup_delay
                return SequencerEvent("question", at, self.question.id)
            self._phase = Phase.COMPLETE
            self._deadline = None
            return SequencerEvent("complete", at)

        # No timer runs in any other phase.
        raise InvalidTransition(f"no timed transition from {self._phase.value}")

    # --- Learner actions ----------------------------------------------------------

    def submit(self, response: str) -> ProgressRecord:
        self.advance()
        if self._phase != Phase.AWAITING_INPUT:
            raise InvalidTransition(f"cannot submit an answer while {self._phase.value}")

        q = self.question
        correct = is_correct_response(response, q.correct_answer)
        record = ProgressRecord(
            student_id=self.student_id,
            level=self.exercise.level,
            exercise_group=self.exercise.group,
            question_id=q.id,
            response=response,
            is_correct=correct,
        )
        self._records.append(record)
        self._last_outcome = correct
        self._phase = Phase.FEEDBACK
        self._deadline = self._clock() + self.feedback_delay
        return record

    def exit(self) -> bool:
        """Stop the timer. True means a save/discard decision is now required."""
        self._deadline = None
        if self._phase == Phase.CLOSED:
            return False
        if self._records:
            self._phase = Phase.COMPLETE
            return True
        self._phase = Phase.CLOSED
        return False

    def save(self, persist: Persist) -> int:
        if not self.needs_decision:
            raise InvalidTransition("nothing to save; finish or exit the session first")
        batch = list(self._records)
        try:
            persist(batch)
        except PersistenceError:
            logger.exception(
                "saving %d record(s) for student %s failed; keeping them for retry",
                len(batch),
                self.student_id,
            )
            raise
        self._records.clear()
        self._phase = Phase.CLOSED
        logger.info("saved %d record(s) for student %s", len(batch), self.student_id)
        return len(batch)

    def discard(self) -> int:
        n = len(self._records)
        self._records.clear()
        self._deadline = None
        self._phase = Phase.CLOSED
        return n
