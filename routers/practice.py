# Flash mode for a logged-in student: one practice per session context.
from __future__ import annotations

import time
from typing import Callable, List

from fastapi import APIRouter, Depends, HTTPException

from deps.auth import require_student
from errors import InvalidTransition
from exercises import Level
from models import Student
from schemas.exercises import GroupSummary
from schemas.practice import (
    AnswerRequest,
    AnswerResponse,
    DecisionResponse,
    PracticeState,
    StartRequest,
)
from sequencer import RevealSequencer
from session_context import SessionContext
from store import DocumentStore, get_store

router = APIRouter(prefix="/practice", tags=["practice"])


def get_clock() -> Callable[[], float]:
    return time.monotonic


def _check_open(ctx: SessionContext) -> None:
    if ctx.closed:
        raise HTTPException(status_code=401, detail="Session has ended; log in again.")


def _active(ctx: SessionContext) -> RevealSequencer:
    _check_open(ctx)
    if ctx.practice is None:
        raise HTTPException(status_code=404, detail="No practice in progress.")
    return ctx.practice


def _profile(ctx: SessionContext, store: DocumentStore) -> Student:
    # Teachers may edit or delete the student while they are logged in.
    student = store.get_student(ctx.student_id)
    if student is None:
        raise HTTPException(status_code=401, detail="Student account no longer exists.")
    return student


@router.get("/exercises", response_model=List[GroupSummary])
def classroom_exercises(
    ctx: SessionContext = Depends(require_student),
    store: DocumentStore = Depends(get_store),
):
    return [
        {"level": g.level, "group": g.group, "total_questions": g.total_questions}
        for g in store.fetch_exercises(_profile(ctx, store).classroom)
    ]


@router.post("/start", response_model=PracticeState)
def start(
    req: StartRequest,
    ctx: SessionContext = Depends(require_student),
    store: DocumentStore = Depends(get_store),
    clock: Callable[[], float] = Depends(get_clock),
):
    student = _profile(ctx, store)
    exercise = store.fetch_exercise_group(student.classroom, req.group)
    if not exercise:
        raise HTTPException(status_code=404, detail="Exercise group not found")
    with ctx.lock:
        _check_open(ctx)
        if ctx.has_unsaved_progress():
            raise InvalidTransition("Save or discard the current practice before starting another.")
        if ctx.practice is not None:
            ctx.practice.exit()
        ctx.classroom = Level(student.classroom)
        ctx.flash_interval = student.flash_speed
        ctx.practice = RevealSequencer(exercise, ctx.student_id, ctx.flash_interval, clock=clock)
        return ctx.practice.snapshot()


@router.get("/state", response_model=PracticeState)
def state(ctx: SessionContext = Depends(require_student)):
    with ctx.lock:
        practice = _active(ctx)
        practice.advance()
        return practice.snapshot()


@router.post("/answer", response_model=AnswerResponse)
def answer(req: AnswerRequest, ctx: SessionContext = Depends(require_student)):
    with ctx.lock:
        practice = _active(ctx)
        record = practice.submit(req.response)
        return {
            "ok": True,
            "is_correct": record.is_correct,
            "question_id": record.question_id,
            "state": practice.snapshot(),
        }


@router.post("/exit", response_model=DecisionResponse)
def exit_practice(ctx: SessionContext = Depends(require_student)):
    with ctx.lock:
        practice = _active(ctx)
        if practice.exit():
            return {"ok": True, "needs_decision": True, "state": practice.snapshot()}
        ctx.practice = None
        return {"ok": True, "needs_decision": False}


@router.post("/save", response_model=DecisionResponse)
def save(
    ctx: SessionContext = Depends(require_student),
    store: DocumentStore = Depends(get_store),
):
    with ctx.lock:
        practice = _active(ctx)
        # A PersistenceError (or NotFound for a deleted student) leaves the
        # records on the sequencer.
        saved = practice.save(store.save_progress_batch)
        ctx.practice = None
        return {"ok": True, "saved": saved}


@router.post("/discard", response_model=DecisionResponse)
def discard(ctx: SessionContext = Depends(require_student)):
    with ctx.lock:
        practice = _active(ctx)
        n = practice.discard()
        ctx.practice = None
        return {"ok": True, "discarded": n}
