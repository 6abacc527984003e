"""Document store for students, exercise groups, progress events and uploads.

Every collection offers the same small surface: fetch-all, fetch-by-level
(where a level applies), create, update and delete. Database failures are
rolled back, logged and re-raised as PersistenceError.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional, Sequence, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from werkzeug.security import check_password_hash, generate_password_hash

from chunks import ExerciseChunk, merge_chunks, split_into_chunks
from config import MAX_QUESTIONS_PER_CHUNK
from db import SessionLocal
from errors import NotFound, PersistenceError, ValidationError
from exercises import (
    ExerciseGroup,
    Level,
    ProgressRecord,
    coerce_level,
    validate_exercise_group,
    validate_unique_groups,
)
from models import CsvFile, ExerciseChunkRow, ProgressEvent, Student

logger = logging.getLogger("flashmath.store")

_STUDENT_FIELDS = ("name", "age", "classroom", "flash_speed", "response_time")


def _chunk_row(chunk: ExerciseChunk) -> ExerciseChunkRow:
    return ExerciseChunkRow(
        level=chunk.level.value,
        group_name=chunk.group,
        chunk_number=chunk.chunk_number,
        total_chunks=chunk.total_chunks,
        total_questions=chunk.total_questions,
        questions=[q.model_dump() for q in chunk.questions],
    )


def _chunk_from_row(row: ExerciseChunkRow) -> ExerciseChunk:
    return ExerciseChunk(
        level=row.level,
        group=row.group_name,
        chunk_number=row.chunk_number,
        total_chunks=row.total_chunks,
        total_questions=row.total_questions,
        questions=row.questions or [],
    )


class DocumentStore:
    def __init__(
        self,
        session_factory: sessionmaker = SessionLocal,
        chunk_size: int = MAX_QUESTIONS_PER_CHUNK,
    ):
        self._session_factory = session_factory
        self.chunk_size = chunk_size

    @contextmanager
    def _session(self, action: str) -> Iterator[Session]:
        db = self._session_factory()
        try:
            yield db
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception("%s failed", action)
            raise PersistenceError(f"{action} failed: {type(e).__name__}") from e
        finally:
            db.close()

    # --- Students -----------------------------------------------------------------

    def list_students(self) -> List[Student]:
        with self._session("fetch students") as db:
            return db.query(Student).order_by(Student.name).all()

    def get_student(self, student_id: int) -> Optional[Student]:
        with self._session("fetch student") as db:
            return db.get(Student, student_id)

    def get_student_by_name(self, name: str) -> Optional[Student]:
        with self._session("fetch student") as db:
            return db.query(Student).filter(Student.name == name.strip()).first()

    def _check_name_free(self, db: Session, name: str, exclude_id: Optional[int] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name is required")
        q = db.query(Student).filter(Student.name == name)
        if exclude_id is not None:
            q = q.filter(Student.id != exclude_id)
        if q.first() is not None:
            raise ValidationError(f"A student named {name!r} already exists")
        return name

    def create_student(
        self,
        name: str,
        password: str,
        age: int,
        classroom: Any,
        flash_speed: float,
        response_time: int,
    ) -> Student:
        if not password:
            raise ValidationError("Password is required")
        level = coerce_level(classroom)
        with self._session("create student") as db:
            student = Student(
                name=self._check_name_free(db, name),
                password_hash=generate_password_hash(password),
                age=age,
                classroom=level.value,
                flash_speed=flash_speed,
                response_time=response_time,
            )
            db.add(student)
            db.commit()
            db.refresh(student)
        logger.info("created student %s (%s)", student.id, student.classroom)
        return student

    def update_student(self, student_id: int, changes: Dict[str, Any]) -> Optional[Student]:
        with self._session("update student") as db:
            student = db.get(Student, student_id)
            if student is None:
                return None
            for field in _STUDENT_FIELDS:
                if changes.get(field) is None:
                    continue
                value = changes[field]
                if field == "name":
                    value = self._check_name_free(db, value, exclude_id=student_id)
                elif field == "classroom":
                    value = coerce_level(value).value
                setattr(student, field, value)
            if changes.get("password"):
                student.password_hash = generate_password_hash(changes["password"])
            db.commit()
            db.refresh(student)
            return student

    def delete_student(self, student_id: int) -> bool:
        with self._session("delete student") as db:
            student = db.get(Student, student_id)
            if student is None:
                return False
            db.query(ProgressEvent).filter(ProgressEvent.student_id == student_id).delete(
                synchronize_session=False
            )
            db.delete(student)
            db.commit()
        logger.info("deleted student %s and their progress", student_id)
        return True

    def authenticate_student(self, name: str, password: str) -> Optional[Student]:
        student = self.get_student_by_name(name or "")
        if student is None or not check_password_hash(student.password_hash, password or ""):
            return None
        return student

    # --- Exercise groups ----------------------------------------------------------

    def _prepare_chunks(self, level: Level, groups: Sequence[ExerciseGroup]) -> List[ExerciseChunk]:
        for g in groups:
            if g.level != level:
                raise ValidationError(
                    f"Exercise group {g.group!r} is {g.level.value}, expected {level.value}"
                )
            validate_exercise_group(g)
        validate_unique_groups(list(groups))
        return [c for g in groups for c in split_into_chunks(g, self.chunk_size)]

    def replace_level(self, level: Any, groups: Sequence[ExerciseGroup]) -> int:
        """Swap every stored group of ``level`` for ``groups``; returns chunk count."""
        lvl = coerce_level(level)
        chunks = self._prepare_chunks(lvl, groups)
        with self._session("replace exercises") as db:
            db.query(ExerciseChunkRow).filter(ExerciseChunkRow.level == lvl.value).delete(
                synchronize_session=False
            )
            db.add_all(_chunk_row(c) for c in chunks)
            db.commit()
        logger.info("stored %d group(s) in %d chunk(s) for %s", len(groups), len(chunks), lvl.value)
        return len(chunks)

    def fetch_exercises(self, level: Any = None) -> List[ExerciseGroup]:
        with self._session("fetch exercises") as db:
            q = db.query(ExerciseChunkRow)
            if level is not None:
                q = q.filter(ExerciseChunkRow.level == coerce_level(level).value)
            rows = q.order_by(ExerciseChunkRow.id).all()
        return merge_chunks(_chunk_from_row(r) for r in rows)

    def fetch_exercise_group(self, level: Any, group: str) -> Optional[ExerciseGroup]:
        return next((g for g in self.fetch_exercises(level) if g.group == group), None)

    def delete_level(self, level: Any) -> int:
        lvl = coerce_level(level)
        with self._session("delete exercises") as db:
            n = (
                db.query(ExerciseChunkRow)
                .filter(ExerciseChunkRow.level == lvl.value)
                .delete(synchronize_session=False)
            )
            db.commit()
        logger.info("deleted %d chunk(s) for %s", n, lvl.value)
        return n

    # --- Uploads ------------------------------------------------------------------

    def import_upload(
        self,
        file_name: str,
        level: Any,
        uploaded_by: str,
        content: str,
        groups: Sequence[ExerciseGroup],
    ) -> Tuple[CsvFile, int]:
        """Store upload metadata and replace the level's groups in one transaction.

        Existing groups are left alone when the upload produced none.
        """
        if not (file_name or "").strip():
            raise ValidationError("File name is required")
        if not (uploaded_by or "").strip():
            raise ValidationError("Uploaded by is required")
        lvl = coerce_level(level)
        chunks = self._prepare_chunks(lvl, groups)

        with self._session("import upload") as db:
            meta = CsvFile(
                file_name=file_name.strip(),
                level=lvl.value,
                uploaded_by=uploaded_by.strip(),
                content=content,
                group_count=len(groups),
                question_count=sum(len(g.questions) for g in groups),
            )
            db.add(meta)
            if chunks:
                db.query(ExerciseChunkRow).filter(ExerciseChunkRow.level == lvl.value).delete(
                    synchronize_session=False
                )
                db.add_all(_chunk_row(c) for c in chunks)
            db.commit()
            db.refresh(meta)
        logger.info(
            "imported %s as %s: %d group(s), %d chunk(s)",
            meta.file_name,
            lvl.value,
            meta.group_count,
            len(chunks),
        )
        return meta, len(chunks)

    def list_csv_files(self) -> List[CsvFile]:
        with self._session("fetch csv files") as db:
            return db.query(CsvFile).order_by(CsvFile.uploaded_at.desc(), CsvFile.id.desc()).all()

    def get_csv_file(self, file_id: int) -> Optional[CsvFile]:
        with self._session("fetch csv file") as db:
            return db.get(CsvFile, file_id)

    def delete_csv_file(self, file_id: int) -> bool:
        with self._session("delete csv file") as db:
            meta = db.get(CsvFile, file_id)
            if meta is None:
                return False
            db.delete(meta)
            db.commit()
        return True

    # --- Progress -----------------------------------------------------------------

    def save_progress_batch(self, records: Sequence[ProgressRecord]) -> int:
        """All records are written, or none are."""
        with self._session("save progress") as db:
            for student_id in {r.student_id for r in records}:
                if db.get(Student, student_id) is None:
                    raise NotFound(f"Student {student_id} no longer exists")
            db.add_all(
                ProgressEvent(
                    student_id=r.student_id,
                    level=r.level.value,
                    exercise_group=r.exercise_group,
                    question_id=r.question_id,
                    response=r.response,
                    is_correct=r.is_correct,
                    timestamp=r.timestamp,
                )
                for r in records
            )
            db.commit()
        return len(records)

    def list_progress(self, student_id: Optional[int] = None) -> List[ProgressEvent]:
        with self._session("fetch progress") as db:
            q = db.query(ProgressEvent)
            if student_id is not None:
                q = q.filter(ProgressEvent.student_id == student_id)
            return q.order_by(ProgressEvent.timestamp, ProgressEvent.id).all()

    def progress_summary(self, student_id: int) -> List[Dict[str, Any]]:
        """Correct/total/percentage per (level, exercise group)."""
        totals: Dict[Tuple[str, str], Dict[str, Any]] = {}
        for ev in self.list_progress(student_id):
            row = totals.setdefault(
                (ev.level, ev.exercise_group),
                {"level": ev.level, "exercise_group": ev.exercise_group, "correct": 0, "total": 0},
            )
            row["total"] += 1
            if ev.is_correct:
                row["correct"] += 1
        for row in totals.values():
            row["percentage"] = round(row["correct"] * 100 / row["total"])
        return list(totals.values())


_store = DocumentStore()


def get_store() -> DocumentStore:
    return _store
