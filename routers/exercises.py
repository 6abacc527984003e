from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import PlainTextResponse

from csv_importer import exercises_to_csv, parse_csv_to_exercises
from deps.auth import require_teacher
from exercises import ExerciseGroup, Level
from schemas.exercises import GroupSummary, UploadRequest, UploadResponse
from store import DocumentStore, get_store

router = APIRouter(prefix="/exercises", tags=["exercises"], dependencies=[Depends(require_teacher)])


def level_from_file_name(file_name: str) -> Level:
    return Level.JUNIOR if "junior" in file_name.lower() else Level.BASIC


@router.post("/upload", response_model=UploadResponse)
def upload_csv(req: UploadRequest, store: DocumentStore = Depends(get_store)):
    level = req.level or level_from_file_name(req.file_name)
    # Parse before touching the store so a bad file writes nothing.
    groups = parse_csv_to_exercises(req.content, level)
    meta, chunk_count = store.import_upload(
        file_name=req.file_name,
        level=level,
        uploaded_by=req.uploaded_by,
        content=req.content,
        groups=groups,
    )
    return {
        "ok": True,
        "file_id": meta.id,
        "level": level,
        "groups": len(groups),
        "questions": meta.question_count,
        "chunks": chunk_count,
    }


@router.get("", response_model=List[GroupSummary])
def list_exercises(level: Optional[Level] = None, store: DocumentStore = Depends(get_store)):
    return [
        {"level": g.level, "group": g.group, "total_questions": g.total_questions}
        for g in store.fetch_exercises(level)
    ]


@router.get("/export")
def export_csv(level: Optional[Level] = None, store: DocumentStore = Depends(get_store)):
    body = exercises_to_csv(store.fetch_exercises(level))
    name = f"exercises-{level.value.lower() if level else 'all'}.csv"
    return PlainTextResponse(
        body,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


# Group names may contain "/", so the rest of the path is the name.
@router.get("/{level}/{group:path}", response_model=ExerciseGroup)
def get_exercise_group(level: Level, group: str, store: DocumentStore = Depends(get_store)):
    ex = store.fetch_exercise_group(level, group)
    if not ex:
        raise HTTPException(status_code=404, detail="Exercise group not found")
    return ex


@router.delete("/{level}")
def delete_level(level: Level, store: DocumentStore = Depends(get_store)):
    n = store.delete_level(level)
    return {"ok": True, "level": level, "deleted_chunks": n}
