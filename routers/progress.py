from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from deps.auth import require_teacher
from schemas.progress import ProgressOut, ProgressSummary
from store import DocumentStore, get_store

router = APIRouter(prefix="/progress", tags=["progress"], dependencies=[Depends(require_teacher)])


@router.get("", response_model=List[ProgressOut])
def list_progress(student_id: Optional[int] = None, store: DocumentStore = Depends(get_store)):
    return [ProgressOut.model_validate(p) for p in store.list_progress(student_id)]


@router.get("/summary", response_model=ProgressSummary)
def progress_summary(student_id: int, store: DocumentStore = Depends(get_store)):
    if not store.get_student(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    return {"student_id": student_id, "groups": store.progress_summary(student_id)}
