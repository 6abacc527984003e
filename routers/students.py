from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from deps.auth import require_teacher
from schemas.students import StudentCreate, StudentOut, StudentUpdate
from store import DocumentStore, get_store

router = APIRouter(prefix="/students", tags=["students"], dependencies=[Depends(require_teacher)])


@router.get("", response_model=List[StudentOut])
def list_students(store: DocumentStore = Depends(get_store)):
    return [StudentOut.model_validate(s) for s in store.list_students()]


@router.post("", response_model=StudentOut, status_code=201)
def create_student(req: StudentCreate, store: DocumentStore = Depends(get_store)):
    s = store.create_student(
        name=req.name,
        password=req.password,
        age=req.age,
        classroom=req.classroom,
        flash_speed=req.flash_speed,
        response_time=req.response_time,
    )
    return StudentOut.model_validate(s)


@router.get("/{student_id}", response_model=StudentOut)
def get_student(student_id: int, store: DocumentStore = Depends(get_store)):
    s = store.get_student(student_id)
    if not s:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentOut.model_validate(s)


@router.put("/{student_id}", response_model=StudentOut)
def update_student(student_id: int, req: StudentUpdate, store: DocumentStore = Depends(get_store)):
    s = store.update_student(student_id, req.model_dump(exclude_unset=True))
    if not s:
        raise HTTPException(status_code=404, detail="Student not found")
    return StudentOut.model_validate(s)


@router.delete("/{student_id}")
def delete_student(student_id: int, store: DocumentStore = Depends(get_store)):
    if not store.delete_student(student_id):
        raise HTTPException(status_code=404, detail="Student not found")
    return {"ok": True, "id": student_id}
