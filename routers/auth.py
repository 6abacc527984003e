from fastapi import APIRouter, Depends, HTTPException

from deps.auth import require_student
from schemas.practice import LoginRequest, LoginResponse
from session_context import SessionContext, SessionRegistry, get_registry
from store import DocumentStore, get_store

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=LoginResponse)
def login(
    req: LoginRequest,
    store: DocumentStore = Depends(get_store),
    registry: SessionRegistry = Depends(get_registry),
):
    student = store.authenticate_student(req.name, req.password)
    if not student:
        raise HTTPException(status_code=401, detail="Invalid name or password.")
    ctx = registry.login(student)
    return {
        "ok": True,
        "token": ctx.token,
        "student_id": ctx.student_id,
        "name": ctx.name,
        "classroom": ctx.classroom,
        "flash_speed": ctx.flash_interval,
    }


@router.post("/logout")
def logout(
    ctx: SessionContext = Depends(require_student),
    registry: SessionRegistry = Depends(get_registry),
):
    registry.logout(ctx.token)
    return {"ok": True}


@router.get("/me")
def me(ctx: SessionContext = Depends(require_student)):
    return {
        "ok": True,
        "student_id": ctx.student_id,
        "name": ctx.name,
        "classroom": ctx.classroom,
        "flash_speed": ctx.flash_interval,
        "practicing": ctx.practice is not None,
    }
