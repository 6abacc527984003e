import logging
import os

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import CORS_ORIGINS
from errors import FlashMathError

# Routers
from routers.auth import router as auth_router
from routers.exercises import router as exercises_router
from routers.files import router as files_router
from routers.health import router as health_router
from routers.practice import router as practice_router
from routers.progress import router as progress_router
from routers.students import router as students_router

logger = logging.getLogger("flashmath")
logging.basicConfig(level=logging.INFO)

app = FastAPI(title="FlashMath API")

# Allow calls from the web front-end dev servers
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*", "x-session-token", "x-admin-token"],
)


@app.exception_handler(FlashMathError)
async def flashmath_error(request: Request, exc: FlashMathError):
    if exc.status_code >= 500:
        logger.warning("%s %s -> %s: %s", request.method, request.url.path, type(exc).__name__, exc)
    return JSONResponse(status_code=exc.status_code, content={"ok": False, "error": exc.message})


@app.get("/")
def health_root():
    return {"ok": True}


app.include_router(auth_router)  # /auth/...
app.include_router(students_router)  # /students/...
app.include_router(exercises_router)  # /exercises/...
app.include_router(files_router)  # /files/...
app.include_router(progress_router)  # /progress/...
app.include_router(practice_router)  # /practice/...
app.include_router(health_router)  # /health/...


def run() -> None:
    uvicorn.run(
        "main:app",
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "8000")),
    )


if __name__ == "__main__":
    run()
