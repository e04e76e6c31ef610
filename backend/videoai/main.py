from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException
from videoai.core.db import init_db
from videoai.core.logging_config import configure_logging
from videoai.api.v1 import auth, videos, jobs, captions, clips, analytics, health
from videoai.core.config import settings
import os

app = FastAPI(title=settings.PROJECT_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin],
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
def on_startup():
    configure_logging()
    for directory in (settings.UPLOADS_DIR, settings.PROCESSED_DIR, settings.CLIPS_DIR, settings.THUMBNAILS_DIR):
        os.makedirs(directory, exist_ok=True)
    init_db()

# the dashboard reads `message` from error bodies
@app.exception_handler(HTTPException)
def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail, "detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )

@app.exception_handler(RequestValidationError)
def validation_exception_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    message = first.get("msg", "Invalid request")
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(status_code=422, content={"message": message, "detail": message})

@app.get("/")
def read_root():
    return {"message": "Welcome to VideoAI Resizer API"}

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(auth.router, prefix="/api/auth", tags=["auth"])
app.include_router(videos.router, prefix="/api/videos", tags=["videos"])
app.include_router(jobs.router, prefix="/api/jobs", tags=["jobs"])
app.include_router(clips.router, prefix="/api/clips", tags=["clips"])
app.include_router(captions.router, prefix="/api/captions", tags=["captions"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["analytics"])
