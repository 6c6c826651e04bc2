"""HTTP API and frontend for the task tracker."""

import logging
import time
from pathlib import Path

from fastapi import APIRouter, Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import FileResponse, JSONResponse
from pydantic import BaseModel

from .config import APP_NAME, Settings, setup_logging
from .engine import TaskEngine
from .errors import StorageError, TaskValidationError
from .models import iso_timestamp

logger = logging.getLogger(__name__)

_PROCESS_START = time.monotonic()

API_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def process_uptime() -> float:
    """Seconds since this process loaded the server module."""
    return time.monotonic() - _PROCESS_START


class TaskCreateRequest(BaseModel):
    """Body of POST /api/tasks. Everything optional; the engine validates."""

    name: str | None = None
    date: str | None = ""
    time: str | None = ""
    description: str | None = ""
    priority: bool | None = False


def get_engine(request: Request) -> TaskEngine:
    return request.app.state.engine


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def _fail(status_code: int, error: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"ok": False, "error": error})


# --- Task API ---

api_router = APIRouter(prefix="/api")


@api_router.get("/tasks")
def list_tasks(engine: TaskEngine = Depends(get_engine)):
    try:
        tasks = engine.list_tasks()
    except StorageError:
        logger.exception("Failed to read tasks")
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to load tasks.")
    return {"ok": True, "tasks": [t.to_api() for t in tasks]}


@api_router.post("/tasks")
def create_task(
    payload: TaskCreateRequest | None = None,
    engine: TaskEngine = Depends(get_engine),
):
    payload = payload or TaskCreateRequest()
    try:
        event = engine.create_task(
            name=payload.name,
            date=payload.date,
            time=payload.time,
            description=payload.description,
            priority=bool(payload.priority),
        )
    except TaskValidationError as e:
        return _fail(status.HTTP_400_BAD_REQUEST, str(e))
    except StorageError:
        logger.exception("Failed to create task")
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to create task.")
    return JSONResponse(status_code=status.HTTP_201_CREATED, content={"ok": True, "id": event.id})


# ``path`` also matches the empty string, so "/api/tasks/" lands here
# and is rejected as a missing id.
@api_router.delete("/tasks/{task_id:path}")
def delete_task(task_id: str, engine: TaskEngine = Depends(get_engine)):
    try:
        engine.delete_task(task_id)
    except TaskValidationError as e:
        return _fail(status.HTTP_400_BAD_REQUEST, str(e))
    except StorageError:
        logger.exception(f"Failed to delete task {task_id}")
        return _fail(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to delete task.")
    return {"ok": True}


@api_router.api_route("", methods=API_METHODS, include_in_schema=False)
@api_router.api_route("/{rest:path}", methods=API_METHODS, include_in_schema=False)
def api_not_found(rest: str = ""):
    return _fail(status.HTTP_404_NOT_FOUND, "API route not found")


# --- Health & metrics ---

ops_router = APIRouter()


@ops_router.get("/health")
def health_check(settings: Settings = Depends(get_settings)):
    return {
        "status": "OK",
        "uptime": process_uptime(),
        "timestamp": iso_timestamp(),
        "version": settings.version,
        "environment": settings.environment,
    }


@ops_router.get("/metrics")
def metrics(engine: TaskEngine = Depends(get_engine)):
    try:
        counters = engine.metrics()
    except StorageError:
        logger.exception("Failed to compute metrics")
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"error": "Failed to get metrics"},
        )
    return {
        **counters,
        "server_timestamp": iso_timestamp(),
        "server_uptime": process_uptime(),
    }


# --- Frontend ---

frontend_router = APIRouter()


def _static_file(static_dir: Path, path: str) -> Path:
    """Resolve a request path to a file under static_dir, else index.html."""
    root = static_dir.resolve()
    if path:
        candidate = (root / path).resolve()
        if candidate.is_file() and candidate.is_relative_to(root):
            return candidate
    return root / "index.html"


@frontend_router.get("/{path:path}", include_in_schema=False)
def frontend(path: str, settings: Settings = Depends(get_settings)):
    return FileResponse(_static_file(settings.static_dir, path))


def create_app(settings: Settings | None = None, engine: TaskEngine | None = None) -> FastAPI:
    """Build the application.

    Args:
        settings: Service settings (defaults to the environment)
        engine: Pre-built engine; created from settings.event_file if omitted
    """
    if settings is None:
        settings = Settings()
    if engine is None:
        engine = TaskEngine(settings.event_file)

    logger.info(f"{APP_NAME} v{settings.version} ({settings.environment})")
    logger.info(f"Event log: {engine.event_store.path}")

    app = FastAPI(title=APP_NAME, version=settings.version)
    app.state.settings = settings
    app.state.engine = engine

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        logger.warning(f"Invalid request body for {request.url.path}: {exc.errors()}")
        return _fail(status.HTTP_400_BAD_REQUEST, "Invalid request body.")

    app.include_router(ops_router)
    app.include_router(api_router)
    app.include_router(frontend_router)
    return app


def run(settings: Settings | None = None) -> None:
    """Serve the app with uvicorn until interrupted."""
    import uvicorn

    if settings is None:
        settings = Settings()
    setup_logging(settings)
    app = create_app(settings)

    base = f"http://{settings.host}:{settings.port}"
    logger.info(f"{APP_NAME} listening on {base}")
    logger.info(f"Health: {base}/health")
    logger.info(f"Metrics: {base}/metrics")

    uvicorn.run(app, host=settings.host, port=settings.port, log_level=settings.log_level.lower())
    logger.info(f"{APP_NAME} stopped")
