import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.adapters.clock import SystemClock
from src.adapters.jobs import PublishScheduler
from src.adapters.sqlite.migrator import SQLiteMigrator
from src.adapters.sqlite.repos import SQLitePostRepo
from src.api.deps import Settings, build_notifier, get_clock, get_settings
from src.app_shell.config import validate_ops_rules
from src.components.publish import PublishSweeper
from src.rules.loader import load_rules

# Logging setup
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def _resolve_settings(app: FastAPI) -> Settings:
    # Honour test overrides of get_settings outside the request cycle
    factory = app.dependency_overrides.get(get_settings, get_settings)
    settings: Settings = factory()
    return settings


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    settings = _resolve_settings(app)

    # Fail fast on bad rules or missing environment
    rules = load_rules(settings.rules_path)
    validate_ops_rules(rules)
    logger.info("Rules loaded from %s", settings.rules_path)

    SQLiteMigrator(settings.db_path, settings.migrations_dir).run_migrations()
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)

    clock: SystemClock = get_clock()
    sweeper = PublishSweeper(
        repo=SQLitePostRepo(settings.db_path),
        notifier=build_notifier(settings, rules),
        clock=clock,
    )
    app.state.sweeper = sweeper

    scheduler: PublishScheduler | None = None
    if rules.scheduling.enabled:
        scheduler = PublishScheduler(sweeper, interval_seconds=rules.scheduling.sweep_interval_seconds)
        scheduler.start()
    app.state.scheduler = scheduler

    yield

    if scheduler is not None:
        await scheduler.stop()
    else:
        await sweeper.drain()


app = FastAPI(
    title="Polyglot Blog API",
    version="0.1.0",
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# --- Routers ---
from src.api.routes import analytics, auth, posts, settings, upload  # noqa: E402

app.include_router(posts.router, prefix="/api/posts", tags=["Posts"])
app.include_router(auth.router, prefix="/api/auth", tags=["Auth"])
app.include_router(settings.router, prefix="/api/settings", tags=["Settings"])
app.include_router(upload.router, prefix="/api/upload", tags=["Upload"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])

# Uploaded variants are served as static files
app.mount(
    "/uploads",
    StaticFiles(directory=get_settings().uploads_dir, check_dir=False),
    name="uploads",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Error envelope ---
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    headers = getattr(exc, "headers", None)
    if exc.status_code == 404 and exc.detail == "Not Found":
        return JSONResponse(
            status_code=404,
            content={
                "error": "Not Found",
                "message": f"Route {request.method} {request.url.path} not found",
            },
        )
    if isinstance(exc.detail, dict):
        return JSONResponse(
            status_code=exc.status_code,
            content={"success": False, **exc.detail},
            headers=headers,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"success": False, "error": exc.detail},
        headers=headers,
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    errors = [
        {"field": ".".join(str(p) for p in err.get("loc", ())[1:]), "message": err.get("msg")}
        for err in exc.errors()
    ]
    return JSONResponse(
        status_code=400,
        content={"success": False, "error": "Invalid request", "errors": errors},
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": "Internal Server Error"},
    )


@app.get("/health")
def health_check() -> dict[str, Any]:
    """Health check endpoint."""
    return {"status": "ok", "service": "api"}
