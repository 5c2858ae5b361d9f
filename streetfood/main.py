"""
main.py – FastAPI app entry point (slim wire-up only).
Chỉ kết nối routes, error handlers và lifespan. Không chứa business logic.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .config import Settings
from .deps import Container, build_container
from .errors import AppError
from .routes import profile, reviews, system, trails, vendors

settings = Settings.from_env()

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(container: Optional[Container] = None) -> FastAPI:

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = getattr(app.state, "container", None) is None
        if owned:
            logger.info("Connecting database…")
            app.state.container = build_container(settings)
            app.state.container.database.create_all()
        logger.info("Ready.")
        yield
        if owned:
            app.state.container.database.dispose()
            app.state.container = None
        logger.info("Shutdown.")

    app = FastAPI(
        title="Street Food Finder API",
        description="Vendors, hygiene ratings, reviews và food trails cho street food.",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.container = container

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ── Error body: {"error": message} ─────────────────────────────────────────

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return _error(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return _error(400, _validation_message(exc))

    @app.exception_handler(AppError)
    async def app_error(request: Request, exc: AppError):
        return _error(exc.status_code, str(exc))

    app.include_router(system.router)
    app.include_router(vendors.router)
    app.include_router(reviews.router)
    app.include_router(trails.router)
    app.include_router(profile.router)
    return app


app = create_app()
