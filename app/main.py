"""
Internship Placement Portal - Main Application

FastAPI backend with:
- CSV files as storage, cached in memory per entity type
- Reader-writer locked repositories, one per CSV file
- JWT authentication with role-gated routes

Routes are plain `def` so FastAPI runs them in its threadpool; the
repository locks block, they must not run on the event loop.

Run: uvicorn app.main:app --reload
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import Settings, get_settings
from app.core.errors import (
    BusinessRuleError,
    InvalidInputError,
    PartialPersistenceError,
    PersistenceError,
    ResourceNotFoundError,
    UnauthorizedError,
)
from app.schemas.schemas import ErrorResponse
from app.services.container import ServiceContainer, build_container

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Map core errors to HTTP status codes."""

    def error_response(status_code: int, **fields) -> JSONResponse:
        body = ErrorResponse(**fields).model_dump(exclude_none=True)
        return JSONResponse(status_code=status_code, content=body)

    @app.exception_handler(ResourceNotFoundError)
    async def not_found_handler(request: Request, exc: ResourceNotFoundError):
        return error_response(404, detail=str(exc))

    @app.exception_handler(InvalidInputError)
    async def invalid_input_handler(request: Request, exc: InvalidInputError):
        return error_response(400, detail=str(exc))

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError):
        return error_response(401, detail=str(exc))

    @app.exception_handler(BusinessRuleError)
    async def business_rule_handler(request: Request, exc: BusinessRuleError):
        return error_response(422, detail=str(exc), rule=exc.rule.value)

    @app.exception_handler(PersistenceError)
    async def persistence_handler(request: Request, exc: PersistenceError):
        logger.error("Persistence failure on %s %s: %s", request.method, request.url.path, exc)
        if isinstance(exc, PartialPersistenceError):
            return error_response(
                500, detail=str(exc), entity=exc.entity, persisted=exc.persisted, failed=exc.failed
            )
        return error_response(500, detail=str(exc), entity=exc.entity)


def create_app(settings: Optional[Settings] = None, services: Optional[ServiceContainer] = None) -> FastAPI:
    """
    Build the FastAPI app.

    Repositories are created and loaded here, once, and shared by every
    request through app.state.services. Tests pass their own container.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title="Internship Placement Portal",
        description="""
    Role-based internship placement management.

    ## Roles
    - **Students**: Browse eligible internships, apply (max 3 active), accept a placement, request withdrawals
    - **Company Representatives**: Post internships (max 5), review applications, control visibility
    - **Career Center Staff**: Approve representatives, internships and withdrawal requests

    ## Storage
    - One CSV file per entity type, rewritten in full on every change
    """,
        version="1.0.0",
        docs_url="/docs",
        redoc_url="/redoc",
        debug=settings.debug,
    )
    app.state.services = services or build_container(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_exception_handlers(app)

    # Include API routes
    app.include_router(
        api_router,
        prefix="/api",
        responses={
            400: {"model": ErrorResponse},
            401: {"model": ErrorResponse},
            404: {"model": ErrorResponse},
            500: {"model": ErrorResponse},
        },
    )

    @app.get("/health", tags=["Health"])
    def health_check():
        """Health check with cached entity counts."""
        repos = app.state.services.repositories
        return {
            "status": "healthy",
            "data_dir": str(app.state.services.settings.data_dir),
            "entities": {r.entity_name: r.count() for r in repos.all()},
        }

    logger.info("Internship Placement Portal ready")
    return app


app = create_app()
