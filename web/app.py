"""FastAPI application entry point for the teacher evaluation service."""
from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from web.config import get_settings
from web.exceptions import DocumentGenerationError, DuplicateDniError, MissingReference


logger = logging.getLogger("evaluaciones.web")
logging.basicConfig(level=logging.INFO)

settings = get_settings()

app = FastAPI(title="Sistema de Evaluación Docente", debug=settings.DEBUG)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition"],
)


@app.on_event("startup")
async def on_startup() -> None:
    """Log when the application starts."""
    logger.info("Teacher evaluation service starting up")


@app.get("/health")
async def health_check() -> dict[str, str]:
    """Simple health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Custom HTTP exception responses."""
    if exc.status_code == status.HTTP_404_NOT_FOUND:
        detail = exc.detail or "The requested resource was not found."
    else:
        detail = exc.detail or "An error occurred while processing the request."
    return JSONResponse({"detail": detail}, status_code=exc.status_code)


@app.exception_handler(MissingReference)
async def missing_reference_handler(request: Request, exc: MissingReference):
    """A referenced teacher or evaluation does not exist."""
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_404_NOT_FOUND)


@app.exception_handler(DuplicateDniError)
async def duplicate_dni_handler(request: Request, exc: DuplicateDniError):
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_409_CONFLICT)


@app.exception_handler(DocumentGenerationError)
async def document_generation_handler(request: Request, exc: DocumentGenerationError):
    """Report generation failed; the message is meant for the end user."""
    logger.error(f"Document generation failed ({exc.operation}): {exc.cause}")
    return JSONResponse({"detail": str(exc)}, status_code=status.HTTP_500_INTERNAL_SERVER_ERROR)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Catch-all handler for unhandled errors."""
    logger.exception(f"Unhandled exception: {exc}")
    return JSONResponse(
        {"detail": "Internal server error. Please try again later."},
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


# Import routes after app and middleware are configured to avoid circular imports.
from web.routes import evaluations as evaluation_routes  # noqa: E402  pylint: disable=wrong-import-position
from web.routes import teachers as teacher_routes  # noqa: E402  pylint: disable=wrong-import-position

app.include_router(teacher_routes.router, prefix="/teachers", tags=["teachers"])
app.include_router(evaluation_routes.router, prefix="/evaluations", tags=["evaluations"])
