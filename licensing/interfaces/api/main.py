# licensing/interfaces/api/main.py
from __future__ import annotations

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from licensing.domain.errors import (
    ConflictError,
    InvalidEntityError,
    LicensingError,
    NotFoundError,
    ReferenceIntegrityError,
    ValidationError,
)
from licensing.infrastructure.config import get_settings

# Most specific first; the first isinstance match wins.
_STATUS_BY_ERROR: tuple[tuple[type[LicensingError], int], ...] = (
    (ValidationError, 400),
    (InvalidEntityError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (ReferenceIntegrityError, 409),
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    from licensing.infrastructure.duckdb_connection import get_connection
    get_connection()  # creates the schema on first use
    yield


app = FastAPI(
    title="Licence Requirements API",
    debug=get_settings().debug,
    lifespan=lifespan,
    docs_url="/api/docs",
    redoc_url=None,
)


@app.middleware("http")
async def add_security_headers(request: Request, call_next: object) -> Response:
    response = await call_next(request)  # type: ignore[misc]
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response  # type: ignore[return-value]


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(LicensingError)
async def licensing_error_handler(request: Request, exc: LicensingError) -> JSONResponse:
    status = next((code for cls, code in _STATUS_BY_ERROR if isinstance(exc, cls)), 500)
    content: dict[str, object] = {"detail": exc.message}
    if exc.details:
        content["details"] = exc.details
    return JSONResponse(status_code=status, content=content)


from licensing.interfaces.api.routes.category_routes import router as category_router  # noqa: E402
from licensing.interfaces.api.routes.licence_routes import router as licence_router  # noqa: E402

app.include_router(licence_router, prefix="/api")
app.include_router(category_router, prefix="/api")
