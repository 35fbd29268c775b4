import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from dialysis_care.config import get_settings
from dialysis_care.database import engine, Base
from dialysis_care.exceptions import DialysisCareError
from dialysis_care.logging_config import configure_logging
from dialysis_care.middleware.request_logging import RequestLoggingMiddleware
from dialysis_care.routers import analytics, clinical, events, images, patients, sessions
from dialysis_care.routers import auth as auth_router
import dialysis_care.models  # noqa: F401  (registers tables on Base.metadata)

settings = get_settings()
configure_logging(settings.log_level, settings.log_format)
logger = logging.getLogger(__name__)

REQUIRED_ERROR_TYPES = {"missing", "string_too_short"}


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database ready")
    yield
    # Shutdown
    await engine.dispose()


app = FastAPI(
    title="Home Dialysis Care API",
    description="Material issuance, self-reported dialysis sessions, evidence photos and clinical records",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PATCH", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


class NoCacheMiddleware(BaseHTTPMiddleware):
    """Patient data must not be cached by browsers or proxies."""
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate, proxy-revalidate, max-age=0"
        response.headers["Expires"] = "0"
        response.headers["Pragma"] = "no-cache"
        return response


app.add_middleware(NoCacheMiddleware)
app.add_middleware(RequestLoggingMiddleware)


# ============ ERROR ENVELOPE ============
def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    error = errors[0]
    names = [str(part) for part in error.get("loc", ()) if isinstance(part, str)]
    names = [n for n in names if n not in ("body", "query", "path", "form")]
    if not names:
        return "Request body is required"
    field = names[-1]
    if error.get("type") in REQUIRED_ERROR_TYPES:
        return f"{field} is required"
    return f"Invalid {field}"


@app.exception_handler(DialysisCareError)
async def handle_app_error(request: Request, exc: DialysisCareError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, **exc.extra})


@app.exception_handler(RequestValidationError)
async def handle_validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"message": _validation_message(exc)})


@app.exception_handler(StarletteHTTPException)
async def handle_http_error(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def handle_unexpected_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Server error"})


app.include_router(auth_router.router, prefix="/api/auth", tags=["Auth"])
app.include_router(sessions.router, prefix="/api/upload", tags=["Sessions"])
app.include_router(images.router, prefix="/api/upload", tags=["Images"])
app.include_router(patients.router, prefix="/api/upload", tags=["Patients"])
app.include_router(clinical.router, prefix="/api/clinical", tags=["Clinical"])
app.include_router(events.router, prefix="/api/clinical", tags=["Events"])
app.include_router(analytics.router, prefix="/api/analytics", tags=["Analytics"])


@app.get("/api/health")
async def health_check():
    return {"status": "healthy", "service": "dialysis-care-api"}
