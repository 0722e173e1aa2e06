from dotenv import load_dotenv
import logging
import os

BASE_DIR = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
load_dotenv(os.path.join(BASE_DIR, ".env"))

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import HTTP_422_UNPROCESSABLE_ENTITY, HTTP_500_INTERNAL_SERVER_ERROR

from app.core.config import settings
from app.core.errors import AppError

# ───────────────── ROUTER IMPORTS ─────────────────
from app.routes.events import router as events_router
from app.routes.certificates import router as certificates_router
from app.routes.public_verify import router as public_verify_router
from app.routes.student_certificates import router as student_certificates_router
from app.routes.admin_certificates import router as admin_certificates_router
from app.routes.public_storage import router as public_storage_router

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="University Event Management API",
    description="Backend API for events, venue scheduling and certificates",
    version="1.0.0",
    docs_url="/docs" if settings.DEBUG else None,
    redoc_url="/redoc" if settings.DEBUG else None,
)

# ───────────────── ERROR HANDLERS ─────────────────

@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError):
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s (%s)", request.method, request.url.path, exc.message, exc.error)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "message": "Internal server error", "error": str(exc)},
    )


# ───────── SAFE VALIDATION HANDLER (FIXES UNICODE CRASH) ─────────

def _sanitize(obj):
    if isinstance(obj, (bytes, bytearray)):
        return f"<bytes:{len(obj)}>"
    if isinstance(obj, dict):
        return {k: _sanitize(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_sanitize(v) for v in obj]
    if isinstance(obj, Exception):
        return str(obj)
    return obj


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    safe_errors = _sanitize(exc.errors())
    return JSONResponse(
        status_code=HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": safe_errors},
    )

# ───────────────── CORS ─────────────────

origins = settings.origins_list or [
    "http://localhost:3000",
    "http://localhost:5173",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ───────────────── ROUTES ─────────────────

app.include_router(events_router, prefix=settings.API_PREFIX)
app.include_router(certificates_router, prefix=settings.API_PREFIX)
app.include_router(public_verify_router, prefix=settings.API_PREFIX)
app.include_router(student_certificates_router, prefix=settings.API_PREFIX)
app.include_router(admin_certificates_router, prefix=settings.API_PREFIX)
app.include_router(public_storage_router, prefix=settings.API_PREFIX)

# ───────────────── HEALTH ─────────────────

@app.get("/", tags=["Health"])
async def root():
    return {
        "status": "ok",
        "app": "University Event Management API",
        "env": settings.APP_ENV,
    }


@app.get("/health", tags=["Health"])
async def health():
    return {"status": "healthy"}
