"""FastAPI application entrypoint."""

import logging
import os

from fastapi import FastAPI
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.responses import Response
from sqlalchemy import text

from paperbuddy import db
from paperbuddy.routers.attempts import router as attempts_router
from paperbuddy.routers.papers import router as papers_router
from paperbuddy.routers.proxy import router as proxy_router
from paperbuddy.routers.users import router as users_router
from paperbuddy.settings import settings
from paperbuddy.storage import ensure_dir

logger = logging.getLogger(__name__)

app = FastAPI(title=settings.app_name, version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)

_PUBLIC_PATHS = {
    "/health",
    "/health/deep",
    "/docs",
    "/openapi.json",
    "/redoc",
    "/favicon.ico",
}


@app.middleware("http")
async def enforce_api_key(request: Request, call_next):
    if request.method == "OPTIONS":
        return await call_next(request)

    if request.url.path in _PUBLIC_PATHS:
        return await call_next(request)

    expected_api_key = os.getenv("BACKEND_API_KEY", "").strip()
    if expected_api_key:
        received_api_key = request.headers.get("X-API-Key", "")
        if received_api_key != expected_api_key:
            return JSONResponse(status_code=401, content={"detail": "Unauthorized"})

    return await call_next(request)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields = sorted({".".join(str(part) for part in error.get("loc", ())[1:]) for error in exc.errors()} - {""})
    detail = "Missing or invalid fields: " + ", ".join(fields) if fields else "Invalid request body."
    logger.info("request rejected", extra={"path": request.url.path, "fields": fields})
    return JSONResponse(status_code=400, content={"detail": detail, "errors": jsonable_encoder(exc.errors())})


app.include_router(proxy_router, prefix="/api")
app.include_router(papers_router, prefix="/api")
app.include_router(users_router, prefix="/api")
app.include_router(attempts_router, prefix="/api")


@app.on_event("startup")
def on_startup() -> None:
    logging.basicConfig(level=settings.log_level.upper())
    ensure_dir(settings.data_path)
    db.create_db_and_tables()
    logger.info(
        "paperbuddy started",
        extra={
            "ai_configured": settings.ai_configured,
            "ocr_configured": settings.ocr_configured,
            "markscheme_backend": settings.markscheme_backend,
        },
    )


@app.get("/health", tags=["meta"])
def health() -> dict[str, bool]:
    return {"ok": True, "ai_configured": settings.ai_configured, "ocr_configured": settings.ocr_configured}


@app.get("/health/deep", tags=["meta"])
def deep_health() -> dict[str, bool | str]:
    db_ok = False
    try:
        with db.engine.connect() as connection:
            connection.execute(text("SELECT 1"))
        db_ok = True
    except Exception:  # noqa: BLE001
        logger.exception("database health probe failed")
        db_ok = False

    backend = settings.markscheme_backend.lower().strip()
    if backend == "remote":
        markscheme_source = settings.markscheme_base_url or ""
        markscheme_ok = bool(markscheme_source)
    else:
        markscheme_source = str(settings.markscheme_path)
        markscheme_ok = settings.markscheme_path.is_dir()

    return {
        "ok": True,
        "ai_configured": settings.ai_configured,
        "ocr_configured": settings.ocr_configured,
        "db_ok": db_ok,
        "data_dir": str(settings.data_path),
        "markscheme_backend": backend,
        "markscheme_source": markscheme_source,
        "markscheme_ok": markscheme_ok,
    }


@app.options("/{path:path}", include_in_schema=False)
async def preflight(path: str) -> Response:
    del path
    return Response(status_code=204)
