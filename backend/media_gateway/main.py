import uuid
import time
import json
import logging
from datetime import datetime, timezone
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from media_gateway.core.config import Settings, settings as default_settings, validate_settings
from media_gateway.routers import files, health, uploads
from media_gateway.services.media_store import MediaStore, build_media_store

CORS_ALLOW_METHODS = ["GET", "POST", "PUT", "DELETE", "OPTIONS"]
CORS_ALLOW_HEADERS = ["Content-Type", "Authorization", "X-Requested-With"]


def create_app(settings: Settings | None = None, media_store: MediaStore | None = None) -> FastAPI:
    settings = settings or default_settings
    validate_settings(settings)

    logging.basicConfig(
        level=str(settings.log_level or "INFO").strip().upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("media_gateway")
    logging.getLogger("httpx").setLevel(logging.WARNING)

    app = FastAPI(title="Media Gateway API", version="1.0.0")
    app.state.settings = settings
    app.state.media_store = media_store if media_store is not None else build_media_store(settings)

    allow_origins = settings.allowed_origins()

    @app.middleware("http")
    async def request_id_middleware(request: Request, call_next):
        t0 = time.perf_counter()
        rid = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = rid
        status_code: int | None = None
        try:
            # Requests without an Origin (curl, mobile apps) are always let through.
            origin = (request.headers.get("origin") or "").strip()
            if origin and origin not in allow_origins:
                logger.warning("CORS blocked origin: %s", origin)
                response = JSONResponse(status_code=403, content={"error": f"Not allowed by CORS: {origin}"})
            else:
                response = await call_next(request)
            status_code = int(getattr(response, "status_code", 0) or 0)
        except Exception:
            status_code = 500
            raise
        finally:
            path = request.url.path
            if not (path == "/" or path.startswith("/health")):
                logger.info(
                    json.dumps(
                        {
                            "ts": datetime.now(timezone.utc).isoformat(),
                            "rid": rid,
                            "method": request.method,
                            "path": path,
                            "status": status_code,
                            "duration_ms": int((time.perf_counter() - t0) * 1000),
                        },
                        ensure_ascii=False,
                    )
                )
        response.headers["X-Request-ID"] = rid
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("Referrer-Policy", "no-referrer")
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        detail = exc.detail
        if isinstance(detail, dict):
            payload = dict(detail)
        else:
            payload = {"error": str(detail or "request failed")}
        return JSONResponse(status_code=int(exc.status_code), content=payload, headers=getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        first = errors[0] if errors else {}
        loc = ".".join(str(p) for p in (first.get("loc") or ()) if p not in {"body", "query", "path"})
        msg = str(first.get("msg") or "invalid request")
        return JSONResponse(status_code=400, content={"error": f"{loc}: {msg}" if loc else msg})

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(request: Request, exc: Exception):
        rid = getattr(getattr(request, "state", None), "request_id", None)
        logger.exception("unhandled exception", extra={"rid": rid})
        return JSONResponse(status_code=500, content={"error": "internal server error"})

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allow_origins,
        allow_credentials=True,
        allow_methods=CORS_ALLOW_METHODS,
        allow_headers=CORS_ALLOW_HEADERS,
    )

    app.include_router(health.router)
    app.include_router(uploads.router)
    app.include_router(files.router)

    return app


app = create_app()
