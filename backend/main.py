"""
FastAPI application factory.

Responsibilities
----------------
* Instantiate the FastAPI app.
* Register CORS middleware (origins from settings).
* Log every request.
* Render every error (raised ``ApiError``/``HTTPException``, body
  validation failures, unexpected exceptions) as a failure envelope.
* Mount the feature routers (auth, products, users).
* Expose /health and /ping for liveness checks and the client's
  connectivity probe.
"""

import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from auth.router import router as auth_router
from products.router import router as products_router
from users.router import router as users_router
from core.config import settings
from core.envelope import SERVER_ERROR, VALIDATION_ERROR, code_for_status, fail, ok
from core.logger import logger

app = FastAPI(title="Inventory Manager", version="1.0.0")

# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Authorization", "Content-Type"],
)


# ---------------------------------------------------------------------------
# Request-logging middleware
# ---------------------------------------------------------------------------
# Logs every inbound request: method, path, client IP, status, latency.
# Request bodies (passwords!) are NOT echoed; only the URL and metadata.


class _RequestLogMiddleware(BaseHTTPMiddleware):
    """Log method, path, client IP, response status and latency (ms)."""

    async def dispatch(self, request: Request, call_next) -> Response:
        start = time.perf_counter()
        response: Response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        client_ip = request.client.host if request.client else "unknown"

        logger.info(
            "%s %s | client=%s status=%d latency=%.1fms",
            request.method,
            request.url.path,
            client_ip,
            response.status_code,
            elapsed_ms,
        )
        return response


app.add_middleware(_RequestLogMiddleware)


# ---------------------------------------------------------------------------
# Error handlers
# ---------------------------------------------------------------------------


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException):
    code = getattr(exc, "code", None) or code_for_status(exc.status_code)
    return JSONResponse(
        status_code=exc.status_code,
        content=fail(code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


def _describe(error: dict) -> str:
    """Turn one pydantic error into 'field: message'."""
    loc = [str(part) for part in error.get("loc", ()) if part != "body"]
    msg = error.get("msg", "Invalid value")
    # Messages from our own field validators arrive as "Value error, <text>"
    if msg.startswith("Value error, "):
        msg = msg[len("Value error, "):]
    return f"{'.'.join(loc)}: {msg}" if loc else msg


@app.exception_handler(RequestValidationError)
async def _validation_error(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    message = "; ".join(_describe(e) for e in errors) or "Invalid request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=fail(VALIDATION_ERROR, message),
    )


@app.exception_handler(Exception)
async def _unhandled_error(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=fail(SERVER_ERROR, "Internal server error"),
    )


# ---------------------------------------------------------------------------
# Routers
# ---------------------------------------------------------------------------
app.include_router(auth_router)
app.include_router(products_router)
app.include_router(users_router)

# ---------------------------------------------------------------------------
# Health check
# ---------------------------------------------------------------------------


@app.on_event("startup")
async def _on_startup():
    logger.info("Inventory Manager service starting up")


@app.on_event("shutdown")
async def _on_shutdown():
    logger.info("Inventory Manager service shutting down")


@app.get("/health")
def health():
    return ok({"status": "ok"})


@app.get("/ping")
def ping():
    """Connectivity probe used by the client before login/register."""
    return ok({"pong": True})
