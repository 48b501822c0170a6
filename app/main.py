import os
import time
import hashlib
import logging
from typing import Dict
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .cache import cache_stats
from .config import settings
from .routers.recommend import router as recommend_router
from .routers.sessions import router as sessions_router, store as session_store
from .security import create_jwt


structlog.configure(
    wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, settings.log_level.upper(), logging.INFO)),
)
logger = structlog.get_logger("fitroom")


app = FastAPI(title="Fitroom Size Recommender", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)


# Token-bucket rate limit per client: ident -> (tokens, last refill time)
_buckets: Dict[str, tuple[float, float]] = {}


def _rate_limit(ident: str, requests_per_min: int, burst: int) -> bool:
    """Spend one token for ``ident``; False when the bucket is empty."""
    refill_rate = requests_per_min / 60.0
    capacity = float(burst)
    now = time.time()
    if ident not in _buckets:
        # a bucket idle long enough to refill completely carries no state
        full_after = capacity / refill_rate if refill_rate > 0 else float("inf")
        for stale in [k for k, (_, last) in _buckets.items() if now - last >= full_after]:
            _buckets.pop(stale, None)
    tokens, last = _buckets.get(ident, (capacity, now))
    tokens = min(capacity, tokens + refill_rate * (now - last))
    allowed = tokens >= 1.0
    _buckets[ident] = (tokens - 1.0 if allowed else tokens, now)
    return allowed


def _validate_config() -> None:
    errors = []
    if not settings.api_key or settings.api_key == "change-me":
        errors.append("API_KEY must be set to a secure value")
    if not settings.jwt_secret or settings.jwt_secret == "dev-secret":
        errors.append("JWT_SECRET must be set to a secure value")
    if settings.session_ttl_seconds <= 0:
        errors.append("SESSION_TTL_SECONDS must be positive")
    if errors and os.getenv("STRICT_CONFIG", "0") == "1":
        raise RuntimeError("Configuration error: " + "; ".join(errors))
    for e in errors:
        logger.warning("config_warning", warning=e)


def _client_ip(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def _request_id(request: Request) -> str:
    return hashlib.md5(f"{_client_ip(request)}{time.time()}".encode()).hexdigest()[:8]


def _utc_now() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.time()
    log = logger.bind(request_id=_request_id(request), path=request.url.path, method=request.method)
    client_ip = _client_ip(request)

    if not _rate_limit(client_ip, settings.rate_limit_per_min, settings.rate_limit_burst):
        log.warning("rate_limit_exceeded", client_ip=client_ip)
        return JSONResponse(status_code=429, content={"detail": "Too Many Requests"})

    log.info("request_started", client_ip=client_ip)
    status_code = 500
    try:
        resp = await call_next(request)
        status_code = resp.status_code
        return resp
    except Exception as e:
        log.error("request_failed", error=str(e), exc_info=True)
        raise
    finally:
        log.info("request_completed", status=status_code, duration_ms=int((time.time() - start) * 1000))


@app.exception_handler(Exception)
async def handle_exceptions(request: Request, exc: Exception):
    request_id = _request_id(request)
    logger.error("unhandled_exception", request_id=request_id, path=request.url.path,
                 error_type=type(exc).__name__, error=str(exc), exc_info=True)
    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_code": "INTERNAL_ERROR",
            "request_id": request_id,
            "timestamp": _utc_now(),
        },
    )


@app.get("/v1/health")
async def health():
    return {"status": "ok"}


@app.get("/v1/debug/status")
async def debug_status():
    """Cache, session and rate-limit counters."""
    return {
        "status": "ok",
        "timestamp": _utc_now(),
        "cache": cache_stats(),
        "sessions": {
            "active": len(session_store),
            "ttl_seconds": settings.session_ttl_seconds,
        },
        "rate_limiting": {
            "requests_per_min": settings.rate_limit_per_min,
            "burst_capacity": settings.rate_limit_burst,
            "active_buckets": len(_buckets)
        }
    }


@app.post("/v1/auth/token")
async def issue_token():
    token = create_jwt("storefront")
    return {"token": token}


# Routers under versioned prefix
app.include_router(recommend_router, prefix="/v1")
app.include_router(sessions_router, prefix="/v1")

# Validate configuration at import time (warnings by default; set STRICT_CONFIG=1 to enforce)
_validate_config()
