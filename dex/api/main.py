"""FastAPI application serving a single liquidity pool."""

import os

import structlog
import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from dex import __version__
from dex.api.endpoints import router
from dex.errors import InvariantViolation, PoolError
from dex.safe_int import SafeIntError

logger = structlog.get_logger()

# Configuration from environment variables with sensible defaults
HOST = os.environ.get("DEX_HOST", "0.0.0.0")
PORT = int(os.environ.get("DEX_PORT", "8000"))
DEBUG = os.environ.get("DEX_DEBUG", "false").lower() in ("true", "1", "yes")

# Maximum request body size (64 KB); pool requests are a few hundred bytes
MAX_REQUEST_SIZE = 64 * 1024

app = FastAPI(
    title="Constant-product pool",
    description="Two-asset liquidity pool with share accounting and fee-retaining swaps",
    version=__version__,
)


@app.middleware("http")
async def limit_request_size(request: Request, call_next):  # type: ignore[no-untyped-def]
    """Reject requests with body larger than MAX_REQUEST_SIZE."""
    content_length = request.headers.get("content-length")
    if content_length and int(content_length) > MAX_REQUEST_SIZE:
        return JSONResponse(status_code=413, content={"detail": "Request too large"})
    return await call_next(request)


app.include_router(router)


@app.exception_handler(PoolError)
async def pool_error_handler(request: Request, exc: PoolError) -> JSONResponse:
    """Rejected pool operations become 400s with a stable error kind."""
    status_code = 500 if isinstance(exc, InvariantViolation) else 400
    logger.info("request_rejected", path=request.url.path, error=exc.kind, detail=str(exc))
    return JSONResponse(status_code=status_code, content={"error": exc.kind, "detail": str(exc)})


@app.exception_handler(SafeIntError)
async def arithmetic_error_handler(request: Request, exc: SafeIntError) -> JSONResponse:
    logger.warning("arithmetic_error", path=request.url.path, detail=str(exc))
    return JSONResponse(status_code=400, content={"error": "arithmetic_error", "detail": str(exc)})


@app.get("/health")
async def health() -> dict[str, object]:
    """Health check endpoint."""
    return {"status": "ok", "version": __version__}


def run() -> None:
    """Run the pool API server.

    Configuration via environment variables:
    - DEX_HOST: Host to bind to (default: 0.0.0.0)
    - DEX_PORT: Port to bind to (default: 8000)
    - DEX_DEBUG: Enable debug/reload mode (default: false)
    - DEX_ASSET1 / DEX_ASSET2: Asset pair of the served pool (default: TKA / TKB)
    """
    uvicorn.run(
        "dex.api.main:app",
        host=HOST,
        port=PORT,
        reload=DEBUG,
    )


if __name__ == "__main__":
    run()
