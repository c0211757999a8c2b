import time
from fastapi import Request
from loguru import logger

SKIP_PATHS = ("/favicon.ico",)

async def request_logging_middleware(request: Request, call_next):
    path = request.url.path
    if path in SKIP_PATHS:
        return await call_next(request)

    start = time.perf_counter()
    try:
        response = await call_next(request)
    except Exception:
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.warning(f"{request.method} {path} -> 500 ({elapsed_ms:.1f} ms)")
        raise
    elapsed_ms = (time.perf_counter() - start) * 1000

    log = logger.warning if response.status_code >= 500 else logger.info
    log(f"{request.method} {path} -> {response.status_code} ({elapsed_ms:.1f} ms)")
    return response
