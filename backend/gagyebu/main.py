import time
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from gagyebu.api.offline import router as offline_router
from gagyebu.api.router import api_router
from gagyebu.core.config import get_settings
from gagyebu.core.db import init_db
from gagyebu.core.logging import configure_logging, get_logger

settings = get_settings()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    configure_logging()
    Path(settings.receipt_storage_dir).mkdir(parents=True, exist_ok=True)
    await init_db()
    logger.info("startup_complete", app_env=settings.app_env, ai_enabled=settings.ai_enabled)
    yield


app = FastAPI(title=settings.app_name, lifespan=lifespan)
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_request_timing(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - started) * 1000, 1)
    log_fields = {
        "method": request.method,
        "path": request.url.path,
        "status_code": response.status_code,
        "duration_ms": duration_ms,
    }
    if duration_ms > settings.slow_request_ms:
        logger.warning("slow_request", **log_fields)
    else:
        logger.debug("request_completed", **log_fields)
    return response


app.include_router(api_router)
app.include_router(offline_router)
app.mount(
    settings.receipt_public_base_url,
    StaticFiles(directory=settings.receipt_storage_dir, check_dir=False),
    name="receipts",
)


@app.get("/health")
async def health() -> dict[str, str]:
    return {"status": "ok"}
