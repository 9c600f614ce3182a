import asyncio
import os
import time
import uuid
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from codearena.business.services.contest_status import run_status_sync
from codearena.config import Config, logger
from codearena.data.repositories import init_db, redis_client
from codearena.data.repositories.database import async_session_factory
from codearena.errors import register_exception_handlers
from codearena.presentation.middleware.rate_limit import RateLimitMiddleware
from codearena.presentation.routes import (
    auth_router,
    chat_router,
    contest_router,
    discussion_router,
    problem_router,
    profile_router,
    standing_router,
    submission_router,
    video_router,
)


class LoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        request_id = str(uuid.uuid4())
        request.state.request_id = request_id
        client = request.client.host if request.client else "unknown"
        logger.info(
            f"Request started: {request.method} {request.url.path} - "
            f"ID: {request_id} - Client: {client}"
        )
        start_time = time.time()
        try:
            response = await call_next(request)
            process_time = time.time() - start_time
            logger.info(
                f"Request completed: {request.method} {request.url.path} - "
                f"ID: {request_id} - Status: {response.status_code} - "
                f"Time: {process_time:.4f}s"
            )
            return response
        except Exception as e:
            process_time = time.time() - start_time
            logger.error(
                f"Request failed: {request.method} {request.url.path} - "
                f"ID: {request_id} - Error: {e} - "
                f"Time: {process_time:.4f}s"
            )
            raise


@asynccontextmanager
async def life_span(app: FastAPI):
    logger.info("Server is starting...")
    status_sync = None
    if os.environ.get("TESTING") != "True":
        try:
            await init_db()
            logger.info("Database initialized successfully")
        except Exception as e:
            logger.error(f"Failed to initialize database: {e}")
            raise
        status_sync = asyncio.create_task(
            run_status_sync(async_session_factory, Config.CONTEST_STATUS_SYNC_INTERVAL)
        )
    else:
        logger.info("Skipping database initialization for tests")
    yield
    if status_sync is not None:
        status_sync.cancel()
        with suppress(asyncio.CancelledError):
            await status_sync
    await redis_client.close()
    logger.info("Server has been stopped")


version = "v1"

app = FastAPI(
    title="CodeArena API",
    description="Competitive programming platform with judged submissions, timed contests, discussions and an AI tutor",
    version=version,
    lifespan=life_span,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=Config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.add_middleware(LoggingMiddleware)

if os.environ.get("TESTING") != "True":
    app.add_middleware(
        RateLimitMiddleware,
        limit=Config.RATE_LIMIT_REQUESTS,
        window=Config.RATE_LIMIT_WINDOW,
    )
    logger.info("Rate limiting middleware added")

register_exception_handlers(app)

app.include_router(auth_router)
app.include_router(profile_router)
app.include_router(problem_router)
app.include_router(submission_router)
app.include_router(contest_router)
app.include_router(standing_router)
app.include_router(discussion_router)
app.include_router(video_router)
app.include_router(chat_router)


@app.get("/health", tags=["health"])
async def health():
    return {"status": "ok"}


logger.info(f"Application startup complete - API version: {version}")
