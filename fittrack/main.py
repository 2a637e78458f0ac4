import logging
import os
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from dotenv import load_dotenv

# Load env from the project root .env before settings are read
if "PYTEST_CURRENT_TEST" not in os.environ:
    load_dotenv()

from fittrack.core.config import settings, validate_config
from fittrack.core.database import create_all_tables
from fittrack.core.logging import configure_logging
from fittrack.core.middleware.metrics import MetricsMiddleware
from fittrack.core.middleware.request_id import RequestIdMiddleware
from fittrack.core.validation import validate_env
from fittrack.core.errors import (
    AppError,
    app_error_handler,
    http_error_handler,
    unhandled_exception_handler,
)
from fittrack.api import diet, health, metrics, streaks, water, workouts

configure_logging(settings.ENV, settings.LOG_LEVEL)
validate_env()
validate_config(strict=getattr(settings, "CONFIG_STRICT", False))


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = logging.getLogger("fittrack")
    logger.info("Starting FitTrack backend...")
    app.state.startup_time = time.time()
    create_all_tables()
    try:
        yield
    finally:
        logging.getLogger("fittrack").info("Stopping FitTrack backend...")


app = FastAPI(title="FitTrack - Backend", lifespan=lifespan)

# Middlewares
app.add_middleware(RequestIdMiddleware)
app.add_middleware(MetricsMiddleware)

app.add_exception_handler(AppError, app_error_handler)
app.add_exception_handler(HTTPException, http_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(workouts.router)
app.include_router(diet.router)
app.include_router(water.router)
app.include_router(streaks.router)
app.include_router(health.router)
app.include_router(metrics.router)
