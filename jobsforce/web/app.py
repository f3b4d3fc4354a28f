"""FastAPI application factory."""

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from jobsforce.config import AppConfig, load_config
from jobsforce.scheduler import init_scheduler, shutdown_scheduler
from jobsforce.services import Services, build_services

from .jobs import router as jobs_router
from .recommendations import router as recommendations_router
from .schedule import router as schedule_router

logger = logging.getLogger("jobsforce.web")


def _load_default_config() -> AppConfig:
    path = os.environ.get("JOBSFORCE_CONFIG", "config.yaml")
    if os.path.exists(path):
        return load_config(path)
    logger.warning("Config file %s not found, using defaults", path)
    return AppConfig()


@asynccontextmanager
async def lifespan(app: FastAPI):
    services: Services = app.state.services

    # Startup: persistence worker, then periodic + bootstrap syncs
    services.writer.start()
    if services.config.sync.enabled:
        init_scheduler(services, bootstrap=True)

    yield

    # Shutdown
    shutdown_scheduler()
    services.writer.stop()


def create_app(config: Optional[AppConfig] = None, services: Optional[Services] = None) -> FastAPI:
    if services is None:
        services = build_services(config or _load_default_config())

    app = FastAPI(title="JobsForce API", lifespan=lifespan)
    app.state.services = services

    app.include_router(recommendations_router)
    app.include_router(jobs_router)
    app.include_router(schedule_router)

    @app.get("/")
    def index():
        return {"message": "JobsForce API is running"}

    return app
