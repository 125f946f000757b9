from __future__ import annotations

import logging
from contextlib import asynccontextmanager

import anyio
from fastapi import FastAPI

from fluxcontrol.core.config import Settings
from fluxcontrol.core.errors.exceptions import StartupError
from fluxcontrol.core.logging import setup_logging
from fluxcontrol.core.storage.r2 import ControlImageBucket, r2_enabled_from_env

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = getattr(app.state, "settings", None) or Settings.from_env()
    app.state.settings = settings
    setup_logging(settings.log_level)

    # Optional Cloudflare R2 client for uploaded control images.
    app.state.r2 = getattr(app.state, "r2", None)
    if app.state.r2 is None and r2_enabled_from_env():
        try:
            app.state.r2 = await anyio.to_thread.run_sync(ControlImageBucket.from_env)
        except Exception as exc:
            raise StartupError("Failed to initialize Cloudflare R2", cause=exc) from exc
        logger.info("Initialized Cloudflare R2 client: bucket=%s", app.state.r2.bucket)

    logger.info("Serving inputs for %s", settings.replicate_model)

    yield

    # No explicit R2 cleanup required.
