# gymtrack/core/lifespan.py

import asyncio
import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from gymtrack.core.database import engine, Base

# models must be imported before create_all
from gymtrack.domains.device import models  # noqa: F401

from gymtrack.core.scheduler import create_scheduler
from gymtrack.domains.device.registrar import NotificationRegistrar

logger = logging.getLogger(__name__)

background_tasks = set()

@asynccontextmanager
async def lifespan(app: FastAPI):
    # [Startup]
    logger.info("🚀 [System] Starting GymTrack: device store and scheduler")

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("✅ [Database] tables checked")

    # started first so the registrar sees jobs restored from the job store
    scheduler = create_scheduler()
    scheduler.start()
    app.state.scheduler = scheduler

    # notification setup must not hold up startup
    registrar = NotificationRegistrar(scheduler=scheduler)
    task = asyncio.create_task(registrar.run())
    background_tasks.add(task)
    task.add_done_callback(background_tasks.discard)

    yield

    # [Shutdown]
    # the registrar may still be scheduling the reminder
    if not task.done():
        logger.info("🛑 [System] Cancelling notification setup")
        task.cancel()
    await asyncio.gather(task, return_exceptions=True)

    logger.info("🛑 [System] Stopping scheduler")
    scheduler.shutdown()
    await engine.dispose()
