"""FastAPI lifespan hook for the analysis scheduler."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager, suppress

from fastapi import FastAPI


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run the scheduler loop in the background while the app is up."""
    context = app.state.context
    task = None
    if context.run_scheduler:
        task = asyncio.create_task(context.scheduler.run_forever())
    try:
        yield
    finally:
        context.scheduler.shutdown()
        if task is not None:
            task.cancel()
            with suppress(asyncio.CancelledError):
                await task
        await context.scheduler.close()
