import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from streamhub.core.config import settings
from streamhub.core.db import SessionLocal
from streamhub.modules.subscriptions import service as subscriptions_service

logger = logging.getLogger(__name__)

async def expire_subscriptions(db: AsyncSession, **kwargs) -> Any:
    return await subscriptions_service.expire_due_subscriptions(db, today=kwargs.get("today"))

# task name -> coroutine taking a fresh session
JOBS: Dict[str, Callable[..., Awaitable[Any]]] = {
    "expire_subscriptions": expire_subscriptions,
}

class Worker:
    def __init__(
        self,
        session_factory: async_sessionmaker = SessionLocal,
        sweep_interval_seconds: Optional[int] = None,
    ):
        self.queue: asyncio.Queue = asyncio.Queue()
        self.session_factory = session_factory
        self.sweep_interval_seconds = (
            settings.SUBSCRIPTION_SWEEP_INTERVAL_SECONDS
            if sweep_interval_seconds is None
            else sweep_interval_seconds
        )
        self.is_running = False
        self._task = None
        self._scheduler = None

    async def start(self):
        """Starts the worker loop and, if an interval is set, the sweep scheduler."""
        if self.is_running:
            return
        self.is_running = True
        self._task = asyncio.create_task(self._process_queue())
        if self.sweep_interval_seconds > 0:
            self._scheduler = asyncio.create_task(self._schedule_sweeps())
        logger.info("[Worker] Started.")

    async def stop(self):
        """Stops the worker loop."""
        self.is_running = False
        for task in (self._scheduler, self._task):
            if task:
                task.cancel()
                try:
                    await task
                except asyncio.CancelledError:
                    pass
        self._task = None
        self._scheduler = None
        logger.info("[Worker] Stopped.")

    async def enqueue_job(self, task_name: str, **kwargs):
        """Adds a job to the queue."""
        if task_name not in JOBS:
            raise ValueError(f"Unknown job: {task_name}")
        logger.info(f"[Worker] Enqueuing job: {task_name} | Args: {kwargs}")
        await self.queue.put((task_name, kwargs))

    async def run_job(self, task_name: str, **kwargs) -> Any:
        """Runs one job to completion in its own session."""
        job = JOBS[task_name]
        async with self.session_factory() as db:
            return await job(db, **kwargs)

    async def _schedule_sweeps(self):
        while self.is_running:
            try:
                await self.enqueue_job("expire_subscriptions")
                await asyncio.sleep(self.sweep_interval_seconds)
            except asyncio.CancelledError:
                break

    async def _process_queue(self):
        """Main loop consuming jobs."""
        while self.is_running:
            try:
                task_name, kwargs = await self.queue.get()

                logger.info(f"[Worker] Processing: {task_name}")

                try:
                    result = await self.run_job(task_name, **kwargs)
                    logger.info(f"[Worker] Done: {task_name} -> {result}")
                except Exception as e:
                    logger.error(f"[Worker] Job Failed: {e}", exc_info=True)
                finally:
                    self.queue.task_done()

            except asyncio.CancelledError:
                break
            except Exception as e:
                logger.error(f"[Worker] Loop Error: {e}")
                await asyncio.sleep(1)

# Global Worker Instance
worker = Worker()
