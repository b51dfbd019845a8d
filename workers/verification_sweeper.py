"""
Periodic sweep of the verification ledger.

VerificationSweeper owns one asyncio task started in the app lifespan and
cancelled at shutdown. A failing iteration is logged and the loop carries on
at the next tick.
"""

from __future__ import annotations

import asyncio
from typing import Optional

from services.verification_service import EmailVerificationService
from shared.logging import get_logger

log = get_logger(__name__)


class VerificationSweeper:
    def __init__(
        self, service: EmailVerificationService, interval_seconds: float = 60.0
    ) -> None:
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self._service = service
        self._interval = interval_seconds
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="verification-sweeper")
        log.info("verification_sweeper_started", interval_seconds=self._interval)

    async def stop(self) -> None:
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        log.info("verification_sweeper_stopped")

    async def run_once(self) -> int:
        try:
            return await self._service.sweep()
        except Exception as e:
            log.error(
                "verification_sweep_failed",
                error=str(e),
                error_type=type(e).__name__,
            )
            return 0

    async def _run(self) -> None:
        while True:
            await asyncio.sleep(self._interval)
            await self.run_once()
