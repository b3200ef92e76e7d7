"""
Fixed-interval scheduler for scan cycles.
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional

from .metrics import TICKS_SKIPPED_TOTAL

logger = logging.getLogger(__name__)


class PollingScheduler:
    """
    Fires `scan` every `interval` seconds.

    At most one scan runs at a time: a tick that fires while the previous
    scan is still in flight is dropped, not queued. Exceptions raised by a
    scan are logged and never stop the timer.

    Usage:
        scheduler = PollingScheduler(monitor.scan_once, interval=3.0)
        scheduler.start()
        ...
        await scheduler.stop()
    """

    def __init__(self,
                 scan: Callable[[], Awaitable[Any]],
                 interval: float = 3.0,
                 run_immediately: bool = True):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self._scan = scan
        self.interval = interval
        self.run_immediately = run_immediately

        self._timer_task: Optional[asyncio.Task] = None
        self._in_flight: Optional[asyncio.Task] = None
        self._stopped: Optional[asyncio.Event] = None
        self.ticks_fired = 0
        self.ticks_skipped = 0

    @property
    def is_running(self) -> bool:
        return self._timer_task is not None and not self._timer_task.done()

    @property
    def scan_in_flight(self) -> bool:
        return self._in_flight is not None and not self._in_flight.done()

    def start(self) -> None:
        """Start the timer on the running event loop"""
        if self.is_running:
            return
        self._stopped = asyncio.Event()
        self._timer_task = asyncio.create_task(self._timer_loop())
        logger.info(f"Scheduler started, interval {self.interval}s")

    def tick(self) -> bool:
        """Start a scan unless one is already in flight. Returns True if started."""
        if self.scan_in_flight:
            self.ticks_skipped += 1
            TICKS_SKIPPED_TOTAL.inc()
            logger.debug("previous scan still running, skipping tick")
            return False
        self.ticks_fired += 1
        self._in_flight = asyncio.create_task(self._run_scan())
        return True

    async def _run_scan(self) -> None:
        try:
            await self._scan()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.exception(f"scan failed: {e}")

    async def _timer_loop(self) -> None:
        if self.run_immediately:
            self.tick()
        while not self._stopped.is_set():
            try:
                await asyncio.wait_for(self._stopped.wait(), timeout=self.interval)
            except asyncio.TimeoutError:
                self.tick()

    def request_stop(self) -> None:
        """Stop firing new ticks. Safe to call from a signal handler."""
        if self._stopped is not None:
            self._stopped.set()

    async def wait_stopped(self) -> None:
        if self._stopped is not None:
            await self._stopped.wait()

    async def stop(self, timeout: Optional[float] = None) -> None:
        """
        Stop the timer and let an in-flight scan finish.

        If `timeout` is given and the scan does not finish in time it is
        cancelled.
        """
        self.request_stop()
        if self._timer_task is not None:
            await self._timer_task
            self._timer_task = None

        if self.scan_in_flight:
            logger.info("waiting for in-flight scan to finish")
            try:
                await asyncio.wait_for(asyncio.shield(self._in_flight), timeout=timeout)
            except asyncio.TimeoutError:
                logger.warning("in-flight scan did not finish in time, cancelling")
                self._in_flight.cancel()
                try:
                    await self._in_flight
                except asyncio.CancelledError:
                    pass
        logger.info("Scheduler stopped")

    async def run_forever(self) -> None:
        """Run until `request_stop` or `stop` is called"""
        self.start()
        await self.wait_stopped()
        await self.stop()
