"""Health check scheduler adapter.

Implements a long-running asyncio loop that re-runs the adapter health
check at a configurable interval, so the host platform keeps receiving
ONLINE/OFFLINE events after the initial connect.
"""

import asyncio
import logging
import signal

from changebridge.core.models import HealthStatus
from changebridge.core.ports import ChangeManagementPort

logger = logging.getLogger(__name__)

# Consecutive OFFLINE results before escalating to a critical log line.
OFFLINE_ALERT_THRESHOLD = 5


class HealthCheckScheduler:
    """Asyncio-based scheduler for periodic health checks."""

    def __init__(
        self,
        adapter: ChangeManagementPort,
        interval_seconds: int = 60,
        handle_signals: bool = True,
    ):
        """Initialize the scheduler.

        Args:
            adapter: ChangeManagementPort whose healthcheck is driven.
            interval_seconds: Interval between health checks in seconds.
            handle_signals: Install SIGTERM/SIGINT handlers that stop the loop.
        """
        self.adapter = adapter
        self.interval_seconds = interval_seconds
        self.handle_signals = handle_signals
        self.running = False
        self.last_status: HealthStatus | None = None
        self.consecutive_offline = 0
        self._task: asyncio.Task[None] | None = None

    async def start(self) -> None:
        """Start the scheduler loop and block until it is stopped."""
        if self.running:
            logger.warning("Health check scheduler already running")
            return

        self.running = True
        logger.info(
            f"Starting health check scheduler with {self.interval_seconds}s interval"
        )

        if self.handle_signals:
            self._setup_signal_handlers()

        self._task = asyncio.current_task()
        try:
            await self._run_loop()
        except asyncio.CancelledError:
            logger.info("Health check scheduler cancelled")
        finally:
            self.running = False
            self._task = None
            logger.info("Health check scheduler stopped")

    async def stop(self) -> None:
        """Stop the scheduler loop."""
        if not self.running:
            return

        logger.info("Stopping health check scheduler...")
        self.running = False

        if self._task and self._task is not asyncio.current_task():
            self._task.cancel()

    def _setup_signal_handlers(self) -> None:
        """Set up signal handlers for graceful shutdown."""
        try:
            loop = asyncio.get_running_loop()

            def _handle_signal(sig: int) -> None:
                logger.info(f"Received signal {sig}, initiating graceful shutdown...")
                asyncio.create_task(self.stop())

            loop.add_signal_handler(
                signal.SIGTERM, _handle_signal, signal.SIGTERM
            )
            loop.add_signal_handler(signal.SIGINT, _handle_signal, signal.SIGINT)
        except NotImplementedError:
            # Signal handlers not available on Windows
            logger.debug("Signal handlers not available on this platform")
        except (RuntimeError, ValueError) as e:
            logger.warning(f"Failed to set up signal handlers: {e}")

    async def run_once(self) -> HealthStatus | None:
        """Run a single health check and record its outcome.

        Returns:
            The emitted status, or None if the check itself raised.
        """
        try:
            status = await self.adapter.healthcheck()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.error(f"Health check raised unexpectedly: {e}", exc_info=True)
            return None

        if status is HealthStatus.OFFLINE:
            self.consecutive_offline += 1
            if self.consecutive_offline >= OFFLINE_ALERT_THRESHOLD:
                logger.critical(
                    f"Remote instance has been OFFLINE for {self.consecutive_offline} "
                    f"consecutive health checks. Manual intervention may be required."
                )
        else:
            if self.consecutive_offline:
                logger.info(
                    f"Remote instance back ONLINE after "
                    f"{self.consecutive_offline} failed health check(s)"
                )
            self.consecutive_offline = 0

        self.last_status = status
        return status

    async def _run_loop(self) -> None:
        """Main scheduler loop."""
        cycle_number = 0

        while self.running:
            cycle_number += 1
            logger.debug(f"Starting health check #{cycle_number}")
            await self.run_once()

            if self.running:
                await asyncio.sleep(self.interval_seconds)
