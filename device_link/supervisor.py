"""
Supervisor de reconexión del enlace.

Tarea asyncio opcional que sondea get_connected() y, ante una pérdida de
enlace, reintenta connect() con backoff exponencial acotado.
"""

import asyncio
import logging
from typing import Optional

from .config import LinkConfig
from .session import DeviceLinkSession


logger = logging.getLogger("device_link.supervisor")


class LinkSupervisor:
    """
    🔁 Link Supervisor - Reconexión automática best-effort.

    Ejemplo:
        supervisor = LinkSupervisor(session)
        supervisor.start()
        ...
        await supervisor.stop()
    """

    def __init__(self, session: DeviceLinkSession, config: Optional[LinkConfig] = None):
        self.session = session
        self.config = config or session.config
        self.attempts = 0
        self.gave_up = False
        self._task: Optional[asyncio.Task] = None

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Inicia la tarea de supervisión. Idempotente."""
        if self.is_running:
            return
        self.attempts = 0
        self.gave_up = False
        self._task = asyncio.get_running_loop().create_task(self._run())
        logger.info("Link supervisor started")

    async def stop(self) -> None:
        """Detiene la tarea de supervisión. Idempotente."""
        task = self._task
        self._task = None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Link supervisor stopped")

    async def disconnect(self) -> None:
        """Detiene la supervisión y desconecta la sesión."""
        await self.stop()
        await self.session.disconnect()

    async def _run(self) -> None:
        while True:
            if self.session.get_connected():
                self.attempts = 0
                await asyncio.sleep(self.config.poll_interval_seconds)
                continue

            if self.attempts >= self.config.reconnect_max_attempts:
                self.gave_up = True
                logger.error(
                    f"Giving up reconnection after {self.attempts} attempts"
                )
                return

            if self.attempts > 0:
                delay = self.config.backoff_delay(self.attempts - 1)
                logger.info(f"Reconnecting in {delay:.1f}s (attempt {self.attempts + 1})")
                await asyncio.sleep(delay)

            self.attempts += 1
            if await self.session.connect():
                logger.info("✅ Link re-established")
                self.attempts = 0
