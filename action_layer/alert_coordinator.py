"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                🚨 Alert Coordinator - Airis-SH Control Center                ║
║              Layer 3: Emergency signal → business rules → fan-out            ║
╚══════════════════════════════════════════════════════════════════════════════╝

Punto de integración entre el evento de emergencia del dispositivo y el
motor de fan-out. Aplica las precondiciones de negocio y reporta el
resultado a la interfaz mediante listeners (patrón Observer).
"""

import asyncio
import logging
import threading
from collections import deque
from datetime import datetime
from typing import Any, Callable, Deque, Dict, List, Optional, Set

from alert_core.config import AlertConfig, config as default_config
from alert_core.models import (
    AlertError,
    AlertFailure,
    AlertOptions,
    AlertStatus,
    classify_status,
    describe_status,
)
from device_link.session import EmergencyObserver

from .fanout import AlertFanOutEngine
from .settings_store import Settings, SettingsStore


logger = logging.getLogger("action_layer.alert_coordinator")


class AlertCoordinator(EmergencyObserver):
    """
    🚨 Alert Coordinator - Reglas de negocio del ciclo de alerta.

    Por cada señal de emergencia:
    1. Toma un snapshot de contactos y plantilla del SettingsStore
    2. Sin contactos → reporta no_contacts
    3. Sin contactos con phone/email → reporta no_valid_contacts
    4. Ejecuta el fan-out con todos los canales
    5. Reporta el AlertOutcome (o dispatch_failed si algo explota)

    Si ya hay un ciclo en curso, la nueva señal se descarta y se reporta
    alert_in_progress.

    Ejemplo:
        coordinator = AlertCoordinator(store, engine)
        coordinator.add_status_listener(lambda status: print(status))
        session.set_callbacks(coordinator)
    """

    def __init__(
        self,
        store: SettingsStore,
        engine: Optional[AlertFanOutEngine] = None,
        config: Optional[AlertConfig] = None
    ):
        self.store = store
        self.config = config or default_config
        self.engine = engine or AlertFanOutEngine(config=self.config)

        self._in_flight = False
        self._flight_lock = threading.Lock()
        self._pending: Set[asyncio.Task] = set()
        self._threads: List[threading.Thread] = []

        # Historial de estados reportados
        self._history: Deque[Dict[str, Any]] = deque(maxlen=self.config.history_size)
        self._status_listeners: List[Callable[[AlertStatus], None]] = []

        # Cola para streaming async (SSE)
        self._event_queue: Optional[asyncio.Queue] = None

        self._configured_contacts = len(store.get_contacts())
        store.add_subscriber(self._on_settings_changed)

    @property
    def alert_in_flight(self) -> bool:
        return self._in_flight

    # ═══════════════════════════════════════════════════════════════════════
    # Entradas
    # ═══════════════════════════════════════════════════════════════════════

    def on_emergency_detected(self) -> None:
        """
        Callback síncrono invocado por DeviceLinkSession.

        Agenda el ciclo de alerta en el event loop activo sin bloquear la
        entrega de notificaciones. Sin loop activo, el ciclo corre en un
        hilo dedicado con su propio loop.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            thread = threading.Thread(
                target=asyncio.run,
                args=(self.handle_emergency(source="device"),),
                name="alert-cycle",
                daemon=True
            )
            self._threads.append(thread)
            thread.start()
            return

        task = loop.create_task(self.handle_emergency(source="device"))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def trigger_test_alert(self) -> Optional[AlertStatus]:
        """Ejecuta el ciclo completo manualmente (botón "Test SOS")."""
        return await self.handle_emergency(source="test")

    async def handle_emergency(self, source: str = "device") -> Optional[AlertStatus]:
        """
        Ejecuta un ciclo de alerta.

        Args:
            source: "device" para señales del dispositivo, "test" para pruebas manuales

        Returns:
            Estado reportado, o None si el SOS está deshabilitado
        """
        if source == "device" and not self.store.is_sos_enabled():
            logger.info("Emergency signal ignored: SOS disabled in settings")
            return None

        with self._flight_lock:
            busy = self._in_flight
            self._in_flight = True
        if busy:
            logger.warning("Emergency alert already in progress, dropping new trigger")
            return self._report(AlertFailure(AlertError.ALERT_IN_PROGRESS), source)

        try:
            status = await self._run_cycle(source)
        finally:
            with self._flight_lock:
                self._in_flight = False

        return self._report(status, source)

    async def _run_cycle(self, source: str) -> AlertStatus:
        contacts = self.store.get_contacts()
        template = self.store.get_message_template()

        if not contacts:
            logger.warning("Emergency detected but no contacts configured!")
            return AlertFailure(AlertError.NO_CONTACTS)

        valid_contacts = [c for c in contacts if c.is_reachable]
        if not valid_contacts:
            logger.warning("No valid emergency contacts found!")
            return AlertFailure(AlertError.NO_VALID_CONTACTS)

        message = template if template and template.strip() else self.config.default_message

        logger.warning(
            f"🚨 Emergency alert triggered ({source})! Contacting {len(valid_contacts)} contact(s)..."
        )
        try:
            return await self.engine.send_alert(
                valid_contacts,
                message,
                AlertOptions(call_first=True, send_sms=True, send_email=True)
            )
        except Exception as e:
            logger.error(f"Emergency alert error: {e}")
            return AlertFailure(AlertError.DISPATCH_FAILED, detail=str(e))

    async def wait_idle(self) -> None:
        """Espera a que terminen los ciclos agendados por el dispositivo."""
        while True:
            tasks = [t for t in self._pending if not t.done()]
            threads = [t for t in self._threads if t.is_alive()]
            self._threads = threads
            if not tasks and not threads:
                return
            await asyncio.gather(*tasks, return_exceptions=True)
            for thread in threads:
                await asyncio.to_thread(thread.join)

    # ═══════════════════════════════════════════════════════════════════════
    # Salidas
    # ═══════════════════════════════════════════════════════════════════════

    def add_status_listener(self, callback: Callable[[AlertStatus], None]) -> None:
        """Agrega un listener de estados de alerta (UI)."""
        self._status_listeners.append(callback)

    def remove_status_listener(self, callback: Callable[[AlertStatus], None]) -> None:
        if callback in self._status_listeners:
            self._status_listeners.remove(callback)

    def get_alerts(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Obtiene los últimos estados reportados."""
        return list(self._history)[-limit:]

    def get_status(self) -> Dict[str, Any]:
        return {
            "alert_in_flight": self._in_flight,
            "configured_contacts": self._configured_contacts,
            "alerts_reported": len(self._history)
        }

    def create_event_queue(self) -> asyncio.Queue:
        """Crea una cola de eventos para streaming async (SSE)."""
        self._event_queue = asyncio.Queue(maxsize=100)
        return self._event_queue

    def clear(self) -> None:
        """Limpia el historial."""
        self._history.clear()

    def _report(self, status: AlertStatus, source: str) -> AlertStatus:
        level = classify_status(status)
        entry = {
            "timestamp": datetime.now().isoformat(),
            "source": source,
            "level": level.value,
            "summary": describe_status(status),
            "status": status.to_dict()
        }
        self._history.append(entry)
        logger.info(f"{level.emoji} Alert status: {entry['summary']}")

        for callback in list(self._status_listeners):
            try:
                callback(status)
            except Exception as e:
                logger.error(f"Error en status listener: {e}")

        if self._event_queue is not None:
            try:
                self._event_queue.put_nowait(entry)
            except asyncio.QueueFull:
                pass  # Descartar si la cola está llena

        return status

    def _on_settings_changed(self, settings: Settings) -> None:
        self._configured_contacts = len(settings.emergency_contacts)
        logger.debug(f"Settings updated: {self._configured_contacts} contact(s)")
