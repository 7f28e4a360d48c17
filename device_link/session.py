"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                 🔗 Device Link Session - Airis-SH Control Center             ║
║                Layer 1: Connection lifecycle & emergency decoding             ║
╚══════════════════════════════════════════════════════════════════════════════╝

Gestiona el ciclo de vida del enlace con un único dispositivo AirMouse y
traduce cada byte de notificación en un evento de emergencia.

Máquina de estados:
    DISCONNECTED --connect()--> CONNECTING --ok--> CONNECTED
    CONNECTING --falla--> DISCONNECTED
    CONNECTED --disconnect() / pérdida de enlace--> DISCONNECTED

La suscripción a notificaciones está activa si y solo si el estado es
CONNECTED. Ninguna operación pública lanza excepciones: el dispositivo es
una mejora best-effort, la aplicación sigue funcionando sin él.
"""

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional

from .config import LinkConfig, config as default_config
from .models import ConnectionState, EmergencySignal, Payload, SignalValue, decode_notification
from .transports.base import LinkTransport, TransportUnavailableError


logger = logging.getLogger("device_link.session")


class EmergencyObserver(ABC):
    """Observer registrado con set_callbacks()."""

    @abstractmethod
    def on_emergency_detected(self) -> None:
        pass


class DeviceLinkSession:
    """
    🔗 Sesión del enlace con el dispositivo.

    Se construye explícitamente con su transporte y se pasa por referencia
    a quien la necesite (no hay instancia global).

    Ejemplo:
        session = DeviceLinkSession(SimulatedTransport())
        session.set_callbacks(coordinator)
        if await session.connect():
            print(f"Monitoreo activo: {session.get_device_name()}")
    """

    def __init__(self, transport: LinkTransport, config: Optional[LinkConfig] = None):
        self.transport = transport
        self.config = config or default_config

        self._state = ConnectionState.DISCONNECTED
        self._device: Any = None
        self._device_name: Optional[str] = None
        self._session: Any = None
        self._characteristic: Any = None
        # Intento de conexión vigente; las pérdidas de enlace de intentos previos se ignoran
        self._attempt = 0

        # Un único observer principal (último en registrarse gana)
        self._observer: Optional[EmergencyObserver] = None
        self._subscribers: List[Callable[[EmergencySignal], None]] = []

        self._last_emergency_at: Optional[float] = None

        # Estadísticas
        self._stats = {
            "notifications_received": 0,
            "emergencies_detected": 0,
            "emergencies_debounced": 0,
            "connect_attempts": 0,
            "connect_failures": 0,
            "link_losses": 0
        }

    @property
    def state(self) -> ConnectionState:
        return self._state

    # ═══════════════════════════════════════════════════════════════════════
    # Ciclo de vida
    # ═══════════════════════════════════════════════════════════════════════

    async def connect(self) -> bool:
        """
        Conecta con el dispositivo y activa el monitoreo de emergencias.

        Pasos: descubrimiento por prefijo de nombre, apertura de sesión,
        servicio y característica conocidos, suscripción a notificaciones y
        registro del observer de pérdida de enlace.

        Returns:
            True solo si todos los pasos tuvieron éxito
        """
        if self._state == ConnectionState.CONNECTED:
            return True
        if self._state == ConnectionState.CONNECTING:
            logger.warning("Connect already in progress")
            return False

        self._state = ConnectionState.CONNECTING
        self._stats["connect_attempts"] += 1
        self._attempt += 1
        attempt = self._attempt
        session = None

        try:
            if not self.transport.is_available():
                raise TransportUnavailableError(
                    f"Transport '{self.transport.name}' not supported on this host"
                )

            device = await self.transport.request_device(
                self.config.device_name_prefix,
                [self.config.service_uuid]
            )
            self._device = device
            self._device_name = self.transport.device_name(device)
            logger.info(f"Device selected: {self._device_name}")

            session = await self.transport.open_session(
                device, lambda: self._handle_link_loss(attempt)
            )
            service = await self.transport.get_service(session, self.config.service_uuid)
            logger.info("Emergency service found")

            characteristic = await self.transport.get_characteristic(
                session, service, self.config.characteristic_uuid
            )
            logger.info("Emergency characteristic found")

            await self.transport.start_notifications(session, characteristic, self.handle_notification)

        except asyncio.CancelledError:
            logger.warning("Connect cancelled")
            await self._abort(attempt, session)
            raise
        except Exception as e:
            logger.error(f"Failed to connect to device: {e}")
            self._stats["connect_failures"] += 1
            await self._abort(attempt, session)
            return False

        if self._state != ConnectionState.CONNECTING or attempt != self._attempt:
            # El enlace se perdió (o se desconectó) durante el handshake
            logger.warning("Link lost while connecting")
            await self._abort(attempt, session)
            return False

        self._session = session
        self._characteristic = characteristic
        self._state = ConnectionState.CONNECTED
        logger.info("✅ Emergency monitoring active")
        return True

    async def disconnect(self) -> None:
        """
        Cancela la suscripción, cierra la sesión y vuelve a DISCONNECTED.

        Idempotente: seguro de llamar estando ya desconectado.
        """
        session = self._session
        characteristic = self._characteristic
        was_connected = self._state == ConnectionState.CONNECTED

        # El estado cambia antes de cerrar para ignorar el callback de pérdida de enlace
        self._reset()

        if session is None:
            return

        if was_connected and characteristic is not None:
            try:
                await self.transport.stop_notifications(session, characteristic)
            except Exception as e:
                logger.error(f"Error stopping notifications: {e}")

        await self._close_quietly(session)
        logger.info("Disconnected from device")

    def get_connected(self) -> bool:
        """Indica si el enlace está activo. Seguro de llamar en cualquier momento."""
        return self._state == ConnectionState.CONNECTED

    def get_device_name(self) -> Optional[str]:
        """Nombre del dispositivo vinculado, None si no hay dispositivo."""
        return self._device_name

    def get_status(self) -> Dict[str, Any]:
        """Estado del enlace para la UI."""
        return {
            "state": self._state.value,
            "connected": self.get_connected(),
            "device_name": self._device_name,
            "transport": self.transport.name,
            "stats": self._stats.copy()
        }

    # ═══════════════════════════════════════════════════════════════════════
    # Observers
    # ═══════════════════════════════════════════════════════════════════════

    def set_callbacks(self, observer: Optional[EmergencyObserver]) -> None:
        """Registra el observer principal, reemplazando al anterior."""
        self._observer = observer

    def add_subscriber(self, callback: Callable[[EmergencySignal], None]) -> None:
        """Agrega un suscriptor adicional; se notifica después del observer."""
        self._subscribers.append(callback)

    def remove_subscriber(self, callback: Callable[[EmergencySignal], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    # ═══════════════════════════════════════════════════════════════════════
    # Eventos del transporte
    # ═══════════════════════════════════════════════════════════════════════

    def handle_notification(self, payload: Payload) -> None:
        """
        Decodifica una notificación del dispositivo.

        Solo el valor 1 es una emergencia; 0 (sin alerta) y >= 2
        (reservados) se ignoran. Debe ser rápido y no bloquear.
        """
        if self._state == ConnectionState.DISCONNECTED:
            return

        value = decode_notification(payload)
        self._stats["notifications_received"] += 1
        logger.debug(f"Emergency alert received: {value}")

        if value != SignalValue.EMERGENCY:
            return

        now = time.monotonic()
        window = self.config.debounce_seconds
        if window > 0 and self._last_emergency_at is not None and now - self._last_emergency_at < window:
            self._stats["emergencies_debounced"] += 1
            logger.info(f"Emergency repeat ignored (within {window}s debounce window)")
            return
        self._last_emergency_at = now

        self._stats["emergencies_detected"] += 1
        logger.warning("🚨 EMERGENCY ALERT TRIGGERED!")
        self._emit(EmergencySignal(device_name=self._device_name, raw_value=value))

    def _emit(self, signal: EmergencySignal) -> None:
        if self._observer is not None:
            try:
                self._observer.on_emergency_detected()
            except Exception as e:
                logger.error(f"Error en emergency observer: {e}")

        for callback in list(self._subscribers):
            try:
                callback(signal)
            except Exception as e:
                logger.error(f"Error en emergency subscriber: {e}")

    def _handle_link_loss(self, attempt: int) -> None:
        if attempt != self._attempt:
            logger.debug(f"Ignoring link loss from stale connection attempt {attempt}")
            return
        if self._state == ConnectionState.DISCONNECTED:
            return
        logger.warning("Device disconnected")
        self._stats["link_losses"] += 1
        self._reset()

    # ═══════════════════════════════════════════════════════════════════════
    # Helpers
    # ═══════════════════════════════════════════════════════════════════════

    def _reset(self) -> None:
        self._state = ConnectionState.DISCONNECTED
        self._device = None
        self._device_name = None
        self._session = None
        self._characteristic = None

    async def _abort(self, attempt: int, session: Any) -> None:
        """Cierra la sesión de un intento fallido; solo el intento vigente resetea el estado."""
        if attempt == self._attempt:
            self._reset()
        if session is not None:
            await self._close_quietly(session)

    async def _close_quietly(self, session: Any) -> None:
        try:
            await self.transport.close_session(session)
        except Exception as e:
            logger.error(f"Error disconnecting: {e}")
