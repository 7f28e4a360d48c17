"""
Transporte simulado para demos y tests.

Mantiene dispositivos virtuales en memoria. push() entrega un byte de
notificación a las suscripciones activas y drop_link() simula una pérdida
de enlace.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union

from ..config import EMERGENCY_CHAR_UUID, EMERGENCY_SERVICE_UUID
from .base import (
    CharacteristicNotFoundError,
    DeviceNotFoundError,
    LinkError,
    LinkLossHandler,
    LinkTransport,
    NotificationHandler,
    ServiceNotFoundError,
    SubscriptionError,
    TransportUnavailableError,
)


def _emergency_services() -> Dict[str, List[str]]:
    return {EMERGENCY_SERVICE_UUID: [EMERGENCY_CHAR_UUID]}


@dataclass
class SimulatedDevice:
    """Dispositivo AirMouse virtual."""
    name: str = "AirMouse-SIM"
    services: Dict[str, List[str]] = field(default_factory=_emergency_services)
    reject_subscription: bool = False


@dataclass
class _SimulatedSession:
    device: SimulatedDevice
    on_link_loss: LinkLossHandler
    open: bool = True
    handlers: Dict[str, NotificationHandler] = field(default_factory=dict)


class SimulatedTransport(LinkTransport):
    """
    🧪 Transporte en memoria.

    Ejemplo:
        transport = SimulatedTransport()
        session = DeviceLinkSession(transport)
        await session.connect()
        transport.push(1)      # dispara on_emergency_detected
        transport.drop_link()  # session.get_connected() -> False
    """

    def __init__(
        self,
        devices: Optional[List[SimulatedDevice]] = None,
        available: bool = True,
        open_failures: int = 0
    ):
        self.devices = devices if devices is not None else [SimulatedDevice()]
        self.available = available
        # Cantidad de próximos open_session que fallarán
        self.open_failures = open_failures
        self.operations: List[str] = []
        self._sessions: List[_SimulatedSession] = []

    @property
    def name(self) -> str:
        return "simulated"

    def is_available(self) -> bool:
        return self.available

    @property
    def sessions(self) -> List[_SimulatedSession]:
        """Sesiones abiertas alguna vez, en orden de apertura."""
        return list(self._sessions)

    @property
    def open_sessions(self) -> List[_SimulatedSession]:
        return [s for s in self._sessions if s.open]

    @property
    def subscribed(self) -> bool:
        """Indica si hay alguna suscripción activa."""
        return any(s.open and s.handlers for s in self._sessions)

    async def request_device(self, name_prefix: str, service_uuids: List[str]) -> SimulatedDevice:
        self.operations.append("request_device")
        if not self.available:
            raise TransportUnavailableError("Simulated transport is unavailable")
        for device in self.devices:
            if device.name.startswith(name_prefix):
                return device
        raise DeviceNotFoundError(f"No device with name prefix '{name_prefix}'")

    def device_name(self, device: Any) -> Optional[str]:
        return device.name

    async def open_session(self, device: SimulatedDevice, on_link_loss: LinkLossHandler) -> _SimulatedSession:
        self.operations.append("open_session")
        if self.open_failures > 0:
            self.open_failures -= 1
            raise LinkError("Simulated connection failure")
        session = _SimulatedSession(device=device, on_link_loss=on_link_loss)
        self._sessions.append(session)
        return session

    async def get_service(self, session: _SimulatedSession, uuid: str) -> str:
        self.operations.append("get_service")
        if uuid not in session.device.services:
            raise ServiceNotFoundError(f"Service {uuid} not found")
        return uuid

    async def get_characteristic(self, session: _SimulatedSession, service: str, uuid: str) -> str:
        self.operations.append("get_characteristic")
        if uuid not in session.device.services.get(service, []):
            raise CharacteristicNotFoundError(f"Characteristic {uuid} not found")
        return uuid

    async def start_notifications(
        self,
        session: _SimulatedSession,
        characteristic: str,
        handler: NotificationHandler
    ) -> None:
        self.operations.append("start_notifications")
        if session.device.reject_subscription:
            raise SubscriptionError("Subscription rejected by simulated device")
        session.handlers[characteristic] = handler

    async def stop_notifications(self, session: _SimulatedSession, characteristic: str) -> None:
        self.operations.append("stop_notifications")
        session.handlers.pop(characteristic, None)

    async def close_session(self, session: _SimulatedSession) -> None:
        self.operations.append("close_session")
        session.open = False
        session.handlers.clear()

    def push(self, value: Union[int, bytes]) -> int:
        """
        Entrega una notificación a todas las suscripciones activas.

        Args:
            value: Byte (0-255) o payload crudo

        Returns:
            Cantidad de suscripciones que recibieron la notificación
        """
        payload = bytes([value]) if isinstance(value, int) else bytes(value)
        delivered = 0
        for session in self._sessions:
            if not session.open:
                continue
            for handler in list(session.handlers.values()):
                handler(payload)
                delivered += 1
        return delivered

    def drop_link(self) -> None:
        """Simula una pérdida de enlace en todas las sesiones abiertas."""
        for session in self._sessions:
            if session.open:
                session.open = False
                session.handlers.clear()
                session.on_link_loss()
