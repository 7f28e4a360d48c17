#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                  🔌 Link Transport Base - Airis-SH Control Center            ║
║                    Layer 1: Short-range wireless link contract                ║
╚══════════════════════════════════════════════════════════════════════════════╝

Clase base abstracta que define el contrato de un transporte inalámbrico
de corto alcance. Cada backend (BLE real, simulado, etc.) debe
implementar esta interfaz.

Los handles (dispositivo, sesión, servicio, característica) son opacos:
solo el transporte que los creó sabe interpretarlos.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, List, Optional


NotificationHandler = Callable[[bytes], None]
LinkLossHandler = Callable[[], None]


class LinkError(Exception):
    """Error base del enlace con el dispositivo."""
    pass


class TransportUnavailableError(LinkError):
    """El host no tiene capacidad inalámbrica."""
    pass


class DeviceNotFoundError(LinkError):
    """No se eligió ni encontró un dispositivo compatible."""
    pass


class ServiceNotFoundError(LinkError):
    """El dispositivo no expone el servicio de emergencia."""
    pass


class CharacteristicNotFoundError(LinkError):
    """El servicio no expone la característica de emergencia."""
    pass


class SubscriptionError(LinkError):
    """El dispositivo rechazó la suscripción a notificaciones."""
    pass


class LinkTransport(ABC):
    """
    🔌 Clase base abstracta para transportes del enlace.

    Flujo esperado (lo ejecuta DeviceLinkSession):
    1. request_device: descubrimiento filtrado por prefijo de nombre
    2. open_session: abre la sesión y registra el observer de pérdida de enlace
    3. get_service / get_characteristic: localiza el endpoint de emergencia
    4. start_notifications: suscripción a cambios de valor

    Todas las operaciones lanzan LinkError (o subclases) ante fallas.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identificador único del transporte (ej: "bleak", "simulated")."""
        pass

    def is_available(self) -> bool:
        """Indica si el host tiene capacidad inalámbrica."""
        return True

    @abstractmethod
    async def request_device(self, name_prefix: str, service_uuids: List[str]) -> Any:
        """
        Descubre un dispositivo cuyo nombre empiece con name_prefix.

        Raises:
            DeviceNotFoundError: Si no hay dispositivo compatible
        """
        pass

    def device_name(self, device: Any) -> Optional[str]:
        """Nombre legible de un handle de dispositivo."""
        return getattr(device, "name", None)

    @abstractmethod
    async def open_session(self, device: Any, on_link_loss: LinkLossHandler) -> Any:
        """Abre una sesión con el dispositivo."""
        pass

    @abstractmethod
    async def get_service(self, session: Any, uuid: str) -> Any:
        """
        Raises:
            ServiceNotFoundError: Si el servicio no existe
        """
        pass

    @abstractmethod
    async def get_characteristic(self, session: Any, service: Any, uuid: str) -> Any:
        """
        Raises:
            CharacteristicNotFoundError: Si la característica no existe
        """
        pass

    @abstractmethod
    async def start_notifications(
        self,
        session: Any,
        characteristic: Any,
        handler: NotificationHandler
    ) -> None:
        """
        Raises:
            SubscriptionError: Si la suscripción es rechazada
        """
        pass

    @abstractmethod
    async def stop_notifications(self, session: Any, characteristic: Any) -> None:
        pass

    @abstractmethod
    async def close_session(self, session: Any) -> None:
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name='{self.name}')>"
