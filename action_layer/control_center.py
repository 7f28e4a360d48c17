"""
Control Center: ensambla y es dueño de los componentes del pipeline.

Un único DeviceLinkSession, el SettingsStore, el dispatcher, el motor de
fan-out y el AlertCoordinator, conectados explícitamente.
"""

import logging
from typing import Any, Dict, Optional

from alert_core.config import AlertConfig, config as default_alert_config
from device_link.config import LinkConfig, config as default_link_config
from device_link.registry import get_default_registry
from device_link.session import DeviceLinkSession
from device_link.supervisor import LinkSupervisor
from device_link.transports.base import LinkTransport

from .alert_coordinator import AlertCoordinator
from .fanout import AlertFanOutEngine
from .host_launcher import HostLauncher
from .notification_dispatcher import NotificationDispatcher
from .settings_store import SettingsStore


logger = logging.getLogger("action_layer.control_center")


class ControlCenter:
    """
    🎛️ Control Center - Cableado del pipeline Device Link → Alertas.

    Ejemplo:
        center = ControlCenter(transport=SimulatedTransport(), launcher=MockLauncher())
        await center.start()
        ...
        await center.stop()
    """

    def __init__(
        self,
        transport: Optional[LinkTransport] = None,
        store: Optional[SettingsStore] = None,
        launcher: Optional[HostLauncher] = None,
        link_config: Optional[LinkConfig] = None,
        alert_config: Optional[AlertConfig] = None
    ):
        self.link_config = link_config or default_link_config
        self.alert_config = alert_config or default_alert_config

        if transport is None:
            transport = get_default_registry().create(self.link_config.transport, self.link_config)

        self.store = store or SettingsStore()
        self.dispatcher = NotificationDispatcher(launcher=launcher, config=self.alert_config)
        self.engine = AlertFanOutEngine(self.dispatcher, config=self.alert_config)
        self.coordinator = AlertCoordinator(self.store, self.engine, config=self.alert_config)

        self.session = DeviceLinkSession(transport, config=self.link_config)
        self.session.set_callbacks(self.coordinator)
        self.supervisor = LinkSupervisor(self.session, config=self.link_config)

    @property
    def transport(self) -> LinkTransport:
        return self.session.transport

    async def start(self) -> bool:
        """
        Intenta conectar el dispositivo; la aplicación sigue aunque falle.

        Returns:
            True si el monitoreo de emergencias quedó activo
        """
        connected = await self.session.connect()
        if connected:
            logger.info("Emergency monitoring connected")
        else:
            logger.info("⚠️ Emergency monitoring not available (device not found or transport unsupported)")

        if self.link_config.reconnect_enabled:
            self.supervisor.start()
        return connected

    async def stop(self) -> None:
        await self.supervisor.stop()
        await self.session.disconnect()
        await self.coordinator.wait_idle()

    def get_status(self) -> Dict[str, Any]:
        return {
            "device": self.session.get_status(),
            "alerts": self.coordinator.get_status(),
            "dispatcher": self.dispatcher.get_stats(),
            "supervisor": {
                "running": self.supervisor.is_running,
                "attempts": self.supervisor.attempts,
                "gave_up": self.supervisor.gave_up
            }
        }


# Instancia global compartida por la API
_global_center: Optional[ControlCenter] = None


def get_control_center() -> ControlCenter:
    """Obtiene la instancia global del ControlCenter."""
    global _global_center
    if _global_center is None:
        _global_center = ControlCenter()
    return _global_center


def set_control_center(center: ControlCenter) -> None:
    """Reemplaza la instancia global (tests, scripts)."""
    global _global_center
    _global_center = center


def reset_control_center() -> None:
    """Reinicia la instancia global."""
    global _global_center
    _global_center = None
