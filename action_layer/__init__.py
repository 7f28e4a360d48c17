"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                  🎯 Action Layer - Airis-SH Control Center                   ║
║                    Layer 3: Emergency Alerts & Control API                   ║
╚══════════════════════════════════════════════════════════════════════════════╝

Capa de acción del Control Center.
Recibe las señales de emergencia de la Capa 1 (Device Link) y:
- Aplica las reglas de negocio sobre los contactos configurados
- Despacha llamadas, SMS y emails a través del host
- Reporta el resultado a la interfaz y a la API

Components:
    - NotificationDispatcher: Handoff individual tel:/sms:/mailto:
    - AlertFanOutEngine: Fan-out priorizado con agregación de resultados
    - AlertCoordinator: Precondiciones y reporte de estados
    - SettingsStore: Contactos, plantilla y toggle SOS
    - ControlCenter: Cableado del pipeline completo
"""

from .host_launcher import HostLauncher, WebBrowserLauncher, MockLauncher, HandoffError
from .notification_dispatcher import NotificationDispatcher
from .fanout import AlertFanOutEngine
from .settings_store import SettingsStore, Settings, ContactNotFoundError
from .alert_coordinator import AlertCoordinator
from .control_center import ControlCenter, get_control_center, set_control_center, reset_control_center

__all__ = [
    "HostLauncher",
    "WebBrowserLauncher",
    "MockLauncher",
    "HandoffError",
    "NotificationDispatcher",
    "AlertFanOutEngine",
    "SettingsStore",
    "Settings",
    "ContactNotFoundError",
    "AlertCoordinator",
    "ControlCenter",
    "get_control_center",
    "set_control_center",
    "reset_control_center",
]

__version__ = "1.0.0"
