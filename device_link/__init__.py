"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                     🔗 Device Link - Layer 1 🔗                               ║
║               AirMouse wireless link for the Airis-SH Control Center          ║
╚══════════════════════════════════════════════════════════════════════════════╝

Capa de enlace con el dispositivo. Mantiene la conexión inalámbrica con
el sensor AirMouse y convierte su canal de notificaciones en eventos de
emergencia para la Capa 3.

Módulos:
- models: Estados de conexión y decodificación de señales
- session: Máquina de estados del enlace
- supervisor: Reconexión automática opcional
- registry: Selección de transporte por nombre
- transports: Backends BLE (bleak) y simulado
"""

from .models import ConnectionState, SignalValue, EmergencySignal, decode_notification
from .session import DeviceLinkSession, EmergencyObserver
from .supervisor import LinkSupervisor
from .registry import TransportRegistry, TransportNotFoundError, get_default_registry
from .config import LinkConfig

__all__ = [
    "ConnectionState",
    "SignalValue",
    "EmergencySignal",
    "decode_notification",
    "DeviceLinkSession",
    "EmergencyObserver",
    "LinkSupervisor",
    "TransportRegistry",
    "TransportNotFoundError",
    "get_default_registry",
    "LinkConfig",
]

__version__ = "1.0.0"
