"""
Modelos de datos para Device Link.
Estados de conexión y decodificación del canal de emergencia.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Any, Dict, Optional, Union


class ConnectionState(Enum):
    """Estados del enlace con el dispositivo."""
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"

    @property
    def emoji(self) -> str:
        emojis = {
            "disconnected": "🔴",
            "connecting": "🟡",
            "connected": "🟢"
        }
        return emojis.get(self.value, "⚪")


class SignalValue(IntEnum):
    """
    Valores conocidos del byte de notificación.

    Valores >= 2 están reservados para futuros tipos de señal.
    """
    CLEAR = 0
    EMERGENCY = 1


Payload = Union[bytes, bytearray, memoryview]


def decode_notification(payload: Payload) -> Optional[int]:
    """
    Decodifica una notificación del dispositivo.

    Args:
        payload: Bytes recibidos (se usa solo el primero, sin signo)

    Returns:
        Valor del byte, o None si el payload está vacío
    """
    data = bytes(payload)
    if not data:
        return None
    return data[0]


def is_emergency(payload: Payload) -> bool:
    """Indica si la notificación señala una emergencia."""
    return decode_notification(payload) == SignalValue.EMERGENCY


@dataclass(frozen=True)
class EmergencySignal:
    """Evento transitorio: se señaló una emergencia ahora."""
    device_name: Optional[str] = None
    raw_value: int = SignalValue.EMERGENCY
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "device_name": self.device_name,
            "raw_value": int(self.raw_value),
            "timestamp": self.timestamp
        }
