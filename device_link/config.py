"""
Configuración centralizada para Device Link.
Define el filtro de dispositivo, los UUIDs del protocolo de emergencia y
los parámetros de debounce y reconexión.
"""

import os
from dataclasses import dataclass, field


EMERGENCY_SERVICE_UUID = "0000ffe0-0000-1000-8000-00805f9b34fb"
EMERGENCY_CHAR_UUID = "0000ffe1-0000-1000-8000-00805f9b34fb"
DEVICE_NAME_PREFIX = "AirMouse"


@dataclass
class LinkConfig:
    """Configuración del enlace con el dispositivo AirMouse."""
    device_name_prefix: str = DEVICE_NAME_PREFIX
    service_uuid: str = EMERGENCY_SERVICE_UUID
    characteristic_uuid: str = EMERGENCY_CHAR_UUID
    transport: str = field(default_factory=lambda: os.environ.get("AIRIS_LINK_TRANSPORT", "bleak"))
    scan_timeout_seconds: float = 10.0

    # 0 desactiva el debounce: cada byte 1 dispara el observer
    debounce_seconds: float = 0.0

    # Supervisor de reconexión (opcional)
    reconnect_enabled: bool = False
    reconnect_max_attempts: int = 5
    reconnect_base_delay: float = 1.0
    reconnect_max_delay: float = 30.0
    poll_interval_seconds: float = 2.0

    def backoff_delay(self, attempt: int) -> float:
        """Retardo antes del intento de reconexión número attempt (desde 0)."""
        return min(self.reconnect_max_delay, self.reconnect_base_delay * (2 ** attempt))


# Instancia global de configuración (puede ser sobrescrita)
config = LinkConfig()
