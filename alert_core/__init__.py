"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                     🚨 Alert Core - Layer 2 🚨                                ║
║                 Emergency Contacts & Alert Results for Airis-SH               ║
╚══════════════════════════════════════════════════════════════════════════════╝

Capa de reglas de negocio del sistema de alertas de emergencia.
Define los contactos, su validación y los resultados que la Capa 3
reporta a la interfaz.

Módulos:
- models: Dataclasses de contactos, despachos y resultados
- validator: Validación de contactos
- config: Parámetros de pacing, timeouts y mensajes
"""

from .models import (
    Contact,
    ValidationResult,
    AlertOptions,
    AlertOutcome,
    AlertFailure,
    AlertError,
    AlertStatus,
    StatusLevel,
    NotificationChannel,
    DispatchStatus,
    DispatchRecord,
    classify_status,
    describe_status,
)
from .validator import validate_contact
from .config import AlertConfig

__all__ = [
    "Contact",
    "ValidationResult",
    "AlertOptions",
    "AlertOutcome",
    "AlertFailure",
    "AlertError",
    "AlertStatus",
    "StatusLevel",
    "NotificationChannel",
    "DispatchStatus",
    "DispatchRecord",
    "classify_status",
    "describe_status",
    "validate_contact",
    "AlertConfig",
]

__version__ = "1.0.0"
