"""
Modelos de datos para Alert Core.
Define contactos de emergencia, resultados de validación y de envío de alertas.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Dict, Any, List, Tuple, Union
import uuid


class NotificationChannel(Enum):
    """Canales de notificación disponibles."""
    CALL = "call"
    SMS = "sms"
    EMAIL = "email"


class DispatchStatus(Enum):
    """Estado de un despacho individual."""
    SENT = "sent"
    FAILED = "failed"


class AlertError(Enum):
    """Fallos de precondición o de envío reportados a la UI."""
    NO_CONTACTS = "no_contacts"
    NO_VALID_CONTACTS = "no_valid_contacts"
    DISPATCH_FAILED = "dispatch_failed"
    ALERT_IN_PROGRESS = "alert_in_progress"


class StatusLevel(Enum):
    """Severidad con la que la UI debe mostrar un estado de alerta."""
    INFO = "info"
    SUCCESS = "success"
    WARNING = "warning"
    ERROR = "error"

    @property
    def emoji(self) -> str:
        """Retorna emoji representativo del nivel."""
        emojis = {
            "info": "ℹ️",
            "success": "✅",
            "warning": "⚠️",
            "error": "❌"
        }
        return emojis.get(self.value, "⚪")


@dataclass
class Contact:
    """
    Contacto de emergencia.

    El id solo necesita ser único. name puede estar vacío (la validación
    lo reporta). Para participar en el fan-out el contacto necesita al
    menos phone o email no vacíos.
    """
    id: int
    name: str = ""
    phone: str = ""
    email: str = ""

    @property
    def has_phone(self) -> bool:
        return bool(self.phone and self.phone.strip())

    @property
    def has_email(self) -> bool:
        return bool(self.email and self.email.strip())

    @property
    def is_reachable(self) -> bool:
        """Indica si el contacto tiene algún canal utilizable."""
        return self.has_phone or self.has_email

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Contact":
        """Crea una instancia desde un diccionario."""
        return cls(
            id=data.get("id", 0),
            name=data.get("name") or "",
            phone=data.get("phone") or "",
            email=data.get("email") or ""
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para serialización."""
        return {
            "id": self.id,
            "name": self.name,
            "phone": self.phone,
            "email": self.email
        }


@dataclass(frozen=True)
class ValidationResult:
    """Resultado de validar un Contact."""
    errors: Tuple[str, ...] = ()

    @property
    def valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> Dict[str, Any]:
        return {"valid": self.valid, "errors": list(self.errors)}


@dataclass(frozen=True)
class AlertOptions:
    """Canales habilitados para un ciclo de fan-out."""
    call_first: bool = True
    send_sms: bool = True
    send_email: bool = True


@dataclass(frozen=True)
class DispatchRecord:
    """
    Registro de un despacho individual (llamada, SMS o email).

    status SENT solo significa que el host aceptó la activación; la
    entrega real no es observable.
    """
    channel: NotificationChannel
    recipient: str
    uri: str
    status: DispatchStatus
    error_message: Optional[str] = None
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def ok(self) -> bool:
        return self.status == DispatchStatus.SENT

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para serialización JSON."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "channel": self.channel.value,
            "recipient": self.recipient,
            "uri": self.uri,
            "status": self.status.value,
            "error_message": self.error_message
        }


@dataclass(frozen=True)
class AlertOutcome:
    """
    Resultado inmutable de un ciclo de fan-out.

    success es verdadero si y solo si sent > 0 o called > 0.
    """
    sent: int = 0
    failed: int = 0
    called: int = 0
    dispatches: Tuple[DispatchRecord, ...] = ()

    @property
    def success(self) -> bool:
        return self.sent > 0 or self.called > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convierte a diccionario para serialización JSON."""
        return {
            "success": self.success,
            "sent": self.sent,
            "failed": self.failed,
            "called": self.called,
            "dispatches": [d.to_dict() for d in self.dispatches]
        }


@dataclass(frozen=True)
class AlertFailure:
    """Ciclo de alerta que no llegó a producir un AlertOutcome."""
    error: AlertError
    detail: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.error.value, "detail": self.detail}


AlertStatus = Union[AlertOutcome, AlertFailure]


def classify_status(status: AlertStatus) -> StatusLevel:
    """
    Clasifica un estado de alerta según cómo debe presentarlo la UI.

    - Alerta enviada sin fallos → SUCCESS
    - Alerta enviada con algún canal fallido → WARNING (éxito parcial)
    - Alerta sin ningún envío → ERROR
    - Contactos mal configurados → WARNING (accionable)
    - Fallo de despacho → ERROR
    - Alerta ya en curso → INFO
    """
    if isinstance(status, AlertOutcome):
        if not status.success:
            return StatusLevel.ERROR
        if status.failed > 0:
            return StatusLevel.WARNING
        return StatusLevel.SUCCESS

    if status.error in (AlertError.NO_CONTACTS, AlertError.NO_VALID_CONTACTS):
        return StatusLevel.WARNING
    if status.error == AlertError.ALERT_IN_PROGRESS:
        return StatusLevel.INFO
    return StatusLevel.ERROR


def describe_status(status: AlertStatus) -> str:
    """Resumen legible de un estado de alerta (para toasts/logs)."""
    level = classify_status(status)

    if isinstance(status, AlertFailure):
        messages = {
            AlertError.NO_CONTACTS: "Emergency detected but no contacts configured!",
            AlertError.NO_VALID_CONTACTS: "No valid emergency contacts found!",
            AlertError.DISPATCH_FAILED: "Failed to send emergency alert. Please try manually.",
            AlertError.ALERT_IN_PROGRESS: "An emergency alert is already being sent.",
        }
        return f"{level.emoji} {messages[status.error]}"

    if level == StatusLevel.SUCCESS:
        return (
            f"{level.emoji} Emergency alert sent! "
            f"Called: {status.called}, Sent: {status.sent}"
        )
    if level == StatusLevel.WARNING:
        return (
            f"{level.emoji} Some alerts failed to send. "
            f"Sent: {status.sent}, Failed: {status.failed}. Please check contacts."
        )
    return f"{level.emoji} Emergency alert could not be delivered to any contact."


def outcome_from_records(records: List[DispatchRecord]) -> AlertOutcome:
    """
    Construye un AlertOutcome a partir de los registros de despacho.

    Las llamadas exitosas cuentan en called; los SMS/emails exitosos en
    sent; cualquier despacho fallido en failed.
    """
    sent = failed = called = 0
    for record in records:
        if not record.ok:
            failed += 1
        elif record.channel == NotificationChannel.CALL:
            called += 1
        else:
            sent += 1
    return AlertOutcome(sent=sent, failed=failed, called=called, dispatches=tuple(records))
