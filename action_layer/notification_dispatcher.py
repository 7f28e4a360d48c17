"""
╔══════════════════════════════════════════════════════════════════════════════╗
║              📢 Notification Dispatcher - Airis-SH Control Center            ║
║                    Layer 3: Call / SMS / Email handoff                       ║
╚══════════════════════════════════════════════════════════════════════════════╝

Entrega una notificación individual al manejador nativo del host.
Es fire-and-forget: el host, no este sistema, es dueño de la entrega real.

Política de fallas:
- Llamada y SMS: si la activación principal falla, se intenta una única
  estrategia alternativa antes de rendirse.
- Email: sin alternativa, la falla se reporta de inmediato.

Ninguna operación lanza excepciones; todas retornan DispatchRecord.
"""

import logging
import re
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

from alert_core.config import AlertConfig, config as default_config
from alert_core.models import DispatchRecord, DispatchStatus, NotificationChannel

from .host_launcher import HostLauncher, WebBrowserLauncher


logger = logging.getLogger("action_layer.notification_dispatcher")

# Mismos caracteres que encodeURIComponent deja sin codificar
_URI_SAFE = "-_.!~*'()"

_PHONE_STRIP = re.compile(r"[\s\-()]")


def normalize_phone(phone: str) -> str:
    """Elimina espacios y los caracteres - ( ) de un número telefónico."""
    return _PHONE_STRIP.sub("", phone)


def encode_component(value: str) -> str:
    """Codifica un valor para un parámetro de query."""
    return quote(value, safe=_URI_SAFE)


def build_call_uri(phone: str) -> str:
    return f"tel:{normalize_phone(phone)}"


def build_sms_uri(phone: str, message: str) -> str:
    return f"sms:{normalize_phone(phone)}?body={encode_component(message)}"


def build_email_uri(emails: Sequence[str], subject: str, message: str) -> str:
    recipients = ",".join(emails)
    return (
        f"mailto:{recipients}"
        f"?subject={encode_component(subject)}"
        f"&body={encode_component(message)}"
    )


class NotificationDispatcher:
    """
    🔔 Dispatcher de Notificaciones - Capa 3

    Construye el URI de cada canal y lo entrega al HostLauncher.

    Ejemplo:
        dispatcher = NotificationDispatcher(launcher=MockLauncher())
        record = dispatcher.call_contact("555-1234")
        if record.ok:
            print(f"Llamada iniciada: {record.uri}")
    """

    def __init__(
        self,
        launcher: Optional[HostLauncher] = None,
        config: Optional[AlertConfig] = None
    ):
        self.launcher = launcher or WebBrowserLauncher()
        self.config = config or default_config

        # Historial de despachos
        self._records: List[DispatchRecord] = []

        # Estadísticas
        self._stats = {
            "calls": 0,
            "sms_sent": 0,
            "email_sent": 0,
            "failed": 0
        }

    def call_contact(self, phone: str) -> DispatchRecord:
        """
        Inicia una llamada de voz al número indicado.

        Args:
            phone: Número en texto libre (se normaliza)

        Returns:
            DispatchRecord con status SENT o FAILED
        """
        uri = build_call_uri(phone)
        record = self._handoff_with_fallback(NotificationChannel.CALL, phone, uri)
        if record.ok:
            self._stats["calls"] += 1
            logger.info(f"📞 Calling emergency contact: {phone}")
        return record

    def send_sms(self, phone: str, message: str) -> DispatchRecord:
        """
        Abre el compositor de SMS con el mensaje pre-cargado.

        Args:
            phone: Número en texto libre (se normaliza)
            message: Cuerpo del SMS

        Returns:
            DispatchRecord con status SENT o FAILED
        """
        uri = build_sms_uri(phone, message)
        record = self._handoff_with_fallback(NotificationChannel.SMS, phone, uri)
        if record.ok:
            self._stats["sms_sent"] += 1
            logger.info(f"💬 Sending SMS to: {phone}")
        return record

    def send_email(self, email: str, message: str) -> DispatchRecord:
        """Abre el compositor de email para un único destinatario."""
        return self.send_email_batch([email], message)[0]

    def send_email_batch(self, emails: Sequence[str], message: str) -> List[DispatchRecord]:
        """
        Abre un único email dirigido a todos los destinatarios.

        El resultado es todo-o-nada: un registro por destinatario, todos con
        el mismo status.

        Args:
            emails: Direcciones de los destinatarios
            message: Cuerpo del email

        Returns:
            Lista de DispatchRecord (uno por destinatario)
        """
        if not emails:
            return []

        uri = build_email_uri(emails, self.config.email_subject, message)
        status = DispatchStatus.SENT
        error_message = None

        try:
            self.launcher.navigate(uri)
        except Exception as e:
            status = DispatchStatus.FAILED
            error_message = str(e)
            logger.error(f"Failed to send email to {', '.join(emails)}: {e}")

        records = [
            DispatchRecord(
                channel=NotificationChannel.EMAIL,
                recipient=email,
                uri=uri,
                status=status,
                error_message=error_message
            )
            for email in emails
        ]
        self._record(records)

        if status == DispatchStatus.SENT:
            self._stats["email_sent"] += len(records)
            logger.info(f"📧 Sending email to: {', '.join(emails)}")
        return records

    def _handoff_with_fallback(
        self,
        channel: NotificationChannel,
        recipient: str,
        uri: str
    ) -> DispatchRecord:
        """Intenta navigate y, si falla, una única vez open_new."""
        error_message: Optional[str] = None
        failed = False
        try:
            self.launcher.navigate(uri)
        except Exception as e:
            logger.warning(f"Primary {channel.value} handoff failed for {recipient}: {e}")
            try:
                self.launcher.open_new(uri)
            except Exception as fallback_error:
                failed = True
                error_message = str(fallback_error)
                logger.error(f"Failed to {channel.value} {recipient}: {fallback_error}")

        record = DispatchRecord(
            channel=channel,
            recipient=recipient,
            uri=uri,
            status=DispatchStatus.FAILED if failed else DispatchStatus.SENT,
            error_message=error_message
        )
        self._record([record])
        return record

    def _record(self, records: List[DispatchRecord]) -> None:
        self._records.extend(records)
        self._stats["failed"] += sum(1 for r in records if not r.ok)

    def get_records(self, limit: int = 50) -> List[Dict[str, Any]]:
        """Retorna los últimos despachos realizados."""
        return [r.to_dict() for r in self._records[-limit:]]

    def get_stats(self) -> Dict[str, Any]:
        """Retorna estadísticas del dispatcher."""
        return {
            **self._stats,
            "total_dispatched": len(self._records)
        }

    def clear_history(self) -> None:
        """Limpia el historial de despachos."""
        self._records.clear()
