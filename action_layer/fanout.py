"""
Motor de Fan-Out de alertas.
Convierte un evento de emergencia en un conjunto acotado de despachos
(llamada, SMS, email) y agrega los resultados en un AlertOutcome.
"""

import asyncio
import logging
from typing import Callable, List, Optional, Sequence

from alert_core.config import AlertConfig, config as default_config
from alert_core.models import (
    AlertOptions,
    AlertOutcome,
    Contact,
    DispatchRecord,
    DispatchStatus,
    NotificationChannel,
    outcome_from_records,
)

from .notification_dispatcher import (
    NotificationDispatcher,
    build_call_uri,
    build_email_uri,
    build_sms_uri,
)


logger = logging.getLogger("action_layer.fanout")


class AlertFanOutEngine:
    """
    📣 Fan-Out Engine - Orquesta el dispatcher sobre una lista de contactos.

    Orden estricto (prioridad de tiempo de respuesta):
    1. Llamada al primer contacto con teléfono
    2. SMS a todos los contactos con teléfono, con pausa entre cada uno
    3. Un único email dirigido a todos los contactos con email

    Nunca lanza excepciones: toda falla de canal se acumula en failed.

    Ejemplo:
        engine = AlertFanOutEngine(NotificationDispatcher(MockLauncher()))
        outcome = await engine.send_alert(contacts, "help")
        print(outcome.to_dict())
    """

    def __init__(
        self,
        dispatcher: Optional[NotificationDispatcher] = None,
        config: Optional[AlertConfig] = None
    ):
        self.config = config or default_config
        self.dispatcher = dispatcher or NotificationDispatcher(config=self.config)

    async def send_alert(
        self,
        contacts: Sequence[Contact],
        message: str,
        options: Optional[AlertOptions] = None
    ) -> AlertOutcome:
        """
        Ejecuta el fan-out completo.

        Args:
            contacts: Contactos ya validados, en orden de prioridad
            message: Cuerpo del SMS/email
            options: Canales habilitados (por defecto todos)

        Returns:
            AlertOutcome con los contadores sent/failed/called
        """
        opts = options or AlertOptions()
        # Snapshot: cambios posteriores a la lista no afectan este ciclo
        snapshot = list(contacts)
        records: List[DispatchRecord] = []

        try:
            if opts.call_first:
                primary = next((c for c in snapshot if c.has_phone), None)
                if primary is not None:
                    logger.warning(f"🚨 Calling primary emergency contact: {primary.name}")
                    records.extend(await self._dispatch(
                        self.dispatcher.call_contact,
                        (primary.phone,),
                        lambda error: [self._failed(
                            NotificationChannel.CALL, primary.phone,
                            build_call_uri(primary.phone), error
                        )]
                    ))

            if opts.send_sms:
                for contact in (c for c in snapshot if c.has_phone):
                    await asyncio.sleep(self.config.sms_delay_seconds)
                    records.extend(await self._dispatch(
                        self.dispatcher.send_sms,
                        (contact.phone, message),
                        lambda error, phone=contact.phone: [self._failed(
                            NotificationChannel.SMS, phone,
                            build_sms_uri(phone, message), error
                        )]
                    ))

            if opts.send_email:
                emails = [c.email.strip() for c in snapshot if c.has_email]
                if emails:
                    uri = build_email_uri(emails, self.config.email_subject, message)
                    records.extend(await self._dispatch(
                        self.dispatcher.send_email_batch,
                        (emails, message),
                        lambda error: [
                            self._failed(NotificationChannel.EMAIL, email, uri, error)
                            for email in emails
                        ]
                    ))
        except Exception as e:
            logger.error(f"Emergency alert failed: {e}")

        outcome = outcome_from_records(records)
        logger.info(
            f"📊 Fan-out done | success={outcome.success} sent={outcome.sent} "
            f"failed={outcome.failed} called={outcome.called}"
        )
        return outcome

    async def _dispatch(
        self,
        handoff: Callable,
        args: tuple,
        on_error: Callable[[str], List[DispatchRecord]]
    ) -> List[DispatchRecord]:
        """Ejecuta un despacho fuera del event loop con límite de tiempo."""
        timeout = self.config.dispatch_timeout_seconds
        try:
            call = asyncio.to_thread(handoff, *args)
            if timeout and timeout > 0:
                result = await asyncio.wait_for(call, timeout=timeout)
            else:
                result = await call
        except asyncio.TimeoutError:
            logger.error(f"Dispatch timed out after {timeout}s")
            return on_error(f"timed out after {timeout}s")
        except Exception as e:
            logger.error(f"Dispatch raised unexpectedly: {e}")
            return on_error(str(e))

        if isinstance(result, DispatchRecord):
            return [result]
        return list(result)

    @staticmethod
    def _failed(
        channel: NotificationChannel,
        recipient: str,
        uri: str,
        error: str
    ) -> DispatchRecord:
        return DispatchRecord(
            channel=channel,
            recipient=recipient,
            uri=uri,
            status=DispatchStatus.FAILED,
            error_message=error
        )
