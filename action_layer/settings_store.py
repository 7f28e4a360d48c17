"""
Settings Store del Control Center.

Almacén clave-valor en memoria con los contactos de emergencia, la
plantilla de mensaje y el toggle de SOS. Notifica a los suscriptores en
cada cambio. Los lectores siempre reciben copias (snapshot).
"""

import copy
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from alert_core.models import Contact


logger = logging.getLogger("action_layer.settings_store")


class ContactNotFoundError(Exception):
    """Excepción cuando no existe un contacto con el id indicado."""
    pass


DEFAULT_MESSAGE_TEMPLATE = "Emergency! I need assistance. Please contact me immediately."


def _default_contacts() -> List[Contact]:
    return [
        Contact(id=1, name="Emergency Contact", phone="(555) 123-4567", email="contact@example.com")
    ]


@dataclass
class Settings:
    """Configuración editable por el cuidador."""
    emergency_contacts: List[Contact] = field(default_factory=_default_contacts)
    message_template: str = DEFAULT_MESSAGE_TEMPLATE
    sos_enabled: bool = True

    def to_dict(self) -> Dict[str, Any]:
        return {
            "emergency_contacts": [c.to_dict() for c in self.emergency_contacts],
            "message_template": self.message_template,
            "sos_enabled": self.sos_enabled
        }


class SettingsStore:
    """
    ⚙️ Settings Store - Fuente canónica de contactos y plantilla.

    Ejemplo:
        store = SettingsStore()
        store.add_subscriber(lambda settings: print("cambió", settings))
        contact = store.add_contact(name="Mom", phone="555-1234")
        store.update_contact(contact.id, email="mom@example.com")
    """

    def __init__(self, settings: Optional[Settings] = None):
        self._settings = settings or Settings()
        self._next_id = max((c.id for c in self._settings.emergency_contacts), default=0) + 1
        self._subscribers: List[Callable[[Settings], None]] = []
        self._lock = threading.Lock()

    # ═══════════════════════════════════════════════════════════════════════
    # Lectura
    # ═══════════════════════════════════════════════════════════════════════

    def get_contacts(self) -> List[Contact]:
        """Retorna una copia de la lista de contactos."""
        with self._lock:
            return copy.deepcopy(self._settings.emergency_contacts)

    def get_contact(self, contact_id: int) -> Contact:
        with self._lock:
            return copy.deepcopy(self._find(contact_id))

    def get_message_template(self) -> str:
        return self._settings.message_template

    def is_sos_enabled(self) -> bool:
        return self._settings.sos_enabled

    def get_settings(self) -> Settings:
        """Retorna una copia completa de la configuración."""
        with self._lock:
            return copy.deepcopy(self._settings)

    # ═══════════════════════════════════════════════════════════════════════
    # Escritura
    # ═══════════════════════════════════════════════════════════════════════

    def add_contact(self, name: str = "", phone: str = "", email: str = "") -> Contact:
        """
        Agrega un contacto con un id nuevo.

        Returns:
            Copia del contacto creado
        """
        with self._lock:
            contact = Contact(id=self._next_id, name=name, phone=phone, email=email)
            self._next_id += 1
            self._settings.emergency_contacts.append(contact)
            created = copy.deepcopy(contact)
        self._notify()
        return created

    def update_contact(self, contact_id: int, **fields: str) -> Contact:
        """
        Modifica campos de un contacto existente.

        Raises:
            ContactNotFoundError: Si el id no existe
            ValueError: Si algún campo no es editable
        """
        allowed = {"name", "phone", "email"}
        unknown = set(fields) - allowed
        if unknown:
            raise ValueError(f"Unknown contact fields: {', '.join(sorted(unknown))}")

        with self._lock:
            contact = self._find(contact_id)
            for key, value in fields.items():
                setattr(contact, key, value if value is not None else "")
            updated = copy.deepcopy(contact)
        self._notify()
        return updated

    def remove_contact(self, contact_id: int) -> None:
        """
        Elimina un contacto.

        Raises:
            ContactNotFoundError: Si el id no existe
        """
        with self._lock:
            contact = self._find(contact_id)
            self._settings.emergency_contacts.remove(contact)
        self._notify()

    def set_message_template(self, template: str) -> None:
        with self._lock:
            self._settings.message_template = template
        self._notify()

    def set_sos_enabled(self, enabled: bool) -> None:
        with self._lock:
            self._settings.sos_enabled = enabled
        self._notify()

    def reset(self) -> None:
        """Restaura la configuración por defecto."""
        with self._lock:
            self._settings = Settings()
            self._next_id = max((c.id for c in self._settings.emergency_contacts), default=0) + 1
        self._notify()

    # ═══════════════════════════════════════════════════════════════════════
    # Suscriptores
    # ═══════════════════════════════════════════════════════════════════════

    def add_subscriber(self, callback: Callable[[Settings], None]) -> None:
        """Agrega un suscriptor para cambios de configuración."""
        self._subscribers.append(callback)

    def remove_subscriber(self, callback: Callable[[Settings], None]) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def _notify(self) -> None:
        snapshot = self.get_settings()
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error(f"Error en settings subscriber: {e}")

    def _find(self, contact_id: int) -> Contact:
        for contact in self._settings.emergency_contacts:
            if contact.id == contact_id:
                return contact
        raise ContactNotFoundError(f"Contact {contact_id} not found")
