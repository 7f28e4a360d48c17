"""
Validador de contactos de emergencia.
Aplica todas las reglas de forma independiente y acumula los errores.
"""

import re
from typing import List

from .models import Contact, ValidationResult


NAME_REQUIRED = "Name is required"
CHANNEL_REQUIRED = "At least phone or email is required"
INVALID_PHONE = "Invalid phone number format"
INVALID_EMAIL = "Invalid email format"

# Permisivo a propósito: no valida largo ni código de país
PHONE_PATTERN = re.compile(r"[0-9\s\-+()]+")
EMAIL_PATTERN = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")


def validate_contact(contact: Contact) -> ValidationResult:
    """
    Valida la forma de un contacto.

    Reglas (todas se evalúan, sin cortocircuito):
    1. name no vacío tras strip
    2. al menos phone o email no vacío
    3. phone, si existe, compuesto solo por dígitos, espacios, - + ( )
    4. email, si existe, con forma local@dominio.tld

    Args:
        contact: Contacto a validar

    Returns:
        ValidationResult con la lista de errores (vacía si es válido)
    """
    errors: List[str] = []

    if not contact.name or not contact.name.strip():
        errors.append(NAME_REQUIRED)

    if not contact.phone and not contact.email:
        errors.append(CHANNEL_REQUIRED)

    if contact.phone and not PHONE_PATTERN.fullmatch(contact.phone):
        errors.append(INVALID_PHONE)

    if contact.email and not EMAIL_PATTERN.fullmatch(contact.email):
        errors.append(INVALID_EMAIL)

    return ValidationResult(errors=tuple(errors))
