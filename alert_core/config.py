"""
Configuración centralizada para Alert Core.
Define el producto, los tiempos de pacing y los mensajes por defecto.
"""

from dataclasses import dataclass


@dataclass
class AlertConfig:
    """Configuración del fan-out de alertas de emergencia."""
    product_name: str = "Airis-SH"
    sms_delay_seconds: float = 0.5  # Pausa entre SMS consecutivos
    dispatch_timeout_seconds: float = 10.0  # Límite por despacho individual
    default_message: str = "🚨 Emergency alert from Airis-SH device! Please help immediately."
    history_size: int = 50

    @property
    def email_subject(self) -> str:
        """Asunto fijo de los emails de alerta."""
        return f"🚨 SOS Alert from {self.product_name}"


# Instancia global de configuración (puede ser sobrescrita)
config = AlertConfig()
