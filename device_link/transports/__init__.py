"""Transportes del enlace con el dispositivo."""

from .base import (
    LinkTransport,
    LinkError,
    TransportUnavailableError,
    DeviceNotFoundError,
    ServiceNotFoundError,
    CharacteristicNotFoundError,
    SubscriptionError,
)
from .simulated import SimulatedTransport, SimulatedDevice

__all__ = [
    "LinkTransport",
    "LinkError",
    "TransportUnavailableError",
    "DeviceNotFoundError",
    "ServiceNotFoundError",
    "CharacteristicNotFoundError",
    "SubscriptionError",
    "SimulatedTransport",
    "SimulatedDevice",
]
