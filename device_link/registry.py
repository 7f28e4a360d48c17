#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                 📦 Transport Registry - Airis-SH Control Center              ║
║                     Layer 1: Transport selection by name                      ║
╚══════════════════════════════════════════════════════════════════════════════╝

Registro de fábricas de transporte. Permite elegir el backend del enlace
por nombre desde la configuración ("bleak", "simulated").
"""

from typing import Callable, Dict, List, Optional

from .config import LinkConfig, config as default_config
from .transports.base import LinkTransport


TransportFactory = Callable[[LinkConfig], LinkTransport]


class TransportNotFoundError(Exception):
    """Excepción cuando no se encuentra un transporte."""
    pass


class TransportRegistry:
    """
    📦 Registro de transportes disponibles.

    Example:
        >>> registry = TransportRegistry()
        >>> registry.register("simulated", lambda cfg: SimulatedTransport())
        >>> transport = registry.create("simulated")
    """

    def __init__(self):
        self._factories: Dict[str, TransportFactory] = {}

    def register(self, name: str, factory: TransportFactory) -> None:
        """
        Registra una fábrica de transporte.

        Raises:
            ValueError: Si el nombre ya está registrado
        """
        if name in self._factories:
            raise ValueError(f"Transport '{name}' is already registered")
        self._factories[name] = factory

    def unregister(self, name: str) -> None:
        self._factories.pop(name, None)

    def create(self, name: str, config: Optional[LinkConfig] = None) -> LinkTransport:
        """
        Crea una instancia del transporte indicado.

        Raises:
            TransportNotFoundError: Si el transporte no existe
        """
        if name not in self._factories:
            available = ", ".join(self._factories.keys()) or "none"
            raise TransportNotFoundError(
                f"Transport '{name}' not found. Available: {available}"
            )
        return self._factories[name](config or default_config)

    def list_transports(self) -> List[str]:
        return list(self._factories.keys())

    def __len__(self) -> int:
        return len(self._factories)

    def __contains__(self, name: str) -> bool:
        return name in self._factories


def _create_bleak(config: LinkConfig) -> LinkTransport:
    from .transports.bleak_transport import BleakTransport
    return BleakTransport(scan_timeout=config.scan_timeout_seconds)


def _create_simulated(config: LinkConfig) -> LinkTransport:
    from .transports.simulated import SimulatedTransport, SimulatedDevice
    return SimulatedTransport(devices=[SimulatedDevice(name=f"{config.device_name_prefix}-SIM")])


def get_default_registry() -> TransportRegistry:
    """
    Obtiene un registro con los transportes por defecto cargados.

    Returns:
        TransportRegistry con "bleak" y "simulated"
    """
    registry = TransportRegistry()
    registry.register("bleak", _create_bleak)
    registry.register("simulated", _create_simulated)
    return registry
