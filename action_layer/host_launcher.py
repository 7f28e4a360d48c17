"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                   🖥️ Host Launcher - Airis-SH Control Center                 ║
║                 Layer 3: OS-level tel: / sms: / mailto: handoff              ║
╚══════════════════════════════════════════════════════════════════════════════╝

Primitivas de activación del host. Cada una recibe un URI y provoca un
cambio de contexto a nivel de sistema operativo (marcador, app de SMS,
cliente de correo). No hay confirmación de entrega.

Dos estrategias por launcher:
- navigate: activación principal (equivalente a navegar al URI)
- open_new: estrategia alternativa (abrir el URI en una ventana nueva)
"""

import logging
import webbrowser
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List


logger = logging.getLogger("action_layer.host_launcher")


class HandoffError(Exception):
    """El host rechazó la activación de un URI."""
    pass


class HostLauncher(ABC):
    """
    Contrato de las primitivas de activación del host.

    Las implementaciones lanzan HandoffError si el host rechaza el URI.
    """

    @abstractmethod
    def navigate(self, uri: str) -> None:
        """Activación principal del URI."""
        pass

    @abstractmethod
    def open_new(self, uri: str) -> None:
        """Activación alternativa del URI en un contexto nuevo."""
        pass


class WebBrowserLauncher(HostLauncher):
    """
    Launcher real basado en el módulo webbrowser.

    El navegador/SO decide qué aplicación maneja cada esquema.
    """

    def navigate(self, uri: str) -> None:
        try:
            opened = webbrowser.open(uri, new=0)
        except webbrowser.Error as e:
            raise HandoffError(f"Host rejected {uri}: {e}") from e
        if not opened:
            raise HandoffError(f"No handler available for {uri}")

    def open_new(self, uri: str) -> None:
        try:
            opened = webbrowser.open_new(uri)
        except webbrowser.Error as e:
            raise HandoffError(f"Host rejected {uri}: {e}") from e
        if not opened:
            raise HandoffError(f"No handler available for {uri}")


class MockLauncher(HostLauncher):
    """
    Mock del host para demos y tests.

    Registra cada URI activado. Las fallas se simulan con fragmentos: si el
    URI contiene alguno de fail_primary (o fail_fallback), la estrategia
    correspondiente lanza HandoffError.

    Ejemplo:
        launcher = MockLauncher(fail_primary={"tel:"})
        launcher.navigate("tel:5551234")   # HandoffError
        launcher.open_new("tel:5551234")   # OK
        launcher.uris  # ["tel:5551234"]
    """

    def __init__(
        self,
        fail_primary: Iterable[str] = (),
        fail_fallback: Iterable[str] = (),
        verbose: bool = False
    ):
        self.fail_primary = set(fail_primary)
        self.fail_fallback = set(fail_fallback)
        self.verbose = verbose
        self.launched: List[Dict[str, Any]] = []
        self.rejected: List[Dict[str, Any]] = []

    @property
    def uris(self) -> List[str]:
        """URIs activados con éxito, en orden."""
        return [entry["uri"] for entry in self.launched]

    def navigate(self, uri: str) -> None:
        self._activate(uri, "navigate", self.fail_primary)

    def open_new(self, uri: str) -> None:
        self._activate(uri, "open_new", self.fail_fallback)

    def _activate(self, uri: str, strategy: str, failures: set) -> None:
        entry = {
            "uri": uri,
            "strategy": strategy,
            "timestamp": datetime.now().isoformat()
        }
        if any(fragment in uri for fragment in failures):
            self.rejected.append(entry)
            raise HandoffError(f"[MOCK] Host rejected {uri}")

        self.launched.append(entry)

        if self.verbose:
            print("\n" + "─" * 70)
            print(f"🖥️  [HOST MOCK] {strategy.upper()}")
            print("─" * 70)
            print(f"   🔗 URI: {uri}")
            print("─" * 70 + "\n")

    def clear(self) -> None:
        """Limpia el historial de activaciones."""
        self.launched.clear()
        self.rejected.clear()
