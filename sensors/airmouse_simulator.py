#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                        🖱️ AirMouse Simulator 🖱️                              ║
║                Virtual emergency device for Airis-SH Control Center          ║
╚══════════════════════════════════════════════════════════════════════════════╝

Agente que simula el canal de emergencia del AirMouse. Envía bytes de
notificación (0 = sin alerta, 1 = emergencia) al Control Center por HTTP,
que los inyecta en el transporte simulado.

Requiere la API corriendo con el transporte simulado:
    python -m action_layer.api --transport simulated
"""

import argparse
import random
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, List, Optional

import requests


@dataclass
class SimulatorConfig:
    """Configuración del dispositivo virtual."""
    base_url: str = "http://localhost:8001"
    interval_seconds: float = 2.0
    emergency_probability: float = 0.05  # 5% de probabilidad por lectura
    connect_first: bool = True
    timeout_seconds: float = 5.0


class AirMouseSimulator:
    """
    🤖 AirMouse Simulator - Emite el canal de emergencia del dispositivo.
    """

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config or SimulatorConfig()
        self.running = False
        self.manual_emergency = False
        self._thread: Optional[threading.Thread] = None
        self._callbacks: List[Callable[[int, Optional[int]], None]] = []

        # Estadísticas
        self.total_notifications = 0
        self.total_emergencies = 0
        self.start_time: Optional[datetime] = None

    @property
    def notify_url(self) -> str:
        return f"{self.config.base_url}/api/device/notify"

    def connect(self) -> bool:
        """Pide al Control Center que conecte el enlace simulado."""
        try:
            response = requests.post(
                f"{self.config.base_url}/api/device/connect",
                timeout=self.config.timeout_seconds
            )
            connected = response.json().get("connected", False)
        except requests.RequestException as e:
            print(f"⚠️  Error conectando: {e}")
            return False

        print(f"{'🟢' if connected else '🔴'} Enlace simulado: {'conectado' if connected else 'no disponible'}")
        return connected

    def trigger_emergency(self) -> None:
        """Marca la próxima notificación como emergencia."""
        self.manual_emergency = True
        print("\n🚨 [AirMouse] EMERGENCIA SOLICITADA\n")

    def next_value(self) -> int:
        if self.manual_emergency:
            self.manual_emergency = False
            return 1
        if random.random() < self.config.emergency_probability:
            return 1
        return 0

    def send(self, value: int) -> Optional[int]:
        """
        Envía un byte de notificación.

        Returns:
            Código HTTP de la respuesta, o None si falló el envío
        """
        try:
            response = requests.post(
                self.notify_url,
                json={"value": value},
                timeout=self.config.timeout_seconds
            )
        except requests.exceptions.RequestException as e:
            print(f"⚠️  Error enviando notificación: {e}")
            return None

        self.total_notifications += 1
        if value == 1:
            self.total_emergencies += 1
        return response.status_code

    def run_once(self) -> int:
        """Envía una sola notificación y retorna el valor enviado."""
        value = self.next_value()
        status_code = self.send(value)

        timestamp = datetime.now().strftime("%H:%M:%S")
        indicator = "🔴" if value == 1 else "🟢"
        label = "EMERGENCY" if value == 1 else "clear"
        print(f"{indicator} [{timestamp}] byte={value} ({label}) | API: {status_code}")

        for callback in self._callbacks:
            callback(value, status_code)

        return value

    def run(self) -> None:
        """Ejecuta el simulador en modo continuo."""
        self.running = True
        self.start_time = datetime.now()

        print(self._get_banner())
        print(f"📡 Endpoint: {self.notify_url}")
        print(f"🔄 Intervalo: {self.config.interval_seconds}s")
        print("─" * 70)
        print("Comandos disponibles: [e] Emergencia | [q] Salir")
        print("─" * 70 + "\n")

        if self.config.connect_first:
            self.connect()

        try:
            while self.running:
                self.run_once()
                time.sleep(self.config.interval_seconds)
        except KeyboardInterrupt:
            self.stop()

    def run_async(self) -> threading.Thread:
        """Ejecuta el simulador en un hilo separado."""
        self._thread = threading.Thread(target=self.run, daemon=True)
        self._thread.start()
        return self._thread

    def stop(self) -> None:
        self.running = False
        print("\n" + "─" * 70)
        print(self._get_stats())
        print("─" * 70)
        print("👋 AirMouse Simulator detenido.\n")

    def register_callback(self, callback: Callable[[int, Optional[int]], None]) -> None:
        """Registra un callback que se ejecutará en cada notificación."""
        self._callbacks.append(callback)

    def _get_banner(self) -> str:
        return """
╔══════════════════════════════════════════════════════════════════════════════╗
║                        🖱️ AirMouse Simulator v1.0                            ║
║                  Canal de emergencia virtual para Airis-SH                   ║
╚══════════════════════════════════════════════════════════════════════════════╝
"""

    def _get_stats(self) -> str:
        runtime = datetime.now() - self.start_time if self.start_time else "N/A"
        return f"""
📊 ESTADÍSTICAS DE SESIÓN
   ├─ Notificaciones enviadas: {self.total_notifications}
   ├─ Emergencias señaladas: {self.total_emergencies}
   └─ Tiempo de ejecución: {runtime}
"""


def interactive_mode(simulator: AirMouseSimulator) -> None:
    """Modo interactivo con comandos por teclado."""
    import sys
    import select

    if sys.platform != "win32":
        while simulator.running:
            if select.select([sys.stdin], [], [], 0.1)[0]:
                cmd = sys.stdin.readline().strip().lower()
                if cmd == "e":
                    simulator.trigger_emergency()
                elif cmd == "q":
                    simulator.stop()
                    break


def main():
    """Punto de entrada principal del script."""
    parser = argparse.ArgumentParser(
        description="🖱️ AirMouse Simulator - Canal de emergencia virtual",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Ejemplos de uso:
  python airmouse_simulator.py --once 1          # Una sola emergencia
  python airmouse_simulator.py --interval 1      # Notificaciones cada segundo
  python airmouse_simulator.py --emergency-rate 0.2
        """
    )
    parser.add_argument("--url", default="http://localhost:8001", help="URL base del Control Center")
    parser.add_argument("--interval", type=float, default=2.0, help="Intervalo entre notificaciones (s)")
    parser.add_argument(
        "--emergency-rate",
        type=float,
        default=0.05,
        help="Probabilidad de emergencia por notificación 0-1 (default: 0.05)"
    )
    parser.add_argument(
        "--once",
        type=int,
        choices=range(0, 256),
        metavar="BYTE",
        default=None,
        help="Envía un único byte y termina"
    )
    parser.add_argument("--no-connect", action="store_true", help="No pedir conexión previa")

    args = parser.parse_args()

    config = SimulatorConfig(
        base_url=args.url,
        interval_seconds=args.interval,
        emergency_probability=args.emergency_rate,
        connect_first=not args.no_connect
    )
    simulator = AirMouseSimulator(config)

    if args.once is not None:
        if config.connect_first:
            simulator.connect()
        status_code = simulator.send(args.once)
        print(f"byte={args.once} | API: {status_code}")
        return

    simulator.run_async()

    try:
        interactive_mode(simulator)
    except Exception:
        # Fallback si el modo interactivo falla
        while simulator.running:
            time.sleep(1)


if __name__ == "__main__":
    main()
