#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                🔗 Airis-SH Emergency Pipeline Demo                           ║
║          Device Link → Alert Coordinator → Fan-Out → Host handoff            ║
╚══════════════════════════════════════════════════════════════════════════════╝

Script que integra todas las capas en un solo proceso con el transporte
simulado y un host mock: no hace falta hardware ni abre aplicaciones.

Usage:
    python run_live_demo.py
    python run_live_demo.py --bytes 1 0 1 2 1 --debounce 0
"""

import argparse
import asyncio
import logging

from alert_core.config import AlertConfig
from alert_core.models import AlertStatus, describe_status
from device_link.config import LinkConfig
from device_link.transports.simulated import SimulatedTransport, SimulatedDevice
from action_layer.control_center import ControlCenter
from action_layer.host_launcher import MockLauncher
from action_layer.settings_store import SettingsStore


logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s"
)


async def run_demo(values, debounce: float, sms_delay: float) -> None:
    transport = SimulatedTransport(devices=[SimulatedDevice(name="AirMouse-DEMO")])
    launcher = MockLauncher(verbose=True)

    store = SettingsStore()
    store.reset()
    store.add_contact(name="Mom", phone="555-1234")
    store.add_contact(name="Dr. Lee", email="lee@x.com")

    center = ControlCenter(
        transport=transport,
        store=store,
        launcher=launcher,
        link_config=LinkConfig(transport="simulated", debounce_seconds=debounce),
        alert_config=AlertConfig(sms_delay_seconds=sms_delay)
    )

    def on_status(status: AlertStatus) -> None:
        print(f"\n📣 UI ← {describe_status(status)}\n")

    center.coordinator.add_status_listener(on_status)

    connected = await center.start()
    print(f"\n🔗 Dispositivo: {center.session.get_device_name()} | Conectado: {connected}\n")
    print("─" * 70)

    for value in values:
        print(f"📥 Notificación: byte={value}")
        transport.push(value)
        await center.coordinator.wait_idle()

    print("─" * 70)
    print("🔌 Simulando pérdida de enlace...")
    transport.drop_link()
    print(f"   Conectado: {center.session.get_connected()}")

    await center.stop()

    stats = center.get_status()
    print(f"""
📊 ESTADÍSTICAS DEL PIPELINE

   Notificaciones recibidas: {stats['device']['stats']['notifications_received']}
   Emergencias detectadas: {stats['device']['stats']['emergencies_detected']}
   Estados reportados: {stats['alerts']['alerts_reported']}
   URIs entregados al host: {len(launcher.uris)}
""")


def main():
    """Ejecuta la demo del pipeline completo."""
    parser = argparse.ArgumentParser(description="🔗 Airis-SH Emergency Pipeline Demo")
    parser.add_argument("--bytes", type=int, nargs="+", default=[0, 1, 0], help="Bytes a notificar")
    parser.add_argument("--debounce", type=float, default=0.0, help="Ventana de debounce (s)")
    parser.add_argument("--sms-delay", type=float, default=0.5, help="Pausa entre SMS (s)")
    args = parser.parse_args()

    print("""
╔══════════════════════════════════════════════════════════════════════════════╗
║                🔗 Airis-SH Emergency Pipeline Demo                           ║
╚══════════════════════════════════════════════════════════════════════════════╝
    """)

    asyncio.run(run_demo(args.bytes, args.debounce, args.sms_delay))
    print("👋 Demo finalizada.\n")


if __name__ == "__main__":
    main()
