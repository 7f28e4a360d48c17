#!/usr/bin/env python3
"""
╔══════════════════════════════════════════════════════════════════════════════╗
║                   📡 Bleak BLE Transport - Airis-SH Control Center           ║
║                       Layer 1: Bluetooth Low Energy adapter                   ║
╚══════════════════════════════════════════════════════════════════════════════╝

Transporte concreto sobre Bluetooth Low Energy usando bleak.
Traduce el contrato LinkTransport a escaneo, conexión GATT y
notificaciones de característica.
"""

import logging
from typing import Any, List, Optional

from bleak import BleakClient, BleakScanner
from bleak.backends.characteristic import BleakGATTCharacteristic
from bleak.backends.device import BLEDevice
from bleak.exc import BleakError

from .base import (
    CharacteristicNotFoundError,
    DeviceNotFoundError,
    LinkError,
    LinkLossHandler,
    LinkTransport,
    NotificationHandler,
    ServiceNotFoundError,
    SubscriptionError,
    TransportUnavailableError,
)


logger = logging.getLogger("device_link.transports.bleak")


class BleakTransport(LinkTransport):
    """
    📡 Transporte BLE real.

    Example:
        >>> transport = BleakTransport(scan_timeout=10.0)
        >>> session = DeviceLinkSession(transport)
        >>> await session.connect()
    """

    def __init__(self, scan_timeout: float = 10.0):
        self.scan_timeout = scan_timeout

    @property
    def name(self) -> str:
        return "bleak"

    async def request_device(self, name_prefix: str, service_uuids: List[str]) -> BLEDevice:
        """
        Escanea hasta encontrar un dispositivo cuyo nombre empiece con name_prefix.

        Raises:
            TransportUnavailableError: Si el adaptador Bluetooth no está disponible
            DeviceNotFoundError: Si no aparece ningún dispositivo compatible
        """
        def matches(device: BLEDevice, _advertisement: Any) -> bool:
            return bool(device.name and device.name.startswith(name_prefix))

        try:
            device = await BleakScanner.find_device_by_filter(matches, timeout=self.scan_timeout)
        except BleakError as e:
            raise TransportUnavailableError(f"Bluetooth scan failed: {e}") from e

        if device is None:
            raise DeviceNotFoundError(
                f"No device with name prefix '{name_prefix}' found in {self.scan_timeout}s"
            )

        logger.info(f"Device selected: {device.name} ({device.address})")
        return device

    def device_name(self, device: Any) -> Optional[str]:
        return getattr(device, "name", None)

    async def open_session(self, device: BLEDevice, on_link_loss: LinkLossHandler) -> BleakClient:
        client = BleakClient(device, disconnected_callback=lambda _client: on_link_loss())
        try:
            await client.connect()
        except BleakError as e:
            raise LinkError(f"GATT connection failed: {e}") from e
        logger.info("Connected to GATT server")
        return client

    async def get_service(self, session: BleakClient, uuid: str) -> Any:
        service = session.services.get_service(uuid)
        if service is None:
            raise ServiceNotFoundError(f"Service {uuid} not found")
        return service

    async def get_characteristic(self, session: BleakClient, service: Any, uuid: str) -> Any:
        characteristic = service.get_characteristic(uuid)
        if characteristic is None:
            raise CharacteristicNotFoundError(f"Characteristic {uuid} not found")
        return characteristic

    async def start_notifications(
        self,
        session: BleakClient,
        characteristic: Any,
        handler: NotificationHandler
    ) -> None:
        def on_notify(_sender: BleakGATTCharacteristic, data: bytearray) -> None:
            handler(bytes(data))

        try:
            await session.start_notify(characteristic, on_notify)
        except BleakError as e:
            raise SubscriptionError(f"Notification subscription rejected: {e}") from e

    async def stop_notifications(self, session: BleakClient, characteristic: Any) -> None:
        await session.stop_notify(characteristic)

    async def close_session(self, session: BleakClient) -> None:
        await session.disconnect()
