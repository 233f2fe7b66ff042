"""
Local device client built on python-kasa.

python-kasa speaks the authenticated local protocol of Tapo devices; the
device found by discovery is connected to directly by IP address.
"""

import asyncio
from typing import Optional

from kasa import Device, Discover, KasaException

from .base_client import LocalDeviceClient
from ..core.data_models import DeviceState
from ..utils.error_handler import DeviceError, LoginError
from ..utils.logger import Logger, get_logger

DEVICE_ERRORS = (KasaException, OSError, asyncio.TimeoutError)


class KasaDeviceClient(LocalDeviceClient):
    """LocalDeviceClient whose session is a connected kasa Device."""

    def __init__(self, timeout: int = 10, logger: Optional[Logger] = None):
        self.timeout = timeout
        self.logger = logger or get_logger(__name__)

    async def login_by_ip(self, ip_address: str, email: str, password: str) -> Device:
        try:
            device = await Discover.discover_single(
                ip_address,
                username=email,
                password=password,
                timeout=self.timeout
            )
            if device is None:
                raise LoginError(f"No device answered at {ip_address}")
            await device.update()
        except DEVICE_ERRORS as e:
            raise LoginError(f"Local login to {ip_address} failed: {e}") from e

        self.logger.debug(f"Connected to {device.model} at {ip_address}")
        return device

    async def get_device_info(self, session: Device) -> DeviceState:
        try:
            await session.update()
        except DEVICE_ERRORS as e:
            raise DeviceError(f"Reading device state failed: {e}") from e
        return DeviceState(device_on=session.is_on, nickname=session.alias or "")

    async def set_power(self, session: Device, on: bool) -> None:
        try:
            if on:
                await session.turn_on()
            else:
                await session.turn_off()
        except DEVICE_ERRORS as e:
            raise DeviceError(f"Switching device {'on' if on else 'off'} failed: {e}") from e

    async def close(self, session: Device) -> None:
        try:
            await session.disconnect()
        except DEVICE_ERRORS as e:
            raise DeviceError(f"Closing device connection failed: {e}") from e
