"""
Toggle workflow: cloud login, device selection, discovery, local toggle.

Steps:
    1. Authenticate with the cloud account
    2. Pick the device (by label, or through an interactive chooser)
    3. Resolve its local IP with the discovery orchestrator
    4. Log in to the device by IP
    5. Flip its power state and read it back
"""

import asyncio
from typing import Callable, List, Optional

from .data_models import CloudDevice, Credentials, DiscoveryRequest, ToggleOutcome
from .discovery_orchestrator import DiscoveryOrchestrator
from ..clients.base_client import CloudAccountClient, LocalDeviceClient
from ..utils.error_handler import DeviceNotFoundError, DeviceSelectionError
from ..utils.logger import Logger, get_logger

DeviceChooser = Callable[[List[CloudDevice]], Optional[CloudDevice]]


def find_device_by_label(devices: List[CloudDevice], label: str) -> Optional[CloudDevice]:
    """Return the first device whose alias equals label, ignoring case."""
    wanted = label.casefold()
    return next((d for d in devices if d.alias.casefold() == wanted), None)


class ToggleWorkflow:
    """
    Drives one toggle run against injected collaborators.
    """

    def __init__(
        self,
        cloud_client: CloudAccountClient,
        device_client: LocalDeviceClient,
        orchestrator: Optional[DiscoveryOrchestrator] = None,
        logger: Optional[Logger] = None,
    ):
        self.cloud_client = cloud_client
        self.device_client = device_client
        self.logger = logger or get_logger(__name__)
        self.orchestrator = orchestrator or DiscoveryOrchestrator(logger=self.logger)

    def select_device(self, credentials: Credentials,
                      chooser: Optional[DeviceChooser] = None) -> CloudDevice:
        """
        Steps 1 and 2: cloud login and device selection.

        A device label in the credentials takes precedence over the chooser.

        Raises:
            AuthError: Cloud login failed
            DeviceSelectionError: No device matched or none was chosen
        """
        self.logger.info("Authenticating with Tapo Cloud...")
        token = self.cloud_client.login(credentials.email, credentials.password)
        self.logger.info("Cloud login successful")

        devices = self.cloud_client.list_devices(token)

        if credentials.device_label:
            self.logger.info(f"Searching for device with label: '{credentials.device_label}'")
            selected = find_device_by_label(devices, credentials.device_label)
        elif chooser is not None:
            selected = chooser(devices) if devices else None
        else:
            selected = None

        if selected is None:
            raise DeviceSelectionError("No device selected or found")

        self.logger.info(f"Selected: {selected.alias}", mac=selected.device_mac)
        return selected

    def locate(self, device: CloudDevice) -> str:
        """
        Step 3: resolve the device IP.

        Raises:
            DeviceNotFoundError: Discovery returned NOT_FOUND
        """
        self.logger.progress_start("Resolving local IP")
        result = self.orchestrator.discover(DiscoveryRequest(device.device_mac))

        if not result.resolved:
            self.logger.progress_end()
            raise DeviceNotFoundError("Could not find the device on the local network")

        self.logger.progress_end(f"Resolved local IP: {result.ip_address} (via {result.resolved_by})")
        return result.ip_address

    def run(self, credentials: Credentials,
            chooser: Optional[DeviceChooser] = None) -> ToggleOutcome:
        """
        Execute the full toggle sequence.

        Returns:
            ToggleOutcome describing the state change
        """
        device = self.select_device(credentials, chooser)
        ip_address = self.locate(device)
        return asyncio.run(self._toggle(device, ip_address, credentials))

    async def _toggle(self, device: CloudDevice, ip_address: str,
                      credentials: Credentials) -> ToggleOutcome:
        """Steps 4 and 5, inside one event loop."""
        self.logger.info(f"Attempting local login to {ip_address}...")
        session = await self.device_client.login_by_ip(ip_address, credentials.email, credentials.password)
        self.logger.success("Local connection established")

        try:
            info = await self.device_client.get_device_info(session)
            new_state = not info.device_on

            self.logger.info(f"Current state: {'ON' if info.device_on else 'OFF'}")
            self.logger.info(f"Toggling device to: {'ON' if new_state else 'OFF'}...")
            await self.device_client.set_power(session, new_state)

            updated = await self.device_client.get_device_info(session)
        finally:
            await self.device_client.close(session)

        return ToggleOutcome(
            device=device,
            ip_address=ip_address,
            previous_state=info.device_on,
            new_state=updated.device_on,
            nickname=updated.nickname or device.nickname or device.alias
        )
