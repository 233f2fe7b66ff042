"""
Interfaces of the collaborators used around discovery.

The cloud account service yields the device list (and so the MAC address to
look for); the local device client logs in by IP once discovery has found
the device and drives the power toggle.
"""

from abc import ABC, abstractmethod
from typing import Any, List

from ..core.data_models import CloudDevice, DeviceState


class CloudAccountClient(ABC):
    """Remote account service."""

    @abstractmethod
    def login(self, email: str, password: str) -> str:
        """
        Authenticate against the cloud.

        Returns:
            Session token

        Raises:
            AuthError: Bad credentials or cloud unreachable
        """

    @abstractmethod
    def list_devices(self, token: str) -> List[CloudDevice]:
        """
        List the devices registered to the account.

        Raises:
            CloudError: Request failed
        """


class LocalDeviceClient(ABC):
    """
    Authenticated local protocol client.

    Methods are coroutines; one toggle run executes them inside a single
    event loop. The session object is opaque to callers.
    """

    @abstractmethod
    async def login_by_ip(self, ip_address: str, email: str, password: str) -> Any:
        """
        Perform the local handshake.

        Raises:
            LoginError: Handshake failed
        """

    @abstractmethod
    async def get_device_info(self, session: Any) -> DeviceState:
        """Read the current power state and nickname."""

    @abstractmethod
    async def set_power(self, session: Any, on: bool) -> None:
        """Switch the device on or off."""

    async def close(self, session: Any) -> None:
        """Release the session. Default: nothing to release."""
