"""
TP-Link cloud client.

Talks the JSON-RPC style API of the TP-Link cloud used by the Tapo app:
``login`` returns a token, ``getDeviceList`` (with ``?token=``) returns the
devices registered to the account.
"""

import uuid
import requests
from typing import Any, Dict, List, Optional

from .base_client import CloudAccountClient
from ..core.data_models import CloudDevice
from ..utils.error_handler import AuthError, CloudError, with_retry
from ..utils.logger import Logger, get_logger

DEFAULT_CLOUD_URL = "https://eu-wap.tplinkcloud.com/"
APP_TYPE = "Tapo_Android"


class TapoCloudClient(CloudAccountClient):
    """
    Cloud account client backed by a requests.Session.
    """

    def __init__(self, base_url: str = DEFAULT_CLOUD_URL, timeout: float = 10.0,
                 session: Optional[requests.Session] = None, logger: Optional[Logger] = None):
        """
        Initialize the cloud client.

        Args:
            base_url: Cloud endpoint
            timeout: Per-request timeout in seconds
            session: Pre-configured requests session
            logger: Logger instance
        """
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        self.terminal_uuid = str(uuid.uuid4())
        self.logger = logger or get_logger(__name__)

    def login(self, email: str, password: str) -> str:
        """
        Authenticate with the account credentials.

        Raises:
            AuthError: On rejected credentials or network failure
        """
        payload = {
            "method": "login",
            "params": {
                "appType": APP_TYPE,
                "cloudUserName": email,
                "cloudPassword": password,
                "terminalUUID": self.terminal_uuid
            }
        }

        try:
            result = self._call(payload)
        except requests.exceptions.RequestException as e:
            raise AuthError(f"Cloud login failed: {e}") from e
        except CloudError as e:
            raise AuthError(f"Cloud login rejected: {e}") from e

        token = result.get("token")
        if not token:
            raise AuthError("Cloud login returned no token")

        self.logger.debug("Cloud login successful")
        return token

    def list_devices(self, token: str) -> List[CloudDevice]:
        """
        Return the devices registered to the account.

        Raises:
            CloudError: On request or API failure
        """
        try:
            result = self._call({"method": "getDeviceList"}, params={"token": token})
        except requests.exceptions.RequestException as e:
            raise CloudError(f"Device listing failed: {e}") from e

        devices = [self._parse_device(entry) for entry in result.get("deviceList") or []]
        self.logger.debug(f"Cloud returned {len(devices)} devices")
        return devices

    @with_retry(max_retries=2, error_types=(requests.exceptions.ConnectionError, requests.exceptions.Timeout))
    def _call(self, payload: Dict[str, Any], params: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        response = self.session.post(self.base_url, json=payload, params=params, timeout=self.timeout)
        response.raise_for_status()

        try:
            body = response.json()
        except ValueError as e:
            raise CloudError(f"Invalid response from cloud: {e}") from e

        error_code = body.get("error_code", 0)
        if error_code != 0:
            message = body.get("msg") or "unknown error"
            raise CloudError(f"{payload['method']} failed with error {error_code}: {message}")

        return body.get("result") or {}

    @staticmethod
    def _parse_device(entry: Dict[str, Any]) -> CloudDevice:
        return CloudDevice(
            alias=entry.get("alias") or entry.get("deviceName") or "",
            device_mac=entry.get("deviceMac") or "",
            device_model=entry.get("deviceModel") or "",
            nickname=entry.get("nickname") or ""
        )
