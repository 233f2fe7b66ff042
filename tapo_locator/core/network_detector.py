"""
Host network interface detection.

This module provides the NetworkDetector class which enumerates the host's
active, non-loopback IPv4 interfaces and derives the broadcast addresses the
discovery query is sent to.
"""

import socket
import ipaddress
from typing import List, Optional

import psutil

from .data_models import NetworkInterfaceInfo
from ..utils.logger import Logger
from ..utils.network_utils import LIMITED_BROADCAST


class NetworkDetector:
    """
    Enumerates IPv4 interfaces and broadcast targets.

    Nothing is cached: every call queries the OS again so DHCP changes
    between runs are picked up.
    """

    def __init__(self, logger: Optional[Logger] = None):
        """
        Initialize the NetworkDetector.

        Args:
            logger: Logger instance for diagnostic output
        """
        self.logger = logger

    def get_active_interfaces(self) -> List[NetworkInterfaceInfo]:
        """
        Return every interface that is up and not loopback.

        One entry is produced per IPv4 address, so an adapter carrying two
        addresses yields two entries. Order follows the OS report.

        Returns:
            List[NetworkInterfaceInfo]: Empty when no usable IPv4 interface exists
        """
        try:
            addresses = psutil.net_if_addrs()
            stats = psutil.net_if_stats()
        except OSError as e:
            self._log_debug(f"Interface enumeration failed: {e}")
            return []

        interfaces = []
        for name, addrs in addresses.items():
            iface_stats = stats.get(name)
            if iface_stats is None or not iface_stats.isup:
                continue

            for addr in addrs:
                if addr.family != socket.AF_INET or not addr.address:
                    continue
                if not self._is_usable_address(addr.address):
                    continue
                if not addr.netmask:
                    self._log_debug(f"Skipping {name} {addr.address}: no netmask reported")
                    continue

                interfaces.append(NetworkInterfaceInfo(
                    name=name,
                    ip_address=addr.address,
                    netmask=addr.netmask
                ))

        if interfaces:
            self._log_debug(
                "Active interfaces: " + ", ".join(f"{i.name}={i.ip_address}/{i.netmask}" for i in interfaces)
            )
        else:
            self._log_debug("No active IPv4 interface found")
        return interfaces

    def get_primary_interface(self) -> Optional[NetworkInterfaceInfo]:
        """Return the first active interface, or None."""
        interfaces = self.get_active_interfaces()
        return interfaces[0] if interfaces else None

    def get_broadcast_targets(self) -> List[str]:
        """
        Compute the deduplicated broadcast candidate list.

        The limited broadcast address comes first, followed by the directed
        broadcast of every active interface in enumeration order.

        Returns:
            List[str]: Broadcast addresses, never empty
        """
        targets = [LIMITED_BROADCAST]
        for iface in self.get_active_interfaces():
            try:
                broadcast = iface.broadcast_address
            except ValueError as e:
                self._log_debug(f"Skipping {iface.name}: {e}")
                continue
            if broadcast not in targets:
                targets.append(broadcast)
        return targets

    def _is_usable_address(self, ip: str) -> bool:
        try:
            return not ipaddress.IPv4Address(ip).is_loopback
        except ipaddress.AddressValueError:
            return False

    def _log_debug(self, message: str) -> None:
        if self.logger:
            self.logger.debug(message)
