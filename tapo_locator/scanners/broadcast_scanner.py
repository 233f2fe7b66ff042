"""
UDP broadcast discovery.

Sends the vendor discovery query to the limited broadcast address and to the
directed broadcast of every active interface, one candidate at a time, and
accepts the first reply whose payload mentions the target MAC address. The
reply's network-layer source address is the resolved IP; any address
claimed inside the payload is ignored.
"""

import socket
from typing import Callable, Optional

from .base_scanner import BaseScanner
from ..core.data_models import BroadcastAttempt, PhaseResult, PhaseStatus, ProbeOutcome
from ..config.config_loader import BroadcastConfig
from ..utils.error_handler import ErrorType
from ..utils.network_utils import normalize_mac, mac_in_text


class BroadcastScanner(BaseScanner):
    """
    Sequential broadcast query over all candidate addresses.

    Each candidate gets its own socket, closed before moving to the next one,
    so a late reply to one query can never be read as the answer to another.
    """

    phase_name = "broadcast"

    def __init__(self, logger=None, error_handler=None, network_detector=None,
                 socket_factory: Callable[..., socket.socket] = socket.socket):
        super().__init__(logger, error_handler, network_detector)
        self.socket_factory = socket_factory

    def discover(self, target_mac: str, config: Optional[BroadcastConfig] = None) -> PhaseResult:
        """
        Broadcast the discovery query until a reply names the target MAC.

        Args:
            target_mac: MAC address in any separator style
            config: Broadcast configuration

        Returns:
            PhaseResult with status RESOLVED and ip_address, or NOT_FOUND
        """
        config = config or BroadcastConfig()
        self._start_timer()

        if not normalize_mac(target_mac):
            self._log_debug("Empty target MAC, skipping broadcast discovery")
            return self._result(PhaseStatus.NOT_FOUND)

        payload = config.payload.encode("utf-8")
        attempts = []
        errors = []

        for address in self.network_detector.get_broadcast_targets():
            attempt = self._query_address(address, payload, target_mac, config)
            attempts.append(attempt)

            if attempt.outcome == ProbeOutcome.TRANSPORT_ERROR:
                errors.append(f"{address}: {attempt.detail}")
            elif attempt.outcome == ProbeOutcome.MATCHED:
                self._log_debug(f"{attempt.responder} answered the query sent to {address}")
                return self._result(
                    PhaseStatus.RESOLVED,
                    ip_address=attempt.responder,
                    errors=errors,
                    attempts=attempts
                )

        return self._result(PhaseStatus.NOT_FOUND, errors=errors, attempts=attempts)

    def _query_address(self, address: str, payload: bytes, target_mac: str,
                       config: BroadcastConfig) -> BroadcastAttempt:
        """
        Send one query to a broadcast address and wait for a single reply.
        """
        try:
            with self.socket_factory(socket.AF_INET, socket.SOCK_DGRAM) as sock:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_BROADCAST, 1)
                sock.settimeout(config.timeout)
                sock.sendto(payload, (address, config.port))

                try:
                    data, (responder, _port) = sock.recvfrom(config.buffer_size)
                except socket.timeout:
                    self._log_debug(f"No reply from {address} within {config.timeout}s")
                    return BroadcastAttempt(address=address, outcome=ProbeOutcome.NO_REPLY)

        except OSError as e:
            detail = self._absorb(e, ErrorType.TRANSPORT_ERROR, "broadcast_query", address=address)
            return BroadcastAttempt(address=address, outcome=ProbeOutcome.TRANSPORT_ERROR, detail=detail)

        response = data.decode("utf-8", errors="replace").lower()
        if mac_in_text(target_mac, response):
            return BroadcastAttempt(address=address, outcome=ProbeOutcome.MATCHED, responder=responder)

        self._log_debug(f"Reply from {responder} via {address} does not mention the target MAC")
        return BroadcastAttempt(address=address, outcome=ProbeOutcome.MISMATCH, responder=responder)
