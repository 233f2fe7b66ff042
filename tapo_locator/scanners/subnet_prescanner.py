"""
ICMP sweep of the local /24 used to warm the OS neighbor (ARP) cache.

Replies are irrelevant: the point is that the kernel resolves the link-layer
address of every host that answers, so the neighbor table lookup that may
run later has something to find.
"""

import platform
import subprocess
from concurrent.futures import ThreadPoolExecutor
from typing import List, Optional

from .base_scanner import BaseScanner
from ..core.data_models import PhaseResult, PhaseStatus
from ..config.config_loader import PrescanConfig
from ..utils.error_handler import ErrorType
from ..utils.network_utils import subnet_base_24

HOSTS_PER_SUBNET = 254


class SubnetPrescanner(BaseScanner):
    """
    Fire-and-forget ICMP echo sweep.

    ``scan`` returns only after every probe has finished or timed out. It
    never reports whether discovery succeeded; its result carries
    diagnostics only.
    """

    phase_name = "prescan"

    def scan(self, config: Optional[PrescanConfig] = None) -> PhaseResult:
        """
        Probe every host address of the first interface's /24.

        Args:
            config: Prescan configuration

        Returns:
            PhaseResult with status COMPLETED, or SKIPPED without an interface
        """
        config = config or PrescanConfig()
        self._start_timer()

        interface = self.network_detector.get_primary_interface()
        if interface is None:
            self._log_debug("No IPv4 interface found, skipping prescan")
            return self._result(PhaseStatus.SKIPPED, metadata={"probes": 0})

        targets = self.build_targets(interface.ip_address)
        self._log_debug(f"Prescanning {len(targets)} hosts from {interface.name} using {config.method}")

        if config.method == "scapy":
            replies, errors = self._sweep_with_scapy(targets, config)
        else:
            replies, errors = self._sweep_with_ping(targets, config)

        return self._result(
            PhaseStatus.COMPLETED,
            errors=errors,
            metadata={
                "probes": len(targets),
                "replies": replies,
                "method": config.method,
                "subnet": f"{subnet_base_24(interface.ip_address)}0/24"
            }
        )

    @staticmethod
    def build_targets(ip_address: str) -> List[str]:
        base = subnet_base_24(ip_address)
        return [f"{base}{host}" for host in range(1, HOSTS_PER_SUBNET + 1)]

    def _sweep_with_ping(self, targets: List[str], config: PrescanConfig):
        with ThreadPoolExecutor(max_workers=config.parallel_threads) as executor:
            outcomes = list(executor.map(lambda target: self._ping_single_target(target, config), targets))

        replies = sum(1 for replied, _ in outcomes if replied)
        errors = [error for _, error in outcomes if error]
        return replies, errors

    def _ping_single_target(self, target: str, config: PrescanConfig):
        """
        Send one echo request with the OS ping binary.

        Returns:
            Tuple of (replied, error_message)
        """
        cmd = self.build_ping_command(target, config.timeout)
        try:
            result = subprocess.run(
                cmd,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                timeout=config.timeout + config.process_grace
            )
            return result.returncode == 0, None
        except subprocess.TimeoutExpired:
            return False, None
        except OSError as e:
            # Missing binary or no permission; every probe hits the same error
            return False, self._absorb(e, ErrorType.SUBPROCESS_ERROR, "ping", target=target)

    @staticmethod
    def build_ping_command(target: str, timeout: float) -> List[str]:
        system = platform.system().lower()
        timeout_ms = max(1, int(round(timeout * 1000)))

        if system == "windows":
            return ["ping", "-n", "1", "-w", str(timeout_ms), target]
        if system == "darwin":
            return ["ping", "-c", "1", "-W", str(timeout_ms), target]
        # iputils takes -W in seconds and accepts fractions
        return ["ping", "-c", "1", "-W", f"{timeout_ms / 1000:g}", target]

    def _sweep_with_scapy(self, targets: List[str], config: PrescanConfig):
        from scapy.all import IP, ICMP, sr
        from scapy.error import Scapy_Exception

        packets = [IP(dst=target) / ICMP() for target in targets]
        try:
            answered, _ = sr(packets, timeout=config.timeout, verbose=False)
        except (OSError, Scapy_Exception) as e:
            return 0, [self._absorb(e, ErrorType.TRANSPORT_ERROR, "scapy_sweep")]
        return len(answered), []
