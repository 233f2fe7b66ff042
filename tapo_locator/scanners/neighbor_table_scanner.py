"""
Neighbor (ARP) table lookup.

Fallback phase: asks the OS neighbor utility for its table and returns the
IPv4 address on the first line that mentions the target MAC.
"""

import platform
import subprocess
from typing import List, Optional

from .base_scanner import BaseScanner
from ..core.data_models import PhaseResult, PhaseStatus
from ..config.config_loader import NeighborTableConfig
from ..utils.error_handler import ErrorType
from ..utils.network_utils import normalize_mac, mac_in_text, extract_ipv4


class NeighborTableScanner(BaseScanner):
    """
    Resolves a MAC address through the OS neighbor table.

    Windows:  arp -a
    macOS:    arp -an
    Others:   ip neighbor show
    """

    phase_name = "neighbor_table"

    def resolve(self, target_mac: str, config: Optional[NeighborTableConfig] = None) -> PhaseResult:
        """
        Look the MAC address up in the neighbor table.

        Any failure to run or read the command collapses to NOT_FOUND.

        Args:
            target_mac: MAC address in any separator style
            config: Neighbor table configuration

        Returns:
            PhaseResult with status RESOLVED and ip_address, or NOT_FOUND
        """
        config = config or NeighborTableConfig()
        self._start_timer()

        if not target_mac or not normalize_mac(target_mac):
            return self._result(PhaseStatus.NOT_FOUND)

        cmd = config.command or self.default_command()
        output, error = self._read_table(cmd, config.timeout)
        if output is None:
            return self._result(PhaseStatus.NOT_FOUND, errors=[error], metadata={"command": cmd})

        ip_address = self.parse_table(output, target_mac)
        if ip_address:
            return self._result(PhaseStatus.RESOLVED, ip_address=ip_address, metadata={"command": cmd})

        self._log_debug(f"No neighbor table entry for {normalize_mac(target_mac)}")
        return self._result(PhaseStatus.NOT_FOUND, metadata={"command": cmd})

    @staticmethod
    def default_command() -> List[str]:
        system = platform.system().lower()
        if system == "windows":
            return ["arp", "-a"]
        if system == "darwin":
            return ["arp", "-an"]
        return ["ip", "neighbor", "show"]

    @staticmethod
    def parse_table(output: str, target_mac: str) -> Optional[str]:
        """
        Return the first IPv4 literal on a line mentioning the target MAC.

        >>> NeighborTableScanner.parse_table(
        ...     "192.168.1.50 dev eth0 lladdr aa:bb:cc:dd:ee:ff REACHABLE", "AABBCCDDEEFF")
        '192.168.1.50'
        """
        for line in output.splitlines():
            if mac_in_text(target_mac, line):
                ip_address = extract_ipv4(line)
                if ip_address:
                    return ip_address
        return None

    def _read_table(self, cmd: List[str], timeout: float):
        """
        Run the neighbor command and capture its standard output.

        subprocess.run kills the child when the timeout expires.

        Returns:
            Tuple of (output or None, error_message)
        """
        try:
            result = subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                errors="replace",
                timeout=timeout
            )
        except (subprocess.TimeoutExpired, OSError) as e:
            return None, self._absorb(e, ErrorType.SUBPROCESS_ERROR, "neighbor_table", command=cmd[0])

        if result.returncode != 0:
            self._log_debug(f"{' '.join(cmd)} exited with code {result.returncode}")
        return result.stdout or "", None
