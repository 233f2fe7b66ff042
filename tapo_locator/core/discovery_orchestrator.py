"""
Discovery Orchestrator for the Tapo locator.

Runs the discovery phases as a strict chain:

    prescan (always, result ignored)
      -> broadcast (resolved: stop)
      -> neighbor table (its result is final)

and returns a single DiscoveryResult. Network unreliability never escapes a
phase; only programming errors propagate.
"""

import time
from typing import Callable, List, Optional, Tuple

from .data_models import DiscoveryRequest, DiscoveryResult, PhaseResult, PhaseStatus
from .network_detector import NetworkDetector
from ..scanners.subnet_prescanner import SubnetPrescanner
from ..scanners.broadcast_scanner import BroadcastScanner
from ..scanners.neighbor_table_scanner import NeighborTableScanner
from ..config.config_loader import DiscoveryConfig
from ..utils.error_handler import ErrorHandler
from ..utils.logger import Logger, get_logger


class DiscoveryOrchestrator:
    """
    Resolves a device IP address from its MAC address.

    Phases can be replaced through the constructor, which is how tests
    observe which phases ran.
    """

    def __init__(
        self,
        config: Optional[DiscoveryConfig] = None,
        logger: Optional[Logger] = None,
        prescanner: Optional[SubnetPrescanner] = None,
        broadcast_scanner: Optional[BroadcastScanner] = None,
        neighbor_scanner: Optional[NeighborTableScanner] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """
        Initialize the discovery orchestrator.

        Args:
            config: Discovery configuration (defaults when omitted)
            logger: Logger for phase progress
            prescanner: Subnet prescan phase
            broadcast_scanner: Broadcast discovery phase
            neighbor_scanner: Neighbor table phase
            clock: Monotonic clock used for the overall deadline
        """
        self.config = config or DiscoveryConfig()
        self.logger = logger or get_logger(__name__)
        self.clock = clock

        error_handler = ErrorHandler(self.logger)
        detector = NetworkDetector(self.logger)

        self.prescanner = prescanner or SubnetPrescanner(self.logger, error_handler, detector)
        self.broadcast_scanner = broadcast_scanner or BroadcastScanner(self.logger, error_handler, detector)
        self.neighbor_scanner = neighbor_scanner or NeighborTableScanner(self.logger, error_handler, detector)

    def discover(self, request: DiscoveryRequest) -> DiscoveryResult:
        """
        Run the phase chain for one target.

        Args:
            request: Target MAC address

        Returns:
            DiscoveryResult: RESOLVED with the IP address, or NOT_FOUND
        """
        started = self.clock()
        deadline = started + self.config.deadline if self.config.deadline else None
        phases: List[PhaseResult] = []

        self.logger.debug(f"Discovering {request.normalized_mac}")

        for name, run_phase, is_final in self._pipeline(request):
            if deadline is not None and self.clock() >= deadline:
                self.logger.warning(f"Discovery deadline reached, skipping {name} phase")
                phases.append(PhaseResult(phase=name, status=PhaseStatus.SKIPPED,
                                          metadata={"reason": "deadline"}))
                continue

            phase_result = run_phase()
            phases.append(phase_result)
            self.logger.debug(
                f"Phase {name} finished: {phase_result.status.value}",
                duration=f"{phase_result.duration:.2f}s"
            )

            if is_final and phase_result.resolved:
                result = DiscoveryResult.resolved_with(phase_result, phases)
                result.duration = self.clock() - started
                return result

        result = DiscoveryResult.not_found(phases)
        result.duration = self.clock() - started
        return result

    def _pipeline(self, request: DiscoveryRequest) -> List[Tuple[str, Callable[[], PhaseResult], bool]]:
        """
        Ordered phases as (name, runner, can_resolve).
        """
        mac = request.normalized_mac
        return [
            (SubnetPrescanner.phase_name,
             lambda: self.prescanner.scan(self.config.prescan), False),
            (BroadcastScanner.phase_name,
             lambda: self.broadcast_scanner.discover(mac, self.config.broadcast), True),
            (NeighborTableScanner.phase_name,
             lambda: self.neighbor_scanner.resolve(mac, self.config.neighbor_table), True),
        ]


def locate_device_ip(mac_address: str, config: Optional[DiscoveryConfig] = None,
                     logger: Optional[Logger] = None) -> Optional[str]:
    """
    Resolve a MAC address to an IP address on the local network.

    Returns:
        The IP address, or None when the device was not found
    """
    result = DiscoveryOrchestrator(config=config, logger=logger).discover(DiscoveryRequest(mac_address))
    return result.ip_address if result.resolved else None
