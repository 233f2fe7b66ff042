"""
Core components for device discovery.

The orchestrator and toggle workflow live in their own modules
(``core.discovery_orchestrator``, ``core.toggle_workflow``) and are not
re-exported here because they depend on the scanners package.
"""

from .data_models import (
    DiscoveryStatus,
    PhaseStatus,
    ProbeOutcome,
    NetworkInterfaceInfo,
    DiscoveryRequest,
    BroadcastAttempt,
    PhaseResult,
    DiscoveryResult,
    Credentials,
    CloudDevice,
    DeviceState,
    ToggleOutcome
)
from .network_detector import NetworkDetector

__all__ = [
    'DiscoveryStatus',
    'PhaseStatus',
    'ProbeOutcome',
    'NetworkInterfaceInfo',
    'DiscoveryRequest',
    'BroadcastAttempt',
    'PhaseResult',
    'DiscoveryResult',
    'Credentials',
    'CloudDevice',
    'DeviceState',
    'ToggleOutcome',
    'NetworkDetector'
]
