"""
Core data models and enums for the Tapo locator.

Everything here is created and discarded within a single discovery or
toggle run; nothing is persisted.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Dict, Any

from ..utils.network_utils import normalize_mac, directed_broadcast


class DiscoveryStatus(Enum):
    """Terminal outcome of a discovery run."""
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"


class PhaseStatus(Enum):
    """Outcome of a single discovery phase."""
    RESOLVED = "resolved"
    NOT_FOUND = "not_found"
    COMPLETED = "completed"
    SKIPPED = "skipped"


class ProbeOutcome(Enum):
    """Outcome of one broadcast send/receive exchange."""
    MATCHED = "matched"
    NO_REPLY = "no_reply"
    MISMATCH = "mismatch"
    TRANSPORT_ERROR = "transport_error"


@dataclass(frozen=True)
class NetworkInterfaceInfo:
    """
    IPv4 configuration of one active, non-loopback adapter.

    Attributes:
        name: OS interface name
        ip_address: Unicast IPv4 address
        netmask: Dotted decimal subnet mask
    """
    name: str
    ip_address: str
    netmask: str

    @property
    def broadcast_address(self) -> str:
        return directed_broadcast(self.ip_address, self.netmask)


@dataclass(frozen=True)
class DiscoveryRequest:
    """Target MAC address as given (any separator style)."""
    mac_address: str

    @property
    def normalized_mac(self) -> str:
        return normalize_mac(self.mac_address)


@dataclass
class BroadcastAttempt:
    """
    Record of one broadcast candidate.

    Attributes:
        address: Broadcast address the query was sent to
        outcome: What happened on this iteration
        responder: Source IP of the reply, if any arrived
        detail: Error text for transport errors
    """
    address: str
    outcome: ProbeOutcome
    responder: Optional[str] = None
    detail: Optional[str] = None


@dataclass
class PhaseResult:
    """
    Result of a single discovery phase.

    Attributes:
        phase: Phase name ("prescan", "broadcast", "neighbor_table")
        status: Outcome of the phase
        ip_address: Resolved address when status is RESOLVED
        duration: Time spent in the phase in seconds
        errors: Errors absorbed during the phase
        attempts: Per-candidate records (broadcast phase)
        metadata: Phase specific diagnostics
    """
    phase: str
    status: PhaseStatus
    ip_address: Optional[str] = None
    duration: float = 0.0
    errors: List[str] = field(default_factory=list)
    attempts: List[BroadcastAttempt] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def resolved(self) -> bool:
        return self.status == PhaseStatus.RESOLVED and self.ip_address is not None


@dataclass
class DiscoveryResult:
    """
    Final outcome of a discovery run.

    Either RESOLVED with the device IP or NOT_FOUND. ``phases`` lists the
    per-phase results in execution order for diagnostics.
    """
    status: DiscoveryStatus
    ip_address: Optional[str] = None
    resolved_by: Optional[str] = None
    phases: List[PhaseResult] = field(default_factory=list)
    duration: float = 0.0

    @property
    def resolved(self) -> bool:
        return self.status == DiscoveryStatus.RESOLVED

    @classmethod
    def resolved_with(cls, phase_result: PhaseResult, phases: List[PhaseResult]) -> "DiscoveryResult":
        return cls(
            status=DiscoveryStatus.RESOLVED,
            ip_address=phase_result.ip_address,
            resolved_by=phase_result.phase,
            phases=phases,
        )

    @classmethod
    def not_found(cls, phases: List[PhaseResult]) -> "DiscoveryResult":
        return cls(status=DiscoveryStatus.NOT_FOUND, phases=phases)


@dataclass
class Credentials:
    """Account credentials and the optional label of the device to toggle."""
    email: str = ""
    password: str = ""
    device_label: str = ""

    @property
    def complete(self) -> bool:
        return bool(self.email and self.password)


@dataclass
class CloudDevice:
    """Device record returned by the cloud account listing."""
    alias: str
    device_mac: str
    device_model: str = ""
    nickname: str = ""


@dataclass
class DeviceState:
    """Power state reported by a device over the local protocol."""
    device_on: bool
    nickname: str = ""


@dataclass
class ToggleOutcome:
    """Result of a completed toggle run."""
    device: CloudDevice
    ip_address: str
    previous_state: bool
    new_state: bool
    nickname: str = ""
