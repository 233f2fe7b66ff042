import socket
from types import SimpleNamespace

import pytest

from tapo_locator.core.data_models import NetworkInterfaceInfo, PhaseResult, PhaseStatus
from tapo_locator.utils.logger import Logger, LogLevel


class FakeDetector:
    """NetworkDetector stand-in returning a fixed interface list."""

    def __init__(self, interfaces=None):
        self.interfaces = list(interfaces or [])

    def get_active_interfaces(self):
        return list(self.interfaces)

    def get_primary_interface(self):
        return self.interfaces[0] if self.interfaces else None

    def get_broadcast_targets(self):
        targets = ["255.255.255.255"]
        for iface in self.interfaces:
            if iface.broadcast_address not in targets:
                targets.append(iface.broadcast_address)
        return targets


class FakeSocket:
    """UDP socket double answering according to a per-address script."""

    def __init__(self, script, send_failures=()):
        self.script = script
        self.send_failures = send_failures
        self.sent = []
        self.options = {}
        self.timeout = None
        self.closed = False
        self._last_address = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def setsockopt(self, level, option, value):
        self.options[(level, option)] = value

    def settimeout(self, value):
        self.timeout = value

    def sendto(self, data, address):
        self._last_address = address[0]
        if address[0] in self.send_failures:
            raise OSError(101, "Network is unreachable")
        self.sent.append((data, address))

    def recvfrom(self, bufsize):
        reply = self.script.get(self._last_address)
        if reply is None:
            raise socket.timeout("timed out")
        if isinstance(reply, OSError):
            raise reply
        return reply


class FakeSocketFactory:
    def __init__(self, script, send_failures=()):
        self.script = script
        self.send_failures = send_failures
        self.sockets = []

    def __call__(self, family, kind):
        sock = FakeSocket(self.script, self.send_failures)
        self.sockets.append(sock)
        return sock


class RecordingPhase:
    """Phase double returning a canned PhaseResult and counting calls."""

    def __init__(self, phase, status=PhaseStatus.NOT_FOUND, ip_address=None):
        self.phase = phase
        self.status = status
        self.ip_address = ip_address
        self.calls = []

    def _run(self, *args):
        self.calls.append(args)
        return PhaseResult(phase=self.phase, status=self.status, ip_address=self.ip_address)

    scan = _run
    discover = _run
    resolve = _run


@pytest.fixture
def quiet_logger():
    return Logger("test", min_level=LogLevel.ERROR)


@pytest.fixture
def lan_interface():
    return NetworkInterfaceInfo(name="eth0", ip_address="192.168.1.37", netmask="255.255.255.0")


@pytest.fixture
def fake_detector(lan_interface):
    return FakeDetector([lan_interface])


def completed(stdout="", returncode=0):
    return SimpleNamespace(stdout=stdout, stderr="", returncode=returncode)
