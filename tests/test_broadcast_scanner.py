import socket

from conftest import FakeDetector, FakeSocketFactory
from tapo_locator.config.config_loader import BroadcastConfig
from tapo_locator.core.data_models import NetworkInterfaceInfo, PhaseStatus, ProbeOutcome
from tapo_locator.scanners.broadcast_scanner import BroadcastScanner

DEVICE_REPLY = b'{"result":{"device_type":"SMART.TAPOPLUG","deviceMac":"AA-BB-CC-DD-EE-FF","ip":"10.9.9.9"}}'


def make_scanner(detector, factory, logger):
    return BroadcastScanner(logger, network_detector=detector, socket_factory=factory)


def test_returns_reply_source_ip_when_payload_mentions_mac(fake_detector, quiet_logger):
    factory = FakeSocketFactory({"255.255.255.255": (DEVICE_REPLY, ("192.168.1.50", 20002))})

    result = make_scanner(fake_detector, factory, quiet_logger).discover("aa:bb:cc:dd:ee:ff")

    assert result.status == PhaseStatus.RESOLVED
    assert result.ip_address == "192.168.1.50"
    assert [a.outcome for a in result.attempts] == [ProbeOutcome.MATCHED]


def test_sends_discovery_query_with_broadcast_enabled(fake_detector, quiet_logger):
    factory = FakeSocketFactory({})

    make_scanner(fake_detector, factory, quiet_logger).discover("aa:bb:cc:dd:ee:ff", BroadcastConfig(timeout=1.5))

    sock = factory.sockets[0]
    assert sock.sent == [(b'{"method":"discovery","params":{}}', ("255.255.255.255", 20002))]
    assert sock.options[(socket.SOL_SOCKET, socket.SO_BROADCAST)] == 1
    assert sock.timeout == 1.5


def test_timeouts_move_on_to_next_candidate(fake_detector, quiet_logger):
    factory = FakeSocketFactory({"192.168.1.255": (DEVICE_REPLY, ("192.168.1.77", 20002))})

    result = make_scanner(fake_detector, factory, quiet_logger).discover("AABBCCDDEEFF")

    assert result.ip_address == "192.168.1.77"
    assert [(a.address, a.outcome) for a in result.attempts] == [
        ("255.255.255.255", ProbeOutcome.NO_REPLY),
        ("192.168.1.255", ProbeOutcome.MATCHED),
    ]


def test_every_socket_is_closed(fake_detector, quiet_logger):
    factory = FakeSocketFactory({}, send_failures={"255.255.255.255"})

    make_scanner(fake_detector, factory, quiet_logger).discover("aa:bb:cc:dd:ee:ff")

    assert len(factory.sockets) == 2
    assert all(sock.closed for sock in factory.sockets)


def test_transport_errors_are_recorded_not_raised(fake_detector, quiet_logger):
    factory = FakeSocketFactory(
        {"192.168.1.255": OSError(113, "No route to host")},
        send_failures={"255.255.255.255"},
    )

    result = make_scanner(fake_detector, factory, quiet_logger).discover("aa:bb:cc:dd:ee:ff")

    assert result.status == PhaseStatus.NOT_FOUND
    assert [a.outcome for a in result.attempts] == [ProbeOutcome.TRANSPORT_ERROR] * 2
    assert len(result.errors) == 2


def test_reply_for_other_device_is_a_mismatch(fake_detector, quiet_logger):
    other = b'{"result":{"deviceMac":"11-22-33-44-55-66"}}'
    factory = FakeSocketFactory({
        "255.255.255.255": (other, ("192.168.1.60", 20002)),
        "192.168.1.255": (other, ("192.168.1.60", 20002)),
    })

    result = make_scanner(fake_detector, factory, quiet_logger).discover("aa:bb:cc:dd:ee:ff")

    assert result.status == PhaseStatus.NOT_FOUND
    assert result.ip_address is None
    assert [a.outcome for a in result.attempts] == [ProbeOutcome.MISMATCH] * 2


def test_match_short_circuits_remaining_candidates(quiet_logger):
    detector = FakeDetector([
        NetworkInterfaceInfo("eth0", "192.168.1.37", "255.255.255.0"),
        NetworkInterfaceInfo("wlan0", "10.0.0.5", "255.255.0.0"),
    ])
    factory = FakeSocketFactory({"255.255.255.255": (DEVICE_REPLY, ("192.168.1.50", 20002))})

    make_scanner(detector, factory, quiet_logger).discover("aa:bb:cc:dd:ee:ff")

    assert len(factory.sockets) == 1


def test_empty_mac_sends_nothing(fake_detector, quiet_logger):
    factory = FakeSocketFactory({"255.255.255.255": (DEVICE_REPLY, ("192.168.1.50", 20002))})

    result = make_scanner(fake_detector, factory, quiet_logger).discover("")

    assert result.status == PhaseStatus.NOT_FOUND
    assert factory.sockets == []
