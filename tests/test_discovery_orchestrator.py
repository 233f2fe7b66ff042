from itertools import count

from conftest import FakeSocketFactory, RecordingPhase, completed
from tapo_locator.config.config_loader import DiscoveryConfig
from tapo_locator.core.data_models import DiscoveryRequest, DiscoveryStatus, PhaseStatus
from tapo_locator.core.discovery_orchestrator import DiscoveryOrchestrator
from tapo_locator.scanners import neighbor_table_scanner
from tapo_locator.scanners.broadcast_scanner import BroadcastScanner
from tapo_locator.scanners.neighbor_table_scanner import NeighborTableScanner

REQUEST = DiscoveryRequest("AA:BB:CC:DD:EE:FF")


def orchestrator(quiet_logger, prescan, broadcast, neighbor, **kwargs):
    return DiscoveryOrchestrator(
        logger=quiet_logger,
        prescanner=prescan,
        broadcast_scanner=broadcast,
        neighbor_scanner=neighbor,
        **kwargs
    )


def test_broadcast_success_skips_neighbor_table(quiet_logger):
    prescan = RecordingPhase("prescan", PhaseStatus.COMPLETED)
    broadcast = RecordingPhase("broadcast", PhaseStatus.RESOLVED, "192.168.1.50")
    neighbor = RecordingPhase("neighbor_table", PhaseStatus.RESOLVED, "192.168.1.99")

    result = orchestrator(quiet_logger, prescan, broadcast, neighbor).discover(REQUEST)

    assert result.status == DiscoveryStatus.RESOLVED
    assert result.ip_address == "192.168.1.50"
    assert result.resolved_by == "broadcast"
    assert len(prescan.calls) == 1
    assert neighbor.calls == []


def test_falls_back_to_neighbor_table(quiet_logger):
    prescan = RecordingPhase("prescan", PhaseStatus.COMPLETED)
    broadcast = RecordingPhase("broadcast", PhaseStatus.NOT_FOUND)
    neighbor = RecordingPhase("neighbor_table", PhaseStatus.RESOLVED, "192.168.1.99")

    result = orchestrator(quiet_logger, prescan, broadcast, neighbor).discover(REQUEST)

    assert result.ip_address == "192.168.1.99"
    assert result.resolved_by == "neighbor_table"
    assert [p.phase for p in result.phases] == ["prescan", "broadcast", "neighbor_table"]


def test_phases_receive_the_normalized_target_mac(quiet_logger):
    broadcast = RecordingPhase("broadcast")
    neighbor = RecordingPhase("neighbor_table")
    config = DiscoveryConfig()

    orchestrator(quiet_logger, RecordingPhase("prescan"), broadcast, neighbor, config=config).discover(REQUEST)

    assert broadcast.calls == [("aabbccddeeff", config.broadcast)]
    assert neighbor.calls == [("aabbccddeeff", config.neighbor_table)]


def test_nothing_found_returns_not_found(quiet_logger):
    result = orchestrator(
        quiet_logger,
        RecordingPhase("prescan", PhaseStatus.SKIPPED),
        RecordingPhase("broadcast"),
        RecordingPhase("neighbor_table"),
    ).discover(REQUEST)

    assert result.status == DiscoveryStatus.NOT_FOUND
    assert result.ip_address is None
    assert not result.resolved


def test_prescan_resolution_is_ignored(quiet_logger):
    prescan = RecordingPhase("prescan", PhaseStatus.RESOLVED, "192.168.1.5")
    neighbor = RecordingPhase("neighbor_table")

    result = orchestrator(quiet_logger, prescan, RecordingPhase("broadcast"), neighbor).discover(REQUEST)

    assert result.status == DiscoveryStatus.NOT_FOUND
    assert len(neighbor.calls) == 1


def test_deadline_skips_remaining_phases(quiet_logger):
    ticks = count(start=0, step=10)
    broadcast = RecordingPhase("broadcast")
    neighbor = RecordingPhase("neighbor_table")

    result = orchestrator(
        quiet_logger, RecordingPhase("prescan"), broadcast, neighbor,
        config=DiscoveryConfig(deadline=25), clock=lambda: next(ticks)
    ).discover(REQUEST)

    assert result.status == DiscoveryStatus.NOT_FOUND
    assert len(broadcast.calls) == 1
    assert neighbor.calls == []
    assert result.phases[-1].status == PhaseStatus.SKIPPED


def test_end_to_end_timeouts_then_neighbor_table(monkeypatch, quiet_logger, fake_detector):
    neighbor_output = (
        "192.168.1.50 dev eth0 lladdr aa:bb:cc:dd:ee:ff REACHABLE\n"
        "192.168.1.51 dev eth0 lladdr 11:22:33:44:55:66 STALE\n"
    )
    monkeypatch.setattr(neighbor_table_scanner.subprocess, "run",
                        lambda cmd, **kw: completed(neighbor_output))

    broadcast = BroadcastScanner(quiet_logger, network_detector=fake_detector,
                                 socket_factory=FakeSocketFactory({}))
    neighbor = NeighborTableScanner(quiet_logger, network_detector=fake_detector)

    result = orchestrator(quiet_logger, RecordingPhase("prescan"), broadcast, neighbor).discover(
        DiscoveryRequest("AABBCCDDEEFF")
    )
    direct = neighbor.resolve("AABBCCDDEEFF")

    assert result.status == DiscoveryStatus.RESOLVED
    assert result.ip_address == direct.ip_address == "192.168.1.50"


def test_end_to_end_not_found_never_raises(monkeypatch, quiet_logger, fake_detector):
    def failing_run(cmd, **kwargs):
        raise FileNotFoundError(2, "No such file or directory")

    monkeypatch.setattr(neighbor_table_scanner.subprocess, "run", failing_run)

    broadcast = BroadcastScanner(quiet_logger, network_detector=fake_detector,
                                 socket_factory=FakeSocketFactory({}))
    neighbor = NeighborTableScanner(quiet_logger, network_detector=fake_detector)

    result = orchestrator(quiet_logger, RecordingPhase("prescan"), broadcast, neighbor).discover(REQUEST)

    assert result.status == DiscoveryStatus.NOT_FOUND
