"""Tests for AlertLedger and StatsLogger."""

from conftest import FakeClock, fixed_wall_clock, make_sample

from proctop.alerts import AlertLedger, StatsLogger
from proctop.models import SystemSample


def make_ledger(clock: FakeClock, threshold: float = 50.0, window: float = 300.0) -> AlertLedger:
    return AlertLedger(threshold=threshold, window=window, clock=clock, wall_clock=fixed_wall_clock)


class TestAlertLedger:
    """Tests for high CPU alert de-duplication."""

    def test_alert_above_threshold(self, clock):
        ledger = make_ledger(clock)

        event = ledger.record_if_new(42, 75.5, "busy")

        assert event is not None
        assert event.pid == 42
        assert event.name == "busy"
        assert event.cpu_percent == 75.5
        assert event.timestamp == fixed_wall_clock()
        assert 42 in ledger.alerted

    def test_threshold_is_exclusive(self, clock):
        ledger = make_ledger(clock)

        assert ledger.record_if_new(1, 50.0) is None
        assert ledger.record_if_new(1, 50.01) is not None

    def test_once_per_window(self, clock):
        ledger = make_ledger(clock)
        processes = (make_sample(7, "hog", 90.0),)

        alerts = []
        for _ in range(50):
            alerts.extend(ledger.process_cycle(processes))
            clock.advance(3.0)  # 150s total, inside the window

        assert len(alerts) == 1

    def test_realerts_after_window(self, clock):
        ledger = make_ledger(clock)
        processes = (make_sample(7, "hog", 90.0),)

        assert len(ledger.process_cycle(processes)) == 1
        clock.advance(299.0)
        assert ledger.process_cycle(processes) == []
        clock.advance(1.0)
        assert len(ledger.process_cycle(processes)) == 1

    def test_window_clears_without_alerts(self, clock):
        ledger = make_ledger(clock)
        ledger.record_if_new(1, 99.0)

        clock.advance(300.0)
        assert ledger.expire() is True
        assert ledger.alerted == frozenset()

        # Window restarted at the clear, not at the next alert
        clock.advance(200.0)
        assert ledger.expire() is False

    def test_multiple_processes(self, clock):
        ledger = make_ledger(clock)
        processes = (
            make_sample(1, "a", 80.0),
            make_sample(2, "b", 10.0),
            make_sample(3, "c", 120.0),
        )

        alerts = ledger.process_cycle(processes)

        assert [a.pid for a in alerts] == [1, 3]

    def test_shrunk_window(self, clock):
        ledger = make_ledger(clock, threshold=10.0, window=1.0)
        processes = (make_sample(5, "x", 20.0),)

        assert len(ledger.process_cycle(processes)) == 1
        clock.advance(1.0)
        assert len(ledger.process_cycle(processes)) == 1


class TestStatsLogger:
    """Tests for the periodic summary cadence."""

    SYSTEM = SystemSample(process_count=321, memory_percent=75.0, cpu_percent=12.5)

    def test_first_call_emits(self, clock):
        stats = StatsLogger(interval=60.0, clock=clock, wall_clock=fixed_wall_clock)

        record = stats.maybe_emit(self.SYSTEM)

        assert record is not None
        assert record.process_count == 321
        assert record.memory_percent == 75.0
        assert record.cpu_percent == 12.5
        assert record.timestamp == fixed_wall_clock()

    def test_interval_respected(self, clock):
        stats = StatsLogger(interval=60.0, clock=clock, wall_clock=fixed_wall_clock)
        stats.maybe_emit(self.SYSTEM)

        clock.advance(59.0)
        assert stats.maybe_emit(self.SYSTEM) is None
        clock.advance(1.0)
        assert stats.maybe_emit(self.SYSTEM) is not None

    def test_interval_measured_from_last_emit(self, clock):
        stats = StatsLogger(interval=60.0, clock=clock, wall_clock=fixed_wall_clock)
        emitted = 0
        for _ in range(40):  # 120s at 3s per cycle
            if stats.maybe_emit(self.SYSTEM) is not None:
                emitted += 1
            clock.advance(3.0)

        assert emitted == 2
