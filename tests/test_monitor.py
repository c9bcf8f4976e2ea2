import threading

import pytest

from imu_detection.monitor import FallMonitor
from imu_detection.pairing import SamplePairer
from imu_detection.sample import NO_GYRO, Sample, Vector3

SPIKE    = (0.0, 0.0, 16.0)
DIP      = (0.0, 0.0, 1.0)
ROTATING = (0.0, 0.0, 4.0)


# ── SamplePairer ──────────────────────────────────────────────────────────────

def test_pairs_gyro_within_skew():
    p = SamplePairer(max_skew_s=0.1)
    p.push_gyro(ROTATING, 1.0)
    sample = p.pair(SPIKE, 1.05)
    assert sample.gyro == Vector3(*ROTATING)
    assert sample.has_gyro
    assert sample.timestamp == 1.05


def test_stale_gyro_is_not_paired():
    p = SamplePairer(max_skew_s=0.1)
    p.push_gyro(ROTATING, 1.0)
    assert p.pair(SPIKE, 1.2).gyro is NO_GYRO


def test_no_gyro_yet_gives_absent_variant():
    sample = SamplePairer().pair(SPIKE, 0.0)
    assert sample.gyro is NO_GYRO
    assert not sample.has_gyro


def test_unreadable_events_degrade_to_missing():
    p = SamplePairer()
    p.push_gyro(["x", "y", "z"], 0.0)
    sample = p.pair(["a", 1, 2], 0.0)
    assert sample.gyro is NO_GYRO
    assert sample.accel is None


# ── FallMonitor ───────────────────────────────────────────────────────────────

def drive_fall(monitor, start=0.0):
    for i in range(4):
        monitor.on_accelerometer(SPIKE, start + i * 0.01)
    monitor.on_gyroscope(ROTATING, start + 0.035)
    monitor.on_accelerometer(SPIKE, start + 0.04)
    return monitor.on_accelerometer(DIP, start + 0.54)


def test_separate_sensor_callbacks_detect_a_fall():
    seen = []
    monitor = FallMonitor(on_fall=seen.append)

    event = drive_fall(monitor)

    assert event is not None
    assert seen == [event]
    assert monitor.events == [event]
    assert event.timestamp == 0.54
    assert event.magnitude == pytest.approx(13.0)
    # the confirming reading came 0.5 s after the last gyro event
    assert not event.had_gyro


def test_accelerometer_only_host_never_alerts():
    seen = []
    monitor = FallMonitor(on_fall=seen.append)
    for i in range(40):
        monitor.on_accelerometer(SPIKE if i % 4 else DIP, i * 0.05)
    assert seen == []


def test_process_uses_clock_when_sample_has_no_timestamp():
    ticks = iter([0.0, 0.01, 0.02, 0.03, 0.04, 0.54])
    monitor = FallMonitor(clock=lambda: next(ticks))
    results = [monitor.process(Sample(Vector3(*SPIKE))) for _ in range(4)]
    results.append(monitor.process(Sample(Vector3(*SPIKE), Vector3(*ROTATING))))
    results.append(monitor.process(Sample(Vector3(*DIP))))
    assert results[:5] == [None] * 5
    assert results[5].timestamp == 0.54


def test_set_sensitivity_reaches_detector():
    monitor = FallMonitor()
    monitor.set_sensitivity(100)
    assert monitor.detector.thresholds.high_accel == pytest.approx(7.5)


def test_reset_clears_history():
    monitor = FallMonitor()
    drive_fall(monitor)
    monitor.reset()
    assert monitor.events == []
    assert monitor.detector.state.last_fall_time is None


def test_concurrent_callbacks_are_serialized():
    monitor = FallMonitor()
    errors = []

    def accel_source():
        try:
            for i in range(300):
                monitor.on_accelerometer((0.0, 0.0, 9.81), i * 0.01)
        except Exception as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    def gyro_source():
        try:
            for i in range(300):
                monitor.on_gyroscope((0.1, 0.1, 0.1), i * 0.01)
        except Exception as exc:  # pragma: no cover - surfaced below
            errors.append(exc)

    threads = [threading.Thread(target=accel_source), threading.Thread(target=gyro_source)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert errors == []
    assert monitor.events == []
