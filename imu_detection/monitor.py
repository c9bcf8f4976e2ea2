# imu_detection/monitor.py

"""Thread-safe host that feeds live sensor events into FallDetector."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, List, Optional

from .fall_detector import FallDetector
from .pairing import SamplePairer
from .sample import Sample

logger = logging.getLogger(__name__)


@dataclass
class FallEvent:
    """
    A fall confirmed by the detector.

    timestamp  : monotonic seconds of the accelerometer reading that confirmed it
    magnitude  : smoothed acceleration magnitude at that reading (m/s²)
    had_gyro   : whether that reading was paired with gyroscope data
    time       : wall-clock ISO-8601 time the event was raised
    """
    timestamp : float
    magnitude : float
    had_gyro  : bool
    time      : str = field(default_factory=lambda: datetime.now().isoformat())


class FallMonitor:
    """
    Serializes sensor events into one FallDetector.

    Sensor sources call on_accelerometer() / on_gyroscope() from whatever
    thread delivers their events. Each accelerometer reading is paired with
    the latest gyroscope reading and evaluated under a single lock, and
    confirmed falls are handed to the on_fall callback.

    Usage
    -----
        monitor = FallMonitor(on_fall=lambda event: run_alert(prefs))
        monitor.set_sensitivity(prefs.sensitivity)

        # from the sensor callbacks
        monitor.on_gyroscope((gx, gy, gz))
        monitor.on_accelerometer((ax, ay, az))
    """

    def __init__(
        self,
        detector: Optional[FallDetector] = None,
        on_fall: Optional[Callable[[FallEvent], None]] = None,
        pairer: Optional[SamplePairer] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.detector = detector or FallDetector()
        self.on_fall  = on_fall
        self._pairer  = pairer or SamplePairer()
        self._clock   = clock
        self._lock    = threading.Lock()
        self.events: List[FallEvent] = []

    # ── Sensor callbacks ──────────────────────────────────────────────────────

    def on_gyroscope(self, values, timestamp: Optional[float] = None) -> None:
        ts = self._clock() if timestamp is None else timestamp
        with self._lock:
            self._pairer.push_gyro(values, ts)

    def on_accelerometer(self, values, timestamp: Optional[float] = None) -> Optional[FallEvent]:
        """
        Evaluate one accelerometer reading.
        Returns the FallEvent if this reading confirmed a fall, else None.
        """
        ts = self._clock() if timestamp is None else timestamp
        with self._lock:
            sample = self._pairer.pair(values, ts)
            event = self._evaluate(sample)

        # Callback runs outside the lock so a slow alert cannot stall sensors
        if event is not None and self.on_fall is not None:
            self.on_fall(event)
        return event

    def process(self, sample: Sample) -> Optional[FallEvent]:
        """Evaluate an already-paired sample (e.g. from a recording)."""
        ts = self._clock() if sample.timestamp is None else sample.timestamp
        with self._lock:
            event = self._evaluate(Sample(sample.accel, sample.gyro, ts))
        if event is not None and self.on_fall is not None:
            self.on_fall(event)
        return event

    # ── Configuration ─────────────────────────────────────────────────────────

    def set_sensitivity(self, level) -> None:
        with self._lock:
            self.detector.set_sensitivity(level)

    def reset(self):
        with self._lock:
            self.detector.reset()
            self._pairer.reset()
            self.events.clear()

    # ── Internal ──────────────────────────────────────────────────────────────

    def _evaluate(self, sample: Sample) -> Optional[FallEvent]:
        if not self.detector.evaluate(sample.accel, sample.gyro, sample.timestamp):
            return None
        event = FallEvent(
            timestamp = sample.timestamp,
            magnitude = self.detector.last_magnitude,
            had_gyro  = sample.has_gyro,
        )
        self.events.append(event)
        logger.warning(
            "FALL DETECTED | t=%.3f | accel=%.2f | gyro=%s",
            event.timestamp, event.magnitude, event.had_gyro,
        )
        return event
