# imu_detection/fall_detector.py

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Optional

from .magnitude_filter import WINDOW_SIZE, MagnitudeFilter
from .rotation import RotationClassifier
from .sample import NO_GYRO, Vector3, as_gyro
from .sensitivity import sensitivity_factor
from .thresholds import Thresholds

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DetectorState:
    """Snapshot of the state machine, for inspection and tests."""
    fall_confirmations  : int
    high_accel_detected : bool
    high_accel_time     : Optional[float]
    last_fall_time      : Optional[float]


class FallDetector:
    """
    Sample-by-sample fall detector for one accelerometer/gyroscope stream.

    Two-phase protocol:
      Trigger  Smoothed acceleration above high_accel while the body is
               rotating faster than the gyro threshold.
      Impact   Within impact_window_s of the trigger, a smoothed magnitude
               below low_accel (free fall) or above impact (floor hit).

    Each trigger and each impact counts as one confirmation. Once
    confirmation_count is reached a fall is reported, unless one was
    already reported less than cooldown_s ago.

    Timestamps are supplied by the caller (seconds, monotonic) and read
    once per call. The detector is not thread-safe: drive it from one
    caller at a time (see FallMonitor).
    """

    def __init__(
        self,
        thresholds: Optional[Thresholds] = None,
        window_size: int = WINDOW_SIZE,
    ):
        self._base_thresholds = thresholds or Thresholds()
        self._thresholds      = self._base_thresholds
        self._sensitivity     = None

        self._filter   = MagnitudeFilter(window_size)
        self._rotation = RotationClassifier(self._thresholds.gyro)

        self._fall_confirmations  = 0
        self._high_accel_detected = False
        self._high_accel_time     = None    # None = no trigger yet
        self._last_fall_time      = None    # None = never
        self._last_magnitude      = math.nan

    # ── Public API ────────────────────────────────────────────────────────────

    def evaluate(self, accel, gyro, now: float) -> bool:
        """
        accel : Vector3 or 3-sequence (m/s²); None means no data.
        gyro  : Vector3, 3-sequence (rad/s), NO_GYRO or None.
        now   : caller-supplied timestamp in seconds.
        Returns True exactly once per confirmed fall.
        """
        accel = _coerce(accel)
        if accel is None:
            return False
        gyro = _coerce_gyro(gyro)

        t = self._thresholds

        # ── 1. Filtered inputs ────────────────────────────────────────────────
        magnitude = self._filter.update(accel)
        self._last_magnitude = magnitude
        rotating = self._rotation.exceeds(gyro, t.gyro)

        # ── 2. Trigger ────────────────────────────────────────────────────────
        if magnitude > t.high_accel and rotating:
            self._high_accel_detected = True
            self._high_accel_time     = now
            self._fall_confirmations += 1
            logger.debug(
                "Trigger | t=%.3f | accel=%.2f | confirmations=%d",
                now, magnitude, self._fall_confirmations,
            )

        # ── 3. Impact confirmation ────────────────────────────────────────────
        if (
            self._high_accel_detected
            and now - self._high_accel_time < t.impact_window_s
            and (magnitude < t.low_accel or magnitude > t.impact)
        ):
            self._fall_confirmations += 1
            logger.debug(
                "Impact | t=%.3f | accel=%.2f | confirmations=%d",
                now, magnitude, self._fall_confirmations,
            )

        # ── 4. Impact window expiry ───────────────────────────────────────────
        if (
            self._high_accel_time is not None
            and now - self._high_accel_time > t.impact_window_s
        ):
            if self._high_accel_detected or self._fall_confirmations:
                logger.debug(
                    "Impact window expired | t=%.3f | dropped %d confirmation(s)",
                    now, self._fall_confirmations,
                )
            self._high_accel_detected = False
            self._fall_confirmations  = 0

        # A dropped sample never confirms, even with a count held by the cooldown
        if not math.isfinite(magnitude):
            return False

        # ── 5. Confirmation with cooldown ─────────────────────────────────────
        if self._fall_confirmations >= t.confirmation_count:
            if self._last_fall_time is None or now - self._last_fall_time > t.cooldown_s:
                self._last_fall_time      = now
                self._fall_confirmations  = 0
                self._high_accel_detected = False
                logger.info("Fall confirmed | t=%.3f | accel=%.2f", now, magnitude)
                return True
            logger.debug(
                "Fall suppressed by cooldown | t=%.3f | %.1fs since last fall",
                now, now - self._last_fall_time,
            )

        return False

    def set_sensitivity(self, level) -> None:
        """
        Rescale the base thresholds for a 0-100 sensitivity level.
        Higher levels detect more readily. Raises ValueError when out of range.
        """
        factor = sensitivity_factor(level)
        # Single assignment: evaluate() only ever sees a complete record
        self._thresholds  = self._base_thresholds.scaled(factor)
        self._sensitivity = level
        logger.info("Sensitivity set to %s (factor %.3f)", level, factor)

    def set_thresholds(self, thresholds: Thresholds) -> None:
        """Replace the base thresholds; any sensitivity level is re-applied."""
        self._base_thresholds = thresholds
        if self._sensitivity is None:
            self._thresholds = thresholds
        else:
            self._thresholds = thresholds.scaled(sensitivity_factor(self._sensitivity))

    def reset(self):
        """Clear confirmation state, cooldown and the filter window."""
        self._filter.reset()
        self._fall_confirmations  = 0
        self._high_accel_detected = False
        self._high_accel_time     = None
        self._last_fall_time      = None
        self._last_magnitude      = math.nan

    @property
    def thresholds(self) -> Thresholds:
        return self._thresholds

    @property
    def sensitivity(self):
        return self._sensitivity

    @property
    def last_magnitude(self) -> float:
        """Smoothed magnitude from the latest call (nan if it was dropped)."""
        return self._last_magnitude

    @property
    def state(self) -> DetectorState:
        return DetectorState(
            fall_confirmations  = self._fall_confirmations,
            high_accel_detected = self._high_accel_detected,
            high_accel_time     = self._high_accel_time,
            last_fall_time      = self._last_fall_time,
        )


def _coerce(values) -> Optional[Vector3]:
    if values is None or isinstance(values, Vector3):
        return values
    try:
        return Vector3.of(values)
    except (TypeError, ValueError):
        return None


def _coerce_gyro(values):
    try:
        return as_gyro(values)
    except (TypeError, ValueError):
        return NO_GYRO
