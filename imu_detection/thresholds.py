# imu_detection/thresholds.py

from __future__ import annotations

from dataclasses import dataclass, replace


# ── Defaults ──────────────────────────────────────────────────────────────────
# Magnitudes of the smoothed acceleration vector include gravity, so a
# device at rest reads ~9.81 m/s².

HIGH_ACCEL_THRESHOLD = 15.0    # m/s² — spike that starts a candidate fall
LOW_ACCEL_THRESHOLD  = 2.0     # m/s² — near free-fall dip after the spike
IMPACT_THRESHOLD     = 12.0    # m/s² — hard floor impact after the spike
GYRO_THRESHOLD       = 3.0     # rad/s — rotation that must accompany the spike

CONFIRMATION_COUNT   = 3       # trigger + impacts needed to report a fall
IMPACT_WINDOW_S      = 2.0     # seconds after the trigger to look for impacts
COOLDOWN_S           = 10.0    # seconds between two reported falls


@dataclass(frozen=True)
class Thresholds:
    """
    Detection thresholds used by FallDetector.

    Frozen: the detector swaps a whole new record in when sensitivity
    changes, so evaluate() never sees a half-updated set.
    """
    high_accel         : float = HIGH_ACCEL_THRESHOLD
    low_accel          : float = LOW_ACCEL_THRESHOLD
    impact             : float = IMPACT_THRESHOLD
    gyro               : float = GYRO_THRESHOLD
    confirmation_count : int   = CONFIRMATION_COUNT
    impact_window_s    : float = IMPACT_WINDOW_S
    cooldown_s         : float = COOLDOWN_S

    def __post_init__(self):
        for name in ("high_accel", "low_accel", "impact", "gyro"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"Threshold '{name}' must be positive, got {value!r}")
        if self.confirmation_count < 1:
            raise ValueError(
                f"confirmation_count must be at least 1, got {self.confirmation_count!r}"
            )
        for name in ("impact_window_s", "cooldown_s"):
            value = getattr(self, name)
            if not value > 0:
                raise ValueError(f"Duration '{name}' must be positive, got {value!r}")

    def scaled(self, factor: float) -> "Thresholds":
        """
        Return a new record adjusted for a sensitivity factor.

        A larger factor makes detection easier: the spike, impact and
        rotation thresholds come down and the free-fall ceiling goes up.
        Counts and durations are left alone.
        """
        if not factor > 0:
            raise ValueError(f"Scale factor must be positive, got {factor!r}")
        return replace(
            self,
            high_accel = self.high_accel / factor,
            low_accel  = self.low_accel * factor,
            impact     = self.impact / factor,
            gyro       = self.gyro / factor,
        )
