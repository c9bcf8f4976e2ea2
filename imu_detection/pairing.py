# imu_detection/pairing.py

from __future__ import annotations

from typing import Optional

from .sample import NO_GYRO, Sample, Vector3, as_gyro

MAX_SKEW_S = 0.1   # accel and gyro readings further apart than this are not paired


class SamplePairer:
    """
    Joins separate accelerometer and gyroscope event streams into Samples.

    Platforms usually deliver the two sensors on independent callbacks.
    The pairer remembers the most recent gyroscope reading and attaches it
    to an accelerometer reading only when the two are at most MAX_SKEW_S
    apart; otherwise the sample carries NO_GYRO.
    """

    def __init__(self, max_skew_s: float = MAX_SKEW_S):
        self.max_skew_s = max_skew_s
        self._gyro      = NO_GYRO
        self._gyro_time : Optional[float] = None

    def push_gyro(self, values, timestamp: float) -> None:
        try:
            self._gyro = as_gyro(values)
        except (TypeError, ValueError):
            self._gyro = NO_GYRO
        self._gyro_time = timestamp if self._gyro is not NO_GYRO else None

    def pair(self, accel, timestamp: float) -> Sample:
        gyro = NO_GYRO
        if self._gyro_time is not None and abs(timestamp - self._gyro_time) <= self.max_skew_s:
            gyro = self._gyro
        try:
            accel = Vector3.of(accel)
        except (TypeError, ValueError):
            accel = None    # unreadable event: the detector skips it
        return Sample(accel=accel, gyro=gyro, timestamp=timestamp)

    def reset(self):
        self._gyro      = NO_GYRO
        self._gyro_time = None
