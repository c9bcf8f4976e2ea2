# imu_detection/sample.py

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import NamedTuple, Optional, Sequence, Union


class Vector3(NamedTuple):
    """One 3-axis reading (m/s² for the accelerometer, rad/s for the gyroscope)."""
    x: float
    y: float
    z: float

    @classmethod
    def of(cls, values: Optional[Sequence[float]]) -> Optional["Vector3"]:
        """
        Build a Vector3 from any sequence of at least 3 numbers.
        Returns None for None or a short sequence, the same way a missing
        reading is reported by the sensor source.
        """
        if values is None or len(values) < 3:
            return None
        return cls(float(values[0]), float(values[1]), float(values[2]))

    def is_finite(self) -> bool:
        return math.isfinite(self.x) and math.isfinite(self.y) and math.isfinite(self.z)


class _NoGyro(Enum):
    NO_GYRO = "no_gyro"

    def __repr__(self) -> str:
        return "NO_GYRO"

    def __bool__(self) -> bool:
        return False


# Explicit "no gyroscope data for this call" variant
NO_GYRO = _NoGyro.NO_GYRO

Gyro = Union[Vector3, _NoGyro]


def as_gyro(value) -> Gyro:
    """Normalise None / raw sequences / Vector3 into the Gyro variant."""
    if value is None or value is NO_GYRO:
        return NO_GYRO
    if isinstance(value, Vector3):
        return value
    vec = Vector3.of(value)
    return NO_GYRO if vec is None else vec


def norm(v: Vector3) -> float:
    return math.sqrt(v.x * v.x + v.y * v.y + v.z * v.z)


@dataclass
class Sample:
    """
    One accelerometer reading paired with the gyroscope reading taken
    closest to it (or NO_GYRO).

    timestamp : seconds on a monotonic clock, or None when the caller
                supplies time separately.
    """
    accel : Optional[Vector3]
    gyro  : Gyro = NO_GYRO
    timestamp : Optional[float] = None

    @property
    def has_gyro(self) -> bool:
        return self.gyro is not NO_GYRO
