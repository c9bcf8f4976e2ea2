# imu_detection/rotation.py

import math
from typing import Optional

from .sample import NO_GYRO, Gyro, norm
from .thresholds import GYRO_THRESHOLD


class RotationClassifier:
    """Flags abnormal rotation from the angular-velocity magnitude."""

    def __init__(self, threshold: float = GYRO_THRESHOLD):
        self.threshold = threshold

    def magnitude(self, gyro: Gyro) -> float:
        if gyro is NO_GYRO:
            return math.nan
        return norm(gyro)

    def exceeds(self, gyro: Gyro, threshold: Optional[float] = None) -> bool:
        """
        True if the rotation magnitude is strictly above the threshold.
        `threshold` overrides the instance default for a single call.
        """
        # No gyroscope data means rotation is unknown, never "abnormal"
        if gyro is NO_GYRO:
            return False
        limit = self.threshold if threshold is None else threshold
        magnitude = self.magnitude(gyro)
        return math.isfinite(magnitude) and magnitude > limit
