# imu_detection/magnitude_filter.py

import math

import numpy as np

from .sample import Vector3, norm

WINDOW_SIZE = 5   # samples in the moving average


class MagnitudeFilter:
    """
    Moving average over the norms of the last WINDOW_SIZE acceleration
    vectors.

    The buffer is a fixed circular array that starts zero-filled, and the
    average is always taken over every slot, so the first few outputs are
    biased low until the window has filled once.

    Non-finite readings are dropped before they reach the buffer; the call
    returns nan so any threshold comparison on it is False.
    """

    def __init__(self, window_size: int = WINDOW_SIZE):
        if window_size < 1:
            raise ValueError(f"window_size must be at least 1, got {window_size!r}")
        self.window_size = window_size
        self._history = np.zeros(window_size, dtype=float)
        self._index   = 0

    def update(self, vector: Vector3) -> float:
        magnitude = norm(vector) if vector.is_finite() else math.nan
        if not math.isfinite(magnitude):
            return math.nan

        self._history[self._index] = magnitude
        self._index = (self._index + 1) % self.window_size
        return self.average

    @property
    def average(self) -> float:
        return float(np.mean(self._history))

    @property
    def history(self) -> list:
        return self._history.tolist()

    def reset(self):
        self._history.fill(0.0)
        self._index = 0
