# imu_detection/__init__.py
"""
imu_detection
=============
Real-time fall detection from accelerometer + gyroscope samples.

Public API
----------
FallDetector        — the state machine; one evaluate() call per sample
FallMonitor         — thread-safe host: pairs sensor events, raises FallEvent
Thresholds          — detection thresholds record (defaults included)

Individual components (use directly only if you need fine-grained control):
MagnitudeFilter     — 5-sample moving average of the acceleration norm
RotationClassifier  — angular-velocity threshold check
SamplePairer        — joins separate accel / gyro event streams
sensitivity_factor  — 0-100 sensitivity → threshold scale factor

Typical usage
-------------
    import time
    from imu_detection import FallDetector

    detector = FallDetector()
    detector.set_sensitivity(50)

    for accel, gyro in sensor_stream():
        if detector.evaluate(accel, gyro, time.monotonic()):
            print('FALL')
"""

from .sample           import NO_GYRO, Sample, Vector3
from .thresholds       import Thresholds
from .sensitivity      import sensitivity_factor, sensitivity_label
from .magnitude_filter import MagnitudeFilter
from .rotation         import RotationClassifier
from .fall_detector    import DetectorState, FallDetector
from .pairing          import SamplePairer
from .monitor          import FallEvent, FallMonitor

__all__ = [
    'FallDetector',
    'DetectorState',
    'FallMonitor',
    'FallEvent',
    'Thresholds',
    'MagnitudeFilter',
    'RotationClassifier',
    'SamplePairer',
    'Sample',
    'Vector3',
    'NO_GYRO',
    'sensitivity_factor',
    'sensitivity_label',
]

__version__ = '0.1.0'
