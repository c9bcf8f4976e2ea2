# imu_detection/sensitivity.py

MIN_LEVEL     = 0
MAX_LEVEL     = 100
DEFAULT_LEVEL = 50

MIN_FACTOR    = 0.5
FACTOR_SPAN   = 1.5     # MIN_FACTOR + FACTOR_SPAN = 2.0 at level 100


def _check_level(level) -> float:
    level = float(level)
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(
            f"Sensitivity must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level:g}"
        )
    return level


def sensitivity_factor(level) -> float:
    """Map a 0-100 sensitivity level linearly onto a 0.5-2.0 scale factor."""
    level = _check_level(level)
    return level / 100.0 * FACTOR_SPAN + MIN_FACTOR


def sensitivity_label(level) -> str:
    """Human-readable band shown next to the sensitivity slider."""
    level = _check_level(level)
    if level <= 30:
        return "Low"
    if level <= 70:
        return "Medium"
    return "High"
