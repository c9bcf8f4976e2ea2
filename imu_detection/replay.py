# imu_detection/replay.py
"""
Replay a recorded IMU session through the fall detector.

CSV columns: ts, ax, ay, az, gx, gy, gz
    ts in seconds; accelerometer in m/s²; gyroscope in rad/s.
    Gyro columns may be missing or empty for rows without gyro data.

Usage
-----
    python -m imu_detection.replay session.csv
    python -m imu_detection.replay session.csv --sensitivity 70
    python -m imu_detection.replay session.csv --alert    # send a real SMS per fall
"""

import argparse
import csv
import logging
import sys

from .monitor import FallMonitor
from .sample import NO_GYRO, Sample, Vector3

logger = logging.getLogger(__name__)

ACCEL_COLS = ('ax', 'ay', 'az')
GYRO_COLS  = ('gx', 'gy', 'gz')


def read_samples(path):
    """Yield one Sample per CSV row. Rows with unreadable accel values are skipped."""
    with open(path, newline='') as f:
        reader = csv.DictReader(f)
        for line_no, row in enumerate(reader, start=2):
            try:
                ts    = float(row['ts'])
                accel = Vector3(*(float(row[c]) for c in ACCEL_COLS))
            except (KeyError, TypeError, ValueError):
                logger.warning("Skipping unreadable row %d", line_no)
                continue

            gyro = NO_GYRO
            raw = [row.get(c) for c in GYRO_COLS]
            if all(v not in (None, '') for v in raw):
                try:
                    gyro = Vector3(*(float(v) for v in raw))
                except ValueError:
                    gyro = NO_GYRO

            yield Sample(accel=accel, gyro=gyro, timestamp=ts)


def replay(path, sensitivity=None, on_fall=None):
    """Run every sample in `path` through a fresh monitor; return the FallEvents."""
    monitor = FallMonitor(on_fall=on_fall)
    if sensitivity is not None:
        monitor.set_sensitivity(sensitivity)
    for sample in read_samples(path):
        monitor.process(sample)
    return list(monitor.events)


def main(argv=None):
    parser = argparse.ArgumentParser(description='Replay an IMU recording through the fall detector')
    parser.add_argument('csv_path', help='CSV with ts,ax,ay,az,gx,gy,gz columns')
    parser.add_argument('--sensitivity', type=int, default=None,
                        help='0-100; higher detects more readily (default: stored preference '
                             'when preferences are loaded, else unscaled thresholds)')
    parser.add_argument('--alert', action='store_true',
                        help='Run the SMS alert pipeline for every detected fall')
    parser.add_argument('--prefs', default=None,
                        help='Preferences JSON (default: FALL_PREFS_PATH or config.json)')
    parser.add_argument('--debug', action='store_true', help='Log every detector transition')
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )

    on_fall = None
    sensitivity = args.sensitivity
    if args.alert or args.prefs:
        # Imported here so plain replays need no Twilio credentials
        from alerting import PreferenceStore, run_alert
        prefs = PreferenceStore(args.prefs).load()
        if sensitivity is None:
            sensitivity = prefs.sensitivity
        if args.alert:
            on_fall = lambda event: run_alert(prefs, on_status=print)

    try:
        events = replay(args.csv_path, sensitivity, on_fall)
    except ValueError as exc:
        parser.error(str(exc))
    except OSError as exc:
        print(f"Cannot open recording: {exc}", file=sys.stderr)
        return 1

    print(f"{'Time (s)':>10}  {'Accel':>8}  {'Gyro':>5}")
    print("-" * 28)
    for event in events:
        print(f"{event.timestamp:>10.3f}  {event.magnitude:>8.2f}  {'yes' if event.had_gyro else 'no':>5}")
    print(f"\n{len(events)} fall(s) detected.")
    return 0


if __name__ == '__main__':
    sys.exit(main())
