import pytest

from imu_detection.replay import main, read_samples, replay
from imu_detection.sample import NO_GYRO

HEADER = "ts,ax,ay,az,gx,gy,gz\n"


def write_recording(path, rows):
    path.write_text(HEADER + "".join(",".join(str(v) for v in row) + "\n" for row in rows))
    return path


def fall_rows(start=0.0):
    rows = [(start + i * 0.01, 0, 0, 16, "", "", "") for i in range(4)]
    rows.append((start + 0.04, 0, 0, 16, 0, 0, 4))
    rows.append((start + 0.54, 0, 0, 1, "", "", ""))
    return rows


def test_read_samples_handles_missing_gyro_and_bad_rows(tmp_path):
    csv_path = write_recording(tmp_path / "rec.csv", [
        (0.0, 0, 0, 9.81, 0.1, 0.2, 0.3),
        (0.02, 0, 0, 9.81, "", "", ""),
        (0.04, "oops", 0, 9.81, "", "", ""),
    ])
    samples = list(read_samples(csv_path))
    assert len(samples) == 2
    assert samples[0].has_gyro
    assert samples[1].gyro is NO_GYRO


def test_replay_reports_one_fall(tmp_path):
    csv_path = write_recording(tmp_path / "rec.csv", fall_rows())
    events = replay(csv_path)
    assert len(events) == 1
    assert events[0].timestamp == pytest.approx(0.54)


def test_replay_respects_cooldown(tmp_path):
    csv_path = write_recording(tmp_path / "rec.csv", fall_rows(0.0) + fall_rows(1.0))
    assert len(replay(csv_path)) == 1


def test_main_prints_summary(tmp_path, capsys):
    csv_path = write_recording(tmp_path / "rec.csv", fall_rows())
    assert main([str(csv_path), "--sensitivity", "50"]) == 0
    assert "1 fall(s) detected." in capsys.readouterr().out


def test_main_rejects_bad_sensitivity(tmp_path):
    csv_path = write_recording(tmp_path / "rec.csv", fall_rows())
    with pytest.raises(SystemExit):
        main([str(csv_path), "--sensitivity", "200"])


def test_main_missing_file(tmp_path):
    assert main([str(tmp_path / "nope.csv")]) == 1


def soft_fall_rows():
    # 14 m/s² stays under the unscaled 15 m/s² trigger
    rows = [(i * 0.01, 0, 0, 14, "", "", "") for i in range(4)]
    rows.append((0.04, 0, 0, 14, 0, 0, 4))
    rows.append((0.54, 0, 0, 1, "", "", ""))
    return rows


def run_main(capsys, *argv):
    assert main([str(a) for a in argv]) == 0
    return capsys.readouterr().out


def test_unscaled_replay_misses_soft_fall(tmp_path, capsys):
    csv_path = write_recording(tmp_path / "rec.csv", soft_fall_rows())
    assert "0 fall(s) detected." in run_main(capsys, csv_path)


def test_stored_sensitivity_is_applied(tmp_path, capsys):
    csv_path = write_recording(tmp_path / "rec.csv", soft_fall_rows())
    prefs = tmp_path / "config.json"
    prefs.write_text('{"sensitivity": 100}')
    assert "1 fall(s) detected." in run_main(capsys, csv_path, "--prefs", prefs)


def test_default_preferences_start_at_level_50(tmp_path, capsys):
    csv_path = write_recording(tmp_path / "rec.csv", soft_fall_rows())
    out = run_main(capsys, csv_path, "--prefs", tmp_path / "missing.json")
    assert "1 fall(s) detected." in out


def test_explicit_sensitivity_overrides_stored_level(tmp_path, capsys):
    csv_path = write_recording(tmp_path / "rec.csv", soft_fall_rows())
    prefs = tmp_path / "config.json"
    prefs.write_text('{"sensitivity": 100}')
    out = run_main(capsys, csv_path, "--prefs", prefs, "--sensitivity", "0")
    assert "0 fall(s) detected." in out
