import json

import pytest

from alerting.preferences import PreferenceStore, Preferences, is_valid_phone


def test_missing_file_gives_defaults(tmp_path):
    prefs = PreferenceStore(tmp_path / "config.json").load()
    assert prefs == Preferences()
    assert not prefs.has_contact
    assert prefs.sensitivity == 50


def test_saved_preferences_are_reloaded(tmp_path):
    store = PreferenceStore(tmp_path / "nested" / "config.json")
    store.save(Preferences(contact_phone="+15551234567", sound_enabled=False, sensitivity=80))
    prefs = store.load()
    assert prefs.contact_phone == "+15551234567"
    assert prefs.sound_enabled is False
    assert prefs.sensitivity == 80


def test_corrupt_file_gives_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    assert PreferenceStore(path).load() == Preferences()


def test_unknown_keys_and_bad_sensitivity_are_ignored(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({
        "contacts": [], "user_name": "Ann", "sensitivity": 400, "sms_enabled": False,
    }))
    prefs = PreferenceStore(path).load()
    assert prefs.sensitivity == 50
    assert prefs.sms_enabled is False
    assert not hasattr(prefs, "user_name")


@pytest.mark.parametrize("phone,ok", [
    ("+15551234567", True),
    ("5551234567", True),
    ("555-123-4567", False),
    ("12345", False),
    ("", False),
])
def test_phone_validation(phone, ok):
    assert is_valid_phone(phone) is ok


def test_save_contact_rejects_invalid_number(tmp_path):
    store = PreferenceStore(tmp_path / "config.json")
    with pytest.raises(ValueError):
        store.save_contact("call me")
    assert not (tmp_path / "config.json").exists()


def test_save_contact_and_flags(tmp_path):
    store = PreferenceStore(tmp_path / "config.json")
    store.save_contact("  +447700900123 ")
    store.set_flag("sms_enabled", False)
    store.set_sensitivity(20)
    prefs = store.load()
    assert prefs.contact_phone == "+447700900123"
    assert prefs.sms_enabled is False
    assert prefs.sensitivity == 20

    with pytest.raises(ValueError):
        store.set_flag("contact_phone", True)
    with pytest.raises(ValueError):
        store.set_sensitivity(-3)


def test_path_from_environment(tmp_path, monkeypatch):
    target = tmp_path / "prefs.json"
    monkeypatch.setenv("FALL_PREFS_PATH", str(target))
    store = PreferenceStore(dotenv_path=str(tmp_path / "missing.env"))
    assert store.path == target
