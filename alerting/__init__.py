"""
alerting/__init__.py

What happens after a confirmed fall: local feedback, a location fix and
the emergency SMS, driven by the stored user preferences.

Usage
-----
    from alerting import PreferenceStore, run_alert

    prefs = PreferenceStore().load()
    outcome = run_alert(prefs)
"""

from alerting.pipeline import run_alert, AlertOutcome
from alerting.preferences import PreferenceStore, Preferences, is_valid_phone
from alerting.sms_alert import SmsAlerter, AlertResult, mask_phone
from alerting.location import LocationHelper, LocationFix, LocationError, NominatimGeocoder
from alerting.feedback import AlertFeedback

__all__ = [
    # fall response
    "run_alert",
    "AlertOutcome",
    # settings
    "PreferenceStore",
    "Preferences",
    "is_valid_phone",
    # SMS
    "SmsAlerter",
    "AlertResult",
    "mask_phone",
    # location
    "LocationHelper",
    "LocationFix",
    "LocationError",
    "NominatimGeocoder",
    # sound / vibration
    "AlertFeedback",
]
