"""
alerting/pipeline.py

Single entry point for the post-fall response sequence.

The detector host (or any other caller) only needs to call run_alert()
when FallDetector.evaluate() returns True. Everything after that —
feedback → location → SMS — lives here.

Usage
-----
    from alerting import PreferenceStore, run_alert

    prefs = PreferenceStore().load()
    monitor = FallMonitor(on_fall=lambda event: run_alert(prefs, on_status=print))

    outcome = run_alert(prefs)
    print(outcome.status)                # "Fall alert sent with location."
    print(outcome.sms_result.success)    # True if Twilio accepted the SMS
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Callable, Optional

from alerting.feedback import AlertFeedback
from alerting.location import LocationError, LocationFix, LocationHelper
from alerting.preferences import Preferences
from alerting.sms_alert import AlertResult, SmsAlerter

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Result type
# ---------------------------------------------------------------------------

@dataclass
class AlertOutcome:
    """
    The complete outcome of a single alert run.

    Attributes
    ----------
    sms_result : AlertResult
        Result of the SMS step (success, masked action, error).
    location : LocationFix | None
        The position sent with the alert, or None if none was available.
    feedback : list[str]
        Local feedback channels that ran ("sound", "vibration").
    status : str
        Final human-readable status line for the UI.
    timestamp : str
        ISO-8601 timestamp of when the alert run started.
    """
    sms_result: AlertResult
    location: Optional[LocationFix] = None
    feedback: list[str] = field(default_factory=list)
    status: str = ""
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    @property
    def alert_sent(self) -> bool:
        return self.sms_result.success


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------

def run_alert(
    prefs: Preferences,
    location_helper: LocationHelper | None = None,
    alerter: SmsAlerter | None = None,
    feedback: AlertFeedback | None = None,
    on_status: Callable[[str], None] | None = None,
) -> AlertOutcome:
    """
    Run the full post-fall response sequence.

    Steps:
        1. Sound / vibration feedback, as enabled in preferences
        2. Best-effort location lookup (bounded by the helper's timeout)
        3. Emergency SMS, with location if one was found

    Parameters
    ----------
    prefs : Preferences
        Contact number and feedback / SMS switches.
    location_helper : LocationHelper | None
        Source of the position. If None, the alert goes out without one.
    alerter : SmsAlerter | None
        Pre-built alerter; if None one is created from .env credentials.
    feedback : AlertFeedback | None
        Pre-built feedback; if None the pyttsx3 default is used.
    on_status : Callable[[str], None] | None
        Optional callback invoked at each stage with a human-readable
        status string. If None, status messages only go to the logger.

    Returns
    -------
    AlertOutcome
    """
    timestamp = datetime.now().isoformat()
    logger.info("Fall detected - starting alert process")

    def status(msg: str) -> None:
        """Emit a status update to the callback and the logger."""
        logger.info("[STATUS] %s", msg)
        if on_status:
            on_status(msg)

    status("Fall detected! Sending alert...")

    # --- Step 1: local feedback ---
    feedback = feedback or AlertFeedback(prefs)
    channels = feedback.trigger()

    # --- Step 2: location ---
    location = None
    if location_helper is not None:
        try:
            location = location_helper.get_current_location()
            logger.info("Location received, sending SMS with location")
        except LocationError as exc:
            logger.info("Location error: %s - sending SMS without location", exc)
        except Exception as exc:
            logger.error("Location lookup failed: %s", exc, exc_info=True)

    # --- Step 3: SMS ---
    try:
        alerter = alerter or SmsAlerter(prefs)
        sms_result = alerter.send_alert(location)

    except EnvironmentError as exc:
        # Missing Twilio credentials — surface this clearly so the UI
        # can show a meaningful error rather than a silent failure.
        msg = f"Alert failed — missing credentials: {exc}"
        status(msg)
        return AlertOutcome(
            sms_result=AlertResult(action="SMS alert", success=False, error=str(exc)),
            location=location,
            feedback=channels,
            status=msg,
            timestamp=timestamp,
        )

    if sms_result.success:
        msg = "Fall alert sent with location." if location else "Fall alert sent without location."
    else:
        msg = f"Fall alert failed: {sms_result.error}"
    status(msg)

    return AlertOutcome(
        sms_result=sms_result,
        location=location,
        feedback=channels,
        status=msg,
        timestamp=timestamp,
    )
