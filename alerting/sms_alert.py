# emergency SMS alerting for the fall detection system.

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from dotenv import load_dotenv
from twilio.base.exceptions import TwilioRestException
from twilio.rest import Client as TwilioClient

from alerting.location import LocationFix, format_coordinates
from alerting.preferences import Preferences

# Logging
logger = logging.getLogger(__name__)

LOCATION_UNAVAILABLE = "Location unavailable"


def mask_phone(phone: str) -> str:
    """Hide all but the last 4 digits of a number for logs and status text."""
    if len(phone) > 4:
        return "*****" + phone[-4:]
    return phone


# Data classes
@dataclass
class AlertResult:
    action: str # e.g. "SMS to *****1234".
    success: bool # whether the message was accepted for delivery.
    error: str | None = None # error message if success is False, otherwise None.
    message_kind: str | None = None # "detailed" or "simple" — which text was sent
    sid: str | None = None # Twilio message SID when sent
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat()) # when the alert was attempted


# Message builders
def build_emergency_message(location: Optional[LocationFix], now: datetime) -> str:
    """Full alert text, with position, address and a map link when known."""
    lines = [
        "EMERGENCY: Fall detected!",
        "",
        f"Time: {now.strftime('%Y-%m-%d %H:%M:%S')}",
    ]
    if _has_position(location):
        coords = format_coordinates(location.latitude, location.longitude)
        lines += [
            f"Location: {coords}",
            f"Address: {location.address}",
            "Google Maps: https://maps.google.com/?q="
            f"{location.latitude:.6f},{location.longitude:.6f}",
        ]
    else:
        lines.append("Location: Unable to determine location")
    lines += ["", "Please check on me immediately!"]
    return "\n".join(lines)


def build_simple_message(now: datetime) -> str:
    """Short fallback text used when the detailed message fails to send."""
    return f"EMERGENCY: Fall detected at {now.strftime('%H:%M')}. Please check on me immediately!"


def _has_position(location: Optional[LocationFix]) -> bool:
    return (
        location is not None
        and location.latitude != 0
        and location.longitude != 0
        and (location.address or "").lower() != LOCATION_UNAVAILABLE.lower()
    )


# Main class
class SmsAlerter:
    """
    Sends the emergency SMS to the stored contact after a fall is confirmed.

    Usage
    -----
        prefs   = PreferenceStore().load()
        alerter = SmsAlerter(prefs)
        result  = alerter.send_alert(location)

    Parameters
    ----------
    prefs : Preferences
        Emergency contact and the sms_enabled switch.
    client : twilio.rest.Client | None
        Pre-built Twilio client (or a stand-in in tests). If None, one is
        created from TWILIO_ACCOUNT_SID / TWILIO_AUTH_TOKEN.
    from_number : str | None
        Sending number. Defaults to TWILIO_FROM_NUMBER.
    dotenv_path : str | None
        Optional explicit path to your .env file.
        If None, python-dotenv searches upward from the current directory.
    """

    def __init__(
        self,
        prefs: Preferences,
        client=None,
        from_number: str | None = None,
        dotenv_path: str | None = None,
    ):
        self.prefs = prefs

        # Load .env file
        load_dotenv(dotenv_path=dotenv_path)
        self._from_number = from_number or os.environ.get("TWILIO_FROM_NUMBER", "")

        required = [("TWILIO_FROM_NUMBER", self._from_number)]
        sid = token = ""
        if client is None:
            sid   = os.environ.get("TWILIO_ACCOUNT_SID", "")
            token = os.environ.get("TWILIO_AUTH_TOKEN", "")
            required += [("TWILIO_ACCOUNT_SID", sid), ("TWILIO_AUTH_TOKEN", token)]

        # Validate credentials before doing anything else
        missing = [name for name, val in required if not val]
        if missing:
            raise EnvironmentError(
                f"Missing required .env variable(s): {', '.join(missing)}"
            )

        if client is None:
            logger.info("Twilio credentials loaded | SID=%s...", sid[:5])
            client = TwilioClient(sid, token)
        self._twilio = client

    # Public API
    def send_alert(
        self,
        location: Optional[LocationFix] = None,
        now: Optional[datetime] = None,
    ) -> AlertResult:
        """
        Send the detailed alert, falling back once to the short message if
        the detailed one is rejected.

        Parameters
        ----------
        location : LocationFix | None
            Where the user is. None (or a 0/0 fix) sends the
            "Unable to determine location" variant.
        now : datetime | None
            Time printed in the message; defaults to the current time.

        Returns
        -------
        AlertResult
        """
        now = now or datetime.now()
        contact = self.prefs.contact_phone
        logger.info(
            "sendAlert | contact=%s",
            "NOT SET" if not contact else f"SET - {mask_phone(contact)}",
        )

        if not contact:
            logger.error("No emergency contact set")
            return AlertResult(action="SMS alert", success=False, error="No emergency contact set")

        if not self.prefs.sms_enabled:
            logger.warning("SMS alerts are disabled")
            return AlertResult(action="SMS alert", success=False, error="SMS alerts are disabled")

        result = self._send(contact, build_emergency_message(location, now), "detailed")
        if result.success or result.error_kind != "rejected":
            return result.to_alert_result()

        logger.info("Retrying with simple message")
        return self._send(contact, build_simple_message(now), "simple").to_alert_result()

    def send_test(self) -> AlertResult:
        """Manual test from the settings screen."""
        logger.info("Testing SMS manually")
        return self.send_alert(LocationFix(0.0, 0.0, "Test location"))

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def _send(self, contact: str, body: str, kind: str) -> "_Attempt":
        """
        Hand one message to Twilio.

        Twilio splits long bodies into concatenated segments itself, so
        there is no multipart handling here.
        """
        masked = mask_phone(contact)
        action = f"SMS to {masked}"
        logger.debug("Sending %s emergency message | length=%d", kind, len(body))

        try:
            message = self._twilio.messages.create(
                body=body,
                from_=self._from_number,
                to=contact,
            )
            logger.info("Emergency SMS sent to %s | sid=%s", masked, message.sid)
            return _Attempt(action, True, kind, sid=message.sid)

        except TwilioRestException as exc:
            logger.error("SMS failed | to=%s | error=%s", masked, exc.msg)
            return _Attempt(action, False, kind, error=exc.msg, error_kind="rejected")

        except Exception as exc:
            logger.error(
                "SMS unexpected error | to=%s | error=%s",
                masked,
                str(exc),
                exc_info=True,
            )
            return _Attempt(action, False, kind, error=f"Failed to send SMS: {exc}",
                            error_kind="unexpected")


@dataclass
class _Attempt:
    action: str
    success: bool
    kind: str
    sid: str | None = None
    error: str | None = None
    error_kind: str | None = None

    def to_alert_result(self) -> AlertResult:
        return AlertResult(
            action=self.action,
            success=self.success,
            error=self.error,
            message_kind=self.kind,
            sid=self.sid,
        )
