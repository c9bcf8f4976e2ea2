# alerting/feedback.py
# local sound / vibration feedback when a fall is detected.

from __future__ import annotations

import logging
from typing import Callable, Optional

import pyttsx3

from alerting.preferences import Preferences

logger = logging.getLogger(__name__)

ALERT_MESSAGE = "Fall detected. Sending an alert to your emergency contact."
VIBRATION_S   = 1.0


def speak(message: str, rate: int = 160, volume: float = 1.0) -> None:
    """
    Speak a message aloud using pyttsx3.

    A fresh engine is created for each call; pyttsx3 can silently fail on
    runAndWait() when one engine instance is reused.
    """
    engine = pyttsx3.init()
    engine.setProperty("rate", rate)
    engine.setProperty("volume", volume)
    engine.say(message)
    engine.runAndWait()
    engine.stop()


class AlertFeedback:
    """
    Plays the on-device alert, gated by the user's preferences.

    Parameters
    ----------
    prefs : Preferences
        sound_enabled / vibration_enabled decide what runs.
    speak_fn : Callable[[str], None] | None
        Sound output. Defaults to pyttsx3 speech.
    vibrate_fn : Callable[[float], None] | None
        Vibration motor hook, called with a duration in seconds. Devices
        without one leave it as None and vibration is skipped.
    """

    def __init__(
        self,
        prefs: Preferences,
        speak_fn: Optional[Callable[[str], None]] = None,
        vibrate_fn: Optional[Callable[[float], None]] = None,
    ):
        self.prefs = prefs
        self._speak = speak_fn or speak
        self._vibrate = vibrate_fn

    def trigger(self) -> list[str]:
        """
        Run every enabled feedback channel.

        Failures are logged and never raised, so feedback cannot block the
        SMS alert that follows it. Returns the channels that succeeded.
        """
        done: list[str] = []

        if self.prefs.sound_enabled:
            try:
                self._speak(ALERT_MESSAGE)
                done.append("sound")
                logger.debug("Alert sound played")
            except Exception as exc:
                logger.error("Unable to play alert sound: %s", exc, exc_info=True)

        if self.prefs.vibration_enabled and self._vibrate is not None:
            try:
                self._vibrate(VIBRATION_S)
                done.append("vibration")
            except Exception as exc:
                logger.error("Unable to trigger vibration: %s", exc, exc_info=True)

        return done
