# alerting/location.py
# best-effort location lookup for the alert message.

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import requests

logger = logging.getLogger(__name__)

LOCATION_TIMEOUT_S        = 30.0   # give up waiting for a fix after this long
LOCATION_CHECK_INTERVAL_S = 5.0    # how often to look for a fix

NOMINATIM_URL = "https://nominatim.openstreetmap.org/reverse"


class LocationError(Exception):
    """No usable position could be obtained."""


@dataclass
class LocationFix:
    latitude: float
    longitude: float
    address: str


def format_coordinates(latitude: float, longitude: float) -> str:
    return f"{latitude:.6f}, {longitude:.6f}"


class NominatimGeocoder:
    """
    Reverse geocoding through the OpenStreetMap Nominatim API.

    Returns a comma-joined address (place, road, city, state, country),
    or None when the lookup fails or finds nothing.
    """

    def __init__(self, url: str = NOMINATIM_URL, timeout: float = 4.0,
                 user_agent: str = "imu-fall-alert", session=None):
        self.url = url
        self.timeout = timeout
        self.user_agent = user_agent
        self._session = session or requests.Session()

    def reverse(self, latitude: float, longitude: float) -> Optional[str]:
        try:
            r = self._session.get(
                self.url,
                params={"lat": latitude, "lon": longitude, "format": "jsonv2"},
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Reverse geocoding failed: %s", exc)
            return None

        addr = data.get("address") or {}
        parts = [
            data.get("name"),
            addr.get("road"),
            addr.get("city") or addr.get("town") or addr.get("village"),
            addr.get("state"),
            addr.get("country"),
        ]
        parts = [p for p in parts if p]
        return ", ".join(parts) if parts else None


class LocationHelper:
    """
    Waits for a position fix and turns it into an address.

    Parameters
    ----------
    fix_source : Callable[[], tuple[float, float] | None]
        Returns the latest (latitude, longitude), or None while no fix is
        available yet (e.g. a GPS daemon client).
    geocoder : NominatimGeocoder | None
        Reverse geocoder; a coordinate string is used as the address when
        it is None or returns nothing.
    """

    def __init__(
        self,
        fix_source: Callable[[], Optional[Tuple[float, float]]],
        geocoder: Optional[NominatimGeocoder] = None,
        timeout_s: float = LOCATION_TIMEOUT_S,
        poll_interval_s: float = LOCATION_CHECK_INTERVAL_S,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.fix_source = fix_source
        self.geocoder = geocoder
        self.timeout_s = timeout_s
        self.poll_interval_s = poll_interval_s
        self._sleep = sleep
        self._clock = clock

    def get_current_location(self) -> LocationFix:
        """
        Poll the fix source until a position arrives or the timeout passes.

        Raises
        ------
        LocationError
            "Location request timed out" when no fix arrived in time.
        """
        start = self._clock()
        while True:
            fix = self.fix_source()
            if fix is not None:
                lat, lon = fix
                return LocationFix(lat, lon, self.address_for(lat, lon))

            if self._clock() - start >= self.timeout_s:
                logger.warning("No location fix after %.0fs", self.timeout_s)
                raise LocationError("Location request timed out")
            self._sleep(self.poll_interval_s)

    def address_for(self, latitude: float, longitude: float) -> str:
        address = None
        if self.geocoder is not None:
            address = self.geocoder.reverse(latitude, longitude)
        # Fallback: just the coordinates
        return address or format_coordinates(latitude, longitude)
