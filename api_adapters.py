# Contains the adapter classes for communicating with the external geocoding API.

import math
import time
from abc import ABC, abstractmethod
from collections.abc import Mapping

import requests

from api_structures import Coordinates
from delivery_config import (
    DEFAULT_REQUEST_TIMEOUT_SEC,
    DEFAULT_USER_AGENT,
    VIEWBOX,
)


class GeocoderAdapter(ABC):
    """
    Base class for geocoding backends.
    A backend turns one free-text search into at most one coordinate pair and
    reports every kind of miss as None instead of raising.
    """
    @abstractmethod
    def get_coordinates(self, query: str) -> Coordinates | None:
        """Converts a free-text query into our standard Coordinates object."""
        pass


class NominatimAdapter(GeocoderAdapter):
    """The adapter for the OpenStreetMap Nominatim search API."""
    SEARCH_URL = "https://nominatim.openstreetmap.org/search"

    def __init__(self, user_agent: str = DEFAULT_USER_AGENT, viewbox: str = VIEWBOX,
                 timeout: float = DEFAULT_REQUEST_TIMEOUT_SEC, verbose: bool = False):
        if not user_agent:
            raise ValueError(
                "FATAL ERROR: Nominatim requires an identifying User-Agent.")
        self.user_agent = user_agent
        self.viewbox = viewbox
        self.timeout = timeout
        self.verbose = verbose

    def get_coordinates(self, query: str) -> Coordinates | None:
        if self.verbose:
            print(f"   > [Nominatim] Searching: '{query}'...")
        params = {
            'q': query,
            'format': 'json',
            'limit': 1,
            'viewbox': self.viewbox,
            'bounded': 1,
        }
        headers = {'User-Agent': self.user_agent}
        try:
            response = requests.get(
                self.SEARCH_URL, params=params, headers=headers, timeout=self.timeout)
            if not response.ok:
                print(
                    f"   > Error: Nominatim returned status {response.status_code} for: {query}")
                return None
            data = response.json()
            if not isinstance(data, list) or not data:
                print(f"   > Error: Could not find coordinates for: {query}")
                return None
            first = data[0]
            lat, lon = float(first['lat']), float(first['lon'])
            # float() also accepts "inf" and "nan".
            if not (math.isfinite(lat) and math.isfinite(lon)):
                raise ValueError(f"non-finite coordinate {lat}, {lon}")
            # *** NORMALIZATION to our standard Coordinates object ***
            return Coordinates(lat=lat, lon=lon)
        except requests.exceptions.RequestException as e:
            print(f"   > Error connecting to Nominatim: {e}")
            return None
        except (KeyError, IndexError, TypeError, ValueError):
            print(f"   > Error parsing Nominatim response for: {query}")
            return None


class DistrictGeocoder:
    """Resolves district names, preferring manual coordinates and fallback queries over a plain search."""
    QUERY_SUFFIX = "Riyadh Saudi Arabia"

    def __init__(self, adapter: GeocoderAdapter,
                 manual_coords: Mapping[str, Coordinates] | None = None,
                 fallback_queries: Mapping[str, str] | None = None):
        self.adapter = adapter
        self.manual_coords = manual_coords or {}
        self.fallback_queries = fallback_queries or {}

    def build_query(self, name: str) -> str:
        return self.fallback_queries.get(name) or f"{name} {self.QUERY_SUFFIX}"

    def locate(self, name: str) -> Coordinates | None:
        override = self.manual_coords.get(name)
        if override is not None:
            return override
        return self.adapter.get_coordinates(self.build_query(name))


class RateLimiter(ABC):
    """Gate called after every request to the external service."""
    @abstractmethod
    def wait(self) -> None:
        pass


class FixedIntervalRateLimiter(RateLimiter):
    """Pauses for the same interval on every call."""

    def __init__(self, interval_sec: float, sleep=time.sleep):
        if interval_sec < 0:
            raise ValueError("The rate limit interval must not be negative.")
        self.interval_sec = interval_sec
        self._sleep = sleep

    def wait(self) -> None:
        if self.interval_sec > 0:
            self._sleep(self.interval_sec)
