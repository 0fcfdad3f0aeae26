"""
Upstream Geocoding Client
--------------
Provider interface and the Google Maps Geocoding API implementation.
"""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from src.geocoding.errors import UpstreamError

# Constants
GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
USER_AGENT = "AddressGeocoderAPI/1.0"

# Get logger
logger = logging.getLogger(__name__)


class GeocodingProvider(ABC):
    """Upstream geocoding service queried on cache miss.

    Implementations perform exactly one request per call and raise
    UpstreamError for transport failures (network errors, non-200 answers,
    bodies that are not JSON). Interpreting the payload is left to the caller.
    """

    @abstractmethod
    def fetch(self, address: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Query the provider for an already normalized address.

        Args:
            address: Normalized address string
            timeout: Socket timeout in seconds, None for no limit

        Returns:
            Decoded JSON body of the provider response.
        """

    def close(self) -> None:
        """Release any connections held by the provider."""


class GoogleGeocodingClient(GeocodingProvider):
    """Geocoding provider backed by the Google Maps Geocoding API.

    Any service exposing the same contract (status, error_message and a
    results list with formatted_address and geometry.location) can be used
    by pointing base_url at it.
    """

    def __init__(self, api_key: str, base_url: str = GOOGLE_GEOCODE_URL, session: Optional[requests.Session] = None):
        self.api_key = api_key
        self.base_url = base_url
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", USER_AGENT)

    def fetch(self, address: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        params = {
            "address": address,
            "key": self.api_key,
        }

        try:
            response = self.session.get(self.base_url, params=params, timeout=timeout)
        except requests.Timeout as e:
            logger.warning(f"Google Maps API timed out for '{address}'")
            raise UpstreamError("google maps api request timed out") from e
        except requests.RequestException as e:
            # The exception text can embed the request URL, which carries the key
            logger.warning(f"Network error calling Google Maps API for '{address}': {type(e).__name__}")
            raise UpstreamError(f"google maps api request failed: {type(e).__name__}") from e

        try:
            if response.status_code != 200:
                logger.warning(f"Google Maps API HTTP error ({response.status_code}) for '{address}'")
                raise UpstreamError(f"google maps api returned status {response.status_code}")

            try:
                return response.json()
            except ValueError as e:
                logger.warning(f"Google Maps API returned a body that is not JSON for '{address}'")
                raise UpstreamError("google maps api returned a malformed payload") from e
        finally:
            response.close()

    def close(self) -> None:
        self.session.close()
