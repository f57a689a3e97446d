"""
OpenStreetMap Nominatim geocoding

Turns the free-text pickup/destination names stored on ride requests into
coordinates for the map and fare calculation, and back into addresses.
"""

import logging
from typing import Optional
import requests

from geo_utils import Coordinates

logger = logging.getLogger(__name__)

NOMINATIM_URL = 'https://nominatim.openstreetmap.org'


class GeocodingError(Exception):
    pass


class NominatimGeocoder:
    """Forward and reverse geocoding against a Nominatim server"""

    def __init__(self, base_url: str = NOMINATIM_URL, user_agent: str = 'rideshare-client/1.0',
                 timeout: float = 10.0, session: Optional[requests.Session] = None):
        self.base_url = base_url.rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        # Nominatim's usage policy requires an identifying User-Agent
        self.session.headers.update({'User-Agent': user_agent})

    def _get(self, path: str, params: dict):
        try:
            response = self.session.get(f"{self.base_url}{path}", params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.RequestException as e:
            raise GeocodingError(f"Geocoding request failed: {str(e)}") from e
        except ValueError as e:
            raise GeocodingError("Geocoding service returned invalid JSON") from e

    def geocode(self, location: str) -> Coordinates:
        if not location or not location.strip():
            raise GeocodingError("Location is required")

        results = self._get('/search', {'q': location, 'format': 'json', 'limit': 1})
        if not results:
            raise GeocodingError(f"No results found for location: {location}")

        first = results[0]
        try:
            coordinates = Coordinates.parse(first.get('lat'), first.get('lon'))
        except ValueError as e:
            raise GeocodingError(f"Failed to fetch coordinates for {location}: {e}") from e

        logger.debug(f"Geocoded {location!r} to {coordinates}")
        return coordinates

    def reverse(self, coordinates: Coordinates) -> str:
        result = self._get('/reverse', {
            'lat': coordinates.latitude,
            'lon': coordinates.longitude,
            'format': 'json',
        })
        if not result or result.get('error') or not result.get('display_name'):
            raise GeocodingError("Address not found")
        return result['display_name']
