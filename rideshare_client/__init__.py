"""
Python client for the ride share API

- **RideShareClient**: HTTP calls with timeouts and typed errors
- **SessionManager**: owns the logged-in user's session
- **StatusPoller**: ride request / trip status polling with backoff and cancellation
- **NominatimGeocoder**: place names to coordinates and back
- **TripTracker**: distance, ETA, fare and trip completion
- **build_upi_link**: payment deep link for the fare
"""

from .api_client import RideShareClient, RideShareAPIError, ClientConfig
from .session import SessionManager, UserSession, NotLoggedInError
from .status_poller import StatusPoller, ride_status_poller, trip_progress_poller
from .geocoding import NominatimGeocoder, GeocodingError
from .trip import TripTracker, TripState, TripStateError
from .payment import build_upi_link, is_valid_upi_id

__all__ = [
    'RideShareClient',
    'RideShareAPIError',
    'ClientConfig',
    'SessionManager',
    'UserSession',
    'NotLoggedInError',
    'StatusPoller',
    'ride_status_poller',
    'trip_progress_poller',
    'NominatimGeocoder',
    'GeocodingError',
    'TripTracker',
    'TripState',
    'TripStateError',
    'build_upi_link',
    'is_valid_upi_id',
]
