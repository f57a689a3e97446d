"""
Trip tracking for a matched ride

Holds the coordinates of a trip, derives distance, ETA and fare from them,
and drives the two-state trip workflow (on progress -> completed).
"""

import logging
from enum import Enum
from typing import Optional, Dict, Any

from geo_utils import Coordinates, distance, trip_quote
from .api_client import RideShareClient
from .geocoding import NominatimGeocoder

logger = logging.getLogger(__name__)


class TripState(Enum):
    ON_PROGRESS = 'on progress'
    COMPLETED = 'completed'


class TripStateError(Exception):
    pass


class TripTracker:

    def __init__(self, progress_id: int, driver_name: str,
                 pickup: Coordinates, destination: Coordinates,
                 driver_location: Optional[Coordinates] = None):
        self.progress_id = progress_id
        self.driver_name = driver_name
        self.pickup = pickup
        self.destination = destination
        self.driver_location = driver_location
        self.state = TripState.ON_PROGRESS

    @classmethod
    def from_locations(cls, geocoder: NominatimGeocoder, progress_id: int, driver_name: str,
                       pickup_location: str, destination_location: str) -> 'TripTracker':
        """Build a tracker from the place names stored on the ride request"""
        return cls(progress_id, driver_name,
                   geocoder.geocode(pickup_location),
                   geocoder.geocode(destination_location))

    def update_driver_location(self, location: Coordinates):
        self.driver_location = location

    @property
    def distance_to_pickup(self) -> Optional[float]:
        if self.driver_location is None:
            return None
        return distance(self.driver_location, self.pickup)

    @property
    def quote(self) -> Dict[str, Any]:
        """Distance, ETA and fare from pickup to destination"""
        return trip_quote(self.pickup, self.destination)

    @property
    def trip_distance(self) -> float:
        return self.quote['distance_km']

    @property
    def eta_minutes(self) -> int:
        return self.quote['eta_minutes']

    @property
    def fare(self) -> str:
        return self.quote['fare']

    def summary(self) -> Dict[str, Any]:
        quote = self.quote
        return {
            'progress_id': self.progress_id,
            'state': self.state.value,
            'distance_to_pickup_km': self.distance_to_pickup,
            'trip_distance_km': quote['distance_km'],
            'eta_minutes': quote['eta_minutes'],
            'fare': quote['fare'],
        }

    def mark_reached(self, client: RideShareClient) -> Dict[str, Any]:
        """Rider reached the destination: complete the trip on the server"""
        if self.state is TripState.COMPLETED:
            raise TripStateError(f"Trip {self.progress_id} is already completed")

        progress = client.complete_ride(self.driver_name, self.progress_id)
        self.state = TripState(progress['progress'])
        logger.info(f"Trip {self.progress_id} completed, fare {self.fare}")
        return progress
