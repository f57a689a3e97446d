"""
Ride Share API client

Thin wrapper over the HTTP API used by the rider and driver apps. Every call
has a timeout, the server URL comes from configuration, and only idempotent
GETs are retried.
"""

import os
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Dict, Any, List
from urllib.parse import quote
import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

logger = logging.getLogger(__name__)


class RideShareAPIError(Exception):
    """Raised for non-2xx responses and transport failures"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_permanent(self) -> bool:
        """Client errors will not fix themselves on retry; 408/429 are the exceptions."""
        return self.status_code is not None and 400 <= self.status_code < 500 \
            and self.status_code not in (408, 429)


@dataclass
class ClientConfig:
    base_url: str = field(default_factory=lambda: os.environ.get('RIDESHARE_API_URL', 'http://localhost:3000'))
    timeout: float = 10.0
    get_retries: int = 2


class RideShareClient:
    """
    Client for the ride share HTTP API
    """

    def __init__(self, base_url: Optional[str] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None, config: Optional[ClientConfig] = None):
        overrides = {}
        if base_url is not None:
            overrides['base_url'] = base_url
        if timeout is not None:
            overrides['timeout'] = timeout
        self.config = replace(config or ClientConfig(), **overrides)
        self.base_url = self.config.base_url.rstrip('/')

        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})

        retry_strategy = Retry(
            total=self.config.get_retries,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"]  # accept/complete must never be replayed
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f"{self.base_url}{path}"
        kwargs.setdefault('timeout', self.config.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"{method} {path} failed: {str(e)}")
            raise RideShareAPIError(f"Network error: {str(e)}") from e

        try:
            payload = response.json()
        except ValueError:
            payload = None

        if not response.ok:
            message = None
            if isinstance(payload, dict):
                message = payload.get('error') or payload.get('message')
            message = message or f"HTTP {response.status_code}"
            logger.warning(f"{method} {path} returned {response.status_code}: {message}")
            raise RideShareAPIError(message, status_code=response.status_code)

        return payload

    # Users

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._request('GET', '/api/login', params={'email': email, 'password': password})['user']

    def get_user(self, user_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/api/users/{user_id}')

    def update_profile(self, user_id: int, email: Optional[str] = None, mobile: Optional[str] = None,
                       gender: Optional[str] = None, upi_id: Optional[str] = None,
                       profile_picture_path: Optional[str] = None) -> Dict[str, Any]:
        form = {key: value for key, value in
                {'email': email, 'mobile': mobile, 'gender': gender, 'upi_id': upi_id}.items()
                if value is not None}

        if profile_picture_path:
            with open(profile_picture_path, 'rb') as picture:
                files = {'profilePicture': (os.path.basename(profile_picture_path), picture)}
                return self._request('PUT', f'/api/users/{user_id}', data=form, files=files)['user']
        return self._request('PUT', f'/api/users/{user_id}', data=form)['user']

    def update_upi(self, user_id: int, upi_id: str) -> str:
        return self._request('PUT', f'/api/users/{user_id}/upi', json={'upi_id': upi_id})['upi_id']

    # Rides

    def post_ride(self, driver_name: str, vehicle_info: str, origin: str, destination: str,
                  available_seats: int, ride_date: str, ride_time: str) -> int:
        payload = {
            'driver_name': driver_name,
            'vehicle_info': vehicle_info,
            'origin': origin,
            'destination': destination,
            'available_seats': available_seats,
            'ride_date': ride_date,
            'ride_time': ride_time,
        }
        return self._request('POST', '/api/rides', json=payload)['rideId']

    def list_rides(self) -> List[Dict[str, Any]]:
        return self._request('GET', '/api/rides')

    # Ride requests

    def create_ride_request(self, rider_name: str, gender: str, pickup_location: str,
                            destination_location: str, contact: str, push_token: str) -> int:
        payload = {
            'rider_name': rider_name,
            'gender': gender,
            'pickup_location': pickup_location,
            'destination_location': destination_location,
            'contact': contact,
            'push_token': push_token,
        }
        return self._request('POST', '/api/ride-requests', json=payload)['requestId']

    def list_ride_requests(self, status: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {'status': status} if status else None
        return self._request('GET', '/api/ride-requests', params=params)

    def accept_ride_request(self, request_id: int, driver_name: str) -> Dict[str, Any]:
        return self._request('POST', f'/api/ride-requests/{request_id}/accept',
                             json={'driver_name': driver_name, 'request_id': request_id})

    def get_ride_status(self, request_id: int) -> str:
        return self._request('GET', '/api/ride-requests/status', params={'requestId': request_id})['status']

    def get_progress(self, progress_id: int) -> Dict[str, Any]:
        return self._request('GET', f'/api/ride-requests/progress/{progress_id}')

    def complete_ride(self, driver_name: str, progress_id: int) -> Dict[str, Any]:
        path = f"/api/ride-requests/progress/{quote(driver_name, safe='')}/{progress_id}"
        return self._request('PUT', path, json={'driverName': driver_name, 'progressId': progress_id})['progress']

    # Feedback

    def submit_feedback(self, name: str, email: str, role: str, feedback_text: str,
                        rating: int, issue: str) -> int:
        payload = {
            'name': name,
            'email': email,
            'role': role,
            'feedback_text': feedback_text,
            'rating': rating,
            'issue': issue,
        }
        return self._request('POST', '/api/submit-feedback', json=payload)['feedbackId']
