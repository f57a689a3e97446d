"""
Explicit user session for the app.

One SessionManager owns the logged-in user's state. Screens receive the
UserSession (or the manager) as an argument instead of reading globals.
"""

import logging
import threading
from dataclasses import dataclass, replace
from typing import Optional, Dict, Any

from .api_client import RideShareClient

logger = logging.getLogger(__name__)


class NotLoggedInError(Exception):
    pass


@dataclass(frozen=True)
class UserSession:
    user_id: int
    username: str
    email: str
    role: str = 'rider'
    upi_id: Optional[str] = None
    phone_number: Optional[str] = None
    driver_name: Optional[str] = None

    @property
    def is_driver(self) -> bool:
        return self.role == 'driver'

    @classmethod
    def from_user(cls, user: Dict[str, Any]) -> 'UserSession':
        return cls(
            user_id=user['id'],
            username=user['username'],
            email=user['email'],
            role=user.get('role') or 'rider',
            upi_id=user.get('upi_id'),
            phone_number=user.get('phone_number'),
            driver_name=user['username'] if user.get('role') == 'driver' else None,
        )


class SessionManager:
    """Single owner of the current UserSession"""

    def __init__(self, client: RideShareClient):
        self.client = client
        self._session: Optional[UserSession] = None
        self._lock = threading.Lock()

    @property
    def current(self) -> Optional[UserSession]:
        return self._session

    def require(self) -> UserSession:
        session = self._session
        if session is None:
            raise NotLoggedInError("No user is logged in")
        return session

    def login(self, email: str, password: str) -> UserSession:
        user = self.client.login(email, password)
        session = UserSession.from_user(user)
        with self._lock:
            self._session = session
        logger.info(f"Session started for user {session.user_id}")
        return session

    def logout(self):
        with self._lock:
            self._session = None

    def set_driver_name(self, driver_name: str) -> UserSession:
        with self._lock:
            self._session = replace(self.require(), driver_name=driver_name)
            return self._session

    def update_upi(self, upi_id: str) -> UserSession:
        session = self.require()
        stored = self.client.update_upi(session.user_id, upi_id)
        with self._lock:
            self._session = replace(self.require(), upi_id=stored)
            return self._session

    def refresh(self) -> UserSession:
        """Reload the profile from the server, keeping the local driver name"""
        session = self.require()
        refreshed = UserSession.from_user(self.client.get_user(session.user_id))
        if session.driver_name:
            refreshed = replace(refreshed, driver_name=session.driver_name)
        with self._lock:
            self._session = refreshed
        return refreshed
