"""
Notification Service

Sends push notifications to riders through the Expo push gateway.
Delivery is fire-and-forget: the gateway's push ticket is checked, but
delivery receipts are not tracked.
"""

from typing import Optional, Dict, Any, Tuple
import logging
import re
import requests
from flask import current_app, has_app_context

logger = logging.getLogger(__name__)

DEFAULT_EXPO_PUSH_URL = 'https://exp.host/--/api/v2/push/send'

_EXPO_TOKEN_RE = re.compile(r'^(ExponentPushToken|ExpoPushToken)\[.+\]$')
_UUID_TOKEN_RE = re.compile(r'^[a-z\d]{8}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{4}-[a-z\d]{12}$', re.IGNORECASE)


def is_expo_push_token(token) -> bool:
    """Check that a token has one of the formats the Expo gateway accepts"""
    if not isinstance(token, str):
        return False
    return bool(_EXPO_TOKEN_RE.match(token) or _UUID_TOKEN_RE.match(token))


class NotificationService:
    """Service class for push notifications"""

    def __init__(self, push_url: Optional[str] = None, access_token: Optional[str] = None,
                 enabled: Optional[bool] = None, timeout: Optional[float] = None,
                 session: Optional[requests.Session] = None):
        config = current_app.config if has_app_context() else {}
        self.push_url = push_url or config.get('EXPO_PUSH_URL', DEFAULT_EXPO_PUSH_URL)
        self.access_token = access_token if access_token is not None else config.get('EXPO_ACCESS_TOKEN')
        self.enabled = enabled if enabled is not None else config.get('PUSH_NOTIFICATIONS_ENABLED', True)
        self.timeout = timeout or config.get('PUSH_TIMEOUT', 10)
        self.session = session or requests.Session()

    def send_push(self, token: str, body: str,
                  data: Optional[Dict[str, Any]] = None,
                  title: Optional[str] = None) -> Tuple[bool, Optional[str]]:
        """
        Send a single push message.

        Args:
            token: Expo push token of the recipient device
            body: Notification body text
            data: JSON payload delivered to the app
            title: Optional notification title

        Returns:
            tuple: (success: bool, error_message: str)
        """
        if not is_expo_push_token(token):
            logger.error(f"Invalid Expo push token: {token!r}")
            return False, "Invalid Expo Push Token"

        if not self.enabled:
            logger.info("Push notifications disabled, skipping message")
            return False, "Push notifications disabled"

        message = {'to': token, 'sound': 'default', 'body': body, 'data': data or {}}
        if title:
            message['title'] = title

        headers = {
            'Accept': 'application/json',
            'Content-Type': 'application/json',
        }
        if self.access_token:
            headers['Authorization'] = f'Bearer {self.access_token}'

        try:
            response = self.session.post(self.push_url, json=[message], headers=headers, timeout=self.timeout)
            response.raise_for_status()
            payload = response.json()
        except requests.exceptions.RequestException as e:
            logger.error(f"Error sending push notification: {str(e)}")
            return False, f"Failed to send notification: {str(e)}"
        except ValueError:
            logger.error("Push gateway returned a non-JSON response")
            return False, "Invalid response from push gateway"

        if not isinstance(payload, dict):
            logger.error(f"Push gateway returned unexpected payload: {payload!r}")
            return False, "Invalid response from push gateway"

        errors = payload.get('errors')
        if errors:
            if not isinstance(errors, list):
                errors = [errors]
            error_msg = '; '.join(
                err.get('message', 'Unknown error') if isinstance(err, dict) else str(err)
                for err in errors
            )
            logger.error(f"Push gateway rejected request: {error_msg}")
            return False, error_msg

        tickets = payload.get('data') or []
        if isinstance(tickets, dict):
            tickets = [tickets]
        ticket = tickets[0] if isinstance(tickets, list) and tickets else {}
        if not isinstance(ticket, dict):
            logger.error(f"Push gateway returned unexpected ticket: {ticket!r}")
            return False, "Invalid response from push gateway"

        if ticket.get('status') != 'ok':
            error_msg = ticket.get('message', 'Push ticket missing')
            details = ticket.get('details') or {}
            if isinstance(details, dict) and details.get('error'):
                error_msg = f"{error_msg} ({details['error']})"
            logger.error(f"Push notification failed: {error_msg}")
            return False, error_msg

        logger.info(f"Push notification accepted by gateway, ticket {ticket.get('id')}")
        return True, None

    def notify_ride_accepted(self, ride_request, progress_id: int,
                             driver_name: str) -> Tuple[bool, Optional[str]]:
        """Tell the rider that a driver accepted their request"""
        return self.send_push(
            ride_request.push_token,
            'Your ride has been accepted!',
            data={
                'requestId': ride_request.id,
                'progressId': progress_id,
                'driverName': driver_name,
            },
            title='Ride accepted',
        )
