"""
Ride Service

Ride offers, ride requests and the accept/complete workflow that matches a
rider with a driver. Status transitions use conditional updates so that a
request is accepted once and a trip is completed once, no matter how many
times the client repeats the call.
"""

from typing import Optional, Dict, Any, List, Tuple
import logging
from datetime import datetime
from sqlalchemy import and_, or_
from models import db, Ride, RideRequest, Progress, RideRequestStatus, ProgressStatus
from timezone_utils import get_local_time_naive
from .audit_service import AuditService
from .errors import ValidationError, NotFoundError, ConflictError, require_fields, require_text
from .notification_service import NotificationService, is_expo_push_token
from .transaction_helper import TransactionHelper

logger = logging.getLogger(__name__)

RIDE_FIELDS = ('driver_name', 'vehicle_info', 'origin', 'destination',
               'available_seats', 'ride_date', 'ride_time')
RIDE_REQUEST_FIELDS = ('rider_name', 'gender', 'pickup_location',
                       'destination_location', 'contact', 'push_token')


def parse_ride_date(value: str):
    try:
        return datetime.strptime(str(value).strip(), '%Y-%m-%d').date()
    except ValueError:
        raise ValidationError(f"Invalid ride_date {value!r}, expected YYYY-MM-DD")


def parse_ride_time(value: str):
    text = str(value).strip()
    for fmt in ('%H:%M:%S', '%H:%M'):
        try:
            return datetime.strptime(text, fmt).time()
        except ValueError:
            continue
    raise ValidationError(f"Invalid ride_time {value!r}, expected HH:MM or HH:MM:SS")


def parse_seats(value) -> int:
    try:
        seats = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid available_seats {value!r}")
    if seats < 1:
        raise ValidationError("available_seats must be at least 1")
    return seats


class RideService:
    """Service class for rides, ride requests and trip progress"""

    def __init__(self, notification_service: Optional[NotificationService] = None):
        self.audit_service = AuditService()
        self._notification_service = notification_service

    @property
    def notification_service(self) -> NotificationService:
        if self._notification_service is None:
            self._notification_service = NotificationService()
        return self._notification_service

    # Rides

    @TransactionHelper.with_transaction
    def post_ride(self, data: Dict[str, Any]) -> Ride:
        fields = require_fields(data, RIDE_FIELDS)
        require_text(fields, ('driver_name', 'vehicle_info', 'origin', 'destination'))

        ride = Ride()
        ride.driver_name = fields['driver_name']
        ride.vehicle_info = fields['vehicle_info']
        ride.origin = fields['origin']
        ride.destination = fields['destination']
        ride.available_seats = parse_seats(fields['available_seats'])
        ride.ride_date = parse_ride_date(fields['ride_date'])
        ride.ride_time = parse_ride_time(fields['ride_time'])

        db.session.add(ride)
        db.session.flush()

        logger.info(f"Ride {ride.id} posted by {ride.driver_name}: {ride.origin} -> {ride.destination}")
        return ride

    def purge_expired_rides(self, now: Optional[datetime] = None) -> int:
        """Delete rides scheduled before now. Caller commits."""
        now = now or get_local_time_naive()
        today, current_time = now.date(), now.time()

        deleted = Ride.query.filter(or_(
            Ride.ride_date < today,
            and_(Ride.ride_date == today, Ride.ride_time < current_time),
        )).delete(synchronize_session=False)

        if deleted:
            logger.info(f"Purged {deleted} expired rides")
        return deleted

    @TransactionHelper.with_transaction
    def list_active_rides(self, now: Optional[datetime] = None) -> List[Ride]:
        """Purge expired rides, then return what is left in schedule order"""
        self.purge_expired_rides(now)
        return Ride.query.order_by(Ride.ride_date, Ride.ride_time, Ride.id).all()

    # Ride requests

    @TransactionHelper.with_transaction
    def create_ride_request(self, data: Dict[str, Any]) -> RideRequest:
        fields = require_text(require_fields(data, RIDE_REQUEST_FIELDS), RIDE_REQUEST_FIELDS)

        ride_request = RideRequest(**fields)
        ride_request.status = RideRequestStatus.PENDING.value
        db.session.add(ride_request)
        db.session.flush()

        logger.info(f"Ride request {ride_request.id} created by {ride_request.rider_name}")
        return ride_request

    def list_ride_requests(self, status: Optional[str] = None) -> List[RideRequest]:
        query = RideRequest.query
        if status:
            query = query.filter(RideRequest.status == status)
        return query.order_by(RideRequest.id).all()

    def get_ride_request_status(self, request_id) -> str:
        if request_id in (None, ''):
            raise ValidationError("Missing requestId parameter")
        try:
            request_id = int(request_id)
        except (TypeError, ValueError):
            raise ValidationError(f"Invalid requestId {request_id!r}")

        ride_request = db.session.get(RideRequest, request_id)
        if not ride_request:
            raise NotFoundError("Ride request not found")
        return ride_request.status

    @TransactionHelper.with_transaction
    def _accept(self, request_id: int, driver_name: str) -> Tuple[RideRequest, Progress]:
        ride_request = db.session.get(RideRequest, request_id)
        if not ride_request:
            raise NotFoundError("Ride request not found")

        # Validate before mutating so a bad token never leaves a half-accepted ride
        if not is_expo_push_token(ride_request.push_token):
            logger.error(f"Invalid Expo push token on ride request {request_id}")
            raise ValidationError("Invalid Expo Push Token")

        updated = RideRequest.query.filter_by(
            id=request_id, status=RideRequestStatus.PENDING.value
        ).update({'status': RideRequestStatus.ACCEPTED.value}, synchronize_session=False)
        if updated == 0:
            raise ConflictError("Ride request has already been accepted")

        progress = Progress()
        progress.ride_request_id = ride_request.id
        progress.rider_name = ride_request.rider_name
        progress.pickup_location = ride_request.pickup_location
        progress.destination_location = ride_request.destination_location
        progress.driver_name = driver_name
        progress.progress = ProgressStatus.ON_PROGRESS.value
        db.session.add(progress)
        db.session.flush()

        self.audit_service.log_action(
            action='accept_ride_request',
            entity_type='ride_request',
            entity_id=ride_request.id,
            details={'progress_id': progress.id, 'driver_name': driver_name},
            actor=driver_name,
        )
        return ride_request, progress

    def accept_ride_request(self, request_id: int, driver_name: Optional[str]) -> Dict[str, Any]:
        """
        Accept a pending ride request on behalf of a driver.

        The status update and the Progress insert commit together. The
        rider's push notification goes out after the commit; a gateway
        failure is reported but does not undo the acceptance.

        Returns:
            dict with progress_id and notification_sent
        """
        if not driver_name:
            raise ValidationError("Missing required fields: driver_name")
        require_text({'driver_name': driver_name}, ('driver_name',))

        ride_request, progress = self._accept(request_id, driver_name)
        logger.info(f"Ride request {request_id} accepted by {driver_name}, progress {progress.id}")

        sent, error = self.notification_service.notify_ride_accepted(ride_request, progress.id, driver_name)
        if not sent:
            logger.warning(f"Ride request {request_id} accepted but rider was not notified: {error}")

        return {'progress_id': progress.id, 'notification_sent': sent}

    # Progress

    def get_progress(self, progress_id: int) -> Progress:
        progress = db.session.get(Progress, progress_id)
        if not progress:
            raise NotFoundError("Progress record not found")
        return progress

    @TransactionHelper.with_transaction
    def complete_progress(self, driver_name: str, progress_id: int) -> Progress:
        """Mark a trip completed when the rider reaches the destination"""
        progress = Progress.query.filter_by(id=progress_id, driver_name=driver_name).first()
        if not progress:
            raise NotFoundError("No progress record found for this driver")

        completed_at = get_local_time_naive()
        updated = Progress.query.filter_by(
            id=progress_id, progress=ProgressStatus.ON_PROGRESS.value
        ).update({'progress': ProgressStatus.COMPLETED.value, 'completed_at': completed_at},
                 synchronize_session=False)
        if updated == 0:
            raise ConflictError("Ride has already been completed")

        self.audit_service.log_action(
            action='complete_ride',
            entity_type='progress',
            entity_id=progress_id,
            details={'rider_name': progress.rider_name},
            actor=driver_name,
        )
        db.session.refresh(progress)

        logger.info(f"Progress {progress_id} completed by {driver_name}")
        return progress
