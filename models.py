import json
from enum import Enum
from app import db
from timezone_utils import get_local_time_naive


class RideRequestStatus(Enum):
    PENDING = 'Pending'
    ACCEPTED = 'Accepted'


class ProgressStatus(Enum):
    ON_PROGRESS = 'on progress'
    COMPLETED = 'completed'


class UserRole(Enum):
    RIDER = 'rider'
    DRIVER = 'driver'


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(64), nullable=False, index=True)
    email = db.Column(db.String(120), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(256), nullable=False)

    # Profile information
    phone_number = db.Column(db.String(20))
    gender = db.Column(db.String(20))
    profile_picture = db.Column(db.String(255))
    upi_id = db.Column(db.String(100))
    role = db.Column(db.String(20), nullable=False, default=UserRole.RIDER.value)

    created_at = db.Column(db.DateTime, default=get_local_time_naive, nullable=False)
    updated_at = db.Column(db.DateTime, default=get_local_time_naive, onupdate=get_local_time_naive)

    def to_dict(self):
        return {
            'id': self.id,
            'username': self.username,
            'email': self.email,
            'phone_number': self.phone_number,
            'gender': self.gender,
            'profile_picture': self.profile_picture,
            'upi_id': self.upi_id,
            'role': self.role,
        }

    def __repr__(self):
        return f'<User {self.username}>'


class Ride(db.Model):
    """A driver-posted offer with route, schedule and seat capacity"""
    __tablename__ = 'rides'

    id = db.Column(db.Integer, primary_key=True)
    driver_name = db.Column(db.String(100), nullable=False)
    vehicle_info = db.Column(db.String(200), nullable=False)
    origin = db.Column(db.String(255), nullable=False)
    destination = db.Column(db.String(255), nullable=False)
    available_seats = db.Column(db.Integer, nullable=False)
    ride_date = db.Column(db.Date, nullable=False, index=True)
    ride_time = db.Column(db.Time, nullable=False)
    created_at = db.Column(db.DateTime, default=get_local_time_naive, nullable=False)

    def to_dict(self):
        return {
            'id': self.id,
            'driver_name': self.driver_name,
            'vehicle_info': self.vehicle_info,
            'origin': self.origin,
            'destination': self.destination,
            'available_seats': self.available_seats,
            'ride_date': self.ride_date.isoformat(),
            'ride_time': self.ride_time.strftime('%H:%M:%S'),
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }

    def __repr__(self):
        return f'<Ride {self.id} {self.origin} -> {self.destination}>'


class RideRequest(db.Model):
    """A rider-posted demand for a trip, matched when a driver accepts it"""
    __tablename__ = 'ride_requests'

    id = db.Column(db.Integer, primary_key=True)
    rider_name = db.Column(db.String(100), nullable=False)
    gender = db.Column(db.String(20), nullable=False)
    pickup_location = db.Column(db.String(255), nullable=False)
    destination_location = db.Column(db.String(255), nullable=False)
    contact = db.Column(db.String(50), nullable=False)
    push_token = db.Column(db.String(255), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=RideRequestStatus.PENDING.value, index=True)
    created_at = db.Column(db.DateTime, default=get_local_time_naive, nullable=False)

    def to_dict(self):
        # push_token stays server-side
        return {
            'id': self.id,
            'rider_name': self.rider_name,
            'gender': self.gender,
            'pickup_location': self.pickup_location,
            'destination_location': self.destination_location,
            'contact': self.contact,
            'status': self.status,
        }

    def __repr__(self):
        return f'<RideRequest {self.id} {self.status}>'


class Progress(db.Model):
    """In-trip record created when a driver accepts a ride request"""
    __tablename__ = 'progress'

    id = db.Column(db.Integer, primary_key=True)
    ride_request_id = db.Column(db.Integer, index=True)
    rider_name = db.Column(db.String(100), nullable=False)
    pickup_location = db.Column(db.String(255), nullable=False)
    destination_location = db.Column(db.String(255), nullable=False)
    driver_name = db.Column(db.String(100), nullable=False, index=True)
    progress = db.Column(db.String(20), nullable=False, default=ProgressStatus.ON_PROGRESS.value)
    created_at = db.Column(db.DateTime, default=get_local_time_naive, nullable=False)
    completed_at = db.Column(db.DateTime)

    def to_dict(self):
        return {
            'id': self.id,
            'ride_request_id': self.ride_request_id,
            'rider_name': self.rider_name,
            'pickup_location': self.pickup_location,
            'destination_location': self.destination_location,
            'driver_name': self.driver_name,
            'progress': self.progress,
            'completed_at': self.completed_at.isoformat() if self.completed_at else None,
        }

    def __repr__(self):
        return f'<Progress {self.id} {self.progress}>'


class Feedback(db.Model):
    __tablename__ = 'feedback'

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    email = db.Column(db.String(120), nullable=False)
    role = db.Column(db.String(20), nullable=False)
    feedback_text = db.Column(db.Text, nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    issue = db.Column(db.String(100), nullable=False)
    created_at = db.Column(db.DateTime, default=get_local_time_naive, nullable=False)


class AuditLog(db.Model):
    __tablename__ = 'audit_logs'

    id = db.Column(db.Integer, primary_key=True)
    action = db.Column(db.String(100), nullable=False, index=True)
    entity_type = db.Column(db.String(50))
    entity_id = db.Column(db.Integer)
    actor = db.Column(db.String(100))
    details = db.Column(db.Text)  # JSON
    ip_address = db.Column(db.String(45))
    created_at = db.Column(db.DateTime, default=get_local_time_naive, nullable=False, index=True)

    def get_details(self):
        return json.loads(self.details) if self.details else {}
