"""
Test configuration and fixtures for the ride share API
"""

import os
from datetime import time, timedelta
from unittest.mock import Mock, patch

import pytest

# Set test environment before importing app
os.environ.update({
    'FLASK_ENV': 'testing',
    'DATABASE_URL': 'sqlite:///:memory:',
    'APP_TIMEZONE': 'Asia/Kolkata',
})

from app import create_app, db
from models import User, Ride, RideRequest, Progress, Feedback
from timezone_utils import get_local_today
import factory
from werkzeug.security import generate_password_hash

VALID_PUSH_TOKEN = 'ExponentPushToken[xxxxxxxxxxxxxxxxxxxxxx]'


@pytest.fixture(scope='function')
def app(tmp_path):
    """Create application for testing"""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'EXPO_PUSH_URL': 'https://push.example.test/send',
        'PUSH_NOTIFICATIONS_ENABLED': True,
    })

    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(scope='function')
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture(scope='function')
def db_session(app):
    """Database session for testing"""
    yield db.session
    db.session.rollback()


def gateway_response(payload=None, status_code=200):
    """Fake requests.Response from the Expo push gateway"""
    response = Mock()
    response.status_code = status_code
    response.json.return_value = payload if payload is not None else {
        'data': [{'status': 'ok', 'id': 'ticket-1'}]
    }
    response.raise_for_status.return_value = None
    return response


@pytest.fixture
def push_gateway():
    """Patch outgoing push gateway calls; yields the mocked Session.post"""
    with patch('services.notification_service.requests.Session.post') as post:
        post.return_value = gateway_response()
        yield post


# Factory classes for test data generation
class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session = db.session
        sqlalchemy_session_persistence = "commit"


class UserFactory(BaseFactory):
    class Meta:
        model = User

    username = factory.Sequence(lambda n: f"user{n}")
    email = factory.Sequence(lambda n: f"user{n}@test.com")
    password_hash = factory.LazyFunction(lambda: generate_password_hash('testpass123'))
    role = 'rider'
    phone_number = factory.Sequence(lambda n: f"98450{n:05d}")
    gender = 'female'


class DriverFactory(UserFactory):
    role = 'driver'
    username = factory.Sequence(lambda n: f"driver{n}")
    email = factory.Sequence(lambda n: f"driver{n}@test.com")
    upi_id = factory.Sequence(lambda n: f"driver{n}@okaxis")


class RideFactory(BaseFactory):
    class Meta:
        model = Ride

    driver_name = factory.Sequence(lambda n: f"driver{n}")
    vehicle_info = "Maruti Swift Dzire KA01AB1234"
    origin = "Koramangala"
    destination = "Whitefield"
    available_seats = 3
    ride_date = factory.LazyFunction(lambda: get_local_today() + timedelta(days=1))
    ride_time = time(9, 30)


class RideRequestFactory(BaseFactory):
    class Meta:
        model = RideRequest

    rider_name = factory.Sequence(lambda n: f"rider{n}")
    gender = 'female'
    pickup_location = "MG Road"
    destination_location = "Indiranagar"
    contact = "9845012345"
    push_token = VALID_PUSH_TOKEN
    status = 'Pending'


class ProgressFactory(BaseFactory):
    class Meta:
        model = Progress

    rider_name = factory.Sequence(lambda n: f"rider{n}")
    pickup_location = "MG Road"
    destination_location = "Indiranagar"
    driver_name = "ravi"
    progress = 'on progress'


class FeedbackFactory(BaseFactory):
    class Meta:
        model = Feedback

    name = "Asha"
    email = "asha@test.com"
    role = 'rider'
    feedback_text = "Smooth ride"
    rating = 5
    issue = "none"


# Fixtures for test data
@pytest.fixture
def rider(db_session):
    return UserFactory()


@pytest.fixture
def driver(db_session):
    return DriverFactory()


@pytest.fixture
def ride_request(db_session):
    return RideRequestFactory()


def ride_request_payload(**overrides):
    payload = {
        'rider_name': 'Asha',
        'gender': 'female',
        'pickup_location': 'MG Road',
        'destination_location': 'Indiranagar',
        'contact': '9845012345',
        'push_token': VALID_PUSH_TOKEN,
    }
    payload.update(overrides)
    return payload


def ride_payload(**overrides):
    payload = {
        'driver_name': 'ravi',
        'vehicle_info': 'Maruti Swift Dzire KA01AB1234',
        'origin': 'Koramangala',
        'destination': 'Whitefield',
        'available_seats': 3,
        'ride_date': (get_local_today() + timedelta(days=1)).isoformat(),
        'ride_time': '09:30',
    }
    payload.update(overrides)
    return payload
