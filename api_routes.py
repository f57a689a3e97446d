"""
Ride Share API Module
JSON endpoints used by the rider and driver mobile app
"""

from flask import Blueprint, request, jsonify
import logging

from services import RideService, UserService, FeedbackService
from services.errors import ValidationError

logger = logging.getLogger(__name__)

api_bp = Blueprint('api', __name__, url_prefix='/api')


def get_json_body():
    """JSON object body, or {} when none was sent"""
    body = request.get_json(silent=True)
    if body is None:
        return {}
    if not isinstance(body, dict):
        raise ValidationError("Request body must be a JSON object")
    return body


# Users

@api_bp.route('/login', methods=['GET'])
def login():
    """Log in with email and password sent as query parameters"""
    user = UserService().authenticate(request.args.get('email'), request.args.get('password'))
    return jsonify({'user': user.to_dict()})

@api_bp.route('/users/<int:user_id>', methods=['GET'])
def get_user(user_id):
    return jsonify(UserService().get_user(user_id).to_dict())

@api_bp.route('/users/<int:user_id>', methods=['PUT'])
def update_user(user_id):
    """Update profile from a multipart form (email, mobile, gender, upi_id, profilePicture)"""
    form = request.form.to_dict() if request.form else get_json_body()
    picture = request.files.get('profilePicture')

    user = UserService().update_profile(user_id, form, picture)
    return jsonify({'message': 'Profile updated successfully', 'user': user.to_dict()})

@api_bp.route('/users/<int:user_id>/upi', methods=['PUT'])
def update_upi(user_id):
    user = UserService().update_upi(user_id, get_json_body().get('upi_id'))
    return jsonify({'message': 'UPI ID updated successfully', 'upi_id': user.upi_id})


# Rides

@api_bp.route('/rides', methods=['POST'])
def post_ride():
    ride = RideService().post_ride(get_json_body())
    return jsonify({'message': 'Ride added successfully', 'rideId': ride.id}), 201

@api_bp.route('/rides', methods=['GET'])
def list_rides():
    """All upcoming rides; rides whose schedule has passed are removed first"""
    rides = RideService().list_active_rides()
    return jsonify([ride.to_dict() for ride in rides])


# Ride requests

@api_bp.route('/ride-requests', methods=['POST'])
def create_ride_request():
    ride_request = RideService().create_ride_request(get_json_body())
    return jsonify({
        'message': 'Ride request created successfully',
        'requestId': ride_request.id
    }), 201

@api_bp.route('/ride-requests', methods=['GET'])
def list_ride_requests():
    ride_requests = RideService().list_ride_requests(request.args.get('status'))
    return jsonify([ride_request.to_dict() for ride_request in ride_requests])

@api_bp.route('/ride-requests/<int:request_id>/accept', methods=['POST'])
@api_bp.route('/ride-requests/<int:request_id>/accept/<driver_name>', methods=['POST'])
def accept_ride_request(request_id, driver_name=None):
    driver_name = driver_name or get_json_body().get('driver_name')

    result = RideService().accept_ride_request(request_id, driver_name)
    message = ('Ride accepted and notification sent' if result['notification_sent']
               else 'Ride accepted, rider could not be notified')
    return jsonify({
        'message': message,
        'progressId': result['progress_id'],
        'notificationSent': result['notification_sent']
    })

@api_bp.route('/ride-requests/status', methods=['GET'])
def ride_request_status():
    status = RideService().get_ride_request_status(request.args.get('requestId'))
    return jsonify({'status': status})

@api_bp.route('/ride-requests/progress/<int:progress_id>', methods=['GET'])
def get_progress(progress_id):
    return jsonify(RideService().get_progress(progress_id).to_dict())

@api_bp.route('/ride-requests/progress/<driver_name>/<int:progress_id>', methods=['PUT'])
def complete_progress(driver_name, progress_id):
    """Rider reached the destination"""
    progress = RideService().complete_progress(driver_name, progress_id)
    return jsonify({'message': 'Ride marked as completed', 'progress': progress.to_dict()})


# Feedback

@api_bp.route('/submit-feedback', methods=['POST'])
def submit_feedback():
    feedback = FeedbackService().submit_feedback(get_json_body())
    return jsonify({'message': 'Feedback submitted successfully', 'feedbackId': feedback.id})
