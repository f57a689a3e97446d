"""
Service Layer Architecture

Business logic behind the ride-sharing API. Route handlers stay thin and
delegate here. Services provide:

1. **Transaction Management**: Multi-statement operations commit or roll back together
2. **Validation**: Input checks raising typed errors mapped to HTTP statuses
3. **Testability**: Business logic can be exercised without HTTP

Services Architecture:
- **RideService**: Ride offers, ride requests, accept and complete workflow
- **UserService**: Login, profile and UPI updates
- **FeedbackService**: Feedback submission
- **NotificationService**: Expo push notifications
- **FileService**: Profile picture uploads
- **AuditService**: Audit trail of state transitions
"""

from .ride_service import RideService
from .user_service import UserService
from .feedback_service import FeedbackService
from .file_service import FileService
from .notification_service import NotificationService
from .audit_service import AuditService
from .transaction_helper import TransactionHelper

__all__ = [
    'RideService',
    'UserService',
    'FeedbackService',
    'FileService',
    'NotificationService',
    'AuditService',
    'TransactionHelper'
]
