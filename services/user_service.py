"""
User Service

Login, profile reads and profile/UPI updates. Registration happens outside
the HTTP API (see database_commands.py create-user).
"""

from typing import Optional, Dict, Any
import logging
from werkzeug.security import generate_password_hash, check_password_hash
from models import db, User, UserRole
from .audit_service import AuditService
from .errors import ValidationError, NotFoundError, require_fields, require_text
from .file_service import FileService
from .transaction_helper import TransactionHelper

logger = logging.getLogger(__name__)

class UserService:
    """Service class for user accounts and payment details"""

    def __init__(self):
        self.audit_service = AuditService()
        self.file_service = FileService()

    def authenticate(self, email: Optional[str], password: Optional[str]) -> User:
        require_fields({'email': email, 'password': password}, ('email', 'password'))

        user = User.query.filter_by(email=email.strip().lower()).first()
        if not user:
            raise ValidationError("User not found")

        if not check_password_hash(user.password_hash, password):
            logger.warning(f"Failed login attempt for user {user.id}")
            raise ValidationError("Invalid credentials")

        logger.info(f"User {user.id} logged in")
        return user

    def get_user(self, user_id: int) -> User:
        user = db.session.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    @TransactionHelper.with_transaction
    def create_user(self, username: str, email: str, password: str,
                    role: str = UserRole.RIDER.value, **profile) -> User:
        require_fields({'username': username, 'email': email, 'password': password},
                       ('username', 'email', 'password'))
        if role not in {r.value for r in UserRole}:
            raise ValidationError("role must be rider or driver")

        email = email.strip().lower()
        if User.query.filter_by(email=email).first():
            raise ValidationError("A user with this email already exists")

        user = User()
        user.username = username
        user.email = email
        user.password_hash = generate_password_hash(password)
        user.role = role
        user.phone_number = profile.get('phone_number')
        user.gender = profile.get('gender')
        user.upi_id = profile.get('upi_id')

        db.session.add(user)
        db.session.flush()
        logger.info(f"User {user.id} created ({role})")
        return user

    PROFILE_FIELDS = ('email', 'mobile', 'gender', 'upi_id')

    def update_profile(self, user_id: int, form: Dict[str, Any], picture=None) -> User:
        """
        Overwrite profile fields that are present in the form.

        Form keys follow the mobile client: email, mobile, gender, upi_id.
        A new picture is stored before the update and removed again if the
        update does not commit.
        """
        require_text(form, self.PROFILE_FIELDS)
        self.get_user(user_id)

        picture_path = self.file_service.save_profile_picture(picture, user_id)
        try:
            return self._apply_profile(user_id, form, picture_path)
        except Exception:
            if picture_path:
                self.file_service.delete_profile_picture(picture_path)
            raise

    @TransactionHelper.with_transaction
    def _apply_profile(self, user_id: int, form: Dict[str, Any], picture_path: Optional[str]) -> User:
        user = self.get_user(user_id)
        changed = []

        if form.get('email'):
            email = form['email'].strip().lower()
            if email != user.email and User.query.filter_by(email=email).first():
                raise ValidationError("A user with this email already exists")
            user.email = email
            changed.append('email')
        if form.get('mobile'):
            user.phone_number = form['mobile']
            changed.append('phone_number')
        if form.get('gender'):
            user.gender = form['gender']
            changed.append('gender')
        if form.get('upi_id'):
            user.upi_id = form['upi_id']
            changed.append('upi_id')
        if picture_path:
            user.profile_picture = picture_path
            changed.append('profile_picture')

        self.audit_service.log_action(
            action='update_profile',
            entity_type='user',
            entity_id=user.id,
            details={'fields': changed},
            actor=user.username,
        )
        return user

    @TransactionHelper.with_transaction
    def update_upi(self, user_id: int, upi_id: Optional[str]) -> User:
        if not upi_id:
            raise ValidationError("UPI ID is required")
        require_text({'upi_id': upi_id}, ('upi_id',))

        user = self.get_user(user_id)
        user.upi_id = upi_id.strip()

        self.audit_service.log_action(
            action='update_upi',
            entity_type='user',
            entity_id=user.id,
            actor=user.username,
        )
        return user
