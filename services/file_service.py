"""
File Service

Stores uploaded profile pictures under UPLOAD_FOLDER with secure, unique
names and returns the relative path saved on the user row.
"""

from typing import Optional
import logging
import os
import uuid
from werkzeug.utils import secure_filename
from flask import current_app
from .errors import ValidationError

logger = logging.getLogger(__name__)

class FileService:
    """Service class for file management operations"""

    ALLOWED_EXTENSIONS = {'png', 'jpg', 'jpeg', 'gif', 'webp'}

    def allowed_file(self, filename: str) -> bool:
        """Check if file extension is allowed."""
        return '.' in filename and \
               filename.rsplit('.', 1)[1].lower() in self.ALLOWED_EXTENSIONS

    def save_profile_picture(self, file, user_id: int) -> Optional[str]:
        """
        Save an uploaded profile picture.

        Args:
            file: Flask uploaded file object
            user_id: Owner of the picture, used in the stored name

        Returns:
            Relative path such as 'uploads/user_3_ab12cd34.jpg', or None
            when no file was sent
        """
        if not file or not file.filename:
            return None

        filename = secure_filename(file.filename)
        if not self.allowed_file(filename):
            raise ValidationError(
                f"File type not allowed. Allowed types: {', '.join(sorted(self.ALLOWED_EXTENSIONS))}")

        extension = filename.rsplit('.', 1)[1].lower()
        stored_name = f"user_{user_id}_{uuid.uuid4().hex[:8]}.{extension}"

        upload_folder = current_app.config['UPLOAD_FOLDER']
        os.makedirs(upload_folder, exist_ok=True)
        file.save(os.path.join(upload_folder, stored_name))

        logger.info(f"Profile picture saved for user {user_id}: {stored_name}")
        return f"uploads/{stored_name}"

    def delete_profile_picture(self, relative_path: Optional[str]) -> bool:
        """Remove a picture stored by save_profile_picture"""
        if not relative_path:
            return False

        file_path = os.path.join(current_app.config['UPLOAD_FOLDER'], os.path.basename(relative_path))
        try:
            if os.path.exists(file_path):
                os.remove(file_path)
                logger.info(f"Profile picture deleted: {relative_path}")
                return True
        except OSError as e:
            logger.error(f"Error deleting profile picture {relative_path}: {str(e)}")
        return False
