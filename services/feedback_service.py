import logging
from typing import Dict, Any
from models import db, Feedback
from .errors import ValidationError, require_fields, require_text
from .transaction_helper import TransactionHelper

logger = logging.getLogger(__name__)

FEEDBACK_FIELDS = ('name', 'email', 'role', 'feedback_text', 'rating', 'issue')


class FeedbackService:
    """Stores rider and driver feedback. Entries are immutable."""

    @TransactionHelper.with_transaction
    def submit_feedback(self, data: Dict[str, Any]) -> Feedback:
        fields = require_fields(data, FEEDBACK_FIELDS)
        require_text(fields, ('name', 'email', 'role', 'feedback_text', 'issue'))

        try:
            rating = int(fields['rating'])
        except (TypeError, ValueError):
            raise ValidationError("rating must be a number between 1 and 5")
        if not 1 <= rating <= 5:
            raise ValidationError("rating must be a number between 1 and 5")

        feedback = Feedback(**fields)
        feedback.rating = rating
        db.session.add(feedback)
        db.session.flush()

        logger.info(f"Feedback {feedback.id} submitted by {feedback.role} (rating {rating})")
        return feedback
