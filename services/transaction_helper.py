"""
Transaction Helper Service

Wraps multi-statement service operations in a single database transaction:
- Commit on success, rollback on any failure
- Retry with backoff for dropped connections only
"""

from functools import wraps
from typing import Callable
import logging
import time
from sqlalchemy.exc import OperationalError, DisconnectionError
from app import db

logger = logging.getLogger(__name__)

class TransactionHelper:
    """Helper class for managing database transactions safely"""

    @staticmethod
    def with_transaction(func: Callable = None, *, max_retries: int = 3, backoff: float = 0.5) -> Callable:
        """
        Decorator that wraps a function in a database transaction.

        Usage:
            @TransactionHelper.with_transaction
            def accept_ride_request(self, request_id, driver_name):
                # Your database operations here
                ...

        Service errors and any other exception roll back and propagate
        immediately. Connection-level errors (OperationalError,
        DisconnectionError) are retried with exponential backoff, since
        the whole unit of work is replayed from the start.
        """
        def decorator(inner: Callable) -> Callable:
            @wraps(inner)
            def wrapper(*args, **kwargs):
                for attempt in range(max_retries):
                    try:
                        result = inner(*args, **kwargs)
                        db.session.commit()
                        return result
                    except (OperationalError, DisconnectionError) as e:
                        db.session.rollback()
                        if attempt < max_retries - 1:
                            sleep_time = backoff * (2 ** attempt)
                            logger.warning(f"Database connection error in {inner.__name__} "
                                           f"(attempt {attempt + 1}/{max_retries}): {str(e)}. "
                                           f"Retrying in {sleep_time}s...")
                            time.sleep(sleep_time)
                            continue
                        logger.error(f"Transaction {inner.__name__} failed after {max_retries} attempts: {str(e)}")
                        raise
                    except Exception:
                        db.session.rollback()
                        raise
                return None
            return wrapper

        if func is not None:
            return decorator(func)
        return decorator

