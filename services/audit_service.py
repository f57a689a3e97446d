"""
Audit Service

Records ride and profile state transitions in the audit_logs table.
Entries join the caller's transaction and are never committed here.
"""

from typing import Optional, Dict, Any
import logging
import json
from flask import request, has_request_context
from models import db, AuditLog

logger = logging.getLogger(__name__)

class AuditService:
    """Service class for centralized audit logging"""

    @staticmethod
    def log_action(action: str,
                   entity_type: Optional[str] = None,
                   entity_id: Optional[int] = None,
                   details: Optional[Dict[str, Any]] = None,
                   actor: Optional[str] = None) -> AuditLog:
        """
        Add an audit event to the current session.

        Args:
            action: Action performed (e.g., 'accept_ride_request')
            entity_type: Type of entity affected (e.g., 'ride_request', 'progress')
            entity_id: ID of the affected entity
            details: Additional details about the action
            actor: Name of whoever triggered the action, if known
        """
        audit = AuditLog()
        audit.action = action
        audit.entity_type = entity_type
        audit.entity_id = entity_id
        audit.actor = actor
        audit.details = json.dumps(details, default=str) if details else None

        if has_request_context():
            audit.ip_address = request.remote_addr

        # Let outer transaction handle the commit
        db.session.add(audit)
        logger.debug(f"Audit logged: {action} on {entity_type}:{entity_id}")
        return audit

