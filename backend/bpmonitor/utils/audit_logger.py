"""
HIPAA-style audit logging.
Every access to patient data is logged with timestamp, user, action and
resource as one JSON line.
"""
import os
import logging
import structlog
from datetime import datetime, timezone
from flask import request, g, has_request_context
from functools import wraps


def setup_audit_logging(app):
    """Configure structured audit logging to AUDIT_LOG_FILE."""

    log_file = app.config.get('AUDIT_LOG_FILE') or os.getenv('AUDIT_LOG_FILE', 'logs/audit.log')
    log_dir = os.path.dirname(log_file)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer()
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    audit_logger = logging.getLogger('audit')
    audit_logger.setLevel(logging.INFO)

    # One file handler per log file, even when several apps are created
    target = os.path.abspath(log_file)
    if not any(isinstance(h, logging.FileHandler) and h.baseFilename == target
               for h in audit_logger.handlers):
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        audit_logger.addHandler(file_handler)

    app.config['AUDIT_LOGGER'] = structlog.get_logger('audit')


def get_audit_logger():
    from flask import current_app
    return current_app.config.get('AUDIT_LOGGER', structlog.get_logger('audit'))


def audit_log(action: str, resource_type: str, resource_id: str = None,
              details: dict = None, user_id: str = None):
    """
    Log an audit event.

    Args:
        action: CREATE, READ, UPDATE, DELETE, LOGIN, LOGIN_FAILED, EXPORT, ...
        resource_type: reading, user, insights, care_assignment, ...
        resource_id: ID of the specific resource (optional)
        details: Additional details about the action (optional)
        user_id: Acting user (defaults to g.user_id, else 'anonymous')
    """
    logger = get_audit_logger()

    if user_id is None:
        user_id = getattr(g, 'user_id', 'anonymous')

    if has_request_context():
        client_ip = request.remote_addr or 'unknown'
        user_agent = request.headers.get('User-Agent', 'unknown')
    else:
        client_ip = user_agent = 'unknown'

    logger.info(
        "audit_event",
        timestamp=datetime.now(timezone.utc).isoformat(),
        action=action,
        resource_type=resource_type,
        resource_id=resource_id,
        user_id=user_id,
        role=getattr(getattr(g, 'role', None), 'value', None),
        client_ip=client_ip,
        user_agent=user_agent,
        details=details or {},
    )


def audit_phi_access(action: str, resource_type: str):
    """Decorator that logs PHI access for a route before running it."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            resource_id = (kwargs.get('reading_id') or kwargs.get('patient_id')
                           or kwargs.get('user_id'))
            audit_log(action, resource_type, resource_id=str(resource_id) if resource_id else None)
            return f(*args, **kwargs)
        return wrapper
    return decorator
