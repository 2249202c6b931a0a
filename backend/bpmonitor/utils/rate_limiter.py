"""
Persistent DB-backed rate limiting for the sign-up and login endpoints.
"""
from datetime import datetime, timedelta
from functools import wraps
from flask import request, jsonify, current_app


class DBRateLimiter:
    """Counts attempts per client key within a sliding window."""

    def __init__(self, max_attempts=5, window_seconds=60, endpoint_name='default'):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self.endpoint_name = endpoint_name

    def is_limited(self, key):
        from bpmonitor.models.rate_limit_entry import RateLimitEntry
        cutoff = datetime.utcnow() - timedelta(seconds=self.window_seconds)
        return RateLimitEntry.count_since(key, self.endpoint_name, cutoff) >= self.max_attempts

    def record(self, key):
        from bpmonitor import db
        from bpmonitor.models.rate_limit_entry import RateLimitEntry
        db.session.add(RateLimitEntry(
            key=key,
            endpoint=self.endpoint_name,
            timestamp=datetime.utcnow(),
        ))
        db.session.commit()


# 5 login attempts per minute per IP
login_limiter = DBRateLimiter(max_attempts=5, window_seconds=60, endpoint_name='login')

# 3 sign-ups per minute per IP
signup_limiter = DBRateLimiter(max_attempts=3, window_seconds=60, endpoint_name='sign_up')


def rate_limit(limiter):
    """Decorator factory to rate-limit an endpoint by client IP.

    Disabled when the app sets RATE_LIMIT_ENABLED to False.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if not current_app.config.get('RATE_LIMIT_ENABLED', True):
                return f(*args, **kwargs)
            client_ip = request.remote_addr or 'unknown'
            if limiter.is_limited(client_ip):
                return jsonify({'error': 'Too many requests. Try again later.'}), 429
            limiter.record(client_ip)
            return f(*args, **kwargs)
        return wrapper
    return decorator
