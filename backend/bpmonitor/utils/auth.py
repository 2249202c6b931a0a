"""
Authentication utilities: JWT access tokens and role checks.
"""
import os
import secrets
import jwt
from datetime import datetime, timedelta
from functools import wraps
from flask import request, jsonify, g


def _jwt_secret():
    secret = os.getenv('JWT_SECRET_KEY')
    if not secret:
        raise RuntimeError('JWT_SECRET_KEY environment variable is required')
    return secret


def generate_access_token(user) -> str:
    """
    Generate an access token for a user.
    Lifetime is JWT_ACCESS_TOKEN_EXPIRES seconds (default 1 hour).
    """
    expires = int(os.getenv('JWT_ACCESS_TOKEN_EXPIRES', 3600))
    now = datetime.utcnow()
    payload = {
        'user_id': user.id,
        'role': user.role.value,
        'jti': secrets.token_hex(16),
        'exp': now + timedelta(seconds=expires),
        'iat': now,
    }
    return jwt.encode(payload, _jwt_secret(), algorithm='HS256')


def decode_token(token: str) -> dict:
    """Decode and validate a JWT token. Returns None if invalid or expired."""
    try:
        return jwt.decode(token, _jwt_secret(), algorithms=['HS256'])
    except jwt.ExpiredSignatureError:
        return None
    except jwt.InvalidTokenError:
        return None


def token_required(f):
    """Decorator to require a valid bearer token.

    Also checks that the token has not been revoked and that the account is
    still active. The role is read from the user row, not the token, so a
    role change takes effect immediately.
    """
    @wraps(f)
    def wrapper(*args, **kwargs):
        auth_header = request.headers.get('Authorization')
        if not auth_header:
            return jsonify({'error': 'Missing authorization header'}), 401

        parts = auth_header.split()
        if len(parts) != 2 or parts[0].lower() != 'bearer':
            return jsonify({'error': 'Invalid authorization header format'}), 401

        payload = decode_token(parts[1])
        if not payload:
            return jsonify({'error': 'Invalid or expired token'}), 401

        jti = payload.get('jti')

        from bpmonitor import db
        from bpmonitor.models import RevokedToken, User
        if RevokedToken.is_token_revoked(jti):
            return jsonify({'error': 'Token has been revoked'}), 401

        user = db.session.get(User, payload.get('user_id'))
        if not user or not user.is_active:
            return jsonify({'error': 'Account is not active'}), 401

        g.user = user
        g.user_id = user.id
        g.role = user.role
        g.token_jti = jti
        g.token_exp = payload.get('exp')

        return f(*args, **kwargs)
    return wrapper


def role_required(*roles):
    """Decorator (after token_required) restricting a route to some roles."""
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            if g.role not in roles:
                return jsonify({'error': 'Insufficient permissions'}), 403
            return f(*args, **kwargs)
        return wrapper
    return decorator
