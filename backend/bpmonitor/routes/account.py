"""
Account API routes: sign-up, login, logout and the caller's own profile.
"""
import logging
from datetime import datetime, timezone
from flask import Blueprint, request, jsonify, g
from bpmonitor import db
from bpmonitor.models import User, Role, RevokedToken
from bpmonitor.utils.auth import generate_access_token, token_required
from bpmonitor.utils.audit_logger import audit_log, audit_phi_access
from bpmonitor.utils.encryption import hash_email
from bpmonitor.utils.validators import validate_sign_up, validate_profile_update, MIN_PASSWORD_LENGTH
from bpmonitor.utils.rate_limiter import rate_limit, login_limiter, signup_limiter

logger = logging.getLogger(__name__)

account_bp = Blueprint('account', __name__)


@account_bp.route('/sign-up', methods=['POST'])
@rate_limit(signup_limiter)
def sign_up():
    """Create an account. Staff roles wait for admin approval."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_sign_up(data)
    if errors:
        return jsonify({'error': errors}), 400

    email = data['email'].strip().lower()
    if User.find_by_email(email):
        return jsonify({'error': 'A user with this email already exists'}), 409

    role = Role.parse(data.get('role') or 'patient')

    user = User()
    user.email = email
    user.set_password(data['password'])
    user.role = role
    user.status = 'active' if role is Role.PATIENT else 'pending_approval'
    user.apply_profile(data)

    db.session.add(user)
    try:
        db.session.flush()
        audit_log('CREATE', 'user', resource_id=str(user.id),
                  details={'action': 'sign_up', 'requested_role': role.value},
                  user_id=str(user.id))
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception('Sign-up failed')
        return jsonify({'error': 'Sign-up failed. Please try again.'}), 500

    body = {
        'user': user.to_dict(include_phi=True),
        'requires_approval': not user.is_active,
    }
    if user.is_active:
        body['token'] = generate_access_token(user)
    return jsonify(body), 201


@account_bp.route('/login', methods=['POST'])
@rate_limit(login_limiter)
def login():
    """Password login. Returns a bearer token for active accounts."""
    data = request.get_json(silent=True)
    if not data or not data.get('email') or not data.get('password'):
        return jsonify({'error': 'Email and password are required'}), 400

    email = data['email'].strip().lower()
    user = User.find_by_email(email)

    if not user or not user.check_password(data['password']):
        audit_log('LOGIN_FAILED', 'user',
                  details={'reason': 'bad_credentials', 'email_hash': hash_email(email)})
        return jsonify({'error': 'Invalid email or password'}), 401

    if user.status == 'pending_approval':
        audit_log('LOGIN_FAILED', 'user', resource_id=str(user.id),
                  details={'reason': 'pending_approval'}, user_id=str(user.id))
        return jsonify({'error': 'Account is pending administrator approval'}), 403

    if not user.is_active:
        audit_log('LOGIN_FAILED', 'user', resource_id=str(user.id),
                  details={'reason': 'inactive'}, user_id=str(user.id))
        return jsonify({'error': 'Account is inactive'}), 403

    token = generate_access_token(user)
    audit_log('LOGIN', 'user', resource_id=str(user.id),
              details={'role': user.role.value}, user_id=str(user.id))

    return jsonify({
        'token': token,
        'user': user.to_dict(include_phi=True),
    }), 200


@account_bp.route('/logout', methods=['POST'])
@token_required
def logout():
    """Revoke the presented token."""
    expires_at = datetime.fromtimestamp(g.token_exp, tz=timezone.utc).replace(tzinfo=None)
    db.session.add(RevokedToken(jti=g.token_jti, user_id=g.user_id, expires_at=expires_at))
    db.session.commit()

    audit_log('LOGOUT', 'user', resource_id=str(g.user_id))

    return jsonify({'message': 'Successfully logged out'}), 200


@account_bp.route('/profile', methods=['GET'])
@token_required
@audit_phi_access('READ', 'user')
def get_profile():
    return jsonify(g.user.to_dict(include_phi=True)), 200


@account_bp.route('/profile', methods=['PUT'])
@token_required
def update_profile():
    """Update the caller's profile. Email, role and status are not editable here."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_profile_update(data)
    if errors:
        return jsonify({'error': errors}), 400

    if 'password' in data and len(data['password'] or '') < MIN_PASSWORD_LENGTH:
        return jsonify({'error': [f'Password must be at least {MIN_PASSWORD_LENGTH} characters']}), 400

    user = g.user
    changed = user.apply_profile(data)
    if 'password' in data:
        user.set_password(data['password'])
        changed.append('password')

    db.session.commit()

    audit_log('UPDATE', 'user', resource_id=str(user.id),
              details={'action': 'profile_update', 'fields_changed': changed})

    return jsonify(user.to_dict(include_phi=True)), 200
