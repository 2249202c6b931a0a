"""Admin user management routes."""
import logging
import secrets
from flask import request, jsonify, g
from sqlalchemy import func
from bpmonitor import db
from bpmonitor.models import User, Role, BloodPressureReading, USER_STATUS_CHOICES
from bpmonitor.utils.auth import token_required
from bpmonitor.utils.audit_logger import audit_log
from bpmonitor.utils.validators import (
    validate_sign_up, validate_profile_update, MIN_PASSWORD_LENGTH,
)
from . import admin_bp, admin_required

logger = logging.getLogger(__name__)


def _search_users(users, search):
    """Match on decrypted name and email; the columns themselves are ciphertext."""
    q = search.lower()
    matched = []
    for u in users:
        try:
            name = (u.full_name or '').lower()
            email = (u.email or '').lower()
        except Exception:
            logger.error('Decryption error while searching user_id=%s', u.id, exc_info=True)
            continue
        if q in name or q in email:
            matched.append(u)
    return matched


@admin_bp.route('/users', methods=['GET'])
@token_required
@admin_required
def list_users():
    """List users with role/status filters, name search and pagination."""
    limit = max(1, min(request.args.get('limit', 50, type=int), 200))
    offset = max(request.args.get('offset', 0, type=int), 0)
    role_filter = request.args.get('role', '').strip()
    status_filter = request.args.get('status', '').strip()
    search_query = request.args.get('search', '').strip()

    query = User.query
    if role_filter and role_filter != 'all':
        role = Role.parse(role_filter)
        if role is None:
            return jsonify({'error': f'Invalid role: {role_filter}'}), 400
        query = query.filter(User.role == role)
    if status_filter:
        if status_filter not in USER_STATUS_CHOICES:
            return jsonify({'error': f'Invalid status: {status_filter}'}), 400
        query = query.filter(User.status == status_filter)
    query = query.order_by(User.created_at.desc())

    if search_query:
        matched = _search_users(query.all(), search_query)
        total_count = len(matched)
        page = matched[offset:offset + limit]
    else:
        total_count = query.count()
        page = query.offset(offset).limit(limit).all()

    ids = [u.id for u in page]
    counts = dict(
        db.session.query(BloodPressureReading.patient_id, func.count(BloodPressureReading.id))
        .filter(BloodPressureReading.patient_id.in_(ids))
        .group_by(BloodPressureReading.patient_id)
        .all()
    ) if ids else {}

    users_data = []
    for u in page:
        d = u.to_dict(include_phi=True)
        d['reading_count'] = counts.get(u.id, 0)
        users_data.append(d)

    audit_log('READ', 'user_list', details={
        'count': len(page),
        'filter_role': role_filter or None,
        'search': bool(search_query),
    })

    return jsonify({
        'users': users_data,
        'total_count': total_count,
    }), 200


@admin_bp.route('/users', methods=['POST'])
@token_required
@admin_required
def create_user():
    """Create an active account of any role. Without a password a temporary
    one is generated and returned once."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    temporary_password = None
    if not data.get('password'):
        temporary_password = secrets.token_urlsafe(12)
        data = {**data, 'password': temporary_password}

    errors = validate_sign_up(data)
    if errors:
        return jsonify({'error': errors}), 400

    email = data['email'].strip().lower()
    if User.find_by_email(email):
        return jsonify({'error': 'A user with this email already exists'}), 409

    user = User()
    user.email = email
    user.set_password(data['password'])
    user.role = Role.parse(data.get('role') or 'patient')
    user.status = 'active'
    user.apply_profile(data)

    db.session.add(user)
    try:
        db.session.flush()
        audit_log('CREATE', 'user', resource_id=str(user.id),
                  details={'action': 'admin_create', 'role': user.role.value})
        db.session.commit()
    except Exception:
        db.session.rollback()
        logger.exception('Admin user creation failed')
        return jsonify({'error': 'User creation failed. Please try again.'}), 500

    body = {'user': user.to_dict(include_phi=True)}
    if temporary_password:
        body['temporary_password'] = temporary_password
    return jsonify(body), 201


@admin_bp.route('/users/<int:user_id>', methods=['PUT'])
@token_required
@admin_required
def update_user(user_id):
    """Edit a user's profile, role or status."""
    user = db.session.get(User, user_id)
    if not user:
        return jsonify({'error': 'User not found'}), 404

    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_profile_update(data, allow_admin_fields=True)
    if errors:
        return jsonify({'error': errors}), 400

    if user.id == g.user_id and (
        data.get('role', Role.ADMIN.value) != Role.ADMIN.value
        or data.get('status', 'active') != 'active'
    ):
        return jsonify({'error': 'Admins cannot demote or deactivate themselves'}), 400

    if 'password' in data and len(data['password'] or '') < MIN_PASSWORD_LENGTH:
        return jsonify({'error': [f'Password must be at least {MIN_PASSWORD_LENGTH} characters']}), 400

    changes = {}
    if 'role' in data and data['role'] != user.role.value:
        changes['role'] = {'old': user.role.value, 'new': data['role']}
        user.role = Role(data['role'])
    if 'status' in data and data['status'] != user.status:
        changes['status'] = {'old': user.status, 'new': data['status']}
        user.status = data['status']
    for key in user.apply_profile(data):
        changes[key] = {'updated': True}
    if data.get('password'):
        user.set_password(data['password'])
        changes['password'] = {'updated': True}

    db.session.commit()

    audit_log('UPDATE', 'user', resource_id=str(user_id),
              details={'action': 'admin_update', 'changes': changes})

    return jsonify(user.to_dict(include_phi=True)), 200
