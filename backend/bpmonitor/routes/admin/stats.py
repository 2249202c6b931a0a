"""Admin stats routes."""
from datetime import datetime
from flask import jsonify
from sqlalchemy import func
from bpmonitor import db
from bpmonitor.models import User, Role, BloodPressureReading, CareAssignment
from bpmonitor.utils.auth import token_required
from bpmonitor.utils.audit_logger import audit_log
from . import admin_bp, admin_required


@admin_bp.route('/stats', methods=['GET'])
@token_required
@admin_required
def get_stats():
    """Aggregate system statistics."""
    by_role = dict(
        db.session.query(User.role, func.count(User.id)).group_by(User.role).all()
    )
    by_status = dict(
        db.session.query(User.status, func.count(User.id)).group_by(User.status).all()
    )

    today_start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    readings_today = BloodPressureReading.query.filter(
        BloodPressureReading.recorded_at >= today_start
    ).count()

    audit_log('READ', 'admin_stats', details={'action': 'view_stats'})

    return jsonify({
        'total_users': sum(by_role.values()),
        'users_by_role': {role.value: by_role.get(role, 0) for role in Role},
        'pending_approvals': by_status.get('pending_approval', 0),
        'inactive_users': by_status.get('inactive', 0),
        'total_readings': BloodPressureReading.query.count(),
        'readings_today': readings_today,
        'active_assignments': CareAssignment.query.filter_by(is_active=True).count(),
    }), 200
