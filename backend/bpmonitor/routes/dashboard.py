"""
Role dashboards. The caller's role selects one builder; each builder
returns the summary block its landing page shows.
"""
import logging
from datetime import datetime, timedelta
from flask import Blueprint, jsonify, g
from sqlalchemy import func
from bpmonitor import db
from bpmonitor.analytics import is_high_risk
from bpmonitor.analytics.averages import mean_half_up, ratio_half_up
from bpmonitor.models import User, Role, BloodPressureReading, CareAssignment
from bpmonitor.utils.auth import token_required
from bpmonitor.utils.audit_logger import audit_log

logger = logging.getLogger(__name__)

dashboard_bp = Blueprint('dashboard', __name__)

PATIENT_RECENT = 10
NURSE_RECENT = 20


def _patient_dashboard(user):
    readings = user.readings.limit(PATIENT_RECENT).all()
    week_ago = datetime.utcnow() - timedelta(days=7)
    this_week = user.readings.filter(BloodPressureReading.recorded_at >= week_ago).count()

    return {
        'total_readings': user.readings.count(),
        'this_week': this_week,
        'avg_systolic': mean_half_up([r.systolic for r in readings]),
        'avg_diastolic': mean_half_up([r.diastolic for r in readings]),
        'recent_readings': [r.to_dict() for r in readings],
    }


def _doctor_dashboard(user):
    patient_ids = CareAssignment.active_patient_ids(user.id)
    patients = User.query.filter(User.id.in_(patient_ids)).all() if patient_ids else []

    counts = dict(
        db.session.query(BloodPressureReading.patient_id, func.count(BloodPressureReading.id))
        .filter(BloodPressureReading.patient_id.in_(patient_ids))
        .group_by(BloodPressureReading.patient_id)
        .all()
    ) if patient_ids else {}

    rows = []
    for patient in patients:
        latest = patient.readings.first()
        rows.append({
            'id': patient.id,
            'name': patient.full_name,
            'reading_count': counts.get(patient.id, 0),
            'latest_reading': latest.to_dict() if latest else None,
            'high_risk': bool(latest) and is_high_risk(latest.systolic, latest.diastolic),
        })
    rows.sort(key=lambda row: (not row['high_risk'], row['name']))

    day_ago = datetime.utcnow() - timedelta(hours=24)
    recent = BloodPressureReading.query.filter(
        BloodPressureReading.patient_id.in_(patient_ids),
        BloodPressureReading.recorded_at >= day_ago,
    ).count() if patient_ids else 0

    return {
        'total_patients': len(rows),
        'high_risk_patients': sum(1 for row in rows if row['high_risk']),
        'readings_last_24h': recent,
        'patients': rows,
    }


def _nurse_dashboard(user):
    readings = (BloodPressureReading.query
                .filter_by(recorded_by=user.id)
                .order_by(BloodPressureReading.recorded_at.desc())
                .limit(NURSE_RECENT)
                .all())
    today_start = datetime.utcnow().replace(hour=0, minute=0, second=0, microsecond=0)
    names = User.display_names(r.patient_id for r in readings)

    recent = []
    for r in readings:
        rd = r.to_dict()
        rd['patient_name'] = names.get(r.patient_id, f'Patient #{r.patient_id}')
        recent.append(rd)

    return {
        'today_readings': sum(1 for r in readings if r.recorded_at >= today_start),
        'unique_patients': len({r.patient_id for r in readings}),
        'weekly_average': ratio_half_up(len(readings), 7),
        'recent_readings': recent,
    }


def _admin_dashboard(user):
    by_role = dict(
        db.session.query(User.role, func.count(User.id)).group_by(User.role).all()
    )
    return {
        'users_by_role': {role.value: by_role.get(role, 0) for role in Role},
        'total_users': sum(by_role.values()),
        'pending_approvals': User.query.filter_by(status='pending_approval').count(),
        'total_readings': BloodPressureReading.query.count(),
    }


DASHBOARD_BUILDERS = {
    Role.PATIENT: _patient_dashboard,
    Role.DOCTOR: _doctor_dashboard,
    Role.NURSE: _nurse_dashboard,
    Role.ADMIN: _admin_dashboard,
}


@dashboard_bp.route('', methods=['GET'])
@token_required
def get_dashboard():
    """Summary for the caller's role."""
    summary = DASHBOARD_BUILDERS[g.role](g.user)

    audit_log('READ', 'dashboard', details={'dashboard': g.role.value})

    return jsonify({'role': g.role.value, 'summary': summary}), 200
