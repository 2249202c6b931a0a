"""
Analytics routes: insight summary, daily trend series, category
distribution and the per-patient PDF report.

Every response is computed fresh from the readings visible to the caller.
"""
import logging
from datetime import datetime, timedelta, timezone
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError
from flask import Blueprint, request, jsonify, g, Response
from bpmonitor import db
from bpmonitor.analytics import (
    compute_insights, build_trend_series, category_distribution, TREND_WINDOWS,
)
from bpmonitor.models import User, Role, BloodPressureReading
from bpmonitor.utils.access import readings_query, can_access_patient
from bpmonitor.utils.auth import token_required
from bpmonitor.utils.audit_logger import audit_log
from bpmonitor.utils.export import generate_patient_report_pdf

logger = logging.getLogger(__name__)

analytics_bp = Blueprint('analytics', __name__)

MAX_DAYS = 365


class AnalyticsRequestError(ValueError):
    pass


def _days_arg(default):
    raw = request.args.get('days', '').strip()
    try:
        days = int(raw) if raw else default
    except ValueError:
        raise AnalyticsRequestError('days must be an integer')
    if days < 1 or days > MAX_DAYS:
        raise AnalyticsRequestError(f'days must be between 1 and {MAX_DAYS}')
    return days


def _window_readings(days, patient_id=None):
    """Visible readings from the last `days` days, oldest first."""
    cutoff = datetime.utcnow() - timedelta(days=days)
    return (readings_query(g.user, patient_id)
            .filter(BloodPressureReading.recorded_at >= cutoff)
            .order_by(BloodPressureReading.recorded_at.asc())
            .all())


def _scope():
    """patient_id from the query string; patients are always themselves."""
    patient_id = request.args.get('patient_id', type=int)
    if g.role is Role.PATIENT:
        patient_id = g.user_id
    return patient_id


@analytics_bp.errorhandler(AnalyticsRequestError)
def handle_bad_request(e):
    return jsonify({'error': str(e)}), 400


@analytics_bp.errorhandler(PermissionError)
def handle_forbidden(e):
    logger.warning(f'Analytics access denied: {e}')
    return jsonify({'error': 'Not allowed to view this patient'}), 403


@analytics_bp.route('/insights', methods=['GET'])
@token_required
def get_insights():
    days = _days_arg(90)
    patient_id = _scope()
    summary = compute_insights(_window_readings(days, patient_id))

    audit_log('READ', 'insights', resource_id=str(patient_id) if patient_id else None,
              details={'days': days, 'total_readings': summary.total_readings})

    return jsonify({
        'patient_id': patient_id,
        'days': days,
        'insights': summary.to_dict(),
    }), 200


@analytics_bp.route('/trends', methods=['GET'])
@token_required
def get_trends():
    days = _days_arg(30)
    patient_id = _scope()

    tz_name = request.args.get('tz', '').strip()
    try:
        tz = ZoneInfo(tz_name) if tz_name else timezone.utc
    except (ZoneInfoNotFoundError, ValueError):
        raise AnalyticsRequestError(f'Unknown time zone: {tz_name}')

    series = build_trend_series(_window_readings(days, patient_id), days,
                                now=datetime.now(timezone.utc), tz=tz)

    audit_log('READ', 'trends', resource_id=str(patient_id) if patient_id else None,
              details={'days': days, 'points': len(series)})

    return jsonify({
        'patient_id': patient_id,
        'days': days,
        'timezone': tz_name or 'UTC',
        'windows': list(TREND_WINDOWS),
        'series': [point.to_dict() for point in series],
        'has_pulse': any(point.pulse is not None for point in series),
    }), 200


@analytics_bp.route('/distribution', methods=['GET'])
@token_required
def get_distribution():
    days = _days_arg(90)
    patient_id = _scope()
    readings = _window_readings(days, patient_id)
    shares = category_distribution(readings)

    audit_log('READ', 'distribution', resource_id=str(patient_id) if patient_id else None,
              details={'days': days, 'total_readings': len(readings)})

    return jsonify({
        'patient_id': patient_id,
        'days': days,
        'total_readings': len(readings),
        'distribution': [share.to_dict() for share in shares],
    }), 200


@analytics_bp.route('/patients/<int:patient_id>/report.pdf', methods=['GET'])
@token_required
def patient_report(patient_id):
    """PDF report of one patient's readings and insights."""
    days = _days_arg(90)

    patient = db.session.get(User, patient_id)
    if not patient or patient.role is not Role.PATIENT:
        return jsonify({'error': 'Patient not found'}), 404
    if g.role is Role.PATIENT and patient_id != g.user_id:
        raise PermissionError(f'patient {g.user_id} requested report for {patient_id}')
    if not can_access_patient(g.user, patient_id):
        raise PermissionError(f'user {g.user_id} may not access patient {patient_id}')

    readings = _window_readings(days, patient_id)
    insights = compute_insights(readings)
    pdf = generate_patient_report_pdf(patient, list(reversed(readings)), insights, days=days)

    audit_log('EXPORT', 'patient_report_pdf', resource_id=str(patient_id),
              details={'days': days, 'readings': len(readings)})

    stamp = datetime.now(timezone.utc).strftime('%Y%m%d')
    return Response(
        pdf.getvalue(),
        mimetype='application/pdf',
        headers={'Content-Disposition': f'attachment; filename=bp_report_{patient_id}_{stamp}.pdf'}
    )
