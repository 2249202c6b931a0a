"""
Blood pressure reading routes: list, record, edit, delete and export.
"""
import logging
from datetime import datetime, timedelta, timezone
from flask import Blueprint, request, jsonify, g, Response
from bpmonitor import db
from bpmonitor.analytics.filters import filter_readings, PERIODS
from bpmonitor.analytics.categories import Category
from bpmonitor.models import User, Role, BloodPressureReading
from bpmonitor.utils.access import readings_query, can_access_patient
from bpmonitor.utils.auth import token_required, role_required
from bpmonitor.utils.audit_logger import audit_log, audit_phi_access
from bpmonitor.utils.export import generate_readings_csv
from bpmonitor.utils.validators import validate_reading, parse_timestamp

logger = logging.getLogger(__name__)

readings_bp = Blueprint('readings', __name__)

STAFF_ROLES = tuple(role for role in Role if role.is_staff)
DUPLICATE_WINDOW = timedelta(seconds=60)


def _filter_args():
    """Read and check list filters. Returns (filters, error)."""
    filters = {
        'search': request.args.get('search', '').strip() or None,
        'period': request.args.get('period', 'all').strip(),
        'category': request.args.get('category', 'all').strip(),
    }
    if filters['period'] not in PERIODS:
        return None, f'Invalid period. Use one of: {", ".join(PERIODS)}'
    slugs = ['all'] + [c.slug for c in Category]
    if filters['category'] not in slugs:
        return None, f'Invalid category. Use one of: {", ".join(slugs)}'
    return filters, None


def _visible_readings(filters):
    """Readings the caller may see, newest first, with the list filters applied.
    Returns (readings, patient_names); raises PermissionError."""
    patient_id = request.args.get('patient_id', type=int)
    query = readings_query(g.user, patient_id).order_by(BloodPressureReading.recorded_at.desc())
    readings = query.all()
    names = User.display_names(r.patient_id for r in readings)
    # Name search only applies where patient names are shown
    search = filters['search'] if g.role is not Role.PATIENT else None
    readings = filter_readings(readings, search=search, period=filters['period'],
                               category=filters['category'], patient_names=names)
    return readings, names


@readings_bp.route('', methods=['GET'])
@token_required
@audit_phi_access('READ', 'reading')
def list_readings():
    """Readings visible to the caller with search, period and category filters."""
    filters, error = _filter_args()
    if error:
        return jsonify({'error': error}), 400

    limit = max(1, min(request.args.get('limit', 50, type=int), 200))
    offset = max(request.args.get('offset', 0, type=int), 0)

    try:
        readings, names = _visible_readings(filters)
    except PermissionError:
        return jsonify({'error': 'Not allowed to view this patient'}), 403

    page = readings[offset:offset + limit]
    out = []
    for r in page:
        rd = r.to_dict()
        rd['patient_name'] = names.get(r.patient_id, f'Patient #{r.patient_id}')
        out.append(rd)

    return jsonify({
        'readings': out,
        'total_count': len(readings),
    }), 200


@readings_bp.route('', methods=['POST'])
@token_required
def create_reading():
    """Record a reading. Patients record for themselves; staff name the patient."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    errors = validate_reading(data)
    if errors:
        return jsonify({'error': errors}), 400

    try:
        patient_id = int(data['patient_id']) if data.get('patient_id') else None
    except (ValueError, TypeError):
        return jsonify({'error': 'patient_id must be an integer'}), 400

    if g.role is Role.PATIENT:
        if patient_id not in (None, g.user_id):
            return jsonify({'error': 'Patients can only record their own readings'}), 403
        patient_id = g.user_id
    else:
        if not patient_id:
            return jsonify({'error': 'Please select a patient'}), 400
        patient = db.session.get(User, patient_id)
        if not patient or patient.role is not Role.PATIENT:
            return jsonify({'error': 'Patient not found'}), 404
        if not can_access_patient(g.user, patient.id):
            return jsonify({'error': 'Not allowed to record for this patient'}), 403

    recorded_at = parse_timestamp(data['recorded_at']) if data.get('recorded_at') else datetime.utcnow()
    systolic = int(data['systolic'])
    diastolic = int(data['diastolic'])
    pulse = int(data['pulse']) if data.get('pulse') not in (None, '') else None

    # Deduplicate: identical reading for the same patient within 60 seconds
    duplicate = BloodPressureReading.query.filter(
        BloodPressureReading.patient_id == patient_id,
        BloodPressureReading.systolic == systolic,
        BloodPressureReading.diastolic == diastolic,
        BloodPressureReading.recorded_at.between(recorded_at - DUPLICATE_WINDOW,
                                                 recorded_at + DUPLICATE_WINDOW),
    ).first()
    if duplicate:
        return jsonify(duplicate.to_dict()), 200

    reading = BloodPressureReading(
        patient_id=patient_id,
        recorded_by=g.user_id,
        systolic=systolic,
        diastolic=diastolic,
        pulse=pulse,
        recorded_at=recorded_at,
        location=(data.get('location') or '').strip() or None,
        notes=(data.get('notes') or '').strip() or None,
    )
    db.session.add(reading)
    db.session.commit()

    audit_log('CREATE', 'reading', resource_id=str(reading.id),
              details={'patient_id': patient_id})

    return jsonify(reading.to_dict()), 201


def _load_editable_reading(reading_id):
    """Fetch a reading the caller may edit. Returns (reading, error_response)."""
    reading = db.session.get(BloodPressureReading, reading_id)
    if not reading:
        return None, (jsonify({'error': 'Reading not found'}), 404)
    if not can_access_patient(g.user, reading.patient_id):
        return None, (jsonify({'error': 'Not allowed to modify this reading'}), 403)
    return reading, None


@readings_bp.route('/<int:reading_id>', methods=['PUT'])
@token_required
@role_required(*STAFF_ROLES)
def update_reading(reading_id):
    """Edit the clinical fields of a reading."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    reading, error = _load_editable_reading(reading_id)
    if error:
        return error

    merged = {
        'systolic': reading.systolic,
        'diastolic': reading.diastolic,
        'pulse': reading.pulse,
    }
    merged.update({k: v for k, v in data.items() if k in BloodPressureReading.EDITABLE_FIELDS})
    errors = validate_reading(merged)
    if errors:
        return jsonify({'error': errors}), 400

    changes = {}
    for key in ('systolic', 'diastolic', 'pulse'):
        if key in data:
            new = int(data[key]) if data[key] not in (None, '') else None
            if new != getattr(reading, key):
                changes[key] = {'old': getattr(reading, key), 'new': new}
            setattr(reading, key, new)
    if data.get('recorded_at'):
        reading.recorded_at = parse_timestamp(data['recorded_at'])
        changes['recorded_at'] = {'updated': True}
    for key in ('location', 'notes'):
        if key in data:
            setattr(reading, key, (data[key] or '').strip() or None)
            changes[key] = {'updated': True}

    db.session.commit()

    audit_log('UPDATE', 'reading', resource_id=str(reading.id),
              details={'patient_id': reading.patient_id, 'fields_changed': list(changes.keys())})

    return jsonify(reading.to_dict()), 200


@readings_bp.route('/<int:reading_id>', methods=['DELETE'])
@token_required
@role_required(*STAFF_ROLES)
def delete_reading(reading_id):
    reading, error = _load_editable_reading(reading_id)
    if error:
        return error

    patient_id = reading.patient_id
    db.session.delete(reading)
    db.session.commit()

    audit_log('DELETE', 'reading', resource_id=str(reading_id),
              details={'patient_id': patient_id})

    return jsonify({'message': 'Reading deleted'}), 200


@readings_bp.route('/export', methods=['GET'])
@token_required
@role_required(*STAFF_ROLES)
def export_readings():
    """CSV export of the visible readings with the list filters applied."""
    filters, error = _filter_args()
    if error:
        return jsonify({'error': error}), 400

    try:
        readings, names = _visible_readings(filters)
    except PermissionError:
        return jsonify({'error': 'Not allowed to view this patient'}), 403

    csv_output = generate_readings_csv(readings, patient_names=names)

    audit_log('EXPORT', 'readings_csv', details={'count': len(readings), **filters})

    stamp = datetime.now(timezone.utc).strftime('%Y%m%d_%H%M%S')
    return Response(
        csv_output.getvalue(),
        mimetype='text/csv',
        headers={'Content-Disposition': f'attachment; filename=readings_export_{stamp}.csv'}
    )
