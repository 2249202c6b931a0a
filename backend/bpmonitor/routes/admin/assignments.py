"""Admin care assignment routes: link patients to doctors and nurses."""
import logging
from datetime import datetime
from flask import request, jsonify, g
from bpmonitor import db
from bpmonitor.models import User, Role, CareAssignment, PROVIDER_ROLES
from bpmonitor.utils.auth import token_required
from bpmonitor.utils.audit_logger import audit_log
from . import admin_bp, admin_required

logger = logging.getLogger(__name__)


def _person(user):
    return {'id': user.id, 'name': user.full_name, 'role': user.role.value}


@admin_bp.route('/assignments', methods=['GET'])
@token_required
@admin_required
def list_assignments():
    """Active assignments, optionally for one provider or patient."""
    query = CareAssignment.query.filter_by(is_active=True)
    provider_id = request.args.get('provider_id', type=int)
    patient_id = request.args.get('patient_id', type=int)
    if provider_id:
        query = query.filter_by(provider_id=provider_id)
    if patient_id:
        query = query.filter_by(patient_id=patient_id)
    assignments = query.order_by(CareAssignment.assigned_at.desc()).all()

    names = User.display_names(
        [a.patient_id for a in assignments] + [a.provider_id for a in assignments]
    )
    out = []
    for a in assignments:
        d = a.to_dict()
        d['patient_name'] = names.get(a.patient_id)
        d['provider_name'] = names.get(a.provider_id)
        out.append(d)

    audit_log('READ', 'care_assignment', details={'count': len(out)})

    return jsonify({'assignments': out}), 200


@admin_bp.route('/assignments/options', methods=['GET'])
@token_required
@admin_required
def assignment_options():
    """Patients with no active assignment, and active doctors and nurses."""
    assigned = {row.patient_id for row in
                CareAssignment.query.with_entities(CareAssignment.patient_id)
                .filter_by(is_active=True).all()}

    patients = (User.query
                .filter(User.role == Role.PATIENT, User.status == 'active')
                .order_by(User.id)
                .all())
    providers = (User.query
                 .filter(User.role.in_(PROVIDER_ROLES), User.status == 'active')
                 .order_by(User.id)
                 .all())

    return jsonify({
        'patients': [_person(p) for p in patients if p.id not in assigned],
        'providers': [_person(p) for p in providers],
    }), 200


@admin_bp.route('/assignments', methods=['POST'])
@token_required
@admin_required
def create_assignment():
    """Assign a patient to a doctor or nurse."""
    data = request.get_json(silent=True)
    if not data:
        return jsonify({'error': 'Request body is required'}), 400

    try:
        patient_id = int(data.get('patient_id'))
        provider_id = int(data.get('provider_id'))
    except (ValueError, TypeError):
        return jsonify({'error': 'patient_id and provider_id are required integers'}), 400

    patient = db.session.get(User, patient_id)
    if not patient or patient.role is not Role.PATIENT:
        return jsonify({'error': 'Patient not found'}), 404
    provider = db.session.get(User, provider_id)
    if not provider or provider.role not in PROVIDER_ROLES:
        return jsonify({'error': 'Provider not found'}), 404
    if not provider.is_active:
        return jsonify({'error': 'Provider account is not active'}), 400

    if CareAssignment.find_active(patient_id, provider_id):
        return jsonify({'error': 'Patient is already assigned to this provider'}), 409

    assignment = CareAssignment(
        patient_id=patient_id,
        provider_id=provider_id,
        assigned_by=g.user_id,
    )
    db.session.add(assignment)
    db.session.commit()

    audit_log('CREATE', 'care_assignment', resource_id=str(assignment.id),
              details={'patient_id': patient_id, 'provider_id': provider_id})

    return jsonify(assignment.to_dict()), 201


@admin_bp.route('/assignments/<int:assignment_id>', methods=['DELETE'])
@token_required
@admin_required
def end_assignment(assignment_id):
    """Deactivate an assignment. The row is kept for history."""
    assignment = db.session.get(CareAssignment, assignment_id)
    if not assignment or not assignment.is_active:
        return jsonify({'error': 'Assignment not found'}), 404

    assignment.is_active = False
    assignment.ended_at = datetime.utcnow()
    db.session.commit()

    audit_log('DELETE', 'care_assignment', resource_id=str(assignment_id),
              details={'patient_id': assignment.patient_id, 'provider_id': assignment.provider_id})

    return jsonify({'message': 'Assignment ended'}), 200
