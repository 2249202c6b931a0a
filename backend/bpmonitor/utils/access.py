"""
Row-level access policies for readings, one entry per role.

A policy answers which patients' readings a user may see. None means
every patient.
"""
from bpmonitor.models import BloodPressureReading, CareAssignment, Role


def _own_readings(user):
    return [user.id]


def _assigned_patients(user):
    return CareAssignment.active_patient_ids(user.id)


def _all_patients(user):
    return None


VISIBILITY_POLICIES = {
    Role.PATIENT: _own_readings,
    Role.DOCTOR: _assigned_patients,
    Role.NURSE: _all_patients,
    Role.ADMIN: _all_patients,
}


def visible_patient_ids(user):
    """Patient IDs the user may see, or None for unrestricted."""
    return VISIBILITY_POLICIES[user.role](user)


def can_access_patient(user, patient_id) -> bool:
    allowed = visible_patient_ids(user)
    return allowed is None or patient_id in allowed


def readings_query(user, patient_id=None):
    """Base query over the readings a user may see.

    Patients are always scoped to themselves regardless of patient_id.
    Raises PermissionError when patient_id is outside the user's policy.
    """
    query = BloodPressureReading.query
    if user.role is Role.PATIENT:
        return query.filter(BloodPressureReading.patient_id == user.id)

    if patient_id is not None:
        if not can_access_patient(user, patient_id):
            raise PermissionError(f'user {user.id} may not access patient {patient_id}')
        return query.filter(BloodPressureReading.patient_id == patient_id)

    allowed = visible_patient_ids(user)
    if allowed is not None:
        query = query.filter(BloodPressureReading.patient_id.in_(allowed))
    return query
