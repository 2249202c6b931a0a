from datetime import datetime, timedelta

from bpmonitor import db
from bpmonitor.models import Role, BloodPressureReading


def test_patient_records_own_reading(client, make_user, auth_headers):
    patient = make_user()
    resp = client.post('/readings', json={'systolic': 128, 'diastolic': 82, 'pulse': 70},
                       headers=auth_headers(patient))
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['patient_id'] == patient.id
    assert data['recorded_by'] == patient.id
    assert data['category']['label'] == 'Stage 1'


def test_patient_cannot_record_for_someone_else(client, make_user, auth_headers):
    patient = make_user()
    other = make_user()
    resp = client.post('/readings', json={'systolic': 120, 'diastolic': 80, 'patient_id': other.id},
                       headers=auth_headers(patient))
    assert resp.status_code == 403


def test_out_of_range_reading_rejected(client, make_user, auth_headers):
    patient = make_user()
    resp = client.post('/readings', json={'systolic': 300, 'diastolic': 80},
                       headers=auth_headers(patient))
    assert resp.status_code == 400
    assert BloodPressureReading.query.count() == 0


def test_duplicate_within_a_minute_is_not_stored_twice(client, make_user, auth_headers):
    patient = make_user()
    headers = auth_headers(patient)
    body = {'systolic': 120, 'diastolic': 80, 'recorded_at': '2026-03-01T10:00:00Z'}
    assert client.post('/readings', json=body, headers=headers).status_code == 201
    again = client.post('/readings', json={**body, 'recorded_at': '2026-03-01T10:00:30Z'},
                        headers=headers)
    assert again.status_code == 200
    assert BloodPressureReading.query.count() == 1


def test_nurse_records_for_patient(client, make_user, auth_headers):
    nurse = make_user(Role.NURSE)
    patient = make_user()
    resp = client.post('/readings', json={'systolic': 120, 'diastolic': 80, 'patient_id': patient.id},
                       headers=auth_headers(nurse))
    assert resp.status_code == 201
    assert resp.get_json()['recorded_by'] == nurse.id

    missing = client.post('/readings', json={'systolic': 120, 'diastolic': 80},
                          headers=auth_headers(nurse))
    assert missing.status_code == 400


def test_doctor_only_sees_assigned_patients(client, make_user, auth_headers, add_reading, assign):
    doctor = make_user(Role.DOCTOR)
    mine = make_user()
    theirs = make_user()
    assign(mine, doctor)
    add_reading(mine, 120, 80)
    add_reading(theirs, 150, 95)

    resp = client.get('/readings', headers=auth_headers(doctor))
    assert resp.status_code == 200
    assert [r['patient_id'] for r in resp.get_json()['readings']] == [mine.id]

    blocked = client.get(f'/readings?patient_id={theirs.id}', headers=auth_headers(doctor))
    assert blocked.status_code == 403


def test_patient_list_is_self_scoped(client, make_user, auth_headers, add_reading):
    patient = make_user()
    other = make_user()
    add_reading(patient, 120, 80)
    add_reading(other, 130, 85)
    resp = client.get(f'/readings?patient_id={other.id}', headers=auth_headers(patient))
    assert resp.status_code == 200
    assert resp.get_json()['total_count'] == 1
    assert resp.get_json()['readings'][0]['patient_id'] == patient.id


def test_list_filters(client, make_user, auth_headers, add_reading):
    nurse = make_user(Role.NURSE)
    ada = make_user(first_name='Ada')
    bob = make_user(first_name='Bob')
    add_reading(ada, 110, 70)
    add_reading(bob, 150, 95)
    add_reading(bob, 150, 95, recorded_at=datetime.utcnow() - timedelta(days=60))
    headers = auth_headers(nurse)

    assert client.get('/readings?search=ada', headers=headers).get_json()['total_count'] == 1
    assert client.get('/readings?category=stage2', headers=headers).get_json()['total_count'] == 2
    week = client.get('/readings?category=stage2&period=week', headers=headers).get_json()
    assert week['total_count'] == 1
    assert week['readings'][0]['patient_name'] == 'Bob Tester'
    assert client.get('/readings?period=decade', headers=headers).status_code == 400


def test_staff_can_edit_and_delete(client, make_user, auth_headers, add_reading):
    nurse = make_user(Role.NURSE)
    patient = make_user()
    reading = add_reading(patient, 120, 80)
    headers = auth_headers(nurse)

    resp = client.put(f'/readings/{reading.id}', json={'systolic': 142, 'notes': 'recheck'},
                      headers=headers)
    assert resp.status_code == 200
    assert resp.get_json()['systolic'] == 142
    assert resp.get_json()['notes'] == 'recheck'

    invalid = client.put(f'/readings/{reading.id}', json={'diastolic': 150}, headers=headers)
    assert invalid.status_code == 400

    assert client.delete(f'/readings/{reading.id}', headers=headers).status_code == 200
    assert db.session.get(BloodPressureReading, reading.id) is None


def test_patient_cannot_edit(client, make_user, auth_headers, add_reading):
    patient = make_user()
    reading = add_reading(patient, 120, 80)
    headers = auth_headers(patient)
    assert client.put(f'/readings/{reading.id}', json={'systolic': 130},
                      headers=headers).status_code == 403
    assert client.delete(f'/readings/{reading.id}', headers=headers).status_code == 403


def test_doctor_cannot_edit_unassigned_patient(client, make_user, auth_headers, add_reading):
    doctor = make_user(Role.DOCTOR)
    reading = add_reading(make_user(), 120, 80)
    assert client.delete(f'/readings/{reading.id}',
                         headers=auth_headers(doctor)).status_code == 403


def test_csv_export(client, make_user, auth_headers, add_reading):
    admin = make_user(Role.ADMIN)
    add_reading(make_user(first_name='Ada'), 150, 95)
    resp = client.get('/readings/export', headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.mimetype == 'text/csv'
    body = resp.get_data(as_text=True)
    assert 'Ada Tester' in body
    assert 'Stage 2' in body


def test_non_string_location_rejected(client, make_user, auth_headers):
    patient = make_user()
    resp = client.post('/readings', json={'systolic': 120, 'diastolic': 80, 'location': 5},
                       headers=auth_headers(patient))
    assert resp.status_code == 400
    assert 'Location must be a string' in resp.get_json()['error']
    assert BloodPressureReading.query.count() == 0


def test_non_string_notes_rejected_on_edit(client, make_user, auth_headers, add_reading):
    nurse = make_user(Role.NURSE)
    reading = add_reading(make_user(), 120, 80)
    resp = client.put(f'/readings/{reading.id}', json={'notes': 42}, headers=auth_headers(nurse))
    assert resp.status_code == 400
    assert 'Notes must be a string' in resp.get_json()['error']


def test_fractional_systolic_rejected(client, make_user, auth_headers):
    patient = make_user()
    resp = client.post('/readings', json={'systolic': 120.9, 'diastolic': 80},
                       headers=auth_headers(patient))
    assert resp.status_code == 400
    assert 'Systolic must be an integer' in resp.get_json()['error']
    assert BloodPressureReading.query.count() == 0


def test_negative_limit_is_clamped(client, make_user, auth_headers, add_reading):
    patient = make_user()
    for _ in range(3):
        add_reading(patient, 120, 80)
    data = client.get('/readings?limit=-5', headers=auth_headers(patient)).get_json()
    assert data['total_count'] == 3
    assert len(data['readings']) == 1
