from bpmonitor import db
from bpmonitor.models import User, Role, CareAssignment


def test_admin_only(client, make_user, auth_headers):
    doctor = make_user(Role.DOCTOR)
    assert client.get('/admin/users', headers=auth_headers(doctor)).status_code == 403
    assert client.get('/admin/stats', headers=auth_headers(doctor)).status_code == 403


def test_list_users_with_filters(client, make_user, auth_headers, add_reading):
    admin = make_user(Role.ADMIN)
    ada = make_user(first_name='Ada')
    make_user(first_name='Bob')
    make_user(Role.DOCTOR, first_name='Dana')
    add_reading(ada, 120, 80)
    headers = auth_headers(admin)

    patients = client.get('/admin/users?role=patient', headers=headers).get_json()
    assert patients['total_count'] == 2

    found = client.get('/admin/users?search=ada', headers=headers).get_json()
    assert [u['id'] for u in found['users']] == [ada.id]
    assert found['users'][0]['reading_count'] == 1

    assert client.get('/admin/users?role=king', headers=headers).status_code == 400


def test_create_user_with_temporary_password(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    resp = client.post('/admin/users', json={
        'email': 'doc@example.com', 'first_name': 'Dee', 'last_name': 'Oc', 'role': 'doctor',
    }, headers=auth_headers(admin))
    assert resp.status_code == 201
    data = resp.get_json()
    assert data['user']['role'] == 'doctor'
    assert data['user']['status'] == 'active'

    login = client.post('/auth/login', json={
        'email': 'doc@example.com', 'password': data['temporary_password'],
    })
    assert login.status_code == 200


def test_create_user_duplicate_email(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    make_user(email='taken@example.com')
    resp = client.post('/admin/users', json={
        'email': 'taken@example.com', 'first_name': 'T', 'last_name': 'K', 'password': 'secret123',
    }, headers=auth_headers(admin))
    assert resp.status_code == 409


def test_approve_pending_doctor(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    doctor = make_user(Role.DOCTOR, status='pending_approval')
    resp = client.put(f'/admin/users/{doctor.id}', json={'status': 'active', 'specialization': 'Cardiology'},
                      headers=auth_headers(admin))
    assert resp.status_code == 200
    assert resp.get_json()['status'] == 'active'
    assert resp.get_json()['specialization'] == 'Cardiology'


def test_change_role(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    user = make_user()
    resp = client.put(f'/admin/users/{user.id}', json={'role': 'nurse'}, headers=auth_headers(admin))
    assert resp.status_code == 200
    assert db.session.get(User, user.id).role is Role.NURSE


def test_admin_cannot_demote_self(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    resp = client.put(f'/admin/users/{admin.id}', json={'role': 'patient'}, headers=auth_headers(admin))
    assert resp.status_code == 400


def test_assignment_lifecycle(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    doctor = make_user(Role.DOCTOR)
    patient = make_user()
    headers = auth_headers(admin)

    options = client.get('/admin/assignments/options', headers=headers).get_json()
    assert patient.id in [p['id'] for p in options['patients']]
    assert doctor.id in [p['id'] for p in options['providers']]

    body = {'patient_id': patient.id, 'provider_id': doctor.id}
    created = client.post('/admin/assignments', json=body, headers=headers)
    assert created.status_code == 201
    assert client.post('/admin/assignments', json=body, headers=headers).status_code == 409

    options = client.get('/admin/assignments/options', headers=headers).get_json()
    assert patient.id not in [p['id'] for p in options['patients']]

    listed = client.get(f'/admin/assignments?provider_id={doctor.id}', headers=headers).get_json()
    assert [a['patient_id'] for a in listed['assignments']] == [patient.id]

    assignment_id = created.get_json()['id']
    assert client.delete(f'/admin/assignments/{assignment_id}', headers=headers).status_code == 200
    assert CareAssignment.find_active(patient.id, doctor.id) is None
    assert client.delete(f'/admin/assignments/{assignment_id}', headers=headers).status_code == 404


def test_assignment_rejects_non_provider(client, make_user, auth_headers):
    admin = make_user(Role.ADMIN)
    patient = make_user()
    other_patient = make_user()
    resp = client.post('/admin/assignments', json={'patient_id': patient.id, 'provider_id': other_patient.id},
                       headers=auth_headers(admin))
    assert resp.status_code == 404


def test_stats(client, make_user, auth_headers, add_reading):
    admin = make_user(Role.ADMIN)
    make_user(Role.DOCTOR, status='pending_approval')
    add_reading(make_user(), 120, 80)
    data = client.get('/admin/stats', headers=auth_headers(admin)).get_json()
    assert data['total_users'] == 3
    assert data['users_by_role']['doctor'] == 1
    assert data['pending_approvals'] == 1
    assert data['total_readings'] == 1
    assert data['readings_today'] == 1
