from datetime import datetime, timedelta

from bpmonitor.models import Role


def test_patient_dashboard(client, make_user, auth_headers, add_reading):
    patient = make_user()
    for i in range(12):
        add_reading(patient, 120 + i, 80, recorded_at=datetime.utcnow() - timedelta(days=i))
    data = client.get('/dashboard', headers=auth_headers(patient)).get_json()
    assert data['role'] == 'patient'
    summary = data['summary']
    assert summary['total_readings'] == 12
    assert summary['this_week'] == 7
    assert len(summary['recent_readings']) == 10
    # last ten readings: systolic 120..129
    assert summary['avg_systolic'] == 125
    assert summary['avg_diastolic'] == 80


def test_patient_dashboard_empty(client, make_user, auth_headers):
    summary = client.get('/dashboard', headers=auth_headers(make_user())).get_json()['summary']
    assert summary['total_readings'] == 0
    assert summary['avg_systolic'] is None


def test_doctor_dashboard_flags_high_risk(client, make_user, auth_headers, add_reading, assign):
    doctor = make_user(Role.DOCTOR)
    calm = make_user(first_name='Calm')
    risky = make_user(first_name='Risky')
    unassigned = make_user()
    assign(calm, doctor)
    assign(risky, doctor)
    add_reading(calm, 118, 76)
    add_reading(risky, 120, 80, recorded_at=datetime.utcnow() - timedelta(days=3))
    add_reading(risky, 150, 85)
    add_reading(unassigned, 180, 110)

    summary = client.get('/dashboard', headers=auth_headers(doctor)).get_json()['summary']
    assert summary['total_patients'] == 2
    assert summary['high_risk_patients'] == 1
    assert summary['readings_last_24h'] == 2
    first = summary['patients'][0]
    assert first['id'] == risky.id
    assert first['high_risk'] is True
    assert first['reading_count'] == 2
    assert first['latest_reading']['systolic'] == 150


def test_nurse_dashboard(client, make_user, auth_headers, add_reading):
    nurse = make_user(Role.NURSE)
    a, b = make_user(), make_user()
    for _ in range(4):
        add_reading(a, 120, 80, recorded_by=nurse)
    add_reading(b, 130, 85, recorded_by=nurse, recorded_at=datetime.utcnow() - timedelta(days=2))
    add_reading(b, 130, 85)  # recorded by the patient

    summary = client.get('/dashboard', headers=auth_headers(nurse)).get_json()['summary']
    assert len(summary['recent_readings']) == 5
    assert summary['unique_patients'] == 2
    assert summary['weekly_average'] == 1  # 5 / 7 rounds to 1


def test_admin_dashboard(client, make_user, auth_headers, add_reading):
    admin = make_user(Role.ADMIN)
    make_user(Role.DOCTOR)
    make_user(Role.NURSE, status='pending_approval')
    add_reading(make_user(), 120, 80)

    summary = client.get('/dashboard', headers=auth_headers(admin)).get_json()['summary']
    assert summary['users_by_role'] == {'patient': 1, 'doctor': 1, 'nurse': 1, 'admin': 1}
    assert summary['total_users'] == 4
    assert summary['pending_approvals'] == 1
    assert summary['total_readings'] == 1
