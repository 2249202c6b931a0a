"""
Pytest configuration: a fresh SQLite database per test plus helpers for
creating users, tokens and readings.
"""
import base64
import os
from datetime import datetime
from types import SimpleNamespace

import pytest

os.environ.setdefault('SECRET_KEY', 'test-secret-key')
os.environ.setdefault('DATABASE_URL', 'sqlite://')
os.environ.setdefault('JWT_SECRET_KEY', 'test-jwt-secret')
os.environ.setdefault('PHI_ENCRYPTION_KEY', base64.b64encode(b'k' * 32).decode())
os.environ.pop('FLASK_ENV', None)

from bpmonitor import create_app, db  # noqa: E402
from bpmonitor.models import User, Role, BloodPressureReading, CareAssignment  # noqa: E402
from bpmonitor.utils.auth import generate_access_token  # noqa: E402


def fake_reading(systolic, diastolic, recorded_at=None, pulse=None, patient_id=1):
    """Plain object with the attributes the analytics functions read."""
    return SimpleNamespace(
        systolic=systolic,
        diastolic=diastolic,
        pulse=pulse,
        recorded_at=recorded_at or datetime(2026, 1, 1, 12, 0),
        patient_id=patient_id,
    )


@pytest.fixture
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': f"sqlite:///{tmp_path / 'test.db'}",
        'SQLALCHEMY_ENGINE_OPTIONS': {},
        'AUDIT_LOG_FILE': str(tmp_path / 'audit.log'),
        'RATE_LIMIT_ENABLED': False,
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {'n': 0}

    def _make(role=Role.PATIENT, status='active', email=None, first_name=None,
              last_name='Tester', password='secret123'):
        counter['n'] += 1
        user = User()
        user.email = email or f"{role.value}{counter['n']}@example.com"
        user.first_name = first_name or f"{role.value.capitalize()}{counter['n']}"
        user.last_name = last_name
        user.role = role
        user.status = status
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make


@pytest.fixture
def auth_headers():
    def _headers(user):
        return {'Authorization': f'Bearer {generate_access_token(user)}'}
    return _headers


@pytest.fixture
def add_reading(app):
    def _add(patient, systolic, diastolic, recorded_at=None, pulse=None, recorded_by=None):
        reading = BloodPressureReading(
            patient_id=patient.id,
            recorded_by=(recorded_by or patient).id,
            systolic=systolic,
            diastolic=diastolic,
            pulse=pulse,
            recorded_at=recorded_at or datetime.utcnow(),
        )
        db.session.add(reading)
        db.session.commit()
        return reading
    return _add


@pytest.fixture
def assign(app):
    def _assign(patient, provider):
        assignment = CareAssignment(patient_id=patient.id, provider_id=provider.id)
        db.session.add(assignment)
        db.session.commit()
        return assignment
    return _assign
