from datetime import datetime

import pytest

from bpmonitor.utils.validators import (
    validate_reading, validate_sign_up, validate_profile_update, parse_timestamp,
)


def test_valid_reading():
    assert validate_reading({'systolic': 120, 'diastolic': 80, 'pulse': 70}) == []


@pytest.mark.parametrize('data,message', [
    ({'diastolic': 80}, 'Systolic is required'),
    ({'systolic': 69, 'diastolic': 50}, 'Systolic must be between 70 and 250 mmHg'),
    ({'systolic': 120, 'diastolic': 151}, 'Diastolic must be between 40 and 150 mmHg'),
    ({'systolic': 120, 'diastolic': 80, 'pulse': 201}, 'Pulse must be between 40 and 200 bpm'),
    ({'systolic': 90, 'diastolic': 90}, 'Systolic reading must be higher than diastolic reading'),
    ({'systolic': 'abc', 'diastolic': 80}, 'Systolic must be an integer'),
    ({'systolic': 120, 'diastolic': 80, 'recorded_at': 'yesterday'}, 'Invalid recorded_at format'),
    ({'systolic': 120, 'diastolic': 80, 'notes': 'x' * 1001}, 'Notes must be 1000 characters or fewer'),
    ({'systolic': 120, 'diastolic': 80, 'location': 'x' * 201}, 'Location must be 200 characters or fewer'),
])
def test_invalid_readings(data, message):
    assert message in validate_reading(data)


def test_parse_timestamp_normalizes_to_naive_utc():
    assert parse_timestamp('2026-03-01T10:00:00Z') == datetime(2026, 3, 1, 10, 0)
    assert parse_timestamp('2026-03-01T10:00:00-05:00') == datetime(2026, 3, 1, 15, 0)
    with pytest.raises(ValueError):
        parse_timestamp(12345)


def test_sign_up_rules():
    good = {'email': 'a@example.com', 'password': 'secret1', 'first_name': 'A', 'last_name': 'B'}
    assert validate_sign_up(good) == []
    errors = validate_sign_up({**good, 'password': '12345', 'email': 'nope', 'role': 'king'})
    assert 'Password must be at least 6 characters' in errors
    assert 'Invalid email format' in errors
    assert 'Invalid role' in errors


def test_profile_update_blocks_admin_fields():
    assert 'Role can only be changed by an administrator' in validate_profile_update({'role': 'admin'})
    assert validate_profile_update({'role': 'doctor', 'status': 'inactive'}, allow_admin_fields=True) == []
    assert 'Invalid status' in validate_profile_update({'status': 'gone'}, allow_admin_fields=True)


@pytest.mark.parametrize('value', [120.5, True, '120.5', [120], {'v': 120}])
def test_systolic_must_be_whole_number(value):
    assert 'Systolic must be an integer' in validate_reading({'systolic': value, 'diastolic': 80})


@pytest.mark.parametrize('value', [120, 120.0, '120', ' 120 '])
def test_whole_number_forms_accepted(value):
    assert validate_reading({'systolic': value, 'diastolic': 80}) == []


def test_non_string_text_fields():
    errors = validate_sign_up({
        'email': 12, 'password': 123456, 'first_name': 'A', 'last_name': 'B',
        'phone': 5551234, 'department': 3,
    })
    assert 'Email must be a string' in errors
    assert 'Password must be a string' in errors
    assert 'Phone must be a string' in errors
    assert 'Department must be a string' in errors
    assert 'Password must be a string' in validate_profile_update({'password': 123456})
