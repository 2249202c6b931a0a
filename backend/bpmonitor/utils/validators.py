"""
Input validation for sign-up, profiles and blood pressure readings.
Each validator returns a list of error strings (empty = valid).
"""
import re
from datetime import datetime, timezone
from email_validator import validate_email, EmailNotValidError

SYSTOLIC_RANGE = (70, 250)
DIASTOLIC_RANGE = (40, 150)
PULSE_RANGE = (40, 200)
MIN_PASSWORD_LENGTH = 6
GENDER_CHOICES = ['male', 'female', 'other', 'prefer_not_to_say', None, '']


def parse_timestamp(value):
    """Parse an ISO 8601 timestamp into naive UTC. Raises ValueError."""
    if not isinstance(value, str):
        raise ValueError('timestamp must be a string')
    parsed = datetime.fromisoformat(value.replace('Z', '+00:00'))
    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed


def _as_int(value):
    """Whole-number JSON value as int. Raises ValueError for anything else."""
    if isinstance(value, bool):
        raise ValueError('booleans are not integers')
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError('not a whole number')
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise ValueError('not a number')


def _check_int(data, key, label, bounds, errors, unit=''):
    try:
        number = _as_int(data.get(key))
    except ValueError:
        errors.append(f'{label} must be an integer')
        return None
    low, high = bounds
    if number < low or number > high:
        errors.append(f'{label} must be between {low} and {high}{unit}')
        return None
    return number


def _check_text(data, key, label, max_length, errors):
    """Optional free-text field: a string of at most max_length characters.
    Returns False when the value is present but unusable."""
    value = data.get(key)
    if value is None or value == '':
        return True
    if not isinstance(value, str):
        errors.append(f'{label} must be a string')
        return False
    if len(value.strip()) > max_length:
        errors.append(f'{label} must be {max_length} characters or fewer')
        return False
    return True


def _validate_dob(dob, errors):
    if dob is None or dob == '':
        return
    if not isinstance(dob, str) or not re.match(r'^\d{4}-\d{2}-\d{2}$', dob):
        errors.append('Date of birth must be in YYYY-MM-DD format')
        return
    try:
        parsed = datetime.strptime(dob, '%Y-%m-%d')
        if parsed > datetime.now():
            errors.append('Date of birth cannot be in the future')
    except ValueError:
        errors.append('Date of birth is not a valid date')


def _validate_profile_fields(data, errors):
    _check_text(data, 'first_name', 'First name', 100, errors)
    _check_text(data, 'last_name', 'Last name', 100, errors)
    _check_text(data, 'phone', 'Phone', 20, errors)
    _check_text(data, 'emergency_contact', 'Emergency contact', 200, errors)
    for key in ('medical_license', 'specialization', 'department'):
        _check_text(data, key, key.replace('_', ' ').capitalize(), 100, errors)

    if data.get('gender') not in GENDER_CHOICES:
        errors.append('Invalid gender')

    _validate_dob(data.get('date_of_birth'), errors)


def _text_or_empty(value):
    return value.strip() if isinstance(value, str) else ''


def validate_sign_up(data: dict) -> list:
    errors = []

    email = data.get('email')
    if email is not None and not isinstance(email, str):
        errors.append('Email must be a string')
    elif not _text_or_empty(email):
        errors.append('Email is required')
    else:
        try:
            validate_email(email.strip(), check_deliverability=False)
        except EmailNotValidError:
            errors.append('Invalid email format')

    password = data.get('password')
    if password is not None and not isinstance(password, str):
        errors.append('Password must be a string')
    elif len(password or '') < MIN_PASSWORD_LENGTH:
        errors.append(f'Password must be at least {MIN_PASSWORD_LENGTH} characters')

    for key, label in (('first_name', 'First name'), ('last_name', 'Last name')):
        value = data.get(key)
        if (value is None or isinstance(value, str)) and not _text_or_empty(value):
            errors.append(f'{label} is required')

    role = data.get('role')
    if role not in (None, '', 'patient', 'doctor', 'nurse', 'admin'):
        errors.append('Invalid role')

    _validate_profile_fields(data, errors)
    return errors


def validate_profile_update(data: dict, allow_admin_fields=False) -> list:
    errors = []

    if 'email' in data:
        errors.append('Email cannot be changed via profile update')

    if not allow_admin_fields:
        for key in ('role', 'status'):
            if key in data:
                errors.append(f'{key.capitalize()} can only be changed by an administrator')
    else:
        if 'role' in data and data['role'] not in ('patient', 'doctor', 'nurse', 'admin'):
            errors.append('Invalid role')
        if 'status' in data and data['status'] not in ('active', 'inactive', 'pending_approval'):
            errors.append('Invalid status')

    if 'password' in data and data['password'] is not None and not isinstance(data['password'], str):
        errors.append('Password must be a string')

    for key, label in (('first_name', 'First name'), ('last_name', 'Last name')):
        value = data.get(key)
        if key in data and (value is None or isinstance(value, str)) and not _text_or_empty(value):
            errors.append(f'{label} cannot be empty')

    _validate_profile_fields(data, errors)
    return errors


def validate_reading(data: dict) -> list:
    """Validate a blood pressure reading.

    Edits are validated on the stored values merged with the changes so the
    systolic > diastolic rule still applies.
    """
    errors = []

    systolic = diastolic = None
    if data.get('systolic') is None:
        errors.append('Systolic is required')
    else:
        systolic = _check_int(data, 'systolic', 'Systolic', SYSTOLIC_RANGE, errors, ' mmHg')

    if data.get('diastolic') is None:
        errors.append('Diastolic is required')
    else:
        diastolic = _check_int(data, 'diastolic', 'Diastolic', DIASTOLIC_RANGE, errors, ' mmHg')

    if systolic is not None and diastolic is not None and systolic <= diastolic:
        errors.append('Systolic reading must be higher than diastolic reading')

    if data.get('pulse') not in (None, ''):
        _check_int(data, 'pulse', 'Pulse', PULSE_RANGE, errors, ' bpm')

    recorded_at = data.get('recorded_at')
    if recorded_at:
        try:
            parse_timestamp(recorded_at)
        except ValueError:
            errors.append('Invalid recorded_at format')

    _check_text(data, 'location', 'Location', 200, errors)
    _check_text(data, 'notes', 'Notes', 1000, errors)

    return errors
