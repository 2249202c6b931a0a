"""
User model with encrypted PHI fields and a closed set of roles.
"""
import enum
import logging
from datetime import datetime
from werkzeug.security import generate_password_hash, check_password_hash
from bpmonitor import db
from bpmonitor.utils.encryption import encrypt_phi, decrypt_phi, hash_email

logger = logging.getLogger(__name__)


class Role(str, enum.Enum):
    PATIENT = 'patient'
    DOCTOR = 'doctor'
    NURSE = 'nurse'
    ADMIN = 'admin'

    @property
    def is_staff(self):
        """Doctors, nurses and admins: may edit and delete readings."""
        return self is not Role.PATIENT

    @classmethod
    def parse(cls, value):
        """Return the Role for a string value, or None if it isn't one."""
        try:
            return cls(value)
        except ValueError:
            return None


PROVIDER_ROLES = (Role.DOCTOR, Role.NURSE)

PROFILE_FIELDS = (
    'first_name', 'last_name', 'phone', 'date_of_birth', 'gender',
    'emergency_contact', 'medical_license', 'specialization', 'department',
)

USER_STATUS_CHOICES = [
    'active',
    'inactive',          # Disabled by an admin
    'pending_approval',  # Requested a staff role at sign-up
]


class User(db.Model):
    """
    User profile for every role.
    PHI fields (email, names, phone, date of birth, emergency contact) are
    encrypted at rest.
    """
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)

    # Encrypted PHI fields (stored as encrypted base64 strings)
    _email_encrypted = db.Column('email', db.Text, nullable=False)
    _email_hash = db.Column('email_hash', db.String(64), nullable=False, unique=True, index=True)
    _first_name_encrypted = db.Column('first_name', db.Text, nullable=True)
    _last_name_encrypted = db.Column('last_name', db.Text, nullable=True)
    _phone_encrypted = db.Column('phone', db.Text, nullable=True)
    _dob_encrypted = db.Column('date_of_birth', db.Text, nullable=True)
    _emergency_contact_encrypted = db.Column('emergency_contact', db.Text, nullable=True)

    password_hash = db.Column(db.String(255), nullable=False)

    # Non-PHI fields
    gender = db.Column(db.String(50), nullable=True)
    role = db.Column(
        db.Enum(Role, name='user_role', values_callable=lambda roles: [r.value for r in roles]),
        nullable=False, default=Role.PATIENT, index=True,
    )
    status = db.Column(db.String(30), nullable=False, default='active', index=True)

    # Provider-only fields
    medical_license = db.Column(db.String(100), nullable=True)
    specialization = db.Column(db.String(100), nullable=True)
    department = db.Column(db.String(100), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    readings = db.relationship('BloodPressureReading', lazy='dynamic',
                               foreign_keys='BloodPressureReading.patient_id',
                               back_populates='patient',
                               order_by='BloodPressureReading.recorded_at.desc()')

    # PHI property: email
    @property
    def email(self) -> str:
        return decrypt_phi(self._email_encrypted) if self._email_encrypted else None

    @email.setter
    def email(self, value: str):
        value = value.strip().lower() if value else value
        self._email_encrypted = encrypt_phi(value) if value else None
        self._email_hash = hash_email(value) if value else None

    # PHI property: first name
    @property
    def first_name(self) -> str:
        return decrypt_phi(self._first_name_encrypted) if self._first_name_encrypted else None

    @first_name.setter
    def first_name(self, value: str):
        self._first_name_encrypted = encrypt_phi(value) if value else None

    # PHI property: last name
    @property
    def last_name(self) -> str:
        return decrypt_phi(self._last_name_encrypted) if self._last_name_encrypted else None

    @last_name.setter
    def last_name(self, value: str):
        self._last_name_encrypted = encrypt_phi(value) if value else None

    # PHI property: phone
    @property
    def phone(self) -> str:
        return decrypt_phi(self._phone_encrypted) if self._phone_encrypted else None

    @phone.setter
    def phone(self, value: str):
        self._phone_encrypted = encrypt_phi(value) if value else None

    # PHI property: date of birth
    @property
    def date_of_birth(self) -> str:
        return decrypt_phi(self._dob_encrypted) if self._dob_encrypted else None

    @date_of_birth.setter
    def date_of_birth(self, value: str):
        self._dob_encrypted = encrypt_phi(value) if value else None

    # PHI property: emergency contact
    @property
    def emergency_contact(self) -> str:
        return decrypt_phi(self._emergency_contact_encrypted) if self._emergency_contact_encrypted else None

    @emergency_contact.setter
    def emergency_contact(self, value: str):
        self._emergency_contact_encrypted = encrypt_phi(value) if value else None

    @property
    def full_name(self) -> str:
        try:
            name = ' '.join(p for p in (self.first_name, self.last_name) if p)
        except Exception:
            logger.error('Decryption error for user_id=%s field=name', self.id, exc_info=True)
            name = ''
        return name or f'User #{self.id}'

    @property
    def is_active(self):
        return self.status == 'active'

    def apply_profile(self, data: dict) -> list:
        """Copy editable profile fields present in data; returns changed keys.
        Blank strings clear the field."""
        changed = []
        for key in PROFILE_FIELDS:
            if key not in data:
                continue
            value = data[key]
            if isinstance(value, str):
                value = value.strip() or None
            setattr(self, key, value)
            changed.append(key)
        return changed

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self, include_phi=False):
        """Convert to dictionary. Only include PHI if explicitly requested.
        Wraps PHI decryption in try/except so one bad record doesn't crash the list."""
        data = {
            'id': self.id,
            'role': self.role.value if self.role else None,
            'status': self.status,
            'gender': self.gender,
            'medical_license': self.medical_license,
            'specialization': self.specialization,
            'department': self.department,
            'created_at': self.created_at.isoformat() if self.created_at else None,
        }
        if include_phi:
            phi_fields = ('email', 'first_name', 'last_name', 'phone',
                          'date_of_birth', 'emergency_contact')
            for key in phi_fields:
                try:
                    data[key] = getattr(self, key)
                except Exception:
                    logger.error(
                        'Decryption error for user_id=%s field=%s', self.id, key,
                        exc_info=True,
                    )
                    data[key] = None
        return data

    @staticmethod
    def find_by_email(email: str):
        """Find a user by email using deterministic HMAC hash for lookup."""
        email_hash = hash_email(email)
        return User.query.filter_by(_email_hash=email_hash).first()

    @staticmethod
    def display_names(user_ids) -> dict:
        """Map of user id -> full name, decrypting once per user."""
        ids = set(user_ids)
        if not ids:
            return {}
        users = User.query.filter(User.id.in_(ids)).all()
        return {u.id: u.full_name for u in users}

    def __repr__(self):
        return f'<User {self.id} ({self.role.value if self.role else "?"})>'
