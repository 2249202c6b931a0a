"""
Blood Pressure Reading model.
"""
from datetime import datetime
from bpmonitor import db
from bpmonitor.analytics.categories import categorize, category_to_dict


class BloodPressureReading(db.Model):
    """
    Blood pressure reading model.
    Readings are linked to patients but individual values are not considered
    direct identifiers - the patient linkage provides the PHI context.
    """
    __tablename__ = 'blood_pressure_readings'

    # Fields clinicians may change after a reading is recorded
    EDITABLE_FIELDS = ('systolic', 'diastolic', 'pulse', 'recorded_at', 'location', 'notes')

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    recorded_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)

    # Blood pressure values
    systolic = db.Column(db.Integer, nullable=False)
    diastolic = db.Column(db.Integer, nullable=False)
    pulse = db.Column(db.Integer, nullable=True)

    # Timestamps (naive UTC)
    recorded_at = db.Column(db.DateTime, nullable=False, default=datetime.utcnow, index=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    location = db.Column(db.String(200), nullable=True)
    notes = db.Column(db.Text, nullable=True)

    patient = db.relationship('User', foreign_keys=[patient_id], back_populates='readings')

    @property
    def category(self):
        return categorize(self.systolic, self.diastolic)

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'recorded_by': self.recorded_by,
            'systolic': self.systolic,
            'diastolic': self.diastolic,
            'pulse': self.pulse,
            'category': category_to_dict(self.category),
            'recorded_at': self.recorded_at.isoformat() if self.recorded_at else None,
            'location': self.location,
            'notes': self.notes,
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'updated_at': self.updated_at.isoformat() if self.updated_at else None,
        }

    def __repr__(self):
        return f'<BloodPressureReading {self.id}: {self.systolic}/{self.diastolic}>'
