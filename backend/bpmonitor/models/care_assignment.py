"""
Care Assignment model: links a patient to a doctor or nurse.
"""
from datetime import datetime
from bpmonitor import db


class CareAssignment(db.Model):
    """
    A patient assigned to a provider (doctor or nurse). Doctors only see
    readings of patients with an active assignment to them.
    Deactivated assignments are kept for history.
    """
    __tablename__ = 'care_assignments'

    id = db.Column(db.Integer, primary_key=True)
    patient_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    provider_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)
    is_active = db.Column(db.Boolean, nullable=False, default=True, index=True)
    assigned_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    assigned_at = db.Column(db.DateTime, default=datetime.utcnow)
    ended_at = db.Column(db.DateTime, nullable=True)

    # Relationships
    patient = db.relationship('User', foreign_keys=[patient_id])
    provider = db.relationship('User', foreign_keys=[provider_id])

    @staticmethod
    def active_patient_ids(provider_id):
        """IDs of patients actively assigned to a provider."""
        rows = (CareAssignment.query
                .with_entities(CareAssignment.patient_id)
                .filter_by(provider_id=provider_id, is_active=True)
                .all())
        return [row.patient_id for row in rows]

    @staticmethod
    def find_active(patient_id, provider_id):
        return CareAssignment.query.filter_by(
            patient_id=patient_id, provider_id=provider_id, is_active=True
        ).first()

    def to_dict(self):
        return {
            'id': self.id,
            'patient_id': self.patient_id,
            'provider_id': self.provider_id,
            'is_active': self.is_active,
            'assigned_by': self.assigned_by,
            'assigned_at': self.assigned_at.isoformat() if self.assigned_at else None,
            'ended_at': self.ended_at.isoformat() if self.ended_at else None,
        }

    def __repr__(self):
        return f'<CareAssignment {self.id} patient={self.patient_id} provider={self.provider_id}>'
