"""
Revoked token model for JWT logout support.
"""
from datetime import datetime
from bpmonitor import db


class RevokedToken(db.Model):
    """Access tokens revoked by logout, kept until they would have expired."""
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(64), unique=True, nullable=False, index=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    revoked_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

    @staticmethod
    def is_token_revoked(jti):
        return db.session.query(
            db.exists().where(RevokedToken.jti == jti)
        ).scalar()

    @staticmethod
    def cleanup_expired():
        """Delete revoked entries whose tokens have expired anyway."""
        count = RevokedToken.query.filter(
            RevokedToken.expires_at < datetime.utcnow()
        ).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<RevokedToken {self.jti} user={self.user_id}>'
