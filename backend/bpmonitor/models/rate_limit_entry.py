"""
Rate limit attempts for sign-up and login, stored so limits survive restarts.
"""
from datetime import datetime, timedelta
from bpmonitor import db


class RateLimitEntry(db.Model):
    __tablename__ = 'rate_limit_entries'

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(255), nullable=False, index=True)
    endpoint = db.Column(db.String(255), nullable=False, index=True)
    timestamp = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    __table_args__ = (
        db.Index('ix_rate_limit_key_endpoint_ts', 'key', 'endpoint', 'timestamp'),
    )

    @staticmethod
    def count_since(key, endpoint, cutoff):
        return RateLimitEntry.query.filter(
            RateLimitEntry.key == key,
            RateLimitEntry.endpoint == endpoint,
            RateLimitEntry.timestamp > cutoff,
        ).count()

    @staticmethod
    def cleanup_older_than(seconds):
        """Delete entries older than the given number of seconds."""
        cutoff = datetime.utcnow() - timedelta(seconds=seconds)
        count = RateLimitEntry.query.filter(
            RateLimitEntry.timestamp < cutoff
        ).delete()
        db.session.commit()
        return count

    def __repr__(self):
        return f'<RateLimitEntry {self.key}:{self.endpoint}>'
