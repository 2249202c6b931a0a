"""
Seed script: creates the first administrator account.
Run from backend/: python seed.py

ADMIN_EMAIL and ADMIN_PASSWORD may be set in the environment; otherwise a
password is generated and printed once.
"""
import os
import secrets
import sys
sys.path.insert(0, os.path.dirname(__file__))

from bpmonitor import create_app, db
from bpmonitor.models import User, Role


def seed():
    app = create_app()
    with app.app_context():
        admin_email = os.getenv('ADMIN_EMAIL', 'admin@bp-monitor.local')
        admin = User.find_by_email(admin_email)
        if admin:
            print(f"  Admin user already exists (id={admin.id}), skipping.")
            return

        password = os.getenv('ADMIN_PASSWORD') or secrets.token_urlsafe(12)
        admin = User()
        admin.email = admin_email
        admin.first_name = "System"
        admin.last_name = "Admin"
        admin.role = Role.ADMIN
        admin.status = 'active'
        admin.set_password(password)
        db.session.add(admin)
        db.session.commit()
        print(f"  Created admin user (id={admin.id}, email={admin_email})")
        if not os.getenv('ADMIN_PASSWORD'):
            print(f"  Temporary password: {password}")

        print("\nDone.")


if __name__ == "__main__":
    seed()
