"""initial schema: users, readings, care assignments, tokens, rate limits

Revision ID: 0001a2b3c4d5
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0001a2b3c4d5'
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum('patient', 'doctor', 'nurse', 'admin', name='user_role')


def upgrade():
    # Users (PHI columns hold AES-GCM ciphertext)
    op.create_table('users',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('email', sa.Text(), nullable=False),
        sa.Column('email_hash', sa.String(64), nullable=False),
        sa.Column('first_name', sa.Text(), nullable=True),
        sa.Column('last_name', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('date_of_birth', sa.Text(), nullable=True),
        sa.Column('emergency_contact', sa.Text(), nullable=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('gender', sa.String(50), nullable=True),
        sa.Column('role', user_role, nullable=False),
        sa.Column('status', sa.String(30), nullable=False, server_default='active'),
        sa.Column('medical_license', sa.String(100), nullable=True),
        sa.Column('specialization', sa.String(100), nullable=True),
        sa.Column('department', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_users_email_hash', 'users', ['email_hash'], unique=True)
    op.create_index('ix_users_role', 'users', ['role'])
    op.create_index('ix_users_status', 'users', ['status'])

    # Blood pressure readings
    op.create_table('blood_pressure_readings',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('recorded_by', sa.Integer(), nullable=False),
        sa.Column('systolic', sa.Integer(), nullable=False),
        sa.Column('diastolic', sa.Integer(), nullable=False),
        sa.Column('pulse', sa.Integer(), nullable=True),
        sa.Column('recorded_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
        sa.Column('location', sa.String(200), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id']),
        sa.ForeignKeyConstraint(['recorded_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_blood_pressure_readings_patient_id', 'blood_pressure_readings', ['patient_id'])
    op.create_index('ix_blood_pressure_readings_recorded_by', 'blood_pressure_readings', ['recorded_by'])
    op.create_index('ix_blood_pressure_readings_recorded_at', 'blood_pressure_readings', ['recorded_at'])

    # Care assignments
    op.create_table('care_assignments',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('patient_id', sa.Integer(), nullable=False),
        sa.Column('provider_id', sa.Integer(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('assigned_by', sa.Integer(), nullable=True),
        sa.Column('assigned_at', sa.DateTime(), nullable=True),
        sa.Column('ended_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['patient_id'], ['users.id']),
        sa.ForeignKeyConstraint(['provider_id'], ['users.id']),
        sa.ForeignKeyConstraint(['assigned_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_care_assignments_patient_id', 'care_assignments', ['patient_id'])
    op.create_index('ix_care_assignments_provider_id', 'care_assignments', ['provider_id'])
    op.create_index('ix_care_assignments_is_active', 'care_assignments', ['is_active'])

    # Revoked tokens
    op.create_table('revoked_tokens',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('jti', sa.String(64), nullable=False),
        sa.Column('user_id', sa.Integer(), nullable=False),
        sa.Column('revoked_at', sa.DateTime(), nullable=True),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_revoked_tokens_jti', 'revoked_tokens', ['jti'], unique=True)

    # Rate limit entries
    op.create_table('rate_limit_entries',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('key', sa.String(255), nullable=False),
        sa.Column('endpoint', sa.String(255), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_rate_limit_entries_key', 'rate_limit_entries', ['key'])
    op.create_index('ix_rate_limit_entries_endpoint', 'rate_limit_entries', ['endpoint'])
    op.create_index('ix_rate_limit_key_endpoint_ts', 'rate_limit_entries', ['key', 'endpoint', 'timestamp'])


def downgrade():
    op.drop_table('rate_limit_entries')
    op.drop_table('revoked_tokens')
    op.drop_table('care_assignments')
    op.drop_table('blood_pressure_readings')
    op.drop_table('users')
    user_role.drop(op.get_bind(), checkfirst=True)
