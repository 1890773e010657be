"""Initial schema - wards, beds and admissions

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


WARD_TYPES = (
    'GENERAL', 'ICU', 'PRIVATE', 'EMERGENCY', 'PEDIATRIC', 'MATERNITY',
    'SURGICAL', 'CARDIAC', 'NEUROLOGY', 'ORTHOPEDIC', 'DAY_CARE',
)
BED_TYPES = ('GENERAL', 'ICU', 'PRIVATE', 'SEMI_PRIVATE', 'ISOLATION')
ADMISSION_TYPES = ('EMERGENCY', 'PLANNED', 'TRANSFER', 'OBSERVATION', 'DAY_CARE')
ADMISSION_STATUSES = ('ADMITTED', 'DISCHARGED', 'TRANSFERRED')

ACTIVE_ADMISSION = sa.text("status = 'ADMITTED'")


def upgrade() -> None:
    """Creates every table of the system."""

    # Ward table
    op.create_table(
        'ward',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('type', sa.Enum(*WARD_TYPES, name='wardtypeenum'), nullable=False),
        sa.Column('capacity', sa.Integer(), nullable=False),
        sa.Column('floor', sa.String(length=50), nullable=True),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('daily_rate', sa.Numeric(precision=10, scale=2), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_ward_name', 'ward', ['name'])
    op.create_index('ix_ward_type', 'ward', ['type'])
    op.create_index('ix_ward_is_active', 'ward', ['is_active'])
    op.create_index(
        'uq_ward_active_name', 'ward', ['name'],
        unique=True,
        sqlite_where=sa.text('is_active'),
        postgresql_where=sa.text('is_active'),
    )

    # Bed table
    op.create_table(
        'bed',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('ward_id', sa.String(), nullable=False),
        sa.Column('bed_number', sa.String(length=20), nullable=False),
        sa.Column('bed_type', sa.Enum(*BED_TYPES, name='bedtypeenum'), nullable=False),
        sa.Column('is_occupied', sa.Boolean(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('notes', sa.String(length=500), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ward_id'], ['ward.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('ward_id', 'bed_number', name='uq_bed_ward_number')
    )
    op.create_index('ix_bed_ward_id', 'bed', ['ward_id'])
    op.create_index('ix_bed_bed_type', 'bed', ['bed_type'])
    op.create_index('ix_bed_is_occupied', 'bed', ['is_occupied'])
    op.create_index('ix_bed_is_active', 'bed', ['is_active'])

    # Admission table
    op.create_table(
        'admission',
        sa.Column('id', sa.String(), nullable=False),
        sa.Column('patient_id', sa.String(), nullable=False),
        sa.Column('ward_id', sa.String(), nullable=False),
        sa.Column('bed_id', sa.String(), nullable=False),
        sa.Column('admission_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('discharge_date', sa.DateTime(timezone=True), nullable=True),
        sa.Column('admission_type', sa.Enum(*ADMISSION_TYPES, name='admissiontypeenum'), nullable=False),
        sa.Column('status', sa.Enum(*ADMISSION_STATUSES, name='admissionstatusenum'), nullable=False),
        sa.Column('admission_reason', sa.String(length=500), nullable=False),
        sa.Column('notes', sa.String(length=1000), nullable=True),
        sa.Column('discharge_notes', sa.String(length=1000), nullable=True),
        sa.Column('transferred_from_id', sa.String(), nullable=True),
        sa.Column('procedure_start_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('expected_discharge_time', sa.DateTime(timezone=True), nullable=True),
        sa.Column('home_support_available', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['ward_id'], ['ward.id']),
        sa.ForeignKeyConstraint(['bed_id'], ['bed.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_admission_patient_id', 'admission', ['patient_id'])
    op.create_index('ix_admission_ward_id', 'admission', ['ward_id'])
    op.create_index('ix_admission_bed_id', 'admission', ['bed_id'])
    op.create_index('ix_admission_admission_date', 'admission', ['admission_date'])
    op.create_index('ix_admission_discharge_date', 'admission', ['discharge_date'])
    op.create_index('ix_admission_admission_type', 'admission', ['admission_type'])
    op.create_index('ix_admission_status', 'admission', ['status'])
    op.create_index('ix_admission_transferred_from_id', 'admission', ['transferred_from_id'])

    # One active admission per bed and per patient
    op.create_index(
        'uq_admission_active_bed', 'admission', ['bed_id'],
        unique=True,
        sqlite_where=ACTIVE_ADMISSION,
        postgresql_where=ACTIVE_ADMISSION,
    )
    op.create_index(
        'uq_admission_active_patient', 'admission', ['patient_id'],
        unique=True,
        sqlite_where=ACTIVE_ADMISSION,
        postgresql_where=ACTIVE_ADMISSION,
    )


def downgrade() -> None:
    """Drops every table."""
    op.drop_table('admission')
    op.drop_table('bed')
    op.drop_table('ward')

    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for name in ('admissionstatusenum', 'admissiontypeenum', 'bedtypeenum', 'wardtypeenum'):
            sa.Enum(name=name).drop(bind, checkfirst=True)
