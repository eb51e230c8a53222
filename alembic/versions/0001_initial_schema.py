"""initial schema: users, vehicles, ownership transfers, diagnostics, locations, maintenance

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-18
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '0001_initial_schema'
down_revision = None
branch_labels = None
depends_on = None

SERVICE_TYPES = (
    'oil_change', 'brake_replacement', 'engine_diagnostics', 'tire_rotation',
    'battery_replacement', 'coolant_flush', 'transmission_service', 'general_inspection',
    'timing_belt_replacement', 'timing_chain_replacement', 'spark_plug_replacement',
    'air_filter_replacement', 'fuel_filter_replacement', 'ac_service', 'suspension_inspection',
    'wheel_alignment', 'exhaust_repair', 'clutch_replacement', 'software_update', 'engine_overhaul',
)


def _timestamps():
    return [
        sa.Column('createdAt', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updatedAt', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade():
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=64), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=150), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('role', sa.Enum('user', 'admin', name='role'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'vehicles',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False),
        sa.Column('ownerId', sa.String(length=64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('vin', sa.String(length=17), nullable=False),
        sa.Column('make', sa.String(length=100), nullable=False),
        sa.Column('model', sa.String(length=100), nullable=False),
        sa.Column('year', sa.Integer(), nullable=False),
        sa.Column('engineType', sa.String(length=50), nullable=False),
        sa.Column('fuelType', sa.String(length=50), nullable=False),
        sa.Column('transmissionType', sa.String(length=50), nullable=False),
        sa.Column('drivetrain', sa.String(length=50), nullable=False),
        sa.Column('licensePlate', sa.String(length=20), nullable=False),
        sa.Column('odometerUpdatedAt', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('deletedAt', sa.TIMESTAMP(timezone=True), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_vehicles_id', 'vehicles', ['id'])
    op.create_index('ix_vehicles_uuid', 'vehicles', ['uuid'], unique=True)
    op.create_index('ix_vehicles_vin', 'vehicles', ['vin'], unique=True)
    op.create_index('ix_vehicles_ownerId', 'vehicles', ['ownerId'])

    op.create_table(
        'ownershipTransfers',
        sa.Column('id', sa.Integer(), primary_key=True, nullable=False),
        sa.Column('uuid', sa.String(length=36), nullable=False, unique=True),
        sa.Column('vehicleId', sa.Integer(), sa.ForeignKey('vehicles.id'), nullable=True),
        sa.Column('vin', sa.String(length=17), nullable=True),
        sa.Column('fromUserId', sa.String(length=64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('toUserId', sa.String(length=64), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('transferredAt', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_ownershipTransfers_id', 'ownershipTransfers', ['id'])
    op.create_index('ix_ownershipTransfers_vehicleId', 'ownershipTransfers', ['vehicleId'])
    op.create_index('ix_ownershipTransfers_vin', 'ownershipTransfers', ['vin'])

    op.create_table(
        'diagnostics',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('vehicleUUID', sa.String(length=36),
                  sa.ForeignKey('vehicles.uuid', ondelete='CASCADE'), nullable=False),
        sa.Column('odometer', sa.Integer(), nullable=True),
        sa.Column('locationLat', sa.Float(), nullable=True),
        sa.Column('locationLong', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_diagnostics_vehicleUUID', 'diagnostics', ['vehicleUUID'])

    op.create_table(
        'sensorSnapshots',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('diagnosticUUID', sa.String(length=36),
                  sa.ForeignKey('diagnostics.uuid', ondelete='CASCADE'), nullable=False),
        sa.Column('source', sa.Enum('obd2', 'user_input', 'ai_estimated', 'simulated', name='source'),
                  nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_sensorSnapshots_diagnosticUUID', 'sensorSnapshots', ['diagnosticUUID'])

    op.create_table(
        'sensorReadings',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('sensorSnapshotUUID', sa.String(length=36),
                  sa.ForeignKey('sensorSnapshots.uuid', ondelete='CASCADE'), nullable=False),
        sa.Column('pid', sa.String(length=50), nullable=False),
        sa.Column('value', sa.Float(), nullable=False),
        sa.Column('unit', sa.String(length=20), nullable=False),
        sa.Column('timestamp', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    )
    op.create_index('ix_sensorReadings_sensorSnapshotUUID', 'sensorReadings', ['sensorSnapshotUUID'])

    op.create_table(
        'dtcLibrary',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('code', sa.String(length=5), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('severity', sa.Enum('low', 'medium', 'high', name='severity'), nullable=False),
        sa.Column('affectedSystem', sa.String(length=100), nullable=True),
        sa.Column('category', sa.String(length=100), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_dtcLibrary_code', 'dtcLibrary', ['code'], unique=True)

    op.create_table(
        'dtcInstances',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('diagnosticUUID', sa.String(length=36),
                  sa.ForeignKey('diagnostics.uuid', ondelete='CASCADE'), nullable=False),
        sa.Column('code', sa.String(length=5), sa.ForeignKey('dtcLibrary.code'), nullable=False),
        sa.Column('confirmed', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
    )
    op.create_index('ix_dtcInstances_diagnosticUUID', 'dtcInstances', ['diagnosticUUID'])

    op.create_table(
        'locations',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('vehicleUUID', sa.String(length=36),
                  sa.ForeignKey('vehicles.uuid', ondelete='CASCADE'), nullable=False),
        sa.Column('latitude', sa.Float(), nullable=False),
        sa.Column('longitude', sa.Float(), nullable=False),
        sa.Column('accuracy', sa.Float(), nullable=True),
        sa.Column('recordedAt', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_locations_vehicleUUID', 'locations', ['vehicleUUID'])

    op.create_table(
        'serviceWorkshops',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('address', sa.String(length=300), nullable=True),
        sa.Column('city', sa.String(length=100), nullable=True),
        sa.Column('country', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('website', sa.String(length=300), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'maintenanceLog',
        sa.Column('uuid', sa.String(length=36), primary_key=True, nullable=False),
        sa.Column('vehicleUUID', sa.String(length=36),
                  sa.ForeignKey('vehicles.uuid', ondelete='CASCADE'), nullable=False),
        sa.Column('serviceWorkshopUUID', sa.String(length=36),
                  sa.ForeignKey('serviceWorkshops.uuid', ondelete='CASCADE'), nullable=True),
        sa.Column('customServiceWorkshopName', sa.String(length=200), nullable=True),
        sa.Column('serviceDate', sa.TIMESTAMP(timezone=True), nullable=False),
        sa.Column('serviceType', sa.Enum(*SERVICE_TYPES, name='serviceType'), nullable=False),
        sa.Column('cost', sa.Float(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_maintenanceLog_vehicleUUID', 'maintenanceLog', ['vehicleUUID'])


def downgrade():
    op.drop_table('maintenanceLog')
    op.drop_table('serviceWorkshops')
    op.drop_table('locations')
    op.drop_table('dtcInstances')
    op.drop_table('dtcLibrary')
    op.drop_table('sensorReadings')
    op.drop_table('sensorSnapshots')
    op.drop_table('diagnostics')
    op.drop_table('ownershipTransfers')
    op.drop_table('vehicles')
    op.drop_table('users')
    for enum_name in ('serviceType', 'severity', 'source', 'role'):
        sa.Enum(name=enum_name).drop(op.get_bind(), checkfirst=True)
