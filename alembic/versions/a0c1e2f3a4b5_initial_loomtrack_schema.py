"""initial_loomtrack_schema

Revision ID: a0c1e2f3a4b5
Revises:
Create Date: 2026-10-19 09:00:00.000000

초기 스키마 생성: users, looms, shifts, shift_summaries, sensor_readings.
Create the initial schema: users, looms, shifts, shift_summaries, sensor_readings.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID


# revision identifiers, used by Alembic.
revision: str = 'a0c1e2f3a4b5'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # users — 관리자/직공 계정
    # Admin and weaver accounts
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), server_default='weaver', nullable=False),
        sa.Column('is_active', sa.Boolean(), server_default=sa.text('true'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # looms — 직기 및 현재 가동 세션
    # Looms and their current run session
    op.create_table(
        'looms',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('loom_code', sa.String(64), nullable=False, unique=True),
        sa.Column('run_status', sa.String(20), server_default='stopped', nullable=False),
        sa.Column('running_since', sa.DateTime(), nullable=True),
        sa.Column('current_weaver_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # shifts — 직기별 근무 배정 (공장 현지 시각)
    # Weaver-to-loom shift assignments (facility local time)
    op.create_table(
        'shifts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('loom_id', UUID(as_uuid=True), sa.ForeignKey('looms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('weaver_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_type', sa.String(20), nullable=False),
        sa.Column('scheduled_date', sa.Date(), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('completed', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('attendance_marked', sa.Boolean(), server_default=sa.text('false'), nullable=False),
        sa.Column('actual_start_time', sa.DateTime(), nullable=True),
        sa.Column('actual_end_time', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # 미완료 근무 슬롯 유니크 — One open shift per loom+date+type
    op.create_index(
        'uq_shift_open_slot',
        'shifts',
        ['loom_id', 'scheduled_date', 'shift_type'],
        unique=True,
        postgresql_where=sa.text('NOT completed'),
    )
    op.create_index('ix_shifts_weaver_date', 'shifts', ['weaver_id', 'scheduled_date'])
    op.create_index('ix_shifts_open_end', 'shifts', ['completed', 'end_time'])

    # shift_summaries — 종료 근무 스냅샷 (근무당 1건)
    # Closed-shift totals, written once per shift
    op.create_table(
        'shift_summaries',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('shift_id', UUID(as_uuid=True), sa.ForeignKey('shifts.id', ondelete='CASCADE'), nullable=False, unique=True),
        sa.Column('loom_id', UUID(as_uuid=True), sa.ForeignKey('looms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('weaver_id', UUID(as_uuid=True), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('shift_type', sa.String(20), nullable=False),
        sa.Column('total_energy', sa.Float(), server_default='0', nullable=False),
        sa.Column('total_production', sa.Float(), server_default='0', nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )

    # sensor_readings — 누적 센서 측정값
    # Cumulative loom sensor readings
    op.create_table(
        'sensor_readings',
        sa.Column('id', UUID(as_uuid=True), primary_key=True),
        sa.Column('loom_id', UUID(as_uuid=True), sa.ForeignKey('looms.id', ondelete='CASCADE'), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('production', sa.Float(), server_default='0', nullable=False),
        sa.Column('energy', sa.Float(), server_default='0', nullable=False),
    )
    op.create_index('ix_sensor_readings_loom_ts', 'sensor_readings', ['loom_id', 'timestamp'])


def downgrade() -> None:
    op.drop_index('ix_sensor_readings_loom_ts', table_name='sensor_readings')
    op.drop_table('sensor_readings')
    op.drop_table('shift_summaries')
    op.drop_index('ix_shifts_open_end', table_name='shifts')
    op.drop_index('ix_shifts_weaver_date', table_name='shifts')
    op.drop_index('uq_shift_open_slot', table_name='shifts')
    op.drop_table('shifts')
    op.drop_table('looms')
    op.drop_table('users')
