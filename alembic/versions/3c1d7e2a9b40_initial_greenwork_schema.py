"""initial_greenwork_schema

Revision ID: 3c1d7e2a9b40
Revises:
Create Date: 2026-03-02 10:14:21.583311

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = '3c1d7e2a9b40'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ENUM_TYPES = (
    'season_mode_enum',
    'staff_role_enum',
    'tree_origin_enum',
    'attribution_scope_enum',
    'maintenance_task_type_enum',
    'maintenance_task_status_enum',
    'task_review_state_enum',
    'task_priority_enum',
    'task_event_type_enum',
    'alert_activity_enum',
    'schedule_tone_enum',
    'alert_status_enum',
    'pipeline_status_enum',
)


def upgrade() -> None:
    op.create_table(
        'green_projects',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('location_text', sa.Text(), nullable=True),
        sa.Column('sponsor', sa.String(length=200), nullable=True),
        sa.Column('season_mode', sa.Enum('rainy', 'dry', name='season_mode_enum'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )

    op.create_table(
        'green_staff',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('full_name', sa.String(length=150), nullable=False),
        sa.Column(
            'role',
            sa.Enum('field_officer', 'supervisor', 'manager', name='staff_role_enum'),
            nullable=False,
        ),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_green_staff_full_name'), 'green_staff', ['full_name'], unique=True)

    op.create_table(
        'species_maturity',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('species_key', sa.String(length=120), nullable=False),
        sa.Column('species_label', sa.String(length=200), nullable=True),
        sa.Column('maturity_years', sa.Integer(), nullable=False),
        sa.Column('updated_by', sa.String(length=150), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['green_projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('project_id', 'species_key', name='uq_species_maturity_project_species'),
    )
    op.create_index(op.f('ix_species_maturity_project_id'), 'species_maturity', ['project_id'])

    op.create_table(
        'green_trees',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('species', sa.String(length=200), nullable=True),
        sa.Column('status', sa.String(length=50), nullable=False),
        sa.Column('planting_date', sa.Date(), nullable=True),
        sa.Column('lat', sa.Float(), nullable=True),
        sa.Column('lng', sa.Float(), nullable=True),
        sa.Column('tree_height_m', sa.Float(), nullable=True),
        sa.Column(
            'tree_origin',
            sa.Enum('new_planting', 'existing_inventory', 'natural_regeneration', name='tree_origin_enum'),
            nullable=False,
        ),
        sa.Column(
            'attribution_scope',
            sa.Enum('full', 'monitor_only', name='attribution_scope_enum'),
            nullable=False,
        ),
        sa.Column('count_in_planting_kpis', sa.Boolean(), nullable=False),
        sa.Column('count_in_carbon_scope', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.String(length=150), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['project_id'], ['green_projects.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_green_trees_project_id'), 'green_trees', ['project_id'])
    op.create_index(op.f('ix_green_trees_created_by'), 'green_trees', ['created_by'])

    op.create_table(
        'maintenance_tasks',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tree_id', sa.Integer(), nullable=False),
        sa.Column(
            'task_type',
            sa.Enum(
                'watering', 'weeding', 'protection', 'inspection', 'replacement',
                name='maintenance_task_type_enum',
            ),
            nullable=False,
        ),
        sa.Column('assignee_name', sa.String(length=150), nullable=False),
        sa.Column(
            'status',
            sa.Enum('open', 'pending', 'done', 'completed', 'closed', name='maintenance_task_status_enum'),
            nullable=False,
        ),
        sa.Column(
            'review_state',
            sa.Enum('none', 'submitted', 'approved', 'rejected', name='task_review_state_enum'),
            nullable=True,
        ),
        sa.Column('priority', sa.Enum('low', 'normal', 'high', name='task_priority_enum'), nullable=False),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('model_season', sa.String(length=10), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('photo_url', sa.String(length=500), nullable=True),
        sa.Column('reported_tree_status', sa.String(length=50), nullable=True),
        sa.Column('review_notes', sa.Text(), nullable=True),
        sa.Column('reviewed_by', sa.String(length=150), nullable=True),
        sa.Column('submitted_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tree_id'], ['green_trees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_maintenance_tasks_tree_id'), 'maintenance_tasks', ['tree_id'])
    op.create_index(op.f('ix_maintenance_tasks_assignee_name'), 'maintenance_tasks', ['assignee_name'])
    op.create_index(op.f('ix_maintenance_tasks_due_date'), 'maintenance_tasks', ['due_date'])

    op.create_table(
        'task_events',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('tree_id', sa.Integer(), nullable=False),
        sa.Column('task_id', sa.Integer(), nullable=True),
        sa.Column(
            'event_type',
            sa.Enum(
                'assigned', 'submitted', 'approved', 'rejected', 'reopened', 'tree_status_changed',
                name='task_event_type_enum',
            ),
            nullable=False,
        ),
        sa.Column('actor_name', sa.String(length=150), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('details', sa.JSON(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['tree_id'], ['green_trees.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['task_id'], ['maintenance_tasks.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_task_events_tree_id'), 'task_events', ['tree_id'])
    op.create_index(op.f('ix_task_events_task_id'), 'task_events', ['task_id'])
    op.create_index(op.f('ix_task_events_created_at'), 'task_events', ['created_at'])

    op.create_table(
        'maintenance_alerts',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('project_id', sa.Integer(), nullable=False),
        sa.Column('tree_id', sa.Integer(), nullable=False),
        sa.Column(
            'activity',
            sa.Enum(
                'watering', 'weeding', 'protection', 'inspection', 'replacement',
                name='alert_activity_enum',
            ),
            nullable=False,
        ),
        sa.Column(
            'tone',
            sa.Enum('danger', 'warning', 'info', 'ok', name='schedule_tone_enum'),
            nullable=False,
        ),
        sa.Column('message', sa.String(length=300), nullable=False),
        sa.Column('detail', sa.Text(), nullable=True),
        sa.Column('due_date', sa.Date(), nullable=True),
        sa.Column('status', sa.Enum('open', 'resolved', name='alert_status_enum'), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('resolved_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['project_id'], ['green_projects.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['tree_id'], ['green_trees.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_maintenance_alerts_project_id'), 'maintenance_alerts', ['project_id'])
    op.create_index(op.f('ix_maintenance_alerts_tree_id'), 'maintenance_alerts', ['tree_id'])
    op.create_index(op.f('ix_maintenance_alerts_status'), 'maintenance_alerts', ['status'])

    op.create_table(
        'pipeline_runs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('pipeline_name', sa.String(length=100), nullable=False),
        sa.Column(
            'status',
            sa.Enum('running', 'success', 'failed', 'skipped', name='pipeline_status_enum'),
            nullable=False,
        ),
        sa.Column('started_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('finished_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('duration_ms', sa.Integer(), nullable=True),
        sa.Column('records_processed', sa.Integer(), nullable=True),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_pipeline_runs_pipeline_name'), 'pipeline_runs', ['pipeline_name'])

    op.create_table(
        'api_request_logs',
        sa.Column('id', sa.Integer(), nullable=False),
        sa.Column('timestamp', sa.DateTime(timezone=True), nullable=False),
        sa.Column('method', sa.String(length=10), nullable=False),
        sa.Column('endpoint', sa.String(length=255), nullable=False),
        sa.Column('status_code', sa.Integer(), nullable=False),
        sa.Column('latency_ms', sa.Integer(), nullable=False),
        sa.Column('ip_address', sa.String(length=45), nullable=True),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_api_request_logs_timestamp'), 'api_request_logs', ['timestamp'])


def downgrade() -> None:
    op.drop_table('api_request_logs')
    op.drop_table('pipeline_runs')
    op.drop_table('maintenance_alerts')
    op.drop_table('task_events')
    op.drop_table('maintenance_tasks')
    op.drop_table('green_trees')
    op.drop_table('species_maturity')
    op.drop_table('green_staff')
    op.drop_table('green_projects')

    for enum_name in ENUM_TYPES:
        op.execute(f"DROP TYPE IF EXISTS {enum_name}")
