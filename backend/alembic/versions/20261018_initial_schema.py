"""
Initial tour logistics schema.

Revision ID: 20261018_initial_schema
Revises:
Create Date: 2026-10-18
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa
from typing import Union

# revision identifiers, used by Alembic.
revision: str = '20261018_initial_schema'
down_revision: Union[str, None] = None
branch_labels = None
depends_on = None


def _timestamps() -> list:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def _id() -> sa.Column:
    return sa.Column('id', sa.String(length=36), primary_key=True)


def upgrade() -> None:
    op.create_table(
        'users',
        _id(),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=True),
        sa.Column('role', sa.Enum('client', 'agent', 'admin', name='user_role'), nullable=False),
        sa.Column('status', sa.Enum('invited', 'active', name='user_status'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'artists',
        _id(),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_table(
        'artist_assignments',
        _id(),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('artist_id', sa.String(length=36), sa.ForeignKey('artists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('user_id', 'artist_id', name='uq_artist_assignment'),
    )
    op.create_index('ix_artist_assignments_user_id', 'artist_assignments', ['user_id'])
    op.create_index('ix_artist_assignments_artist_id', 'artist_assignments', ['artist_id'])

    op.create_table(
        'projects',
        _id(),
        sa.Column('artist_id', sa.String(length=36), sa.ForeignKey('artists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('type', sa.Enum('tour', 'event', name='project_type'), nullable=False),
        sa.Column('start_date', sa.Date(), nullable=True),
        sa.Column('end_date', sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_projects_artist_id', 'projects', ['artist_id'])

    op.create_table(
        'legs',
        _id(),
        sa.Column('project_id', sa.String(length=36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('label', sa.String(), nullable=True),
        sa.Column('origin_city', sa.String(), nullable=True),
        sa.Column('destination_city', sa.String(), nullable=True),
        sa.Column('departure_date', sa.Date(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_legs_project_id', 'legs', ['project_id'])

    op.create_table(
        'tour_personnel',
        _id(),
        sa.Column('project_id', sa.String(length=36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('full_name', sa.String(), nullable=False),
        sa.Column('email', sa.String(), nullable=True),
        sa.Column('role_title', sa.String(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_tour_personnel_project_id', 'tour_personnel', ['project_id'])

    op.create_table(
        'leg_passengers',
        _id(),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('passenger_id', sa.String(length=36), sa.ForeignKey('tour_personnel.id', ondelete='CASCADE'), nullable=False),
        sa.Column('treat_as_individual', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.UniqueConstraint('leg_id', 'passenger_id', name='uq_leg_passenger'),
    )
    op.create_index('ix_leg_passengers_leg_id', 'leg_passengers', ['leg_id'])

    op.create_table(
        'options',
        _id(),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('price_total', sa.Numeric(12, 2), nullable=True),
        sa.Column('price_currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('is_recommended', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('source', sa.Enum('manual', 'navitas', name='option_source'), nullable=False),
        sa.Column('reference', sa.String(length=6), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_options_leg_id', 'options', ['leg_id'])

    op.create_table(
        'option_segments',
        _id(),
        sa.Column('option_id', sa.String(length=36), sa.ForeignKey('options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('segment_order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('airline_iata', sa.String(length=5), nullable=False),
        sa.Column('flight_number', sa.String(length=8), nullable=False),
        sa.Column('departure_date_raw', sa.String(length=8), nullable=True),
        sa.Column('origin_iata', sa.String(length=3), nullable=False),
        sa.Column('destination_iata', sa.String(length=3), nullable=False),
        sa.Column('dep_time_local', sa.Integer(), nullable=True),
        sa.Column('arr_time_local', sa.Integer(), nullable=True),
        sa.Column('day_offset', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('duration_minutes', sa.Integer(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_option_segments_option_id', 'option_segments', ['option_id'])

    op.create_table(
        'selection_groups',
        _id(),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('type', sa.Enum('individual', 'group', name='selection_group_type'), nullable=False),
        sa.Column('passenger_ids', sa.JSON(), nullable=False),
        sa.Column('label', sa.String(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_selection_groups_leg_id', 'selection_groups', ['leg_id'])

    op.create_table(
        'selections',
        _id(),
        sa.Column('selection_group_id', sa.String(length=36), sa.ForeignKey('selection_groups.id', ondelete='CASCADE'), nullable=False),
        sa.Column('option_id', sa.String(length=36), sa.ForeignKey('options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('selected_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('price_snapshot', sa.Numeric(12, 2), nullable=True),
        sa.Column('currency', sa.String(length=3), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('selected_at', sa.DateTime(), nullable=False),
        sa.Column('confirmed_at', sa.DateTime(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_selections_selection_group_id', 'selections', ['selection_group_id'])
    op.create_index('ix_selections_option_id', 'selections', ['option_id'])
    # At most one active selection per group
    op.create_index(
        'uq_selections_active_group',
        'selections',
        ['selection_group_id'],
        unique=True,
        sqlite_where=sa.text('is_active = 1'),
        postgresql_where=sa.text('is_active'),
    )

    op.create_table(
        'holds',
        _id(),
        sa.Column('option_id', sa.String(length=36), sa.ForeignKey('options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('passenger_id', sa.String(length=36), sa.ForeignKey('tour_personnel.id', ondelete='CASCADE'), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_holds_option_id', 'holds', ['option_id'])
    op.create_index('ix_holds_passenger_id', 'holds', ['passenger_id'])
    op.create_index('ix_holds_expires_at', 'holds', ['expires_at'])

    op.create_table(
        'ticketings',
        _id(),
        sa.Column('option_id', sa.String(length=36), sa.ForeignKey('options.id', ondelete='CASCADE'), nullable=False),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('passenger_id', sa.String(length=36), sa.ForeignKey('tour_personnel.id', ondelete='CASCADE'), nullable=False),
        sa.Column('pnr', sa.String(length=6), nullable=False),
        sa.Column('price_paid', sa.Numeric(12, 2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False, server_default='USD'),
        sa.Column('ticketed_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('ticketed_at', sa.DateTime(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint('leg_id', 'passenger_id', name='uq_ticketing_leg_passenger'),
    )
    op.create_index('ix_ticketings_option_id', 'ticketings', ['option_id'])
    op.create_index('ix_ticketings_leg_id', 'ticketings', ['leg_id'])

    op.create_table(
        'tour_documents',
        _id(),
        sa.Column('project_id', sa.String(length=36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=False),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('passenger_id', sa.String(length=36), sa.ForeignKey('tour_personnel.id', ondelete='SET NULL'), nullable=True),
        sa.Column('kind', sa.Enum('itinerary', 'invoice', 'eticket', 'other', name='document_kind'), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('file_path', sa.String(), nullable=False),
        sa.Column('uploaded_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('uploaded_at', sa.DateTime(), nullable=False),
        sa.Column('is_current', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
    )
    op.create_index(
        'ix_tour_documents_project_kind_uploaded', 'tour_documents', ['project_id', 'kind', 'uploaded_at']
    )

    op.create_table(
        'notification_events',
        _id(),
        sa.Column(
            'type',
            sa.Enum(
                'client_selection',
                'hold_expiring',
                'chat_message',
                'document_uploaded',
                'budget_updated',
                name='notification_type',
            ),
            nullable=False,
        ),
        sa.Column('severity', sa.Enum('info', 'warning', 'critical', name='notification_severity'), nullable=False),
        sa.Column('artist_id', sa.String(length=36), sa.ForeignKey('artists.id', ondelete='CASCADE'), nullable=False),
        sa.Column('project_id', sa.String(length=36), sa.ForeignKey('projects.id', ondelete='CASCADE'), nullable=True),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), nullable=True),
        sa.Column('actor_user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('title', sa.String(), nullable=False),
        sa.Column('body', sa.Text(), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_notification_events_artist_created', 'notification_events', ['artist_id', 'created_at'])

    op.create_table(
        'notification_reads',
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('event_id', sa.String(length=36), sa.ForeignKey('notification_events.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('read_at', sa.DateTime(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'chat_messages',
        _id(),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), nullable=False),
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('sender_role', sa.String(length=16), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        *_timestamps(),
    )
    op.create_index('ix_chat_messages_leg_created', 'chat_messages', ['leg_id', 'created_at'])

    op.create_table(
        'chat_reads',
        sa.Column('user_id', sa.String(length=36), sa.ForeignKey('users.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('leg_id', sa.String(length=36), sa.ForeignKey('legs.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('last_read_at', sa.DateTime(), nullable=False),
        *_timestamps(),
    )

    op.create_table(
        'invites',
        _id(),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('role', sa.Enum('client', 'agent', 'admin', name='invite_role'), nullable=False),
        sa.Column('artist_ids', sa.JSON(), nullable=False),
        sa.Column('token', sa.String(length=64), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('accepted_at', sa.DateTime(), nullable=True),
        sa.Column('created_by', sa.String(length=36), sa.ForeignKey('users.id'), nullable=True),
        *_timestamps(),
    )
    op.create_index('ix_invites_email', 'invites', ['email'])
    op.create_index('ix_invites_token', 'invites', ['token'], unique=True)


def downgrade() -> None:
    for table in (
        'invites',
        'chat_reads',
        'chat_messages',
        'notification_reads',
        'notification_events',
        'tour_documents',
        'ticketings',
        'holds',
        'selections',
        'selection_groups',
        'option_segments',
        'options',
        'leg_passengers',
        'tour_personnel',
        'legs',
        'projects',
        'artist_assignments',
        'artists',
        'users',
    ):
        op.drop_table(table)
    bind = op.get_bind()
    if bind.dialect.name == 'postgresql':
        for enum_name in (
            'invite_role',
            'notification_severity',
            'notification_type',
            'document_kind',
            'selection_group_type',
            'option_source',
            'project_type',
            'user_status',
            'user_role',
        ):
            sa.Enum(name=enum_name).drop(bind, checkfirst=True)
