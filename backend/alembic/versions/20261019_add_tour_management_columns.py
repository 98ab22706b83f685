"""
Add tour management columns to projects, legs and tour_personnel.

Revision ID: 20261019_tour_management
Revises: 20261018_initial_schema
Create Date: 2026-10-19
"""

from __future__ import annotations

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '20261019_tour_management'
down_revision: Union[str, None] = '20261018_initial_schema'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    with op.batch_alter_table('projects') as batch:
        batch.add_column(sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()))
        batch.add_column(sa.Column('created_by', sa.String(length=36), nullable=True))
        batch.create_foreign_key('fk_projects_created_by', 'users', ['created_by'], ['id'])

    with op.batch_alter_table('legs') as batch:
        batch.add_column(sa.Column('arrival_date', sa.Date(), nullable=True))
        batch.add_column(sa.Column('leg_order', sa.Integer(), nullable=False, server_default='1'))
        batch.add_column(sa.Column('created_by', sa.String(length=36), nullable=True))
        batch.create_foreign_key('fk_legs_created_by', 'users', ['created_by'], ['id'])

    personnel_status = sa.Enum('active', 'inactive', name='personnel_status')
    personnel_status.create(op.get_bind(), checkfirst=True)

    with op.batch_alter_table('tour_personnel') as batch:
        batch.add_column(sa.Column('party', sa.String(length=16), nullable=False, server_default='A Party'))
        batch.add_column(sa.Column('phone', sa.String(length=40), nullable=True))
        batch.add_column(sa.Column('seat_pref', sa.String(length=40), nullable=True))
        batch.add_column(sa.Column('ff_numbers', sa.String(length=200), nullable=True))
        batch.add_column(sa.Column('notes', sa.Text(), nullable=True))
        batch.add_column(
            sa.Column(
                'status',
                personnel_status,
                nullable=False,
                server_default='active',
            )
        )
        batch.add_column(sa.Column('created_by', sa.String(length=36), nullable=True))
        batch.create_foreign_key('fk_tour_personnel_created_by', 'users', ['created_by'], ['id'])


def downgrade() -> None:
    with op.batch_alter_table('tour_personnel') as batch:
        batch.drop_constraint('fk_tour_personnel_created_by', type_='foreignkey')
        for column in ('created_by', 'status', 'notes', 'ff_numbers', 'seat_pref', 'phone', 'party'):
            batch.drop_column(column)

    with op.batch_alter_table('legs') as batch:
        batch.drop_constraint('fk_legs_created_by', type_='foreignkey')
        for column in ('created_by', 'leg_order', 'arrival_date'):
            batch.drop_column(column)

    with op.batch_alter_table('projects') as batch:
        batch.drop_constraint('fk_projects_created_by', type_='foreignkey')
        batch.drop_column('created_by')
        batch.drop_column('is_active')

    sa.Enum(name='personnel_status').drop(op.get_bind(), checkfirst=True)
