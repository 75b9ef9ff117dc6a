"""Initial schema: users, drafts and the history collections

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19

Compatible with both SQLite and PostgreSQL:
- CURRENT_TIMESTAMP server defaults
- Status enums stored as VARCHAR (native_enum=False in models)
- JSON columns for the loose form and analysis payloads
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '0001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _history_columns():
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(length=36), nullable=False),
        sa.Column('draft_id', sa.String(length=36), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
    ]


def _history_constraints():
    return [
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade() -> None:
    op.create_table('users',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password', sa.String(length=255), nullable=False),
        sa.Column('first_name', sa.String(length=255), nullable=False),
        sa.Column('last_name', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.Column('updated_at', sa.DateTime(), server_default=sa.text('CURRENT_TIMESTAMP'), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_users_email'), 'users', ['email'], unique=True)

    op.create_table('drafts',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(length=36), nullable=False),
        sa.Column('form_data', sa.JSON(), nullable=False),
        sa.Column('compliance_data', sa.JSON(), nullable=True),
        sa.Column('route_data', sa.JSON(), nullable=True),
        sa.Column('carbon_analysis_data', sa.JSON(), nullable=True),
        sa.Column('product_analysis_data', sa.JSON(), nullable=True),
        sa.Column('map_data', sa.JSON(), nullable=True),
        sa.Column('compliance_status', sa.String(length=20), nullable=False),
        sa.Column('route_optimization_status', sa.String(length=20), nullable=False),
        sa.Column('timestamp', sa.DateTime(), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=True),
        sa.ForeignKeyConstraint(['owner_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_drafts_owner_id'), 'drafts', ['owner_id'], unique=False)
    op.create_index(op.f('ix_drafts_compliance_status'), 'drafts', ['compliance_status'], unique=False)
    op.create_index(op.f('ix_drafts_route_optimization_status'), 'drafts', ['route_optimization_status'], unique=False)
    op.create_index(op.f('ix_drafts_timestamp'), 'drafts', ['timestamp'], unique=False)
    op.create_index(op.f('ix_drafts_expires_at'), 'drafts', ['expires_at'], unique=False)

    op.create_table('compliance_records',
        *_history_columns(),
        sa.Column('form_data', sa.JSON(), nullable=False),
        sa.Column('compliance_response', sa.JSON(), nullable=False),
        sa.Column('record_type', sa.String(length=50), nullable=False),
        *_history_constraints()
    )
    op.create_table('saved_routes',
        *_history_columns(),
        sa.Column('form_data', sa.JSON(), nullable=False),
        sa.Column('route_data', sa.JSON(), nullable=False),
        *_history_constraints()
    )
    op.create_table('product_analyses',
        *_history_columns(),
        sa.Column('image_details', sa.JSON(), nullable=False),
        sa.Column('vision_response', sa.JSON(), nullable=False),
        sa.Column('ai_response', sa.JSON(), nullable=False),
        *_history_constraints()
    )
    for table in ('compliance_records', 'saved_routes', 'product_analyses'):
        op.create_index(op.f(f'ix_{table}_owner_id'), table, ['owner_id'], unique=False)
        op.create_index(op.f(f'ix_{table}_timestamp'), table, ['timestamp'], unique=False)


def downgrade() -> None:
    for table in ('product_analyses', 'saved_routes', 'compliance_records'):
        op.drop_index(op.f(f'ix_{table}_timestamp'), table_name=table)
        op.drop_index(op.f(f'ix_{table}_owner_id'), table_name=table)
        op.drop_table(table)
    for column in ('expires_at', 'timestamp', 'route_optimization_status', 'compliance_status', 'owner_id'):
        op.drop_index(op.f(f'ix_drafts_{column}'), table_name='drafts')
    op.drop_table('drafts')
    op.drop_index(op.f('ix_users_email'), table_name='users')
    op.drop_table('users')
