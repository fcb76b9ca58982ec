"""create contribution tables

Revision ID: 3c1f9a27b604
Revises:
Create Date: 2025-06-01 09:12:40

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3c1f9a27b604'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _contribution_columns(owner_column: str, owner_table: str) -> list:
    contribution_status = sa.Enum('PENDING', 'PAID', name='contribution_status', create_type=False)
    return [
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(owner_column, sa.Integer(), nullable=False),
        sa.Column('period', sa.Date(), nullable=False),
        sa.Column('amount_due', sa.Integer(), nullable=False),
        sa.Column('amount_paid', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('penalty_amount', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('status', contribution_status, nullable=False, server_default='PENDING'),
        sa.Column('payment_date', sa.Date(), nullable=True),
        sa.Column('payment_mode', sa.String(length=20), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint([owner_column], [f'{owner_table}.id']),
        sa.PrimaryKeyConstraint('id'),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('role', sa.Enum('AUDITOR', 'TREASURER', 'ADMIN', name='role'), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'team_members',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('position', sa.String(length=100), nullable=True),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_team_members_is_active', 'team_members', ['is_active'])

    op.create_table(
        'adherents',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('phone', sa.String(length=30), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_adherents_is_active', 'adherents', ['is_active'])

    sa.Enum('PENDING', 'PAID', name='contribution_status').create(op.get_bind(), checkfirst=True)

    op.create_table(
        'team_member_contributions',
        *_contribution_columns('team_member_id', 'team_members'),
        sa.UniqueConstraint('team_member_id', 'period', name='uq_team_member_contributions_member_period'),
    )
    op.create_index('ix_team_member_contributions_period', 'team_member_contributions', ['period'])

    op.create_table(
        'adherent_contributions',
        *_contribution_columns('adherent_id', 'adherents'),
        sa.UniqueConstraint('adherent_id', 'period', name='uq_adherent_contributions_member_period'),
    )
    op.create_index('ix_adherent_contributions_period', 'adherent_contributions', ['period'])

    op.create_table(
        'transactions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('reference', sa.String(length=30), nullable=False),
        sa.Column('type', sa.Enum('INCOME', 'EXPENSE', name='transaction_type'), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('transaction_date', sa.Date(), nullable=False),
        sa.Column('payment_mode', sa.String(length=20), nullable=False),
        sa.Column('created_by', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('reference'),
    )


def downgrade() -> None:
    op.drop_table('transactions')
    op.drop_index('ix_adherent_contributions_period', table_name='adherent_contributions')
    op.drop_table('adherent_contributions')
    op.drop_index('ix_team_member_contributions_period', table_name='team_member_contributions')
    op.drop_table('team_member_contributions')
    sa.Enum(name='contribution_status').drop(op.get_bind(), checkfirst=True)
    op.drop_index('ix_adherents_is_active', table_name='adherents')
    op.drop_table('adherents')
    op.drop_index('ix_team_members_is_active', table_name='team_members')
    op.drop_table('team_members')
    op.drop_index('ix_users_email', table_name='users')
    op.drop_table('users')
