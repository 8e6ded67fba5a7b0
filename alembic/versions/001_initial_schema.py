"""Initial schema: companies, subscriptions, accounts, users

Revision ID: 001_initial_schema
Revises:
Create Date: 2025-01-15

This migration creates:
1. companies table - tenants with branding and settings
2. subscriptions table - global plan catalog with per-entity create limits
3. accounts table - binds a company to its subscription
4. users table - company users, role constrained to admin/user/manager
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID, TIMESTAMP, JSONB


# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

# Schema name
SCHEMA = 'maintenance'


def _audit_columns():
    return [
        sa.Column('created_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('updated_at', TIMESTAMP(timezone=True), nullable=False, server_default=sa.text('now()')),
        sa.Column('deleted_at', TIMESTAMP(timezone=True), nullable=True),
    ]


def upgrade() -> None:
    op.execute(f'CREATE SCHEMA IF NOT EXISTS {SCHEMA}')

    # 1. companies
    op.create_table(
        'companies',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('logo', sa.String(500), nullable=True),
        sa.Column('branding', JSONB(), nullable=False),
        sa.Column('settings', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_audit_columns(),
        schema=SCHEMA
    )
    op.create_index('ix_companies_name', 'companies', ['name'], schema=SCHEMA)
    op.create_index('ix_companies_deleted_at', 'companies', ['deleted_at'], schema=SCHEMA)

    # 2. subscriptions
    op.create_table(
        'subscriptions',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('settings', JSONB(), nullable=False, server_default=sa.text("'[]'::jsonb")),
        *_audit_columns(),
        schema=SCHEMA
    )
    op.create_index('ix_subscriptions_name', 'subscriptions', ['name'], schema=SCHEMA)
    op.create_index('ix_subscriptions_deleted_at', 'subscriptions', ['deleted_at'], schema=SCHEMA)

    # 3. accounts
    op.create_table(
        'accounts',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('company_id', UUID(as_uuid=True), nullable=False),
        sa.Column('subscription_id', UUID(as_uuid=True), nullable=False),
        *_audit_columns(),
        sa.ForeignKeyConstraint(
            ['subscription_id'], [f'{SCHEMA}.subscriptions.id'],
            name='fk_accounts_subscription_id_subscriptions', ondelete='RESTRICT'
        ),
        schema=SCHEMA
    )
    op.create_index('ix_accounts_company_id', 'accounts', ['company_id'], schema=SCHEMA)
    op.create_index('ix_accounts_subscription_id', 'accounts', ['subscription_id'], schema=SCHEMA)
    op.create_index('ix_accounts_deleted_at', 'accounts', ['deleted_at'], schema=SCHEMA)

    # 4. users
    op.create_table(
        'users',
        sa.Column('id', UUID(as_uuid=True), primary_key=True, server_default=sa.text('gen_random_uuid()')),
        sa.Column('company_id', UUID(as_uuid=True), nullable=False),
        sa.Column('email', sa.String(255), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='user'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default='true'),
        sa.Column('email_verified', sa.Boolean(), nullable=False, server_default='false'),
        sa.Column('last_login_at', TIMESTAMP(timezone=True), nullable=True),
        sa.Column('preferences', JSONB(), nullable=False, server_default=sa.text("'{}'::jsonb")),
        *_audit_columns(),
        sa.CheckConstraint("role IN ('admin', 'user', 'manager')", name='ck_users_role'),
        schema=SCHEMA
    )
    op.create_index('ix_users_company_id', 'users', ['company_id'], schema=SCHEMA)
    op.create_index('ix_users_email', 'users', ['email'], schema=SCHEMA)
    op.create_index('ix_users_role', 'users', ['role'], schema=SCHEMA)
    op.create_index('ix_users_is_active', 'users', ['is_active'], schema=SCHEMA)
    op.create_index('ix_users_deleted_at', 'users', ['deleted_at'], schema=SCHEMA)

    # One live account per company
    op.create_index(
        'uq_accounts_company_id_live',
        'accounts',
        ['company_id'],
        unique=True,
        schema=SCHEMA,
        postgresql_where=sa.text('deleted_at IS NULL'),
    )

    # Email is unique among live users only
    op.create_index(
        'uq_users_email_live',
        'users',
        ['email'],
        unique=True,
        schema=SCHEMA,
        postgresql_where=sa.text('deleted_at IS NULL'),
    )


def downgrade() -> None:
    op.drop_table('users', schema=SCHEMA)
    op.drop_table('accounts', schema=SCHEMA)
    op.drop_table('subscriptions', schema=SCHEMA)
    op.drop_table('companies', schema=SCHEMA)
