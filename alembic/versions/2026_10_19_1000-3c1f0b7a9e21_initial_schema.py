"""initial_schema

Revision ID: 3c1f0b7a9e21
Revises:
Create Date: 2026-10-19 10:00:00.000000+00:00

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision = '3c1f0b7a9e21'
down_revision = None
branch_labels = None
depends_on = None

JSON_LIST = sa.JSON().with_variant(postgresql.JSONB(), 'postgresql')


def _common_columns():
    return [
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        *_common_columns(),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('role', sa.String(length=40), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_users_id'), 'users', ['id'], unique=False)
    op.create_index(op.f('ix_users_username'), 'users', ['username'], unique=True)

    op.create_table(
        'profiles',
        *_common_columns(),
        sa.Column('user_id', sa.String(length=36), nullable=False),
        sa.Column('first_name', sa.String(length=150), nullable=True),
        sa.Column('last_name', sa.String(length=150), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('company_name', sa.String(length=255), nullable=True),
        sa.Column('company_description', sa.Text(), nullable=True),
        sa.Column('business_sector', sa.String(length=150), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id'),
    )
    op.create_index(op.f('ix_profiles_id'), 'profiles', ['id'], unique=False)

    op.create_table(
        'municipalities',
        *_common_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('department', sa.String(length=150), nullable=False),
        sa.Column('region', sa.String(length=150), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('institution_type', sa.String(length=40), nullable=False),
        sa.Column('primary_color', sa.String(length=20), nullable=True),
        sa.Column('secondary_color', sa.String(length=20), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_municipalities_id'), 'municipalities', ['id'], unique=False)
    op.create_index(op.f('ix_municipalities_name'), 'municipalities', ['name'], unique=False)

    op.create_table(
        'companies',
        *_common_columns(),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('business_sector', sa.String(length=150), nullable=True),
        sa.Column('company_size', sa.String(length=50), nullable=True),
        sa.Column('founded_year', sa.Integer(), nullable=True),
        sa.Column('website', sa.String(length=500), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=50), nullable=True),
        sa.Column('address', sa.String(length=500), nullable=True),
        sa.Column('username', sa.String(length=150), nullable=False),
        sa.Column('login_email', sa.String(length=255), nullable=False),
        sa.Column('password_hash', sa.String(length=255), nullable=False),
        sa.Column('municipality_id', sa.String(length=36), nullable=False),
        sa.Column('created_by', sa.String(length=36), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.ForeignKeyConstraint(['municipality_id'], ['municipalities.id']),
        sa.ForeignKeyConstraint(['created_by'], ['users.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_companies_id'), 'companies', ['id'], unique=False)
    op.create_index(op.f('ix_companies_name'), 'companies', ['name'], unique=False)
    op.create_index(op.f('ix_companies_username'), 'companies', ['username'], unique=True)
    op.create_index(op.f('ix_companies_login_email'), 'companies', ['login_email'], unique=True)
    op.create_index(op.f('ix_companies_municipality_id'), 'companies', ['municipality_id'], unique=False)

    op.create_table(
        'job_offers',
        *_common_columns(),
        sa.Column('title', sa.String(length=500), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('requirements', sa.Text(), nullable=False),
        sa.Column('location', sa.String(length=255), nullable=False),
        sa.Column('category', sa.String(length=150), nullable=True),
        sa.Column('contract_type', sa.String(length=30), nullable=False),
        sa.Column('work_schedule', sa.String(length=255), nullable=False),
        sa.Column('work_modality', sa.String(length=30), nullable=False),
        sa.Column('experience_level', sa.String(length=30), nullable=False),
        sa.Column('municipality', sa.String(length=255), nullable=False),
        sa.Column('department', sa.String(length=150), nullable=True),
        sa.Column('skills_required', JSON_LIST, nullable=True),
        sa.Column('desired_skills', JSON_LIST, nullable=True),
        sa.Column('benefits', JSON_LIST, nullable=True),
        sa.Column('images', JSON_LIST, nullable=True),
        sa.Column('salary_min', sa.Float(), nullable=True),
        sa.Column('salary_max', sa.Float(), nullable=True),
        sa.Column('salary_currency', sa.String(length=10), nullable=True),
        sa.Column('application_deadline', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('featured', sa.Boolean(), nullable=False),
        sa.Column('published_at', sa.DateTime(), nullable=False),
        sa.Column('view_count', sa.Integer(), nullable=True),
        sa.Column('application_count', sa.Integer(), nullable=True),
        sa.Column('company_id', sa.String(length=36), nullable=False),
        sa.ForeignKeyConstraint(['company_id'], ['companies.id']),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index(op.f('ix_job_offers_id'), 'job_offers', ['id'], unique=False)
    op.create_index(op.f('ix_job_offers_title'), 'job_offers', ['title'], unique=False)
    op.create_index(op.f('ix_job_offers_category'), 'job_offers', ['category'], unique=False)
    op.create_index(op.f('ix_job_offers_municipality'), 'job_offers', ['municipality'], unique=False)
    op.create_index(op.f('ix_job_offers_status'), 'job_offers', ['status'], unique=False)
    op.create_index(op.f('ix_job_offers_is_active'), 'job_offers', ['is_active'], unique=False)
    op.create_index(op.f('ix_job_offers_company_id'), 'job_offers', ['company_id'], unique=False)


def downgrade() -> None:
    op.drop_table('job_offers')
    op.drop_table('companies')
    op.drop_table('municipalities')
    op.drop_table('profiles')
    op.drop_table('users')
