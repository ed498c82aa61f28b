"""Create initial tables

Revision ID: initial_schema
Revises: 
Create Date: 2026-10-18 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = 'initial_schema'
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
    ]


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('username', sa.String(50), nullable=False),
        sa.Column('email', sa.String(100), nullable=False),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('role', sa.String(20), nullable=False, server_default='admin'),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        *_timestamps(),
        sa.UniqueConstraint('email', name='uq_users_email'),
    )
    op.create_index('ix_users_username', 'users', ['username'], unique=True)

    op.create_table(
        'students',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('nisn', sa.String(20), nullable=False),
        sa.Column('class_name', sa.String(10), nullable=False),
        sa.Column('is_graduated', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('average_score', sa.Numeric(5, 2), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('nisn', name='uq_students_nisn'),
    )
    op.create_index('idx_students_name', 'students', ['name'])
    op.create_index('idx_students_is_graduated', 'students', ['is_graduated'])

    op.create_table(
        'school_info',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(100), nullable=True),
        sa.Column('principal', sa.String(100), nullable=True),
        sa.Column('academic_year', sa.String(20), nullable=True),
        sa.Column('about', sa.Text(), nullable=True),
        sa.Column('vision', sa.Text(), nullable=True),
        sa.Column('mission', sa.Text(), nullable=True),
        sa.Column('logo_url', sa.String(500), nullable=True),
        *_timestamps(),
    )

    op.create_table(
        'news_categories',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('slug', sa.String(100), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('color', sa.String(7), nullable=False, server_default='#007bff'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('CURRENT_TIMESTAMP')),
        sa.UniqueConstraint('name', name='uq_news_categories_name'),
        sa.UniqueConstraint('slug', name='uq_news_categories_slug'),
    )

    op.create_table(
        'news',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('slug', sa.String(255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('excerpt', sa.Text(), nullable=True),
        sa.Column('featured_image', sa.String(500), nullable=True),
        sa.Column('author_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='SET NULL'), nullable=True),
        sa.Column('author_name', sa.String(100), nullable=True),
        sa.Column('category', sa.String(100), nullable=False, server_default='umum'),
        sa.Column('tags', postgresql.ARRAY(sa.String(50)), nullable=False, server_default='{}'),
        sa.Column('status', sa.String(20), nullable=False, server_default='draft'),
        sa.Column('is_featured', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('view_count', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('published_at', sa.DateTime(), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint('slug', name='uq_news_slug'),
        sa.CheckConstraint("status IN ('draft', 'published', 'archived')", name='news_status'),
        sa.CheckConstraint('view_count >= 0', name='ck_news_view_count_non_negative'),
    )
    op.create_index('idx_news_status', 'news', ['status'])
    op.create_index('idx_news_category', 'news', ['category'])
    op.create_index('idx_news_published_at', 'news', ['published_at'])
    op.create_index('idx_news_author_id', 'news', ['author_id'])
    op.create_index('idx_news_featured', 'news', ['is_featured'])


def downgrade() -> None:
    op.drop_table('news')
    op.drop_table('news_categories')
    op.drop_table('school_info')
    op.drop_table('students')
    op.drop_index('ix_users_username', table_name='users')
    op.drop_table('users')
