"""create_prompt_manager_schema

Revision ID: 001_create_prompt_manager_schema
Revises:
Create Date: 2026-10-16

"""
from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_create_prompt_manager_schema'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    """Colunas herdadas de BaseModel."""
    return [
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            'updated_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    """Cria as tabelas de categorias, tags, prompts, historicos e versoes."""
    op.create_table(
        'categories',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('description', sa.String(length=500), nullable=True),
        sa.Column('color', sa.String(length=7), nullable=False, server_default='#1890ff'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_categories_name'),
    )

    op.create_table(
        'tags',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        sa.Column('name', sa.String(length=50), nullable=False),
        sa.Column('color', sa.String(length=7), nullable=False, server_default='#87d068'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('name', name='uq_tags_name'),
    )

    op.create_table(
        'prompts',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        *_timestamps(),
        # --- Campos do prompt ---
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column('category_id', sa.Integer(), nullable=True),
        sa.Column('priority', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('use_count', sa.Integer(), nullable=False, server_default=sa.text('0')),
        sa.Column('rating', sa.Float(), nullable=False, server_default=sa.text('0')),
        sa.Column('is_favorite', sa.Boolean(), nullable=False, server_default=sa.false()),
        # --- Constraints ---
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['category_id'],
            ['categories.id'],
            name='fk_prompts_category_id',
        ),
    )
    op.create_index('ix_prompts_title', 'prompts', ['title'])
    op.create_index('ix_prompts_category_id', 'prompts', ['category_id'])

    op.create_table(
        'prompt_tags',
        sa.Column('prompt_id', sa.Integer(), nullable=False),
        sa.Column('tag_id', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('prompt_id', 'tag_id'),
        sa.ForeignKeyConstraint(
            ['prompt_id'],
            ['prompts.id'],
            name='fk_prompt_tags_prompt_id',
            ondelete='CASCADE',
        ),
        sa.ForeignKeyConstraint(
            ['tag_id'],
            ['tags.id'],
            name='fk_prompt_tags_tag_id',
        ),
    )
    op.create_index('ix_prompt_tags_tag_id', 'prompt_tags', ['tag_id'])

    op.create_table(
        'usage_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('prompt_id', sa.Integer(), nullable=False),
        sa.Column('context', sa.Text(), nullable=True),
        sa.Column(
            'used_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['prompt_id'],
            ['prompts.id'],
            name='fk_usage_history_prompt_id',
            ondelete='CASCADE',
        ),
    )
    op.create_index('ix_usage_history_prompt_id', 'usage_history', ['prompt_id'])
    op.create_index('ix_usage_history_used_at', 'usage_history', ['used_at'])

    op.create_table(
        'prompt_versions',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('prompt_id', sa.Integer(), nullable=False),
        sa.Column('version', sa.String(length=50), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('content', sa.Text(), nullable=False),
        sa.Column('description', sa.String(length=1000), nullable=True),
        sa.Column('change_log', sa.Text(), nullable=True),
        sa.Column(
            'created_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(
            ['prompt_id'],
            ['prompts.id'],
            name='fk_prompt_versions_prompt_id',
            ondelete='CASCADE',
        ),
    )
    op.create_index('ix_prompt_versions_prompt_id', 'prompt_versions', ['prompt_id'])

    op.create_table(
        'search_history',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('query', sa.String(length=200), nullable=False),
        sa.Column(
            'searched_at',
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_search_history_searched_at', 'search_history', ['searched_at'])


def downgrade() -> None:
    """Remove todas as tabelas na ordem inversa das dependencias."""
    op.drop_index('ix_search_history_searched_at', table_name='search_history')
    op.drop_table('search_history')
    op.drop_index('ix_prompt_versions_prompt_id', table_name='prompt_versions')
    op.drop_table('prompt_versions')
    op.drop_index('ix_usage_history_used_at', table_name='usage_history')
    op.drop_index('ix_usage_history_prompt_id', table_name='usage_history')
    op.drop_table('usage_history')
    op.drop_index('ix_prompt_tags_tag_id', table_name='prompt_tags')
    op.drop_table('prompt_tags')
    op.drop_index('ix_prompts_category_id', table_name='prompts')
    op.drop_index('ix_prompts_title', table_name='prompts')
    op.drop_table('prompts')
    op.drop_table('tags')
    op.drop_table('categories')
