from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Table,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, query_expression, relationship

from prompt_manager.database import Base
from prompt_manager.shared.models import AppendOnlyModel, BaseModel
from prompt_manager.shared.utils import utc_now

if TYPE_CHECKING:
    from prompt_manager.modules.categories.models import Category
    from prompt_manager.modules.tags.models import Tag

# Tabela de juncao prompt <-> tag (sem ciclo de vida proprio)
prompt_tags = Table(
    'prompt_tags',
    Base.metadata,
    Column(
        'prompt_id',
        Integer,
        ForeignKey('prompts.id', ondelete='CASCADE'),
        primary_key=True,
    ),
    Column(
        'tag_id',
        Integer,
        ForeignKey('tags.id'),
        primary_key=True,
        index=True,
    ),
)


class Prompt(BaseModel):
    """
    Modelo de prompt reutilizavel.

    Raiz do agregado: possui a categoria (por referencia), as tags (via
    prompt_tags), o historico de uso e as versoes. Os dois historicos sao
    removidos junto com o prompt.
    """

    __tablename__ = 'prompts'

    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        index=True,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        default=None,
    )
    category_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey('categories.id'),
        nullable=True,
        default=None,
        index=True,
    )
    priority: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    use_count: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )
    rating: Mapped[float] = mapped_column(
        Float,
        nullable=False,
        default=0.0,
    )
    is_favorite: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
    )

    # --- Contagens calculadas sob demanda (with_expression) ---
    usage_count: Mapped[int | None] = query_expression()
    version_count: Mapped[int | None] = query_expression()

    # --- Relacionamentos ---
    category: Mapped['Category | None'] = relationship(
        'Category',
        back_populates='prompts',
        lazy='selectin',
    )
    tags: Mapped[list['Tag']] = relationship(
        'Tag',
        secondary=prompt_tags,
        back_populates='prompts',
        lazy='selectin',
        order_by='Tag.name',
    )
    usage_history: Mapped[list['UsageHistory']] = relationship(
        'UsageHistory',
        back_populates='prompt',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='UsageHistory.used_at.desc()',
    )
    versions: Mapped[list['PromptVersion']] = relationship(
        'PromptVersion',
        back_populates='prompt',
        cascade='all, delete-orphan',
        passive_deletes=True,
        order_by='PromptVersion.created_at.desc()',
    )


class UsageHistory(AppendOnlyModel):
    """Registro de uso de um prompt. Somente insercao."""

    __tablename__ = 'usage_history'

    prompt_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('prompts.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    context: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )
    used_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    prompt: Mapped['Prompt'] = relationship(
        'Prompt',
        back_populates='usage_history',
    )


class PromptVersion(AppendOnlyModel):
    """
    Snapshot imutavel do texto de um prompt.

    A versao inicial (1.0.0) e criada junto com o prompt; as demais sao
    criadas explicitamente pelo usuario.
    """

    __tablename__ = 'prompt_versions'

    prompt_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey('prompts.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
    )
    version: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(
        String(1000),
        nullable=True,
        default=None,
    )
    change_log: Mapped[str | None] = mapped_column(
        Text,
        nullable=True,
        default=None,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )

    prompt: Mapped['Prompt'] = relationship(
        'Prompt',
        back_populates='versions',
    )
