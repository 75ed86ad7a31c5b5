from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prompt_manager.shared.models import BaseModel

if TYPE_CHECKING:
    from prompt_manager.modules.prompts.models import Prompt

DEFAULT_CATEGORY_COLOR = '#1890ff'


class Category(BaseModel):
    """
    Modelo de categoria de prompts.

    Um prompt pertence a no maximo uma categoria. O nome e unico
    (constraint no banco) e a categoria nao pode ser excluida enquanto
    houver prompts vinculados.
    Herda de BaseModel (inclui id, created_at, updated_at).
    """

    __tablename__ = 'categories'

    name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
    )
    description: Mapped[str | None] = mapped_column(
        String(500),
        nullable=True,
        default=None,
    )
    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default=DEFAULT_CATEGORY_COLOR,
    )

    # --- Relacionamentos ---
    prompts: Mapped[list['Prompt']] = relationship(
        'Prompt',
        back_populates='category',
    )
