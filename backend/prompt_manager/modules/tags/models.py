from typing import TYPE_CHECKING

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prompt_manager.shared.models import BaseModel

if TYPE_CHECKING:
    from prompt_manager.modules.prompts.models import Prompt

DEFAULT_TAG_COLOR = '#87d068'


class Tag(BaseModel):
    """
    Modelo de tag de prompts.

    Relacao N:N com prompts via tabela prompt_tags. O nome e unico e a tag
    nao pode ser excluida enquanto estiver em uso.
    """

    __tablename__ = 'tags'

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        unique=True,
    )
    color: Mapped[str] = mapped_column(
        String(7),
        nullable=False,
        default=DEFAULT_TAG_COLOR,
    )

    # --- Relacionamentos ---
    prompts: Mapped[list['Prompt']] = relationship(
        'Prompt',
        secondary='prompt_tags',
        back_populates='tags',
    )
