from datetime import datetime

from pydantic import Field, field_validator

from prompt_manager.modules.tags.models import DEFAULT_TAG_COLOR
from prompt_manager.shared.schemas import CamelModel
from prompt_manager.shared.security import sanitize_text, validate_hex_color


class TagCreate(CamelModel):
    """Schema para criacao de uma nova tag."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description='Nome da tag (unico)',
    )
    color: str = Field(
        DEFAULT_TAG_COLOR,
        description='Cor em hexadecimal (#RRGGBB)',
    )

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Valida que o nome nao esta vazio."""
        cleaned = sanitize_text(v)
        if not cleaned:
            raise ValueError('O nome da tag nao pode estar vazio')
        return cleaned

    @field_validator('color')
    @classmethod
    def color_is_hex(cls, v: str) -> str:
        """Valida o formato da cor."""
        return validate_hex_color(v)


class TagUpdate(CamelModel):
    """Schema para atualizacao parcial de uma tag."""

    name: str | None = Field(
        None,
        min_length=1,
        max_length=50,
        description='Novo nome da tag',
    )
    color: str | None = Field(
        None,
        description='Nova cor em hexadecimal (#RRGGBB)',
    )

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v: str | None) -> str | None:
        """Valida que o nome nao esta vazio (se fornecido)."""
        if v is None:
            return v
        cleaned = sanitize_text(v)
        if not cleaned:
            raise ValueError('O nome da tag nao pode estar vazio')
        return cleaned

    @field_validator('color')
    @classmethod
    def color_is_hex(cls, v: str | None) -> str | None:
        """Valida o formato da cor (se fornecida)."""
        return validate_hex_color(v)


class TagResponse(CamelModel):
    """Schema de resposta com dados da tag."""

    id: int
    name: str
    color: str
    created_at: datetime
    updated_at: datetime


class TagWithCountResponse(TagResponse):
    """Tag acompanhada da quantidade de prompts que a utilizam."""

    prompt_count: int = 0
