from datetime import datetime

from pydantic import Field, field_validator

from prompt_manager.modules.categories.models import DEFAULT_CATEGORY_COLOR
from prompt_manager.shared.schemas import CamelModel
from prompt_manager.shared.security import sanitize_text, validate_hex_color


class CategoryCreate(CamelModel):
    """Schema para criacao de uma nova categoria."""

    name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description='Nome da categoria (unico)',
    )
    description: str | None = Field(
        None,
        max_length=500,
        description='Descricao da categoria',
    )
    color: str = Field(
        DEFAULT_CATEGORY_COLOR,
        description='Cor em hexadecimal (#RRGGBB)',
    )

    @field_validator('name')
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        """Valida que o nome nao esta vazio."""
        cleaned = sanitize_text(v)
        if not cleaned:
            raise ValueError('O nome da categoria nao pode estar vazio')
        return cleaned

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        """Sanitiza descricao (se fornecida)."""
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator('color')
    @classmethod
    def color_is_hex(cls, v: str) -> str:
        """Valida o formato da cor."""
        return validate_hex_color(v)


class CategoryUpdate(CamelModel):
    """
    Schema para atualizacao de uma categoria.

    Todos os campos sao opcionais; apenas os enviados sao alterados.
    """

    name: str | None = Field(
        None,
        min_length=1,
        max_length=100,
        description='Novo nome da categoria',
    )
    description: str | None = Field(
        None,
        max_length=500,
        description='Nova descricao',
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
            raise ValueError('O nome da categoria nao pode estar vazio')
        return cleaned

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        """Sanitiza descricao (se fornecida)."""
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator('color')
    @classmethod
    def color_is_hex(cls, v: str | None) -> str | None:
        """Valida o formato da cor (se fornecida)."""
        return validate_hex_color(v)


class CategoryResponse(CamelModel):
    """Schema de resposta com dados da categoria."""

    id: int
    name: str
    description: str | None = None
    color: str
    created_at: datetime
    updated_at: datetime


class CategoryWithCountResponse(CategoryResponse):
    """Categoria acompanhada da quantidade de prompts vinculados."""

    prompt_count: int = 0
