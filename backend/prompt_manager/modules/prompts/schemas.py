from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from prompt_manager.modules.categories.schemas import CategoryResponse
from prompt_manager.modules.tags.schemas import TagResponse
from prompt_manager.shared.schemas import CamelModel, Pagination
from prompt_manager.shared.security import sanitize_string_list, sanitize_text

MAX_TAGS_PER_PROMPT = 20
INITIAL_VERSION = '1.0.0'


# -------------------------------------------------------------------------
# Filtros internos (nao expostos diretamente na API)
# -------------------------------------------------------------------------


class PromptFilter(BaseModel):
    """
    Filtros opcionais aplicados as listagens de prompts.

    Campos None nao geram condicao. tag_names e usado pela listagem
    generica e pela exportacao; tag_ids e usado pela busca.
    """

    category_id: int | None = None
    tag_names: list[str] | None = None
    tag_ids: list[int] | None = None
    search: str | None = None
    favorite: bool | None = None


# -------------------------------------------------------------------------
# Payloads de entrada
# -------------------------------------------------------------------------


def _clean_tags(v: list[str] | None) -> list[str] | None:
    """Sanitiza a lista de tags e valida o tamanho de cada nome."""
    if v is None:
        return v
    cleaned = sanitize_string_list(v)
    for name in cleaned:
        if not name:
            raise ValueError('O nome da tag nao pode estar vazio')
        if len(name) > 50:
            raise ValueError('Cada tag deve ter no maximo 50 caracteres')
    # Remove duplicatas preservando a ordem
    return list(dict.fromkeys(cleaned))


class PromptCreate(CamelModel):
    """Schema para criacao de um novo prompt."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description='Titulo do prompt',
    )
    content: str = Field(
        ...,
        min_length=1,
        description='Conteudo do prompt',
    )
    description: str | None = Field(
        None,
        max_length=1000,
        description='Descricao opcional',
    )
    category_id: int | None = Field(
        None,
        gt=0,
        description='ID da categoria (opcional)',
    )
    tags: list[str] = Field(
        default_factory=list,
        max_length=MAX_TAGS_PER_PROMPT,
        description='Nomes das tags (criadas se nao existirem)',
    )
    priority: int = Field(
        0,
        ge=0,
        le=10,
        description='Prioridade de 0 a 10',
    )

    @field_validator('title')
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        """Valida que o titulo nao esta vazio."""
        cleaned = sanitize_text(v)
        if not cleaned.strip():
            raise ValueError('O titulo nao pode estar vazio')
        return cleaned

    @field_validator('content')
    @classmethod
    def content_not_empty(cls, v: str) -> str:
        """Valida que o conteudo nao esta vazio."""
        if not v.strip():
            raise ValueError('O conteudo nao pode estar vazio')
        return v

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator('tags')
    @classmethod
    def tags_sanitized(cls, v: list[str]) -> list[str]:
        return _clean_tags(v) or []


class PromptUpdate(CamelModel):
    """
    Schema para atualizacao parcial de um prompt.

    Apenas os campos presentes no corpo sao alterados. Quando tags e
    enviado, o conjunto de tags do prompt e substituido por completo.
    categoryId explicitamente nulo remove a categoria.
    """

    title: str | None = Field(
        None,
        min_length=1,
        max_length=255,
        description='Novo titulo',
    )
    content: str | None = Field(
        None,
        min_length=1,
        description='Novo conteudo',
    )
    description: str | None = Field(
        None,
        max_length=1000,
        description='Nova descricao',
    )
    category_id: int | None = Field(
        None,
        gt=0,
        description='Nova categoria (null remove)',
    )
    tags: list[str] | None = Field(
        None,
        max_length=MAX_TAGS_PER_PROMPT,
        description='Novo conjunto de tags',
    )
    priority: int | None = Field(
        None,
        ge=0,
        le=10,
        description='Nova prioridade',
    )

    @field_validator('title')
    @classmethod
    def title_not_empty(cls, v: str | None) -> str | None:
        """Valida que o titulo nao esta vazio (se fornecido)."""
        if v is None:
            return v
        cleaned = sanitize_text(v)
        if not cleaned.strip():
            raise ValueError('O titulo nao pode estar vazio')
        return cleaned

    @field_validator('content')
    @classmethod
    def content_not_empty(cls, v: str | None) -> str | None:
        """Valida que o conteudo nao esta vazio (se fornecido)."""
        if v is not None and not v.strip():
            raise ValueError('O conteudo nao pode estar vazio')
        return v

    @field_validator('description')
    @classmethod
    def description_sanitized(cls, v: str | None) -> str | None:
        if v is None:
            return v
        return sanitize_text(v)

    @field_validator('tags')
    @classmethod
    def tags_sanitized(cls, v: list[str] | None) -> list[str] | None:
        return _clean_tags(v)


class UsageCreate(CamelModel):
    """Corpo opcional do registro de uso."""

    context: str | None = Field(
        None,
        max_length=5000,
        description='Contexto livre em que o prompt foi usado',
    )


class RatingUpdate(CamelModel):
    """Avaliacao do prompt (0 a 5, limites inclusos)."""

    rating: float = Field(
        ...,
        ge=0,
        le=5,
        description='Nota de 0 a 5',
    )


class PromptBatchCreate(CamelModel):
    """Lote de prompts a criar."""

    prompts: list[PromptCreate] = Field(
        ...,
        min_length=1,
        description='Prompts a serem criados',
    )


class PromptBatchDelete(CamelModel):
    """Lote de IDs a excluir."""

    ids: list[int] = Field(
        ...,
        min_length=1,
        description='IDs dos prompts a excluir',
    )


class VersionCreate(CamelModel):
    """Schema para criar uma nova versao a partir do estado atual do prompt."""

    version: str = Field(
        ...,
        min_length=1,
        max_length=50,
        description='Rotulo da versao (ex: 1.1.0)',
    )
    change_log: str | None = Field(
        None,
        max_length=5000,
        description='Descricao das alteracoes',
    )

    @field_validator('version')
    @classmethod
    def version_not_empty(cls, v: str) -> str:
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('O rotulo da versao nao pode estar vazio')
        return cleaned


# -------------------------------------------------------------------------
# Respostas
# -------------------------------------------------------------------------


class UsageHistoryResponse(CamelModel):
    """Registro de uso de um prompt."""

    id: int
    prompt_id: int
    context: str | None = None
    used_at: datetime


class PromptVersionResponse(CamelModel):
    """Snapshot de uma versao do prompt."""

    id: int
    prompt_id: int
    version: str
    title: str
    content: str
    description: str | None = None
    change_log: str | None = None
    created_at: datetime


class PromptResponse(CamelModel):
    """Schema de resposta com dados do prompt, categoria e tags."""

    id: int
    title: str
    content: str
    description: str | None = None
    category_id: int | None = None
    priority: int
    use_count: int
    rating: float
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
    category: CategoryResponse | None = None
    tags: list[TagResponse] = []


class PromptListItem(PromptResponse):
    """Item de listagem: inclui contagens de uso e de versoes."""

    usage_count: int = 0
    version_count: int = 0

    @field_validator('usage_count', 'version_count', mode='before')
    @classmethod
    def count_defaults_to_zero(cls, v: int | None) -> int:
        # Contagens nao carregadas via with_expression chegam como None
        return v or 0


class PromptDetailResponse(PromptResponse):
    """Detalhe do prompt com os ultimos usos e o historico de versoes."""

    usage_history: list[UsageHistoryResponse] = []
    versions: list[PromptVersionResponse] = []


class RecentPromptResponse(PromptResponse):
    """Prompt recem utilizado, com o instante do uso."""

    last_used_at: datetime


class PromptListResponse(CamelModel):
    """Resposta paginada da listagem de prompts."""

    data: list[PromptListItem]
    pagination: Pagination


class CategoryPromptsResponse(CamelModel):
    """Prompts de uma categoria, paginados."""

    category: CategoryResponse
    data: list[PromptResponse]
    pagination: Pagination


class TagPromptsResponse(CamelModel):
    """Prompts que usam uma tag, paginados."""

    prompts: list[PromptResponse]
    pagination: Pagination


class FavoriteResponse(CamelModel):
    is_favorite: bool


class RatingResponse(CamelModel):
    rating: float


class PromptBatchResult(CamelModel):
    """Resultado de criacao em lote ou importacao."""

    message: str
    data: list[PromptResponse]


class PromptExportRecord(CamelModel):
    """Registro exportado (JSON ou CSV). Categoria e tags vao pelo nome."""

    id: int
    title: str
    content: str
    description: str | None = None
    category: str | None = None
    tags: list[str] = []
    priority: int
    use_count: int
    rating: float
    is_favorite: bool
    created_at: datetime
    updated_at: datetime
