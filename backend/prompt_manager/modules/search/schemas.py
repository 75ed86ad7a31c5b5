from datetime import datetime
from typing import Literal

from pydantic import Field, field_validator

from prompt_manager.modules.prompts.schemas import PromptResponse
from prompt_manager.shared.schemas import CamelModel, Pagination

SearchSortField = Literal['relevance', 'createdAt', 'updatedAt', 'useCount', 'rating', 'title']
SortOrder = Literal['asc', 'desc']


class SearchResponse(CamelModel):
    """Resultado paginado da busca, com o termo pesquisado."""

    prompts: list[PromptResponse]
    pagination: Pagination
    query: str


class Suggestion(CamelModel):
    """Sugestao de busca: titulo de prompt, categoria ou tag."""

    type: Literal['prompt', 'category', 'tag']
    text: str


class SuggestionsResponse(CamelModel):
    suggestions: list[Suggestion]


class SearchHistoryCreate(CamelModel):
    """Termo a registrar no historico de buscas."""

    query: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description='Termo pesquisado',
    )

    @field_validator('query')
    @classmethod
    def query_not_empty(cls, v: str) -> str:
        """Valida que o termo nao esta vazio."""
        cleaned = v.strip()
        if not cleaned:
            raise ValueError('O termo de busca nao pode estar vazio')
        return cleaned


class SearchHistoryEntry(CamelModel):
    id: int
    query: str
    searched_at: datetime


class SearchHistoryResponse(CamelModel):
    history: list[SearchHistoryEntry]
