"""
Montagem de filtros, ordenacao e paginacao das listagens de prompts.

Todas as listagens (GET /api/prompts, busca, prompts por categoria/tag e
exportacao) passam por aqui. A lista de condicoes gerada e aplicada tanto
na query paginada quanto na query de contagem, garantindo que
pagination.total corresponda exatamente aos registros paginados.
"""

from dataclasses import dataclass

from sqlalchemy import ColumnElement, Select, or_

from prompt_manager.modules.prompts.models import Prompt
from prompt_manager.modules.prompts.schemas import PromptFilter
from prompt_manager.modules.tags.models import Tag
from prompt_manager.shared.utils import coerce_int

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 20
MAX_LIMIT = 100

DEFAULT_SORT_FIELD = 'createdAt'
DEFAULT_SORT_ORDER = 'desc'

# Campos ordenaveis expostos na API (nome no JSON -> coluna)
SORT_COLUMNS = {
    'createdAt': Prompt.created_at,
    'updatedAt': Prompt.updated_at,
    'useCount': Prompt.use_count,
    'rating': Prompt.rating,
    'title': Prompt.title,
}

# A busca aceita "relevance", tratado como createdAt (nao ha ranking)
SEARCH_SORT_FIELDS = frozenset(SORT_COLUMNS) | {'relevance'}
SORT_ORDERS = frozenset({'asc', 'desc'})


# -------------------------------------------------------------------------
# Predicados
# -------------------------------------------------------------------------


def build_conditions(filters: PromptFilter) -> list[ColumnElement[bool]]:
    """
    Traduz os filtros opcionais em condicoes combinadas por AND.

    Filtros ausentes nao geram condicao alguma.

    Args:
        filters: Filtros da listagem.

    Returns:
        Lista de condicoes SQLAlchemy (vazia quando nao ha filtros).
    """
    conditions: list[ColumnElement[bool]] = []

    if filters.category_id is not None:
        conditions.append(Prompt.category_id == filters.category_id)

    # Listagem e exportacao filtram pelo nome da tag
    if filters.tag_names:
        conditions.append(Prompt.tags.any(Tag.name.in_(filters.tag_names)))

    # A busca filtra pelo id da tag
    if filters.tag_ids:
        conditions.append(Prompt.tags.any(Tag.id.in_(filters.tag_ids)))

    # Substring literal, sem normalizacao (% e _ sao escapados)
    if filters.search:
        conditions.append(
            or_(
                Prompt.title.contains(filters.search, autoescape=True),
                Prompt.content.contains(filters.search, autoescape=True),
                Prompt.description.contains(filters.search, autoescape=True),
            )
        )

    if filters.favorite is not None:
        conditions.append(Prompt.is_favorite == filters.favorite)

    return conditions


def apply_conditions(stmt: Select, conditions: list[ColumnElement[bool]]) -> Select:
    """Aplica a mesma lista de condicoes a uma query (listagem ou contagem)."""
    if conditions:
        stmt = stmt.where(*conditions)
    return stmt


# -------------------------------------------------------------------------
# Ordenacao
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class SortSpec:
    """Campo e direcao de ordenacao de uma listagem."""

    field: str = DEFAULT_SORT_FIELD
    order: str = DEFAULT_SORT_ORDER

    def clauses(self) -> list:
        """
        Retorna as clausulas ORDER BY.

        O id entra como criterio de desempate para que registros com o
        mesmo valor nao troquem de pagina entre requisicoes.
        """
        column = SORT_COLUMNS[self.field]
        if self.order == 'asc':
            return [column.asc(), Prompt.id.asc()]
        return [column.desc(), Prompt.id.desc()]


def resolve_sort(sort_by: str | None, sort_order: str | None) -> SortSpec:
    """
    Resolve sortBy/sortOrder recebidos na query string.

    Campos fora da lista permitida (incluindo "relevance") caem em
    createdAt; direcoes diferentes de "asc" caem em "desc".
    """
    field = sort_by if sort_by in SORT_COLUMNS else DEFAULT_SORT_FIELD
    order = sort_order if sort_order in SORT_ORDERS else DEFAULT_SORT_ORDER
    return SortSpec(field=field, order=order)


# -------------------------------------------------------------------------
# Paginacao
# -------------------------------------------------------------------------


@dataclass(frozen=True)
class PageRequest:
    """Pagina solicitada (1-indexed) e tamanho da pagina."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    @property
    def skip(self) -> int:
        """Quantidade de registros a pular."""
        return (self.page - 1) * self.limit

    @property
    def take(self) -> int:
        """Quantidade de registros a retornar."""
        return self.limit

    @classmethod
    def from_query(
        cls,
        page: str | int | None,
        limit: str | int | None,
    ) -> 'PageRequest':
        """
        Constroi a pagina a partir de valores brutos da query string.

        Valores nao numericos, menores que 1 ou acima de MAX_INT voltam aos defaults
        (page=1, limit=20) em vez de rejeitar a requisicao.
        """
        parsed_page = coerce_int(page)
        parsed_limit = coerce_int(limit)
        if parsed_page is None or parsed_page < 1:
            parsed_page = DEFAULT_PAGE
        if parsed_limit is None or parsed_limit < 1:
            parsed_limit = DEFAULT_LIMIT
        return cls(page=parsed_page, limit=parsed_limit)


# -------------------------------------------------------------------------
# Parsing tolerante dos filtros da listagem
# -------------------------------------------------------------------------


def parse_favorite_flag(value: str | None) -> bool | None:
    """Parametro presente filtra por value == 'true'; ausente nao filtra."""
    if value is None:
        return None
    return value == 'true'


def build_listing_filter(
    category: str | None = None,
    tags: list[str] | None = None,
    search: str | None = None,
    favorite: str | None = None,
) -> PromptFilter:
    """
    Constroi o filtro da listagem generica a partir da query string.

    Categoria nao numerica e ignorada (sem filtro). Tags sao comparadas
    pelo nome.
    """
    return PromptFilter(
        category_id=coerce_int(category),
        tag_names=list(tags) if tags else None,
        search=search or None,
        favorite=parse_favorite_flag(favorite),
    )
