from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from prompt_manager.database import get_db
from prompt_manager.modules.prompts.filters import PageRequest
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.service import resolve_limit
from prompt_manager.modules.search.repository import SearchRepository
from prompt_manager.modules.search.schemas import (
    SearchHistoryCreate,
    SearchHistoryEntry,
    SearchHistoryResponse,
    SearchResponse,
    SearchSortField,
    SortOrder,
    SuggestionsResponse,
)
from prompt_manager.modules.search.service import SearchService, parse_tag_ids
from prompt_manager.shared.schemas import MessageResponse
from prompt_manager.shared.utils import MAX_INT

DEFAULT_HISTORY_LIMIT = 20

router = APIRouter(
    prefix='/api/search',
    tags=['Busca'],
)


def get_search_service(
    request: Request,
    db: Session = Depends(get_db),
) -> SearchService:
    """Dependency que fornece o servico de busca."""
    repository = SearchRepository(
        db,
        max_history_entries=request.app.state.settings.search_history_max_entries,
    )
    return SearchService(repository, PromptRepository(db))


@router.get('', response_model=SearchResponse)
def search_prompts(
    q: str = Query('', max_length=200, description='Texto pesquisado'),
    category: int | None = Query(None, gt=0, le=MAX_INT, description='ID da categoria'),
    tags: str | None = Query(None, description='IDs de tags separados por virgula'),
    sort_by: SearchSortField = Query('relevance', alias='sortBy'),
    sort_order: SortOrder = Query('desc', alias='sortOrder'),
    page: int = Query(1, ge=1, le=MAX_INT, description='Numero da pagina'),
    limit: int = Query(20, ge=1, le=100, description='Itens por pagina'),
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """
    Busca prompts por texto no titulo, conteudo ou descricao.

    Parametros invalidos retornam 400 com detalhes por campo. As tags
    sao filtradas pelo ID.
    """
    return service.search(
        query=q,
        category_id=category,
        tag_ids=parse_tag_ids(tags),
        sort_by=sort_by,
        sort_order=sort_order,
        page=PageRequest(page=page, limit=limit),
    )


@router.get('/suggestions', response_model=SuggestionsResponse)
def get_suggestions(
    q: str = Query('', description='Texto digitado (minimo 2 caracteres)'),
    service: SearchService = Depends(get_search_service),
) -> SuggestionsResponse:
    """Sugestoes de titulos, categorias e tags."""
    return service.get_suggestions(q)


@router.get('/history', response_model=SearchHistoryResponse)
def get_search_history(
    limit: str | None = Query(None, description='Quantidade (padrao 20)'),
    service: SearchService = Depends(get_search_service),
) -> SearchHistoryResponse:
    """Ultimos termos pesquisados."""
    return service.get_history(resolve_limit(limit, default=DEFAULT_HISTORY_LIMIT))


@router.post('/history', response_model=SearchHistoryEntry, status_code=201)
def save_search_history(
    data: SearchHistoryCreate,
    service: SearchService = Depends(get_search_service),
) -> SearchHistoryEntry:
    """Registra um termo no historico de buscas."""
    return service.save_history(data.query)


@router.delete(
    '/history',
    response_model=MessageResponse,
)
def clear_search_history(
    service: SearchService = Depends(get_search_service),
) -> MessageResponse:
    """Limpa o historico de buscas."""
    service.clear_history()
    return MessageResponse(message='Historico de buscas limpo com sucesso')
