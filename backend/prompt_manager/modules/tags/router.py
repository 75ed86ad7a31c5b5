from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from prompt_manager.database import get_db
from prompt_manager.modules.prompts.filters import PageRequest
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import TagPromptsResponse
from prompt_manager.modules.prompts.service import resolve_limit
from prompt_manager.modules.tags.repository import TagRepository
from prompt_manager.modules.tags.schemas import (
    TagCreate,
    TagResponse,
    TagUpdate,
    TagWithCountResponse,
)
from prompt_manager.modules.tags.service import TagService
from prompt_manager.shared.schemas import MessageResponse

router = APIRouter(
    prefix='/api/tags',
    tags=['Tags'],
)


def get_tag_service(
    db: Session = Depends(get_db),
) -> TagService:
    """Dependency que fornece o servico de tags."""
    return TagService(TagRepository(db), PromptRepository(db))


@router.get('', response_model=list[TagWithCountResponse])
def list_tags(
    service: TagService = Depends(get_tag_service),
) -> list[TagWithCountResponse]:
    """Lista todas as tags ordenadas por nome, com promptCount."""
    return service.list_tags()


@router.get('/popular', response_model=list[TagWithCountResponse])
def get_popular_tags(
    limit: str | None = Query(None, description='Quantidade (padrao 10)'),
    service: TagService = Depends(get_tag_service),
) -> list[TagWithCountResponse]:
    """Tags com mais prompts vinculados."""
    return service.get_popular(resolve_limit(limit))


@router.get('/{tag_id}', response_model=TagWithCountResponse)
def get_tag(
    tag_id: int,
    service: TagService = Depends(get_tag_service),
) -> TagWithCountResponse:
    """Retorna os dados de uma tag especifica."""
    return service.get_tag(tag_id)


@router.get('/{tag_id}/prompts', response_model=TagPromptsResponse)
def list_tag_prompts(
    tag_id: int,
    page: str | None = Query(None, description='Numero da pagina (padrao 1)'),
    limit: str | None = Query(None, description='Itens por pagina (padrao 20)'),
    service: TagService = Depends(get_tag_service),
) -> TagPromptsResponse:
    """Prompts que usam a tag, paginados."""
    return service.list_tag_prompts(tag_id, PageRequest.from_query(page, limit))


@router.post('', response_model=TagResponse, status_code=201)
def create_tag(
    data: TagCreate,
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Cria uma nova tag. Nome duplicado retorna 400."""
    return service.create_tag(data)


@router.put('/{tag_id}', response_model=TagResponse)
def update_tag(
    tag_id: int,
    data: TagUpdate,
    service: TagService = Depends(get_tag_service),
) -> TagResponse:
    """Atualiza os campos fornecidos de uma tag."""
    return service.update_tag(tag_id, data)


@router.delete(
    '/{tag_id}',
    response_model=MessageResponse,
)
def delete_tag(
    tag_id: int,
    service: TagService = Depends(get_tag_service),
) -> MessageResponse:
    """Exclui uma tag que nao esteja em uso."""
    service.delete_tag(tag_id)
    return MessageResponse(message='Tag excluida com sucesso')
