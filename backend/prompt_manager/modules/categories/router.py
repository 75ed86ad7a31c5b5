from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from prompt_manager.database import get_db
from prompt_manager.modules.categories.repository import CategoryRepository
from prompt_manager.modules.categories.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithCountResponse,
)
from prompt_manager.modules.categories.service import CategoryService
from prompt_manager.modules.prompts.filters import PageRequest
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import CategoryPromptsResponse
from prompt_manager.shared.schemas import MessageResponse

router = APIRouter(
    prefix='/api/categories',
    tags=['Categorias'],
)


# -------------------------------------------------------------------------
# Dependency injection chain: get_db -> repository -> service
# -------------------------------------------------------------------------


def get_category_service(
    db: Session = Depends(get_db),
) -> CategoryService:
    """Dependency que fornece o servico de categorias."""
    return CategoryService(CategoryRepository(db), PromptRepository(db))


# -------------------------------------------------------------------------
# Endpoints
# -------------------------------------------------------------------------


@router.get('', response_model=list[CategoryWithCountResponse])
def list_categories(
    service: CategoryService = Depends(get_category_service),
) -> list[CategoryWithCountResponse]:
    """Lista todas as categorias ordenadas por nome, com promptCount."""
    return service.list_categories()


@router.get('/{category_id}', response_model=CategoryWithCountResponse)
def get_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
) -> CategoryWithCountResponse:
    """Retorna os dados de uma categoria especifica."""
    return service.get_category(category_id)


@router.get('/{category_id}/prompts', response_model=CategoryPromptsResponse)
def list_category_prompts(
    category_id: int,
    page: str | None = Query(None, description='Numero da pagina (padrao 1)'),
    limit: str | None = Query(None, description='Itens por pagina (padrao 20)'),
    service: CategoryService = Depends(get_category_service),
) -> CategoryPromptsResponse:
    """Prompts da categoria, paginados, mais recentes primeiro."""
    return service.list_category_prompts(category_id, PageRequest.from_query(page, limit))


@router.post('', response_model=CategoryResponse, status_code=201)
def create_category(
    data: CategoryCreate,
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """
    Cria uma nova categoria.

    Nome duplicado retorna 400.
    """
    return service.create_category(data)


@router.put('/{category_id}', response_model=CategoryResponse)
def update_category(
    category_id: int,
    data: CategoryUpdate,
    service: CategoryService = Depends(get_category_service),
) -> CategoryResponse:
    """Atualiza os campos fornecidos de uma categoria."""
    return service.update_category(category_id, data)


@router.delete(
    '/{category_id}',
    response_model=MessageResponse,
)
def delete_category(
    category_id: int,
    service: CategoryService = Depends(get_category_service),
) -> MessageResponse:
    """
    Exclui uma categoria.

    Categorias com prompts vinculados nao podem ser excluidas (400).
    """
    service.delete_category(category_id)
    return MessageResponse(message='Categoria excluida com sucesso')
