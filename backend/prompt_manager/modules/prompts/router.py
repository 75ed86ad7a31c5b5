from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile
from sqlalchemy.orm import Session

from prompt_manager.database import get_db
from prompt_manager.modules.prompts.filters import (
    PageRequest,
    build_listing_filter,
    resolve_sort,
)
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import (
    FavoriteResponse,
    PromptBatchCreate,
    PromptBatchDelete,
    PromptBatchResult,
    PromptCreate,
    PromptDetailResponse,
    PromptListResponse,
    PromptResponse,
    PromptUpdate,
    PromptVersionResponse,
    RatingResponse,
    RatingUpdate,
    RecentPromptResponse,
    UsageCreate,
    VersionCreate,
)
from prompt_manager.modules.prompts.service import PromptService, resolve_limit
from prompt_manager.shared.schemas import MessageResponse

router = APIRouter(
    prefix='/api/prompts',
    tags=['Prompts'],
)


# -------------------------------------------------------------------------
# Dependency injection chain: get_db -> repository -> service
# -------------------------------------------------------------------------


def get_prompt_repository(
    db: Session = Depends(get_db),
) -> PromptRepository:
    """Dependency que fornece o repositorio de prompts."""
    return PromptRepository(db)


def get_prompt_service(
    request: Request,
    repository: PromptRepository = Depends(get_prompt_repository),
) -> PromptService:
    """Dependency que fornece o servico de prompts."""
    return PromptService(
        repository,
        import_max_bytes=request.app.state.settings.import_max_bytes,
    )


# -------------------------------------------------------------------------
# Listagens e colecoes (declaradas antes das rotas com /{prompt_id})
# -------------------------------------------------------------------------


@router.get('', response_model=PromptListResponse)
def list_prompts(
    page: str | None = Query(None, description='Numero da pagina (padrao 1)'),
    limit: str | None = Query(None, description='Itens por pagina (padrao 20)'),
    category: str | None = Query(None, description='ID da categoria'),
    tags: list[str] | None = Query(None, description='Nomes das tags'),
    search: str | None = Query(None, description='Texto no titulo, conteudo ou descricao'),
    sort_by: str | None = Query(None, alias='sortBy', description='Campo de ordenacao'),
    sort_order: str | None = Query(None, alias='sortOrder', description='asc ou desc'),
    favorite: str | None = Query(None, description="'true' para apenas favoritos"),
    service: PromptService = Depends(get_prompt_service),
) -> PromptListResponse:
    """
    Lista prompts com filtros, ordenacao e paginacao.

    Parametros invalidos nao geram erro: page/limit voltam aos valores
    padrao, categoria nao numerica e ignorada e sortBy desconhecido
    ordena por createdAt. Tags sao filtradas pelo nome.
    """
    return service.list_prompts(
        filters=build_listing_filter(category, tags, search, favorite),
        sort=resolve_sort(sort_by, sort_order),
        page=PageRequest.from_query(page, limit),
    )


@router.get('/popular', response_model=list[PromptResponse])
def get_popular_prompts(
    limit: str | None = Query(None, description='Quantidade (padrao 10)'),
    service: PromptService = Depends(get_prompt_service),
) -> list[PromptResponse]:
    """Prompts mais usados, desempatados pela avaliacao."""
    return service.get_popular(resolve_limit(limit))


@router.get('/recent', response_model=list[RecentPromptResponse])
def get_recent_prompts(
    limit: str | None = Query(None, description='Quantidade (padrao 10)'),
    service: PromptService = Depends(get_prompt_service),
) -> list[RecentPromptResponse]:
    """Prompts dos usos mais recentes, com lastUsedAt."""
    return service.get_recent(resolve_limit(limit))


@router.get('/favorites', response_model=list[PromptResponse])
def get_favorite_prompts(
    service: PromptService = Depends(get_prompt_service),
) -> list[PromptResponse]:
    """Prompts favoritos, atualizados mais recentemente primeiro."""
    return service.get_favorites()


@router.get('/export')
def export_prompts(
    format: str = Query('json', description='json ou csv'),
    category: str | None = Query(None, description='ID da categoria'),
    tags: list[str] | None = Query(None, description='Nomes das tags'),
    service: PromptService = Depends(get_prompt_service),
) -> Response:
    """
    Exporta os prompts filtrados como arquivo JSON ou CSV.

    Categoria e tags sao exportadas pelo nome.
    """
    body, media_type, filename = service.export_prompts(
        export_format=format,
        filters=build_listing_filter(category=category, tags=tags),
    )
    return Response(
        content=body,
        media_type=media_type,
        headers={'Content-Disposition': f'attachment; filename={filename}'},
    )


@router.post('/import', response_model=PromptBatchResult)
def import_prompts(
    file: UploadFile = File(..., description='Arquivo .json, .csv, .md ou .txt'),
    service: PromptService = Depends(get_prompt_service),
) -> PromptBatchResult:
    """
    Importa prompts de um arquivo.

    Registros sem titulo ou conteudo sao ignorados. Categorias e tags do
    arquivo nao sao importadas.
    """
    # Le no maximo um byte alem do limite; o servico rejeita o excesso
    raw = file.file.read(service.import_max_bytes + 1)
    return service.import_prompts(file.filename, raw)


@router.post('/batch', response_model=PromptBatchResult, status_code=201)
def batch_create_prompts(
    data: PromptBatchCreate,
    service: PromptService = Depends(get_prompt_service),
) -> PromptBatchResult:
    """Cria varios prompts; cada um e gravado de forma independente."""
    return service.batch_create(data.prompts)


@router.delete(
    '/batch',
    response_model=MessageResponse,
)
def batch_delete_prompts(
    data: PromptBatchDelete,
    service: PromptService = Depends(get_prompt_service),
) -> MessageResponse:
    """Exclui varios prompts pelos IDs."""
    deleted = service.batch_delete(data.ids)
    return MessageResponse(message=f'{deleted} prompts excluidos com sucesso')


# -------------------------------------------------------------------------
# CRUD
# -------------------------------------------------------------------------


@router.post('', response_model=PromptResponse, status_code=201)
def create_prompt(
    data: PromptCreate,
    service: PromptService = Depends(get_prompt_service),
) -> PromptResponse:
    """
    Cria um novo prompt.

    Tags inexistentes sao criadas pelo nome. A versao inicial 1.0.0 e
    gravada na mesma transacao.
    """
    return service.create_prompt(data)


@router.get('/{prompt_id}', response_model=PromptDetailResponse)
def get_prompt(
    prompt_id: int,
    service: PromptService = Depends(get_prompt_service),
) -> PromptDetailResponse:
    """Retorna o prompt com os 10 ultimos usos e o historico de versoes."""
    return service.get_prompt(prompt_id)


@router.put('/{prompt_id}', response_model=PromptResponse)
def update_prompt(
    prompt_id: int,
    data: PromptUpdate,
    service: PromptService = Depends(get_prompt_service),
) -> PromptResponse:
    """
    Atualiza um prompt existente.

    Apenas os campos fornecidos serao atualizados. Se tags for enviado,
    o conjunto de tags e substituido.
    """
    return service.update_prompt(prompt_id, data)


@router.delete(
    '/{prompt_id}',
    response_model=MessageResponse,
)
def delete_prompt(
    prompt_id: int,
    service: PromptService = Depends(get_prompt_service),
) -> MessageResponse:
    """Exclui o prompt junto com seu historico de uso e versoes."""
    service.delete_prompt(prompt_id)
    return MessageResponse(message='Prompt excluido com sucesso')


# -------------------------------------------------------------------------
# Acoes
# -------------------------------------------------------------------------


@router.post(
    '/{prompt_id}/use',
    response_model=MessageResponse,
)
def record_usage(
    prompt_id: int,
    data: UsageCreate | None = None,
    service: PromptService = Depends(get_prompt_service),
) -> MessageResponse:
    """Registra um uso do prompt e incrementa useCount."""
    service.record_usage(prompt_id, data.context if data else None)
    return MessageResponse(message='Uso registrado com sucesso')


@router.post('/{prompt_id}/favorite', response_model=FavoriteResponse)
def toggle_favorite(
    prompt_id: int,
    service: PromptService = Depends(get_prompt_service),
) -> FavoriteResponse:
    """Marca ou desmarca o prompt como favorito."""
    return service.toggle_favorite(prompt_id)


@router.post('/{prompt_id}/rate', response_model=RatingResponse)
def rate_prompt(
    prompt_id: int,
    data: RatingUpdate,
    service: PromptService = Depends(get_prompt_service),
) -> RatingResponse:
    """Define a avaliacao do prompt (0 a 5)."""
    return service.rate_prompt(prompt_id, data.rating)


@router.get('/{prompt_id}/versions', response_model=list[PromptVersionResponse])
def list_versions(
    prompt_id: int,
    service: PromptService = Depends(get_prompt_service),
) -> list[PromptVersionResponse]:
    """Historico de versoes do prompt, da mais recente para a mais antiga."""
    return service.list_versions(prompt_id)


@router.post(
    '/{prompt_id}/versions',
    response_model=PromptVersionResponse,
    status_code=201,
)
def create_version(
    prompt_id: int,
    data: VersionCreate,
    service: PromptService = Depends(get_prompt_service),
) -> PromptVersionResponse:
    """Registra o titulo, conteudo e descricao atuais como uma nova versao."""
    return service.create_version(prompt_id, data)
