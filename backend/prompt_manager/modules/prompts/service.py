from pydantic import ValidationError

from prompt_manager.modules.prompts import transfer
from prompt_manager.modules.prompts.filters import PageRequest, SortSpec
from prompt_manager.modules.prompts.models import Prompt
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import (
    INITIAL_VERSION,
    FavoriteResponse,
    PromptBatchResult,
    PromptCreate,
    PromptDetailResponse,
    PromptFilter,
    PromptListItem,
    PromptListResponse,
    PromptResponse,
    PromptUpdate,
    PromptVersionResponse,
    RatingResponse,
    RecentPromptResponse,
    UsageHistoryResponse,
    VersionCreate,
)
from prompt_manager.shared.exceptions import BadRequestException, NotFoundException
from prompt_manager.shared.logging import get_logger
from prompt_manager.shared.metrics import (
    track_import,
    track_prompt_created,
    track_prompt_usage,
)
from prompt_manager.shared.schemas import Pagination
from prompt_manager.shared.utils import coerce_int

logger = get_logger(__name__)

DETAIL_USAGE_LIMIT = 10
DEFAULT_CURATED_LIMIT = 10
DEFAULT_IMPORT_MAX_BYTES = 10 * 1024 * 1024


def resolve_limit(value: str | int | None, default: int = DEFAULT_CURATED_LIMIT) -> int:
    """Limite tolerante para as listas curadas (popular, recentes, tags populares)."""
    limit = coerce_int(value)
    if limit is None or limit < 1:
        return default
    return limit


class PromptService:
    """
    Servico de prompts.

    Contem a logica de negocio de CRUD, uso, favoritos, avaliacao,
    versoes, operacoes em lote e importacao/exportacao.
    """

    def __init__(
        self,
        repository: PromptRepository,
        import_max_bytes: int = DEFAULT_IMPORT_MAX_BYTES,
    ) -> None:
        """Inicializa o servico com o repositorio de prompts."""
        self._repository = repository
        self._import_max_bytes = import_max_bytes

    @property
    def import_max_bytes(self) -> int:
        """Tamanho maximo aceito para arquivos de importacao."""
        return self._import_max_bytes

    def _get_or_404(self, prompt_id: int) -> Prompt:
        prompt = self._repository.get_by_id(prompt_id)
        if not prompt:
            raise NotFoundException('Prompt nao encontrado')
        return prompt

    # ------------------------------------------------------------------
    # Consultas
    # ------------------------------------------------------------------

    def list_prompts(
        self,
        filters: PromptFilter,
        sort: SortSpec,
        page: PageRequest,
    ) -> PromptListResponse:
        """
        Lista prompts com filtros, ordenacao e paginacao.

        Args:
            filters: Filtros opcionais (categoria, tags por nome, busca, favorito).
            sort: Ordenacao resolvida.
            page: Pagina solicitada.

        Returns:
            Resposta paginada com contagens de uso e versoes por item.
        """
        prompts, total = self._repository.get_page(filters, sort, page, with_counts=True)
        return PromptListResponse(
            data=[PromptListItem.model_validate(prompt) for prompt in prompts],
            pagination=Pagination.create(page=page.page, limit=page.limit, total=total),
        )

    def get_prompt(self, prompt_id: int) -> PromptDetailResponse:
        """
        Retorna o prompt com os ultimos usos e todas as versoes.

        Raises:
            NotFoundException: Se o prompt nao for encontrado.
        """
        prompt = self._get_or_404(prompt_id)
        base = PromptResponse.model_validate(prompt)
        usage = self._repository.get_recent_usage(DETAIL_USAGE_LIMIT, prompt_id=prompt_id)
        versions = self._repository.get_versions(prompt_id)
        return PromptDetailResponse(
            **base.model_dump(),
            usage_history=[UsageHistoryResponse.model_validate(item) for item in usage],
            versions=[PromptVersionResponse.model_validate(item) for item in versions],
        )

    def get_popular(self, limit: int) -> list[PromptResponse]:
        """Prompts mais usados."""
        prompts = self._repository.get_popular(limit)
        return [PromptResponse.model_validate(prompt) for prompt in prompts]

    def get_recent(self, limit: int) -> list[RecentPromptResponse]:
        """
        Prompts dos usos mais recentes.

        Um prompt usado varias vezes aparece uma vez por uso.
        """
        usages = self._repository.get_recent_usage(limit)
        return [
            RecentPromptResponse(
                **PromptResponse.model_validate(usage.prompt).model_dump(),
                last_used_at=usage.used_at,
            )
            for usage in usages
        ]

    def get_favorites(self) -> list[PromptResponse]:
        """Prompts marcados como favoritos."""
        prompts = self._repository.get_favorites()
        return [PromptResponse.model_validate(prompt) for prompt in prompts]

    # ------------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------------

    def _check_category(self, category_id: int | None) -> None:
        if category_id is not None and not self._repository.category_exists(category_id):
            raise BadRequestException('Categoria informada nao existe')

    def create_prompt(self, data: PromptCreate, source: str = 'api') -> PromptResponse:
        """
        Cria um prompt com tags e versao inicial em uma unica transacao.

        Args:
            data: Dados validados do prompt.
            source: Origem da criacao (api, batch ou import), usada nas metricas.

        Returns:
            Prompt criado.

        Raises:
            BadRequestException: Se a categoria informada nao existir.
        """
        self._check_category(data.category_id)

        prompt_data: dict = {
            'title': data.title,
            'content': data.content,
            'description': data.description,
            'category_id': data.category_id,
            'priority': data.priority,
        }
        prompt = self._repository.create(prompt_data, data.tags, INITIAL_VERSION)

        track_prompt_created(source)
        logger.info(
            'Prompt criado',
            prompt_id=prompt.id,
            source=source,
            tags=len(data.tags),
        )
        return PromptResponse.model_validate(prompt)

    def update_prompt(self, prompt_id: int, data: PromptUpdate) -> PromptResponse:
        """
        Atualiza parcialmente um prompt.

        Apenas os campos enviados sao alterados. Tags enviadas substituem
        o conjunto atual. Campos obrigatorios enviados como null sao
        ignorados.

        Raises:
            NotFoundException: Se o prompt nao for encontrado.
            BadRequestException: Se a nova categoria nao existir.
        """
        prompt = self._get_or_404(prompt_id)

        provided = data.model_dump(exclude_unset=True)
        tag_names = provided.pop('tags', None)

        update_data: dict = {}
        for key, value in provided.items():
            if value is None and key in ('title', 'content', 'priority'):
                continue
            update_data[key] = value

        if 'category_id' in update_data:
            self._check_category(update_data['category_id'])

        if not update_data and tag_names is None:
            return PromptResponse.model_validate(prompt)

        prompt = self._repository.update(prompt, update_data, tag_names)
        logger.info('Prompt atualizado', prompt_id=prompt.id, fields=sorted(update_data))
        return PromptResponse.model_validate(prompt)

    def delete_prompt(self, prompt_id: int) -> None:
        """
        Exclui um prompt com seu historico de uso e versoes.

        Raises:
            NotFoundException: Se o prompt nao for encontrado.
        """
        prompt = self._get_or_404(prompt_id)
        self._repository.delete(prompt)
        logger.info('Prompt excluido', prompt_id=prompt_id)

    def record_usage(self, prompt_id: int, context: str | None) -> None:
        """
        Registra um uso e incrementa useCount na mesma transacao.

        Raises:
            NotFoundException: Se o prompt nao for encontrado.
        """
        prompt = self._get_or_404(prompt_id)
        self._repository.add_usage(prompt, context)
        track_prompt_usage()
        logger.info('Uso registrado', prompt_id=prompt_id, use_count=prompt.use_count)

    def toggle_favorite(self, prompt_id: int) -> FavoriteResponse:
        """Inverte o estado de favorito do prompt."""
        prompt = self._get_or_404(prompt_id)
        prompt.is_favorite = not prompt.is_favorite
        prompt = self._repository.save(prompt)
        return FavoriteResponse(is_favorite=prompt.is_favorite)

    def rate_prompt(self, prompt_id: int, rating: float) -> RatingResponse:
        """
        Define a avaliacao do prompt.

        Raises:
            BadRequestException: Se a nota estiver fora de [0, 5].
            NotFoundException: Se o prompt nao for encontrado.
        """
        if rating < 0 or rating > 5:
            raise BadRequestException('A avaliacao deve estar entre 0 e 5')

        prompt = self._get_or_404(prompt_id)
        prompt.rating = rating
        prompt = self._repository.save(prompt)
        return RatingResponse(rating=prompt.rating)

    # ------------------------------------------------------------------
    # Versoes
    # ------------------------------------------------------------------

    def list_versions(self, prompt_id: int) -> list[PromptVersionResponse]:
        """Historico de versoes, da mais recente para a mais antiga."""
        self._get_or_404(prompt_id)
        versions = self._repository.get_versions(prompt_id)
        return [PromptVersionResponse.model_validate(version) for version in versions]

    def create_version(self, prompt_id: int, data: VersionCreate) -> PromptVersionResponse:
        """Registra o estado atual do prompt como uma nova versao."""
        prompt = self._get_or_404(prompt_id)
        version = self._repository.add_version(prompt, data.version, data.change_log)
        logger.info('Versao criada', prompt_id=prompt_id, version=data.version)
        return PromptVersionResponse.model_validate(version)

    # ------------------------------------------------------------------
    # Lote
    # ------------------------------------------------------------------

    def batch_create(self, items: list[PromptCreate]) -> PromptBatchResult:
        """
        Cria varios prompts, um por transacao.

        Itens ja criados permanecem se um item posterior falhar.
        """
        created = [self.create_prompt(item, source='batch') for item in items]
        return PromptBatchResult(
            message=f'{len(created)} prompts criados com sucesso',
            data=created,
        )

    def batch_delete(self, prompt_ids: list[int]) -> int:
        """Exclui varios prompts; IDs inexistentes sao ignorados."""
        deleted = self._repository.delete_many(prompt_ids)
        logger.info('Prompts excluidos em lote', requested=len(prompt_ids), deleted=deleted)
        return deleted

    # ------------------------------------------------------------------
    # Importacao / exportacao
    # ------------------------------------------------------------------

    def import_prompts(self, filename: str | None, raw: bytes) -> PromptBatchResult:
        """
        Importa prompts de um arquivo JSON, CSV ou Markdown/texto.

        Apenas titulo, conteudo, descricao e prioridade sao considerados.
        Registros sem titulo/conteudo ou invalidos sao ignorados; cada
        registro aceito e criado em sua propria transacao.

        Raises:
            BadRequestException: Arquivo vazio, grande demais ou com
                extensao nao suportada.
            ImportException: Conteudo que nao pode ser interpretado.
        """
        if len(raw) > self._import_max_bytes:
            raise BadRequestException('Arquivo excede o tamanho maximo permitido')

        file_format, records = transfer.parse_upload(filename, raw)

        created: list[PromptResponse] = []
        skipped = 0
        for index, record in enumerate(records):
            if not record.get('title') or not record.get('content'):
                skipped += 1
                continue
            try:
                data = PromptCreate(
                    title=record['title'],
                    content=record['content'],
                    description=record.get('description') or None,
                    priority=coerce_int(record.get('priority'), default=0),
                )
            except ValidationError as e:
                skipped += 1
                logger.warning(
                    'Registro de importacao ignorado',
                    index=index,
                    errors=e.error_count(),
                )
                continue
            created.append(self.create_prompt(data, source='import'))

        track_import(file_format, len(created), skipped)
        logger.info(
            'Importacao concluida',
            filename=filename,
            format=file_format,
            created=len(created),
            skipped=skipped,
        )
        return PromptBatchResult(
            message=f'{len(created)} prompts importados com sucesso',
            data=created,
        )

    def export_prompts(
        self,
        export_format: str,
        filters: PromptFilter,
    ) -> tuple[str, str, str]:
        """
        Exporta os prompts filtrados.

        Returns:
            Tupla (corpo, media type, nome do arquivo).

        Raises:
            BadRequestException: Se o formato nao for json ou csv.
        """
        if export_format not in transfer.EXPORT_FORMATS:
            raise BadRequestException('Formato de exportacao nao suportado')

        prompts = self._repository.get_all(filters)
        records = transfer.to_export_records(prompts)
        return transfer.render_export(records, export_format)
