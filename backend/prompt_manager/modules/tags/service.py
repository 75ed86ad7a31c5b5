from sqlalchemy.exc import IntegrityError

from prompt_manager.modules.prompts.filters import PageRequest, SortSpec
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import (
    PromptFilter,
    PromptResponse,
    TagPromptsResponse,
)
from prompt_manager.modules.tags.repository import TagRepository
from prompt_manager.modules.tags.schemas import (
    TagCreate,
    TagResponse,
    TagUpdate,
    TagWithCountResponse,
)
from prompt_manager.shared.exceptions import ConflictException, NotFoundException
from prompt_manager.shared.logging import get_logger
from prompt_manager.shared.schemas import Pagination

logger = get_logger(__name__)

DUPLICATE_NAME_MESSAGE = 'Ja existe uma tag com este nome'


def _with_count(tag, count: int) -> TagWithCountResponse:
    return TagWithCountResponse(
        **TagResponse.model_validate(tag).model_dump(),
        prompt_count=count,
    )


class TagService:
    """Servico de tags: CRUD com guarda de exclusao e ranking de uso."""

    def __init__(
        self,
        repository: TagRepository,
        prompt_repository: PromptRepository,
    ) -> None:
        """Inicializa o servico com os repositorios de tags e prompts."""
        self._repository = repository
        self._prompt_repository = prompt_repository

    def _get_or_404(self, tag_id: int):
        tag = self._repository.get_by_id(tag_id)
        if not tag:
            raise NotFoundException('Tag nao encontrada')
        return tag

    def list_tags(self) -> list[TagWithCountResponse]:
        """Lista todas as tags por nome, com promptCount."""
        return [_with_count(tag, count) for tag, count in self._repository.get_all_with_counts()]

    def get_popular(self, limit: int) -> list[TagWithCountResponse]:
        """Tags com mais prompts vinculados."""
        return [_with_count(tag, count) for tag, count in self._repository.get_popular(limit)]

    def get_tag(self, tag_id: int) -> TagWithCountResponse:
        """
        Busca uma tag pelo ID.

        Raises:
            NotFoundException: Se a tag nao for encontrada.
        """
        tag = self._get_or_404(tag_id)
        return _with_count(tag, self._repository.count_prompts(tag_id))

    def create_tag(self, data: TagCreate) -> TagResponse:
        """
        Cria uma nova tag.

        Raises:
            ConflictException: Se o nome ja estiver em uso.
        """
        try:
            tag = self._repository.create(data.model_dump())
        except IntegrityError as e:
            raise ConflictException(DUPLICATE_NAME_MESSAGE) from e

        logger.info('Tag criada', tag_id=tag.id, name=tag.name)
        return TagResponse.model_validate(tag)

    def update_tag(self, tag_id: int, data: TagUpdate) -> TagResponse:
        """
        Atualiza parcialmente uma tag.

        Raises:
            NotFoundException: Se a tag nao for encontrada.
            ConflictException: Se o novo nome ja estiver em uso.
        """
        tag = self._get_or_404(tag_id)

        update_data = {
            key: value
            for key, value in data.model_dump(exclude_unset=True).items()
            if value is not None
        }
        if not update_data:
            return TagResponse.model_validate(tag)

        try:
            tag = self._repository.update(tag, update_data)
        except IntegrityError as e:
            raise ConflictException(DUPLICATE_NAME_MESSAGE) from e

        return TagResponse.model_validate(tag)

    def delete_tag(self, tag_id: int) -> None:
        """
        Exclui uma tag que nao esteja em uso.

        Raises:
            NotFoundException: Se a tag nao for encontrada.
            ConflictException: Se algum prompt ainda usar a tag.
        """
        tag = self._get_or_404(tag_id)

        prompt_count = self._repository.count_prompts(tag_id)
        if prompt_count > 0:
            raise ConflictException(
                f'A tag esta em uso por {prompt_count} prompt(s) e nao pode ser excluida'
            )

        try:
            self._repository.delete(tag)
        except IntegrityError as e:
            raise ConflictException('A tag esta em uso e nao pode ser excluida') from e
        logger.info('Tag excluida', tag_id=tag_id)

    def list_tag_prompts(self, tag_id: int, page: PageRequest) -> TagPromptsResponse:
        """
        Prompts que usam a tag, mais recentes primeiro.

        Raises:
            NotFoundException: Se a tag nao for encontrada.
        """
        self._get_or_404(tag_id)
        prompts, total = self._prompt_repository.get_page(
            PromptFilter(tag_ids=[tag_id]),
            SortSpec(),
            page,
        )
        return TagPromptsResponse(
            prompts=[PromptResponse.model_validate(prompt) for prompt in prompts],
            pagination=Pagination.create(page=page.page, limit=page.limit, total=total),
        )
