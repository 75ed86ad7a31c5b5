from sqlalchemy.exc import IntegrityError

from prompt_manager.modules.categories.repository import CategoryRepository
from prompt_manager.modules.categories.schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
    CategoryWithCountResponse,
)
from prompt_manager.modules.prompts.filters import PageRequest, SortSpec
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import (
    CategoryPromptsResponse,
    PromptFilter,
    PromptResponse,
)
from prompt_manager.shared.exceptions import ConflictException, NotFoundException
from prompt_manager.shared.logging import get_logger
from prompt_manager.shared.schemas import Pagination

logger = get_logger(__name__)

DUPLICATE_NAME_MESSAGE = 'Ja existe uma categoria com este nome'


class CategoryService:
    """
    Servico de categorias.

    A unicidade do nome e garantida pela constraint do banco; a violacao
    e convertida em ConflictException. Categorias com prompts vinculados
    nao podem ser excluidas.
    """

    def __init__(
        self,
        repository: CategoryRepository,
        prompt_repository: PromptRepository,
    ) -> None:
        """Inicializa o servico com os repositorios de categorias e prompts."""
        self._repository = repository
        self._prompt_repository = prompt_repository

    def _get_or_404(self, category_id: int):
        category = self._repository.get_by_id(category_id)
        if not category:
            raise NotFoundException('Categoria nao encontrada')
        return category

    def list_categories(self) -> list[CategoryWithCountResponse]:
        """Lista todas as categorias por nome, com promptCount."""
        return [
            CategoryWithCountResponse(
                **CategoryResponse.model_validate(category).model_dump(),
                prompt_count=count,
            )
            for category, count in self._repository.get_all_with_counts()
        ]

    def get_category(self, category_id: int) -> CategoryWithCountResponse:
        """
        Busca uma categoria pelo ID.

        Raises:
            NotFoundException: Se a categoria nao for encontrada.
        """
        category = self._get_or_404(category_id)
        return CategoryWithCountResponse(
            **CategoryResponse.model_validate(category).model_dump(),
            prompt_count=self._repository.count_prompts(category_id),
        )

    def create_category(self, data: CategoryCreate) -> CategoryResponse:
        """
        Cria uma nova categoria.

        Raises:
            ConflictException: Se o nome ja estiver em uso.
        """
        try:
            category = self._repository.create(data.model_dump())
        except IntegrityError as e:
            raise ConflictException(DUPLICATE_NAME_MESSAGE) from e

        logger.info('Categoria criada', category_id=category.id, name=category.name)
        return CategoryResponse.model_validate(category)

    def update_category(self, category_id: int, data: CategoryUpdate) -> CategoryResponse:
        """
        Atualiza parcialmente uma categoria.

        Raises:
            NotFoundException: Se a categoria nao for encontrada.
            ConflictException: Se o novo nome ja estiver em uso.
        """
        category = self._get_or_404(category_id)

        update_data = data.model_dump(exclude_unset=True)
        # Nome e cor sao obrigatorios no banco; null explicito e ignorado
        for key in ('name', 'color'):
            if key in update_data and update_data[key] is None:
                del update_data[key]

        if not update_data:
            return CategoryResponse.model_validate(category)

        try:
            category = self._repository.update(category, update_data)
        except IntegrityError as e:
            raise ConflictException(DUPLICATE_NAME_MESSAGE) from e

        return CategoryResponse.model_validate(category)

    def delete_category(self, category_id: int) -> None:
        """
        Exclui uma categoria sem prompts vinculados.

        Raises:
            NotFoundException: Se a categoria nao for encontrada.
            ConflictException: Se ainda houver prompts na categoria.
        """
        category = self._get_or_404(category_id)

        prompt_count = self._repository.count_prompts(category_id)
        if prompt_count > 0:
            raise ConflictException(
                f'A categoria possui {prompt_count} prompt(s) vinculado(s) e nao pode ser excluida'
            )

        try:
            self._repository.delete(category)
        except IntegrityError as e:
            raise ConflictException('A categoria esta em uso e nao pode ser excluida') from e
        logger.info('Categoria excluida', category_id=category_id)

    def list_category_prompts(
        self,
        category_id: int,
        page: PageRequest,
    ) -> CategoryPromptsResponse:
        """
        Prompts da categoria, mais recentes primeiro.

        Raises:
            NotFoundException: Se a categoria nao for encontrada.
        """
        category = self._get_or_404(category_id)
        prompts, total = self._prompt_repository.get_page(
            PromptFilter(category_id=category_id),
            SortSpec(),
            page,
        )
        return CategoryPromptsResponse(
            category=CategoryResponse.model_validate(category),
            data=[PromptResponse.model_validate(prompt) for prompt in prompts],
            pagination=Pagination.create(page=page.page, limit=page.limit, total=total),
        )
