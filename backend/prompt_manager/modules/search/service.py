from prompt_manager.modules.prompts.filters import PageRequest, resolve_sort
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import PromptFilter, PromptResponse
from prompt_manager.modules.search.repository import SearchRepository
from prompt_manager.modules.search.schemas import (
    SearchHistoryEntry,
    SearchHistoryResponse,
    SearchResponse,
    Suggestion,
    SuggestionsResponse,
)
from prompt_manager.shared.exceptions import BadRequestException
from prompt_manager.shared.logging import get_logger
from prompt_manager.shared.schemas import Pagination
from prompt_manager.shared.utils import MAX_INT

logger = get_logger(__name__)

MIN_SUGGESTION_LENGTH = 2
PROMPT_SUGGESTIONS = 5
CATEGORY_SUGGESTIONS = 3
TAG_SUGGESTIONS = 3


def parse_tag_ids(raw: str | None) -> list[int] | None:
    """
    Converte "1,2,3" em [1, 2, 3].

    Raises:
        BadRequestException: Se algum item nao for um inteiro positivo.
    """
    if raw is None or not raw.strip():
        return None

    tag_ids: list[int] = []
    for part in raw.split(','):
        part = part.strip()
        if not part:
            continue
        if not (part.isascii() and part.isdigit()) or not 1 <= int(part) <= MAX_INT:
            raise BadRequestException('Parametro tags deve conter IDs numericos separados por virgula')
        tag_ids.append(int(part))
    return tag_ids or None


class SearchService:
    """
    Servico de busca.

    A busca usa o mesmo montador de filtros da listagem, mas filtra as
    tags pelo ID. Termos nao vazios sao gravados no historico.
    """

    def __init__(
        self,
        repository: SearchRepository,
        prompt_repository: PromptRepository,
    ) -> None:
        """Inicializa o servico com os repositorios de busca e prompts."""
        self._repository = repository
        self._prompt_repository = prompt_repository

    def search(
        self,
        query: str,
        category_id: int | None,
        tag_ids: list[int] | None,
        sort_by: str,
        sort_order: str,
        page: PageRequest,
    ) -> SearchResponse:
        """
        Busca prompts por substring em titulo, conteudo ou descricao.

        Args:
            query: Texto pesquisado (vazio retorna todos).
            category_id: Filtro por categoria.
            tag_ids: Filtro por IDs de tags.
            sort_by: Campo de ordenacao ("relevance" ordena por createdAt).
            sort_order: asc ou desc.
            page: Pagina solicitada.

        Returns:
            Prompts encontrados, paginacao e o termo pesquisado.
        """
        filters = PromptFilter(
            search=query or None,
            category_id=category_id,
            tag_ids=tag_ids,
        )
        prompts, total = self._prompt_repository.get_page(
            filters,
            resolve_sort(sort_by, sort_order),
            page,
        )

        if query.strip():
            self._repository.add_history(query.strip())

        logger.debug('Busca executada', query=query, total=total)
        return SearchResponse(
            prompts=[PromptResponse.model_validate(prompt) for prompt in prompts],
            pagination=Pagination.create(page=page.page, limit=page.limit, total=total),
            query=query,
        )

    def get_suggestions(self, query: str) -> SuggestionsResponse:
        """
        Sugestoes a partir de titulos de prompts, categorias e tags.

        Textos com menos de 2 caracteres nao geram sugestoes.
        """
        if len(query) < MIN_SUGGESTION_LENGTH:
            return SuggestionsResponse(suggestions=[])

        suggestions = [
            Suggestion(type='prompt', text=title)
            for title in self._repository.suggest_prompt_titles(query, PROMPT_SUGGESTIONS)
        ]
        suggestions += [
            Suggestion(type='category', text=name)
            for name in self._repository.suggest_category_names(query, CATEGORY_SUGGESTIONS)
        ]
        suggestions += [
            Suggestion(type='tag', text=name)
            for name in self._repository.suggest_tag_names(query, TAG_SUGGESTIONS)
        ]
        return SuggestionsResponse(suggestions=suggestions)

    # ------------------------------------------------------------------
    # Historico
    # ------------------------------------------------------------------

    def get_history(self, limit: int) -> SearchHistoryResponse:
        """Ultimos termos pesquisados."""
        entries = self._repository.get_history(limit)
        return SearchHistoryResponse(
            history=[SearchHistoryEntry.model_validate(entry) for entry in entries]
        )

    def save_history(self, query: str) -> SearchHistoryEntry:
        """Registra um termo no historico."""
        entry = self._repository.add_history(query)
        return SearchHistoryEntry.model_validate(entry)

    def clear_history(self) -> int:
        """Remove todo o historico de buscas."""
        removed = self._repository.clear_history()
        logger.info('Historico de buscas limpo', removed=removed)
        return removed
