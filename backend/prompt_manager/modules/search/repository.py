from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from prompt_manager.modules.categories.models import Category
from prompt_manager.modules.prompts.models import Prompt
from prompt_manager.modules.search.models import SearchHistory
from prompt_manager.modules.tags.models import Tag

DEFAULT_MAX_HISTORY_ENTRIES = 500


class SearchRepository:
    """
    Repositorio de sugestoes e historico de buscas.

    A busca de prompts em si usa o PromptRepository.
    """

    def __init__(self, db: Session, max_history_entries: int = DEFAULT_MAX_HISTORY_ENTRIES) -> None:
        """Inicializa o repositorio com a sessao do banco."""
        self._db = db
        self._max_history_entries = max_history_entries

    def suggest_prompt_titles(self, text: str, limit: int) -> list[str]:
        """Titulos que contem o texto, mais usados primeiro."""
        stmt = (
            select(Prompt.title)
            .where(Prompt.title.contains(text, autoescape=True))
            .order_by(Prompt.use_count.desc(), Prompt.id.asc())
            .limit(limit)
        )
        return list(self._db.execute(stmt).scalars().all())

    def suggest_category_names(self, text: str, limit: int) -> list[str]:
        """Nomes de categorias que contem o texto."""
        stmt = (
            select(Category.name)
            .where(Category.name.contains(text, autoescape=True))
            .order_by(Category.name.asc())
            .limit(limit)
        )
        return list(self._db.execute(stmt).scalars().all())

    def suggest_tag_names(self, text: str, limit: int) -> list[str]:
        """Nomes de tags que contem o texto."""
        stmt = (
            select(Tag.name)
            .where(Tag.name.contains(text, autoescape=True))
            .order_by(Tag.name.asc())
            .limit(limit)
        )
        return list(self._db.execute(stmt).scalars().all())

    # ------------------------------------------------------------------
    # Historico
    # ------------------------------------------------------------------

    def add_history(self, query: str) -> SearchHistory:
        """
        Registra um termo pesquisado.

        Na mesma transacao remove as entradas mais antigas que excedem
        max_history_entries.
        """
        entry = SearchHistory(query=query)
        self._db.add(entry)
        self._db.flush()

        newest = (
            select(SearchHistory.id)
            .order_by(SearchHistory.id.desc())
            .limit(self._max_history_entries)
        )
        self._db.execute(
            delete(SearchHistory)
            .where(SearchHistory.id.not_in(newest))
            .execution_options(synchronize_session=False)
        )
        self._db.commit()
        self._db.refresh(entry)
        return entry

    def get_history(self, limit: int) -> list[SearchHistory]:
        """Termos pesquisados, mais recentes primeiro."""
        stmt = (
            select(SearchHistory)
            .order_by(SearchHistory.searched_at.desc(), SearchHistory.id.desc())
            .limit(limit)
        )
        return list(self._db.execute(stmt).scalars().all())

    def clear_history(self) -> int:
        """Remove todo o historico. Retorna a quantidade removida."""
        result = self._db.execute(delete(SearchHistory))
        self._db.commit()
        return result.rowcount or 0
