from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from prompt_manager.modules.categories.models import Category
from prompt_manager.modules.prompts.models import Prompt, UsageHistory, prompt_tags
from prompt_manager.modules.tags.models import Tag


class StatsRepository:
    """
    Consultas agregadas para o dashboard de estatisticas.

    Somente leitura. Nada e armazenado em cache: cada chamada consulta o
    banco.
    """

    def __init__(self, db: Session) -> None:
        """Inicializa o repositorio com a sessao do banco."""
        self._db = db

    def count_prompts(self) -> int:
        return self._db.execute(select(func.count(Prompt.id))).scalar_one()

    def count_categories(self) -> int:
        return self._db.execute(select(func.count(Category.id))).scalar_one()

    def count_tags(self) -> int:
        return self._db.execute(select(func.count(Tag.id))).scalar_one()

    def sum_use_count(self) -> int:
        """Soma de useCount de todos os prompts (0 sem prompts)."""
        stmt = select(func.coalesce(func.sum(Prompt.use_count), 0))
        return int(self._db.execute(stmt).scalar_one())

    def average_rating(self) -> float | None:
        """Media das avaliacoes (None sem prompts)."""
        return self._db.execute(select(func.avg(Prompt.rating))).scalar_one()

    def get_most_used_prompt(self) -> Prompt | None:
        stmt = select(Prompt).order_by(Prompt.use_count.desc(), Prompt.id.asc()).limit(1)
        return self._db.execute(stmt).scalars().first()

    def get_latest_prompt(self) -> Prompt | None:
        stmt = select(Prompt).order_by(Prompt.created_at.desc(), Prompt.id.desc()).limit(1)
        return self._db.execute(stmt).scalars().first()

    def get_top_prompts(self, limit: int) -> list[Prompt]:
        stmt = select(Prompt).order_by(Prompt.use_count.desc(), Prompt.id.asc()).limit(limit)
        return list(self._db.execute(stmt).scalars().all())

    def get_usage_since(self, start: datetime, limit: int) -> list[UsageHistory]:
        """
        Usos a partir de start, mais recentes primeiro.

        Args:
            start: Inicio da janela (inclusivo).
            limit: Quantidade maxima de registros.
        """
        stmt = (
            select(UsageHistory)
            .options(selectinload(UsageHistory.prompt))
            .where(UsageHistory.used_at >= start)
            .order_by(UsageHistory.used_at.desc(), UsageHistory.id.desc())
            .limit(limit)
        )
        return list(self._db.execute(stmt).scalars().all())

    def count_usage_since(self, start: datetime) -> int:
        stmt = select(func.count(UsageHistory.id)).where(UsageHistory.used_at >= start)
        return self._db.execute(stmt).scalar_one()

    def get_creation_times_since(self, start: datetime) -> list[datetime]:
        """Instantes de criacao dos prompts a partir de start."""
        stmt = select(Prompt.created_at).where(Prompt.created_at >= start)
        return list(self._db.execute(stmt).scalars().all())

    def get_usage_times_since(self, start: datetime) -> list[datetime]:
        """Instantes dos usos a partir de start."""
        stmt = select(UsageHistory.used_at).where(UsageHistory.used_at >= start)
        return list(self._db.execute(stmt).scalars().all())

    def get_category_aggregates(self) -> list[tuple[Category, int, int, float | None]]:
        """
        Por categoria: quantidade de prompts, soma de useCount e media de rating.

        Ordenado pela quantidade de prompts (desc) e pelo nome.
        """
        prompt_count = func.count(Prompt.id)
        stmt = (
            select(
                Category,
                prompt_count,
                func.coalesce(func.sum(Prompt.use_count), 0),
                func.avg(Prompt.rating),
            )
            .outerjoin(Prompt, Prompt.category_id == Category.id)
            .group_by(Category.id)
            .order_by(prompt_count.desc(), Category.name.asc())
        )
        return [tuple(row) for row in self._db.execute(stmt).all()]

    def get_tag_aggregates(self) -> list[tuple[Tag, int, int, float | None]]:
        """Por tag: quantidade de prompts, soma de useCount e media de rating."""
        prompt_count = func.count(Prompt.id)
        stmt = (
            select(
                Tag,
                prompt_count,
                func.coalesce(func.sum(Prompt.use_count), 0),
                func.avg(Prompt.rating),
            )
            .outerjoin(prompt_tags, prompt_tags.c.tag_id == Tag.id)
            .outerjoin(Prompt, Prompt.id == prompt_tags.c.prompt_id)
            .group_by(Tag.id)
            .order_by(prompt_count.desc(), Tag.name.asc())
        )
        return [tuple(row) for row in self._db.execute(stmt).all()]
