from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from prompt_manager.modules.prompts.models import prompt_tags
from prompt_manager.modules.tags.models import Tag


class TagRepository:
    """Repositorio de acesso a dados de tags."""

    def __init__(self, db: Session) -> None:
        """Inicializa o repositorio com a sessao do banco."""
        self._db = db

    def _with_counts(self):
        prompt_count = func.count(prompt_tags.c.prompt_id)
        stmt = (
            select(Tag, prompt_count)
            .outerjoin(prompt_tags, prompt_tags.c.tag_id == Tag.id)
            .group_by(Tag.id)
        )
        return stmt, prompt_count

    def get_all_with_counts(self) -> list[tuple[Tag, int]]:
        """Todas as tags ordenadas por nome, com a quantidade de prompts."""
        stmt, _ = self._with_counts()
        stmt = stmt.order_by(Tag.name.asc())
        return [(tag, count) for tag, count in self._db.execute(stmt).all()]

    def get_popular(self, limit: int) -> list[tuple[Tag, int]]:
        """
        Tags mais usadas.

        Args:
            limit: Quantidade maxima de tags.

        Returns:
            Lista de tuplas (tag, quantidade de prompts), maior contagem primeiro.
        """
        stmt, prompt_count = self._with_counts()
        stmt = stmt.order_by(prompt_count.desc(), Tag.name.asc()).limit(limit)
        return [(tag, count) for tag, count in self._db.execute(stmt).all()]

    def get_by_id(self, tag_id: int) -> Tag | None:
        """Busca uma tag pelo ID."""
        return self._db.get(Tag, tag_id)

    def count_prompts(self, tag_id: int) -> int:
        """Quantidade de prompts que usam a tag."""
        stmt = select(func.count(prompt_tags.c.prompt_id)).where(prompt_tags.c.tag_id == tag_id)
        return self._db.execute(stmt).scalar_one()

    def create(self, tag_data: dict) -> Tag:
        """
        Cria uma nova tag.

        Raises:
            IntegrityError: Se o nome ja existir.
        """
        tag = Tag(**tag_data)
        self._db.add(tag)
        self._commit()
        self._db.refresh(tag)
        return tag

    def update(self, tag: Tag, tag_data: dict) -> Tag:
        """Atualiza os campos informados da tag."""
        for key, value in tag_data.items():
            setattr(tag, key, value)
        self._commit()
        self._db.refresh(tag)
        return tag

    def delete(self, tag: Tag) -> None:
        """Exclui a tag."""
        self._db.delete(tag)
        self._commit()

    def _commit(self) -> None:
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise
