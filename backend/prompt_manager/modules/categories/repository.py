from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from prompt_manager.modules.categories.models import Category
from prompt_manager.modules.prompts.models import Prompt


class CategoryRepository:
    """
    Repositorio de acesso a dados de categorias.

    Nao contem logica de negocio; conflitos de nome chegam como
    IntegrityError apos rollback da sessao.
    """

    def __init__(self, db: Session) -> None:
        """Inicializa o repositorio com a sessao do banco."""
        self._db = db

    def get_all_with_counts(self) -> list[tuple[Category, int]]:
        """
        Busca todas as categorias ordenadas por nome com a quantidade de prompts.

        Returns:
            Lista de tuplas (categoria, quantidade de prompts).
        """
        stmt = (
            select(Category, func.count(Prompt.id))
            .outerjoin(Prompt, Prompt.category_id == Category.id)
            .group_by(Category.id)
            .order_by(Category.name.asc())
        )
        return [(category, count) for category, count in self._db.execute(stmt).all()]

    def get_by_id(self, category_id: int) -> Category | None:
        """Busca uma categoria pelo ID."""
        return self._db.get(Category, category_id)

    def count_prompts(self, category_id: int) -> int:
        """Quantidade de prompts vinculados a categoria."""
        stmt = select(func.count(Prompt.id)).where(Prompt.category_id == category_id)
        return self._db.execute(stmt).scalar_one()

    def create(self, category_data: dict) -> Category:
        """
        Cria uma nova categoria.

        Raises:
            IntegrityError: Se o nome ja existir.
        """
        category = Category(**category_data)
        self._db.add(category)
        self._commit()
        self._db.refresh(category)
        return category

    def update(self, category: Category, category_data: dict) -> Category:
        """
        Atualiza os campos informados da categoria.

        Raises:
            IntegrityError: Se o novo nome ja existir.
        """
        for key, value in category_data.items():
            setattr(category, key, value)
        self._commit()
        self._db.refresh(category)
        return category

    def delete(self, category: Category) -> None:
        """Exclui a categoria."""
        self._db.delete(category)
        self._commit()

    def _commit(self) -> None:
        try:
            self._db.commit()
        except IntegrityError:
            self._db.rollback()
            raise
