from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session, selectinload, with_expression

from prompt_manager.modules.categories.models import Category
from prompt_manager.modules.prompts.filters import (
    PageRequest,
    SortSpec,
    apply_conditions,
    build_conditions,
)
from prompt_manager.modules.prompts.models import Prompt, PromptVersion, UsageHistory
from prompt_manager.modules.prompts.schemas import PromptFilter
from prompt_manager.modules.tags.models import Tag

# Subqueries correlacionadas para as contagens exibidas na listagem
_usage_count = (
    select(func.count(UsageHistory.id))
    .where(UsageHistory.prompt_id == Prompt.id)
    .correlate(Prompt)
    .scalar_subquery()
)
_version_count = (
    select(func.count(PromptVersion.id))
    .where(PromptVersion.prompt_id == Prompt.id)
    .correlate(Prompt)
    .scalar_subquery()
)


class PromptRepository:
    """
    Repositorio de acesso a dados de prompts.

    Responsavel por operacoes de leitura e escrita nas tabelas prompts,
    prompt_tags, usage_history e prompt_versions. Cada metodo de escrita
    faz um unico commit, de modo que o agregado (prompt, tags e versao)
    e gravado ou descartado por inteiro.
    """

    def __init__(self, db: Session) -> None:
        """Inicializa o repositorio com a sessao do banco."""
        self._db = db

    # ------------------------------------------------------------------
    # Leitura
    # ------------------------------------------------------------------

    def get_page(
        self,
        filters: PromptFilter,
        sort: SortSpec,
        page: PageRequest,
        with_counts: bool = False,
    ) -> tuple[list[Prompt], int]:
        """
        Busca uma pagina de prompts e o total correspondente.

        A mesma lista de condicoes e aplicada a query paginada e a query
        de contagem.

        Args:
            filters: Filtros opcionais.
            sort: Campo e direcao da ordenacao.
            page: Pagina solicitada.
            with_counts: Preenche usage_count e version_count.

        Returns:
            Tupla com a lista de prompts e o total de registros.
        """
        conditions = build_conditions(filters)

        count_stmt = apply_conditions(select(func.count(Prompt.id)), conditions)
        total: int = self._db.execute(count_stmt).scalar_one()

        stmt = apply_conditions(select(Prompt), conditions)
        if with_counts:
            stmt = stmt.options(
                with_expression(Prompt.usage_count, _usage_count),
                with_expression(Prompt.version_count, _version_count),
            )
        stmt = stmt.order_by(*sort.clauses()).offset(page.skip).limit(page.take)

        prompts: list[Prompt] = list(self._db.execute(stmt).scalars().all())
        return prompts, total

    def get_all(self, filters: PromptFilter) -> list[Prompt]:
        """Busca todos os prompts que atendem aos filtros (sem paginacao)."""
        stmt = apply_conditions(select(Prompt), build_conditions(filters))
        stmt = stmt.order_by(Prompt.id.asc())
        return list(self._db.execute(stmt).scalars().all())

    def get_by_id(self, prompt_id: int) -> Prompt | None:
        """
        Busca um prompt pelo ID.

        Args:
            prompt_id: ID do prompt.

        Returns:
            Prompt encontrado ou None.
        """
        return self._db.get(Prompt, prompt_id)

    def get_popular(self, limit: int) -> list[Prompt]:
        """Prompts mais usados (useCount desc, rating desc)."""
        stmt = (
            select(Prompt)
            .order_by(Prompt.use_count.desc(), Prompt.rating.desc(), Prompt.id.asc())
            .limit(limit)
        )
        return list(self._db.execute(stmt).scalars().all())

    def get_favorites(self) -> list[Prompt]:
        """Prompts favoritos, atualizados mais recentemente primeiro."""
        stmt = (
            select(Prompt)
            .where(Prompt.is_favorite.is_(True))
            .order_by(Prompt.updated_at.desc(), Prompt.id.desc())
        )
        return list(self._db.execute(stmt).scalars().all())

    def get_recent_usage(self, limit: int, prompt_id: int | None = None) -> list[UsageHistory]:
        """
        Registros de uso mais recentes.

        Args:
            limit: Quantidade maxima de registros.
            prompt_id: Restringe a um prompt (opcional).

        Returns:
            Lista de registros com o prompt carregado.
        """
        stmt = select(UsageHistory).options(selectinload(UsageHistory.prompt))
        if prompt_id is not None:
            stmt = stmt.where(UsageHistory.prompt_id == prompt_id)
        stmt = stmt.order_by(UsageHistory.used_at.desc(), UsageHistory.id.desc()).limit(limit)
        return list(self._db.execute(stmt).scalars().all())

    def get_versions(self, prompt_id: int) -> list[PromptVersion]:
        """Historico de versoes do prompt, da mais recente para a mais antiga."""
        stmt = (
            select(PromptVersion)
            .where(PromptVersion.prompt_id == prompt_id)
            .order_by(PromptVersion.created_at.desc(), PromptVersion.id.desc())
        )
        return list(self._db.execute(stmt).scalars().all())

    def category_exists(self, category_id: int) -> bool:
        """Verifica se a categoria existe."""
        return self._db.get(Category, category_id) is not None

    # ------------------------------------------------------------------
    # Escrita
    # ------------------------------------------------------------------

    def _resolve_tags(self, names: list[str]) -> list[Tag]:
        """
        Retorna as tags com os nomes informados, criando as que faltam.

        Nomes repetidos resultam em uma unica tag.
        """
        unique_names = list(dict.fromkeys(names))
        if not unique_names:
            return []

        stmt = select(Tag).where(Tag.name.in_(unique_names))
        existing = {tag.name: tag for tag in self._db.execute(stmt).scalars().all()}

        tags: list[Tag] = []
        for name in unique_names:
            tag = existing.get(name)
            if tag is None:
                tag = Tag(name=name)
                self._db.add(tag)
            tags.append(tag)
        return tags

    def create(
        self,
        prompt_data: dict,
        tag_names: list[str],
        initial_version: str,
    ) -> Prompt:
        """
        Cria um prompt com suas tags e a versao inicial em uma transacao.

        Args:
            prompt_data: Campos do prompt.
            tag_names: Nomes das tags (criadas se nao existirem).
            initial_version: Rotulo da versao inicial.

        Returns:
            Prompt criado.
        """
        try:
            prompt = Prompt(**prompt_data)
            prompt.tags = self._resolve_tags(tag_names)
            prompt.versions = [
                PromptVersion(
                    version=initial_version,
                    title=prompt.title,
                    content=prompt.content,
                    description=prompt.description,
                    change_log='Versao inicial',
                )
            ]
            self._db.add(prompt)
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        self._db.refresh(prompt)
        return prompt

    def update(
        self,
        prompt: Prompt,
        update_data: dict,
        tag_names: list[str] | None = None,
    ) -> Prompt:
        """
        Atualiza campos do prompt e, opcionalmente, substitui suas tags.

        Args:
            prompt: Prompt a atualizar.
            update_data: Campos a alterar.
            tag_names: Novo conjunto de tags (None mantem o atual).

        Returns:
            Prompt atualizado.
        """
        try:
            for key, value in update_data.items():
                setattr(prompt, key, value)
            if tag_names is not None:
                prompt.tags = self._resolve_tags(tag_names)
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        self._db.refresh(prompt)
        return prompt

    def delete(self, prompt: Prompt) -> None:
        """Exclui o prompt (historico e versoes sao removidos em cascata)."""
        self._db.delete(prompt)
        self._db.commit()

    def delete_many(self, prompt_ids: list[int]) -> int:
        """
        Exclui varios prompts em uma unica instrucao.

        Returns:
            Quantidade de prompts excluidos.
        """
        stmt = (
            delete(Prompt)
            .where(Prompt.id.in_(prompt_ids))
            .execution_options(synchronize_session=False)
        )
        result = self._db.execute(stmt)
        self._db.commit()
        return result.rowcount or 0

    def add_usage(self, prompt: Prompt, context: str | None) -> UsageHistory:
        """
        Registra um uso e incrementa o contador do prompt na mesma transacao.
        """
        try:
            usage = UsageHistory(prompt_id=prompt.id, context=context)
            self._db.add(usage)
            # Incremento feito no banco para nao perder usos concorrentes
            prompt.use_count = Prompt.use_count + 1
            self._db.commit()
        except Exception:
            self._db.rollback()
            raise

        self._db.refresh(prompt)
        return usage

    def save(self, prompt: Prompt) -> Prompt:
        """Persiste alteracoes simples ja aplicadas ao prompt."""
        self._db.commit()
        self._db.refresh(prompt)
        return prompt

    def add_version(self, prompt: Prompt, version: str, change_log: str | None) -> PromptVersion:
        """Cria um snapshot do titulo, conteudo e descricao atuais."""
        prompt_version = PromptVersion(
            prompt_id=prompt.id,
            version=version,
            title=prompt.title,
            content=prompt.content,
            description=prompt.description,
            change_log=change_log,
        )
        self._db.add(prompt_version)
        self._db.commit()
        self._db.refresh(prompt_version)
        return prompt_version
