"""
Script de seed com categorias, tags e prompts de exemplo.

Executar via: python -m scripts.seed
"""

import sys

from prompt_manager.config import settings
from prompt_manager.database import Database
from prompt_manager.modules.categories.repository import CategoryRepository
from prompt_manager.modules.categories.schemas import CategoryCreate
from prompt_manager.modules.categories.service import CategoryService
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.prompts.schemas import PromptCreate
from prompt_manager.modules.prompts.service import PromptService
from prompt_manager.modules.search.models import SearchHistory  # noqa: F401

SAMPLE_CATEGORIES = [
    {'name': 'Programacao', 'description': 'Prompts para escrever e revisar codigo', 'color': '#52c41a'},
    {'name': 'Escrita', 'description': 'Textos, resumos e revisoes', 'color': '#1890ff'},
    {'name': 'Analise', 'description': 'Analise de dados e documentos', 'color': '#fa8c16'},
]

SAMPLE_PROMPTS = [
    {
        'title': 'Revisao de codigo',
        'content': 'Revise o codigo abaixo apontando bugs, problemas de legibilidade e melhorias:\n\n{codigo}',
        'category': 'Programacao',
        'tags': ['revisao', 'codigo'],
        'priority': 8,
    },
    {
        'title': 'Gerar testes unitarios',
        'content': 'Escreva testes unitarios com pytest para a funcao a seguir:\n\n{funcao}',
        'category': 'Programacao',
        'tags': ['testes', 'codigo'],
        'priority': 6,
    },
    {
        'title': 'Resumo executivo',
        'content': 'Resuma o texto a seguir em ate 5 topicos objetivos:\n\n{texto}',
        'category': 'Escrita',
        'tags': ['resumo'],
        'priority': 5,
    },
    {
        'title': 'Analise de planilha',
        'content': 'Analise os dados abaixo e destaque tendencias e valores fora do padrao:\n\n{dados}',
        'category': 'Analise',
        'tags': ['dados'],
        'priority': 4,
    },
]


def seed_sample_data() -> None:
    """
    Cria categorias e prompts de exemplo se a base estiver vazia.

    Os prompts passam pelo fluxo normal de criacao (tags criadas pelo
    nome e versao inicial 1.0.0).
    """
    database = Database(settings.database_url)
    if settings.auto_create_tables:
        database.create_all()

    db = database.session()
    try:
        prompt_repository = PromptRepository(db)
        category_service = CategoryService(CategoryRepository(db), prompt_repository)
        prompt_service = PromptService(prompt_repository)

        if category_service.list_categories():
            print('Base ja possui categorias. Seed ignorado.')
            return

        category_ids: dict[str, int] = {}
        for data in SAMPLE_CATEGORIES:
            category = category_service.create_category(CategoryCreate(**data))
            category_ids[category.name] = category.id

        for data in SAMPLE_PROMPTS:
            prompt_service.create_prompt(
                PromptCreate(
                    title=data['title'],
                    content=data['content'],
                    category_id=category_ids[data['category']],
                    tags=data['tags'],
                    priority=data['priority'],
                ),
                source='seed',
            )

        print(
            f'Seed concluido!\n'
            f'  Categorias: {len(SAMPLE_CATEGORIES)}\n'
            f'  Prompts: {len(SAMPLE_PROMPTS)}'
        )
    except Exception as e:
        print(f'Erro ao popular a base: {e}', file=sys.stderr)
        sys.exit(1)
    finally:
        db.close()
        database.dispose()


if __name__ == '__main__':
    seed_sample_data()
