"""
Pytest configuration and fixtures.
"""

import os
from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient

# Ambiente de teste definido antes de importar a aplicacao
os.environ['DATABASE_URI'] = 'sqlite://'
os.environ['METRICS_ENABLED'] = 'false'
os.environ['LOG_FORMAT'] = 'console'
os.environ['LOG_LEVEL'] = 'WARNING'
os.environ['APP_ENV'] = 'testing'

from prompt_manager.config import Settings  # noqa: E402
from prompt_manager.main import create_app  # noqa: E402


# ============ App Fixtures ============


@pytest.fixture
def test_settings() -> Settings:
    """Configuracoes isoladas: SQLite em memoria e sem metricas."""
    return Settings(
        database_uri='sqlite://',
        metrics_enabled=False,
        log_format='console',
        log_level='WARNING',
        app_env='testing',
    )


@pytest.fixture
def app(test_settings: Settings):
    """Aplicacao com banco em memoria novo a cada teste."""
    application = create_app(test_settings)
    application.state.database.create_all()
    yield application
    application.state.database.drop_all()
    application.state.database.dispose()


@pytest.fixture
def client(app) -> Generator[TestClient, None, None]:
    """Synchronous test client."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def db_session(app):
    """Sessao direta no banco da aplicacao de teste."""
    session = app.state.database.session()
    yield session
    session.close()


# ============ Data Helpers ============


@pytest.fixture
def create_category(client: TestClient):
    """Cria uma categoria via API e retorna o JSON da resposta."""

    def _create(name: str = 'Marketing', **extra) -> dict:
        response = client.post('/api/categories', json={'name': name, **extra})
        assert response.status_code == 201, response.text
        return response.json()

    return _create


@pytest.fixture
def create_prompt(client: TestClient):
    """Cria um prompt via API e retorna o JSON da resposta."""

    def _create(title: str = 'Resumo de reuniao', content: str = 'Resuma a reuniao', **extra) -> dict:
        response = client.post('/api/prompts', json={'title': title, 'content': content, **extra})
        assert response.status_code == 201, response.text
        return response.json()

    return _create
