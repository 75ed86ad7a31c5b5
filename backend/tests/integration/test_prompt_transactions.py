"""
Integration tests for atomic prompt writes.

Prompt creation (with tags and the initial version) and usage recording
(with the counter increment) must leave nothing behind when any insert
of the transaction fails.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from prompt_manager.modules.prompts import repository as repository_module
from prompt_manager.modules.prompts.models import Prompt, PromptVersion, UsageHistory
from prompt_manager.modules.prompts.repository import PromptRepository
from prompt_manager.modules.tags.models import Tag


def _count(session, model) -> int:
    return session.execute(select(func.count(model.id))).scalar_one()


@pytest.fixture
def broken_version(monkeypatch):
    """Versao inicial sem rotulo, violando NOT NULL no commit."""

    def _factory(**fields):
        return PromptVersion(**{**fields, 'version': None})

    monkeypatch.setattr(repository_module, 'PromptVersion', _factory)


@pytest.fixture
def broken_usage(monkeypatch):
    """Registro de uso sem prompt_id, violando NOT NULL no commit."""

    def _factory(**fields):
        return UsageHistory(**{**fields, 'prompt_id': None})

    monkeypatch.setattr(repository_module, 'UsageHistory', _factory)


class TestCreateRollback:
    """A failed version insert rolls back the prompt and its new tags."""

    def test_repository_leaves_no_rows(self, db_session, broken_version):
        repository = PromptRepository(db_session)

        with pytest.raises(IntegrityError):
            repository.create(
                {'title': 'T', 'content': 'C', 'priority': 0},
                ['nova', 'outra'],
                '1.0.0',
            )

        assert _count(db_session, Prompt) == 0
        assert _count(db_session, Tag) == 0
        assert _count(db_session, PromptVersion) == 0

    def test_api_rejects_and_keeps_existing_tags(self, app, broken_version):
        with TestClient(app, raise_server_exceptions=False) as client:
            client.post('/api/tags', json={'name': 'existente'})

            response = client.post(
                '/api/prompts',
                json={'title': 'T', 'content': 'C', 'tags': ['existente', 'orfa']},
            )

            assert response.status_code == 400
            assert 'error' in response.json()
            assert client.get('/api/prompts').json()['pagination']['total'] == 0
            assert [tag['name'] for tag in client.get('/api/tags').json()] == ['existente']


class TestUsageRollback:
    """A failed usage insert keeps the counter unchanged."""

    def test_counter_not_incremented(self, db_session, broken_usage):
        repository = PromptRepository(db_session)
        prompt = Prompt(title='T', content='C', priority=0)
        db_session.add(prompt)
        db_session.commit()

        with pytest.raises(IntegrityError):
            repository.add_usage(prompt, 'contexto')

        db_session.refresh(prompt)
        assert prompt.use_count == 0
        assert _count(db_session, UsageHistory) == 0
