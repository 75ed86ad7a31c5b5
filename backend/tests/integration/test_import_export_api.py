"""
Integration tests for prompt import and export.
"""

import json

import pytest
from fastapi.testclient import TestClient

from prompt_manager.main import create_app


class TestExport:
    """Tests for GET /api/prompts/export."""

    def test_export_json(self, client, create_category, create_prompt):
        category = create_category('Vendas')
        create_prompt('Oferta', 'compre', categoryId=category['id'], tags=['email'])

        response = client.get('/api/prompts/export')

        assert response.status_code == 200
        assert response.headers['content-type'].startswith('application/json')
        assert response.headers['content-disposition'] == 'attachment; filename=prompts.json'
        records = response.json()
        assert len(records) == 1
        assert records[0]['category'] == 'Vendas'
        assert records[0]['tags'] == ['email']
        assert records[0]['useCount'] == 0

    def test_export_csv(self, client, create_prompt):
        create_prompt('Diga "ola"', 'linha', tags=['a', 'b'])

        response = client.get('/api/prompts/export', params={'format': 'csv'})

        assert response.status_code == 200
        assert response.headers['content-type'].startswith('text/csv')
        assert response.headers['content-disposition'] == 'attachment; filename=prompts.csv'
        header, row = response.text.split('\n')
        assert header.startswith('id,title,content,description,category,tags')
        assert '"Diga ""ola"""' in row
        assert '"a;b"' in row

    def test_export_csv_empty(self, client):
        response = client.get('/api/prompts/export', params={'format': 'csv'})

        assert response.status_code == 200
        assert response.text == ''

    def test_export_filtered_by_tag_name(self, client, create_prompt):
        create_prompt('Com tag', 'x', tags=['email'])
        create_prompt('Sem tag', 'x')

        records = client.get('/api/prompts/export', params={'tags': 'email'}).json()

        assert [record['title'] for record in records] == ['Com tag']

    def test_export_unknown_format(self, client):
        response = client.get('/api/prompts/export', params={'format': 'xml'})

        assert response.status_code == 400
        assert 'error' in response.json()


class TestImport:
    """Tests for POST /api/prompts/import."""

    def test_import_json(self, client):
        payload = json.dumps([
            {'title': 'Um', 'content': 'conteudo um', 'priority': 2},
            {'title': 'Sem conteudo'},
            {'title': 'Dois', 'content': 'conteudo dois', 'category': 'Ignorada', 'tags': ['x']},
        ])

        response = client.post(
            '/api/prompts/import',
            files={'file': ('prompts.json', payload.encode('utf-8'), 'application/json')},
        )

        assert response.status_code == 200
        body = response.json()
        assert body['message'] == '2 prompts importados com sucesso'
        assert [item['title'] for item in body['data']] == ['Um', 'Dois']
        assert body['data'][0]['priority'] == 2
        assert body['data'][1]['categoryId'] is None
        assert body['data'][1]['tags'] == []

    def test_import_creates_initial_versions(self, client):
        payload = json.dumps({'title': 'Unico', 'content': 'texto'})

        created = client.post(
            '/api/prompts/import',
            files={'file': ('p.json', payload.encode('utf-8'))},
        ).json()['data'][0]

        versions = client.get(f'/api/prompts/{created["id"]}/versions').json()
        assert [v['version'] for v in versions] == ['1.0.0']

    def test_import_csv(self, client):
        text = 'title,content,description,priority\nA,texto a,desc,abc\nB,texto b,,4\n'

        body = client.post(
            '/api/prompts/import',
            files={'file': ('prompts.csv', text.encode('utf-8'), 'text/csv')},
        ).json()

        assert body['message'] == '2 prompts importados com sucesso'
        assert [item['priority'] for item in body['data']] == [0, 4]
        assert body['data'][1]['description'] is None

    def test_import_markdown(self, client):
        text = '# Resumo\nResuma o texto\n\n## Traducao\nTraduza para ingles\n'

        body = client.post(
            '/api/prompts/import',
            files={'file': ('notas.md', text.encode('utf-8'), 'text/markdown')},
        ).json()

        assert [item['title'] for item in body['data']] == ['Resumo', 'Traducao']
        assert body['data'][0]['description'] == 'Importado de arquivo Markdown'

    def test_import_skips_invalid_priority_range(self, client):
        payload = json.dumps([
            {'title': 'Ok', 'content': 'x', 'priority': 5},
            {'title': 'Fora', 'content': 'x', 'priority': 50},
        ])

        body = client.post(
            '/api/prompts/import',
            files={'file': ('p.json', payload.encode('utf-8'))},
        ).json()

        assert body['message'] == '1 prompts importados com sucesso'

    def test_import_unsupported_extension(self, client):
        response = client.post(
            '/api/prompts/import',
            files={'file': ('planilha.xlsx', b'conteudo')},
        )

        assert response.status_code == 400

    def test_import_malformed_json(self, client):
        response = client.post(
            '/api/prompts/import',
            files={'file': ('p.json', b'{quebrado')},
        )

        assert response.status_code == 500
        assert response.json()['error'].startswith('JSON invalido')

    def test_import_without_file(self, client):
        response = client.post('/api/prompts/import')

        assert response.status_code == 400
        assert response.json()['error'] == 'Dados invalidos'


class TestRoundTrip:
    """Exported JSON can be imported back."""

    def test_export_then_import(self, client, create_prompt):
        create_prompt('Primeiro', 'conteudo 1', description='d1', priority=1)
        create_prompt('Segundo', 'conteudo 2', priority=7)

        exported = client.get('/api/prompts/export').content
        client.request('DELETE', '/api/prompts/batch', json={'ids': [1, 2]})

        body = client.post(
            '/api/prompts/import',
            files={'file': ('prompts.json', exported, 'application/json')},
        ).json()

        assert body['message'] == '2 prompts importados com sucesso'
        restored = {
            item['title']: (item['content'], item['description'], item['priority'])
            for item in body['data']
        }
        assert restored == {
            'Primeiro': ('conteudo 1', 'd1', 1),
            'Segundo': ('conteudo 2', None, 7),
        }


class TestImportSizeLimit:
    """Uploads above import_max_bytes are rejected."""

    @pytest.fixture
    def small_limit_client(self, test_settings):
        test_settings.import_max_bytes = 64
        application = create_app(test_settings)
        application.state.database.create_all()
        with TestClient(application) as test_client:
            yield test_client
        application.state.database.drop_all()
        application.state.database.dispose()

    def test_oversized_upload_is_rejected(self, small_limit_client):
        payload = json.dumps([{'title': f'Prompt {i}', 'content': 'x' * 20} for i in range(5)])
        assert len(payload) > 64

        response = small_limit_client.post(
            '/api/prompts/import',
            files={'file': ('prompts.json', payload.encode('utf-8'), 'application/json')},
        )

        assert response.status_code == 400
        assert response.json() == {'error': 'Arquivo excede o tamanho maximo permitido'}
        assert small_limit_client.get('/api/prompts').json()['pagination']['total'] == 0

    def test_upload_at_limit_is_accepted(self, small_limit_client):
        payload = json.dumps({'title': 'Curto', 'content': 'x'}).encode('utf-8')
        assert len(payload) <= 64

        response = small_limit_client.post(
            '/api/prompts/import',
            files={'file': ('p.json', payload)},
        )

        assert response.status_code == 200
        assert response.json()['message'] == '1 prompts importados com sucesso'
