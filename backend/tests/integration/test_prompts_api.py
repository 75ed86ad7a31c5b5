"""
Integration tests for /api/prompts endpoints.
"""

import pytest


class TestPromptCrud:
    """Tests for create, read, update and delete."""

    def test_create_prompt(self, client, create_category):
        category = create_category('Atendimento')
        response = client.post(
            '/api/prompts',
            json={
                'title': 'Resposta cordial',
                'content': 'Responda ao cliente com cordialidade',
                'description': 'Uso no suporte',
                'categoryId': category['id'],
                'tags': ['suporte', 'email'],
                'priority': 3,
            },
        )

        assert response.status_code == 201
        data = response.json()
        assert data['title'] == 'Resposta cordial'
        assert data['categoryId'] == category['id']
        assert data['category']['name'] == 'Atendimento'
        assert sorted(tag['name'] for tag in data['tags']) == ['email', 'suporte']
        assert data['useCount'] == 0
        assert data['rating'] == 0
        assert data['isFavorite'] is False
        assert data['priority'] == 3

    def test_create_records_initial_version(self, client, create_prompt):
        prompt = create_prompt('Primeiro', 'Conteudo inicial')

        versions = client.get(f'/api/prompts/{prompt["id"]}/versions').json()
        assert len(versions) == 1
        assert versions[0]['version'] == '1.0.0'
        assert versions[0]['title'] == 'Primeiro'
        assert versions[0]['content'] == 'Conteudo inicial'
        assert versions[0]['changeLog'] == 'Versao inicial'

    def test_create_reuses_existing_tags(self, client, create_prompt):
        first = create_prompt('A', 'a', tags=['email'])
        second = create_prompt('B', 'b', tags=['email', 'vendas'])

        email_ids = {tag['id'] for tag in first['tags']} & {tag['id'] for tag in second['tags']}
        assert len(email_ids) == 1

        tags = client.get('/api/tags').json()
        assert sorted(tag['name'] for tag in tags) == ['email', 'vendas']

    def test_create_with_unknown_category(self, client):
        response = client.post(
            '/api/prompts',
            json={'title': 'T', 'content': 'C', 'categoryId': 999},
        )

        assert response.status_code == 400
        assert response.json()['error'] == 'Categoria informada nao existe'
        assert client.get('/api/prompts').json()['pagination']['total'] == 0

    def test_create_missing_content(self, client):
        response = client.post('/api/prompts', json={'title': 'Sem conteudo'})

        assert response.status_code == 400
        body = response.json()
        assert body['error'] == 'Dados invalidos'
        assert any(detail['field'] == 'content' for detail in body['details'])

    def test_get_prompt_detail(self, client, create_prompt):
        prompt = create_prompt()
        client.post(f'/api/prompts/{prompt["id"]}/use', json={'context': 'reuniao semanal'})

        response = client.get(f'/api/prompts/{prompt["id"]}')

        assert response.status_code == 200
        data = response.json()
        assert data['useCount'] == 1
        assert len(data['usageHistory']) == 1
        assert data['usageHistory'][0]['context'] == 'reuniao semanal'
        assert len(data['versions']) == 1

    def test_get_prompt_not_found(self, client):
        response = client.get('/api/prompts/999')

        assert response.status_code == 404
        assert response.json() == {'error': 'Prompt nao encontrado'}

    def test_update_prompt_fields(self, client, create_prompt):
        prompt = create_prompt('Antigo', 'conteudo', tags=['a', 'b'])

        response = client.put(
            f'/api/prompts/{prompt["id"]}',
            json={'title': 'Novo', 'tags': ['c']},
        )

        assert response.status_code == 200
        data = response.json()
        assert data['title'] == 'Novo'
        assert data['content'] == 'conteudo'
        assert [tag['name'] for tag in data['tags']] == ['c']

    def test_update_without_tags_keeps_tags(self, client, create_prompt):
        prompt = create_prompt(tags=['fixa'])

        data = client.put(f'/api/prompts/{prompt["id"]}', json={'priority': 9}).json()

        assert data['priority'] == 9
        assert [tag['name'] for tag in data['tags']] == ['fixa']

    def test_update_clears_category_with_null(self, client, create_category, create_prompt):
        category = create_category()
        prompt = create_prompt(categoryId=category['id'])

        data = client.put(f'/api/prompts/{prompt["id"]}', json={'categoryId': None}).json()

        assert data['categoryId'] is None
        assert data['category'] is None

    def test_update_does_not_create_version(self, client, create_prompt):
        prompt = create_prompt()
        client.put(f'/api/prompts/{prompt["id"]}', json={'content': 'mudou'})

        versions = client.get(f'/api/prompts/{prompt["id"]}/versions').json()
        assert len(versions) == 1

    def test_update_not_found(self, client):
        response = client.put('/api/prompts/999', json={'title': 'X'})
        assert response.status_code == 404

    def test_delete_prompt_cascades(self, client, create_prompt, db_session):
        from prompt_manager.modules.prompts.models import PromptVersion, UsageHistory

        prompt = create_prompt()
        client.post(f'/api/prompts/{prompt["id"]}/use')

        response = client.delete(f'/api/prompts/{prompt["id"]}')

        assert response.status_code == 200
        assert response.json() == {'message': 'Prompt excluido com sucesso'}
        assert client.get(f'/api/prompts/{prompt["id"]}').status_code == 404
        assert db_session.query(UsageHistory).count() == 0
        assert db_session.query(PromptVersion).count() == 0

    def test_delete_not_found(self, client):
        assert client.delete('/api/prompts/999').status_code == 404


class TestPromptListing:
    """Tests for GET /api/prompts."""

    def test_empty_listing(self, client):
        response = client.get('/api/prompts')

        assert response.status_code == 200
        assert response.json() == {
            'data': [],
            'pagination': {'page': 1, 'limit': 20, 'total': 0, 'pages': 0},
        }

    def test_pagination_is_consistent(self, client, create_prompt):
        for i in range(5):
            create_prompt(f'Prompt {i}', 'texto')

        seen = []
        for page in (1, 2, 3):
            body = client.get('/api/prompts', params={'page': page, 'limit': 2}).json()
            assert body['pagination'] == {'page': page, 'limit': 2, 'total': 5, 'pages': 3}
            seen.extend(item['id'] for item in body['data'])

        assert len(seen) == 5
        assert len(set(seen)) == 5

    def test_default_order_is_newest_first(self, client, create_prompt):
        first = create_prompt('Primeiro', 'x')
        second = create_prompt('Segundo', 'x')

        ids = [item['id'] for item in client.get('/api/prompts').json()['data']]
        assert ids == [second['id'], first['id']]

    def test_sort_by_title_asc(self, client, create_prompt):
        for title in ('Charlie', 'Alpha', 'Bravo'):
            create_prompt(title, 'x')

        body = client.get('/api/prompts', params={'sortBy': 'title', 'sortOrder': 'asc'}).json()
        assert [item['title'] for item in body['data']] == ['Alpha', 'Bravo', 'Charlie']

    def test_invalid_params_fall_back_to_defaults(self, client, create_prompt):
        create_prompt()

        response = client.get(
            '/api/prompts',
            params={'page': 'abc', 'limit': '-1', 'sortBy': 'password', 'category': 'x'},
        )

        assert response.status_code == 200
        assert response.json()['pagination'] == {'page': 1, 'limit': 20, 'total': 1, 'pages': 1}

    @pytest.mark.parametrize(
        'params',
        [
            {'page': '99999999999999999999'},
            {'limit': '1e20'},
            {'category': '99999999999999999999'},
        ],
    )
    def test_oversized_numbers_fall_back_to_defaults(self, client, create_prompt, params):
        create_prompt()

        response = client.get('/api/prompts', params=params)

        assert response.status_code == 200
        assert response.json()['pagination'] == {'page': 1, 'limit': 20, 'total': 1, 'pages': 1}

    def test_oversized_curated_limit(self, client, create_prompt):
        create_prompt()

        response = client.get('/api/prompts/popular', params={'limit': '99999999999999999999'})

        assert response.status_code == 200
        assert len(response.json()) == 1

    def test_search_filter_and_total(self, client, create_prompt):
        create_prompt('Email de vendas', 'ofereca o produto')
        create_prompt('Relatorio', 'resuma os numeros de vendas')
        create_prompt('Outro', 'nada a ver', description='sem relacao')

        body = client.get('/api/prompts', params={'search': 'vendas', 'limit': 1}).json()

        assert body['pagination']['total'] == 2
        assert body['pagination']['pages'] == 2
        assert len(body['data']) == 1

    def test_search_escapes_wildcards(self, client, create_prompt):
        create_prompt('Desconto de 50%', 'x')
        create_prompt('Desconto de 505', 'x')

        body = client.get('/api/prompts', params={'search': '50%'}).json()
        assert [item['title'] for item in body['data']] == ['Desconto de 50%']

    def test_filter_by_category(self, client, create_category, create_prompt):
        category = create_category()
        inside = create_prompt('Dentro', 'x', categoryId=category['id'])
        create_prompt('Fora', 'x')

        body = client.get('/api/prompts', params={'category': category['id']}).json()
        assert [item['id'] for item in body['data']] == [inside['id']]

    def test_filter_by_tag_name(self, client, create_prompt):
        tagged = create_prompt('Com tag', 'x', tags=['email'])
        create_prompt('Sem tag', 'x', tags=['outra'])

        body = client.get('/api/prompts', params={'tags': 'email'}).json()

        assert body['pagination']['total'] == 1
        assert body['data'][0]['id'] == tagged['id']

    def test_filter_by_tag_id_is_not_a_name(self, client, create_prompt):
        tagged = create_prompt('Com tag', 'x', tags=['email'])
        tag_id = tagged['tags'][0]['id']

        body = client.get('/api/prompts', params={'tags': str(tag_id)}).json()
        assert body['pagination']['total'] == 0

    def test_filter_by_favorite(self, client, create_prompt):
        favorite = create_prompt('Favorito', 'x')
        create_prompt('Comum', 'x')
        client.post(f'/api/prompts/{favorite["id"]}/favorite')

        only_favorites = client.get('/api/prompts', params={'favorite': 'true'}).json()
        not_favorites = client.get('/api/prompts', params={'favorite': 'false'}).json()

        assert [item['id'] for item in only_favorites['data']] == [favorite['id']]
        assert not_favorites['pagination']['total'] == 1
        assert not_favorites['data'][0]['title'] == 'Comum'

    def test_list_items_include_counts(self, client, create_prompt):
        prompt = create_prompt()
        client.post(f'/api/prompts/{prompt["id"]}/use')
        client.post(f'/api/prompts/{prompt["id"]}/use')
        client.post(f'/api/prompts/{prompt["id"]}/versions', json={'version': '1.1.0'})

        item = client.get('/api/prompts').json()['data'][0]
        assert item['usageCount'] == 2
        assert item['versionCount'] == 2


class TestPromptActions:
    """Tests for usage, favorite and rating."""

    def test_record_usage_increments(self, client, create_prompt):
        prompt = create_prompt()

        for _ in range(3):
            response = client.post(f'/api/prompts/{prompt["id"]}/use')
            assert response.status_code == 200
            assert response.json() == {'message': 'Uso registrado com sucesso'}

        assert client.get(f'/api/prompts/{prompt["id"]}').json()['useCount'] == 3

    def test_record_usage_not_found(self, client):
        assert client.post('/api/prompts/999/use').status_code == 404

    def test_favorite_toggles_back(self, client, create_prompt):
        prompt = create_prompt()

        first = client.post(f'/api/prompts/{prompt["id"]}/favorite').json()
        second = client.post(f'/api/prompts/{prompt["id"]}/favorite').json()

        assert first == {'isFavorite': True}
        assert second == {'isFavorite': False}

    def test_favorites_listing(self, client, create_prompt):
        prompt = create_prompt()
        create_prompt('Outro', 'x')
        client.post(f'/api/prompts/{prompt["id"]}/favorite')

        favorites = client.get('/api/prompts/favorites').json()
        assert [item['id'] for item in favorites] == [prompt['id']]

    @pytest.mark.parametrize('rating', [0, 3.5, 5])
    def test_rate_within_bounds(self, client, create_prompt, rating):
        prompt = create_prompt()

        response = client.post(f'/api/prompts/{prompt["id"]}/rate', json={'rating': rating})

        assert response.status_code == 200
        assert response.json() == {'rating': rating}

    def test_rate_out_of_bounds_keeps_rating(self, client, create_prompt):
        prompt = create_prompt()
        client.post(f'/api/prompts/{prompt["id"]}/rate', json={'rating': 4})

        response = client.post(f'/api/prompts/{prompt["id"]}/rate', json={'rating': 7})

        assert response.status_code == 400
        assert client.get(f'/api/prompts/{prompt["id"]}').json()['rating'] == 4

    def test_popular_limit(self, client, create_prompt):
        low = create_prompt('Pouco usado', 'x')
        high = create_prompt('Muito usado', 'x')
        client.post(f'/api/prompts/{low["id"]}/use')
        for _ in range(3):
            client.post(f'/api/prompts/{high["id"]}/use')

        popular = client.get('/api/prompts/popular', params={'limit': 1}).json()
        assert [item['id'] for item in popular] == [high['id']]

    def test_popular_tiebreak_by_rating(self, client, create_prompt):
        plain = create_prompt('Sem nota', 'x')
        rated = create_prompt('Com nota', 'x')
        client.post(f'/api/prompts/{rated["id"]}/rate', json={'rating': 5})

        popular = client.get('/api/prompts/popular').json()
        assert [item['id'] for item in popular] == [rated['id'], plain['id']]

    def test_recent_lists_each_usage(self, client, create_prompt):
        first = create_prompt('A', 'x')
        second = create_prompt('B', 'x')
        client.post(f'/api/prompts/{first["id"]}/use')
        client.post(f'/api/prompts/{second["id"]}/use')
        client.post(f'/api/prompts/{first["id"]}/use')

        recent = client.get('/api/prompts/recent').json()

        assert [item['id'] for item in recent] == [first['id'], second['id'], first['id']]
        assert all('lastUsedAt' in item for item in recent)


class TestPromptVersions:
    """Tests for version snapshots."""

    def test_create_version_snapshots_current_state(self, client, create_prompt):
        prompt = create_prompt('V1', 'conteudo 1')
        client.put(f'/api/prompts/{prompt["id"]}', json={'title': 'V2', 'content': 'conteudo 2'})

        response = client.post(
            f'/api/prompts/{prompt["id"]}/versions',
            json={'version': '2.0.0', 'changeLog': 'Reescrita'},
        )

        assert response.status_code == 201
        assert response.json()['title'] == 'V2'
        versions = client.get(f'/api/prompts/{prompt["id"]}/versions').json()
        assert [v['version'] for v in versions] == ['2.0.0', '1.0.0']

    def test_versions_of_missing_prompt(self, client):
        assert client.get('/api/prompts/999/versions').status_code == 404


class TestPromptBatch:
    """Tests for batch create and delete."""

    def test_batch_create(self, client):
        response = client.post(
            '/api/prompts/batch',
            json={'prompts': [{'title': 'A', 'content': 'a'}, {'title': 'B', 'content': 'b'}]},
        )

        assert response.status_code == 201
        body = response.json()
        assert body['message'] == '2 prompts criados com sucesso'
        assert len(body['data']) == 2

    def test_batch_create_empty_list(self, client):
        assert client.post('/api/prompts/batch', json={'prompts': []}).status_code == 400

    def test_batch_delete_ignores_unknown_ids(self, client, create_prompt):
        first = create_prompt('A', 'a')
        second = create_prompt('B', 'b')
        kept = create_prompt('C', 'c')

        response = client.request(
            'DELETE',
            '/api/prompts/batch',
            json={'ids': [first['id'], second['id'], 999]},
        )

        assert response.status_code == 200
        assert response.json() == {'message': '2 prompts excluidos com sucesso'}
        remaining = client.get('/api/prompts').json()['data']
        assert [item['id'] for item in remaining] == [kept['id']]
