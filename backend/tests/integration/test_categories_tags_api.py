"""
Integration tests for /api/categories and /api/tags endpoints.
"""


class TestCategoriesEndpoints:
    """Tests for /api/categories endpoints."""

    def test_create_category(self, client):
        response = client.post(
            '/api/categories',
            json={'name': 'Vendas', 'description': 'Prompts comerciais', 'color': '#ff0000'},
        )

        assert response.status_code == 201
        data = response.json()
        assert data['name'] == 'Vendas'
        assert data['color'] == '#ff0000'
        assert 'createdAt' in data

    def test_create_duplicate_name(self, client, create_category):
        create_category('Vendas')

        response = client.post('/api/categories', json={'name': 'Vendas'})

        assert response.status_code == 400
        assert response.json() == {'error': 'Ja existe uma categoria com este nome'}

    def test_rename_to_existing_name(self, client, create_category):
        create_category('Vendas')
        other = create_category('Suporte')

        response = client.put(f'/api/categories/{other["id"]}', json={'name': 'Vendas'})

        assert response.status_code == 400
        assert client.get(f'/api/categories/{other["id"]}').json()['name'] == 'Suporte'

    def test_list_categories_sorted_with_counts(self, client, create_category, create_prompt):
        suporte = create_category('Suporte')
        create_category('Atendimento')
        create_prompt('A', 'x', categoryId=suporte['id'])
        create_prompt('B', 'x', categoryId=suporte['id'])

        data = client.get('/api/categories').json()

        assert [item['name'] for item in data] == ['Atendimento', 'Suporte']
        assert [item['promptCount'] for item in data] == [0, 2]

    def test_get_category(self, client, create_category):
        category = create_category('Vendas')

        data = client.get(f'/api/categories/{category["id"]}').json()

        assert data['name'] == 'Vendas'
        assert data['promptCount'] == 0

    def test_get_category_not_found(self, client):
        response = client.get('/api/categories/999')

        assert response.status_code == 404
        assert response.json() == {'error': 'Categoria nao encontrada'}

    def test_update_category(self, client, create_category):
        category = create_category('Vendas')

        data = client.put(
            f'/api/categories/{category["id"]}',
            json={'description': 'Nova descricao'},
        ).json()

        assert data['name'] == 'Vendas'
        assert data['description'] == 'Nova descricao'

    def test_delete_category_in_use(self, client, create_category, create_prompt):
        category = create_category('Vendas')
        create_prompt(categoryId=category['id'])

        response = client.delete(f'/api/categories/{category["id"]}')

        assert response.status_code == 400
        assert '1 prompt(s)' in response.json()['error']
        assert client.get(f'/api/categories/{category["id"]}').status_code == 200

    def test_delete_empty_category(self, client, create_category):
        category = create_category('Vendas')

        response = client.delete(f'/api/categories/{category["id"]}')

        assert response.status_code == 200
        assert response.json() == {'message': 'Categoria excluida com sucesso'}
        assert client.get(f'/api/categories/{category["id"]}').status_code == 404

    def test_category_prompts(self, client, create_category, create_prompt):
        category = create_category('Vendas')
        older = create_prompt('Antigo', 'x', categoryId=category['id'])
        newer = create_prompt('Novo', 'x', categoryId=category['id'])
        create_prompt('Fora', 'x')

        body = client.get(f'/api/categories/{category["id"]}/prompts').json()

        assert body['category']['name'] == 'Vendas'
        assert [item['id'] for item in body['data']] == [newer['id'], older['id']]
        assert body['pagination'] == {'page': 1, 'limit': 20, 'total': 2, 'pages': 1}

    def test_category_prompts_not_found(self, client):
        assert client.get('/api/categories/999/prompts').status_code == 404

    def test_invalid_color(self, client):
        response = client.post('/api/categories', json={'name': 'X', 'color': 'azul'})

        assert response.status_code == 400
        assert response.json()['details'][0]['field'] == 'color'


class TestTagsEndpoints:
    """Tests for /api/tags endpoints."""

    def test_create_tag(self, client):
        response = client.post('/api/tags', json={'name': 'email'})

        assert response.status_code == 201
        assert response.json()['color'] == '#87d068'

    def test_create_duplicate_tag(self, client):
        client.post('/api/tags', json={'name': 'email'})

        response = client.post('/api/tags', json={'name': 'email'})

        assert response.status_code == 400
        assert response.json() == {'error': 'Ja existe uma tag com este nome'}

    def test_rename_to_existing_tag(self, client):
        client.post('/api/tags', json={'name': 'email'})
        other = client.post('/api/tags', json={'name': 'chat'}).json()

        response = client.put(f'/api/tags/{other["id"]}', json={'name': 'email'})

        assert response.status_code == 400

    def test_tag_created_directly_is_reused_by_prompt(self, client, create_prompt):
        created = client.post('/api/tags', json={'name': " it's "}).json()
        assert created['name'] == "it's"

        prompt = create_prompt('A', 'x', tags=["it's"])

        assert [tag['id'] for tag in prompt['tags']] == [created['id']]
        assert [item['name'] for item in client.get('/api/tags').json()] == ["it's"]

    def test_list_tags_with_counts(self, client, create_prompt):
        create_prompt('A', 'x', tags=['vendas', 'email'])
        create_prompt('B', 'x', tags=['email'])

        data = client.get('/api/tags').json()

        counts = {item['name']: item['promptCount'] for item in data}
        assert counts == {'email': 2, 'vendas': 1}
        assert [item['name'] for item in data] == ['email', 'vendas']

    def test_popular_tags(self, client, create_prompt):
        create_prompt('A', 'x', tags=['rara', 'comum'])
        create_prompt('B', 'x', tags=['comum'])

        data = client.get('/api/tags/popular', params={'limit': 1}).json()

        assert [item['name'] for item in data] == ['comum']

    def test_get_tag_not_found(self, client):
        response = client.get('/api/tags/999')

        assert response.status_code == 404
        assert response.json() == {'error': 'Tag nao encontrada'}

    def test_delete_tag_in_use(self, client, create_prompt):
        prompt = create_prompt(tags=['email'])
        tag_id = prompt['tags'][0]['id']

        response = client.delete(f'/api/tags/{tag_id}')

        assert response.status_code == 400
        assert client.get(f'/api/tags/{tag_id}').status_code == 200

    def test_delete_unused_tag(self, client):
        tag = client.post('/api/tags', json={'name': 'solta'}).json()

        response = client.delete(f'/api/tags/{tag["id"]}')

        assert response.status_code == 200
        assert response.json() == {'message': 'Tag excluida com sucesso'}

    def test_tag_prompts_by_id(self, client, create_prompt):
        tagged = create_prompt('Com tag', 'x', tags=['email'])
        create_prompt('Sem tag', 'x')
        tag_id = tagged['tags'][0]['id']

        body = client.get(f'/api/tags/{tag_id}/prompts').json()

        assert [item['id'] for item in body['prompts']] == [tagged['id']]
        assert body['pagination']['total'] == 1

    def test_tag_freed_after_prompt_delete(self, client, create_prompt):
        prompt = create_prompt(tags=['email'])
        tag_id = prompt['tags'][0]['id']
        client.delete(f'/api/prompts/{prompt["id"]}')

        assert client.delete(f'/api/tags/{tag_id}').status_code == 200
