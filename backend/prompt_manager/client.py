"""
Cliente HTTP da API do Prompt Manager com cache em memoria.

Guarda a ultima pagina de prompts buscada (chaveada pelos parametros da
consulta), a lista de categorias e a lista de tags. Leituras com a mesma
chave sao servidas do cache; qualquer escrita invalida os caches afetados.

Uso:
    with PromptManagerClient('http://localhost:8000') as client:
        page = client.list_prompts(search='email', page=1)
        client.create_prompt({'title': 'Resumo', 'content': '...'})
"""

from typing import Any

import httpx

from prompt_manager.shared.logging import get_logger

logger = get_logger(__name__)

# Escopos de cache
PROMPTS = 'prompts'
CATEGORIES = 'categories'
TAGS = 'tags'
ALL_SCOPES = (PROMPTS, CATEGORIES, TAGS)


class PromptManagerAPIError(Exception):
    """Erro retornado pela API (corpo {"error", "details"?})."""

    def __init__(
        self,
        status_code: int,
        message: str,
        details: list[dict] | None = None,
    ) -> None:
        self.status_code = status_code
        self.message = message
        self.details = details or []
        super().__init__(f'[{status_code}] {message}')


def _cache_key(params: dict[str, Any]) -> tuple:
    """Chave estavel para os parametros da listagem (ignora valores None)."""
    items = []
    for key, value in sorted(params.items()):
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            value = tuple(value)
        items.append((key, value))
    return tuple(items)


class PromptManagerClient:
    """
    Cliente da API com cache de leitura e invalidacao nas escritas.

    Args:
        base_url: URL base da API.
        timeout: Timeout das requisicoes em segundos.
        http_client: Cliente httpx ja configurado (ex: TestClient). Quando
            informado, base_url e timeout sao ignorados e o cliente nao e
            fechado por close().
    """

    def __init__(
        self,
        base_url: str = 'http://localhost:8000',
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ) -> None:
        self._owns_client = http_client is None
        self._http = http_client or httpx.Client(base_url=base_url, timeout=timeout)

        self._prompt_page_key: tuple | None = None
        self._prompt_page: dict | None = None
        self._categories: list[dict] | None = None
        self._tags: list[dict] | None = None

    # ------------------------------------------------------------------
    # Infraestrutura
    # ------------------------------------------------------------------

    def close(self) -> None:
        if self._owns_client:
            self._http.close()

    def __enter__(self) -> 'PromptManagerClient':
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _request(self, method: str, path: str, **kwargs) -> Any:
        """
        Executa a requisicao e retorna o JSON da resposta.

        Raises:
            PromptManagerAPIError: Status >= 400 ou falha de conexao.
        """
        try:
            response = self._http.request(method, path, **kwargs)
        except httpx.RequestError as e:
            logger.warning('Falha de conexao com a API', method=method, path=path, error=str(e))
            raise PromptManagerAPIError(0, f'Falha de conexao com a API: {e}') from e

        if response.status_code >= 400:
            try:
                body = response.json()
            except ValueError:
                body = {}
            message = body.get('error') if isinstance(body, dict) else None
            details = body.get('details') if isinstance(body, dict) else None
            raise PromptManagerAPIError(
                response.status_code,
                message or response.reason_phrase,
                details,
            )

        if not response.content:
            return None
        if 'application/json' not in response.headers.get('content-type', ''):
            return response.text
        return response.json()

    # ------------------------------------------------------------------
    # Cache
    # ------------------------------------------------------------------

    def invalidate(self, *scopes: str) -> None:
        """Descarta os caches informados (todos quando nenhum e passado)."""
        for scope in scopes or ALL_SCOPES:
            if scope == PROMPTS:
                self._prompt_page_key = None
                self._prompt_page = None
            elif scope == CATEGORIES:
                self._categories = None
            elif scope == TAGS:
                self._tags = None
            else:
                raise ValueError(f'Escopo de cache desconhecido: {scope}')

    def is_cached(self, scope: str) -> bool:
        """Indica se ha dados em cache para o escopo."""
        return {
            PROMPTS: self._prompt_page is not None,
            CATEGORIES: self._categories is not None,
            TAGS: self._tags is not None,
        }[scope]

    # ------------------------------------------------------------------
    # Prompts
    # ------------------------------------------------------------------

    def list_prompts(
        self,
        page: int | None = None,
        limit: int | None = None,
        category: int | None = None,
        tags: list[str] | None = None,
        search: str | None = None,
        sort_by: str | None = None,
        sort_order: str | None = None,
        favorite: bool | None = None,
        refresh: bool = False,
    ) -> dict:
        """
        Lista prompts ({data, pagination}).

        A mesma combinacao de parametros e servida do cache ate a proxima
        escrita ou ate refresh=True.
        """
        params: dict[str, Any] = {
            'page': page,
            'limit': limit,
            'category': category,
            'tags': tags,
            'search': search,
            'sortBy': sort_by,
            'sortOrder': sort_order,
            'favorite': None if favorite is None else str(favorite).lower(),
        }
        key = _cache_key(params)
        if not refresh and self._prompt_page is not None and key == self._prompt_page_key:
            return self._prompt_page

        query = {name: value for name, value in params.items() if value is not None}
        result = self._request('GET', '/api/prompts', params=query)
        self._prompt_page_key = key
        self._prompt_page = result
        return result

    def get_prompt(self, prompt_id: int) -> dict:
        return self._request('GET', f'/api/prompts/{prompt_id}')

    def create_prompt(self, data: dict) -> dict:
        result = self._request('POST', '/api/prompts', json=data)
        # Tags novas e contagens por categoria mudam junto
        self.invalidate(PROMPTS, CATEGORIES, TAGS)
        return result

    def update_prompt(self, prompt_id: int, data: dict) -> dict:
        result = self._request('PUT', f'/api/prompts/{prompt_id}', json=data)
        self.invalidate(PROMPTS, CATEGORIES, TAGS)
        return result

    def delete_prompt(self, prompt_id: int) -> dict:
        result = self._request('DELETE', f'/api/prompts/{prompt_id}')
        self.invalidate(PROMPTS, CATEGORIES, TAGS)
        return result

    def record_usage(self, prompt_id: int, context: str | None = None) -> dict:
        result = self._request('POST', f'/api/prompts/{prompt_id}/use', json={'context': context})
        self.invalidate(PROMPTS)
        return result

    def toggle_favorite(self, prompt_id: int) -> bool:
        result = self._request('POST', f'/api/prompts/{prompt_id}/favorite')
        self.invalidate(PROMPTS)
        return result['isFavorite']

    def rate_prompt(self, prompt_id: int, rating: float) -> float:
        result = self._request('POST', f'/api/prompts/{prompt_id}/rate', json={'rating': rating})
        self.invalidate(PROMPTS)
        return result['rating']

    def batch_create(self, prompts: list[dict]) -> dict:
        result = self._request('POST', '/api/prompts/batch', json={'prompts': prompts})
        self.invalidate(PROMPTS, CATEGORIES, TAGS)
        return result

    def batch_delete(self, prompt_ids: list[int]) -> dict:
        result = self._request('DELETE', '/api/prompts/batch', json={'ids': prompt_ids})
        self.invalidate(PROMPTS, CATEGORIES, TAGS)
        return result

    def import_prompts(self, filename: str, content: bytes) -> dict:
        result = self._request('POST', '/api/prompts/import', files={'file': (filename, content)})
        self.invalidate(PROMPTS)
        return result

    def export_prompts(self, export_format: str = 'json', category: int | None = None,
                       tags: list[str] | None = None) -> Any:
        params: dict[str, Any] = {'format': export_format}
        if category is not None:
            params['category'] = category
        if tags:
            params['tags'] = tags
        return self._request('GET', '/api/prompts/export', params=params)

    # ------------------------------------------------------------------
    # Categorias
    # ------------------------------------------------------------------

    def get_categories(self, refresh: bool = False) -> list[dict]:
        """Lista de categorias (em cache ate a proxima escrita)."""
        if refresh or self._categories is None:
            self._categories = self._request('GET', '/api/categories')
        return self._categories

    def create_category(self, data: dict) -> dict:
        result = self._request('POST', '/api/categories', json=data)
        self.invalidate(CATEGORIES)
        return result

    def update_category(self, category_id: int, data: dict) -> dict:
        result = self._request('PUT', f'/api/categories/{category_id}', json=data)
        # Itens da listagem embutem a categoria
        self.invalidate(CATEGORIES, PROMPTS)
        return result

    def delete_category(self, category_id: int) -> dict:
        result = self._request('DELETE', f'/api/categories/{category_id}')
        self.invalidate(CATEGORIES, PROMPTS)
        return result

    # ------------------------------------------------------------------
    # Tags
    # ------------------------------------------------------------------

    def get_tags(self, refresh: bool = False) -> list[dict]:
        """Lista de tags (em cache ate a proxima escrita)."""
        if refresh or self._tags is None:
            self._tags = self._request('GET', '/api/tags')
        return self._tags

    def create_tag(self, data: dict) -> dict:
        result = self._request('POST', '/api/tags', json=data)
        self.invalidate(TAGS)
        return result

    def update_tag(self, tag_id: int, data: dict) -> dict:
        result = self._request('PUT', f'/api/tags/{tag_id}', json=data)
        self.invalidate(TAGS, PROMPTS)
        return result

    def delete_tag(self, tag_id: int) -> dict:
        result = self._request('DELETE', f'/api/tags/{tag_id}')
        self.invalidate(TAGS, PROMPTS)
        return result

    # ------------------------------------------------------------------
    # Busca e estatisticas (sem cache)
    # ------------------------------------------------------------------

    def search(self, q: str = '', **params: Any) -> dict:
        return self._request('GET', '/api/search', params={'q': q, **params})

    def get_stats_overview(self) -> dict:
        return self._request('GET', '/api/stats/overview')
