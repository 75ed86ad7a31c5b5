import traceback
from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator
from sqlalchemy import text
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from prompt_manager.config import Settings, settings as default_settings
from prompt_manager.database import Database
from prompt_manager.modules.categories.router import router as categories_router
from prompt_manager.modules.prompts.router import router as prompts_router
from prompt_manager.modules.search.router import router as search_router
from prompt_manager.modules.stats.router import router as stats_router
from prompt_manager.modules.tags.router import router as tags_router
from prompt_manager.shared.exceptions import (
    BadRequestException,
    ImportException,
    NotFoundException,
)
from prompt_manager.shared.logging import get_logger, request_context, setup_logging
from prompt_manager.shared.schemas import ErrorDetail, ErrorResponse
from prompt_manager.shared.utils import utc_now

logger = get_logger(__name__)

_SECURITY_HEADERS = {
    'X-Content-Type-Options': 'nosniff',
    'X-Frame-Options': 'DENY',
    'Referrer-Policy': 'strict-origin-when-cross-origin',
    'Permissions-Policy': 'camera=(), microphone=(), geolocation=()',
}

_ENDPOINTS = {
    'prompts': '/api/prompts',
    'categories': '/api/categories',
    'tags': '/api/tags',
    'search': '/api/search',
    'stats': '/api/stats',
    'health': '/health',
}


def _error(
    status_code: int,
    message: str,
    details: list[ErrorDetail] | None = None,
    headers: dict | None = None,
    **extra,
) -> JSONResponse:
    """Resposta de erro padrao: {"error": mensagem, "details"?: [...]}."""
    body = ErrorResponse(error=message, details=details).model_dump(exclude_none=True)
    return JSONResponse(status_code=status_code, content={**body, **extra}, headers=headers)


def _validation_details(exc: RequestValidationError) -> list[ErrorDetail]:
    """Converte os erros do pydantic em [{field, message}]."""
    details = []
    for err in exc.errors():
        location = [str(part) for part in err.get('loc', ())]
        # Remove o prefixo body/query/path
        field_path = location[1:] if len(location) > 1 else location
        details.append(ErrorDetail(
            field='.'.join(field_path),
            message=err.get('msg', 'Valor invalido'),
        ))
    return details


# -------------------------------------------------------------------------
# Handlers globais de excecoes
# -------------------------------------------------------------------------


def register_exception_handlers(app: FastAPI, app_settings: Settings) -> None:
    """Registra os handlers que convertem excecoes em {"error": ...}."""

    @app.exception_handler(NotFoundException)
    async def not_found_exception_handler(
        request: Request, exc: NotFoundException
    ) -> JSONResponse:
        return _error(404, exc.message)

    @app.exception_handler(BadRequestException)
    async def bad_request_exception_handler(
        request: Request, exc: BadRequestException
    ) -> JSONResponse:
        return _error(400, exc.message)

    @app.exception_handler(ImportException)
    async def import_exception_handler(
        request: Request, exc: ImportException
    ) -> JSONResponse:
        logger.error('Falha ao importar prompts', reason=exc.message)
        return _error(500, exc.message)

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return _error(400, 'Dados invalidos', details=_validation_details(exc))

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(
        request: Request, exc: IntegrityError
    ) -> JSONResponse:
        logger.warning('Violacao de integridade no banco', error=str(exc.orig)[:200])
        return _error(400, 'Operacao viola uma restricao de integridade dos dados')

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        if exc.status_code == 404:
            message = f'Rota {request.method} {request.url.path} nao encontrada'
        else:
            message = str(exc.detail)
        return _error(exc.status_code, message, headers=getattr(exc, 'headers', None))

    @app.exception_handler(Exception)
    async def unhandled_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        logger.error(
            'Erro nao tratado',
            path=request.url.path,
            method=request.method,
            exc_info=exc,
        )
        if app_settings.is_development:
            return _error(
                500,
                'Erro interno do servidor',
                detail=str(exc),
                traceback=traceback.format_exception(exc),
            )
        return _error(500, 'Erro interno do servidor')


# -------------------------------------------------------------------------
# Factory
# -------------------------------------------------------------------------


def create_app(app_settings: Settings | None = None) -> FastAPI:
    """
    Cria a aplicacao FastAPI.

    O cliente do banco (Database) e criado uma unica vez aqui e
    compartilhado via app.state; cada request abre sua propria sessao.

    Args:
        app_settings: Configuracoes (padrao: instancia global carregada do ambiente).

    Returns:
        Aplicacao configurada.
    """
    app_settings = app_settings or default_settings

    setup_logging(
        log_level=app_settings.log_level,
        log_format=app_settings.log_format,
        log_levels=app_settings.log_levels,
        environment=app_settings.app_env,
    )

    database = Database(app_settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Gerencia o ciclo de vida da aplicacao (startup/shutdown)."""
        if app_settings.auto_create_tables:
            database.create_all()
        logger.info(
            'Prompt Manager API iniciada',
            version=app_settings.app_version,
            env=app_settings.app_env,
            cors_origins=app_settings.cors_origins,
        )
        yield
        database.dispose()
        logger.info('Prompt Manager API encerrada')

    app = FastAPI(
        title=app_settings.app_name,
        description='API para armazenar, organizar, buscar e versionar prompts',
        version=app_settings.app_version,
        lifespan=lifespan,
        docs_url='/docs',
        redoc_url='/redoc',
    )
    app.state.settings = app_settings
    app.state.database = database

    # ---------------------------------------------------------------------
    # CORS Middleware
    # ---------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
        allow_headers=[
            'Content-Type',
            'Accept',
            'Origin',
            'X-Requested-With',
            'X-Correlation-ID',
        ],
        expose_headers=['Content-Disposition', 'X-Request-ID', 'X-Correlation-ID'],
    )

    # ---------------------------------------------------------------------
    # Prometheus Instrumentation
    # ---------------------------------------------------------------------
    if app_settings.metrics_enabled:
        Instrumentator(
            should_group_status_codes=True,
            should_ignore_untemplated=True,
            should_group_untemplated=True,
            excluded_handlers=['/metrics', '/docs', '/redoc', '/openapi.json'],
        ).instrument(app).expose(app, endpoint='/metrics', include_in_schema=False)

    @app.middleware('http')
    async def request_context_middleware(request: Request, call_next):
        """
        Gera request_id e correlation_id para cada request HTTP.

        O correlation_id pode ser propagado pelo cliente via header
        X-Correlation-ID, ou sera gerado automaticamente.
        """
        with request_context(request.headers.get('x-correlation-id')) as (req_id, corr_id):
            response = await call_next(request)
            response.headers['X-Request-ID'] = req_id
            response.headers['X-Correlation-ID'] = corr_id
            return response

    @app.middleware('http')
    async def security_headers_middleware(request: Request, call_next):
        """Aplica headers de seguranca."""
        response = await call_next(request)
        for key, value in _SECURITY_HEADERS.items():
            response.headers.setdefault(key, value)
        return response

    register_exception_handlers(app, app_settings)

    # ---------------------------------------------------------------------
    # Routers dos modulos
    # ---------------------------------------------------------------------
    app.include_router(prompts_router)
    app.include_router(categories_router)
    app.include_router(tags_router)
    app.include_router(search_router)
    app.include_router(stats_router)

    # ---------------------------------------------------------------------
    # Health Check
    # ---------------------------------------------------------------------

    @app.get('/', tags=['Health'])
    async def api_info() -> dict:
        """Informacoes da API e mapa de endpoints."""
        return {
            'name': app_settings.app_name,
            'version': app_settings.app_version,
            'endpoints': _ENDPOINTS,
            'timestamp': utc_now().isoformat(),
        }

    @app.get('/health', tags=['Health'])
    async def health_check() -> dict:
        """Endpoint de health check simples da aplicacao."""
        return {
            'status': 'ok',
            'timestamp': utc_now().isoformat(),
            'version': app_settings.app_version,
        }

    @app.get('/api/health', tags=['Health'])
    def api_health_check() -> dict:
        """Health check com teste de conectividade do banco de dados."""
        try:
            with database.session() as db:
                db.execute(text('SELECT 1')).scalar()
            status = 'healthy'
            components = {'database': {'status': 'healthy'}}
        except Exception as e:
            logger.warning('Health check do banco falhou', error=str(e)[:200])
            status = 'unhealthy'
            components = {'database': {'status': 'unhealthy', 'error': str(e)[:200]}}

        return {
            'status': status,
            'service': app_settings.app_name,
            'version': app_settings.app_version,
            'timestamp': utc_now().isoformat(),
            'components': components,
        }

    return app


app = create_app()
