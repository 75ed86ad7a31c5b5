"""
Logging estruturado do Prompt Manager.

structlog renderiza os eventos da aplicacao e, via ProcessorFormatter,
tambem os registros do logging stdlib (uvicorn, SQLAlchemy, httpx), de
modo que toda a saida tenha o mesmo formato. Cada evento recebe o nome do
servico, o ambiente e os ids da requisicao HTTP corrente.
"""

import logging
import logging.config
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

SERVICE_NAME = 'prompt-manager'

VALID_LEVELS = frozenset({'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'})

# Bibliotecas que so aparecem a partir de WARNING
_QUIET_LOGGERS = (
    'uvicorn',
    'uvicorn.access',
    'sqlalchemy.engine',
    'httpx',
    'httpcore',
    'multipart',
)

request_id_var: ContextVar[str | None] = ContextVar('request_id', default=None)
correlation_id_var: ContextVar[str | None] = ContextVar('correlation_id', default=None)

_environment = 'production'


def generate_id() -> str:
    """Id curto (12 caracteres hex) para requisicoes e correlacao."""
    return uuid.uuid4().hex[:12]


@contextmanager
def request_context(correlation_id: str | None = None) -> Iterator[tuple[str, str]]:
    """
    Define request_id e correlation_id enquanto a requisicao e processada.

    Args:
        correlation_id: Valor recebido do cliente; gerado quando ausente.

    Yields:
        Tupla (request_id, correlation_id) em uso.
    """
    req_id = generate_id()
    corr_id = correlation_id or generate_id()
    req_token = request_id_var.set(req_id)
    corr_token = correlation_id_var.set(corr_id)
    try:
        yield req_id, corr_id
    finally:
        request_id_var.reset(req_token)
        correlation_id_var.reset(corr_token)


def add_app_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Processor: servico, ambiente e ids da requisicao corrente."""
    event_dict.setdefault('service', SERVICE_NAME)
    event_dict.setdefault('env', _environment)
    req_id = request_id_var.get()
    if req_id:
        event_dict['request_id'] = req_id
    corr_id = correlation_id_var.get()
    if corr_id:
        event_dict['correlation_id'] = corr_id
    return event_dict


def parse_log_levels(log_levels_str: str) -> dict[str, str]:
    """
    Le os overrides de nivel por modulo.

    Formato: "prompt_manager.modules.prompts:DEBUG,sqlalchemy.engine:INFO".
    Pares sem ':' ou com nivel desconhecido sao descartados.
    """
    levels: dict[str, str] = {}
    for pair in (log_levels_str or '').split(','):
        module, sep, level = pair.strip().rpartition(':')
        level = level.strip().upper()
        if sep and module.strip() and level in VALID_LEVELS:
            levels[module.strip()] = level
    return levels


def _renderer(log_format: str):
    if log_format == 'console':
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer(ensure_ascii=False)


def setup_logging(
    log_level: str = 'INFO',
    log_format: str = 'json',
    log_levels: str = '',
    environment: str = 'production',
) -> None:
    """
    Configura structlog e o logging stdlib.

    Chamado por create_app. Pode ser chamado de novo (ex: uma app por
    teste); a configuracao anterior e substituida.

    Args:
        log_level: Nivel do logger raiz.
        log_format: 'json' ou 'console'.
        log_levels: Overrides por modulo (ver parse_log_levels).
        environment: Valor de APP_ENV anexado aos eventos.
    """
    global _environment
    _environment = environment

    pre_chain: list = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        add_app_context,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt='iso', utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    loggers = {name: {'level': 'WARNING'} for name in _QUIET_LOGGERS}
    loggers.update({name: {'level': level} for name, level in parse_log_levels(log_levels).items()})

    logging.config.dictConfig({
        'version': 1,
        'disable_existing_loggers': False,
        'formatters': {
            'structlog': {
                '()': structlog.stdlib.ProcessorFormatter,
                'processors': [
                    structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                    structlog.processors.format_exc_info,
                    _renderer(log_format),
                ],
                'foreign_pre_chain': pre_chain,
            },
        },
        'handlers': {
            'stdout': {
                'class': 'logging.StreamHandler',
                'formatter': 'structlog',
                'stream': 'ext://sys.stdout',
            },
        },
        'root': {'handlers': ['stdout'], 'level': log_level.upper()},
        'loggers': loggers,
    })

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Logger structlog nomeado pelo modulo (get_logger(__name__))."""
    return structlog.get_logger(name)
