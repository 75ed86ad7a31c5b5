"""
Metricas Prometheus customizadas para o Prompt Manager.

Define contadores para acompanhar o uso dos prompts e as importacoes.
Expostas em /metrics junto com as metricas HTTP do instrumentator.
"""

from prometheus_client import Counter

# ---------------------------------------------------------------------------
# Metricas de prompts
# ---------------------------------------------------------------------------

PROMPTS_CREATED_TOTAL = Counter(
    'prompt_manager_prompts_created_total',
    'Total de prompts criados por origem',
    ['source'],  # source: api/batch/import
)

PROMPT_USAGE_TOTAL = Counter(
    'prompt_manager_prompt_usage_total',
    'Total de usos de prompts registrados',
)

# ---------------------------------------------------------------------------
# Metricas de importacao
# ---------------------------------------------------------------------------

IMPORT_RECORDS_TOTAL = Counter(
    'prompt_manager_import_records_total',
    'Registros processados em importacoes por formato e resultado',
    ['format', 'result'],  # result: created/skipped
)

# ---------------------------------------------------------------------------
# Helpers para instrumentar os servicos
# ---------------------------------------------------------------------------


def track_prompt_created(source: str) -> None:
    """Registra criacao de um prompt."""
    PROMPTS_CREATED_TOTAL.labels(source=source).inc()


def track_prompt_usage() -> None:
    """Registra um uso de prompt."""
    PROMPT_USAGE_TOTAL.inc()


def track_import(file_format: str, created: int, skipped: int) -> None:
    """Registra o resultado de uma importacao."""
    IMPORT_RECORDS_TOTAL.labels(format=file_format, result='created').inc(created)
    IMPORT_RECORDS_TOTAL.labels(format=file_format, result='skipped').inc(skipped)
