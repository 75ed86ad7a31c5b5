from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from prompt_manager.database import get_db
from prompt_manager.modules.stats.schemas import (
    CategoryStatsResponse,
    OverviewResponse,
    TagStatsResponse,
    TrendsResponse,
    UsageStatsResponse,
)
from prompt_manager.modules.stats.service import StatsService, resolve_trend_days

router = APIRouter(
    prefix='/api/stats',
    tags=['Estatisticas'],
)


def get_stats_service(db: Session = Depends(get_db)) -> StatsService:
    """Dependency que fornece o servico de estatisticas."""
    return StatsService(db)


@router.get('/overview', response_model=OverviewResponse)
def get_overview(
    service: StatsService = Depends(get_stats_service),
) -> OverviewResponse:
    """
    Retorna o resumo de estatisticas.

    Inclui totais de prompts, categorias, tags e usos, a avaliacao media
    e os prompts mais usado e mais recente.
    """
    return service.get_overview()


@router.get('/usage', response_model=UsageStatsResponse)
def get_usage(
    period: str | None = Query(None, description='1d, 7d ou 30d (padrao 7d)'),
    service: StatsService = Depends(get_stats_service),
) -> UsageStatsResponse:
    """Usos no periodo e os prompts mais usados."""
    return service.get_usage(period)


@router.get('/trends', response_model=TrendsResponse)
def get_trends(
    days: str | None = Query(None, description='Quantidade de dias (padrao 30, maximo 365)'),
    service: StatsService = Depends(get_stats_service),
) -> TrendsResponse:
    """Serie diaria de criacoes e usos terminando hoje (UTC)."""
    return service.get_trends(resolve_trend_days(days))


@router.get('/categories', response_model=CategoryStatsResponse)
def get_category_stats(
    service: StatsService = Depends(get_stats_service),
) -> CategoryStatsResponse:
    """Metricas de uso agrupadas por categoria."""
    return service.get_category_stats()


@router.get('/tags', response_model=TagStatsResponse)
def get_tag_stats(
    service: StatsService = Depends(get_stats_service),
) -> TagStatsResponse:
    """Metricas de uso agrupadas por tag."""
    return service.get_tag_stats()
