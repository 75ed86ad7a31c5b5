from collections import Counter
from datetime import UTC, datetime, timedelta

from sqlalchemy.orm import Session

from prompt_manager.modules.stats.repository import StatsRepository
from prompt_manager.modules.stats.schemas import (
    CategoryStats,
    CategoryStatsResponse,
    LatestPromptHighlight,
    OverviewHighlights,
    OverviewResponse,
    OverviewTotals,
    PopularPromptHighlight,
    TagStats,
    TagStatsResponse,
    TopPrompt,
    TrendPoint,
    TrendsResponse,
    UsageEntry,
    UsageStatsResponse,
)
from prompt_manager.shared.utils import coerce_int, round_average, utc_now

# Janelas aceitas em /usage (periodo -> dias)
USAGE_PERIODS = {'1d': 1, '7d': 7, '30d': 30}
DEFAULT_USAGE_PERIOD = '7d'
USAGE_HISTORY_LIMIT = 50
TOP_PROMPTS_LIMIT = 10

DEFAULT_TREND_DAYS = 30
MAX_TREND_DAYS = 365


def _utc_date(value: datetime):
    """Data (UTC) de um instante; instantes sem fuso ja estao em UTC."""
    if value.tzinfo is not None:
        value = value.astimezone(UTC)
    return value.date()


def resolve_trend_days(value: str | int | None) -> int:
    """Quantidade de dias da serie: padrao 30, limitada a 1..365."""
    days = coerce_int(value)
    if days is None:
        return DEFAULT_TREND_DAYS
    return max(1, min(days, MAX_TREND_DAYS))


class StatsService:
    """
    Servico de estatisticas.

    Agrega totais, usos por periodo, tendencias diarias e metricas por
    categoria e tag. Tudo e calculado a cada requisicao.
    """

    def __init__(self, db: Session) -> None:
        """
        Inicializa o servico com a sessao do banco de dados.

        Args:
            db: Sessao do SQLAlchemy para acesso ao banco.
        """
        self._repository = StatsRepository(db)

    def get_overview(self) -> OverviewResponse:
        """
        Retorna os totais gerais e os prompts em destaque.

        Returns:
            OverviewResponse com totais, media de avaliacao e destaques.
        """
        popular = self._repository.get_most_used_prompt()
        latest = self._repository.get_latest_prompt()

        return OverviewResponse(
            overview=OverviewTotals(
                total_prompts=self._repository.count_prompts(),
                total_categories=self._repository.count_categories(),
                total_tags=self._repository.count_tags(),
                total_usage=self._repository.sum_use_count(),
                average_rating=round_average(self._repository.average_rating()),
            ),
            highlights=OverviewHighlights(
                popular_prompt=PopularPromptHighlight.model_validate(popular) if popular else None,
                latest_prompt=LatestPromptHighlight.model_validate(latest) if latest else None,
            ),
        )

    def get_usage(self, period: str | None) -> UsageStatsResponse:
        """
        Usos dentro de uma janela relativa.

        Args:
            period: 1d, 7d ou 30d. Valores desconhecidos usam 7d.

        Returns:
            Ate 50 usos recentes, os 10 prompts mais usados e o total da janela.
        """
        if period not in USAGE_PERIODS:
            period = DEFAULT_USAGE_PERIOD
        start = utc_now() - timedelta(days=USAGE_PERIODS[period])

        usage = self._repository.get_usage_since(start, USAGE_HISTORY_LIMIT)
        top_prompts = self._repository.get_top_prompts(TOP_PROMPTS_LIMIT)

        return UsageStatsResponse(
            period=period,
            usage_history=[UsageEntry.model_validate(item) for item in usage],
            top_prompts=[TopPrompt.model_validate(prompt) for prompt in top_prompts],
            total_usage_in_period=self._repository.count_usage_since(start),
        )

    def get_trends(self, days: int) -> TrendsResponse:
        """
        Serie diaria de criacoes e usos.

        Cobre os `days` dias corridos terminando hoje (UTC), um ponto por
        dia, inclusive dias sem atividade.
        """
        today = utc_now().date()
        first_day = today - timedelta(days=days - 1)
        start = datetime(first_day.year, first_day.month, first_day.day, tzinfo=UTC)

        creations = Counter(
            _utc_date(value) for value in self._repository.get_creation_times_since(start)
        )
        usage = Counter(
            _utc_date(value) for value in self._repository.get_usage_times_since(start)
        )

        trends = []
        for offset in range(days):
            day = first_day + timedelta(days=offset)
            trends.append(
                TrendPoint(
                    date=day.isoformat(),
                    creations=creations.get(day, 0),
                    usage=usage.get(day, 0),
                )
            )
        return TrendsResponse(period=f'{days}d', trends=trends)

    def get_category_stats(self) -> CategoryStatsResponse:
        """Quantidade de prompts, uso total e avaliacao media por categoria."""
        return CategoryStatsResponse(
            categories=[
                CategoryStats(
                    id=category.id,
                    name=category.name,
                    description=category.description,
                    color=category.color,
                    prompt_count=prompt_count,
                    total_usage=int(total_usage),
                    average_rating=round_average(average) if prompt_count else 0.0,
                )
                for category, prompt_count, total_usage, average
                in self._repository.get_category_aggregates()
            ]
        )

    def get_tag_stats(self) -> TagStatsResponse:
        """Quantidade de prompts, uso total e avaliacao media por tag."""
        return TagStatsResponse(
            tags=[
                TagStats(
                    id=tag.id,
                    name=tag.name,
                    color=tag.color,
                    prompt_count=prompt_count,
                    total_usage=int(total_usage),
                    average_rating=round_average(average) if prompt_count else 0.0,
                )
                for tag, prompt_count, total_usage, average
                in self._repository.get_tag_aggregates()
            ]
        )
