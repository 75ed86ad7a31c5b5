from datetime import datetime

from prompt_manager.shared.schemas import CamelModel


class OverviewTotals(CamelModel):
    """Totais gerais da base de prompts."""

    total_prompts: int
    total_categories: int
    total_tags: int
    total_usage: int
    average_rating: float


class PopularPromptHighlight(CamelModel):
    id: int
    title: str
    use_count: int


class LatestPromptHighlight(CamelModel):
    id: int
    title: str
    created_at: datetime


class OverviewHighlights(CamelModel):
    """Destaques exibidos no dashboard (None quando nao ha prompts)."""

    popular_prompt: PopularPromptHighlight | None = None
    latest_prompt: LatestPromptHighlight | None = None


class OverviewResponse(CamelModel):
    """
    Schema de resposta do resumo de estatisticas.

    Inclui totais de prompts, categorias, tags e usos, a avaliacao media
    e os prompts em destaque.
    """

    overview: OverviewTotals
    highlights: OverviewHighlights


class CategoryName(CamelModel):
    name: str


class UsagePromptSummary(CamelModel):
    title: str
    category: CategoryName | None = None


class UsageEntry(CamelModel):
    """Registro de uso dentro do periodo consultado."""

    id: int
    prompt_id: int
    context: str | None = None
    used_at: datetime
    prompt: UsagePromptSummary


class TopPrompt(CamelModel):
    id: int
    title: str
    use_count: int
    category: CategoryName | None = None


class UsageStatsResponse(CamelModel):
    """
    Estatisticas de uso em uma janela relativa (1d, 7d ou 30d).

    usage_history traz no maximo 50 registros; total_usage_in_period
    conta todos os usos da janela.
    """

    period: str
    usage_history: list[UsageEntry]
    top_prompts: list[TopPrompt]
    total_usage_in_period: int


class TrendPoint(CamelModel):
    """Criacoes e usos de um dia (YYYY-MM-DD, UTC)."""

    date: str
    creations: int
    usage: int


class TrendsResponse(CamelModel):
    period: str
    trends: list[TrendPoint]


class CategoryStats(CamelModel):
    """Agregados de uso dos prompts de uma categoria."""

    id: int
    name: str
    description: str | None = None
    color: str
    prompt_count: int
    total_usage: int
    average_rating: float


class CategoryStatsResponse(CamelModel):
    categories: list[CategoryStats]


class TagStats(CamelModel):
    """Agregados de uso dos prompts de uma tag."""

    id: int
    name: str
    color: str
    prompt_count: int
    total_usage: int
    average_rating: float


class TagStatsResponse(CamelModel):
    tags: list[TagStats]
