from datetime import datetime

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import Mapped, mapped_column

from prompt_manager.shared.models import AppendOnlyModel
from prompt_manager.shared.utils import utc_now


class SearchHistory(AppendOnlyModel):
    """Termo de busca executado pelo usuario."""

    __tablename__ = 'search_history'

    query: Mapped[str] = mapped_column(
        String(200),
        nullable=False,
    )
    searched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
        index=True,
    )
