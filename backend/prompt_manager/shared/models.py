from datetime import datetime

from sqlalchemy import DateTime, Integer, func
from sqlalchemy.orm import Mapped, mapped_column

from prompt_manager.database import Base
from prompt_manager.shared.utils import utc_now


class BaseModel(Base):
    """
    Modelo base com campos padrao para todas as tabelas.

    Inclui: id (inteiro autoincremental), created_at, updated_at.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        onupdate=utc_now,
        nullable=False,
    )


class AppendOnlyModel(Base):
    """
    Modelo base para registros de historico que nunca sao atualizados.

    Inclui apenas o id; cada tabela define seu proprio timestamp.
    """

    __abstract__ = True

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
