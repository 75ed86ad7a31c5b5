from collections.abc import Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool


class Base(DeclarativeBase):
    """Classe base declarativa para todos os modelos SQLAlchemy."""
    pass


def _engine_options(url: str) -> dict:
    """Retorna as opcoes de engine adequadas ao dialeto da URL."""
    if url.startswith('sqlite'):
        options: dict = {'connect_args': {'check_same_thread': False}}
        # Banco em memoria precisa de uma unica conexao compartilhada
        if url in ('sqlite://', 'sqlite:///:memory:'):
            options['poolclass'] = StaticPool
        return options

    return {
        'pool_pre_ping': True,
        'pool_size': 5,
        'max_overflow': 10,
        'pool_recycle': 1800,
        'pool_timeout': 30,
    }


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    """Ativa as foreign keys em conexoes SQLite (desligadas por padrao)."""
    cursor = dbapi_connection.cursor()
    cursor.execute('PRAGMA foreign_keys=ON')
    cursor.close()


class Database:
    """
    Cliente do banco de dados da aplicacao.

    Construido uma unica vez no startup (create_app) e compartilhado via
    app.state. Mantem a engine (pool de conexoes) e a fabrica de sessoes.
    """

    def __init__(self, url: str, echo: bool = False) -> None:
        """Cria a engine e a fabrica de sessoes para a URL informada."""
        self.url = url
        self.engine: Engine = create_engine(url, echo=echo, **_engine_options(url))
        if url.startswith('sqlite'):
            event.listen(self.engine, 'connect', _enable_sqlite_foreign_keys)

        self._session_factory = sessionmaker(
            bind=self.engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

    def session(self) -> Session:
        """Abre uma nova sessao."""
        return self._session_factory()

    def create_all(self) -> None:
        """Cria todas as tabelas registradas no metadata."""
        Base.metadata.create_all(self.engine)

    def drop_all(self) -> None:
        """Remove todas as tabelas registradas no metadata."""
        Base.metadata.drop_all(self.engine)

    def dispose(self) -> None:
        """Fecha as conexoes do pool."""
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """Dependency do FastAPI que fornece uma sessao do banco de dados."""
    database: Database = request.app.state.database
    db = database.session()
    try:
        yield db
    finally:
        db.close()
