from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Configuracoes da aplicacao carregadas de variaveis de ambiente."""

    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
    )

    # -------------------------------------------------------------------------
    # Aplicacao
    # -------------------------------------------------------------------------
    app_name: str = 'Prompt Manager API'
    app_version: str = '1.0.0'
    app_env: str = 'production'

    @property
    def is_development(self) -> bool:
        """Indica se a aplicacao roda em modo de desenvolvimento."""
        return self.app_env.lower() == 'development'

    # -------------------------------------------------------------------------
    # PostgreSQL
    # -------------------------------------------------------------------------
    postgres_host: str = 'localhost'
    postgres_port: int = 5432
    postgres_user: str = 'prompt_manager'
    postgres_password: str = 'prompt_manager_secret_password'
    postgres_db: str = 'prompt_manager'

    # Sobrescreve a URL montada a partir dos campos acima (ex: sqlite:///./prompts.db)
    database_uri: str | None = None

    @property
    def database_url(self) -> str:
        """URL de conexao com o banco de dados."""
        if self.database_uri:
            return self.database_uri
        return (
            f'postgresql://{self.postgres_user}:{self.postgres_password}'
            f'@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}'
        )

    # Cria as tabelas no startup sem passar pelo Alembic (uso local com SQLite)
    auto_create_tables: bool = False

    # -------------------------------------------------------------------------
    # Logging
    # -------------------------------------------------------------------------
    log_level: str = 'INFO'
    log_format: str = 'json'
    log_levels: str = ''

    # -------------------------------------------------------------------------
    # Metricas
    # -------------------------------------------------------------------------
    metrics_enabled: bool = True

    # -------------------------------------------------------------------------
    # Importacao
    # -------------------------------------------------------------------------
    import_max_bytes: int = 10 * 1024 * 1024

    # -------------------------------------------------------------------------
    # Busca
    # -------------------------------------------------------------------------
    # Entradas mantidas no historico de buscas (as mais antigas sao removidas)
    search_history_max_entries: int = 500

    # -------------------------------------------------------------------------
    # CORS
    # -------------------------------------------------------------------------
    cors_origins: str = 'http://localhost:3000'

    @property
    def cors_origins_list(self) -> list[str]:
        """Retorna lista de origens permitidas para CORS."""
        return [origin.strip() for origin in self.cors_origins.split(',')]


# Instancia global de configuracoes
settings = Settings()
