from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Publisher settings loaded from environment."""

    # Service
    service_name: str = "post-publisher"
    log_level: str = "INFO"

    # Database
    db_host: str = "localhost"
    db_port: int = 5432
    db_name: str = "crm"
    db_user: str = "postgres"
    db_password: str = ""

    db_create_tables: bool = False  # Create tables on startup (local development only)

    # Trigger authentication (service-role secret)
    service_role_key: str = ""

    # Orchestration
    batch_size: int = 5  # Max due posts handled per pass
    provider_timeout_seconds: float = 180.0  # Upper bound for one (post, provider) attempt
    http_timeout_seconds: float = 30.0

    # Media readiness polling (Instagram containers)
    media_poll_interval_seconds: float = 5.0
    media_poll_max_attempts: int = 20

    # Provider APIs
    linkedin_api_url: str = "https://api.linkedin.com/v2"
    graph_api_url: str = "https://graph.facebook.com"
    graph_api_version: str = "v19.0"

    # Notifications
    notification_timezone: str = "Europe/Madrid"
    error_excerpt_length: int = 100

    # In-process scheduler
    scheduler_interval_seconds: int = 60

    @property
    def database_url(self) -> str:
        return f"postgresql+asyncpg://{self.db_user}:{self.db_password}@{self.db_host}:{self.db_port}/{self.db_name}"

    @property
    def graph_base_url(self) -> str:
        return f"{self.graph_api_url}/{self.graph_api_version}"

    class Config:
        env_file = ".env"
        case_sensitive = False


settings = Settings()
