"""Application configuration"""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings from environment variables"""

    # Target Database (row count statistics source)
    target_db_host: str = "localhost"
    target_db_port: int = 5432
    target_db_name: str = "postgres"
    target_db_user: str = "postgres"
    target_db_password: str = ""
    target_db_ssl: str = "disable"
    target_db_schemas: str = "public"

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Metering
    max_query_cost: int = 10000
    stats_timeout_seconds: int = 10
    startup_sanity_check: bool = True

    # Logging
    log_level: str = "INFO"

    class Config:
        env_file = ".env"
        case_sensitive = False

    @property
    def schema_list(self) -> list[str]:
        schemas = [s.strip() for s in (self.target_db_schemas or "").split(",") if s.strip()]
        return schemas or ["public"]


settings = Settings()
