from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    DATABASE_URL: str
    SECRET_KEY: str
    ACCESS_TOKEN_EXPIRE_DAYS: int = 7
    APP_NAME: str = "HeartSync API"
    CORS_ORIGINS: str = "*"
    LOG_LEVEL: str = "INFO"
    SQL_ECHO: bool = False

    # Reconciliation retry policy
    RECONCILE_MAX_ATTEMPTS: int = 3
    RECONCILE_BACKOFF_SECONDS: float = 0.05

    # Aggregation reporting
    STATS_TOP_TARGETS: int = 10
    ACTIVITY_WINDOW_DAYS: int = 7

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")


settings = Settings()
