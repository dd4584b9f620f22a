from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    APP_ENV: str = "local"
    APP_NAME: str = "conducky"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "postgresql+psycopg://postgres:postgres@db:5432/conducky"
    REDIS_URL: str = "redis://redis:6379/0"
    CELERY_BROKER_URL: str = "redis://redis:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://redis:6379/1"

    JWT_SECRET: str = "dev_secret_change_me"
    JWT_ALG: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60

    FRONTEND_BASE_URL: str = "http://localhost:3000"

    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_AUTH: str = "5/15 minutes"
    # Use the Redis URL when running more than one API process.
    RATE_LIMIT_STORAGE_URI: str = "memory://"

    # Record denied authorization checks as audit rows in addition to logging them.
    AUDIT_ACCESS_DENIALS: bool = False
    # 0 keeps audit rows forever.
    AUDIT_RETENTION_DAYS: int = 365
    AUDIT_RETENTION_CHECK_HOURS: int = 24


settings = Settings()
