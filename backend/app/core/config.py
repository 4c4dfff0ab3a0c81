"""Application configuration."""
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(env_file=".env", case_sensitive=True)

    PROJECT_NAME: str = "Posts Maintenance API"

    # Database
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "postgres"
    POSTGRES_HOST: str = "localhost"
    POSTGRES_PORT: int = 5432
    POSTGRES_DB: str = "posts_maintenance"

    # Redis (job store + scheduling markers)
    REDIS_HOST: str = "localhost"
    REDIS_PORT: int = 6379
    REDIS_DB: int = 1

    # Celery
    CELERY_BROKER_URL: str = "redis://localhost:6379/0"
    CELERY_RESULT_BACKEND: str = "redis://localhost:6379/0"

    # NextAuth JWT Secret (shared with frontend)
    NEXTAUTH_SECRET: str = ""
    SCAN_ADMIN_ROLES: list[str] = ["administrator"]

    # Scan engine
    SCAN_BATCH_SIZE: int = 50
    SCAN_TICK_DELAY_SECONDS: int = 1
    SCAN_SCHEDULE_GRACE_SECONDS: int = 60
    SCAN_JOB_RETENTION_SECONDS: int = 3600
    SCAN_PUBLIC_CONTENT_TYPES: list[str] = ["post", "page"]
    SCAN_DEFAULT_CONTENT_TYPES: list[str] = ["post", "page"]
    SCAN_ELIGIBLE_STATUS: str = "publish"
    SCAN_CLI_CHUNK_SIZE: int = 200

    # Daily synchronous scan (Celery beat)
    DAILY_SCAN_ENABLED: bool = True
    DAILY_SCAN_HOUR: int = 3

    # CORS
    ALLOWED_ORIGINS: list[str] = ["http://localhost:3000", "http://localhost"]

    @property
    def DATABASE_URL(self) -> str:
        """Sync PostgreSQL database URL for SQLAlchemy and Alembic."""
        return f"postgresql+psycopg2://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

    @property
    def REDIS_URL(self) -> str:
        """Redis URL for the durable job store."""
        return f"redis://{self.REDIS_HOST}:{self.REDIS_PORT}/{self.REDIS_DB}"


settings = Settings()
