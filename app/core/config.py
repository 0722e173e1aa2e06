from functools import lru_cache
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    All config comes from .env file.
    Change values in .env; they automatically apply everywhere.
    """

    # ── Database ──────────────────────────────────────────
    DATABASE_URL: str                # asyncpg, used by FastAPI
    DATABASE_SYNC_URL: str = ""      # psycopg2, used only by Alembic

    # ── Identity provider tokens ──────────────────────────
    SECRET_KEY: str
    ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60
    JWT_AUDIENCE: str | None = None
    JWT_ISSUER: str | None = None

    # ── CORS ──────────────────────────────────────────────
    ALLOWED_ORIGINS: str = "http://localhost:5173"

    # ── App ───────────────────────────────────────────────
    APP_ENV: str = "production"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"
    PUBLIC_BASE_URL: str = "http://localhost:8000"

    # ── Storage ───────────────────────────────────────────
    STORAGE_BACKEND: str = "minio"   # "minio" | "local"
    LOCAL_STORAGE_ROOT: str = "storage"
    MINIO_ENDPOINT: str = "127.0.0.1:9000"
    MINIO_ACCESS_KEY: str = ""
    MINIO_SECRET_KEY: str = ""
    MINIO_BUCKET: str = "uems-certificates"
    MINIO_SECURE: bool = False

    # ── Certificates ──────────────────────────────────────
    CERT_SIGNING_SECRET: str = ""    # falls back to SECRET_KEY
    CERTIFICATE_ISSUE_MODE: str = "always"          # "always" | "idempotent"
    CERTIFICATE_ORIENTATION: str = "landscape"      # "landscape" | "portrait"
    TEMPLATE_MAX_BYTES: int = 5 * 1024 * 1024

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def origins_list(self) -> list[str]:
        """Splits comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.ALLOWED_ORIGINS.split(",") if o.strip()]

    @property
    def signing_secret(self) -> str:
        return self.CERT_SIGNING_SECRET or self.SECRET_KEY

    @property
    def issue_idempotent(self) -> bool:
        return self.CERTIFICATE_ISSUE_MODE.strip().lower() == "idempotent"


@lru_cache()
def get_settings() -> Settings:
    return Settings()


# Single instance used across the entire app
settings = get_settings()
