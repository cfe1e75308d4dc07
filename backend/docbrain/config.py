"""Application configuration from environment variables."""
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """All config comes from env vars or .env.backend file."""

    DATABASE_URL: str = "sqlite+aiosqlite:///./backend/docbrain.db"
    DB_ECHO: bool = False
    FILE_STORAGE_PATH: str = "./backend/uploads"
    API_PORT: int = 3001
    LOG_LEVEL: str = "INFO"

    # Comma separated; preview deployments are matched by the regex below
    CORS_ORIGINS: str = "http://localhost:3000"
    CORS_PREVIEW_ORIGIN_REGEX: str = r"https://.*\.vercel\.app"

    MAX_UPLOAD_BYTES: int = 50 * 1024 * 1024

    class Config:
        env_file = ".env.backend"
        env_file_encoding = "utf-8"

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


settings = Settings()
