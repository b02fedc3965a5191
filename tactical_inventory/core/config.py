"""
Tactical Inventory Configuration
Core settings for the stock ledger and movement engine
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional
from pathlib import Path

POSTGRES_PREFIXES = ("postgres://", "postgresql://", "postgresql+")
MYSQL_PREFIXES = ("mysql://", "mysql+")
SQLITE_PREFIXES = ("sqlite://", "sqlite+")


class Settings(BaseSettings):
    """Application settings"""

    # Application Info
    APP_NAME: str = "Tactical Inventory API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False

    # Database Configuration
    DATABASE_URL: Optional[str] = None
    DB_TYPE: Optional[str] = None
    DB_HOST: str = "localhost"
    DB_PORT: Optional[int] = None
    DB_USER: Optional[str] = None
    DB_PASSWORD: str = ""
    DB_NAME: str = "tactical_inventory"
    DATABASE_POOL_SIZE: int = 10
    DATABASE_MAX_OVERFLOW: int = 20
    DATABASE_POOL_RECYCLE: int = 3600

    # CORS
    CORS_ORIGINS: list = [
        "http://localhost:5173",  # Vite frontend
    ]

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Path = Path("logs")
    LOG_FILE: str = "app.log"
    ERROR_LOG_FILE: str = "error.log"
    LOG_TO_FILE: bool = False

    # Change notifications: "logging" or "none"
    NOTIFIER_BACKEND: str = "logging"

    # API Configuration
    API_V1_STR: str = "/api"
    DOCS_URL: str = "/docs"

    @field_validator("DATABASE_URL", mode="before")
    @classmethod
    def normalize_database_url(cls, v: Optional[str]) -> Optional[str]:
        """Rewrite provider-style URLs into SQLAlchemy driver URLs"""
        if not v:
            return None
        v = v.strip()
        if v.startswith("postgres://"):
            return "postgresql://" + v[len("postgres://"):]
        if v.startswith("mysql://"):
            return "mysql+pymysql://" + v[len("mysql://"):]
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def upper_log_level(cls, v: str) -> str:
        return v.upper()

    @property
    def backend(self) -> str:
        """
        Resolve which database backend is configured

        The URL scheme wins; without one, DB_TYPE or the PostgreSQL default
        port select PostgreSQL and anything else falls back to MySQL.
        """
        url = (self.DATABASE_URL or "").lower()
        if url.startswith(POSTGRES_PREFIXES):
            return "postgresql"
        if url.startswith(MYSQL_PREFIXES):
            return "mysql"
        if url.startswith(SQLITE_PREFIXES):
            return "sqlite"
        db_type = (self.DB_TYPE or "").lower()
        if db_type in ("postgresql", "postgres", "pg") or self.DB_PORT == 5432:
            return "postgresql"
        if db_type == "sqlite":
            return "sqlite"
        return "mysql"

    @property
    def database_url(self) -> str:
        """Effective SQLAlchemy URL, assembled from DB_* parts when DATABASE_URL is unset"""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        backend = self.backend
        if backend == "sqlite":
            return f"sqlite:///./{self.DB_NAME}.db"
        if backend == "postgresql":
            user = self.DB_USER or "postgres"
            port = self.DB_PORT or 5432
            return f"postgresql://{user}:{self.DB_PASSWORD}@{self.DB_HOST}:{port}/{self.DB_NAME}"
        user = self.DB_USER or "root"
        port = self.DB_PORT or 3306
        return f"mysql+pymysql://{user}:{self.DB_PASSWORD}@{self.DB_HOST}:{port}/{self.DB_NAME}"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Global settings instance
settings = Settings()
