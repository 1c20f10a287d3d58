from typing import Optional
from urllib.parse import quote_plus
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    # --- Basic configuration ---
    APP_NAME: str = "Catalog API"
    APP_DESCRIPTION: str = "Category and product catalog backed by a relational store"
    APP_VERSION: str = "1.0.0"
    APP_ENV: str = "development"  # development, production, testing
    DEBUG: bool = True

    # --- Database (SQLModel over an async SQLAlchemy driver) ---
    DB_DRIVER: str = "mysql+aiomysql"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_NAME: str = "catalog_db"
    DB_URL: Optional[str] = None  # Full URL override, e.g. sqlite+aiosqlite:///./catalog.db
    DB_ECHO: bool = False

    @property
    def DATABASE_URL(self) -> str:
        if self.DB_URL:
            return self.DB_URL
        safe_password = quote_plus(self.DB_PASSWORD)
        return f"{self.DB_DRIVER}://{self.DB_USER}:{safe_password}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    # --- Logging ---
    LOG_LEVEL: str = "INFORMATION"  # TRACE, DEBUG, INFORMATION, WARNING, ERROR, CRITICAL
    LOG_DIR: str = "logs"
    LOG_TO_FILE: bool = True
    LOG_ENQUEUE: bool = False  # True hands writes to a background queue

    # --- Catalog query bounds ---
    CATALOG_PAGE_SIZE: int = 10
    CATALOG_MAX_PAGE_SIZE: int = 50

    # --- API route prefixes ---
    API_V1_CATEGORIES_PREFIX: str = "/api/v1/categories"
    API_V1_PRODUCTS_PREFIX: str = "/api/v1/products"

    # --- Gunicorn process name (optional) ---
    GUNICORN_PROC_NAME: Optional[str] = None  # Fallback to APP_NAME when empty

    # --- Pydantic ---
    # Load env from project root .env; priority: env vars > .env > defaults
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_ignore_empty=True,
    )


# Singleton settings instance
settings = Settings()
