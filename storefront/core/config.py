"""
Storefront - Settings

Everything is read from the environment (or a local ``.env``). List-valued
settings accept either a JSON array or a comma-separated string.
"""
import json
from typing import Any, List

from pydantic_settings import BaseSettings


def parse_list(raw: Any) -> List[str]:
    if isinstance(raw, list):
        return [str(item) for item in raw]
    if not isinstance(raw, str):
        return []
    text = raw.strip()
    if text.startswith("["):
        try:
            return [str(item) for item in json.loads(text)]
        except json.JSONDecodeError:
            text = text.strip("[]")
    return [part.strip() for part in text.split(",") if part.strip()]


class Settings(BaseSettings):
    # --- service ---
    APP_NAME: str = "Storefront API"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    API_VERSION: str = "v1"
    SERVER_HOST: str = "0.0.0.0"
    SERVER_PORT: int = 8000

    # --- store ---
    DATABASE_URL: str = "sqlite+aiosqlite:///./storefront.db"
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_ECHO: bool = False

    # --- auth ---
    JWT_SECRET_KEY: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    BCRYPT_ROUNDS: int = 12
    PASSWORD_RESET_EXPIRE_MINUTES: int = 10
    DEFAULT_ROLE_NAME: str = "customer"
    ADMIN_ROLE_NAME: str = "admin"

    # --- http ---
    CORS_ORIGINS_STR: str = "http://localhost:3000,http://localhost:5173"

    # --- rate limits (limits notation) ---
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_STORAGE_URI: str = "memory://"
    LOGIN_RATE_LIMIT: str = "10 per 15 minutes"
    REGISTER_RATE_LIMIT: str = "10 per 15 minutes"
    PASSWORD_RESET_RATE_LIMIT: str = "3 per minute"

    # --- logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str = ""

    # --- product images ---
    UPLOAD_DIR: str = "uploads"
    UPLOAD_URL_PREFIX: str = "/uploads"
    UPLOAD_MAX_FILE_SIZE: int = 5 * 1024 * 1024
    UPLOAD_MAX_FILES: int = 10
    UPLOAD_ALLOWED_TYPES_STR: str = "image/jpeg,image/jpg,image/png,image/gif,image/webp"

    # --- catalog ---
    LOW_STOCK_THRESHOLD: int = 10

    @property
    def CORS_ORIGINS(self) -> List[str]:
        return parse_list(self.CORS_ORIGINS_STR)

    @property
    def UPLOAD_ALLOWED_TYPES(self) -> List[str]:
        return parse_list(self.UPLOAD_ALLOWED_TYPES_STR)

    class Config:
        env_file = ".env"
        case_sensitive = True
        extra = "ignore"


settings = Settings()
