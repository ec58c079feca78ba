# app/core/config.py
import os

from dotenv import load_dotenv

load_dotenv()


def _parse_csv_env(name: str, default: str) -> list[str]:
    raw = os.getenv(name, default)
    return [item.strip() for item in raw.split(",") if item.strip()]


class Settings:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./marketplace.db")

    SECRET_KEY = os.getenv("SECRET_KEY", "dev-insecure-secret-change-me")
    REFRESH_SECRET_KEY = os.getenv("REFRESH_SECRET_KEY", "dev-insecure-refresh-secret")
    JWT_ALGORITHM = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "60"))
    REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

    CORS_ORIGINS = _parse_csv_env("CORS_ORIGINS", "*")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

    DEFAULT_PAGE_SIZE = int(os.getenv("DEFAULT_PAGE_SIZE", "10"))
    MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "100"))

    # per-client limits, slowapi notation
    RATE_LIMIT_ENABLED = os.getenv("RATE_LIMIT_ENABLED", "true").lower() in ("1", "true", "yes")
    RATE_LIMIT_DEFAULT = os.getenv("RATE_LIMIT_DEFAULT", "100/minute")
    RATE_LIMIT_STRICT = os.getenv("RATE_LIMIT_STRICT", "10/minute")
    RATE_LIMIT_RELAXED = os.getenv("RATE_LIMIT_RELAXED", "200/minute")


settings = Settings()
