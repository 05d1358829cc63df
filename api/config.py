"""
Environment-aware configuration.
Values come from the process environment, with .env loaded if present.
Token lifetimes are plain seconds so operators can tune them without code changes.
"""
import os
from dotenv import load_dotenv
from datetime import timedelta

load_dotenv()  # Read .env if present


def _seconds(name: str, default: int) -> timedelta:
    return timedelta(seconds=int(os.getenv(name, str(default))))


class BaseConfig:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")  # Set a strong key in production
    DEBUG = False
    TESTING = False
    # CORS: in dev we usually allow '*', in prod supply a comma-separated list in env
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", "*")
    # Keep a copy of env for visibility
    APP_ENV = os.getenv("APP_ENV", "dev")
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///mapper.db")
    SQL_ECHO = os.getenv("SQL_ECHO", "0").lower() in ("1", "true", "yes")
    # JWT configuration; an empty secret stops the app from starting
    JWT_SECRET = os.getenv("JWT_SECRET", "")
    JWT_ISSUER = os.getenv("JWT_ISSUER", "bamboo-mapper")
    ACCESS_TOKEN_EXPIRES = _seconds("ACCESS_TOKEN_TTL_SECONDS", 900)
    REFRESH_TOKEN_EXPIRES = _seconds("REFRESH_TOKEN_TTL_SECONDS", 604800)


class DevelopmentConfig(BaseConfig):
    DEBUG = True
    # In dev, propagate exceptions so our error handler has full context
    PROPAGATE_EXCEPTIONS = True
    JWT_SECRET = os.getenv("JWT_SECRET", "dev-secret-change-me-dev-secret-change-me")


class TestingConfig(BaseConfig):
    TESTING = True
    # File-backed: each connection to sqlite:///:memory: is its own empty database
    DATABASE_URL = os.getenv("TEST_DATABASE_URL", "sqlite:///mapper-test.db")
    JWT_SECRET = "test-secret-key-that-is-long-enough-for-hs256"
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    DEBUG = False


def get_config(name: str | None):
    """
    Select config class.
    - If name is provided, choose by name.
    - Else choose based on APP_ENV (dev/test/prod).
    """
    if name:
        name = name.lower()
    env = (name or os.getenv("APP_ENV", "dev")).lower()
    if env in ["prod", "production"]:
        return ProductionConfig
    if env in ["test", "testing"]:
        return TestingConfig
    return DevelopmentConfig
