import os
from pathlib import Path
from dotenv import dotenv_values

ENV_FILE = Path(__file__).resolve().parents[1] / ".env"


def admin_token(env_file: Path = ENV_FILE) -> str:
    """ADMIN_TOKEN from the environment, then from ``env_file``, else the dev default."""
    token = os.getenv("ADMIN_TOKEN")
    if not (token and token.strip()) and env_file.exists():
        token = dotenv_values(env_file).get("ADMIN_TOKEN")
    return (token or "").strip() or "dev-admin-token"


class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///local.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    TOTAL_TABLES = int(os.getenv("TOTAL_TABLES", "20"))
    MAX_GUESTS = int(os.getenv("MAX_GUESTS", "20"))
    RATE_LIMIT_MAX = int(os.getenv("RATE_LIMIT_MAX", "12"))
    RATE_LIMIT_WINDOW = int(os.getenv("RATE_LIMIT_WINDOW", "60"))
    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    ADMIN_TOKEN = admin_token()

class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = "sqlite://"
    RATE_LIMIT_MAX = 10_000
    ADMIN_TOKEN = "test-admin-token"
