"""Application settings and validation."""

import os
from pathlib import Path

DEFAULT_JWT_SECRET = "change_me_for_prod"
DEFAULT_DB_URL = f"sqlite:///{Path(__file__).resolve().parent.parent / 'app.db'}"


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


class Settings:
    ENV: str
    JWT_SECRET: str
    JWT_ALGORITHM: str
    DATABASE_URL: str
    ALLOW_INSECURE_JWT: bool
    ALLOW_DEV_CORS: bool
    EXPOSE_ERROR_DETAILS: bool
    LOG_LEVEL: str

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.JWT_SECRET = os.getenv("JWT_SECRET", DEFAULT_JWT_SECRET)
        self.JWT_ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
        self.DATABASE_URL = os.getenv("DATABASE_URL", DEFAULT_DB_URL)
        self.ALLOW_INSECURE_JWT = _get_bool("ALLOW_INSECURE_JWT", False)
        self.ALLOW_DEV_CORS = _get_bool("ALLOW_DEV_CORS", True)
        # 500 responses carry the raw persistence error unless switched off
        self.EXPOSE_ERROR_DETAILS = _get_bool("EXPOSE_ERROR_DETAILS", True)
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self._validate()

    def _validate(self):
        if self.ENV == "dev" or self.ALLOW_INSECURE_JWT:
            return
        if not self.JWT_SECRET.strip() or self.JWT_SECRET == DEFAULT_JWT_SECRET:
            raise RuntimeError("JWT_SECRET must be set to a non-default value in non-dev environments")


settings = Settings()
