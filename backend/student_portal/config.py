"""Application settings and validation."""

import os
from pathlib import Path

BASE = Path(__file__).resolve().parent.parent


class Settings:
    ENV: str
    DATABASE_URL: str
    SQL_ECHO: bool
    LOG_LEVEL: str
    ALLOW_DEV_CORS: bool
    MAX_PAGE_SIZE: int

    def __init__(self):
        self.ENV = os.getenv("ENV", "dev").lower()
        self.DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{BASE / 'app.db'}")
        self.SQL_ECHO = os.getenv("SQL_ECHO", "false").lower() == "true"
        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
        self.ALLOW_DEV_CORS = os.getenv("ALLOW_DEV_CORS", "true").lower() == "true"
        self.MAX_PAGE_SIZE = int(os.getenv("MAX_PAGE_SIZE", "0"))  # 0 = no cap
        self._validate()

    def _validate(self):
        if self.ENV != "dev" and self.DATABASE_URL in ("sqlite://", "sqlite:///:memory:"):
            raise RuntimeError("DATABASE_URL must point at a persistent database in non-dev environments")
        if self.MAX_PAGE_SIZE < 0:
            raise RuntimeError("MAX_PAGE_SIZE must be >= 0")


settings = Settings()
