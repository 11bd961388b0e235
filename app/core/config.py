# app/core/config.py

import os
from dotenv import load_dotenv

# Project root (where main.py and .env live)
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
ENV_PATH = os.path.join(BASE_DIR, ".env")

# Load variables from .env when present
if os.path.exists(ENV_PATH):
    load_dotenv(ENV_PATH)


def _float_env(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return float(raw)


class Settings:
    def __init__(self) -> None:
        # SQLite by default when no .env is provided
        self.DATABASE_URL: str = os.getenv(
            "DATABASE_URL",
            "sqlite:///./afq_shipping.db",
        )

        self.LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO").upper()

        self.CORS_ORIGINS: list[str] = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://127.0.0.1:5173",
            ).split(",")
            if origin.strip()
        ]

        # Max number of store writes in flight for one bulk operation
        self.BULK_CONCURRENCY: int = int(os.getenv("BULK_CONCURRENCY", "10"))

        # Public USD exchange feed used by the "refresh rate" admin action
        self.EXCHANGE_RATE_URL: str = os.getenv(
            "EXCHANGE_RATE_URL",
            "https://open.er-api.com/v6/latest/USD",
        )
        self.EXCHANGE_RATE_TIMEOUT: float = _float_env("EXCHANGE_RATE_TIMEOUT", 10.0)

        # Fallback rates, used until an admin saves the settings record
        self.DEFAULT_USD_TO_GHS_RATE: float = _float_env("DEFAULT_USD_TO_GHS_RATE", 15.0)
        self.DEFAULT_USD_TO_CNY_RATE: float = _float_env("DEFAULT_USD_TO_CNY_RATE", 7.2)
        self.DEFAULT_SEA_RATE_PER_CBM: float = _float_env("DEFAULT_SEA_RATE_PER_CBM", 1000.0)
        self.DEFAULT_AIR_RATE_PER_KG: float = _float_env("DEFAULT_AIR_RATE_PER_KG", 5.0)


settings = Settings()
