"""
Runtime settings for the smart store.

Values come from environment variables; command-line flags in cli.py
override them.

Environment:
    SMART_STORE_TOKEN      shared secret passed to StoreService (default: admin)
    SMART_STORE_LOG_LEVEL  logging level name (default: INFO)
    SMART_STORE_HOST       API bind host (default: 127.0.0.1)
    SMART_STORE_PORT       API bind port (default: 8000)
"""

import logging
import os
from dataclasses import dataclass

LOG_FORMAT = "%(asctime)s | %(name)-24s | %(levelname)-5s | %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"


@dataclass
class Settings:
    token: str = "admin"
    log_level: str = "INFO"
    host: str = "127.0.0.1"
    port: int = 8000

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            token=os.getenv("SMART_STORE_TOKEN", "admin"),
            log_level=os.getenv("SMART_STORE_LOG_LEVEL", "INFO").upper(),
            host=os.getenv("SMART_STORE_HOST", "127.0.0.1"),
            port=int(os.getenv("SMART_STORE_PORT", "8000")),
        )


def configure_logging(level: str = "INFO") -> None:
    """Apply the shared log format once, at an entry point."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )
