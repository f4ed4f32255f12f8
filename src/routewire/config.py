"""
routewire/config.py

Environment variable configuration.

Contains:
- Config: Centralized settings from environment variables
- LOG_LEVEL, ROUTEWIRE_DB_DIR, ROUTEWIRE_MAX_FILE_BYTES, etc.
"""

import logging
import os
from typing import Any

from dotenv import load_dotenv

load_dotenv()


class Config():
    """
    Centralized configuration for environment variables.
    """

    # logging configuration
    LOG_LEVEL: int = logging.getLevelNamesMapping().get(
        os.getenv("LOG_LEVEL", "INFO").upper(),
        logging.INFO
    )
    LOG_DATE_FORMAT: str = os.getenv("LOG_DATE_FORMAT", "%Y-%m-%d %H:%M:%S")
    LOG_FORMAT: str = os.getenv("LOG_FORMAT", "%(name)s: %(message)s")

    # repo-local storage, relative to the analyzed repo root
    DB_DIR: str = os.getenv("ROUTEWIRE_DB_DIR", ".routewire")

    # source read limit per file
    MAX_FILE_BYTES: int = int(os.getenv("ROUTEWIRE_MAX_FILE_BYTES", "500000"))

    @classmethod
    def as_dict(cls) -> dict[str, Any]:
        """
        Return a dictionary of all UPPERCASE class attributes and their values.
        """
        return {
            key: getattr(cls, key)
            for key in dir(cls)
            if key.isupper()
        }
