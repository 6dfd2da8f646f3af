import os
from dataclasses import dataclass
from typing import Optional

from dotenv import load_dotenv

load_dotenv()


ERROR_LOG_ENV = "PHPLOG_ERROR_LOG"
CACHE_FILE_ENV = "PHPLOG_CACHE_FILE"


@dataclass(frozen=True)
class Settings:
    error_log: Optional[str]
    cache_file: Optional[str]  # None disables the cache


def load_settings(
    error_log: Optional[str] = None,
    cache_file: Optional[str] = None,
) -> Settings:
    """
    Explicit values win; otherwise fall back to the environment
    (including a .env file in the working directory).
    """
    return Settings(
        error_log=error_log or os.getenv(ERROR_LOG_ENV) or None,
        cache_file=cache_file or os.getenv(CACHE_FILE_ENV) or None,
    )
