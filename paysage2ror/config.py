"""
Runtime configuration read from environment variables.

Values come from the process environment, optionally seeded from a .env
file by ``paysage2ror.env.load_env``.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional


PAYSAGE_API_URL = "https://api.paysage.dataesr.ovh"
PAYSAGE_CATEGORY = "4d6le"  # geographical category "France"
PAYSAGE_PAGE_SIZE = 200
PAYSAGE_PAGE_LIMIT = 10  # 0 = no limit
ROR_API_URL = "https://api.ror.org/organizations"
ROR_LOOKUP_DELAY = 30.0

UNMATCHED_MODES = ("retain", "drop")
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigError(Exception):
    """Raised when an environment value cannot be parsed."""
    pass


def _get_int(env: Mapping[str, str], name: str, default: int, minimum: int = 0) -> int:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        raise ConfigError(f"{name} must be an integer, got {raw!r}")
    if value < minimum:
        raise ConfigError(f"{name} must be >= {minimum}, got {value}")
    return value


def _get_float(env: Mapping[str, str], name: str, default: float, positive: bool = False) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}")
    if positive and value <= 0:
        raise ConfigError(f"{name} must be greater than 0, got {value}")
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {value}")
    return value


@dataclass(frozen=True)
class Settings:
    """All tunables of a reconciliation run."""

    paysage_api_key: str = ""
    paysage_api_url: str = PAYSAGE_API_URL
    paysage_category: str = PAYSAGE_CATEGORY
    page_size: int = PAYSAGE_PAGE_SIZE
    page_limit: int = PAYSAGE_PAGE_LIMIT
    ror_api_url: str = ROR_API_URL
    lookup_delay: float = ROR_LOOKUP_DELAY
    max_workers: int = 1
    http_timeout: float = 30.0
    retry_max: int = 5
    retry_base_delay: float = 180.0
    retry_max_delay: float = 900.0
    output_dir: Path = Path(".")
    matched_file: str = "output.csv"
    unmatched_file: str = "unmatched.csv"
    unmatched_report: str = "retain"
    log_level: str = "INFO"

    @property
    def matched_path(self) -> Path:
        return self.output_dir / self.matched_file

    @property
    def unmatched_path(self) -> Path:
        return self.output_dir / self.unmatched_file

    @property
    def keep_unmatched(self) -> bool:
        return self.unmatched_report == "retain"

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        """
        Build settings from environment variables.

        Args:
            env: Mapping to read from (default: os.environ)

        Raises:
            ConfigError: If a numeric value is malformed or a mode is unknown
        """
        env = os.environ if env is None else env

        unmatched_report = (env.get("UNMATCHED_REPORT") or "retain").strip().lower()
        if unmatched_report not in UNMATCHED_MODES:
            raise ConfigError(
                f"UNMATCHED_REPORT must be one of {', '.join(UNMATCHED_MODES)}, got {unmatched_report!r}"
            )

        log_level = (env.get("LOG_LEVEL") or "INFO").strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")

        return cls(
            paysage_api_key=env.get("PAYSAGE_API_KEY") or env.get("XAPIKEY") or "",
            paysage_api_url=(env.get("PAYSAGE_API_URL") or PAYSAGE_API_URL).rstrip("/"),
            paysage_category=env.get("PAYSAGE_CATEGORY") or PAYSAGE_CATEGORY,
            page_size=_get_int(env, "PAYSAGE_PAGE_SIZE", PAYSAGE_PAGE_SIZE, minimum=1),
            page_limit=_get_int(env, "PAYSAGE_PAGE_LIMIT", PAYSAGE_PAGE_LIMIT),
            ror_api_url=env.get("ROR_API_URL") or ROR_API_URL,
            lookup_delay=_get_float(env, "ROR_LOOKUP_DELAY", ROR_LOOKUP_DELAY),
            max_workers=_get_int(env, "MAX_WORKERS", 1, minimum=1),
            http_timeout=_get_float(env, "HTTP_TIMEOUT", 30.0, positive=True),
            retry_max=_get_int(env, "RETRY_MAX", 5),
            retry_base_delay=_get_float(env, "RETRY_BASE_DELAY", 180.0),
            retry_max_delay=_get_float(env, "RETRY_MAX_DELAY", 900.0),
            output_dir=Path(env.get("OUTPUT_DIR") or "."),
            matched_file=env.get("MATCHED_FILE") or "output.csv",
            unmatched_file=env.get("UNMATCHED_FILE") or "unmatched.csv",
            unmatched_report=unmatched_report,
            log_level=log_level,
        )
