"""Configuration management for the static data loader.

Loads configuration from environment variables with .env file support.
"""

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

from .errors import ConfigError

# Load .env file from project root
_env_path = Path(__file__).parent.parent.parent / ".env"
load_dotenv(_env_path)

DEFAULT_USER_AGENT = "Crypta-Eve/Podded install (BUT I AM BAD AND HAVENT CHANGED DEFAULT UA)"
DEFAULT_ESI_BASE_URL = "https://esi.evetech.net"


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, default, cast=int):
    value = os.environ.get(name)
    if value is None or value.strip() == "":
        return default
    try:
        return cast(value)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {value!r}") from None


@dataclass
class HiggsConfig:
    """Loader configuration."""

    mongo_uri: str = "mongodb://localhost:27017"
    mongo_database: str = "podded"
    user_agent: str = DEFAULT_USER_AGENT
    timeout_sec: int = 30
    max_routines: int = 20  # Worker count W for batch fan-out
    retry_limit: int = 25
    rate_limit_threshold: int = 10
    esi_base_url: str = DEFAULT_ESI_BASE_URL
    datasource: str = "tranquility"
    insecure_skip_verify: bool = False  # Disables TLS certificate checks when True
    startup_delay: float = 30.0  # Pause before the universe stages start
    http_debug: bool = False

    def esi_url(self, path: str) -> str:
        """Build a full ESI URL for a path such as ``/latest/universe/regions/``."""
        return f"{self.esi_base_url.rstrip('/')}{path}"

    def validate(self) -> list[str]:
        """Validate configuration fields.

        Returns:
            List of validation error messages, empty if valid.
        """
        errors = []
        if not self.mongo_uri:
            errors.append("HIGGS_MONGO_URI is required")
        if not self.mongo_database:
            errors.append("HIGGS_MONGO_DATABASE is required")
        if not self.user_agent:
            errors.append("HIGGS_USER_AGENT is required")
        if self.timeout_sec <= 0:
            errors.append("HIGGS_TIMEOUT_SEC must be positive")
        if self.max_routines < 1:
            errors.append("HIGGS_MAX_ROUTINES must be at least 1")
        if self.retry_limit < 2:
            errors.append("HIGGS_RETRY_LIMIT must be at least 2")
        if self.startup_delay < 0:
            errors.append("HIGGS_STARTUP_DELAY cannot be negative")
        return errors


def get_config() -> HiggsConfig:
    """Load configuration from environment variables.

    Returns:
        HiggsConfig instance populated from environment.

    Raises:
        ConfigError: If a numeric variable cannot be parsed.
    """
    defaults = HiggsConfig()
    return HiggsConfig(
        mongo_uri=os.environ.get("HIGGS_MONGO_URI", defaults.mongo_uri),
        mongo_database=os.environ.get("HIGGS_MONGO_DATABASE", defaults.mongo_database),
        user_agent=os.environ.get("HIGGS_USER_AGENT", defaults.user_agent),
        timeout_sec=_env_number("HIGGS_TIMEOUT_SEC", defaults.timeout_sec),
        max_routines=_env_number("HIGGS_MAX_ROUTINES", defaults.max_routines),
        retry_limit=_env_number("HIGGS_RETRY_LIMIT", defaults.retry_limit),
        rate_limit_threshold=_env_number(
            "HIGGS_RATE_LIMIT_THRESHOLD", defaults.rate_limit_threshold
        ),
        esi_base_url=os.environ.get("HIGGS_ESI_BASE_URL", defaults.esi_base_url),
        datasource=os.environ.get("HIGGS_DATASOURCE", defaults.datasource),
        insecure_skip_verify=_env_bool("HIGGS_INSECURE_SKIP_VERIFY"),
        startup_delay=_env_number("HIGGS_STARTUP_DELAY", defaults.startup_delay, float),
        http_debug=_env_bool("HIGGS_HTTP_DEBUG"),
    )
