"""Core infrastructure for the static data loader."""

from .config import get_config, HiggsConfig
from .errors import (
    ConfigError,
    DecodeError,
    FetchError,
    HiggsError,
    ListDecodeError,
    RecordDecodeError,
    RetryLimitExceeded,
    StageFailedError,
    StoreError,
)

__all__ = [
    # Config
    "get_config",
    "HiggsConfig",
    # Errors
    "HiggsError",
    "ConfigError",
    "FetchError",
    "RetryLimitExceeded",
    "DecodeError",
    "ListDecodeError",
    "RecordDecodeError",
    "StoreError",
    "StageFailedError",
]
