"""API clients for ESI."""

from .esi_client import ESIClient, FetchAttempt, FetchResult, is_fd_exhaustion
from .pagination import decode_id_list, fetch_id_list, fetch_paginated_ids
from .rate_limiter import RateLimiter

__all__ = [
    "ESIClient",
    "FetchAttempt",
    "FetchResult",
    "is_fd_exhaustion",
    "decode_id_list",
    "fetch_id_list",
    "fetch_paginated_ids",
    "RateLimiter",
]
