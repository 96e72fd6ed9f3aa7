"""Identifier list fetching for ESI list endpoints."""

import logging

from pydantic import TypeAdapter, ValidationError

from ..core.errors import ListDecodeError
from .esi_client import ESIClient

logger = logging.getLogger(__name__)

EMPTY_PAGE = b"[]"

_id_list = TypeAdapter(list[int])


def decode_id_list(url: str, body: bytes) -> list[int]:
    """Decode a JSON array of integer identifiers.

    Raises:
        ListDecodeError: If the body is not a list of integers.
    """
    try:
        return _id_list.validate_json(body)
    except ValidationError as e:
        raise ListDecodeError(url, body, f"Failed to decode id list from {url}: {e}") from e


async def fetch_id_list(client: ESIClient, path: str) -> list[int]:
    """Fetch a non-paginated identifier list endpoint.

    Args:
        client: ESI client.
        path: API path of the list endpoint.

    Returns:
        Identifiers in the order ESI returned them.
    """
    url = client.esi_url(path)
    body = await client.get_esi(url)
    return decode_id_list(url, body)


async def fetch_paginated_ids(client: ESIClient, path: str) -> list[int]:
    """Fetch every page of a paginated identifier list endpoint.

    Starts at page 1 and stops at the first page whose body is the literal
    empty array. Pages are concatenated in page order.

    Args:
        client: ESI client.
        path: API path of the list endpoint.

    Returns:
        Identifiers from all pages.

    Raises:
        RetryLimitExceeded: If any page cannot be fetched.
        ListDecodeError: If any page cannot be decoded.
    """
    ids: list[int] = []
    page = 1

    while True:
        url = client.esi_url(path, page=page)
        body = await client.get_esi(url)
        if body.strip() == EMPTY_PAGE:
            break

        ids.extend(decode_id_list(url, body))
        logger.debug(f"Fetched page {page} of {path} ({len(ids)} ids so far)")
        page += 1

    return ids
