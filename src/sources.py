"""
Candidate nameserver source.

Fetches the per-country public nameserver listing from public-dns.info.
"""

import logging
from typing import Optional

import httpx

from .errors import SourceUnavailable


logger = logging.getLogger(__name__)

LISTING_URL = "https://public-dns.info/nameserver/{code}.txt"

DEFAULT_TIMEOUT = httpx.Timeout(30.0, connect=10.0)


def listing_url(country_code: str) -> str:
    """Listing URL for a country code (case-insensitive)."""
    return LISTING_URL.format(code=country_code.strip().lower())


def parse_listing(raw: str, max_count: int) -> list[str]:
    """
    Split a newline-delimited listing into candidate addresses.

    Blank lines are dropped. When more than max_count addresses remain,
    only the first max_count - 1 are kept.
    """
    addresses = [line.strip() for line in raw.splitlines() if line.strip()]

    if len(addresses) > max_count:
        new_max = max_count - 1
        logger.debug("Slicing from %d to %d", len(addresses), new_max)
        return addresses[:new_max]

    return addresses


async def fetch_candidates(
    country_code: str,
    max_count: int,
    client: Optional[httpx.AsyncClient] = None,
) -> list[str]:
    """
    Fetch candidate nameservers for a country.

    Args:
        country_code: ISO country code, e.g. "US" or "de"
        max_count: Upper bound on the number of candidates
        client: HTTP client to use (default: a short-lived one)

    Returns:
        Candidate addresses in listing order

    Raises:
        SourceUnavailable: if the listing cannot be fetched or is empty
    """
    url = listing_url(country_code)
    logger.debug("Fetching nameservers from %s", url)

    owns_client = client is None
    if owns_client:
        client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, follow_redirects=True)

    try:
        response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        raise SourceUnavailable(url, f"HTTP {e.response.status_code}") from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        raise SourceUnavailable(url, str(e) or type(e).__name__) from e
    finally:
        if owns_client:
            await client.aclose()

    addresses = parse_listing(response.text, max_count)
    if not addresses:
        raise SourceUnavailable(url, "empty response")

    logger.debug("Done! %d nameservers found", len(addresses))
    return addresses
