from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

import httpx

from litterwarden.core.config import settings

USER_AGENT = 'LitterWarden/1.0 (report-enrichment)'


@contextmanager
def enrichment_client(client: httpx.Client | None = None) -> Iterator[httpx.Client]:
    """Yield the caller's client untouched, or a short-lived one bounded by the enrichment timeout."""
    if client is not None:
        yield client
        return
    with httpx.Client(
        timeout=settings.ENRICHMENT_TIMEOUT_SECONDS,
        headers={'User-Agent': USER_AGENT},
    ) as owned:
        yield owned
