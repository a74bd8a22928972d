from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from typing import Protocol

import httpx

from score_checker.models import CommandResult, SearchSummary

logger = logging.getLogger(__name__)

SEARCH_CHUNK_SIZE = 10


class SearchTrigger(Protocol):
    async def trigger_search(self, ids: Sequence[int]) -> CommandResult: ...


def chunked(ids: Sequence[int], size: int) -> Iterator[list[int]]:
    """Yield consecutive slices of ``ids`` holding at most ``size`` items."""
    if size <= 0:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(ids), size):
        yield list(ids[start : start + size])


async def trigger_searches(
    client: SearchTrigger,
    ids: Sequence[int],
    *,
    instance_name: str,
    enabled: bool = True,
    chunk_size: int = SEARCH_CHUNK_SIZE,
) -> SearchSummary:
    """Submit search commands for ``ids`` in sub-batches, one request at a time.

    A failed sub-batch is logged and recorded; the remaining sub-batches are
    still submitted. Completion of the searches themselves is not awaited.
    """
    summary = SearchSummary()
    if not enabled or not ids:
        return summary

    logger.info(f"[{instance_name}] Triggering search for {len(ids)} item(s) with low scores...")
    for batch in chunked(ids, chunk_size):
        try:
            result = await client.trigger_search(batch)
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                f"[{instance_name}] Failed to trigger search for items {batch}: {exc}"
            )
            summary.failed.append(batch)
            continue

        logger.info(
            f"[{instance_name}] Search triggered for batch: {batch} "
            f"(Command ID: {result.id}, Status: {result.status})"
        )
        summary.submitted.append(result)

    return summary


__all__ = ["SEARCH_CHUNK_SIZE", "SearchTrigger", "chunked", "trigger_searches"]
