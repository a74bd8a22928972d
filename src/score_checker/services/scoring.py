"""Custom format score predicate and the per-instance batch accumulator."""

from __future__ import annotations

from enum import Enum

from score_checker.models import Episode, FileMetadata, LowScoreMatch, Movie, ScanResult, Series


class CollectDecision(str, Enum):
    CONTINUE = "continue"
    STOP = "stop"


def is_low_score(has_file: bool, file: FileMetadata | None) -> bool:
    """Return True when a downloaded file carries a negative custom format score."""
    return bool(has_file) and file is not None and file.custom_format_score < 0


def match_for(item: Episode | Movie, parent: Series | None = None) -> LowScoreMatch | None:
    """Build a match for ``item`` if its file is low scoring, otherwise ``None``."""
    file = item.file
    if file is None or not is_low_score(item.has_file, file):
        return None
    return LowScoreMatch(parent=parent, item=item, score=file.custom_format_score)


class BatchCollector:
    """Accumulates matches in discovery order until the batch size is reached.

    A batch size of zero means unlimited. Item IDs are queued for searching
    only when ``collect_ids`` is set.
    """

    def __init__(self, batch_size: int, *, collect_ids: bool) -> None:
        if batch_size < 0:
            raise ValueError("batch_size must be zero or positive")
        self._batch_size = batch_size
        self._collect_ids = collect_ids
        self._matches: list[LowScoreMatch] = []
        self._search_ids: list[int] = []

    @property
    def count(self) -> int:
        return len(self._matches)

    @property
    def full(self) -> bool:
        return self._batch_size > 0 and self.count >= self._batch_size

    def try_add(self, match: LowScoreMatch) -> CollectDecision:
        if self.full:
            return CollectDecision.STOP
        self._matches.append(match)
        if self._collect_ids:
            self._search_ids.append(match.item_id)
        return CollectDecision.STOP if self.full else CollectDecision.CONTINUE

    def result(self) -> ScanResult:
        return ScanResult(
            matches=list(self._matches),
            search_ids=list(self._search_ids),
            limit_reached=self.full,
        )


__all__ = ["BatchCollector", "CollectDecision", "is_low_score", "match_for"]
