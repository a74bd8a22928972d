from .media import (
    CommandResult,
    Episode,
    FileMetadata,
    InstanceReport,
    LowScoreMatch,
    Movie,
    RunSummary,
    ScanResult,
    SearchSummary,
    Series,
)

__all__ = [
    "CommandResult",
    "Episode",
    "FileMetadata",
    "InstanceReport",
    "LowScoreMatch",
    "Movie",
    "RunSummary",
    "ScanResult",
    "SearchSummary",
    "Series",
]
