from __future__ import annotations

from pydantic import BaseModel, Field

_API_MODEL_CONFIG = {
    "populate_by_name": True,
    "extra": "ignore",
}


class FileMetadata(BaseModel):
    """File record attached to an episode or movie that has been downloaded."""

    id: int
    custom_format_score: int = Field(default=0, alias="customFormatScore")

    model_config = _API_MODEL_CONFIG


class Series(BaseModel):
    """Sonarr series, trimmed to the fields needed for scanning."""

    id: int
    title: str = ""

    model_config = _API_MODEL_CONFIG


class Episode(BaseModel):
    """Sonarr episode as returned with ``includeEpisodeFile=true``."""

    id: int
    series_id: int = Field(default=0, alias="seriesId")
    title: str = ""
    season_number: int = Field(default=0, alias="seasonNumber")
    episode_number: int = Field(default=0, alias="episodeNumber")
    has_file: bool = Field(default=False, alias="hasFile")
    episode_file: FileMetadata | None = Field(default=None, alias="episodeFile")

    model_config = _API_MODEL_CONFIG

    @property
    def file(self) -> FileMetadata | None:
        return self.episode_file

    @property
    def label(self) -> str:
        return f"S{self.season_number:02d}E{self.episode_number:02d} - {self.title}"


class Movie(BaseModel):
    """Radarr movie with its file record inline."""

    id: int
    title: str = ""
    year: int = 0
    has_file: bool = Field(default=False, alias="hasFile")
    movie_file: FileMetadata | None = Field(default=None, alias="movieFile")

    model_config = _API_MODEL_CONFIG

    @property
    def file(self) -> FileMetadata | None:
        return self.movie_file

    @property
    def label(self) -> str:
        return f"{self.title} ({self.year})"


class CommandResult(BaseModel):
    """Acknowledgement returned by ``POST /api/v3/command``."""

    id: int
    name: str = ""
    command_name: str = Field(default="", alias="commandName")
    status: str = ""

    model_config = _API_MODEL_CONFIG


class LowScoreMatch(BaseModel):
    """An episode or movie whose file carries a negative custom format score."""

    parent: Series | None = None
    item: Episode | Movie
    score: int = Field(lt=0)

    @property
    def item_id(self) -> int:
        return self.item.id


class ScanResult(BaseModel):
    """Matches collected from one instance during one pass."""

    matches: list[LowScoreMatch] = Field(default_factory=list)
    search_ids: list[int] = Field(default_factory=list)
    limit_reached: bool = False


class SearchSummary(BaseModel):
    """Outcome of submitting search commands in sub-batches."""

    submitted: list[CommandResult] = Field(default_factory=list)
    failed: list[list[int]] = Field(default_factory=list)

    @property
    def attempted(self) -> int:
        return len(self.submitted) + len(self.failed)


class InstanceReport(BaseModel):
    """Result of checking a single configured instance."""

    service: str
    instance: str
    matches: list[LowScoreMatch] = Field(default_factory=list)
    search: SearchSummary = Field(default_factory=SearchSummary)
    error: str | None = None

    @property
    def skipped(self) -> bool:
        return self.error is not None


class RunSummary(BaseModel):
    """Outcome of one full pass across every configured instance."""

    trigger_search: bool
    batch_size: int
    reports: list[InstanceReport] = Field(default_factory=list)
    no_instances: bool = False

    @property
    def total_matches(self) -> int:
        return sum(len(report.matches) for report in self.reports)


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
