from .base import ArrClient, EpisodeCatalog, MovieCatalog
from .radarr import RadarrClient
from .sonarr import SonarrClient

__all__ = ["ArrClient", "EpisodeCatalog", "MovieCatalog", "RadarrClient", "SonarrClient"]
