"""Report and re-search Sonarr/Radarr items with negative custom format scores."""

__version__ = "0.1.0"

__all__ = ["__version__"]
