"""TrackRadar: search a music catalog and chart a track's audio features."""

__version__ = "0.1.0"
