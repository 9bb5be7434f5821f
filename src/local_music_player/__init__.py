"""Local music player core: playback coordination, library browsing and playlists."""

__version__ = "0.1.0"
