"""Centralized message constants for error messages, validation, and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Player State Errors
    SHUFFLE_AND_REPEAT_EXCLUSIVE = "Shuffle and repeat-one cannot both be enabled"

    # Time/Date Validation Errors
    TIMEZONE_REQUIRED_UTC_DATETIME = "UtcDateTime requires a timezone-aware datetime"

    # Settings Validation Errors
    INVALID_DATABASE_URL = "Database URL must start with sqlite://"
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"
    INVALID_EXTENSION = "File extensions must start with '.': {extension}"

    # Coordinator Errors
    COORDINATOR_CLOSED = "Playback coordinator has been closed"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Database Lifecycle
    DATABASE_INITIALIZED = "Database initialized at %s"
    DATABASE_CLOSED = "Database manager closed"

    # Key-value Store
    STORE_DOCUMENT_MALFORMED = "Stored document for key '%s' is not valid JSON, using default"
    STORE_READ_FAILED = "Failed to read document for key '%s'"
    STORE_WRITE_FAILED = "Failed to write document for key '%s'"
    STORE_DOCUMENT_SAVED = "Saved document for key '%s' (%d bytes)"

    # Playlist Repository
    PLAYLISTS_UNREADABLE = "Saved playlists document is unreadable, returning favorites only"
    PLAYLIST_ENTRY_SKIPPED = "Skipping malformed playlist entry: %r"
    PLAYLIST_SAVED = "Saved playlist '%s' (%s)"
    PLAYLIST_DELETED = "Deleted playlist %s"
    PLAYLIST_NOT_FOUND = "Playlist %s not found"
    PLAYLIST_FAVORITES_DELETE_REJECTED = "Refusing to delete the favorites playlist"
    SONG_IDS_UNREADABLE = "Song id list under key '%s' is unreadable, using empty list"
    SONG_ID_REJECTED = "Rejecting song id %r outside the media index range"
    RECENTLY_PLAYED_RECORDED = "Recorded song %s as recently played"

    # Library
    LIBRARY_SCAN_STARTED = "Scanning music directory %s"
    LIBRARY_SCAN_COMPLETED = "Library scan found %d tracks"
    LIBRARY_DIR_MISSING = "Music directory %s does not exist, library is empty"
    LIBRARY_TAGS_UNREADABLE = "Could not read tags from %s: %s"
    LIBRARY_FILE_SKIPPED = "Skipping unreadable file %s: %s"
    LIBRARY_REFRESHED = "Library refreshed: %d songs, %d playlists"

    # Coordinator
    COORDINATOR_INVALID_START = "Ignoring start_playlist with %d tracks and start index %s"
    COORDINATOR_PLAYLIST_STARTED = "Started playlist context %s at '%s' (shuffle=%s)"
    COORDINATOR_QUEUE_REBUILT = "Rebuilt engine queue (%d tracks) at index %d, position %d ms"
    COORDINATOR_SHUFFLE_FORWARDED = "No active context, forwarding shuffle=%s to engine"
    COORDINATOR_SHUFFLE_CHANGED = "Shuffle set to %s"
    COORDINATOR_REPEAT_CHANGED = "Repeat-one set to %s"
    COORDINATOR_TRACK_NOT_IN_QUEUE = "Current track %s not found in rebuilt order, queue left unchanged"
    COORDINATOR_TRANSITION_UNRESOLVED = "Dropping track transition for unknown id %s"
    COORDINATOR_TRANSITION = "Now playing '%s' at queue index %d"
    COORDINATOR_LISTENER_ERROR = "Error in player state listener"
    COORDINATOR_POLL_STARTED = "Position polling started (every %.2fs)"
    COORDINATOR_POLL_STOPPED = "Position polling stopped"
    COORDINATOR_HISTORY_WRITE_FAILED = "Failed to record recently played song %s"
    COORDINATOR_CLOSED = "Playback coordinator closed"

    # Engine
    ENGINE_QUEUE_LOADED = "Engine queue loaded: %d tracks, index %d, position %d ms"
    ENGINE_SPAWNED = "Spawned ffplay for '%s' (pid %s)"
    ENGINE_SPAWN_FAILED = "Failed to start ffplay for '%s'"
    ENGINE_PROCESS_EXITED = "ffplay exited with code %s"
    ENGINE_QUEUE_FINISHED = "Reached end of queue"
    ENGINE_LISTENER_ERROR = "Error in engine listener callback"
    ENGINE_RELEASED = "Playback engine released"

    # Event Bus
    EVENT_HANDLER_ERROR = "%s handler %s raised"
    EVENT_DISPATCHED = "Dispatching %s to %d handler(s)"

    # Application Lifecycle
    APP_STARTING = "Starting local music player (environment={environment})"
    APP_FATAL_ERROR = "Fatal error: %s"
    APP_INTERRUPTED = "Interrupted, shutting down"
    LOGGING_CONFIG_FALLBACK = "Could not load %s, falling back to basic config"
