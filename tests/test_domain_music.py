"""
Unit Tests for the Music Domain

Tests for:
- Track validation and display fallbacks
- Playlist song-list operations (idempotence, move, modification time)
- PlaylistContext construction
- PlayerState mode exclusivity and progress
- Value objects (PlaybackPhase, BrowseCategory)
"""

from datetime import UTC, datetime, timedelta

import pytest
from pydantic import ValidationError

from conftest import make_track
from local_music_player.domain.music.entities import (
    ArtistGroup,
    CategoryItem,
    PlayerState,
    Playlist,
    PlaylistContext,
)
from local_music_player.domain.music.value_objects import BrowseCategory, PlaybackPhase
from local_music_player.domain.shared.constants import PlaylistConstants

# =============================================================================
# Track Tests
# =============================================================================


class TestTrack:
    """Unit tests for the Track value object."""

    def test_display_fallbacks_for_blank_fields(self):
        """Should substitute placeholders for blank title, artist, album and genre."""
        track = make_track(1, title=" ", artist="", album="", genre="")

        assert track.display_title == "Unknown Title"
        assert track.display_artist == "Unknown Artist"
        assert track.display_album == "Unknown Album"
        assert track.display_genre == "Unknown Genre"

    def test_display_uses_real_values(self, sample_track):
        """Should return the tag values when present."""
        assert sample_track.display_title == "Test Track"
        assert sample_track.display_artist == "Test Artist"

    def test_duration_formatted(self):
        """Should format the duration as MM:SS."""
        assert make_track(1, duration_ms=245_000).duration_formatted == "04:05"

    def test_negative_id_rejected(self):
        """Should reject ids outside the signed 64-bit range."""
        with pytest.raises(ValidationError):
            make_track(-1)
        with pytest.raises(ValidationError):
            make_track(2**63)

    def test_uri_required(self):
        """Should reject an empty uri."""
        with pytest.raises(ValidationError):
            make_track(1, uri="")

    def test_is_frozen(self, sample_track):
        """Should not allow mutation."""
        with pytest.raises(ValidationError):
            sample_track.title = "Changed"


# =============================================================================
# Playlist Tests
# =============================================================================


class TestPlaylist:
    """Unit tests for Playlist song-list operations."""

    @pytest.fixture
    def old_playlist(self):
        stamp = datetime(2024, 1, 1, tzinfo=UTC)
        return Playlist(
            name="Road Trip",
            song_ids=(1, 2, 3),
            date_created=stamp,
            date_modified=stamp,
        )

    def test_defaults(self):
        """Should generate an id and timestamps."""
        playlist = Playlist(name="New")

        assert playlist.id
        assert playlist.song_ids == ()
        assert playlist.date_created.tzinfo is not None
        assert playlist.is_favorites is False

    def test_duplicate_song_ids_are_collapsed(self):
        """Should keep the first occurrence of each song id."""
        playlist = Playlist(name="Dupes", song_ids=(3, 1, 3, 2, 1))

        assert playlist.song_ids == (3, 1, 2)

    def test_add_song_appends_and_bumps_modified(self, old_playlist):
        """Should append a new id and advance date_modified."""
        updated = old_playlist.add_song(4)

        assert updated.song_ids == (1, 2, 3, 4)
        assert updated.date_modified > old_playlist.date_modified
        assert updated.date_created == old_playlist.date_created

    @pytest.mark.parametrize("song_id", [-1, 2**63])
    def test_add_song_validates_id(self, old_playlist, song_id):
        """Should reject ids outside the media index range instead of storing them."""
        with pytest.raises(ValidationError):
            old_playlist.add_song(song_id)

    def test_add_existing_song_is_noop(self, old_playlist):
        """Should return the same playlist when the id is already present."""
        assert old_playlist.add_song(2) is old_playlist

    def test_remove_song(self, old_playlist):
        """Should remove the id and advance date_modified."""
        updated = old_playlist.remove_song(2)

        assert updated.song_ids == (1, 3)
        assert updated.date_modified > old_playlist.date_modified

    def test_remove_absent_song_is_noop(self, old_playlist):
        """Should return the same playlist when the id is absent."""
        assert old_playlist.remove_song(99) is old_playlist

    def test_move_song_forward(self, old_playlist):
        """Should move index 0 to index 2: [1,2,3] -> [2,3,1]."""
        assert old_playlist.move_song(0, 2).song_ids == (2, 3, 1)

    def test_move_song_backward(self, old_playlist):
        """Should move index 2 to index 0: [1,2,3] -> [3,1,2]."""
        assert old_playlist.move_song(2, 0).song_ids == (3, 1, 2)

    @pytest.mark.parametrize("from_index,to_index", [(-1, 0), (0, 3), (5, 1), (1, 1)])
    def test_move_song_invalid_or_same_index_is_noop(self, old_playlist, from_index, to_index):
        """Should return the playlist unchanged for out-of-range or equal indices."""
        assert old_playlist.move_song(from_index, to_index) is old_playlist

    def test_favorites_factory(self):
        """Should build the reserved Favorites playlist."""
        favorites = Playlist.favorites([5, 6])

        assert favorites.id == PlaylistConstants.FAVORITES_PLAYLIST_ID
        assert favorites.name == "Favorites"
        assert favorites.is_favorites is True
        assert favorites.song_ids == (5, 6)

    def test_formatted_duration_sums_member_tracks(self):
        """Should add up durations of member tracks only."""
        tracks = [make_track(1, duration_ms=1_800_000), make_track(2, duration_ms=1_860_000)]
        playlist = Playlist(name="Long", song_ids=(1, 2))

        assert playlist.formatted_duration([*tracks, make_track(3)]) == "1:01:00"

    def test_naive_datetime_rejected(self):
        """Should reject timezone-naive timestamps."""
        with pytest.raises(ValidationError):
            Playlist(name="Naive", date_created=datetime(2024, 1, 1))

    def test_timestamps_normalised_to_utc(self):
        """Should convert offset-aware timestamps to UTC."""
        from datetime import timezone

        stamp = datetime(2024, 1, 1, 12, tzinfo=timezone(timedelta(hours=2)))
        playlist = Playlist(name="Offset", date_created=stamp, date_modified=stamp)

        assert playlist.date_created.utcoffset() == timedelta(0)
        assert playlist.date_created.hour == 10


# =============================================================================
# PlaylistContext Tests
# =============================================================================


class TestPlaylistContext:
    """Unit tests for PlaylistContext."""

    def test_of_sets_original_order(self, sample_tracks):
        """Should capture all songs and the original order as tuples."""
        context = PlaylistContext.of(BrowseCategory.GENRES, sample_tracks, item_id="Rock")

        assert context.all_songs == tuple(sample_tracks)
        assert context.original_order == tuple(sample_tracks)
        assert context.item_id == "Rock"

    def test_original_order_unaffected_by_source_list(self, sample_tracks):
        """Should not change when the source list is mutated afterwards."""
        context = PlaylistContext.all_songs_of(sample_tracks)
        sample_tracks.reverse()

        assert context.original_order[0].id == 1

    def test_all_songs_of(self, sample_tracks):
        """Should build the default all-songs context."""
        context = PlaylistContext.all_songs_of(sample_tracks)

        assert context.category == BrowseCategory.ALL_SONGS
        assert context.item_name == "All Songs"


# =============================================================================
# PlayerState Tests
# =============================================================================


class TestPlayerState:
    """Unit tests for the published PlayerState snapshot."""

    def test_defaults(self):
        """Should start stopped with no track and both modes off."""
        state = PlayerState()

        assert state.phase == PlaybackPhase.STOPPED
        assert state.current_track is None
        assert state.shuffle_enabled is False
        assert state.repeat_enabled is False

    def test_shuffle_and_repeat_are_exclusive(self):
        """Should reject a state with both modes on."""
        with pytest.raises(ValidationError, match="cannot both be enabled"):
            PlayerState(shuffle_enabled=True, repeat_enabled=True)

    def test_evolve_validates(self):
        """Should validate the evolved copy."""
        state = PlayerState(shuffle_enabled=True)

        with pytest.raises(ValidationError):
            state.evolve(repeat_enabled=True)

    def test_evolve_returns_new_state(self, sample_track):
        """Should leave the original untouched."""
        state = PlayerState()
        evolved = state.evolve(current_track=sample_track, phase=PlaybackPhase.PLAYING)

        assert state.current_track is None
        assert evolved.current_track == sample_track
        assert evolved.is_playing is True

    @pytest.mark.parametrize(
        "position,duration,expected",
        [(0, 0, 0.0), (50, 100, 0.5), (150, 100, 1.0), (10, 0, 0.0)],
    )
    def test_progress(self, position, duration, expected):
        """Should compute a clamped progress ratio."""
        state = PlayerState(position_ms=position, duration_ms=duration)

        assert state.progress == expected

    def test_formatted_position_and_duration(self):
        """Should format position and duration."""
        state = PlayerState(position_ms=65_000, duration_ms=600_000)

        assert state.formatted_position == "01:05"
        assert state.formatted_duration == "10:00"


# =============================================================================
# Category Items and Value Objects
# =============================================================================


class TestCategoryItems:
    """Unit tests for CategoryItem and ArtistGroup texts."""

    def test_song_count_text(self):
        """Should pluralise song counts."""
        one = CategoryItem(id="a", name="a", song_count=1, category=BrowseCategory.ARTISTS)
        many = CategoryItem(id="b", name="b", song_count=3, category=BrowseCategory.ARTISTS)

        assert one.song_count_text == "1 song"
        assert many.song_count_text == "3 songs"

    def test_album_count_text(self):
        """Should describe albums and songs."""
        album = CategoryItem(id="x|y", name="y", song_count=2, category=BrowseCategory.ALBUMS)
        group = ArtistGroup(artist_name="x", albums=(album,), total_songs=2)

        assert group.album_count_text == "1 album, 2 songs"


class TestValueObjects:
    """Unit tests for PlaybackPhase and BrowseCategory."""

    def test_phase_flags(self):
        """Should report active and playing phases."""
        assert PlaybackPhase.PLAYING.is_playing is True
        assert PlaybackPhase.PAUSED.is_playing is False
        assert PlaybackPhase.PAUSED.is_active is True
        assert PlaybackPhase.ERROR.is_active is False

    def test_every_category_has_display_name(self):
        """Should provide a display name for each category."""
        for category in BrowseCategory:
            assert category.display_name
