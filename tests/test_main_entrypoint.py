"""
Tests for main.py - Command Line Entry Point

Tests for:
- Argument parsing and mutually exclusive options
- Library and playlist commands against an in-memory container
- The play command running until the queue ends
- Container lifecycle in run()
- Error handling in main()
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from conftest import make_track
from local_music_player.application.interfaces.media_library import MediaLibrary
from local_music_player.config.container import Container
from local_music_player.config.settings import Settings
from local_music_player.domain.music.value_objects import PlaybackPhase
from local_music_player.main import (
    COMMANDS,
    build_parser,
    cmd_add_to_playlist,
    cmd_create_playlist,
    cmd_favorite,
    cmd_play,
    cmd_playlists,
    cmd_recent,
    cmd_scan,
    cmd_search,
    format_track,
    main,
    run,
)


@pytest.fixture
def media_library(library_tracks):
    library = AsyncMock(spec=MediaLibrary)
    library.scan.return_value = list(library_tracks)
    library.search.return_value = library_tracks[3:5]
    return library


@pytest.fixture
def container(fake_engine, playlist_repository, media_library):
    """Container wired to in-memory persistence, a mocked library and the fake engine."""
    return Container(
        Settings(database={"url": ":memory:"}),
        _playlist_repository=playlist_repository,
        _media_library=media_library,
        _playback_engine=fake_engine,
    )


def parse(*argv: str):
    return build_parser().parse_args(list(argv))


# =============================================================================
# Argument Parsing
# =============================================================================


class TestParser:
    """Tests for the argparse definition."""

    def test_every_command_has_a_handler(self):
        parser = build_parser()
        subparsers = next(a for a in parser._actions if a.dest == "command")

        assert set(subparsers.choices) == set(COMMANDS)

    def test_command_required(self):
        with pytest.raises(SystemExit):
            parse()

    def test_play_defaults(self):
        args = parse("play")

        assert args.start == 0
        assert args.shuffle is False
        assert args.repeat is False
        assert args.artist is None

    def test_play_scope_is_exclusive(self):
        with pytest.raises(SystemExit):
            parse("play", "--artist", "Miles", "--genre", "Jazz")

    def test_shuffle_and_repeat_are_exclusive(self):
        """Should reject enabling both modes at once."""
        with pytest.raises(SystemExit):
            parse("play", "--shuffle", "--repeat")

    def test_song_id_must_be_integer(self):
        with pytest.raises(SystemExit):
            parse("favorite", "abc")

    def test_format_track(self):
        line = format_track(make_track(42, title="", artist="Someone", duration_ms=61_000))

        assert line.endswith("Unknown Title - Someone [01:01]")
        assert line.strip().startswith("42")


# =============================================================================
# Library and Playlist Commands
# =============================================================================


class TestLibraryCommands:
    """Tests for the non-playing commands."""

    @pytest.mark.asyncio
    async def test_scan(self, container, capsys):
        assert await cmd_scan(container, parse("scan")) == 0

        out = capsys.readouterr().out
        assert "So What - Miles" in out
        assert "(7 songs)" in out

    @pytest.mark.asyncio
    async def test_search(self, container, media_library, capsys):
        assert await cmd_search(container, parse("search", "radio")) == 0

        media_library.search.assert_awaited_once_with("radio")
        assert "(2 songs)" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_create_and_list_playlists(self, container, capsys):
        """Should create a playlist and list it next to Favorites."""
        assert await cmd_create_playlist(container, parse("create-playlist", "Focus")) == 0
        assert await cmd_playlists(container, parse("playlists")) == 0

        out = capsys.readouterr().out
        assert "[ok] Created playlist 'Focus'" in out
        assert "Focus (0 songs)" in out
        assert "Favorites (0 songs)" in out

    @pytest.mark.asyncio
    async def test_add_to_unknown_playlist_fails(self, container, capsys):
        assert await cmd_add_to_playlist(container, parse("add-to-playlist", "nope", "1")) == 1

        assert "[err]" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_add_to_playlist(self, container, playlist_repository):
        playlist = await playlist_repository.create_playlist("Mix")

        result = await cmd_add_to_playlist(container, parse("add-to-playlist", playlist.id, "4"))

        assert result == 0
        assert (await playlist_repository.get_playlist_by_id(playlist.id)).song_ids == (4,)

    @pytest.mark.asyncio
    async def test_favorite_toggles(self, container, playlist_repository, capsys):
        """Should add then remove the song from favorites."""
        assert await cmd_favorite(container, parse("favorite", "3")) == 0
        assert await playlist_repository.is_favorite(3) is True

        assert await cmd_favorite(container, parse("favorite", "3")) == 0
        assert await playlist_repository.is_favorite(3) is False

        out = capsys.readouterr().out
        assert "Added to favorites: 3" in out
        assert "Removed from favorites: 3" in out

    @pytest.mark.asyncio
    async def test_favorite_reports_failed_write(self, container, memory_store, capsys):
        """Should exit 1 when the favorites list cannot be saved."""
        with patch.object(memory_store, "save", AsyncMock(return_value=False)):
            result = await cmd_favorite(container, parse("favorite", "3"))

        assert result == 1
        assert "[err] Could not update favorites for song 3" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_recent(self, container, playlist_repository, capsys):
        await playlist_repository.add_to_recently_played(5)

        assert await cmd_recent(container, parse("recent")) == 0

        assert "Karma - Radiohead" in capsys.readouterr().out


# =============================================================================
# Play Command
# =============================================================================


class TestPlayCommand:
    """Tests for playing a scope until the queue ends."""

    @pytest.mark.asyncio
    async def test_plays_until_queue_ends(self, container, fake_engine, capsys):
        """Should load the artist's songs, play and return once playback stops."""
        task = asyncio.create_task(cmd_play(container, parse("play", "--artist", "Radiohead")))
        for _ in range(5):
            await asyncio.sleep(0)

        assert fake_engine.queue_ids == [4, 5]
        assert fake_engine.playing is True

        await fake_engine.emit_transition(None)
        await fake_engine.emit_phase(PlaybackPhase.STOPPED)
        result = await asyncio.wait_for(task, timeout=1)
        await container.playback_coordinator.close()

        assert result == 0
        assert "> Airbag - Radiohead" in capsys.readouterr().out

    @pytest.mark.asyncio
    async def test_engine_error_returns_failure(self, container, fake_engine):
        task = asyncio.create_task(cmd_play(container, parse("play")))
        for _ in range(5):
            await asyncio.sleep(0)

        await fake_engine.emit_phase(PlaybackPhase.ERROR)
        result = await asyncio.wait_for(task, timeout=1)
        await container.playback_coordinator.close()

        assert result == 1

    @pytest.mark.asyncio
    async def test_empty_scope(self, container, fake_engine, capsys):
        result = await cmd_play(container, parse("play", "--favorites"))

        assert result == 1
        assert "No songs to play" in capsys.readouterr().out
        assert fake_engine.calls == []

    @pytest.mark.asyncio
    async def test_start_out_of_range(self, container, fake_engine, capsys):
        result = await cmd_play(container, parse("play", "--artist", "Radiohead", "--start", "2"))

        assert result == 1
        assert "between 0 and 1" in capsys.readouterr().out
        assert fake_engine.calls == []


# =============================================================================
# run() and main()
# =============================================================================


class TestRunAndMain:
    """Tests for container lifecycle and top-level error handling."""

    @pytest.mark.asyncio
    async def test_run_initializes_and_shuts_down(self):
        """Should always shut the container down, even when the command fails."""
        fake_container = MagicMock()
        fake_container.initialize = AsyncMock()
        fake_container.shutdown = AsyncMock()
        failing = AsyncMock(side_effect=RuntimeError("boom"))

        with (
            patch(
                "local_music_player.config.container.create_container",
                return_value=fake_container,
            ),
            patch.dict(COMMANDS, {"scan": failing}),
        ):
            with pytest.raises(RuntimeError):
                await run(MagicMock(), parse("scan"))

        fake_container.initialize.assert_awaited_once()
        fake_container.shutdown.assert_awaited_once()

    def test_main_returns_command_result(self):
        with (
            patch("local_music_player.main.setup_logging") as setup,
            patch("local_music_player.main.run", AsyncMock(return_value=3)) as run_mock,
        ):
            assert main(["scan"]) == 3

        setup.assert_called_once()
        assert run_mock.await_args.args[1].command == "scan"

    def test_main_returns_one_on_error(self):
        with (
            patch("local_music_player.main.setup_logging"),
            patch("local_music_player.main.run", AsyncMock(side_effect=RuntimeError("boom"))),
        ):
            assert main(["scan"]) == 1

    def test_main_handles_keyboard_interrupt(self):
        """Should exit cleanly on Ctrl+C."""
        with (
            patch("local_music_player.main.setup_logging"),
            patch("local_music_player.main.run", MagicMock()),
            patch("local_music_player.main.asyncio.run", side_effect=KeyboardInterrupt),
        ):
            assert main(["scan"]) == 0
