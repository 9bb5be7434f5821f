#!/usr/bin/env python3
"""Main entry point for the local music player."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING

from local_music_player.domain.music.value_objects import BrowseCategory, PlaybackPhase
from local_music_player.domain.shared.messages import LogTemplates
from local_music_player.utils.logging import setup_logging

if TYPE_CHECKING:
    from local_music_player.config.container import Container
    from local_music_player.config.settings import Settings
    from local_music_player.domain.music.entities import PlayerState, Track

logger = logging.getLogger(__name__)

CommandHandler = Callable[["Container", argparse.Namespace], Awaitable[int]]


def format_track(track: Track) -> str:
    return (
        f"{track.id:>18}  {track.display_title} - {track.display_artist} "
        f"[{track.duration_formatted}]"
    )


def _print_tracks(tracks: list[Track]) -> None:
    for track in tracks:
        print(format_track(track))
    print(f"({len(tracks)} song{'' if len(tracks) == 1 else 's'})")


# ---- Commands ----


async def cmd_scan(container: Container, args: argparse.Namespace) -> int:
    songs = await container.library_service.refresh()
    _print_tracks(songs)
    return 0


async def cmd_search(container: Container, args: argparse.Namespace) -> int:
    await container.library_service.refresh()
    _print_tracks(await container.library_service.search(args.query))
    return 0


async def cmd_playlists(container: Container, args: argparse.Namespace) -> int:
    for playlist in await container.playlist_repository.get_all_playlists():
        print(f"{playlist.id}  {playlist.name} ({playlist.song_count} songs)")
    return 0


async def cmd_create_playlist(container: Container, args: argparse.Namespace) -> int:
    playlist = await container.playlist_repository.create_playlist(
        args.name, args.description
    )
    print(f"[ok] Created playlist '{playlist.name}' ({playlist.id})")
    return 0


async def cmd_add_to_playlist(container: Container, args: argparse.Namespace) -> int:
    if await container.playlist_repository.add_song_to_playlist(args.playlist_id, args.song_id):
        print(f"[ok] Added song {args.song_id} to {args.playlist_id}")
        return 0
    print(f"[err] Could not add song {args.song_id} to {args.playlist_id}")
    return 1


async def cmd_favorite(container: Container, args: argparse.Namespace) -> int:
    repository = container.playlist_repository
    was_favorite = await repository.is_favorite(args.song_id)
    if await repository.toggle_favorite(args.song_id) == was_favorite:
        print(f"[err] Could not update favorites for song {args.song_id}")
        return 1
    action = "Removed from" if was_favorite else "Added to"
    print(f"[ok] {action} favorites: {args.song_id}")
    return 0


async def cmd_recent(container: Container, args: argparse.Namespace) -> int:
    await container.library_service.refresh()
    _print_tracks(await container.library_service.recently_played_songs())
    return 0


def _play_scope(args: argparse.Namespace) -> tuple[BrowseCategory, str | None]:
    if args.artist:
        return BrowseCategory.ARTISTS, args.artist
    if args.album:
        return BrowseCategory.ALBUMS, args.album
    if args.genre:
        return BrowseCategory.GENRES, args.genre
    if args.playlist:
        return BrowseCategory.PLAYLISTS, args.playlist
    if args.favorites:
        return BrowseCategory.FAVORITES, None
    return BrowseCategory.ALL_SONGS, None


async def cmd_play(container: Container, args: argparse.Namespace) -> int:
    library = container.library_service
    await library.refresh()

    category, item_id = _play_scope(args)
    context = await library.build_context(category, item_id)
    if not context.all_songs:
        print("[err] No songs to play")
        return 1
    if not 0 <= args.start < len(context.all_songs):
        print(f"[err] Start index must be between 0 and {len(context.all_songs) - 1}")
        return 1

    coordinator = container.playback_coordinator
    finished = asyncio.Event()
    last_track_id: int | None = None

    def on_state(state: PlayerState) -> None:
        nonlocal last_track_id
        track = state.current_track
        if track is not None and track.id != last_track_id:
            last_track_id = track.id
            print(f"> {track.display_title} - {track.display_artist} [{track.duration_formatted}]")
        ended = state.phase in (PlaybackPhase.STOPPED, PlaybackPhase.ERROR)
        if ended and last_track_id is not None:
            finished.set()

    unsubscribe = coordinator.subscribe(on_state)
    try:
        if args.shuffle:
            await coordinator.set_shuffle_enabled(True)
        if args.repeat:
            await coordinator.set_repeat_enabled(True)

        coordinator.start()
        await coordinator.start_playlist(context.all_songs, args.start, context)
        await finished.wait()
    finally:
        unsubscribe()

    return 1 if coordinator.state.phase == PlaybackPhase.ERROR else 0


COMMANDS: dict[str, CommandHandler] = {
    "scan": cmd_scan,
    "search": cmd_search,
    "playlists": cmd_playlists,
    "create-playlist": cmd_create_playlist,
    "add-to-playlist": cmd_add_to_playlist,
    "favorite": cmd_favorite,
    "recent": cmd_recent,
    "play": cmd_play,
}


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="local-music-player",
        description="Browse and play a local music collection.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s scan                          # Index the music directory
  %(prog)s search "blue"                 # Search titles, artists and albums
  %(prog)s play --artist "Miles Davis"   # Play an artist
  %(prog)s play --album "Artist|Album" --shuffle
  %(prog)s favorite 123456789            # Toggle a favorite
        """,
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("scan", help="scan the music directory and list songs")

    search = subparsers.add_parser("search", help="search songs")
    search.add_argument("query")

    subparsers.add_parser("playlists", help="list playlists")

    create = subparsers.add_parser("create-playlist", help="create a playlist")
    create.add_argument("name")
    create.add_argument("--description", "-d", default="")

    add = subparsers.add_parser("add-to-playlist", help="add a song to a playlist")
    add.add_argument("playlist_id")
    add.add_argument("song_id", type=int)

    favorite = subparsers.add_parser("favorite", help="toggle a song in favorites")
    favorite.add_argument("song_id", type=int)

    subparsers.add_parser("recent", help="list recently played songs")

    play = subparsers.add_parser("play", help="play songs until the queue ends")
    scope = play.add_mutually_exclusive_group()
    scope.add_argument("--artist")
    scope.add_argument("--album", help="album key 'artist|album' or an album name")
    scope.add_argument("--genre")
    scope.add_argument("--playlist", help="playlist id")
    scope.add_argument("--favorites", action="store_true")
    mode = play.add_mutually_exclusive_group()
    mode.add_argument("--shuffle", action="store_true")
    mode.add_argument("--repeat", action="store_true", help="repeat the current song")
    play.add_argument("--start", type=int, default=0, help="index of the first song")

    return parser


async def run(settings: Settings, args: argparse.Namespace) -> int:
    from local_music_player.config.container import create_container

    container = create_container(settings)
    await container.initialize()
    try:
        return await COMMANDS[args.command](container, args)
    finally:
        await container.shutdown()


def main(argv: list[str] | None = None) -> int:
    from local_music_player.config.settings import get_settings

    args = build_parser().parse_args(argv)
    settings = get_settings()
    setup_logging(settings.log_level)

    logger.info(LogTemplates.APP_STARTING.format(environment=settings.environment))

    try:
        return asyncio.run(run(settings, args))
    except KeyboardInterrupt:
        logger.info(LogTemplates.APP_INTERRUPTED)
        return 0
    except Exception as e:
        logger.exception(LogTemplates.APP_FATAL_ERROR, e)
        return 1


def cli() -> None:
    """Console script entry point (used by pyproject.toml [project.scripts])."""
    sys.exit(main())


if __name__ == "__main__":
    cli()  # pragma: no cover
