"""Domain services for queue ordering and library grouping rules."""

from __future__ import annotations

import random
from collections import defaultdict
from collections.abc import Iterable, Sequence

from local_music_player.domain.music.entities import ArtistGroup, CategoryItem, Track
from local_music_player.domain.music.value_objects import BrowseCategory
from local_music_player.domain.shared.constants import CategoryKeys


def shuffle_playlist(
    tracks: Sequence[Track], pivot_index: int, rng: random.Random | None = None
) -> list[Track]:
    """Return ``tracks`` uniformly shuffled with the pivot track moved to the front."""
    remaining = list(tracks)
    pivot = remaining.pop(pivot_index)
    (rng or random).shuffle(remaining)
    return [pivot, *remaining]


def index_of_track(tracks: Sequence[Track], track_id: int) -> int:
    """Index of the first track with ``track_id``, or -1."""
    for index, track in enumerate(tracks):
        if track.id == track_id:
            return index
    return -1


def make_category_key(*parts: object) -> str:
    return CategoryKeys.SEPARATOR.join(str(part) for part in parts)


def split_category_key(key: str, parts: int = 2) -> list[str]:
    """Split a composite key from the right; the first component keeps any extra separators."""
    return key.rsplit(CategoryKeys.SEPARATOR, parts - 1)


class LibraryDomainService:
    """Grouping rules for browsing the library by artist, album, genre and year.

    Albums are grouped per artist and keyed ``"<artist>|<album>"`` so that equally
    named albums by different artists stay apart.
    """

    @staticmethod
    def _sorted_items(items: Iterable[CategoryItem]) -> list[CategoryItem]:
        return sorted(items, key=lambda item: item.name.casefold())

    @classmethod
    def artists(cls, tracks: Iterable[Track]) -> list[CategoryItem]:
        counts: dict[str, int] = defaultdict(int)
        for track in tracks:
            counts[track.display_artist] += 1
        return cls._sorted_items(
            CategoryItem(id=name, name=name, song_count=count, category=BrowseCategory.ARTISTS)
            for name, count in counts.items()
        )

    @classmethod
    def albums(cls, tracks: Iterable[Track]) -> list[CategoryItem]:
        grouped: dict[tuple[str, str], list[Track]] = defaultdict(list)
        for track in tracks:
            grouped[(track.display_artist, track.display_album)].append(track)

        items = []
        for (artist, album), members in grouped.items():
            art = next((t.album_art_uri for t in members if t.album_art_uri), None)
            items.append(
                CategoryItem(
                    id=make_category_key(artist, album),
                    name=album,
                    song_count=len(members),
                    category=BrowseCategory.ALBUMS,
                    description=artist,
                    image_uri=art,
                )
            )
        return sorted(items, key=lambda item: (item.description.casefold(), item.name.casefold()))

    @classmethod
    def genres(cls, tracks: Iterable[Track]) -> list[CategoryItem]:
        counts: dict[str, int] = defaultdict(int)
        for track in tracks:
            counts[track.display_genre] += 1
        return cls._sorted_items(
            CategoryItem(id=name, name=name, song_count=count, category=BrowseCategory.GENRES)
            for name, count in counts.items()
        )

    @classmethod
    def genre_years(cls, tracks: Iterable[Track]) -> list[CategoryItem]:
        counts: dict[tuple[str, int], int] = defaultdict(int)
        for track in tracks:
            if track.year > 0:
                counts[(track.display_genre, track.year)] += 1
        items = [
            CategoryItem(
                id=make_category_key(genre, year),
                name=f"{genre} ({year})",
                song_count=count,
                category=BrowseCategory.GENRE_YEARS,
            )
            for (genre, year), count in counts.items()
        ]
        return sorted(items, key=lambda item: item.name.casefold())

    @classmethod
    def years(cls, tracks: Iterable[Track]) -> list[CategoryItem]:
        counts: dict[int, int] = defaultdict(int)
        for track in tracks:
            if track.year > 0:
                counts[track.year] += 1
        return [
            CategoryItem(
                id=str(year), name=str(year), song_count=count, category=BrowseCategory.ALL_SONGS
            )
            for year, count in sorted(counts.items(), reverse=True)
        ]

    @classmethod
    def artist_groups(cls, tracks: Iterable[Track]) -> list[ArtistGroup]:
        by_artist: dict[str, list[CategoryItem]] = defaultdict(list)
        for album in cls.albums(tracks):
            by_artist[album.description].append(album)
        return [
            ArtistGroup(
                artist_name=artist,
                albums=tuple(albums),
                total_songs=sum(a.song_count for a in albums),
            )
            for artist, albums in sorted(by_artist.items(), key=lambda kv: kv[0].casefold())
        ]

    @staticmethod
    def songs_for(
        tracks: Sequence[Track], category: BrowseCategory, item_id: str
    ) -> list[Track]:
        """Songs belonging to one category item, in browse order."""
        wanted = item_id.casefold()
        if category == BrowseCategory.ARTISTS:
            return [t for t in tracks if t.display_artist.casefold() == wanted]
        if category == BrowseCategory.ALBUMS:
            parts = split_category_key(item_id)
            album = parts[-1].casefold()
            artist = parts[0].casefold() if len(parts) == 2 else None
            members = [
                t
                for t in tracks
                if t.display_album.casefold() == album
                and (artist is None or t.display_artist.casefold() == artist)
            ]
            return sorted(members, key=lambda t: t.track_number)
        if category == BrowseCategory.GENRES:
            return [t for t in tracks if t.display_genre.casefold() == wanted]
        if category == BrowseCategory.GENRE_YEARS:
            genre, _, year = item_id.rpartition(CategoryKeys.SEPARATOR)
            return [
                t
                for t in tracks
                if t.display_genre.casefold() == genre.casefold() and str(t.year) == year
            ]
        return list(tracks)

    @staticmethod
    def matches_query(track: Track, query: str) -> bool:
        needle = query.casefold()
        return (
            needle in track.title.casefold()
            or needle in track.artist.casefold()
            or needle in track.album.casefold()
        )
