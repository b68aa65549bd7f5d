from __future__ import annotations

import logging
import uuid
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from music_player.models import Playlist, Song, User
from music_player.storage import JSONStorage

logger = logging.getLogger(__name__)

PLAYLISTS_KEY = "playlists"

T = TypeVar("T")


class PlaylistError(Exception):
    """Base error for rejected playlist operations."""

    status_code = 400


class ValidationError(PlaylistError):
    """Raised for missing fields and uniqueness violations."""


class NotFoundError(PlaylistError):
    """Raised when a playlist or song is absent or owned by someone else."""

    status_code = 404


def require_text(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} is required")
    return value


def _load(raw: Any) -> List[Playlist]:
    return [Playlist.from_dict(item) for item in raw or []]


def _dump(playlists: List[Playlist]) -> List[Dict[str, Any]]:
    return [playlist.to_dict() for playlist in playlists]


def _owned_by(playlist: Playlist, user: User) -> bool:
    return playlist.owner == user.id


def _find_owned(playlists: List[Playlist], user: User, playlist_id: str) -> Playlist:
    for playlist in playlists:
        if playlist.id == playlist_id and _owned_by(playlist, user):
            return playlist
    raise NotFoundError("Playlist not found")


def _name_taken(playlists: List[Playlist], user: User, name: str, exclude_id: Optional[str] = None) -> bool:
    return any(
        _owned_by(playlist, user) and playlist.name == name and playlist.id != exclude_id
        for playlist in playlists
    )


class PlaylistManager:
    """Playlist and song operations scoped to the calling user.

    Reads go through ``load_playlists``; every write runs inside
    ``JSONStorage.update`` so the uniqueness checks and the write happen
    under the same lock, and a rejected operation writes nothing.
    """

    def __init__(self, storage: JSONStorage) -> None:
        self.storage = storage

    async def load_playlists(self) -> List[Playlist]:
        return _load(await self.storage.get(PLAYLISTS_KEY, default=[]))

    async def can_access(self, user: User, playlist_id: str) -> bool:
        """Ownership check shared by every read and write.

        Mutations resolve their target with ``_find_owned``, which applies the
        same ``_owned_by`` test inside the storage lock.
        """
        return any(
            playlist.id == playlist_id and _owned_by(playlist, user)
            for playlist in await self.load_playlists()
        )

    async def list_playlists(self, user: User) -> List[Playlist]:
        return [playlist for playlist in await self.load_playlists() if _owned_by(playlist, user)]

    async def get_playlist(self, user: User, playlist_id: str) -> Optional[Playlist]:
        try:
            return _find_owned(await self.load_playlists(), user, playlist_id)
        except NotFoundError:
            return None

    async def create_playlist(self, user: User, name: Any) -> Playlist:
        name = require_text(name, "name")

        def _create(raw: Any) -> Tuple[List[Dict[str, Any]], Playlist]:
            playlists = _load(raw)
            if _name_taken(playlists, user, name):
                raise ValidationError(f"Playlist '{name}' already exists")
            playlist = Playlist(id=uuid.uuid4().hex, name=name, owner=user.id)
            playlists.append(playlist)
            return _dump(playlists), playlist

        playlist = await self._mutate(_create)
        logger.info("Created playlist %s for user %s", playlist.id, user.id)
        return playlist

    async def rename_playlist(self, user: User, playlist_id: str, new_name: Any) -> Playlist:
        new_name = require_text(new_name, "newName")

        def _rename(raw: Any) -> Tuple[List[Dict[str, Any]], Playlist]:
            playlists = _load(raw)
            playlist = _find_owned(playlists, user, playlist_id)
            if _name_taken(playlists, user, new_name, exclude_id=playlist.id):
                raise ValidationError(f"Playlist '{new_name}' already exists")
            playlist.name = new_name
            return _dump(playlists), playlist

        playlist = await self._mutate(_rename)
        logger.info("Renamed playlist %s", playlist.id)
        return playlist

    async def delete_playlist(self, user: User, playlist_id: str) -> None:
        def _delete(raw: Any) -> Tuple[List[Dict[str, Any]], None]:
            playlists = _load(raw)
            target = _find_owned(playlists, user, playlist_id)
            return _dump([playlist for playlist in playlists if playlist is not target]), None

        await self._mutate(_delete)
        logger.info("Deleted playlist %s", playlist_id)

    async def add_song(self, user: User, playlist_id: str, track: Any, artist: Any, album: Any) -> Song:
        song = Song(
            id=uuid.uuid4().hex,
            track=require_text(track, "track"),
            artist=require_text(artist, "artist"),
            album=require_text(album, "album"),
        )

        def _add(raw: Any) -> Tuple[List[Dict[str, Any]], Song]:
            playlists = _load(raw)
            playlist = _find_owned(playlists, user, playlist_id)
            if playlist.has_signature(song.signature()):
                raise ValidationError("Song already exists in playlist")
            playlist.songs.append(song)
            return _dump(playlists), song

        await self._mutate(_add)
        logger.info("Added song %s to playlist %s", song.id, playlist_id)
        return song

    async def delete_song(self, user: User, playlist_id: str, song_id: str) -> None:
        def _remove(raw: Any) -> Tuple[List[Dict[str, Any]], None]:
            playlists = _load(raw)
            playlist = _find_owned(playlists, user, playlist_id)
            song = playlist.find_song(song_id)
            if song is None:
                raise NotFoundError("Song not found")
            playlist.songs.remove(song)
            return _dump(playlists), None

        await self._mutate(_remove)
        logger.info("Removed song %s from playlist %s", song_id, playlist_id)

    async def _mutate(self, mutate: Callable[[Any], Tuple[Any, T]]) -> T:
        try:
            return await self.storage.update(PLAYLISTS_KEY, mutate, default=[])
        except PlaylistError as exc:
            logger.debug("Rejected playlist operation: %s", exc)
            raise
