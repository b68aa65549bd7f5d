from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class User:
    id: str


@dataclass
class Song:
    id: str
    track: str
    artist: str
    album: str

    def signature(self) -> Tuple[str, str, str]:
        return (self.track, self.artist, self.album)

    def to_dict(self) -> Dict[str, str]:
        return {"id": self.id, "track": self.track, "artist": self.artist, "album": self.album}

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Song":
        return cls(
            id=str(payload["id"]),
            track=str(payload["track"]),
            artist=str(payload["artist"]),
            album=str(payload["album"]),
        )


@dataclass
class Playlist:
    id: str
    name: str
    owner: str
    songs: List[Song] = field(default_factory=list)

    def find_song(self, song_id: str) -> Optional[Song]:
        for song in self.songs:
            if song.id == song_id:
                return song
        return None

    def has_signature(self, signature: Tuple[str, str, str]) -> bool:
        return any(song.signature() == signature for song in self.songs)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "owner": self.owner,
            "songs": [song.to_dict() for song in self.songs],
        }

    def to_public_dict(self) -> Dict[str, Any]:
        payload = self.to_dict()
        payload.pop("owner")
        return payload

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Playlist":
        return cls(
            id=str(payload["id"]),
            name=str(payload["name"]),
            owner=str(payload["owner"]),
            songs=[Song.from_dict(item) for item in payload.get("songs") or []],
        )
