from music_player.models import Playlist, Song


def test_playlist_public_dict_hides_owner():
    playlist = Playlist(
        id="p1",
        name="Morning",
        owner="u1",
        songs=[Song(id="s1", track="Track", artist="Artist", album="Album")],
    )
    assert playlist.to_public_dict() == {
        "id": "p1",
        "name": "Morning",
        "songs": [{"id": "s1", "track": "Track", "artist": "Artist", "album": "Album"}],
    }
    assert Playlist.from_dict(playlist.to_dict()) == playlist


def test_song_signature_matches_exact_triple():
    playlist = Playlist(id="p1", name="Morning", owner="u1")
    playlist.songs.append(Song(id="s1", track="Track", artist="Artist", album="Album"))

    assert playlist.has_signature(("Track", "Artist", "Album"))
    assert not playlist.has_signature(("track", "Artist", "Album"))
    assert playlist.find_song("s1") is not None
    assert playlist.find_song("missing") is None
