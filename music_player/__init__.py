from music_player.app import create_app

__all__ = ["create_app"]
