from __future__ import annotations

import logging

from fastapi import FastAPI

from music_player.auth import StoredTokenResolver, TokenResolver
from music_player.config import AppConfig
from music_player.playlists import PlaylistManager
from music_player.storage import JSONStorage
from music_player.web import build_app

logger = logging.getLogger(__name__)


def create_app(config: AppConfig | None = None, resolver: TokenResolver | None = None) -> FastAPI:
    config = config or AppConfig()
    config.ensure_dirs()
    storage = JSONStorage(config.state_path)
    resolver = resolver or StoredTokenResolver(storage)
    manager = PlaylistManager(storage=storage)

    app = build_app(resolver=resolver, manager=manager)
    app.state.config = config
    app.state.storage = storage
    app.state.manager = manager
    logger.info("Music player API using state file %s", config.state_path)
    return app
