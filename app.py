from __future__ import annotations

import uvicorn

from music_player import create_app
from music_player.config import AppConfig
from music_player.log import configure_logging


def main() -> None:
    config = AppConfig()
    configure_logging(config.log_level)
    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())


if __name__ == "__main__":
    main()
