from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_DATA_DIR = Path(
    os.getenv("MUSIC_PLAYER_DATA", Path.home() / ".local" / "share" / "music-player")
).expanduser()


@dataclass
class AppConfig:
    """Static configuration for the service."""

    host: str = field(default_factory=lambda: os.getenv("MUSIC_PLAYER_HOST", "127.0.0.1"))
    port: int = field(default_factory=lambda: int(os.getenv("MUSIC_PLAYER_PORT", "8080")))
    log_level: str = field(default_factory=lambda: os.getenv("MUSIC_PLAYER_LOG_LEVEL", "INFO"))
    data_dir: Path = field(default_factory=lambda: DEFAULT_DATA_DIR)

    @property
    def state_path(self) -> Path:
        return self.data_dir / "state.json"

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
