"""Configuration loading and validation."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from .exceptions import ConfigError

DEFAULT_INDEX_PATH = "wn_index"


@dataclass
class Config:
    """Application configuration."""

    root: Path = field(default_factory=Path.cwd)
    index_path: str = DEFAULT_INDEX_PATH
    http_host: str = "127.0.0.1"
    http_port: int = 8080
    http_timeout: float = 30.0
    verbose: bool = False

    @property
    def index_root(self) -> Path:
        """Directory the index is written to."""
        return self.root / self.index_path

    def validate(self) -> None:
        """Validate configuration values."""
        if not self.index_path or not self.index_path.strip():
            raise ConfigError("WEBNOTES_INDEX_PATH cannot be empty.")
        if not 0 < self.http_port < 65536:
            raise ConfigError(f"Invalid HTTP port: {self.http_port}")
        if self.http_timeout <= 0:
            raise ConfigError("WEBNOTES_HTTP_TIMEOUT must be positive.")


def _env_number(name: str, default, kind):
    raw = os.getenv(name, "")
    if not raw:
        return default
    try:
        return kind(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from e


def load_config(
    root: Optional[str] = None,
    index_path: Optional[str] = None,
    http_host: Optional[str] = None,
    http_port: Optional[int] = None,
    verbose: bool = False,
) -> Config:
    """Load config from .env and apply CLI overrides."""
    load_dotenv()

    config = Config(
        root=Path(root) if root else Path(os.getenv("WEBNOTES_ROOT", str(Path.cwd()))),
        index_path=index_path or os.getenv("WEBNOTES_INDEX_PATH", DEFAULT_INDEX_PATH),
        http_host=http_host or os.getenv("WEBNOTES_HTTP_HOST", "127.0.0.1"),
        http_port=http_port if http_port is not None else _env_number("WEBNOTES_HTTP_PORT", 8080, int),
        http_timeout=_env_number("WEBNOTES_HTTP_TIMEOUT", 30.0, float),
        verbose=verbose,
    )

    config.validate()
    return config
