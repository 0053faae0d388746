"""Configuration management for Recipe Explorer."""

import os
import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Dict, Any

try:
    import tomllib  # type: ignore[import-not-found]  # Python 3.11+
except ImportError:  # pragma: no cover - fallback for <3.11
    try:
        import tomli as tomllib
    except ImportError:
        tomllib = None

try:
    import tomli_w  # type: ignore[import-not-found]  # for writing TOML files
except ImportError:  # pragma: no cover
    tomli_w = None

logger = logging.getLogger(__name__)

ENV_PREFIX = "RECIPE_EXPLORER_"

DEFAULT_BASE_URL = "https://www.themealdb.com/api/json/v1/1"
DEFAULT_DATA_DIR = str(Path.home() / ".recipe-explorer")
CACHE_TTL_SECONDS = 24 * 60 * 60

# field name -> parser, for every setting that may come from env or file
_FIELDS = {
    "base_url": str,
    "data_dir": str,
    "cache_ttl": int,
    "timeout": int,
    "ingredient_timeout": float,
    "retry_attempts": int,
    "retry_delay": float,
    "concurrency": int,
}


@dataclass
class Config:
    """Configuration class for Recipe Explorer."""

    base_url: str = DEFAULT_BASE_URL
    data_dir: str = DEFAULT_DATA_DIR
    cache_ttl: int = CACHE_TTL_SECONDS
    timeout: int = 30
    ingredient_timeout: float = 5.0
    retry_attempts: int = 2
    retry_delay: float = 1.0
    concurrency: int = 3

    @property
    def cache_file(self) -> Path:
        return Path(self.data_dir).expanduser() / "cache.json"

    @property
    def favorites_file(self) -> Path:
        return Path(self.data_dir).expanduser() / "favorites.json"

    @classmethod
    def from_env(cls) -> 'Config':
        """Load configuration from environment variables.

        Every field can be overridden with ``RECIPE_EXPLORER_<FIELD>``;
        unset variables keep their defaults.

        Returns:
            Config: Configuration instance loaded from environment variables.

        Raises:
            ValueError: If a numeric variable cannot be parsed.
        """
        return cls(**_read_env())

    @classmethod
    def from_file(cls, path: Path) -> 'Config':
        """Load configuration from file.

        Supports JSON and TOML formats based on file extension.

        Args:
            path: Path to configuration file.

        Returns:
            Config: Configuration instance loaded from file.

        Raises:
            FileNotFoundError: If configuration file doesn't exist.
            ValueError: If file format is unsupported.
            json.JSONDecodeError: If JSON file is malformed.
        """
        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        data = _load_file(path)
        return cls(**_coerce(data))

    @classmethod
    def from_sources(cls, config_file: Optional[Path] = None) -> 'Config':
        """Load configuration from multiple sources with precedence.

        Precedence order (highest to lowest):
        1. Configuration file (if provided)
        2. Environment variables
        3. Default values

        Args:
            config_file: Optional path to configuration file.

        Returns:
            Config: Configuration instance loaded from available sources.
        """
        config_data: Dict[str, Any] = _read_env()

        # Override with config file if provided
        if config_file and config_file.exists():
            try:
                config_data.update(_coerce(_load_file(config_file)))
            except (OSError, ValueError) as e:
                # If file config fails, continue with env/defaults
                logger.warning(
                    f"Ignoring unreadable config file {config_file}: {e}"
                )

        return cls(**config_data)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary.

        Returns:
            Dict[str, Any]: Configuration as dictionary.
        """
        return {name: getattr(self, name) for name in _FIELDS}

    def to_file(self, path: Path) -> None:
        """Save configuration to file.

        Args:
            path: Path where to save configuration file.

        Raises:
            ValueError: If file format is unsupported.
        """
        data = self.to_dict()

        # Ensure parent directory exists
        path.parent.mkdir(parents=True, exist_ok=True)

        # Save based on file extension
        if path.suffix.lower() == '.json':
            with open(path, 'w') as f:
                json.dump(data, f, indent=2)
        elif path.suffix.lower() in ['.toml', '.tml']:
            if tomli_w is None:
                raise ValueError("TOML writing support not available. Install 'tomli-w' package")
            with open(path, 'wb') as f:
                tomli_w.dump(data, f)
        else:
            raise ValueError(f"Unsupported configuration file format: {path.suffix}")


def _read_env() -> Dict[str, Any]:
    data: Dict[str, Any] = {}
    for name, parser in _FIELDS.items():
        raw = os.getenv(ENV_PREFIX + name.upper())
        if raw is not None and raw != "":
            data[name] = parser(raw)
    return data


def _load_file(path: Path) -> Dict[str, Any]:
    if path.suffix.lower() == '.json':
        with open(path, 'r') as f:
            data = json.load(f)
    elif path.suffix.lower() in ['.toml', '.tml']:
        if tomllib is None:
            raise ValueError("TOML support not available. Install 'tomli' package for Python < 3.11")
        with open(path, 'rb') as f:
            data = tomllib.load(f)
    else:
        raise ValueError(f"Unsupported configuration file format: {path.suffix}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a table/object: {path}")
    return data


def _coerce(data: Dict[str, Any]) -> Dict[str, Any]:
    """Keep known keys only, parsed to their field types."""
    return {name: _FIELDS[name](value) for name, value in data.items() if name in _FIELDS}
