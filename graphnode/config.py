"""
GRAPHNODE CONFIG - Tunables Loaded Once

Configuration lives in a TOML file (`[graph]` section), loaded with tomllib
and validated into a frozen msgspec.Struct. Lookup order:
1. An explicit path passed to load_config()
2. The GRAPHNODE_CONFIG environment variable
3. The packaged defaults.toml

Usage:
    from graphnode.config import get_config, set_config, GraphConfig

    config = get_config()                 # process-wide, loaded lazily
    set_config(GraphConfig(default_weight=2.0))
    graph = Graph.directed(records, config=GraphConfig(stop_at_first_cycle=True))
"""
import os
import tomllib
import warnings
from pathlib import Path
from typing import Annotated, Any, Dict, Literal, Optional

import msgspec

from graphnode.errors import ConfigError


CONFIG_ENV_VAR = "GRAPHNODE_CONFIG"
DEFAULT_CONFIG_PATH = Path(__file__).parent / "defaults.toml"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class GraphConfig(msgspec.Struct, kw_only=True, frozen=True, forbid_unknown_fields=True):
    """Validated graph settings."""
    # Weight given to edges when no weight function is supplied
    default_weight: Annotated[float, msgspec.Meta(ge=0.0)] = 1.0
    # Candidate expansions allowed per search. None = unbounded.
    max_search_expansions: Optional[Annotated[int, msgspec.Meta(gt=0)]] = None
    # Stop the directed cycle walk at the first revisited key instead of
    # scanning every root for further circular nodes
    stop_at_first_cycle: bool = False
    # Most recent diagnostics retained per graph
    diagnostic_buffer_size: Annotated[int, msgspec.Meta(gt=0)] = 1000
    # Level used by configure_logging() when none is given
    log_level: LogLevel = "WARNING"


def load_config(path: Optional[Path] = None) -> GraphConfig:
    """
    Load the `[graph]` section of a TOML file.

    Args:
        path: Explicit config file. Defaults to $GRAPHNODE_CONFIG, then the
            packaged defaults.

    Returns:
        GraphConfig (defaults, with a warning, if the packaged file is gone)

    Raises:
        ConfigError: If an explicitly named file is missing, or any file
            is malformed.
    """
    explicit = path is not None or CONFIG_ENV_VAR in os.environ
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)

    try:
        with open(config_path, "rb") as f:
            raw = tomllib.load(f)
    except FileNotFoundError:
        if explicit:
            raise ConfigError("config file not found", str(config_path)) from None
        warnings.warn(f"Default config missing at {config_path}; using built-in defaults")
        return GraphConfig()
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"invalid TOML: {e}", str(config_path)) from e

    return config_from_dict(raw.get("graph", {}), source=str(config_path))


def config_from_dict(section: Dict[str, Any], source: Optional[str] = None) -> GraphConfig:
    """Validate a plain dict into a GraphConfig."""
    try:
        return msgspec.convert(section, type=GraphConfig)
    except msgspec.ValidationError as e:
        raise ConfigError(str(e), source) from e


# =============================================================================
# PROCESS-WIDE CONFIG
# =============================================================================

_config: Optional[GraphConfig] = None


def get_config() -> GraphConfig:
    """Return the process-wide config, loading it on first use."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[GraphConfig]) -> None:
    """Replace the process-wide config (None forces a reload on next use)."""
    global _config
    _config = config


def reset_config() -> None:
    set_config(None)
