"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars

The project config lives next to the data it describes, in
.beads/bdui-config.json, and is also where per-column sort settings are
persisted whenever a column is re-sorted.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from .models import CONFIG_VERSION, BoardConfig, SortConfig

logger = logging.getLogger(__name__)

PROJECT_CONFIG_NAME = "bdui-config.json"


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """
    Get path to user configuration file.

    Returns:
        Path to ~/.config/beadboard/config.json (or XDG equivalent)
    """
    return get_xdg_config_home() / "beadboard" / "config.json"


def get_project_config_path(beads_dir: Path) -> Path:
    """
    Get path to project configuration file.

    Args:
        beads_dir: The project's .beads directory

    Returns:
        Path to .beads/bdui-config.json
    """
    return beads_dir / PROJECT_CONFIG_NAME


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`. Nested
    dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 30}})
        {'a': 1, 'b': {'x': 10, 'y': 30}}
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open(encoding="utf-8") as f:
            data = json.load(f)
        if isinstance(data, dict):
            return data
        logger.warning(f"Ignoring config at {path}: expected a JSON object")
        return None
    except (json.JSONDecodeError, OSError) as e:
        # Config problems never block the board from starting
        logger.warning(f"Failed to parse config at {path}: {e}")
        return None


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Supported env vars:
        BEADBOARD_NOTIFICATIONS - overrides notifications_enabled
        BEADBOARD_DEBOUNCE_MS - overrides debounce_ms

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    if notify_str := os.environ.get("BEADBOARD_NOTIFICATIONS"):
        result["notifications_enabled"] = notify_str.lower() not in ("false", "0", "no", "off")

    if debounce_str := os.environ.get("BEADBOARD_DEBOUNCE_MS"):
        try:
            debounce = int(debounce_str)
            if debounce < 0:
                logger.warning(f"BEADBOARD_DEBOUNCE_MS must be >= 0, got {debounce}, ignoring")
            else:
                result["debounce_ms"] = debounce
        except ValueError:
            logger.warning(f"Invalid BEADBOARD_DEBOUNCE_MS value '{debounce_str}', ignoring")

    return result


def get_default_config() -> dict[str, Any]:
    """Built-in defaults as a plain dictionary (aliased keys)."""
    return BoardConfig().model_dump(mode="json", by_alias=True)


def _merge_layer(merged: dict[str, Any], layer: dict[str, Any], path: Path) -> dict[str, Any]:
    """Merge one config layer, dropping it entirely if it does not validate."""
    candidate = deep_merge(merged, layer)
    try:
        BoardConfig.model_validate(candidate)
    except ValidationError as e:
        logger.warning(f"Ignoring invalid config at {path}: {e.error_count()} error(s)")
        return merged
    return candidate


def load_config(beads_dir: Path | None = None) -> BoardConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables (BEADBOARD_*)
        2. Project config (.beads/bdui-config.json)
        3. User config (~/.config/beadboard/config.json)
        4. Hardcoded defaults

    A project config whose ``version`` differs from the current format
    keeps its other settings but its ``sortConfig`` is ignored.

    Args:
        beads_dir: The project's .beads directory (None skips the project layer)

    Returns:
        Validated BoardConfig instance
    """
    merged = get_default_config()

    user_config_path = get_user_config_path()
    if user_config := load_json_file(user_config_path):
        merged = _merge_layer(merged, user_config, user_config_path)

    if beads_dir is not None:
        project_config_path = get_project_config_path(beads_dir)
        if project_config := load_json_file(project_config_path):
            if project_config.get("version", CONFIG_VERSION) != CONFIG_VERSION:
                logger.warning(
                    f"Config version mismatch in {project_config_path} "
                    f"({project_config.get('version')!r}), using default sort settings"
                )
                project_config = {
                    k: v for k, v in project_config.items() if k not in ("sortConfig", "version")
                }
            merged = _merge_layer(merged, project_config, project_config_path)

    merged = apply_env_overrides(merged)
    return BoardConfig.model_validate(merged)


class SortConfigStore:
    """
    Persistence for per-column sort settings.

    Loads the sort config once at startup and writes it back to
    .beads/bdui-config.json on every re-sort. Other keys already in the
    file are preserved.

    Example:
        >>> store = SortConfigStore(Path(".beads"))
        >>> config = store.load()
        >>> store.save(config)
        True
    """

    def __init__(self, beads_dir: Path):
        """
        Initialize the store.

        Args:
            beads_dir: The project's .beads directory
        """
        self.beads_dir = beads_dir
        self.config_path = get_project_config_path(beads_dir)

    def load(self) -> SortConfig:
        """Load the effective sort config (defaults if nothing is saved)."""
        return load_config(self.beads_dir).sort_config

    def save(self, sort_config: SortConfig) -> bool:
        """
        Write the sort config to the project config file.

        The file is replaced atomically so a concurrent reader never sees
        a partial write.

        Args:
            sort_config: Sort settings to persist

        Returns:
            True if written, False if the file could not be written
        """
        existing = load_json_file(self.config_path) or {}
        existing["version"] = CONFIG_VERSION
        existing["sortConfig"] = sort_config.model_dump(mode="json", by_alias=True)

        tmp_name: str | None = None
        try:
            self.beads_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self.beads_dir, prefix=".bdui-config-", suffix=".tmp"
            )
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(existing, f, indent=2)
                f.write("\n")
            os.replace(tmp_name, self.config_path)
        except OSError as e:
            logger.warning(f"Failed to save sort config to {self.config_path}: {e}")
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False

        logger.debug(f"Saved sort config to {self.config_path}")
        return True
