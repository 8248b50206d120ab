"""
Configuration models and loading.

This module provides Pydantic models for beadboard configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    SortConfigStore,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
)
from .models import CONFIG_VERSION, BoardConfig, LayoutConfig, SortConfig

__all__ = [
    # Models
    "CONFIG_VERSION",
    "BoardConfig",
    "LayoutConfig",
    "SortConfig",
    # Loader functions
    "SortConfigStore",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
]
