# ccswitch - provider and MCP configuration switcher for AI coding CLIs
# ABOUTME: Version information
__version__ = "0.1.0"

# ABOUTME: Export core data models
# ABOUTME: Export config loading functions and services
from ccswitch.config import ensure_config_dir, get_config_path, load_config, save_config
from ccswitch.errors import (
    AppError,
    ConfigError,
    LegacyConfigError,
    McpValidationError,
    ProviderNotFoundError,
)
from ccswitch.models import APP_TYPES, ConfigRoot, LiveAdapter, MCPServer, Provider
from ccswitch.store import ConfigStore

__all__ = [
    "__version__",
    "APP_TYPES",
    "ConfigRoot",
    "LiveAdapter",
    "MCPServer",
    "Provider",
    "ConfigStore",
    "AppError",
    "ConfigError",
    "LegacyConfigError",
    "McpValidationError",
    "ProviderNotFoundError",
    "ensure_config_dir",
    "get_config_path",
    "load_config",
    "save_config",
]
