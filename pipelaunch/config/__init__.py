"""Configuration management for pipelaunch."""

from pipelaunch.config.config_manager import ConfigContext
from pipelaunch.config.config_manager import config_context
from pipelaunch.config.config_manager import get_config
from pipelaunch.config.config_manager import reset_config
from pipelaunch.config.config_manager import set_config
from pipelaunch.config.config_manager import update_config
from pipelaunch.config.launch_config import DEFAULT_CONFIG
from pipelaunch.config.launch_config import LaunchConfig

__all__ = [
    "DEFAULT_CONFIG",
    "ConfigContext",
    "LaunchConfig",
    "config_context",
    "get_config",
    "reset_config",
    "set_config",
    "update_config",
]
