#!/usr/bin/env python3
"""
Configuration system for the command engine
Supports YAML files, CLI overrides, and programmatic access
"""

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from commandable.errors import ConfigError

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


@dataclass
class BindingConfig:
    """How bound commands are handed to the host"""
    mode: str = "command"              # "command" or "line"
    line_event: str = "playerCommand"  # raw-line event used by line mode

    def __post_init__(self):
        if self.mode not in ('command', 'line'):
            raise ConfigError(f"Invalid binding mode: {self.mode}. Must be 'command' or 'line'")
        if not self.line_event:
            raise ConfigError("binding.line_event must not be empty")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'mode': self.mode,
            'line_event': self.line_event,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BindingConfig':
        return cls(
            mode=data.get('mode', 'command'),
            line_event=data.get('line_event', 'playerCommand'),
        )


@dataclass
class ConsoleConfig:
    """Console messages logging level configuration"""
    verbose: bool = False
    quiet: bool = False
    log_level: str = "INFO"

    def __post_init__(self):
        self.log_level = str(self.log_level).upper()
        if self.log_level not in LOG_LEVELS:
            raise ConfigError(f"Invalid log level: {self.log_level}. Must be one of {LOG_LEVELS}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'verbose': self.verbose,
            'quiet': self.quiet,
            'log_level': self.log_level,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ConsoleConfig':
        return cls(
            verbose=data.get('verbose', False),
            quiet=data.get('quiet', False),
            log_level=data.get('log_level', 'INFO'),
        )


@dataclass
class CommandableConfig:
    """Complete engine configuration"""
    binding: BindingConfig = field(default_factory=BindingConfig)
    console: ConsoleConfig = field(default_factory=ConsoleConfig)

    # Metadata
    config_version: str = "1.0"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for YAML serialization"""
        return {
            'config_version': self.config_version,
            'binding': self.binding.to_dict(),
            'console': self.console.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CommandableConfig':
        """Create from dictionary (YAML loading)"""
        config = cls()
        if 'config_version' in data:
            config.config_version = str(data['config_version'])
        if 'binding' in data:
            config.binding = BindingConfig.from_dict(_section(data, 'binding'))
        if 'console' in data:
            config.console = ConsoleConfig.from_dict(_section(data, 'console'))
        return config


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    """Return a config section as a dict; an empty section is {}."""
    value = data[name]
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping, got {type(value).__name__}")
    return value


class ConfigurationManager:
    """
    Manages configuration loading, merging, and saving
    """

    def __init__(self):
        self.config: Optional[CommandableConfig] = None
        self.config_file_path: Optional[Path] = None
        self.logger = logging.getLogger(__name__)

        # Standard config file locations (in order of preference)
        self.config_search_paths = [
            Path.cwd() / "commandable.yaml",
            Path.cwd() / "config" / "commandable.yaml",
            Path.home() / ".config" / "commandable" / "config.yaml",
        ]

    def load_config(self, config_file: Optional[str] = None) -> CommandableConfig:
        """
        Load configuration from file with fallback chain

        Args:
            config_file: Specific config file path, or None for auto-discovery

        Returns:
            Loaded configuration object (defaults if no file was found)
        """
        if config_file:
            config_path = Path(config_file)
            if config_path.exists():
                self.config = self._load_yaml_file(config_path)
                self.config_file_path = config_path
                self.logger.info(f"Loaded config from: {config_path}")
            else:
                self.logger.warning(f"Config file not found: {config_path}")
                self.logger.info("Using default configuration")
        else:
            for path in self.config_search_paths:
                if path.exists():
                    self.config = self._load_yaml_file(path)
                    self.config_file_path = path
                    self.logger.info(f"Auto-discovered config: {path}")
                    break
            else:
                self.logger.info("No config file found, using defaults")

        if self.config is None:
            self.config = CommandableConfig()
        return self.config

    def _load_yaml_file(self, file_path: Path) -> CommandableConfig:
        """Load configuration from YAML file

        Unreadable YAML falls back to defaults; invalid values raise ConfigError.
        """
        try:
            with open(file_path, 'r') as f:
                yaml_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            self.logger.error(f"Error loading config file {file_path}: {e}")
            return CommandableConfig()

        if not isinstance(yaml_data, dict):
            self.logger.error(f"Config file {file_path} does not contain a mapping")
            return CommandableConfig()

        for key in yaml_data:
            if key not in ('config_version', 'binding', 'console'):
                self.logger.warning(f"Unknown config key '{key}' in {file_path}")

        return CommandableConfig.from_dict(yaml_data)

    def merge_cli_args(self, args: argparse.Namespace) -> CommandableConfig:
        """
        Merge CLI arguments into configuration (CLI takes precedence)

        Args:
            args: Parsed command line arguments

        Returns:
            Updated configuration
        """
        if self.config is None:
            self.config = CommandableConfig()

        if getattr(args, 'line_mode', False):
            self.config.binding.mode = 'line'
        if getattr(args, 'line_event', None):
            self.config.binding.line_event = args.line_event

        if getattr(args, 'verbose', False):
            self.config.console.verbose = True
        if getattr(args, 'quiet', False):
            self.config.console.quiet = True

        return self.config

    def save_config(self, file_path: Optional[str] = None) -> bool:
        """
        Save current configuration to a YAML file

        Args:
            file_path: Target file path, or None to use loaded file path

        Returns:
            True if saved successfully
        """
        if file_path:
            target_path = Path(file_path)
        elif self.config_file_path:
            target_path = self.config_file_path
        else:
            target_path = Path("commandable.yaml")

        if self.config is None:
            self.config = CommandableConfig()

        try:
            target_path.parent.mkdir(parents=True, exist_ok=True)
            with open(target_path, 'w') as f:
                f.write("# Command engine configuration\n")
                f.write(f"# Version: {self.config.config_version}\n\n")
                yaml.dump(self.config.to_dict(), f,
                          default_flow_style=False,
                          sort_keys=False,
                          indent=2)

            self.logger.info(f"Configuration saved to: {target_path}")
            return True

        except OSError as e:
            self.logger.error(f"Error saving config to {target_path}: {e}")
            return False


def resolve_log_level(console: ConsoleConfig) -> int:
    """verbose wins over quiet, quiet wins over log_level"""
    if console.verbose:
        return logging.DEBUG
    if console.quiet:
        return logging.WARNING
    return getattr(logging, console.log_level)


def setup_logging(config: CommandableConfig) -> int:
    """Configure the root logger from the console section"""
    level = resolve_log_level(config.console)
    logging.basicConfig(level=level, format='%(levelname)s %(name)s: %(message)s')
    return level
