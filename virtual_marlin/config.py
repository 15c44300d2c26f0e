"""
Configuration for the Virtual Marlin simulator.

Provides the SimulatorConfig dataclass shared by the executor, the simulated
connection and the firmware model, plus JSON load/save helpers for
configuration files.
"""

import json
import logging
from dataclasses import asdict, dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Union

from . import constants as const
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


@dataclass
class SimulatorConfig:
    """Main simulator configuration."""
    # Timing
    latency_ms: float = const.DEFAULT_LATENCY_MS
    open_delay_ms: float = const.DEFAULT_OPEN_DELAY_MS
    command_timeout_s: float = const.DEFAULT_COMMAND_TIMEOUT_SECONDS
    max_dwell_s: float = const.DEFAULT_MAX_DWELL_SECONDS

    # Firmware identity and canned readings
    firmware_name: str = const.FIRMWARE_NAME
    extruder_temp: float = const.DEFAULT_EXTRUDER_TEMP
    bed_temp: float = const.DEFAULT_BED_TEMP

    # Command code (e.g. "M105") -> reply text, replaces the canned reply
    responses: Dict[str, str] = field(default_factory=dict)

    # Logging
    log_level: str = "INFO"

    # Debug API
    debug_api_host: str = const.DEFAULT_DEBUG_API_HOST
    debug_api_port: int = const.DEFAULT_DEBUG_API_PORT

    def __post_init__(self):
        if isinstance(self.responses, dict):
            self.responses = {str(code).upper(): str(text) for code, text in self.responses.items()}

    def validate(self) -> "SimulatorConfig":
        """Checks value ranges. Returns self so calls can be chained."""
        for name in ("latency_ms", "open_delay_ms", "max_dwell_s"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0, got {getattr(self, name)}")
        if self.command_timeout_s <= 0:
            raise ConfigurationError(
                f"command_timeout_s must be > 0, got {self.command_timeout_s}"
            )
        if self.log_level.upper() not in const.LOG_LEVELS:
            raise ConfigurationError(
                f"log_level must be one of {', '.join(const.LOG_LEVELS)}, got {self.log_level!r}"
            )
        if not (0 < self.debug_api_port < 65536):
            raise ConfigurationError(f"debug_api_port out of range: {self.debug_api_port}")
        if not isinstance(self.responses, dict):
            raise ConfigurationError("responses must be a mapping of command code to reply text")
        self.responses = {str(code).upper(): str(text) for code, text in self.responses.items()}
        return self

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SimulatorConfig":
        """Builds a config from a mapping, rejecting unknown keys."""
        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown configuration keys: {', '.join(sorted(unknown))}"
            )
        try:
            config = cls(**data)
        except TypeError as exc:
            raise ConfigurationError(f"Invalid configuration: {exc}") from exc
        return config.validate()


def load_config(path: Union[str, Path]) -> SimulatorConfig:
    """Loads a SimulatorConfig from a JSON file."""
    config_path = Path(path)
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError as exc:
        raise ConfigurationError(f"Configuration file not found: {config_path}") from exc
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Invalid JSON in {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration in {config_path} must be a JSON object")

    config = SimulatorConfig.from_dict(data)
    logger.info(f"Loaded configuration from {config_path}")
    return config


def save_config(config: SimulatorConfig, path: Union[str, Path]) -> Path:
    """Writes a SimulatorConfig to a JSON file, creating parent directories."""
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(config.to_dict(), f, indent=2)
    logger.info(f"Configuration saved to {config_path}")
    return config_path
