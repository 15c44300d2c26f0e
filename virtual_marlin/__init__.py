"""
Virtual Marlin
==============

A software stand-in for a Marlin motion-control board. It provides an
executor that forwards host commands to a simulated serial connection and
classifies replies by Marlin's "ok" framing, so bot-control code can be
exercised without hardware attached.
"""

from . import constants as const

from .config import SimulatorConfig, load_config, save_config
from .connection import SimulatedConnection
from .executor import Closed, Open, VirtualExecutor
from .firmware_model import SimulatedFirmware
from .reply import is_command_complete, last_reply_line, split_reply_lines

from .exceptions import (
    VirtualMarlinError,
    ExecutorStateError,
    SimulatorError,
    CommandError,
    CommunicationError,
    ConfigurationError,
)

__version__ = "0.1.0"

__all__ = [
    "const",

    # Core
    "VirtualExecutor",
    "Closed",
    "Open",
    "SimulatedConnection",
    "SimulatedFirmware",

    # Configuration
    "SimulatorConfig",
    "load_config",
    "save_config",

    # Reply framing
    "is_command_complete",
    "last_reply_line",
    "split_reply_lines",

    # Exceptions
    "VirtualMarlinError",
    "ExecutorStateError",
    "SimulatorError",
    "CommandError",
    "CommunicationError",
    "ConfigurationError",
]
