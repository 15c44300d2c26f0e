# virtual_marlin/virtual_marlin/exceptions.py
"""
Custom exceptions for the Virtual Marlin simulator.
"""


class VirtualMarlinError(Exception):
    """Base exception class for all Virtual Marlin errors."""
    def __init__(self, message, *args, command=None):
        super().__init__(message, *args)
        self.message = message
        self.command = command

    def __str__(self):
        base_message = super().__str__()
        if self.command is not None:
            return f"{base_message} (Command: {self.command!r})"
        return base_message


class ExecutorStateError(VirtualMarlinError):
    """Operation called in the wrong executor lifecycle state."""



class SimulatorError(VirtualMarlinError):
    """Errors related to the simulated connection's operation."""



class CommandError(VirtualMarlinError):
    """Exception for errors related to sending commands."""



class CommunicationError(VirtualMarlinError):
    """General communication errors, e.g., timeouts."""



class ConfigurationError(VirtualMarlinError):
    """Errors related to simulator configuration."""

