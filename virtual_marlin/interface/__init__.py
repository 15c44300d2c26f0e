"""
Optional interfaces for the Virtual Marlin simulator.
"""

from .http_debug_server import DebugHTTPServer

__all__ = ["DebugHTTPServer"]
