# virtual_marlin/virtual_marlin/constants.py
"""
Constants for the Virtual Marlin simulator.
Includes protocol framing tokens, default timings and the canned values
reported by the simulated firmware.
"""

# Reply framing
OK_TOKEN = "ok"
LINE_TERMINATOR = "\n"
CARRIAGE_RETURN = "\r"
REPLY_ENCODING = "utf-8"

# Default timings
DEFAULT_LATENCY_MS = 2.0          # Delay before each reply line is emitted
DEFAULT_OPEN_DELAY_MS = 10.0      # Time the simulated port takes to open
DEFAULT_COMMAND_TIMEOUT_SECONDS = 5.0
DEFAULT_MAX_DWELL_SECONDS = 2.0   # Cap for G4 dwell emulation

# Canned firmware values (no physical state is modelled)
FIRMWARE_NAME = "Marlin 1.1.0 (Virtual)"
PROTOCOL_VERSION = "1.0"
MACHINE_TYPE = "Virtual Marlin"
EXTRUDER_COUNT = 1
DEFAULT_EXTRUDER_TEMP = 20.0
DEFAULT_BED_TEMP = 20.0
POSITION_REPORT = "X:0.00 Y:0.00 Z:0.00 E:0.00 Count X:0 Y:0 Z:0"

# Command words the firmware accepts without complaint
KNOWN_COMMAND_LETTERS = ("G", "M", "T")

CMD_DWELL = "G4"
CMD_REPORT_TEMPERATURES = "M105"
CMD_GET_POSITION = "M114"
CMD_FIRMWARE_INFO = "M115"

# Debug API
DEFAULT_DEBUG_API_HOST = "127.0.0.1"
DEFAULT_DEBUG_API_PORT = 8765

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")
