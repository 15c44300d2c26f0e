# virtual_marlin/virtual_marlin/firmware_model.py
"""
Simulated Marlin firmware.
Produces canned replies for command lines using Marlin's "ok" framing.
No physical state (temperature, position) is modelled: every reading is a
fixed value taken from the configuration.
"""
from typing import List, Optional

import logging
import re

from . import constants as const
from .config import SimulatorConfig

logger = logging.getLogger("SimulatedFirmware")

_LINE_NUMBER_RE = re.compile(r"^N\d+\s*")
_DWELL_ARG_RE = re.compile(r"\b([PS])(\d+(?:\.\d*)?)")


class SimulatedFirmware:
    """Maps one command line to the reply lines a Marlin board would print."""

    def __init__(self, config: Optional[SimulatorConfig] = None):
        self.config = config if config else SimulatorConfig()

    @staticmethod
    def normalize_command(command) -> str:
        """
        Strips comments, the N<line> prefix and the *<checksum> suffix.

        Returns an empty string for lines that carry no command.
        """
        if isinstance(command, (bytes, bytearray)):
            command = bytes(command).decode(const.REPLY_ENCODING, errors="replace")
        line = str(command).split(";", 1)[0]
        line = line.split("*", 1)[0].strip()
        line = _LINE_NUMBER_RE.sub("", line)
        return line.strip()

    @staticmethod
    def command_code(line: str) -> str:
        """First word of a normalized line, upper-cased (e.g. 'M105')."""
        return line.split()[0].upper() if line else ""

    def reply_delay(self, command) -> float:
        """Seconds the device stays busy before replying (G4 dwell only)."""
        line = self.normalize_command(command)
        if self.command_code(line) != const.CMD_DWELL:
            return 0.0
        delay = 0.0
        for unit, value in _DWELL_ARG_RE.findall(line[len(const.CMD_DWELL):]):
            delay = float(value) / 1000.0 if unit == "P" else float(value)
        return min(delay, self.config.max_dwell_s)

    def process_command(self, command) -> List[str]:
        line = self.normalize_command(command)
        if not line:
            logger.debug("Ignoring empty command line.")
            return []

        code = self.command_code(line)
        logger.debug(f"Processing command {code}: {line!r}")

        if code in self.config.responses:
            return self.config.responses[code].splitlines()

        if code == const.CMD_REPORT_TEMPERATURES:
            return [
                f"{const.OK_TOKEN} T:{self.config.extruder_temp:.1f} /0.0 "
                f"B:{self.config.bed_temp:.1f} /0.0 @:0 B@:0"
            ]
        if code == const.CMD_GET_POSITION:
            return [const.POSITION_REPORT, const.OK_TOKEN]
        if code == const.CMD_FIRMWARE_INFO:
            return [
                f"FIRMWARE_NAME:{self.config.firmware_name} "
                f"PROTOCOL_VERSION:{const.PROTOCOL_VERSION} "
                f"MACHINE_TYPE:{const.MACHINE_TYPE} "
                f"EXTRUDER_COUNT:{const.EXTRUDER_COUNT}",
                const.OK_TOKEN,
            ]
        if code[:1] in const.KNOWN_COMMAND_LETTERS and code[1:].replace(".", "", 1).isdigit():
            return [const.OK_TOKEN]

        logger.warning(f"Unknown command: {line!r}")
        return [f'echo:Unknown command: "{line}"', const.OK_TOKEN]
