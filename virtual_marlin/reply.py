# virtual_marlin/virtual_marlin/reply.py
"""
Reply framing helpers.

Marlin terminates the response to every command with a line containing
``ok``. Diagnostic lines (temperature reports, echo messages) may precede
it. These helpers work on raw reply payloads as received from the device,
either ``bytes`` or ``str``, with ``\\n`` or ``\\r\\n`` line endings.
"""
from typing import List, Optional, Union

from .constants import CARRIAGE_RETURN
from .constants import LINE_TERMINATOR
from .constants import OK_TOKEN
from .constants import REPLY_ENCODING

Reply = Union[bytes, bytearray, str]


def reply_to_text(reply: Reply) -> str:
    """Decodes a raw reply payload into text."""
    if isinstance(reply, (bytes, bytearray)):
        return bytes(reply).decode(REPLY_ENCODING, errors="replace")
    return str(reply)


def split_reply_lines(reply: Reply) -> List[str]:
    """
    Splits a reply on newlines and strips the CR left by DOS line endings.

    A payload without any terminator is returned as a single line. Empty
    lines are kept so callers can see the exact framing.
    """
    return [
        line.rstrip(CARRIAGE_RETURN)
        for line in reply_to_text(reply).split(LINE_TERMINATOR)
    ]


def last_reply_line(reply: Reply) -> Optional[str]:
    """Returns the last non-empty line of a reply, or None if there is none."""
    for line in reversed(split_reply_lines(reply)):
        if line:
            return line
    return None


def is_command_complete(reply: Reply) -> bool:
    """
    True if the last non-empty line contains ``ok``.

    This is a plain substring test: ``okay`` and ``not ok yet`` both count.
    """
    line = last_reply_line(reply)
    return line is not None and OK_TOKEN in line
