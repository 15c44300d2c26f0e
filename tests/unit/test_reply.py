import pytest

from virtual_marlin.executor import VirtualExecutor
from virtual_marlin.reply import (
    is_command_complete,
    last_reply_line,
    reply_to_text,
    split_reply_lines,
)


class TestSplitReplyLines:
    def test_unix_line_endings(self):
        assert split_reply_lines("T:20.0\nok\n") == ["T:20.0", "ok", ""]

    def test_dos_line_endings_are_stripped(self):
        assert split_reply_lines("T:20.0\r\nok\r\n") == ["T:20.0", "ok", ""]

    def test_partial_line_is_single_line(self):
        assert split_reply_lines("echo:busy") == ["echo:busy"]

    def test_bytes_are_decoded(self):
        assert split_reply_lines(b"ok\r\n") == ["ok", ""]

    def test_empty_reply(self):
        assert split_reply_lines("") == [""]

    def test_whitespace_is_not_trimmed(self):
        assert split_reply_lines("  ok  \n") == ["  ok  ", ""]


class TestLastReplyLine:
    def test_skips_trailing_empty_lines(self):
        assert last_reply_line("X:0.00\nok\n\n") == "ok"

    def test_none_for_empty_reply(self):
        assert last_reply_line("") is None
        assert last_reply_line("\r\n\n") is None

    def test_partial_line(self):
        assert last_reply_line("T:20.0\nech") == "ech"


def test_reply_to_text_accepts_bytearray():
    assert reply_to_text(bytearray(b"ok\n")) == "ok\n"


@pytest.mark.parametrize(
    "reply",
    [
        "ok",
        "ok\n",
        "ok\r\n",
        b"ok\r\n",
        "T:200 ok",
        "T:20.0 /0.0 B:20.0 /0.0\nok\n",
        "echo:Unknown command: \"XYZ\"\nok\n",
        "not ok yet",
        "okay",
        "busy\nok T:20.0 /0.0",
    ],
)
def test_complete_replies(reply):
    assert is_command_complete(reply) is True
    assert VirtualExecutor.validator("G28", reply) is True


@pytest.mark.parametrize(
    "reply",
    [
        "",
        b"",
        "\n",
        "\r\n",
        "busy",
        "ok\nbusy",
        "ok\r\necho:busy: processing\r\n",
        "X:0.00 Y:0.00 Z:0.00",
        "OK",
        "o\nk",
    ],
)
def test_incomplete_replies(reply):
    assert is_command_complete(reply) is False
    assert VirtualExecutor.validator("G28", reply) is False


def test_validator_ignores_command():
    assert VirtualExecutor.validator(None, "ok") is True
    assert VirtualExecutor.validator("M105", "busy") is False


def test_validator_on_instance():
    executor = VirtualExecutor()
    assert executor.validator("M114", "X:0.00\nok\n") is True
