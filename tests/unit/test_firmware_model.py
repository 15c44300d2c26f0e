import pytest

from virtual_marlin import constants as const
from virtual_marlin.config import SimulatorConfig
from virtual_marlin.firmware_model import SimulatedFirmware


@pytest.fixture
def firmware():
    return SimulatedFirmware(SimulatorConfig(extruder_temp=215.0, bed_temp=60.0, max_dwell_s=1.0))


class TestNormalizeCommand:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("G28", "G28"),
            ("  G1 X10 Y5  ", "G1 X10 Y5"),
            ("G1 X10 ; move right", "G1 X10"),
            ("N12 M105*37", "M105"),
            ("; only a comment", ""),
            ("", ""),
            (b"M114\n", "M114"),
        ],
    )
    def test_normalize(self, raw, expected):
        assert SimulatedFirmware.normalize_command(raw) == expected

    def test_command_code(self):
        assert SimulatedFirmware.command_code("m105 extra") == "M105"
        assert SimulatedFirmware.command_code("") == ""


class TestProcessCommand:
    def test_plain_move_is_acknowledged(self, firmware):
        assert firmware.process_command("G1 X10 F3000") == ["ok"]

    def test_tool_change_is_acknowledged(self, firmware):
        assert firmware.process_command("T0") == ["ok"]

    def test_blank_line_has_no_reply(self, firmware):
        assert firmware.process_command("   ; nothing here") == []

    def test_temperature_report_uses_config(self, firmware):
        reply = firmware.process_command("M105")
        assert reply == ["ok T:215.0 /0.0 B:60.0 /0.0 @:0 B@:0"]

    def test_position_report(self, firmware):
        assert firmware.process_command("M114") == [const.POSITION_REPORT, "ok"]

    def test_firmware_info(self, firmware):
        info, ok = firmware.process_command("M115")
        assert info.startswith(f"FIRMWARE_NAME:{const.FIRMWARE_NAME} ")
        assert "EXTRUDER_COUNT:1" in info
        assert ok == "ok"

    def test_unknown_command_echoes_then_ok(self, firmware):
        assert firmware.process_command("HELLO") == ['echo:Unknown command: "HELLO"', "ok"]

    def test_letter_without_number_is_unknown(self, firmware):
        assert firmware.process_command("G")[-1] == "ok"
        assert firmware.process_command("G")[0].startswith("echo:Unknown command")

    def test_response_override(self):
        config = SimulatorConfig(responses={"M105": "T:250.0 /250.0\nok"})
        firmware = SimulatedFirmware(config)
        assert firmware.process_command("M105") == ["T:250.0 /250.0", "ok"]

    def test_every_reply_ends_with_ok(self, firmware):
        for command in ("G28", "M104 S200", "M105", "M114", "M115", "FOO"):
            assert firmware.process_command(command)[-1].startswith("ok")


class TestReplyDelay:
    def test_dwell_milliseconds(self, firmware):
        assert firmware.reply_delay("G4 P500") == pytest.approx(0.5)

    def test_dwell_seconds_is_capped(self, firmware):
        assert firmware.reply_delay("G4 S30") == pytest.approx(1.0)

    def test_other_commands_reply_immediately(self, firmware):
        assert firmware.reply_delay("G1 X4") == 0.0
        assert firmware.reply_delay("G4") == 0.0


def test_lower_case_override_applies():
    firmware = SimulatedFirmware(SimulatorConfig(responses={"m105": "T:250.0\nok"}))
    assert firmware.process_command("M105") == ["T:250.0", "ok"]
