import pytest

from processctrl.example import build_ping_process, main
from processctrl.process import ProcessError


def test_windows_ping_is_continuous():
    proc = build_ping_process("windows")
    assert proc.program == "ping"
    assert proc.args == ("-t", "localhost")
    assert proc.buffer_size == 10


@pytest.mark.parametrize("platform", ["linux", "darwin"])
def test_unix_ping_uses_interval(platform):
    proc = build_ping_process(platform)
    assert proc.program == "ping"
    assert proc.args == ("-i", "1", "localhost")
    assert proc.buffer_size == 10


def test_built_process_is_not_started():
    proc = build_ping_process("linux")
    assert proc.is_running() is False
    assert proc.is_paused() is False
    assert proc.pid() == -1


def test_built_process_cannot_be_controlled_before_run():
    proc = build_ping_process("windows")
    with pytest.raises(ProcessError, match="process is not running"):
        proc.terminate()
    with pytest.raises(ProcessError, match="not running or already paused"):
        proc.pause()


def test_main_help_exits_cleanly(capsys):
    with pytest.raises(SystemExit) as info:
        main(["--help"])
    assert info.value.code == 0
    assert "ping" in capsys.readouterr().out


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as info:
        main(["--no-such-option"])
    assert info.value.code == 2