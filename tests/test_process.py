"""Tests for settings, dumpbin discovery and the dumpbin invoker."""

import sys

import pytest

from core.config import Settings
from core.errors import ToolExecutionError, ToolNotFoundError
from core.process import (
    DumpBinInvoker,
    SubprocessRunner,
    find_vs_installation,
    parse_installation_path,
)

from conftest import FakeRunner


# ---------------------------------------------------------------------------
# Settings
# ---------------------------------------------------------------------------


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("DUMPBIN_PATH", "C:\\tools\\dumpbin.exe")
    monkeypatch.setenv("DUMPBIN_TIMEOUT", "30")
    monkeypatch.setenv("LOG_JSON", "1")
    monkeypatch.setenv("MSVC_TOOLSET_VERSION", "14.29.30133")
    monkeypatch.delenv("VSWHERE_PATH", raising=False)
    monkeypatch.delenv("DEBUG", raising=False)

    settings = Settings.from_env()

    assert settings.dumpbin_path == "C:\\tools\\dumpbin.exe"
    assert settings.timeout == 30.0
    assert settings.log_json is True
    assert settings.debug is False
    assert settings.toolset_version == "14.29.30133"
    assert settings.vswhere_path.endswith("vswhere.exe")


def test_dumpbin_under_installation():
    assert Settings().dumpbin_under("C:\\VS\\2017") == (
        "C:\\VS\\2017\\VC\\Tools\\MSVC\\14.13.26128\\bin\\Hostx64\\x64\\dumpbin.exe"
    )


# ---------------------------------------------------------------------------
# vswhere
# ---------------------------------------------------------------------------


def test_parse_installation_path_takes_last_value():
    lines = [
        "instanceId: 1",
        "installationPath: C:\\VS\\2017",
        "instanceId: 2",
        "installationPath: C:\\VS\\2019",
    ]

    assert parse_installation_path(lines) == "C:\\VS\\2019"
    assert parse_installation_path(["instanceId: 1"]) is None


@pytest.fixture
def vswhere(tmp_path) -> str:
    exe = tmp_path / "vswhere.exe"
    exe.write_bytes(b"")
    return str(exe)


def test_find_vs_installation(tmp_path, vswhere):
    installation = tmp_path / "vs"
    installation.mkdir()
    runner = FakeRunner({vswhere: [f"installationPath: {installation}"]})

    assert find_vs_installation(runner, vswhere) == str(installation)
    assert runner.calls == [[vswhere]]


def test_find_vs_installation_failures(tmp_path, vswhere):
    with pytest.raises(ToolNotFoundError, match="Cannot launch"):
        find_vs_installation(FakeRunner({}), str(tmp_path / "missing.exe"))

    with pytest.raises(ToolNotFoundError, match="does not mention"):
        find_vs_installation(FakeRunner({vswhere: ["nothing useful"]}), vswhere)

    runner = FakeRunner({vswhere: [f"installationPath: {tmp_path / 'gone'}"]})
    with pytest.raises(ToolNotFoundError, match="does not exist"):
        find_vs_installation(runner, vswhere)


# ---------------------------------------------------------------------------
# DumpBinInvoker
# ---------------------------------------------------------------------------


def test_invoker_passes_option_then_target(invoker, fake_runner, dumpbin_exe, exports_output):
    lines = invoker.exports("C:\\bin\\sample.dll")

    assert lines == exports_output
    assert fake_runner.calls == [[dumpbin_exe, "/EXPORTS", "C:\\bin\\sample.dll"]]


@pytest.mark.parametrize("method, option", [
    ("imports", "/IMPORTS"),
    ("dependents", "/DEPENDENTS"),
    ("disasm", "/DISASM"),
])
def test_invoker_options(invoker, fake_runner, method, option):
    getattr(invoker, method)("x.dll")

    assert fake_runner.calls[-1][1:] == [option, "x.dll"]


def test_invoker_rejects_empty_arguments(invoker):
    with pytest.raises(ValueError):
        invoker.run()


def test_non_zero_exit_is_an_error(dumpbin_exe):
    runner = FakeRunner({"/EXPORTS": ["LINK : fatal error LNK1181: cannot open input file"]},
                        exit_status=1181)
    invoker = DumpBinInvoker(runner=runner, settings=Settings(), exe_path=dumpbin_exe)

    with pytest.raises(ToolExecutionError) as info:
        invoker.exports("missing.dll")

    assert info.value.exit_status == 1181
    assert "LNK1181" in str(info.value)


def test_rejects_other_executable(tmp_path):
    link = tmp_path / "link.exe"
    link.write_bytes(b"")
    invoker = DumpBinInvoker(runner=FakeRunner({}), settings=Settings(), exe_path=str(link))

    with pytest.raises(ToolNotFoundError, match="Invalid path"):
        invoker.exports("x.dll")


def test_missing_dumpbin_is_reported(tmp_path):
    invoker = DumpBinInvoker(runner=FakeRunner({}), settings=Settings(),
                             exe_path=str(tmp_path / "dumpbin.exe"))

    with pytest.raises(ToolNotFoundError, match="Cannot invoke"):
        invoker.ensure_exe_path()


def test_discovery_through_vswhere(tmp_path, vswhere):
    installation = tmp_path / "vs"
    installation.mkdir()
    runner = FakeRunner({vswhere: [f"installationPath: {installation}"]})
    invoker = DumpBinInvoker(runner=runner, settings=Settings(vswhere_path=vswhere))

    # the discovered Windows-style path does not exist on the test host
    with pytest.raises(ToolNotFoundError, match="Cannot invoke"):
        invoker.ensure_exe_path()

    assert invoker.exe_path.startswith(str(installation))
    assert invoker.exe_path.endswith("dumpbin.exe")


def test_subprocess_runner_captures_lines():
    result = SubprocessRunner(timeout=30).run(
        [sys.executable, "-c", "print('first'); print('second')"]
    )

    assert result.exit_status == 0
    assert result.lines == ["first", "second"]


def test_subprocess_runner_keeps_stderr_out_of_lines():
    result = SubprocessRunner(timeout=30).run([
        sys.executable, "-c",
        "import sys; print('KERNEL32.dll'); print('warning: noise', file=sys.stderr)",
    ])

    assert result.lines == ["KERNEL32.dll"]
    assert result.error_lines == ["warning: noise"]


def test_subprocess_runner_timeout_is_an_execution_error():
    runner = SubprocessRunner(timeout=0.5)

    with pytest.raises(ToolExecutionError, match="timed out") as info:
        runner.run([sys.executable, "-c", "import time; time.sleep(30)"])

    assert info.value.exit_status == -1


def test_subprocess_runner_unlaunchable_command(tmp_path):
    with pytest.raises(ToolNotFoundError, match="Cannot launch"):
        SubprocessRunner(timeout=30).run([str(tmp_path / "no-such-tool.exe"), "/EXPORTS"])
