import pytest

from gennprojects.launcher import (
    CommandFailed,
    build_command,
    ensure_output_dir,
    genn_path,
    run_checked,
    simulator_command,
)


def test_genn_path_from_mapping():
    assert genn_path({"GENN_PATH": "/opt/genn"}) == "/opt/genn"


def test_genn_path_missing():
    with pytest.raises(LookupError):
        genn_path({})


def test_build_command_unix_release():
    assert build_command("HHVClamp", 0, windows=False) == (
        "cd model && buildmodel.sh HHVClamp 0 && make clean && make release"
    )


def test_build_command_unix_debug():
    command = build_command("MBody1", 1, windows=False)
    assert command.startswith("cd model && buildmodel.sh MBody1 1")
    assert command.endswith(" debug")


def test_build_command_windows():
    release = build_command("Izh_sparse", 0, windows=True)
    debug = build_command("Izh_sparse", 1, windows=True)
    assert release.startswith("cd model && buildmodel.bat Izh_sparse 0")
    assert "nmake /nologo /f WINmakefile clean" in release
    assert not release.endswith("DEBUG=1")
    assert debug.endswith(" DEBUG=1")


def test_simulator_command_unix():
    assert simulator_command("VClampGA", ["out", "1", "0"], 0, windows=False) == (
        "model/VClampGA out 1 0"
    )


def test_simulator_command_unix_debug():
    command = simulator_command("classol_sim", ["run", 1], 1, windows=False)
    assert command.startswith("cuda-gdb -tui --args model/classol_sim")
    assert command.endswith(" run 1")


def test_simulator_command_windows():
    release = simulator_command("VClampGA", ["x"], 0, windows=True)
    debug = simulator_command("VClampGA", ["x"], 1, windows=True)
    assert release.startswith("model\\VClampGA.exe")
    assert debug.startswith("devenv /debugexe model\\VClampGA.exe")


def test_run_checked_success():
    assert run_checked("exit 0") is None


def test_run_checked_failure():
    with pytest.raises(CommandFailed) as info:
        run_checked("exit 3")
    assert info.value.status == 3
    assert info.value.command == "exit 3"
    assert "exit 3" in str(info.value)


def test_ensure_output_dir(tmp_path, capsys):
    target = tmp_path / "out_output"
    assert ensure_output_dir(str(target)) is True
    assert target.is_dir()
    assert ensure_output_dir(str(target)) is False
    assert "Directory cannot be created" in capsys.readouterr().err