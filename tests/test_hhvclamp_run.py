import subprocess

import pytest

from gennprojects.hhvclamp_run import HHVClampRun, main, parameters_header, parse_args


@pytest.fixture
def genn_tree(tmp_path, monkeypatch):
    genn = tmp_path / "genn"
    (genn / "userproject" / "include").mkdir(parents=True)
    work = tmp_path / "work"
    work.mkdir()
    monkeypatch.setenv("GENN_PATH", str(genn))
    monkeypatch.chdir(work)
    return genn, work


def _recorder(monkeypatch, status=0):
    calls = []

    def fake_run(command, *args, **kwargs):
        calls.append(command)
        return subprocess.CompletedProcess(command, status)

    monkeypatch.setattr(subprocess, "run", fake_run)
    return calls


def test_parse_args_fields():
    run = parse_args(["1", "2", "10", "200.5", "out", "0"])
    assert run == HHVClampRun(
        which=1, protocol=2, n_pop=10, total_t=200.5, out_base="out", debug=0
    )
    assert run.out_dir == "out_output"


@pytest.mark.parametrize("argv", [[], ["1", "2", "3"], ["1"] * 7])
def test_parse_args_wrong_count(argv):
    with pytest.raises(ValueError):
        parse_args(argv)


def test_parse_args_bad_number():
    with pytest.raises(ValueError):
        parse_args(["x", "2", "10", "200", "out", "0"])


def test_parameters_header():
    assert parameters_header(10, 200.0) == "#define NPOP 10\n#define TOTALT 200\n"


def test_parameters_header_keeps_fraction():
    text = parameters_header(64, 1000.5)
    assert text.splitlines()[0] == "#define NPOP 64"
    assert float(text.splitlines()[1].split()[-1]) == 1000.5


def test_main_runs_chain(genn_tree, monkeypatch):
    genn, work = genn_tree
    calls = _recorder(monkeypatch)
    assert main(["1", "2", "12", "300", "out", "0"]) == 0
    header = genn / "userproject" / "include" / "HHVClampParameters.h"
    assert header.read_text() == parameters_header(12, 300.0)
    assert (work / "out_output").is_dir()
    assert len(calls) == 2
    assert "buildmodel" in calls[0] and "HHVClamp 0" in calls[0]
    assert "VClampGA" in calls[1]
    assert calls[1].endswith("out 1 2")


def test_main_stops_on_build_failure(genn_tree, monkeypatch, capsys):
    calls = _recorder(monkeypatch, status=2)
    assert main(["1", "2", "12", "300", "out", "0"]) == 1
    assert len(calls) == 1
    err = capsys.readouterr().err
    assert "ERROR: Following call failed with status 2" in err
    assert "Exiting..." in err


def test_main_usage_error(capsys):
    assert main(["1"]) == 1
    assert "usage: generate_run" in capsys.readouterr().err