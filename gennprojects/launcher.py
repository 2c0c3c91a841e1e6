"""Helpers shared by the run scripts: building and starting the tool chain."""

from __future__ import annotations

import os
import subprocess
import sys

OUTPUT_DIR_MODE = 0o771


class CommandFailed(RuntimeError):
    """A shell command of the tool chain ended with a non-zero status."""

    def __init__(self, command, status):
        self.command = command
        self.status = status
        super().__init__(f"Following call failed with status {status}:\n{command}")


def _is_windows(windows):
    return os.name == "nt" if windows is None else bool(windows)


def genn_path(environ=None):
    """Return the GENN_PATH setting from ``environ`` (default: the process)."""
    env = os.environ if environ is None else environ
    try:
        return env["GENN_PATH"]
    except KeyError:
        raise LookupError("GENN_PATH is not set") from None


def build_command(model_name, debug, windows=None):
    """Return the shell command that generates and compiles a model."""
    if _is_windows(windows):
        command = f"cd model && buildmodel.bat {model_name} {debug}"
        command += " && nmake /nologo /f WINmakefile clean && nmake /nologo /f WINmakefile"
        if debug == 1:
            command += " DEBUG=1"
    else:
        command = f"cd model && buildmodel.sh {model_name} {debug}"
        command += " && make clean && make"
        command += " debug" if debug == 1 else " release"
    return command


def simulator_command(executable, args, debug, windows=None):
    """Return the shell command that starts a compiled simulator."""
    if _is_windows(windows):
        program = f"model\\{executable}.exe"
        if debug == 1:
            program = "devenv /debugexe " + program
    else:
        program = f"model/{executable}"
        if debug == 1:
            program = "cuda-gdb -tui --args " + program
    return " ".join([program, *(str(arg) for arg in args)])


def run_checked(command):
    """Run ``command`` through the shell; raise CommandFailed on failure."""
    completed = subprocess.run(command, shell=True)
    if completed.returncode != 0:
        raise CommandFailed(command, completed.returncode)


def ensure_output_dir(path):
    """Create ``path``; return False (with a warning) if it cannot be made."""
    try:
        os.mkdir(path, OUTPUT_DIR_MODE)
    except OSError:
        print("Directory cannot be created. It may exist already.", file=sys.stderr)
        return False
    return True