"""Run the HH voltage-clamp genetic-algorithm model with one command."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path

from gennprojects.formatting import format_number
from gennprojects.launcher import (
    CommandFailed,
    build_command,
    ensure_output_dir,
    genn_path,
    run_checked,
    simulator_command,
)

USAGE = (
    "usage: generate_run <CPU=0, GPU=1> <protocol> <nPop> <totalT> <outdir> "
    "<debug mode? (0/1)>"
)
MODEL_NAME = "HHVClamp"
SIMULATOR = "VClampGA"


@dataclass(frozen=True)
class HHVClampRun:
    """Command-line settings for one voltage-clamp run."""

    which: int
    protocol: int
    n_pop: int
    total_t: float
    out_base: str
    debug: int

    @property
    def out_dir(self):
        return self.out_base + "_output"


def parse_args(argv):
    """Build an HHVClampRun from the six command-line arguments."""
    args = list(argv)
    if len(args) != 6:
        raise ValueError(USAGE)
    which, protocol, n_pop, total_t, out_base, debug = args
    return HHVClampRun(
        which=int(which),
        protocol=int(protocol),
        n_pop=int(n_pop),
        total_t=float(total_t),
        out_base=out_base,
        debug=int(debug),
    )


def parameters_header(n_pop, total_t):
    """Return the text of the model parameter header."""
    return f"#define NPOP {n_pop}\n#define TOTALT {format_number(total_t)}\n"


def main(argv=None):
    """Write parameters, build the model, and run the simulator."""
    args = sys.argv[1:] if argv is None else argv
    try:
        run = parse_args(args)
        genn = genn_path()
    except (ValueError, LookupError) as exc:
        print(exc, file=sys.stderr)
        return 1

    header = Path(genn) / "userproject" / "include" / "HHVClampParameters.h"
    header.write_text(parameters_header(run.n_pop, run.total_t))

    windows = os.name == "nt"
    try:
        command = build_command(MODEL_NAME, run.debug, windows)
        if windows and run.debug == 1:
            print(command)
        print(command, file=sys.stderr)
        run_checked(command)

        ensure_output_dir(run.out_dir)

        print("running test...")
        run_checked(
            simulator_command(
                SIMULATOR,
                [run.out_base, str(run.which), str(run.protocol)],
                run.debug,
                windows,
            )
        )
    except CommandFailed as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        print("Exiting...", file=sys.stderr)
        return 1
    return 0