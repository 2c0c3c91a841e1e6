"""Run the sparse Izhikevich network model with one command."""

from __future__ import annotations

import math
import os
import sys
from dataclasses import dataclass
from pathlib import Path

import numpy as np

from gennprojects.formatting import format_number, scalar_defines
from gennprojects.launcher import (
    CommandFailed,
    build_command,
    ensure_output_dir,
    genn_path,
    run_checked,
    simulator_command,
)

USAGE = (
    "usage: generate_run <CPU=0, GPU=1> <nNeurons> <nConn> <gscale> <outdir> "
    '<model name> <debug mode? (0/1)> <ftype "FLOAT" or "DOUBLE"> '
    "<use previous connectivity? (0/1)>"
)
INPUT_DIR = "inputfiles"
SIMULATOR = "Izh_sim_sparse"


@dataclass(frozen=True)
class IzhSparseRun:
    """Command-line settings for one sparse Izhikevich run."""

    which: int
    n_total: int
    n_conn: int
    gscale: float
    out_base: str
    model_name: str
    debug: int
    ftype: str
    reuse_connectivity: int

    @property
    def out_dir(self):
        return self.out_base + "_output"

    @property
    def mean_g_exc(self):
        return 0.5 * self.gscale

    @property
    def mean_g_inh(self):
        return -1.0 * self.gscale


def parse_args(argv):
    """Build an IzhSparseRun from the nine command-line arguments."""
    args = list(argv)
    if len(args) != 9:
        raise ValueError(USAGE)
    which, n_total, n_conn, gscale, out_base, model_name, debug, ftype, reuse = args
    return IzhSparseRun(
        which=int(which),
        n_total=int(n_total),
        n_conn=int(n_conn),
        gscale=float(gscale),
        out_base=out_base,
        model_name=model_name,
        debug=int(debug),
        ftype=ftype,
        reuse_connectivity=int(reuse),
    )


def population_sizes(n_total):
    """Split ``n_total`` neurons into (excitatory, inhibitory) counts, 4:1."""
    n_exc = math.ceil(4 * n_total / 5)
    return n_exc, n_total - n_exc


def max_connections(path, n_neurons):
    """Return the largest per-neuron connection count in an index file.

    The file holds ``n_neurons + 1`` native unsigned 32-bit row offsets.
    """
    offsets = np.fromfile(path, dtype=np.uint32, count=n_neurons + 1)
    if offsets.size < n_neurons + 1:
        raise ValueError(
            f"{path}: expected {n_neurons + 1} offsets, found {offsets.size}"
        )
    if n_neurons == 0:
        return 0
    return int(np.diff(offsets).max())


def sizes_header(n_exc, n_inh, max_conns, ftype):
    """Return the text of the population size header."""
    lines = [f"#define _NExc {n_exc}", f"#define _NInh {n_inh}"]
    lines += [f"#define _NMaxConnP{i} {n}" for i, n in enumerate(max_conns)]
    lines += scalar_defines(ftype, numeric=False)
    return "".join(line + "\n" for line in lines)


def _connectivity_command(run, genn):
    return " ".join(
        [
            f"{genn}/userproject/tools/gen_syns_sparse_izhModel",
            str(run.n_total),
            str(run.n_conn),
            format_number(run.mean_g_exc),
            format_number(run.mean_g_inh),
            f"{INPUT_DIR}/g{run.model_name}",
        ]
    )


def main(argv=None):
    """Generate connectivity, write sizes, build the model and run it."""
    args = sys.argv[1:] if argv is None else argv
    try:
        run = parse_args(args)
        genn = genn_path()
    except (ValueError, LookupError) as exc:
        print(exc, file=sys.stderr)
        return 1

    n_exc, n_inh = population_sizes(run.n_total)
    ensure_output_dir(run.out_dir)
    ensure_output_dir(INPUT_DIR)

    windows = os.name == "nt"
    try:
        if run.reuse_connectivity == 0:
            run_checked(_connectivity_command(run, genn))

        prefix = f"{INPUT_DIR}/g{run.model_name}_indInG_"
        max_conns = []
        for suffix, count in (("ee", n_exc), ("ei", n_exc), ("ie", n_inh), ("ii", n_inh)):
            found = max_connections(prefix + suffix, count)
            print(
                f"maximum postsynaptic connection per neuron in {prefix + suffix} is {found}",
                file=sys.stderr,
            )
            max_conns.append(found)

        header = Path(genn) / "userproject" / "include" / "sizes.h"
        header.write_text(sizes_header(n_exc, n_inh, max_conns, run.ftype))

        run_checked(build_command(run.model_name, run.debug, windows))

        print("running test...")
        run_checked(
            simulator_command(SIMULATOR, [run.out_base, str(run.which)], run.debug, windows)
        )
    except CommandFailed as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        print("Exiting...", file=sys.stderr)
        return 1
    except (OSError, ValueError) as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1
    return 0