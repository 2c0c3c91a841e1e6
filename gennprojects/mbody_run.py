"""Run one of the mushroom-body (classol) models with one command."""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import NamedTuple

import numpy as np

from gennprojects.formatting import format_number, scalar_defines
from gennprojects.launcher import (
    CommandFailed,
    build_command,
    ensure_output_dir,
    genn_path as _genn_path,
    run_checked,
    simulator_command,
)

USAGE = (
    'usage: generate_run <CPU=0, AUTO GPU=1, GPU n= "n+2"> <nAL> <nMB> <nLHI> '
    '<nLb> <gscale> <outdir> <model name> <debug mode? (0/1)> '
    '<ftype "DOUBLE" or "FLOAT"> <reuse input&connectivty? 0/1>'
)
SIMULATOR = "classol_sim"
INPUT_PATTERN_SETTINGS = "10 10 0.1 0.05 1.0 2e-04"


class Variant(enum.Enum):
    """The mushroom-body model variants, keyed by model name."""

    MBODY1 = "MBody1"
    DELAYED_SYN = "MBody_delayedSyn"
    INDIVIDUAL_ID = "MBody_individualID"

    @classmethod
    def for_model_name(cls, name):
        """Return the variant for ``name``; unknown names use MBody1 rules."""
        try:
            return cls(name)
        except ValueError:
            return cls.MBODY1

    @property
    def individual_id(self):
        return self is Variant.INDIVIDUAL_ID


class SynapseScales(NamedTuple):
    """Conductance and threshold scales handed to the connectivity tools."""

    pnkc_gsyn: float
    pnkc_gsyn_sigma: float
    kcdn_gsyn: float
    kcdn_gsyn_sigma: float
    pnlhi_theta: float


def synapse_scales(n_al, n_mb, gscale):
    """Compute the synapse scales from the population sizes and ``gscale``.

    The size-dependent factors are evaluated in single precision before being
    scaled by ``gscale`` in double precision.
    """
    f32 = np.float32
    gscale = float(gscale)
    pn_factor = f32(100.0) / f32(n_al)
    kc_factor = f32(2500.0) / f32(n_mb)
    pnkc = float(pn_factor) * gscale
    return SynapseScales(
        pnkc_gsyn=pnkc,
        pnkc_gsyn_sigma=pnkc / float(f32(15.0)),
        kcdn_gsyn=float(kc_factor * f32(0.1)) * gscale,
        kcdn_gsyn_sigma=float(kc_factor * f32(0.01)) * gscale,
        pnlhi_theta=float(pn_factor * f32(14.0)) * gscale,
    )


@dataclass(frozen=True)
class MBodyRun:
    """Command-line settings for one mushroom-body run."""

    which: int
    n_al: int
    n_mb: int
    n_lhi: int
    n_lb: int
    gscale: float
    out_base: str
    model_name: str
    debug: int
    ftype: str
    reuse_inputs: int
    variant: Variant = Variant.MBODY1

    @property
    def out_dir(self):
        return self.out_base + "_output"

    @property
    def scales(self):
        return synapse_scales(self.n_al, self.n_mb, self.gscale)


def parse_args(argv, variant=None):
    """Build an MBodyRun from the eleven command-line arguments.

    Without an explicit ``variant`` it is chosen from the model name.
    """
    args = list(argv)
    if len(args) != 11:
        raise ValueError(USAGE)
    (which, n_al, n_mb, n_lhi, n_lb, gscale, out_base,
     model_name, debug, ftype, reuse) = args
    if variant is None:
        variant = Variant.for_model_name(model_name)
    return MBodyRun(
        which=int(which),
        n_al=int(n_al),
        n_mb=int(n_mb),
        n_lhi=int(n_lhi),
        n_lb=int(n_lb),
        gscale=float(gscale),
        out_base=out_base,
        model_name=model_name,
        debug=int(debug),
        ftype=ftype,
        reuse_inputs=int(reuse),
        variant=Variant(variant),
    )


def sizes_header(run):
    """Return the text of the population size header for ``run``."""
    lines = [
        f"#define _NAL {run.n_al}",
        f"#define _NMB {run.n_mb}",
        f"#define _NLHI {run.n_lhi}",
        f"#define _NLB {run.n_lb}",
    ]
    lines += scalar_defines(run.ftype, numeric=True)
    if run.variant.individual_id:
        lines.append(f"#define gPNKC_GLOBAL {format_number(run.scales.pnkc_gsyn)}")
    return "".join(line + "\n" for line in lines)


def _tool_command(genn, tool, args, run, extension):
    target = f"{run.out_dir}/{run.out_base}.{extension}"
    parts = [f"{genn}/userproject/tools/{tool}", *args, target]
    return " ".join(parts) + f" 1> {target}.msg 2>&1"


def generator_commands(run, genn_path):
    """Return the connectivity and input-pattern generator commands, in order."""
    scales = run.scales

    def num(value):
        return format_number(value, showpoint=True)

    if run.variant.individual_id:
        pnkc = _tool_command(
            genn_path, "gen_pnkc_syns_indivID",
            [str(run.n_al), str(run.n_mb), "0.5"], run, "pnkc",
        )
    else:
        pnkc = _tool_command(
            genn_path, "gen_pnkc_syns",
            [str(run.n_al), str(run.n_mb), "0.5",
             num(scales.pnkc_gsyn), num(scales.pnkc_gsyn_sigma)],
            run, "pnkc",
        )
    kcdn = _tool_command(
        genn_path, "gen_kcdn_syns",
        [str(run.n_mb), str(run.n_lb), num(scales.kcdn_gsyn),
         num(scales.kcdn_gsyn_sigma), num(scales.kcdn_gsyn_sigma)],
        run, "kcdn",
    )
    pnlhi = _tool_command(
        genn_path, "gen_pnlhi_syns",
        [str(run.n_al), str(run.n_lhi), num(scales.pnlhi_theta), "15"],
        run, "pnlhi",
    )
    inpat = _tool_command(
        genn_path, "gen_input_structured",
        [str(run.n_al), INPUT_PATTERN_SETTINGS], run, "inpat",
    )
    return [pnkc, kcdn, pnlhi, inpat]


def main(argv=None):
    """Write sizes, build the model, generate inputs and run the simulator."""
    args = sys.argv[1:] if argv is None else argv
    try:
        run = parse_args(args)
        genn = _genn_path()
    except (ValueError, LookupError) as exc:
        print(exc, file=sys.stderr)
        return 1

    header = Path(genn) / "userproject" / "include" / "sizes.h"
    header.write_text(sizes_header(run))

    windows = os.name == "nt"
    try:
        command = build_command(run.model_name, run.debug, windows)
        print(command, file=sys.stderr)
        run_checked(command)

        ensure_output_dir(run.out_dir)

        if run.reuse_inputs == 0:
            for command in generator_commands(run, genn):
                run_checked(command)

        print("running test...")
        run_checked(
            simulator_command(SIMULATOR, [run.out_base, str(run.which)], run.debug, windows)
        )
    except CommandFailed as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        print("Exiting...", file=sys.stderr)
        return 1
    return 0