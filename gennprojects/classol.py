"""Runtime side of the mushroom-body (classol) olfaction models.

The network has four neuron populations: projection neurons (PN), Kenyon
cells (KC), lateral horn interneurons (LHI) and detector neurons (DN).
This module reads and writes the synaptic conductance files and the input
patterns, schedules the input patterns during a run, and writes the state
and spike output.  The neuron update is supplied by the caller.
"""

from __future__ import annotations

import sys

import numpy as np

from gennprojects.formatting import DBL_MIN, FLT_MIN
from gennprojects.mbody_models import DT, KCDN_PARAMS, mbody1_model

PATTERNNO = 100
INPUT_BASE_RATE = 2e-04
T_REPORT_TME = 10000.0
SYN_OUT_TME = 20000.0
PAT_TIME = 100.0
PATFTIME = 1.5
TOTAL_TME = 5000.0

GMAX_INDEX = 6
GMID_INDEX = 7
GSLOPE_INDEX = 8

_PREVIEW = 20
_LONG_PREVIEW = 100


def _scalar_type(ftype):
    return np.float64 if ftype.lower() == "double" else np.float32


def _scalar_min(ftype):
    return DBL_MIN if ftype.lower() == "double" else FLT_MIN


def raw_kcdn_conductance(g, params=KCDN_PARAMS, scalar_min=FLT_MIN):
    """Return the raw (pre-sigmoid) conductances behind KC-DN conductances ``g``.

    Values below ``2 * scalar_min`` are raised to that floor first.  Returns
    ``(g, raw, corrected)``: the floored conductances, the raw conductances
    and the indices that were corrected.
    """
    g = np.array(g, copy=True)
    dtype = g.dtype if np.issubdtype(g.dtype, np.floating) else np.float64
    g = g.astype(dtype)
    floor = 2.0 * scalar_min
    corrected = np.flatnonzero(g < floor)
    g[corrected] = floor
    tmp = (g.astype(np.float64) / params[GMAX_INDEX] * 2.0).astype(dtype)
    tmp = tmp.astype(np.float64)
    with np.errstate(divide="ignore", invalid="ignore"):
        raw = 0.5 * np.log(tmp / (2.0 - tmp)) / params[GSLOPE_INDEX] + params[GMID_INDEX]
    return g, raw.astype(dtype), corrected


def _identity(values):
    return np.asarray(values)


class Classol:
    """Inputs, connectivity and output of a mushroom-body simulation.

    ``to_threshold`` turns firing probabilities into the values handed to
    the Poisson input neurons; by default the probabilities are used as
    they are.
    """

    def __init__(self, sizes, model=None, to_threshold=None,
                 pat_set_time=None, pat_fire_time=None):
        self.model = mbody1_model(sizes) if model is None else model
        self.ftype = sizes.ftype
        self.dtype = np.dtype(_scalar_type(sizes.ftype))
        self.scalar_min = _scalar_min(sizes.ftype)
        self.to_threshold = _identity if to_threshold is None else to_threshold
        self.pat_set_time = int(PAT_TIME / DT) if pat_set_time is None else int(pat_set_time)
        self.pat_fire_time = int(PATFTIME / DT) if pat_fire_time is None else int(pat_fire_time)
        if self.pat_set_time <= 0:
            raise ValueError("pattern set time must be positive")

        n_pn, n_kc, n_lhi, n_dn = (p.size for p in self.model.neurons)
        self.n_pn, self.n_kc, self.n_lhi, self.n_dn = n_pn, n_kc, n_lhi, n_dn

        self.g_pnkc = np.zeros(n_pn * n_kc, dtype=self.dtype)
        self.g_pnlhi = np.zeros(n_pn * n_lhi, dtype=self.dtype)
        self.g_kcdn = np.zeros(n_kc * n_dn, dtype=self.dtype)
        self.g_raw_kcdn = np.zeros(n_kc * n_dn, dtype=self.dtype)
        self.p_pattern = np.zeros(n_pn * PATTERNNO, dtype=self.dtype)
        self.pattern = np.zeros(n_pn * PATTERNNO, dtype=self.dtype)
        self.baserates = np.zeros(n_pn, dtype=self.dtype)

        self._rates_source = "baserates"
        self.offset = 0
        self.t = 0.0
        self.iT = 0
        self.sum_pn = 0
        self.sum_kc = 0
        self.sum_lhi = 0
        self.sum_dn = 0

    @property
    def the_rates(self):
        """The rate array currently driving the input neurons."""
        return self.pattern if self._rates_source == "pattern" else self.baserates

    def _read_doubles(self, stream, count, what):
        data = stream.read(count * 8)
        if len(data) != count * 8:
            raise ValueError(f"{what}: expected {count * 8} bytes, found {len(data)}")
        return np.frombuffer(data, dtype=np.float64).astype(self.dtype), len(data)

    @staticmethod
    def _write_doubles(stream, values):
        stream.write(np.asarray(values, dtype=np.float64).tobytes())

    @staticmethod
    def _preview(values, count):
        return "".join(f"{v:f} " for v in values[:count])

    def read_pnkc(self, stream):
        """Read the PN-KC conductances (native doubles); return bytes read."""
        values, nbytes = self._read_doubles(stream, self.g_pnkc.size, "pnkc")
        self.g_pnkc[:] = values
        print("read pnkc ... ")
        print(f"{nbytes} bytes, values start with: ")
        print(self._preview(self.g_pnkc, _PREVIEW) + "\n")
        return nbytes

    def write_pnkc(self, stream):
        """Write the PN-KC conductances as native doubles."""
        self._write_doubles(stream, self.g_pnkc)
        print("wrote pnkc ... ")

    def read_pnlhi(self, stream):
        """Read the PN-LHI conductances (native doubles); return bytes read."""
        values, nbytes = self._read_doubles(stream, self.g_pnlhi.size, "pnlhi")
        self.g_pnlhi[:] = values
        print("read pnlhi ... ")
        print(f"{nbytes} bytes, values start with: ")
        print(self._preview(self.g_pnlhi, _PREVIEW) + "\n")
        return nbytes

    def write_pnlhi(self, stream):
        """Write the PN-LHI conductances as native doubles."""
        self._write_doubles(stream, self.g_pnlhi)
        print("wrote pnlhi ... ")

    def read_kcdn(self, stream):
        """Read the KC-DN conductances and derive the raw conductances.

        Returns the number of bytes read.
        """
        values, nbytes = self._read_doubles(stream, self.g_kcdn.size, "kcdn")
        print("read kcdn ... ")
        print(f"{nbytes} bytes, values start with: ")
        print(self._preview(values, _LONG_PREVIEW) + "\n")
        params = self.model.synapses[3].params or KCDN_PARAMS
        g, raw, corrected = raw_kcdn_conductance(values, params, self.scalar_min)
        floor = 2 * self.scalar_min
        for index in corrected:
            print(
                f"Too low conductance value {values[index]:e} detected and set to "
                f"2*SCALAR_MIN= {floor:e}, at index {index} "
            )
        self.g_kcdn[:] = g
        self.g_raw_kcdn[:] = raw
        print(f"Total number of low value corrections: {len(corrected)}", file=sys.stderr)
        return nbytes

    def write_kcdn(self, stream):
        """Write the KC-DN conductances as native doubles."""
        self._write_doubles(stream, self.g_kcdn)
        print("wrote kcdn ... ")

    def read_input_patterns(self, stream):
        """Read PATTERNNO input patterns of firing probabilities.

        Returns the number of bytes read.
        """
        values, nbytes = self._read_doubles(stream, self.p_pattern.size, "patterns")
        self.p_pattern[:] = values
        print("read patterns ... ")
        print(f"{nbytes} bytes, input pattern values start with: ")
        print(self._preview(self.p_pattern, _LONG_PREVIEW) + "\n")
        self.pattern = np.asarray(self.to_threshold(self.p_pattern))
        return nbytes

    def generate_baserates(self):
        """Set every input neuron's baseline rate from INPUT_BASE_RATE."""
        base = np.asarray(self.to_threshold(np.array([INPUT_BASE_RATE], dtype=self.dtype)))
        self.baserates = np.full(self.n_pn, base[0], dtype=base.dtype)
        print("generated basereates ... ")
        print(f"baserate value: {INPUT_BASE_RATE:f} \n")
        return self.baserates

    def pattern_schedule(self, step_index):
        """Switch the input at time step ``step_index``; return (rates, offset).

        A new pattern starts every ``pat_set_time`` steps and is replaced by
        the baseline rates ``pat_fire_time`` steps later.
        """
        phase = step_index % self.pat_set_time
        if phase == 0:
            pno = (step_index // self.pat_set_time) % PATTERNNO
            self._rates_source = "pattern"
            self.offset = pno * self.n_pn
        if phase == self.pat_fire_time:
            self._rates_source = "baserates"
            self.offset = 0
        return self.the_rates, self.offset

    def run(self, runtime, step):
        """Advance for ``runtime`` ms, calling ``step(rates, offset, t)`` each step.

        Returns the number of time steps taken.
        """
        steps = int(runtime / DT)
        for _ in range(steps):
            rates, offset = self.pattern_schedule(self.iT)
            step(rates, offset, self.t)
            self.iT += 1
            self.t = self.iT * DT
        return steps

    def output_state(self, stream, voltages):
        """Write the time and the PN, KC, LHI and DN potentials as one line."""
        values = np.concatenate([np.asarray(v, dtype=float).ravel() for v in voltages])
        stream.write(f"{self.t:f} " + "".join(f"{v:f} " for v in values) + "\n")

    def _offsets(self):
        return [0, *self.model.cumulative_sizes()[:-1]]

    def output_spikes(self, stream, spikes):
        """Write one "time index" line per spike, numbering neurons network-wide.

        ``spikes`` holds the spiking neuron indices of PN, KC, LHI and DN.
        """
        for offset, indices in zip(self._offsets(), spikes):
            for index in indices:
                stream.write(f"{self.t:f} {offset + int(index)}\n")

    def sum_spikes(self, spikes):
        """Add the spike counts of PN, KC, LHI and DN to the running totals."""
        pn, kc, lhi, dn = spikes
        self.sum_pn += len(pn)
        self.sum_kc += len(kc)
        self.sum_lhi += len(lhi)
        self.sum_dn += len(dn)