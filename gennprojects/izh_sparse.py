"""Sparse network of excitatory and inhibitory Izhikevich neurons.

The network has an excitatory population (PExc) and an inhibitory
population (PInh), connected all-to-all by four sparse synapse populations.
Each neuron receives a random direct input current.  The neuron update
itself is supplied by the caller as a step function.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import numpy as np

from gennprojects.mbody_models import NO_DELAY, NetworkModel, NeuronPopulation, SynapsePopulation

DT = 1.0
T_REPORT_TME = 5000.0
TOTAL_TME = 5000.0
INPUT_OUTPUT_LIMIT = 10

EXC_INIT = (
    -65.0,  # V
    0.0,    # U
    0.02,   # a
    0.2,    # b
    -65.0,  # c
    8.0,    # d
)
INH_INIT = (
    -65.0,  # V
    0.0,    # U
    0.02,   # a
    0.25,   # b
    -65.0,  # c
    2.0,    # d
)
SYN_INIT = (0.0,)            # default synaptic conductance
POSTSYN_PARAMS = (0.0, 0.0)  # tau_S, Erev
SYNAPSE_NAMES = (
    ("Exc_Exc", "PExc", "PExc"),
    ("Exc_Inh", "PExc", "PInh"),
    ("Inh_Exc", "PInh", "PExc"),
    ("Inh_Inh", "PInh", "PInh"),
)
INPUT_RULE = "INPRULE"


@dataclass(frozen=True)
class _SparseSynapsePopulation(SynapsePopulation):
    max_conn: int = 0


@dataclass
class _SparseNetworkModel(NetworkModel):
    direct_input: dict = field(default_factory=dict)


@dataclass
class SparseProjection:
    """Sparse connectivity in compressed-row form with per-synapse conductances.

    ``ind_in_g[i]`` to ``ind_in_g[i + 1]`` delimit the synapses of
    presynaptic neuron ``i`` in ``ind`` (postsynaptic indices) and ``g``.
    """

    ind: np.ndarray
    ind_in_g: np.ndarray
    g: np.ndarray

    @property
    def conn_n(self):
        return int(self.ind.size)


def _read_array(stream, dtype, count, what):
    dtype = np.dtype(dtype)
    data = stream.read(dtype.itemsize * count)
    if len(data) != dtype.itemsize * count:
        raise ValueError(
            f"{what}: expected {count} elements, found {len(data) // dtype.itemsize}"
        )
    return np.frombuffer(data, dtype=dtype).copy()


def read_sparse_projection(n_pre, conn_n, f_ind, f_ind_in_g, f_g, dtype=np.float64):
    """Read a sparse projection from three binary streams.

    ``f_g`` holds ``conn_n`` doubles, ``f_ind_in_g`` holds ``n_pre + 1``
    unsigned 32-bit row offsets and ``f_ind`` holds ``conn_n`` signed 32-bit
    postsynaptic indices.  Conductances are converted to ``dtype``.
    """
    g = _read_array(f_g, np.float64, conn_n, "conductances").astype(dtype)
    ind_in_g = _read_array(f_ind_in_g, np.uint32, n_pre + 1, "row offsets")
    ind = _read_array(f_ind, np.int32, conn_n, "indices")
    return SparseProjection(ind=ind, ind_in_g=ind_in_g, g=g)


def izh_sparse_model(n_exc, n_inh, max_conns):
    """Return the sparse Izhikevich network description.

    ``max_conns`` gives the largest number of connections per presynaptic
    neuron for Exc_Exc, Exc_Inh, Inh_Exc and Inh_Inh, in that order.
    """
    max_conns = tuple(int(n) for n in max_conns)
    if len(max_conns) != len(SYNAPSE_NAMES):
        raise ValueError(f"expected {len(SYNAPSE_NAMES)} maximum connection counts")
    neurons = [
        NeuronPopulation("PExc", int(n_exc), "IZHIKEVICH_V", (), EXC_INIT),
        NeuronPopulation("PInh", int(n_inh), "IZHIKEVICH_V", (), INH_INIT),
    ]
    synapses = [
        _SparseSynapsePopulation(
            name, "NSYNAPSE", "SPARSE", "INDIVIDUALG", NO_DELAY, "IZHIKEVICH_PS",
            source, target, SYN_INIT, (), POSTSYN_PARAMS, max_conn=max_conn,
        )
        for (name, source, target), max_conn in zip(SYNAPSE_NAMES, max_conns)
    ]
    return _SparseNetworkModel(
        name="Izh_sparse",
        neurons=neurons,
        synapses=synapses,
        dt=DT,
        direct_input={"PExc": INPUT_RULE, "PInh": INPUT_RULE},
    )


@dataclass
class _IzhPopulation:
    V: np.ndarray
    U: np.ndarray
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray
    d: np.ndarray

    @classmethod
    def create(cls, size, init, dtype):
        return cls(*(np.full(size, value, dtype=dtype) for value in init))

    @property
    def size(self):
        return int(self.V.size)


class IzhNetwork:
    """State, inputs and output of a running sparse Izhikevich network."""

    def __init__(self, n_exc, n_inh, rng=None, dtype=np.float64):
        if n_exc <= 0 or n_inh <= 0:
            raise ValueError("population sizes must be positive")
        self.dtype = np.dtype(dtype)
        self.rng = np.random.default_rng() if rng is None else rng
        self.exc = _IzhPopulation.create(int(n_exc), EXC_INIT, self.dtype)
        self.inh = _IzhPopulation.create(int(n_inh), INH_INIT, self.dtype)
        self.input_exc = np.zeros(int(n_exc), dtype=self.dtype)
        self.input_inh = np.zeros(int(n_inh), dtype=self.dtype)
        self.t = 0.0
        self.iT = 0
        self.sum_exc = 0
        self.sum_inh = 0

    @property
    def sizes(self):
        return (self.exc.size, self.inh.size)

    def randomize_var(self, var, strength):
        """Add ``strength`` times a uniform [0, 1) number to each entry, in place."""
        var += (strength * self.rng.random(var.size)).astype(var.dtype)
        return var

    def randomize_var_sq(self, var, strength):
        """Add ``strength`` times a squared uniform [0, 1) number, in place."""
        r = self.rng.random(var.size)
        var += (strength * r * r).astype(var.dtype)
        return var

    def initialize_all_vars(self):
        """Spread the neuron parameters and set U = b * V in both populations."""
        self.randomize_var(self.inh.a, 0.08)
        self.randomize_var(self.inh.b, -0.05)
        self.randomize_var_sq(self.exc.c, 15.0)
        self.randomize_var_sq(self.exc.d, -6.0)
        for population in (self.exc, self.inh):
            population.U[:] = population.b * population.V

    def create_input_values(self):
        """Draw Gaussian direct inputs: width 5 (excitatory) and 2 (inhibitory)."""
        self.input_exc[:] = 5.0 * self.rng.standard_normal(self.exc.size)
        self.input_inh[:] = 2.0 * self.rng.standard_normal(self.inh.size)

    def gen_alltoall_syns(self, n_pre, n_post, gscale):
        """Return random all-to-all conductances between two populations.

        ``n_pre`` and ``n_post`` are population indices (0 excitatory,
        1 inhibitory); entry ``[i, j]`` is ``gscale`` times a uniform number.
        """
        sizes = self.sizes
        shape = (sizes[n_pre], sizes[n_post])
        return (gscale * self.rng.random(shape)).astype(self.dtype)

    def run(self, runtime, step):
        """Advance for ``runtime`` ms, calling ``step(input_exc, input_inh, t)``.

        Returns the number of time steps taken.
        """
        steps = int(runtime / DT)
        for _ in range(steps):
            step(self.input_exc, self.input_inh, self.t)
            self.t += DT
            self.iT += 1
        return steps

    def sum_spikes(self, exc_spikes, inh_spikes):
        """Add the numbers of spikes of the last time step to the totals."""
        self.sum_exc += len(exc_spikes)
        self.sum_inh += len(inh_spikes)

    def write_input(self, stream):
        """Write the time and the first excitatory inputs as one line."""
        values = self.input_exc[:INPUT_OUTPUT_LIMIT]
        stream.write(f"{self.t:f} " + "".join(f"{v:f} " for v in values) + "\n")

    def output_state(self, stream):
        """Write the time and the membrane potentials as one line.

        The last neuron of each population is left out.
        """
        values = np.concatenate([self.exc.V[:-1], self.inh.V[:-1]])
        stream.write(f"{self.t:f} " + "".join(f"{v:f} " for v in values) + "\n")

    def output_params(self, exc_stream, inh_stream):
        """Write a, b, c, d and the input of each neuron, one line per neuron.

        The last neuron of each population is left out.
        """
        for population, inputs, stream in (
            (self.exc, self.input_exc, exc_stream),
            (self.inh, self.input_inh, inh_stream),
        ):
            rows = zip(population.a, population.b, population.c, population.d, inputs)
            for row in list(rows)[:-1]:
                stream.write("".join(f"{v:f} " for v in row) + "\n")

    def output_spikes(self, stream, exc_spikes, inh_spikes):
        """Write one "time index" line per spike; inhibitory indices follow excitatory."""
        for index in exc_spikes:
            stream.write(f"{self.t:f} {int(index)}\n")
        for index in inh_spikes:
            stream.write(f"{self.t:f} {self.exc.size + int(index)}\n")