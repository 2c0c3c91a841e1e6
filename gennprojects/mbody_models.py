"""Network descriptions of the mushroom-body (classol) models.

Each model has four neuron populations (PN, KC, LHI, DN) and five synapse
populations between them.  The variants differ only in the model name, the
handling of the PN to KC conductances and the synaptic delays.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from itertools import accumulate

DT = 0.1
NO_DELAY = 0
GPU_DEVICE = 0
SEED = 1234

POISSON_PARAMS = (
    0.1,    # firing rate
    2.5,    # refractory period
    20.0,   # Vspike
    -60.0,  # Vrest
)
POISSON_INIT = (
    -60.0,  # V
    0.0,    # seed
    -10.0,  # SpikeTime
)

TRAUB_MILES_PARAMS = (
    7.15,     # gNa: Na conductance in 1/(mOhms * cm^2)
    50.0,     # ENa: Na equi potential in mV
    1.43,     # gK: K conductance in 1/(mOhms * cm^2)
    -95.0,    # EK: K equi potential in mV
    0.02672,  # gl: leak conductance in 1/(mOhms * cm^2)
    -63.563,  # El: leak equi potential in mV
    0.143,    # Cmem: membrane capacity density in muF/cm^2
)
TRAUB_MILES_INIT = (
    -60.0,      # membrane potential E
    0.0529324,  # Na channel activation m
    0.3176767,  # Na channel non-blocking h
    0.5961207,  # K channel activation n
)

PNKC_INIT_G = 0.01
PNKC_POSTSYN = (1.0, 0.0)        # tau_S, Erev
PNLHI_INIT = (0.0,)
PNLHI_POSTSYN = (1.0, 0.0)
LHIKC_PARAMS = (-40.0, 50.0)     # Epre, Vslope
LHIKC_G_TOTAL = 0.35
LHIKC_POSTSYN = (1.5, -92.0)
KCDN_PARAMS = (
    -20.0,     # Epre: presynaptic threshold potential
    50.0,      # TLRN: time scale of learning changes
    50.0,      # TCHNG: width of learning window
    50000.0,   # TDECAY: time scale of synaptic strength decay
    100000.0,  # TPUNISH10: suppression window in response to 1/0
    200.0,     # TPUNISH01: suppression window in response to 0/1
    0.015,     # GMAX: maximal conductance achievable
    0.0075,    # GMID: midpoint of sigmoid g filter curve
    33.33,     # GSLOPE: slope of sigmoid g filter curve
    10.0,      # TAUSHIFT: shift of learning curve
    0.00006,   # GSYN0: value the conductance decays to
)
KCDN_INIT = (0.01, 0.01)         # g, graw
KCDN_POSTSYN = (5.0, 0.0)
DNDN_PARAMS = (-30.0, 50.0)      # Epre, Vslope
DNDN_G_TOTAL = 5.0
DNDN_POSTSYN = (8.0, -92.0)


@dataclass(frozen=True)
class Sizes:
    """Population sizes and floating-point type of a mushroom-body model."""

    n_al: int
    n_mb: int
    n_lhi: int
    n_lb: int
    ftype: str = "FLOAT"

    def __post_init__(self):
        for name in ("n_al", "n_mb", "n_lhi", "n_lb"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be positive")


@dataclass(frozen=True)
class NeuronPopulation:
    """A named group of neurons sharing one neuron model."""

    name: str
    size: int
    model: str
    params: tuple = ()
    init: tuple = ()


@dataclass(frozen=True)
class SynapsePopulation:
    """A named projection from one neuron population to another."""

    name: str
    model: str
    connectivity: str
    g_type: str
    delay: int
    postsyn_model: str
    source: str
    target: str
    init: tuple = ()
    params: tuple = ()
    postsyn_params: tuple = ()


@dataclass
class NetworkModel:
    """A complete network: populations, projections and run settings."""

    name: str
    neurons: list = field(default_factory=list)
    synapses: list = field(default_factory=list)
    precision: str = "FLOAT"
    gpu_device: int = GPU_DEVICE
    seed: int = SEED
    timing: bool = False
    dt: float = DT

    def neuron_index(self, name):
        """Return the position of the neuron population called ``name``."""
        for index, population in enumerate(self.neurons):
            if population.name == name:
                return index
        raise KeyError(name)

    def cumulative_sizes(self):
        """Return running totals of the neuron population sizes."""
        return list(accumulate(population.size for population in self.neurons))


def _mbody_model(name, sizes, pnkc_g_type, pnkc_g, kcdn_delay, dndn_delay):
    neurons = [
        NeuronPopulation("PN", sizes.n_al, "POISSONNEURON", POISSON_PARAMS, POISSON_INIT),
        NeuronPopulation("KC", sizes.n_mb, "TRAUBMILES_FAST", TRAUB_MILES_PARAMS, TRAUB_MILES_INIT),
        NeuronPopulation("LHI", sizes.n_lhi, "TRAUBMILES_FAST", TRAUB_MILES_PARAMS, TRAUB_MILES_INIT),
        NeuronPopulation("DN", sizes.n_lb, "TRAUBMILES_FAST", TRAUB_MILES_PARAMS, TRAUB_MILES_INIT),
    ]
    synapses = [
        SynapsePopulation(
            "PNKC", "NSYNAPSE", "DENSE", pnkc_g_type, NO_DELAY, "EXPDECAY",
            "PN", "KC", (pnkc_g,), (), PNKC_POSTSYN,
        ),
        SynapsePopulation(
            "PNLHI", "NSYNAPSE", "ALLTOALL", "INDIVIDUALG", NO_DELAY, "EXPDECAY",
            "PN", "LHI", PNLHI_INIT, (), PNLHI_POSTSYN,
        ),
        SynapsePopulation(
            "LHIKC", "NGRADSYNAPSE", "ALLTOALL", "GLOBALG", NO_DELAY, "EXPDECAY",
            "LHI", "KC", (LHIKC_G_TOTAL / sizes.n_lhi,), LHIKC_PARAMS, LHIKC_POSTSYN,
        ),
        SynapsePopulation(
            "KCDN", "LEARN1SYNAPSE", "ALLTOALL", "INDIVIDUALG", kcdn_delay, "EXPDECAY",
            "KC", "DN", KCDN_INIT, KCDN_PARAMS, KCDN_POSTSYN,
        ),
        SynapsePopulation(
            "DNDN", "NGRADSYNAPSE", "ALLTOALL", "GLOBALG", dndn_delay, "EXPDECAY",
            "DN", "DN", (DNDN_G_TOTAL / sizes.n_lb,), DNDN_PARAMS, DNDN_POSTSYN,
        ),
    ]
    return NetworkModel(
        name=name,
        neurons=neurons,
        synapses=synapses,
        precision=sizes.ftype.upper(),
    )


def mbody1_model(sizes):
    """Return the MBody1 network for ``sizes``."""
    return _mbody_model("MBody1", sizes, "INDIVIDUALG", PNKC_INIT_G, NO_DELAY, NO_DELAY)


def mbody_delayed_syn_model(sizes):
    """Return the MBody_delayedSyn network: delayed KC-DN and DN-DN synapses."""
    return _mbody_model("MBody_delayedSyn", sizes, "INDIVIDUALG", PNKC_INIT_G, 5, 3)


def mbody_individual_id_model(sizes, gpnkc_global):
    """Return the MBody_individualID network with a global PN-KC conductance."""
    return _mbody_model(
        "MBody_individualID", sizes, "INDIVIDUALID", float(gpnkc_global), NO_DELAY, NO_DELAY
    )