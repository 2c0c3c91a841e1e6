import pytest

from gennprojects.mbody_models import (
    NetworkModel,
    NeuronPopulation,
    Sizes,
    mbody1_model,
    mbody_delayed_syn_model,
    mbody_individual_id_model,
)


@pytest.fixture
def sizes():
    return Sizes(n_al=100, n_mb=1000, n_lhi=20, n_lb=100, ftype="double")


def _synapse(model, name):
    return next(s for s in model.synapses if s.name == name)


def test_mbody1_population_order(sizes):
    model = mbody1_model(sizes)
    assert model.name == "MBody1"
    assert [n.name for n in model.neurons] == ["PN", "KC", "LHI", "DN"]
    assert [s.name for s in model.synapses] == ["PNKC", "PNLHI", "LHIKC", "KCDN", "DNDN"]
    assert [n.size for n in model.neurons] == [100, 1000, 20, 100]


def test_neuron_index(sizes):
    model = mbody1_model(sizes)
    assert model.neuron_index("PN") == 0
    assert model.neuron_index("DN") == 3
    with pytest.raises(KeyError):
        model.neuron_index("XX")


def test_cumulative_sizes(sizes):
    model = mbody1_model(sizes)
    totals = model.cumulative_sizes()
    assert totals[0] == sizes.n_al
    assert totals[1] == sizes.n_al + sizes.n_mb
    assert totals[-1] == sum(n.size for n in model.neurons)


def test_cumulative_sizes_empty():
    assert NetworkModel(name="empty").cumulative_sizes() == []


def test_settings(sizes):
    model = mbody1_model(sizes)
    assert model.seed == 1234
    assert model.gpu_device == 0
    assert model.timing is False
    assert model.dt == 0.1
    assert model.precision == "DOUBLE"


def test_global_conductances_scale_with_sizes(sizes):
    model = mbody1_model(sizes)
    assert _synapse(model, "LHIKC").init == (0.35 / sizes.n_lhi,)
    assert _synapse(model, "DNDN").init == (5.0 / sizes.n_lb,)


def test_mbody1_no_delays(sizes):
    model = mbody1_model(sizes)
    assert all(s.delay == 0 for s in model.synapses)
    assert _synapse(model, "PNKC").g_type == "INDIVIDUALG"
    assert _synapse(model, "PNKC").init == (0.01,)


def test_delayed_syn_delays(sizes):
    model = mbody_delayed_syn_model(sizes)
    assert model.name == "MBody_delayedSyn"
    assert _synapse(model, "KCDN").delay == 5
    assert _synapse(model, "DNDN").delay == 3
    assert _synapse(model, "PNKC").delay == 0


def test_individual_id_pnkc(sizes):
    model = mbody_individual_id_model(sizes, 0.25)
    pnkc = _synapse(model, "PNKC")
    assert model.name == "MBody_individualID"
    assert pnkc.g_type == "INDIVIDUALID"
    assert pnkc.init == (0.25,)


def test_synapse_endpoints_are_populations(sizes):
    model = mbody_delayed_syn_model(sizes)
    names = {n.name for n in model.neurons}
    for synapse in model.synapses:
        assert synapse.source in names
        assert synapse.target in names


def test_kcdn_learning_params(sizes):
    kcdn = _synapse(mbody1_model(sizes), "KCDN")
    assert kcdn.model == "LEARN1SYNAPSE"
    assert len(kcdn.params) == 11
    assert kcdn.params[6] == 0.015


def test_sizes_must_be_positive():
    with pytest.raises(ValueError):
        Sizes(n_al=10, n_mb=10, n_lhi=0, n_lb=10)


def test_neuron_population_defaults():
    population = NeuronPopulation("X", 3, "POISSONNEURON")
    assert population.params == ()
    assert population.init == ()
    model = NetworkModel(name="m", neurons=[population])
    assert model.neuron_index("X") == 0