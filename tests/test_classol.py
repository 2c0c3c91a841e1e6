import io

import numpy as np
import pytest

from gennprojects.classol import (
    INPUT_BASE_RATE,
    PATTERNNO,
    Classol,
    raw_kcdn_conductance,
)
from gennprojects.formatting import FLT_MIN
from gennprojects.mbody_models import KCDN_PARAMS, Sizes


@pytest.fixture
def net():
    return Classol(Sizes(2, 3, 2, 2))


def _doubles(values):
    return io.BytesIO(np.asarray(values, dtype=np.float64).tobytes())


def test_raw_conductance_at_midpoint_is_gmid():
    g = np.array([KCDN_PARAMS[6] / 2.0])
    _, raw, corrected = raw_kcdn_conductance(g, KCDN_PARAMS, FLT_MIN)
    assert raw[0] == pytest.approx(KCDN_PARAMS[7])
    assert corrected.size == 0


def test_raw_conductance_floors_low_values():
    g = np.array([0.0, 0.005], dtype=np.float32)
    floored, raw, corrected = raw_kcdn_conductance(g, KCDN_PARAMS, FLT_MIN)
    assert list(corrected) == [0]
    assert floored[0] == np.float32(2 * FLT_MIN)
    assert np.all(np.isfinite(raw))
    assert raw[0] < raw[1]


def test_pnkc_round_trip(net):
    values = np.arange(net.g_pnkc.size) * 0.25
    assert net.read_pnkc(_doubles(values)) == values.size * 8
    out = io.BytesIO()
    net.write_pnkc(out)
    assert np.array_equal(np.frombuffer(out.getvalue(), dtype=np.float64), values)


def test_pnlhi_round_trip(net):
    values = np.arange(net.g_pnlhi.size) * 0.5
    net.read_pnlhi(_doubles(values))
    out = io.BytesIO()
    net.write_pnlhi(out)
    assert np.array_equal(np.frombuffer(out.getvalue(), dtype=np.float64), values)


def test_short_read_raises(net):
    with pytest.raises(ValueError):
        net.read_pnkc(_doubles([1.0]))


def test_read_kcdn_sets_raw_conductance(net):
    values = np.full(net.g_kcdn.size, KCDN_PARAMS[6] / 2.0)
    net.read_kcdn(_doubles(values))
    assert np.allclose(net.g_raw_kcdn, KCDN_PARAMS[7])
    out = io.BytesIO()
    net.write_kcdn(out)
    assert np.allclose(np.frombuffer(out.getvalue(), dtype=np.float64), values)


def test_read_input_patterns_uses_converter():
    net = Classol(Sizes(2, 3, 2, 2), to_threshold=lambda p: np.asarray(p) * 2)
    values = np.full(2 * PATTERNNO, 0.25)
    net.read_input_patterns(_doubles(values))
    assert np.allclose(net.p_pattern, 0.25)
    assert np.allclose(net.pattern, 0.5)


def test_generate_baserates_default(net):
    rates = net.generate_baserates()
    assert rates.shape == (2,)
    assert np.allclose(rates, np.float32(INPUT_BASE_RATE))


def test_pattern_schedule(net):
    rates, offset = net.pattern_schedule(0)
    assert rates is net.pattern and offset == 0
    rates, offset = net.pattern_schedule(net.pat_fire_time)
    assert rates is net.baserates and offset == 0
    _, offset = net.pattern_schedule(net.pat_set_time)
    assert offset == net.n_pn
    _, offset = net.pattern_schedule(net.pat_set_time * PATTERNNO)
    assert offset == 0


def test_run_steps_and_time(net):
    calls = []
    steps = net.run(1.0, lambda rates, offset, t: calls.append((offset, t)))
    assert steps == 10
    assert len(calls) == steps
    assert calls[0] == (0, 0.0)
    assert net.iT == steps
    assert net.t == pytest.approx(1.0)


def test_output_spikes_offsets(net):
    out = io.StringIO()
    net.output_spikes(out, [[1], [0], [1], [0]])
    indices = [int(line.split()[1]) for line in out.getvalue().splitlines()]
    assert indices == [1, 2, 6, 7]


def test_output_state_line(net):
    out = io.StringIO()
    net.output_state(out, [[-60.0], [1.5], [], [2.0]])
    assert out.getvalue() == "0.000000 -60.000000 1.500000 2.000000 \n"


def test_sum_spikes(net):
    net.sum_spikes([[0, 1], [2], [], [0]])
    net.sum_spikes([[0], [], [1], []])
    assert (net.sum_pn, net.sum_kc, net.sum_lhi, net.sum_dn) == (3, 1, 1, 1)