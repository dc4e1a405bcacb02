import numpy as np
import pytest

from mentornets.errors import ConfigurationError
from mentornets.training.configs import Scheduling
from mentornets.training.samples import Sample, SampleCollection, SampleScheduler


def _collection(n=5):
    return SampleCollection([([float(i), 0.0], [float(i)]) for i in range(n)])


def test_sample_vectors_are_frozen():
    sample = Sample([1, 2], [3])
    assert sample.input.dtype == np.float32
    with pytest.raises(ValueError):
        sample.input[0] = 9.0
    assert sample == Sample([1.0, 2.0], [3.0])
    with pytest.raises(ConfigurationError):
        Sample([], [1.0])
    with pytest.raises(ConfigurationError):
        Sample([[1.0, 2.0]], [1.0])


def test_collection_rejects_empty_and_heterogeneous():
    with pytest.raises(ConfigurationError):
        SampleCollection([])
    with pytest.raises(ConfigurationError, match="sample 1"):
        SampleCollection([([0.0, 1.0], [1.0]), ([0.0], [1.0])])
    with pytest.raises(ConfigurationError):
        SampleCollection([([0.0], [1.0]), ([0.0], [1.0, 2.0])])


def test_collection_from_arrays_and_validate():
    samples = SampleCollection.from_arrays(np.zeros((4, 3)), np.ones(4))
    assert len(samples) == 4
    assert (samples.len_input, samples.len_output) == (3, 1)
    samples.validate(3, 1)
    with pytest.raises(ConfigurationError, match="inputs"):
        samples.validate(2, 1)
    with pytest.raises(ConfigurationError, match="targets"):
        samples.validate(3, 2)
    with pytest.raises(ConfigurationError):
        SampleCollection.from_arrays(np.zeros((4, 3)), np.ones(3))


def test_sequential_scheduler_keeps_order():
    samples = _collection()
    scheduler = SampleScheduler(samples, Scheduling.SEQUENTIAL, np.random.default_rng(0))
    assert list(scheduler.order()) == [0, 1, 2, 3, 4]
    assert [s.target[0] for s in scheduler.epoch()] == [0.0, 1.0, 2.0, 3.0, 4.0]


def test_random_scheduler_is_a_seeded_permutation():
    samples = _collection(8)
    a = SampleScheduler(samples, "random", np.random.default_rng(11))
    b = SampleScheduler(samples, "shuffle", np.random.default_rng(11))
    orders = [a.order() for _ in range(3)]
    for order in orders:
        assert sorted(order.tolist()) == list(range(8))
    assert [o.tolist() for o in orders] == [b.order().tolist() for _ in range(3)]
    assert any(o.tolist() != orders[0].tolist() for o in orders[1:])
