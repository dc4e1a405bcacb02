import numpy as np
import pytest

from mentornets.data import DatasetSpec, available_datasets, get_dataset, register_dataset
from mentornets.errors import ConfigurationError
from mentornets.training.samples import SampleCollection


def test_builtin_datasets_are_registered():
    assert {"and", "csv", "or", "sine", "xor"} <= set(available_datasets())


def test_boolean_gates():
    xor = get_dataset("xor")
    assert (xor.len_input, xor.len_output) == (2, 1)
    assert [float(s.target[0]) for s in xor.samples] == [0.0, 1.0, 1.0, 0.0]
    signed = get_dataset("or", signed=True)
    assert [float(s.target[0]) for s in signed.samples] == [-1.0, 1.0, 1.0, 1.0]
    assert signed.samples[0].input.tolist() == [-1.0, -1.0]
    assert signed.provenance["signed"] is True


def test_sine_dataset_is_seeded():
    a = get_dataset("sine", n_points=16, noise=0.1, seed=2)
    b = get_dataset("sine", n_points=16, noise=0.1, seed=2)
    assert len(a.samples) == 16
    assert all(np.array_equal(x.target, y.target) for x, y in zip(a.samples, b.samples))


def test_csv_dataset(tmp_path):
    path = tmp_path / "table.csv"
    path.write_text("a,b,y\n0,1,1\n1,1,0\n")
    spec = get_dataset("csv", path=str(path))
    assert (spec.len_input, spec.len_output) == (2, 1)
    assert spec.samples[1].input.tolist() == [1.0, 1.0]
    with pytest.raises(ConfigurationError):
        get_dataset("csv")
    with pytest.raises(ConfigurationError):
        get_dataset("csv", path=str(path), target_cols=3)


def test_csv_target_columns_accept_negative_indices(tmp_path):
    path = tmp_path / "table.csv"
    path.write_text("a,b,y\n0,1,1\n1,0,0\n")
    spec = get_dataset("csv", path=str(path), target_cols=[-1])
    assert (spec.len_input, spec.len_output) == (2, 1)
    assert spec.samples[0].input.tolist() == [0.0, 1.0]
    assert spec.samples[0].target.tolist() == [1.0]
    assert spec.provenance["target_cols"] == [2]
    first = get_dataset("csv", path=str(path), target_cols=[0])
    assert first.samples[1].input.tolist() == [0.0, 0.0]
    for bad in ([3], [-4], [2, -1]):
        with pytest.raises(ConfigurationError):
            get_dataset("csv", path=str(path), target_cols=bad)


def test_unknown_dataset_lists_available():
    with pytest.raises(KeyError, match="Available datasets"):
        get_dataset("mnist")


def test_register_custom_dataset():
    @register_dataset("unit-identity")
    def _make(**_):
        return DatasetSpec(
            name="unit-identity",
            samples=SampleCollection([([1.0], [1.0])]),
            provenance={"type": "fixture"},
        )

    assert get_dataset("unit-identity").len_input == 1
    register_dataset("unit-broken", lambda **_: object())
    with pytest.raises(TypeError):
        get_dataset("unit-broken")
