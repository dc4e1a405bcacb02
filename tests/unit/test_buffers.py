import numpy as np
import pytest

from mentornets.core.buffers import (
    BiasedErrorSignalBuffer,
    BiasedSignalBuffer,
    UnbiasedErrorSignalBuffer,
    UnbiasedSignalBuffer,
)
from mentornets.errors import (
    ImmutableBuffer,
    TooFewValues,
    UnmatchingBiasValue,
    UnmatchingBufferSizes,
    ZeroSizedBuffer,
)

BIASED = [(BiasedSignalBuffer, 1.0), (BiasedErrorSignalBuffer, 0.0)]
UNBIASED = [UnbiasedSignalBuffer, UnbiasedErrorSignalBuffer]


@pytest.mark.parametrize("cls", UNBIASED)
@pytest.mark.parametrize("length", [1, 3, 17])
def test_zeros_have_requested_length(cls, length):
    buf = cls.zeros(length)
    assert buf.dim == length
    assert list(buf) == [0.0] * length
    assert not buf.is_view


@pytest.mark.parametrize("cls,bias", BIASED)
@pytest.mark.parametrize("length", [1, 4])
def test_zeros_with_bias_append_bias_slot(cls, bias, length):
    buf = cls.zeros_with_bias(length)
    assert buf.dim == length + 1
    assert buf.bias == bias
    assert list(buf)[:-1] == [0.0] * length


@pytest.mark.parametrize("cls", UNBIASED)
def test_zero_sized_unbiased_is_rejected(cls):
    with pytest.raises(ZeroSizedBuffer):
        cls.zeros(0)
    with pytest.raises(ZeroSizedBuffer):
        cls.from_raw([])


@pytest.mark.parametrize("cls,bias", BIASED)
def test_from_raw_with_bias_validation(cls, bias):
    with pytest.raises(ZeroSizedBuffer):
        cls.zeros_with_bias(0)
    with pytest.raises(ZeroSizedBuffer):
        cls.from_raw_with_bias([])
    with pytest.raises(TooFewValues) as excinfo:
        cls.from_raw_with_bias([bias])
    assert excinfo.value.expected_min == 2
    assert excinfo.value.actual == 1
    with pytest.raises(UnmatchingBiasValue) as excinfo:
        cls.from_raw_with_bias([0.5, bias + 0.25])
    assert excinfo.value.expected == bias
    assert excinfo.value.actual == bias + 0.25


def test_signal_rejects_error_bias():
    with pytest.raises(UnmatchingBiasValue):
        BiasedSignalBuffer.from_raw_with_bias([0.0, 1.0, 0.0])


@pytest.mark.parametrize("cls,bias", BIASED)
def test_from_raw_with_bias_round_trips_through_unbias(cls, bias):
    values = [0.25, -3.0, 7.5, bias]
    buf = cls.from_raw_with_bias(values)
    unbiased = buf.unbias()
    assert unbiased.dim == 3
    assert list(unbiased) == values[:-1]
    assert isinstance(unbiased, cls.UNBIASED)


def test_unbias_mut_writes_through_and_keeps_bias():
    buf = BiasedSignalBuffer.zeros_with_bias(3)
    view = buf.unbias_mut()
    view.data_mut[:] = [1.0, 2.0, 3.0]
    assert list(buf) == [1.0, 2.0, 3.0, 1.0]
    assert view.is_view


def test_read_only_views_reject_writes():
    buf = UnbiasedSignalBuffer.from_raw([1.0, 2.0])
    view = buf.view()
    assert not view.is_mutable
    with pytest.raises(ImmutableBuffer):
        view.view_mut()
    with pytest.raises(ImmutableBuffer):
        _ = view.data_mut
    with pytest.raises(ValueError):
        buf.data[0] = 5.0
    biased = BiasedSignalBuffer.zeros_with_bias(2)
    with pytest.raises(ImmutableBuffer):
        biased.view().unbias_mut()
    with pytest.raises(ValueError):
        biased.unbias().data[0] = 1.0


def test_view_mut_aliases_storage():
    buf = UnbiasedErrorSignalBuffer.zeros(2)
    alias = buf.view_mut()
    alias.data_mut[1] = 4.0
    assert list(buf) == [0.0, 4.0]


def test_assign_copies_exact_values():
    dst = UnbiasedSignalBuffer.zeros(3)
    src = UnbiasedSignalBuffer.from_raw([0.1, -0.2, 0.3])
    dst.assign(src)
    assert dst == src
    src.data_mut[0] = 9.0
    assert list(dst)[0] == pytest.approx(0.1)


def test_assign_mismatched_size_leaves_destination_untouched():
    dst = UnbiasedSignalBuffer.from_raw([1.0, 2.0, 3.0])
    with pytest.raises(UnmatchingBufferSizes) as excinfo:
        dst.assign(UnbiasedSignalBuffer.from_raw([5.0, 6.0]))
    assert (excinfo.value.lhs, excinfo.value.rhs) == (3, 2)
    assert excinfo.value.annotation
    assert list(dst) == [1.0, 2.0, 3.0]


def test_assign_rejects_other_buffer_types_and_read_only_targets():
    dst = UnbiasedSignalBuffer.zeros(2)
    with pytest.raises(TypeError):
        dst.assign(UnbiasedErrorSignalBuffer.zeros(2))
    with pytest.raises(ImmutableBuffer):
        dst.view().assign(UnbiasedSignalBuffer.from_raw([1.0, 2.0]))
    assert list(dst) == [0.0, 0.0]


def test_reset_to_zeros_keeps_error_bias():
    buf = BiasedErrorSignalBuffer.from_raw_with_bias([3.0, -1.0, 0.0])
    buf.reset_to_zeros()
    assert list(buf) == [0.0, 0.0, 0.0]
    unbiased = UnbiasedErrorSignalBuffer.from_raw([2.0])
    unbiased.reset_to_zeros()
    assert list(unbiased) == [0.0]
    assert not hasattr(BiasedSignalBuffer.zeros_with_bias(1), "reset_to_zeros")


def test_equality_ignores_type_tag():
    a = UnbiasedSignalBuffer.from_raw([1.0, 0.0])
    b = UnbiasedErrorSignalBuffer.from_raw([1.0, 0.0])
    c = BiasedErrorSignalBuffer.from_raw_with_bias([1.0, 0.0])
    assert a == b == c
    assert a != UnbiasedSignalBuffer.from_raw([1.0, 0.5])


def test_from_raw_wraps_float32_without_copy():
    raw = np.array([1.0, 2.0], dtype=np.float32)
    buf = UnbiasedSignalBuffer.from_raw(raw)
    raw[0] = 3.0
    assert list(buf) == [3.0, 2.0]
    assert buf.data.dtype == np.float32


def test_error_annotation_names_operation():
    with pytest.raises(ZeroSizedBuffer) as excinfo:
        BiasedSignalBuffer.zeros_with_bias(0)
    assert "zeros_with_bias" in str(excinfo.value)


@pytest.mark.parametrize("cls,bias", BIASED)
def test_from_raw_with_bias_does_not_share_caller_storage(cls, bias):
    raw = np.array([0.5, bias], dtype=np.float32)
    buf = cls.from_raw_with_bias(raw)
    raw[-1] = 7.0
    raw[0] = 2.0
    assert buf.bias == bias
    assert list(buf) == [0.5, bias]


def test_negative_lengths_are_rejected():
    with pytest.raises(ValueError, match="zeros_with_bias"):
        BiasedSignalBuffer.zeros_with_bias(-1)
    with pytest.raises(ValueError, match="zeros"):
        UnbiasedErrorSignalBuffer.zeros(-3)
