import sys
import os
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

import numpy as np
import pytest
from mncc.padding import plan_padding, pad_to, crop_full
from mncc.errors import ValidationError


def _smooth235(n):
    for p in (2, 3, 5):
        while n % p == 0:
            n //= p
    return n == 1


def test_plan_covers_full_size():
    plan = plan_padding((100, 37), (13, 61))
    assert plan.output_shape == (112, 97)
    py, px = plan.padded_shape
    assert py >= 112 and px >= 97
    assert _smooth235(py) and _smooth235(px)
    assert plan.fixed_offset == (0, 0) and plan.moving_offset == (0, 0)


def test_plan_custom_good_size():
    plan = plan_padding((4, 4), (2, 3), good_size=lambda n: n)
    assert plan.padded_shape == plan.output_shape == (5, 6)


def test_plan_rejects_bad_shapes():
    with pytest.raises(ValidationError):
        plan_padding((0, 4), (2, 2))
    with pytest.raises(ValidationError):
        plan_padding((4, 4, 1), (2, 2))
    with pytest.raises(ValidationError):
        plan_padding((4, 4), (2, 2), good_size=lambda n: n - 1)


def test_pad_and_crop():
    plan = plan_padding((3, 4), (2, 2), good_size=lambda n: n + 2)
    buf = pad_to(np.ones((3, 4)), plan)
    assert buf.shape == plan.padded_shape
    assert buf.sum() == 12 and buf[:3, :4].all()

    # circular lag (-1, -1) lives at the end of the buffer and maps to output (0, 0)
    circ = np.zeros(plan.padded_shape)
    circ[-1, -1] = 7.0
    circ[0, 0] = 5.0
    out = crop_full(circ, plan)
    assert out.shape == (4, 5)
    assert out[0, 0] == 7.0
    assert out[1, 1] == 5.0


def test_offsets_shift_placement_not_result():
    from dataclasses import replace
    from mncc.fft_backend import NumpyFFTBackend

    rng = np.random.default_rng(0)
    a = rng.random((5, 6))
    b = rng.random((3, 4))
    base = plan_padding(a.shape, b.shape, good_size=lambda n: n)
    moved = replace(base, padded_shape=(base.padded_shape[0] + 2, base.padded_shape[1] + 3),
                    fixed_offset=(1, 0), moving_offset=(0, 3))

    def corr(plan):
        fft = NumpyFFTBackend(plan.padded_shape)
        spec_a = fft.forward(pad_to(a, plan, plan.fixed_offset))
        spec_b = fft.forward(pad_to(b, plan, plan.moving_offset))
        return crop_full(fft.inverse(fft.multiply_conjugate(spec_a, spec_b)), plan)

    assert np.allclose(corr(moved), corr(base), atol=1e-12)
    # zero translation: full overlap of b with the top-left of a
    assert np.isclose(corr(moved)[2, 3], np.sum(a[:3, :4] * b))


def test_pad_to_rejects_offset_outside_frame():
    plan = plan_padding((3, 3), (2, 2), good_size=lambda n: n)
    with pytest.raises(ValidationError):
        pad_to(np.ones((3, 3)), plan, (2, 0))
