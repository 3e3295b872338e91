from dataclasses import dataclass
from typing import Callable, Tuple

import numpy as np

from .errors import ValidationError
from .fft_backend import FFTBackend


@dataclass(frozen=True)
class PaddingPlan:
    fixed_shape: Tuple[int, int]
    moving_shape: Tuple[int, int]
    output_shape: Tuple[int, int]
    padded_shape: Tuple[int, int]
    fixed_offset: Tuple[int, int] = (0, 0)
    moving_offset: Tuple[int, int] = (0, 0)


def _check_shape(shape, name):
    shape = tuple(int(s) for s in shape)
    if len(shape) != 2:
        raise ValidationError(f"{name} shape must be 2D, got {shape}")
    if min(shape) <= 0:
        raise ValidationError(f"{name} shape must be positive, got {shape}")
    return shape


def plan_padding(fixed_shape, moving_shape,
                 good_size: Callable[[int], int] = FFTBackend.good_size) -> PaddingPlan:
    """Choose the common FFT size for a fixed/moving pair.

    The padded size holds the full linear correlation without wrap-around
    (sum of sizes minus one per axis), rounded up per axis with ``good_size``.
    Both inputs sit at the origin of the padded frame.
    """
    fixed_shape = _check_shape(fixed_shape, "fixed")
    moving_shape = _check_shape(moving_shape, "moving")
    output_shape = (fixed_shape[0] + moving_shape[0] - 1,
                    fixed_shape[1] + moving_shape[1] - 1)
    padded = []
    for n in output_shape:
        p = int(good_size(n))
        if p < n:
            raise ValidationError(f"good_size({n}) returned smaller size {p}")
        padded.append(p)
    return PaddingPlan(fixed_shape, moving_shape, output_shape, tuple(padded))


def pad_to(array, plan: PaddingPlan, offset=(0, 0)):
    """Copy ``array`` into a zeroed float64 buffer of the padded size at ``offset``."""
    y, x = offset
    h, w = array.shape
    if y < 0 or x < 0 or y + h > plan.padded_shape[0] or x + w > plan.padded_shape[1]:
        raise ValidationError(
            f"array {array.shape} at offset {offset} does not fit padded shape {plan.padded_shape}")
    buf = np.zeros(plan.padded_shape, dtype=np.float64)
    buf[y:y+h, x:x+w] = array
    return buf


def crop_full(buffer, plan: PaddingPlan):
    """Crop a circular correlation buffer to the full-mode output grid.

    Translation t of the moving origin maps to output index t + (H_M-1, W_M-1).
    With the inputs placed at the plan offsets, t sits at circular index
    t + fixed_offset - moving_offset; negative indices live at the end of the
    buffer, hence the roll before cropping.
    """
    lag = tuple(plan.moving_shape[i] - 1 + plan.moving_offset[i] - plan.fixed_offset[i]
                for i in range(2))
    rolled = np.roll(buffer, shift=lag, axis=(0, 1))
    h, w = plan.output_shape
    return rolled[:h, :w].copy()
