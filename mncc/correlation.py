"""
Masked normalized cross-correlation through six FFT-based convolutions.

For every integer displacement u of the moving image over the fixed image:

    N    = IFFT(FmF . conj(FmM))       overlap count
    S_f  = IFFT(Ff  . conj(FmM))       sum of fixed over the overlap
    S_m  = IFFT(FmF . conj(Fm))        sum of moving over the overlap
    S_ff = IFFT(Ff2 . conj(FmM))       sum of fixed^2
    S_mm = IFFT(FmF . conj(Fm2))       sum of moving^2
    S_fm = IFFT(Ff  . conj(Fm))        sum of fixed * moving

    C = (S_fm - S_f S_m / N) / sqrt((S_ff - S_f^2 / N) (S_mm - S_m^2 / N))

Reference: D. Padfield, "Masked object registration in the Fourier domain",
IEEE Trans. Image Processing 21(5), 2012.
"""

from dataclasses import dataclass
from typing import Callable, Optional, Tuple

import numpy as np

from .errors import CorrelationAborted
from .fft_backend import get_backend
from .guard import (DEFAULT_EPSILON, check_range, clamp_correlation,
                    clamp_energy, degenerate_denominator, range_limit)
from .image import Image2D, as_image, correlation_geometry
from .masks import apply_mask, normalize_mask
from .overlap import (below_threshold, overlap_statistics, round_overlap,
                      validate_thresholds)
from .padding import PaddingPlan, crop_full, pad_to, plan_padding


@dataclass
class CorrelationResult:
    correlation: Image2D
    max_overlap: int
    overlap: np.ndarray
    effective_threshold: int
    plan: PaddingPlan

    @property
    def array(self):
        return self.correlation.array

    @property
    def zero_displacement_index(self) -> Tuple[int, int]:
        """Output index that corresponds to no translation."""
        return (self.plan.moving_shape[0] - 1, self.plan.moving_shape[1] - 1)


def _checkpoint(abort_check, stage, verbose=False):
    if verbose:
        print(f"[MNCC] stage done: {stage}")
    if abort_check is not None and abort_check():
        raise CorrelationAborted(f"correlation aborted after stage '{stage}'")


def _center(values, mask):
    # Subtracting the masked mean leaves every coefficient unchanged but
    # shrinks the terms that cancel in S_ff - S_f^2/N.
    valid = mask > 0
    if not valid.any():
        return values
    return np.where(valid, values - values[valid].mean(), 0.0)


def masked_fft_ncc(fixed_image, moving_image, fixed_mask=None, moving_mask=None,
                   required_number_of_overlapping_pixels: int = 0,
                   required_fraction_of_overlapping_pixels: float = 0.0,
                   backend="numpy",
                   abort_check: Optional[Callable[[], bool]] = None,
                   debug: bool = False,
                   verbose: bool = False,
                   _epsilon: float = DEFAULT_EPSILON) -> CorrelationResult:
    """Masked normalized cross-correlation of moving over fixed, for every translation.

    Only pixels valid in both masks (non-zero mask samples) take part in the
    means, variances and cross term at each displacement.

    Args:
        fixed_image: 2D ndarray or Image2D
        moving_image: 2D ndarray or Image2D
        fixed_mask: optional mask, same shape as fixed_image (non-zero = valid)
        moving_mask: optional mask, same shape as moving_image
        required_number_of_overlapping_pixels: displacements with fewer
            jointly-valid pixels are set to 0
        required_fraction_of_overlapping_pixels: same, as a fraction of the
            maximum overlap; the larger of the two thresholds applies
        backend: FFT backend name ('numpy', 'opencv') or FFTBackend subclass
        abort_check: optional callable polled between stages; returning True
            raises CorrelationAborted
        debug: raise NumericAssertion when |C| exceeds its round-off bound
            before clamping (1 + 10*eps, widened where the denominator is
            poorly conditioned; see guard.range_limit)
        verbose: print stage and summary information

    Returns:
        CorrelationResult with the correlation image of shape
        (H_F + H_M - 1, W_F + W_M - 1), values in [-1, 1]; index
        (H_M - 1, W_M - 1) is zero translation.

    Raises:
        ValidationError: bad image, mask or threshold
        BackendError: FFT failure
        CorrelationAborted: abort_check returned True
    """
    req_n, req_frac = validate_thresholds(required_number_of_overlapping_pixels,
                                          required_fraction_of_overlapping_pixels)
    fixed = as_image(fixed_image, "fixed image")
    moving = as_image(moving_image, "moving image")

    mask_f = normalize_mask(fixed_mask, fixed.shape, "fixed mask")
    mask_m = normalize_mask(moving_mask, moving.shape, "moving mask")
    f = _center(apply_mask(fixed.array, mask_f, "fixed image"), mask_f)
    m = _center(apply_mask(moving.array, mask_m, "moving image"), mask_m)

    backend_cls = get_backend(backend)
    plan = plan_padding(fixed.shape, moving.shape, good_size=backend_cls.good_size)
    fft = backend_cls(plan.padded_shape)
    if verbose:
        print(f"[MNCC] fixed={plan.fixed_shape} moving={plan.moving_shape} "
              f"output={plan.output_shape} padded={plan.padded_shape} backend={fft.name}")

    def xcorr(a, b):
        return crop_full(fft.inverse(fft.multiply_conjugate(a, b)), plan)

    # masks -> overlap count
    spec_mask_f = fft.forward(pad_to(mask_f, plan, plan.fixed_offset))
    spec_mask_m = fft.forward(pad_to(mask_m, plan, plan.moving_offset))
    overlap = round_overlap(xcorr(spec_mask_f, spec_mask_m))
    stats = overlap_statistics(overlap, req_n, req_frac)
    divisor = np.maximum(overlap, 1.0)
    _checkpoint(abort_check, "overlap", verbose)

    # fixed sums and residual energy
    spec_f = fft.forward(pad_to(f, plan, plan.fixed_offset))
    sum_f = xcorr(spec_f, spec_mask_m)
    spec_f2 = fft.forward(pad_to(f * f, plan, plan.fixed_offset))
    den_f = xcorr(spec_f2, spec_mask_m)
    del spec_f2, spec_mask_m
    den_f -= sum_f * sum_f / divisor
    clamp_energy(den_f)
    _checkpoint(abort_check, "fixed energy", verbose)

    # moving sums and residual energy
    spec_m = fft.forward(pad_to(m, plan, plan.moving_offset))
    sum_m = xcorr(spec_mask_f, spec_m)
    spec_m2 = fft.forward(pad_to(m * m, plan, plan.moving_offset))
    den_m = xcorr(spec_mask_f, spec_m2)
    del spec_m2, spec_mask_f
    den_m -= sum_m * sum_m / divisor
    clamp_energy(den_m)
    _checkpoint(abort_check, "moving energy", verbose)

    # cross term
    num = xcorr(spec_f, spec_m)
    del spec_f, spec_m
    num -= sum_f * sum_m / divisor
    del sum_f, sum_m
    _checkpoint(abort_check, "cross term", verbose)

    den = np.sqrt(den_f * den_m)
    # fewer than two jointly-valid pixels have no variance at all
    keep = ~(degenerate_denominator(den_f, den_m, den, _epsilon)
             | below_threshold(overlap, stats) | (overlap < 2))
    corr = np.zeros(plan.output_shape, dtype=np.float64)
    corr[keep] = num[keep] / den[keep]
    limit = range_limit(den_f, den_m, keep, _epsilon)
    n_out = check_range(corr, limit, _epsilon, debug=debug, verbose=verbose)
    clamp_correlation(corr)

    if verbose:
        print(f"[MNCC] max overlap={stats.max_overlap} threshold={stats.effective_threshold} "
              f"kept={int(keep.sum())}/{keep.size} out-of-range={n_out}")

    out = fixed.with_array(corr, origin=correlation_geometry(fixed, moving.shape))
    return CorrelationResult(correlation=out,
                             max_overlap=stats.max_overlap,
                             overlap=overlap,
                             effective_threshold=stats.effective_threshold,
                             plan=plan)


def fft_ncc(fixed_image, moving_image, **kwargs) -> CorrelationResult:
    """Unmasked variant: every pixel of both images is valid."""
    return masked_fft_ncc(fixed_image, moving_image, None, None, **kwargs)
