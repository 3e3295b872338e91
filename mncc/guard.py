"""
Numerical guard for the correlation core.

Round-off in the six FFT products can push the residual energies slightly
below zero and the coefficient slightly outside [-1, 1]. These helpers
correct that within a documented tolerance:

    eps    = 1e3 * machine epsilon (float64)
    tol(u) = eps * max(den_f(u), den_m(u))

A displacement whose fixed or moving energy is <= tol(u) has a
computationally zero denominator and gets correlation 0. So does one whose
combined denominator sqrt(den_f * den_m) is <= eps times the largest
combined denominator of the image.

FFT round-off is absolute, sized by the largest energies in the image, so
the error of C(u) grows like 1 / min(den_f(u) / max den_f, den_m(u) / max den_m).
The range check scales its 1 + 10*eps bound by that conditioning ratio.
"""

import numpy as np

from .errors import NumericAssertion

DEFAULT_EPSILON = 1e3 * np.finfo(np.float64).eps


def clamp_energy(energy):
    """Clamp negative residual energies to 0 (in place) and return them."""
    np.maximum(energy, 0.0, out=energy)
    return energy


def degenerate_denominator(den_f, den_m, den=None, eps=DEFAULT_EPSILON):
    """True where the denominator is too small to divide by."""
    tol = eps * np.maximum(den_f, den_m)
    bad = (den_f <= tol) | (den_m <= tol)
    if den is None:
        den = np.sqrt(den_f * den_m)
    if den.size:
        bad |= den <= eps * float(den.max())
    return bad


def range_limit(den_f, den_m, keep, eps=DEFAULT_EPSILON):
    """Largest |C| each kept displacement may reach before clamping.

    1 + 10*eps at the best-conditioned displacement, widened by
    1 / min(den_f / max den_f, den_m / max den_m) elsewhere. Displacements
    that are not kept get an infinite limit.
    """
    limit = np.full(den_f.shape, np.inf)
    if not keep.any():
        return limit
    cond = np.minimum(den_f[keep] / den_f[keep].max(), den_m[keep] / den_m[keep].max())
    limit[keep] = 1.0 + 10.0 * eps / cond
    return limit


def check_range(corr, limit=None, eps=DEFAULT_EPSILON, debug=False, verbose=False):
    """Count coefficients beyond their limit (default 1 + 10*eps) before clamping.

    Raises:
        NumericAssertion: in debug mode, when any coefficient is out of range
    """
    if limit is None:
        limit = 1.0 + 10.0 * eps
    bad = np.abs(corr) > limit
    n_bad = int(np.count_nonzero(bad))
    if n_bad:
        worst = float(np.abs(corr[bad]).max())
        msg = (f"{n_bad} correlation value(s) exceed their round-off bound "
               f"(1 + {10.0 * eps:.3g} when well conditioned; worst |C| = {worst:.17g})")
        if debug:
            raise NumericAssertion(msg)
        if verbose:
            print(f"[WARN] {msg}; clamped")
    return n_bad


def clamp_correlation(corr):
    np.clip(corr, -1.0, 1.0, out=corr)
    return corr
