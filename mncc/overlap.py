import math
import numbers
from dataclasses import dataclass

import numpy as np

from .errors import ValidationError


@dataclass(frozen=True)
class OverlapStats:
    max_overlap: int
    effective_threshold: int
    required_number: int = 0
    required_fraction: float = 0.0


def validate_thresholds(required_number, required_fraction):
    """Check the overlap thresholds and return them as (int, float)."""
    if isinstance(required_number, bool):
        raise ValidationError(
            f"required number of overlapping pixels must be an integer, got {required_number!r}")
    if not isinstance(required_number, numbers.Integral):
        if isinstance(required_number, numbers.Real) and float(required_number).is_integer():
            required_number = int(required_number)
        else:
            raise ValidationError(
                f"required number of overlapping pixels must be an integer, got {required_number!r}")
    if required_number < 0:
        raise ValidationError(
            f"required number of overlapping pixels must be >= 0, got {required_number}")
    try:
        required_fraction = float(required_fraction)
    except (TypeError, ValueError):
        raise ValidationError(
            f"required fraction of overlapping pixels must be a number, got {required_fraction!r}")
    if not (0.0 <= required_fraction <= 1.0):
        # NaN fails this comparison as well
        raise ValidationError(
            f"required fraction of overlapping pixels must lie in [0, 1], got {required_fraction}")
    return int(required_number), required_fraction


def round_overlap(raw):
    """Round IFFT overlap counts to integers (half-to-even), negatives to 0."""
    return np.maximum(np.rint(raw), 0.0)


def overlap_statistics(overlap, required_number=0, required_fraction=0.0) -> OverlapStats:
    """Maximum overlap and the effective suppression threshold.

    effective = max(required_number, ceil(required_fraction * max_overlap))
    """
    required_number, required_fraction = validate_thresholds(required_number, required_fraction)
    max_overlap = int(overlap.max()) if overlap.size else 0
    frac_threshold = int(math.ceil(required_fraction * max_overlap))
    return OverlapStats(max_overlap=max_overlap,
                        effective_threshold=max(required_number, frac_threshold),
                        required_number=required_number,
                        required_fraction=required_fraction)


def below_threshold(overlap, stats: OverlapStats):
    """Boolean map of displacements whose overlap is too small to keep."""
    return overlap < stats.effective_threshold
