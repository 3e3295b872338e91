import numpy as np

from .errors import ValidationError
from .image import Image2D


def normalize_mask(mask, shape, name="mask"):
    """Coerce a mask to float64 {0, 1}; None gives all-ones of ``shape``.

    Non-zero samples (including NaN) become 1, everything else 0. A present
    all-zero mask is valid.
    """
    shape = tuple(shape)
    if mask is None:
        return np.ones(shape, dtype=np.float64)
    if isinstance(mask, Image2D):
        mask = mask.array
    mask = np.asarray(mask)
    if mask.ndim != 2:
        raise ValidationError(f"{name} must be 2D, got {mask.ndim}D with shape {mask.shape}")
    if mask.shape != shape:
        raise ValidationError(f"{name} shape {mask.shape} must match image shape {shape}")
    return (mask != 0).astype(np.float64)


def apply_mask(image, mask, name="image"):
    """Image values where mask is 1, exact zeros elsewhere (float64).

    Samples outside the mask are never read, so they may be NaN/inf.
    """
    image = np.asarray(image, dtype=np.float64)
    valid = mask > 0
    if not np.all(np.isfinite(image[valid])):
        raise ValidationError(f"{name} has non-finite values inside its mask")
    return np.where(valid, image, 0.0)
