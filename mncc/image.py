from dataclasses import dataclass, field
from typing import Tuple

import numpy as np

from .errors import ValidationError


@dataclass
class Image2D:
    """2D image with geometric metadata.

    All metadata is stored in array axis order (row, col), so ``origin[0]``
    and ``spacing[0]`` refer to axis 0 of ``array``.

    Args:
        array: 2D ndarray, row-major, shape (H, W)
        origin: physical position of index (0, 0)
        spacing: physical size of one pixel along each axis (positive)
        direction: 2x2 matrix whose columns are the axis directions
    """
    array: np.ndarray
    origin: Tuple[float, float] = (0.0, 0.0)
    spacing: Tuple[float, float] = (1.0, 1.0)
    direction: np.ndarray = field(default_factory=lambda: np.eye(2))

    def __post_init__(self):
        self.array = np.asarray(self.array)
        self.origin = tuple(float(v) for v in self.origin)
        self.spacing = tuple(float(v) for v in self.spacing)
        self.direction = np.asarray(self.direction, dtype=np.float64)
        if len(self.origin) != 2 or len(self.spacing) != 2:
            raise ValidationError("origin and spacing must have two components")
        if self.direction.shape != (2, 2):
            raise ValidationError(f"direction must be 2x2, got {self.direction.shape}")
        if min(self.spacing) <= 0:
            raise ValidationError(f"spacing must be positive, got {self.spacing}")

    @property
    def shape(self):
        return self.array.shape

    def index_to_physical(self, index):
        """Map a (row, col) index to physical coordinates."""
        idx = np.asarray(index, dtype=np.float64)
        return np.asarray(self.origin) + self.direction @ (np.asarray(self.spacing) * idx)

    def with_array(self, array, origin=None):
        """Return a new image sharing this geometry but holding ``array``."""
        return Image2D(array,
                       origin=self.origin if origin is None else origin,
                       spacing=self.spacing,
                       direction=self.direction.copy())


def as_image(img, name="image") -> Image2D:
    """Wrap an ndarray as Image2D (identity geometry); Image2D passes through.

    Raises:
        ValidationError: if the data is not a non-empty 2D real array
    """
    if not isinstance(img, Image2D):
        img = Image2D(np.asarray(img))
    arr = img.array
    if arr.ndim != 2:
        raise ValidationError(f"{name} must be 2D, got {arr.ndim}D with shape {arr.shape}")
    if arr.shape[0] == 0 or arr.shape[1] == 0:
        raise ValidationError(f"{name} must not be empty, got shape {arr.shape}")
    if np.iscomplexobj(arr):
        raise ValidationError(f"{name} must be real-valued, got dtype {arr.dtype}")
    if not (np.issubdtype(arr.dtype, np.number) or arr.dtype == np.bool_):
        raise ValidationError(f"{name} must be numeric, got dtype {arr.dtype}")
    return img


def correlation_geometry(fixed: Image2D, moving_shape):
    """Origin of the correlation image for a given fixed image.

    Index (H_M-1, W_M-1) of the correlation image is zero translation, so the
    output origin is moved back by that many fixed-image pixels.
    """
    lag = np.array([moving_shape[0] - 1, moving_shape[1] - 1], dtype=np.float64)
    origin = np.asarray(fixed.origin) - fixed.direction @ (np.asarray(fixed.spacing) * lag)
    return tuple(float(v) for v in origin)
