import numpy as np
import pytest
from mncc.image import Image2D, as_image, correlation_geometry
from mncc.errors import ValidationError


def test_wraps_ndarray_with_identity_geometry():
    img = as_image(np.zeros((3, 5), np.uint16))
    assert img.shape == (3, 5)
    assert img.origin == (0.0, 0.0) and img.spacing == (1.0, 1.0)
    assert np.array_equal(img.direction, np.eye(2))


def test_rejects_bad_arrays():
    for arr in (np.zeros((2, 2, 3)), np.zeros(4), np.zeros((0, 2)), np.zeros((2, 2), complex)):
        with pytest.raises(ValidationError):
            as_image(arr)
    with pytest.raises(ValidationError):
        Image2D(np.zeros((2, 2)), spacing=(1.0, 0.0))


def test_index_to_physical_with_direction():
    rot = np.array([[0.0, -1.0], [1.0, 0.0]])
    img = Image2D(np.zeros((4, 4)), origin=(1.0, 2.0), spacing=(2.0, 3.0), direction=rot)
    assert np.allclose(img.index_to_physical((1, 1)), (1.0 - 3.0, 2.0 + 2.0))
    origin = correlation_geometry(img, (3, 2))
    # zero translation index (2, 1) lands back on the fixed origin
    out = img.with_array(np.zeros((6, 5)), origin=origin)
    assert np.allclose(out.index_to_physical((2, 1)), img.origin)
