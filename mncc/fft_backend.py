"""
FFT backends: forward/inverse real FFTs on a fixed padded size.

Spectra are opaque to the correlation core; each backend also provides the
conjugate product so the core never looks inside a spectrum.
"""

import cv2
import numpy as np
from typing import Callable, Dict, Tuple

from .errors import BackendError, ValidationError


class FFTBackend:
    """Narrow FFT capability used by the correlation core.

    Subclasses implement ``_forward``, ``_inverse`` and ``_multiply_conjugate``;
    the public wrappers turn any failure into BackendError.
    """
    name = "base"

    def __init__(self, shape: Tuple[int, int]):
        self.shape = (int(shape[0]), int(shape[1]))

    @staticmethod
    def good_size(n: int) -> int:
        # products of 2, 3 and 5
        return int(cv2.getOptimalDFTSize(int(n)))

    def forward(self, real):
        if real.shape != self.shape:
            raise BackendError(f"{self.name}: buffer shape {real.shape} != planned {self.shape}")
        return self._call(self._forward, real)

    def inverse(self, spectrum):
        return self._call(self._inverse, spectrum)

    def multiply_conjugate(self, a, b):
        """Return a * conj(b) in this backend's spectral layout."""
        return self._call(self._multiply_conjugate, a, b)

    def _call(self, fn: Callable, *args):
        try:
            return fn(*args)
        except BackendError:
            raise
        except (MemoryError, cv2.error, ValueError, TypeError) as e:
            raise BackendError(f"{self.name} FFT failed on shape {self.shape}: {e}") from e

    def _forward(self, real):
        raise NotImplementedError

    def _inverse(self, spectrum):
        raise NotImplementedError

    def _multiply_conjugate(self, a, b):
        raise NotImplementedError


class NumpyFFTBackend(FFTBackend):
    """Hermitian half-spectrum pair (numpy.fft.rfft2 / irfft2)."""
    name = "numpy"

    def _forward(self, real):
        return np.fft.rfft2(real, s=self.shape)

    def _inverse(self, spectrum):
        return np.fft.irfft2(spectrum, s=self.shape)

    def _multiply_conjugate(self, a, b):
        return a * np.conj(b)


class OpenCVFFTBackend(FFTBackend):
    """Full complex spectrum through cv2.dft / cv2.idft (2-channel float64)."""
    name = "opencv"

    def _forward(self, real):
        src = np.ascontiguousarray(real, dtype=np.float64)
        return cv2.dft(src, flags=cv2.DFT_COMPLEX_OUTPUT)

    def _inverse(self, spectrum):
        # DFT_SCALE makes inverse(forward(x)) == x
        out = cv2.idft(spectrum, flags=cv2.DFT_SCALE | cv2.DFT_REAL_OUTPUT)
        return np.asarray(out, dtype=np.float64).reshape(self.shape)

    def _multiply_conjugate(self, a, b):
        return cv2.mulSpectrums(a, b, 0, conjB=True)


_BACKENDS: Dict[str, type] = {
    "numpy": NumpyFFTBackend,
    "opencv": OpenCVFFTBackend,
}


def register_backend(name: str, cls: type) -> None:
    """Make ``cls`` (an FFTBackend subclass) selectable by ``name``."""
    if not (isinstance(cls, type) and issubclass(cls, FFTBackend)):
        raise ValidationError(f"backend {name!r} must subclass FFTBackend")
    _BACKENDS[name.lower()] = cls


def available_backends():
    return sorted(_BACKENDS)


def get_backend(name) -> type:
    """Look up a backend class by name; classes pass through unchanged."""
    if isinstance(name, type) and issubclass(name, FFTBackend):
        return name
    key = str(name).lower()
    if key not in _BACKENDS:
        raise ValidationError(f"unknown FFT backend {name!r}; available: {available_backends()}")
    return _BACKENDS[key]
