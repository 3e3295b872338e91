# mncc - masked FFT normalized cross-correlation
from .errors import (MNCCError, ValidationError, BackendError,
                     NumericAssertion, CorrelationAborted)
from .image import Image2D, as_image
from .masks import normalize_mask, apply_mask
from .padding import PaddingPlan, plan_padding
from .fft_backend import (FFTBackend, NumpyFFTBackend, OpenCVFFTBackend,
                          get_backend, register_backend, available_backends)
from .overlap import OverlapStats, overlap_statistics
from .guard import DEFAULT_EPSILON
from .correlation import CorrelationResult, masked_fft_ncc, fft_ncc
from .config import DEFAULT_CONFIG, load_config
