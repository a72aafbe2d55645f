"""
Band-Pass FIR Filter Design

Windowed-sinc synthesis of linear-phase band-pass taps for temporal
filtering. The impulse response is the difference of two normalized-sinc
low-pass responses, tapered by a Blackman window to suppress ringing.
Pure functions, no state.
"""

import logging
import math
from typing import Tuple

import numpy as np
from scipy import signal

from .errors import InvalidFilterSpec

logger = logging.getLogger(__name__)

SYMMETRY_RTOL = 1e-9


def validate_band(
    low_freq: float,
    high_freq: float,
    fps: float,
    num_taps: int
):
    """
    Check pass-band and tap count against the design constraints.

    Raises:
        InvalidFilterSpec: tap count is not an odd integer >= 3, the band
            is inverted or negative, or a corner violates Nyquist.
    """
    if isinstance(num_taps, bool) or not isinstance(num_taps, (int, np.integer)):
        raise InvalidFilterSpec(f"num_taps must be an integer, got {num_taps!r}")
    if num_taps < 3 or num_taps % 2 == 0:
        raise InvalidFilterSpec(f"num_taps must be odd and >= 3, got {num_taps}")

    try:
        values = [float(low_freq), float(high_freq), float(fps)]
    except (TypeError, ValueError) as e:
        raise InvalidFilterSpec(f"Frequencies must be real numbers: {e}") from e
    if not all(math.isfinite(v) for v in values):
        raise InvalidFilterSpec("Frequencies must be finite")

    low, high, rate = values
    if rate <= 0:
        raise InvalidFilterSpec(f"Sample rate must be positive, got {rate}")
    if low < 0:
        raise InvalidFilterSpec(f"Low cutoff must be >= 0, got {low}")
    if low > high:
        raise InvalidFilterSpec(
            f"Low cutoff ({low}) exceeds high cutoff ({high})"
        )

    nyquist = rate / 2.0
    if not low < nyquist:
        raise InvalidFilterSpec(
            f"Low cutoff ({low} Hz) must be below Nyquist ({nyquist} Hz)"
        )
    if high > nyquist:
        raise InvalidFilterSpec(
            f"High cutoff ({high} Hz) exceeds Nyquist ({nyquist} Hz)"
        )


def blackman_window(num_taps: int) -> np.ndarray:
    """
    Blackman window of length num_taps (float64).

    Same weights as scipy.signal.windows.blackman(num_taps) up to rounding.
    """
    M = num_taps - 1
    n = np.arange(num_taps, dtype=np.float64)
    return (
        0.42
        - 0.5 * np.cos(2.0 * np.pi * n / M)
        + 0.08 * np.cos(4.0 * np.pi * n / M)
    )


def verify_symmetric(taps: np.ndarray, rtol: float = SYMMETRY_RTOL) -> bool:
    """True if taps[i] == taps[N-1-i] for every i within rtol."""
    taps = np.asarray(taps, dtype=np.float64)
    # Floor for taps that are zero up to rounding (window end points)
    atol = np.finfo(np.float64).eps * float(np.max(np.abs(taps), initial=0.0))
    return bool(np.allclose(taps, taps[::-1], rtol=rtol, atol=atol))


def design_bandpass_taps(
    low_freq: float,
    high_freq: float,
    fps: float,
    num_taps: int,
    dtype=np.float64
) -> np.ndarray:
    """
    Design a symmetric band-pass FIR filter.

    Computed in float64 and narrowed to dtype only when dtype is narrower.

    Args:
        low_freq: Lower corner frequency (Hz)
        high_freq: Upper corner frequency (Hz)
        fps: Sample rate, i.e. video framerate (Hz)
        num_taps: Filter length (odd, >= 3)
        dtype: Output floating-point type

    Returns:
        Array of num_taps coefficients

    Raises:
        InvalidFilterSpec: on invalid band, tap count, or dtype
    """
    validate_band(low_freq, high_freq, fps, num_taps)

    out_dtype = np.dtype(dtype)
    if not np.issubdtype(out_dtype, np.floating):
        raise InvalidFilterSpec(f"Tap dtype must be floating point, got {out_dtype}")

    lo = float(low_freq)
    hi = float(high_freq)
    fs = float(fps)

    # Filter order is one less than the tap count; even since num_taps is odd
    M = num_taps - 1
    center = M // 2

    n = np.arange(num_taps, dtype=np.float64)
    t = np.pi * (n - center)
    t[center] = 1.0  # placeholder, center tap is set below

    h = np.sin(2.0 * hi / fs * t) / t - np.sin(2.0 * lo / fs * t) / t
    h[center] = 2.0 * (hi - lo) / fs

    h *= blackman_window(num_taps)

    if not verify_symmetric(h):
        raise InvalidFilterSpec("Designed filter is not symmetric")

    logger.debug(
        "Designed %d-tap band-pass [%.4f, %.4f] Hz @ %.2f fps",
        num_taps, lo, hi, fs
    )

    if out_dtype.itemsize < h.dtype.itemsize:
        return h.astype(out_dtype)
    return h


def frequency_response(
    taps: np.ndarray,
    fps: float,
    num_points: int = 512
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Magnitude response of an FIR filter.

    Args:
        taps: Filter coefficients
        fps: Sample rate (Hz)
        num_points: Number of frequencies between 0 and Nyquist

    Returns:
        (freqs_hz, gain) with gain = |H(f)|
    """
    freqs, response = signal.freqz(
        np.asarray(taps, dtype=np.float64), worN=num_points, fs=fps
    )
    return freqs, np.abs(response)
