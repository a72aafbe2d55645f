import math

import numpy as np
import pytest
from scipy import signal

from zs.vidmag.core.errors import InvalidFilterSpec
from zs.vidmag.core.filter_design import (
    blackman_window,
    design_bandpass_taps,
    frequency_response,
    verify_symmetric,
)


def _reference_taps(lo, hi, fs, num_taps):
    M = num_taps - 1
    taps = []
    for n in range(num_taps):
        if n == M // 2:
            h = 2.0 * (hi - lo) / fs
        else:
            t = math.pi * (n - M / 2)
            h = math.sin(2.0 * hi / fs * t) / t - math.sin(2.0 * lo / fs * t) / t
        h *= (0.42 - 0.5 * math.cos(2 * math.pi * n / M)
              + 0.08 * math.cos(4 * math.pi * n / M))
        taps.append(h)
    return np.array(taps)


@pytest.mark.parametrize("lo, hi, fs, num_taps", [
    (0.8333, 1.0, 30.0, 5),
    (0.4, 3.0, 30.0, 31),
    (3.0, 6.0, 30.0, 101),
    (0.0, 15.0, 30.0, 7),
    (50.0, 60.0, 240.0, 63),
])
def test_taps_are_symmetric(lo, hi, fs, num_taps):
    taps = design_bandpass_taps(lo, hi, fs, num_taps)

    assert taps.shape == (num_taps,)
    assert taps.dtype == np.float64
    assert verify_symmetric(taps)
    for i in range(num_taps):
        assert taps[i] == pytest.approx(taps[num_taps - 1 - i], rel=1e-9, abs=1e-15)


def test_taps_match_windowed_sinc_formula():
    taps = design_bandpass_taps(0.4, 3.0, 30.0, 31)
    np.testing.assert_allclose(taps, _reference_taps(0.4, 3.0, 30.0, 31), rtol=1e-12, atol=1e-15)


def test_center_tap():
    taps = design_bandpass_taps(0.8333, 1.0, 30.0, 5)
    # Blackman window is exactly 1 at the center
    assert taps[2] == pytest.approx(2.0 * (1.0 - 0.8333) / 30.0)


def test_blackman_window_matches_scipy():
    np.testing.assert_allclose(blackman_window(21), signal.windows.blackman(21), atol=1e-12)


def test_float32_output_is_narrowed_from_double():
    wide = design_bandpass_taps(0.4, 3.0, 30.0, 31)
    narrow = design_bandpass_taps(0.4, 3.0, 30.0, 31, dtype=np.float32)

    assert narrow.dtype == np.float32
    np.testing.assert_array_equal(narrow, wide.astype(np.float32))


def test_equal_corners_give_degenerate_filter():
    taps = design_bandpass_taps(2.0, 2.0, 30.0, 9)
    assert np.all(taps == 0.0)


def test_design_is_deterministic():
    a = design_bandpass_taps(0.4, 3.0, 30.0, 31)
    b = design_bandpass_taps(0.4, 3.0, 30.0, 31)
    np.testing.assert_array_equal(a, b)


@pytest.mark.parametrize("lo, hi, fs, num_taps", [
    (20.0, 25.0, 30.0, 5),    # high above Nyquist
    (15.0, 15.0, 30.0, 5),    # low at Nyquist
    (2.0, 1.0, 30.0, 5),      # inverted band
    (-1.0, 1.0, 30.0, 5),     # negative corner
    (0.5, 1.0, 0.0, 5),       # zero sample rate
    (0.5, 1.0, 30.0, 4),      # even tap count
    (0.5, 1.0, 30.0, 1),      # too short
    (0.5, 1.0, 30.0, 5.0),    # not an integer
    (0.5, float("nan"), 30.0, 5),
])
def test_invalid_parameters_rejected(lo, hi, fs, num_taps):
    with pytest.raises(InvalidFilterSpec):
        design_bandpass_taps(lo, hi, fs, num_taps)


def test_high_cutoff_at_nyquist_allowed():
    taps = design_bandpass_taps(1.0, 15.0, 30.0, 11)
    assert verify_symmetric(taps)


def test_integer_dtype_rejected():
    with pytest.raises(InvalidFilterSpec):
        design_bandpass_taps(0.5, 1.0, 30.0, 5, dtype=np.int32)


def test_frequency_response_passes_band_and_rejects_dc():
    taps = design_bandpass_taps(3.0, 6.0, 30.0, 101)
    freqs, gain = frequency_response(taps, 30.0, num_points=1024)

    assert freqs[0] == 0.0
    assert freqs[-1] < 15.0
    assert gain[0] < 0.01

    center = np.argmin(np.abs(freqs - 4.5))
    assert gain[center] > 0.9

    stop = np.argmin(np.abs(freqs - 12.0))
    assert gain[stop] < 0.01


def test_verify_symmetric_detects_asymmetry():
    assert not verify_symmetric(np.array([0.1, 0.5, 0.2]))
