"""Shared pytest configuration and fixtures for the zs.vidmag test suite."""

import sys
from pathlib import Path

import numpy as np
import pytest

# Allow running the suite from a checkout without installing the extension
EXT_DIR = Path(__file__).parent.parent / "exts" / "zs.vidmag"
if str(EXT_DIR) not in sys.path:
    sys.path.insert(0, str(EXT_DIR))

from zs.vidmag.core.filter_spec import FilterSpec  # noqa: E402


@pytest.fixture()
def small_spec():
    """Five-tap filter around 1 Hz at 30 fps."""
    return FilterSpec(
        low_freq=0.8333,
        high_freq=1.0,
        fps=30.0,
        num_taps=5,
        alpha=50.0,
        chroma_attenuation=1.0
    )


@pytest.fixture()
def long_spec():
    """101-tap filter with a 3-6 Hz pass-band, well away from DC."""
    return FilterSpec(
        low_freq=3.0,
        high_freq=6.0,
        fps=30.0,
        num_taps=101,
        alpha=1.0,
        chroma_attenuation=1.0
    )


@pytest.fixture()
def rng():
    return np.random.default_rng(1234)


@pytest.fixture()
def random_frames(rng):
    """Factory for sequences of random (H, W, 3) float32 frames."""
    def make(count, height=4, width=6):
        return [
            rng.uniform(-1.0, 1.0, (height, width, 3)).astype(np.float32)
            for _ in range(count)
        ]
    return make
