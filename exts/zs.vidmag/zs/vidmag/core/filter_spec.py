"""
Filter Specification

Immutable parameter set for the temporal band-pass filter.
"""

import math
from dataclasses import dataclass, fields
from typing import Any, Mapping

from .errors import InvalidFilterSpec
from .filter_design import validate_band


@dataclass(frozen=True)
class FilterSpec:
    """
    Temporal band-pass filter parameters.

    Attributes:
        low_freq: Lower corner frequency (Hz)
        high_freq: Upper corner frequency (Hz)
        fps: Video framerate (Hz)
        num_taps: FIR length (odd, >= 3); also the frame history depth
        alpha: Magnification factor
        chroma_attenuation: Extra gain on chroma channels (0 disables chroma)
    """
    low_freq: float
    high_freq: float
    fps: float
    num_taps: int
    alpha: float = 50.0
    chroma_attenuation: float = 1.0

    def __post_init__(self):
        validate_band(self.low_freq, self.high_freq, self.fps, self.num_taps)

        for name in ("alpha", "chroma_attenuation"):
            value = getattr(self, name)
            try:
                finite = math.isfinite(float(value))
            except (TypeError, ValueError) as e:
                raise InvalidFilterSpec(f"{name} must be a real number: {e}") from e
            if not finite:
                raise InvalidFilterSpec(f"{name} must be finite, got {value}")

        if float(self.alpha) <= 0:
            raise InvalidFilterSpec(f"alpha must be > 0, got {self.alpha}")
        if float(self.chroma_attenuation) < 0:
            raise InvalidFilterSpec(
                f"chroma_attenuation must be >= 0, got {self.chroma_attenuation}"
            )

    @property
    def nyquist(self) -> float:
        return self.fps / 2.0

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> "FilterSpec":
        """Build from a config mapping; unrelated keys are ignored."""
        names = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in config.items() if k in names}
        try:
            return cls(**kwargs)
        except TypeError as e:
            # Missing required field
            raise InvalidFilterSpec(str(e)) from e
