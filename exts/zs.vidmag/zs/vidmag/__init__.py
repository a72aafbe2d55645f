"""
zs.vidmag - Eulerian video magnification core

Temporal FIR band-pass filtering of luma/chroma frames with
magnification, plus thin OpenCV glue for colour conversion,
spatial pyramids and video input.
"""

import logging

from .core.errors import FrameShapeMismatch, InvalidFilterSpec, VidmagError
from .core.filter_design import design_bandpass_taps, frequency_response
from .core.filter_spec import FilterSpec
from .core.temporal_filter import FilterState, TemporalFIRFilter
from .core.evm_pipeline import MagnificationPipeline

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "FilterSpec",
    "FilterState",
    "FrameShapeMismatch",
    "InvalidFilterSpec",
    "MagnificationPipeline",
    "TemporalFIRFilter",
    "VidmagError",
    "design_bandpass_taps",
    "frequency_response",
]
