"""
Complete EVM Pipeline

Wraps the temporal FIR filter with colour conversion and spatial
down/up-sampling so RGB frames go in and magnified RGB frames come out.
"""

import dataclasses
import logging
from collections import deque
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np
import cv2

from .errors import FrameShapeMismatch
from .filter_spec import FilterSpec
from .pyramid import downsample, upsample
from .temporal_filter import TemporalFIRFilter

logger = logging.getLogger(__name__)


def rgb_to_ycrcb(frame: np.ndarray) -> np.ndarray:
    """RGB in [0, 255] to float32 (Y, Cr, Cb) in [0, 1]."""
    rgb = frame.astype(np.float32) / 255.0
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2YCrCb)


def ycrcb_to_rgb(frame: np.ndarray, dtype) -> np.ndarray:
    """Float32 (Y, Cr, Cb) in [0, 1] back to RGB in [0, 255] of the given dtype."""
    rgb = cv2.cvtColor(frame.astype(np.float32), cv2.COLOR_YCrCb2RGB) * 255.0
    rgb = np.clip(rgb, 0, 255)
    if np.issubdtype(np.dtype(dtype), np.integer):
        return np.rint(rgb).astype(dtype)
    return rgb.astype(dtype)


class MagnificationPipeline:
    """
    Eulerian Video Magnification pipeline.

    Processes video frames through:
    1. RGB -> YCrCb conversion
    2. Spatial downsampling (Gaussian pyramid)
    3. Temporal band-pass filtering and amplification
    4. Upsampling and addition onto the original frame
    5. YCrCb -> RGB conversion

    Each output is added onto the frame that entered num_taps - 1 calls
    earlier, so the first num_taps - 1 calls return None.
    """

    def __init__(self, spec: FilterSpec, pyramid_levels: int = 4):
        """
        Initialize EVM pipeline.

        Args:
            spec: Temporal filter parameters
            pyramid_levels: Number of downsampling steps before filtering
        """
        if pyramid_levels < 0:
            raise ValueError(f"pyramid_levels must be >= 0, got {pyramid_levels}")

        self.spec = spec
        self.pyramid_levels = pyramid_levels
        self.temporal_filter = TemporalFIRFilter(spec)

        # Originals awaiting their filtered signal
        self._pending = deque()
        self._frame_shape: Optional[Tuple[int, ...]] = None
        self._frame_dtype = None

        self.frames_in = 0
        self.frames_out = 0

    def _combine(self, original: np.ndarray, filtered: np.ndarray) -> np.ndarray:
        height, width = original.shape[:2]
        amplified = upsample(filtered, (width, height), self.pyramid_levels)
        self.frames_out += 1
        return ycrcb_to_rgb(original + amplified, self._frame_dtype)

    def process_frame(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """
        Process a single video frame.

        Args:
            frame: RGB frame (H, W, 3), uint8 or float in [0, 255]

        Returns:
            Magnified RGB frame with the input dtype, or None while the
            temporal filter is warming up

        Raises:
            FrameShapeMismatch: frame shape differs from earlier frames
        """
        if self._frame_shape is None:
            if frame.ndim != 3 or frame.shape[2] != 3:
                raise FrameShapeMismatch((None, None, 3), frame.shape)
            self._frame_shape = frame.shape
            self._frame_dtype = frame.dtype
        elif frame.shape != self._frame_shape:
            raise FrameShapeMismatch(self._frame_shape, frame.shape)

        ycrcb = rgb_to_ycrcb(frame)
        filtered = self.temporal_filter.ingest(downsample(ycrcb, self.pyramid_levels))

        self._pending.append(ycrcb)
        self.frames_in += 1

        if filtered is None:
            return None

        return self._combine(self._pending.popleft(), filtered)

    def drain(self, padding: str = "zeros") -> Iterator[np.ndarray]:
        """
        Emit the frames still held back by the temporal filter.

        Like the filter's drain, this leaves the buffered frames in place,
        so processing can continue afterwards.

        Args:
            padding: "zeros" or "edge", see TemporalFIRFilter.drain
        """
        return self._drain(list(self._pending), self.temporal_filter.drain(padding))

    def _drain(self, originals, drained) -> Iterator[np.ndarray]:
        for original, filtered in zip(originals, drained):
            yield self._combine(original, filtered)

    def process_stream(
        self,
        frames: Iterable[np.ndarray],
        drain_padding: Optional[str] = None
    ) -> Iterator[np.ndarray]:
        """
        Magnify a whole sequence of frames.

        Args:
            frames: RGB frames
            drain_padding: If set, flush the held-back frames at the end
                with this padding so every input yields an output

        Yields:
            Magnified RGB frames in input order
        """
        for frame in frames:
            out = self.process_frame(frame)
            if out is not None:
                yield out

        if drain_padding is not None:
            yield from self.drain(drain_padding)

    def update_params(self, **changes):
        """
        Update filter parameters (e.g. alpha=20.0, high_freq=2.0).

        Note: any change rebuilds the temporal filter, which warms up again.
        """
        self.spec = dataclasses.replace(self.spec, **changes)
        self.reset()

    def reset(self):
        """Drop all buffered frames and start a fresh temporal filter."""
        self.temporal_filter = TemporalFIRFilter(self.spec)
        self._pending.clear()
        self._frame_shape = None
        self._frame_dtype = None
        self.frames_in = 0
        self.frames_out = 0
        logger.debug("Pipeline reset: %s", self.spec)

    def get_metrics(self) -> dict:
        """Frame counters and filter state."""
        return {
            'frames_in': self.frames_in,
            'frames_out': self.frames_out,
            'state': self.temporal_filter.state.value,
            'latency_frames': self.temporal_filter.latency
        }
