"""
Temporal Band-Pass Filtering for EVM

FIR band-pass filter applied as a sliding convolution over a bounded
history of frames. Channel 0 is treated as luminance, channels 1-2 as
chrominance.
"""

import enum
import logging
from typing import Iterator, List, Optional, Tuple

import numpy as np

from .errors import FrameShapeMismatch
from .filter_design import design_bandpass_taps
from .filter_spec import FilterSpec

logger = logging.getLogger(__name__)

NUM_CHANNELS = 3
DRAIN_PADDING_MODES = ("zeros", "edge")


class FilterState(enum.Enum):
    WARMING_UP = "warming_up"
    STEADY = "steady"


class FrameRingBuffer:
    """
    Fixed-capacity delay line of frames, indexed newest-first.

    Storage is allocated once, on the first push, as a single
    (capacity, H, W, C) array. Pushing copies the frame into the buffer,
    so callers may reuse their own frame storage afterwards.
    """

    def __init__(self, capacity: int, dtype=np.float32):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        self.capacity = capacity
        self.dtype = np.dtype(dtype)
        self._storage: Optional[np.ndarray] = None
        self._head = 0  # slot of the newest frame
        self._size = 0

    def __len__(self) -> int:
        return self._size

    def __getitem__(self, n: int) -> np.ndarray:
        """Frame n steps back in time (0 = newest). Read-only view."""
        if not 0 <= n < self._size:
            raise IndexError(f"history index {n} out of range [0, {self._size})")
        view = self._storage[(self._head + n) % self.capacity].view()
        view.flags.writeable = False
        return view

    @property
    def frame_shape(self) -> Optional[Tuple[int, ...]]:
        if self._storage is None:
            return None
        return self._storage.shape[1:]

    def is_full(self) -> bool:
        return self._size == self.capacity

    def push(self, frame: np.ndarray):
        """Copy frame in as the newest entry, overwriting the oldest if full."""
        if self._storage is None:
            self._storage = np.zeros(
                (self.capacity, *frame.shape), dtype=self.dtype
            )

        head = (self._head - 1) % self.capacity
        self._storage[head] = frame
        # Commit only after the copy succeeded
        self._head = head
        self._size = min(self._size + 1, self.capacity)

    def evict_oldest(self):
        """Drop the oldest entry."""
        if self._size == 0:
            raise IndexError("evict from empty history")
        self._size -= 1

    def snapshot(self) -> List[np.ndarray]:
        """Independent copies of the history, newest-first."""
        return [self[n].copy() for n in range(self._size)]


class TemporalFIRFilter:
    """
    FIR band-pass filter with a frame history for streaming video.

    Produces nothing for the first num_taps - 1 frames (warm-up). After
    that, every ingested frame yields one filtered, magnified frame:

        out[c] = alpha * g[c] * sum_n taps[n] * history[n][c]

    where history[0] is the newest frame, g[0] = 1 (luma) and
    g[1] = g[2] = chroma_attenuation.

    Not thread-safe; ingest() must not be called concurrently.
    """

    def __init__(self, spec: FilterSpec, dtype=np.float32):
        """
        Initialize temporal filter.

        Args:
            spec: Filter parameters (validated on construction)
            dtype: Floating-point type of history and output frames
        """
        self.spec = spec
        self.dtype = np.dtype(dtype)

        # Design FIR filter (float64 internally)
        taps = design_bandpass_taps(
            spec.low_freq,
            spec.high_freq,
            spec.fps,
            spec.num_taps,
            dtype=self.dtype
        ).astype(self.dtype, copy=True)
        taps.flags.writeable = False
        self._taps = taps

        # Per-channel output gain: luma, chroma, chroma
        gains = np.array(
            [1.0, spec.chroma_attenuation, spec.chroma_attenuation],
            dtype=np.float64
        ) * spec.alpha
        self._channel_gains = gains.astype(self.dtype)
        self._channel_gains.flags.writeable = False

        self._history = FrameRingBuffer(spec.num_taps, dtype=self.dtype)
        self._state = FilterState.WARMING_UP
        self.frames_ingested = 0
        self.frames_emitted = 0

        logger.debug(
            "TemporalFIRFilter: %d taps, band [%.4f, %.4f] Hz @ %.2f fps, "
            "alpha=%.2f, chroma_attenuation=%.2f",
            spec.num_taps, spec.low_freq, spec.high_freq, spec.fps,
            spec.alpha, spec.chroma_attenuation
        )

    @property
    def taps(self) -> np.ndarray:
        return self._taps

    @property
    def num_taps(self) -> int:
        return self.spec.num_taps

    @property
    def alpha(self) -> float:
        return self.spec.alpha

    @property
    def chroma_attenuation(self) -> float:
        return self.spec.chroma_attenuation

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def latency(self) -> int:
        """Frames between an input and the first output it fully contributes to."""
        return self.spec.num_taps - 1

    @property
    def frame_shape(self) -> Optional[Tuple[int, ...]]:
        """Shape fixed by the first ingested frame, or None before that."""
        return self._history.frame_shape

    def __len__(self) -> int:
        return len(self._history)

    def _check_shape(self, frame: np.ndarray):
        expected = self._history.frame_shape
        if expected is None:
            if frame.ndim != 3 or frame.shape[2] != NUM_CHANNELS:
                raise FrameShapeMismatch((None, None, NUM_CHANNELS), frame.shape)
        elif frame.shape != expected:
            raise FrameShapeMismatch(expected, frame.shape)

    def _convolve(self, frames) -> np.ndarray:
        """Weighted sum over a full newest-first window, then channel gains."""
        out = np.zeros(frames[0].shape, dtype=self.dtype)
        # Fixed summation order n = 0..N-1 for reproducible output
        for n in range(self.spec.num_taps):
            out += self._taps[n] * frames[n]
        out *= self._channel_gains
        return out

    def ingest(self, frame: np.ndarray) -> Optional[np.ndarray]:
        """
        Add a frame to the history and filter once the history is full.

        Args:
            frame: Input frame (H, W, 3), channel 0 luma, 1-2 chroma

        Returns:
            Filtered and magnified frame (H, W, 3), or None while warming up

        Raises:
            FrameShapeMismatch: frame shape differs from earlier frames
        """
        frame = np.asarray(frame)
        self._check_shape(frame)

        self._history.push(frame)
        self.frames_ingested += 1

        if not self._history.is_full():
            return None

        if self._state is FilterState.WARMING_UP:
            self._state = FilterState.STEADY
            logger.info(
                "Temporal filter warmed up after %d frames", self.frames_ingested
            )

        filtered = self._convolve(self._history)

        # Discard oldest frame
        self._history.evict_oldest()
        self.frames_emitted += 1

        return filtered

    def drain(self, padding: str = "zeros") -> Iterator[np.ndarray]:
        """
        Flush the frames still waiting in the history.

        Yields the num_taps - 1 outputs the filter would produce if the
        stream continued with padding frames: all-zero frames ("zeros") or
        repeats of the newest frame ("edge"). The history itself is left
        untouched. Yields nothing unless num_taps - 1 frames are buffered.

        Args:
            padding: "zeros" or "edge"

        Raises:
            ValueError: unknown padding mode
        """
        if padding not in DRAIN_PADDING_MODES:
            raise ValueError(
                f"Unknown padding {padding!r}, expected one of {DRAIN_PADDING_MODES}"
            )
        if len(self._history) != self.spec.num_taps - 1:
            return iter(())

        # Window is captured now; later ingests do not affect this flush
        return self._drain(self._history.snapshot(), padding)

    def _drain(self, window: List[np.ndarray], padding: str) -> Iterator[np.ndarray]:
        if padding == "edge":
            pad = window[0].copy()
        else:
            pad = np.zeros_like(window[0])

        for _ in range(self.spec.num_taps - 1):
            window.insert(0, pad)
            yield self._convolve(window)
            window.pop()

