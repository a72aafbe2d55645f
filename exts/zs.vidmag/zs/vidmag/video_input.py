"""
Video Input

Frame sources and a file sink for the magnification pipeline: video files
via OpenCV and a synthetic source with a known periodic signal for testing.
"""

import logging
from pathlib import Path
from typing import Iterable, Iterator, Optional, Tuple, Union

import numpy as np
import cv2

logger = logging.getLogger(__name__)


class VideoSource:
    """Base class for video sources."""

    def read_frame(self) -> Optional[np.ndarray]:
        """Read next frame. Returns None if no more frames."""
        raise NotImplementedError

    def get_fps(self) -> float:
        """Get video framerate."""
        raise NotImplementedError

    def get_frame_size(self) -> Tuple[int, int]:
        """Get (width, height)."""
        raise NotImplementedError

    def frames(self) -> Iterator[np.ndarray]:
        """Iterate over the remaining frames."""
        while True:
            frame = self.read_frame()
            if frame is None:
                return
            yield frame

    def release(self):
        """Release resources."""
        pass

    def reset(self):
        """Reset to beginning."""
        pass

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class FileVideoSource(VideoSource):
    """
    RGB frames decoded from a video file.

    The filter needs a sample rate; containers that report none (0 fps)
    fall back to default_fps.
    """

    def __init__(
        self,
        file_path: Union[str, Path],
        max_frames: Optional[int] = None,
        default_fps: float = 30.0
    ):
        """
        Args:
            file_path: Path to video file
            max_frames: Stop after this many frames (None reads to the end)
            default_fps: Sample rate used when the file reports none

        Raises:
            ValueError: file cannot be opened
        """
        self.file_path = Path(file_path)
        self.max_frames = max_frames
        self.frames_read = 0

        self._cap = cv2.VideoCapture(str(self.file_path))
        if not self._cap.isOpened():
            raise ValueError(f"Could not open video file: {self.file_path}")

        reported_fps = self._cap.get(cv2.CAP_PROP_FPS)
        if reported_fps and reported_fps > 0:
            self.fps = float(reported_fps)
        else:
            logger.warning(
                "%s reports no framerate, assuming %.1f fps", self.file_path, default_fps
            )
            self.fps = float(default_fps)

        self.width = int(self._cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        self.height = int(self._cap.get(cv2.CAP_PROP_FRAME_HEIGHT))

        logger.info(
            "Opened %s: %dx%d @ %.1f fps", self.file_path, self.width, self.height, self.fps
        )

    def read_frame(self) -> Optional[np.ndarray]:
        if self._cap is None:
            return None
        if self.max_frames is not None and self.frames_read >= self.max_frames:
            return None

        ok, bgr = self._cap.read()
        if not ok:
            return None

        self.frames_read += 1
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)

    def get_fps(self) -> float:
        return self.fps

    def get_frame_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def release(self):
        if self._cap is not None:
            self._cap.release()
            self._cap = None

    def reset(self):
        """Rewind to the first frame."""
        if self._cap is not None:
            self._cap.set(cv2.CAP_PROP_POS_FRAMES, 0)
        self.frames_read = 0


class VideoFileSink:
    """
    Writes RGB frames (uint8) to a video file.

    The frame size is taken from the first frame written.
    """

    def __init__(self, file_path: Union[str, Path], fps: float, fourcc: str = "MJPG"):
        self.file_path = Path(file_path)
        self.fps = fps
        self.fourcc = fourcc
        self.frames_written = 0
        self._writer = None
        self._size: Optional[Tuple[int, int]] = None

    def write(self, frame: np.ndarray):
        """
        Raises:
            ValueError: the writer cannot be opened, or the frame size changed
        """
        height, width = frame.shape[:2]
        if self._writer is None:
            self._writer = cv2.VideoWriter(
                str(self.file_path),
                cv2.VideoWriter_fourcc(*self.fourcc),
                self.fps,
                (width, height)
            )
            if not self._writer.isOpened():
                self._writer = None
                raise ValueError(
                    f"Could not open {self.file_path} for writing ({self.fourcc})"
                )
            self._size = (width, height)
        elif (width, height) != self._size:
            raise ValueError(f"Frame size {(width, height)} does not match {self._size}")

        self._writer.write(cv2.cvtColor(frame.astype(np.uint8), cv2.COLOR_RGB2BGR))
        self.frames_written += 1

    def write_all(self, frames: Iterable[np.ndarray]) -> int:
        """Write every frame; returns the number written."""
        for frame in frames:
            self.write(frame)
        return self.frames_written

    def release(self):
        if self._writer is not None:
            self._writer.release()
            self._writer = None
            logger.info("Wrote %d frames to %s", self.frames_written, self.file_path)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.release()
        return False


class SyntheticVideoSource(VideoSource):
    """
    Synthetic video for testing.

    Flat grey frames whose central region brightens and darkens
    sinusoidally at pulse_freq, plus optional uniform noise.
    """

    def __init__(
        self,
        width: int = 64,
        height: int = 64,
        fps: float = 30.0,
        duration: float = 5.0,
        pulse_freq: float = 1.0,
        amplitude: float = 2.0,
        noise: int = 0,
        seed: int = 0
    ):
        """
        Initialize synthetic video source.

        Args:
            width: Frame width
            height: Frame height
            fps: Framerate
            duration: Total duration (seconds)
            pulse_freq: Frequency of the brightness change (Hz)
            amplitude: Peak brightness change (0-255 scale)
            noise: Max absolute per-pixel noise (0 disables)
            seed: Noise seed
        """
        self.width = width
        self.height = height
        self.fps = fps
        self.duration = duration
        self.pulse_freq = pulse_freq
        self.amplitude = amplitude
        self.noise = noise
        self.seed = seed

        self.total_frames = int(fps * duration)
        self.current_frame = 0
        self._rng = np.random.default_rng(seed)

        logger.info(
            "Created synthetic video: %dx%d @ %.1f fps, %d frames, pulse=%.2f Hz",
            width, height, fps, self.total_frames, pulse_freq
        )

    def read_frame(self) -> Optional[np.ndarray]:
        """Generate next synthetic frame."""
        if self.current_frame >= self.total_frames:
            return None

        t = self.current_frame / self.fps
        pulse = self.amplitude * np.sin(2 * np.pi * self.pulse_freq * t)

        frame = np.full((self.height, self.width, 3), 128.0)

        h_start, h_end = self.height // 3, 2 * self.height // 3
        w_start, w_end = self.width // 3, 2 * self.width // 3
        frame[h_start:h_end, w_start:w_end] += pulse

        if self.noise > 0:
            frame += self._rng.integers(-self.noise, self.noise + 1, frame.shape)

        self.current_frame += 1

        return np.clip(np.rint(frame), 0, 255).astype(np.uint8)

    def get_fps(self) -> float:
        return self.fps

    def get_frame_size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def reset(self):
        """Reset to beginning."""
        self.current_frame = 0
        self._rng = np.random.default_rng(self.seed)
