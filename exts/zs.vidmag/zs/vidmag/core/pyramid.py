"""
Spatial Pyramid Helpers

Gaussian down/up-sampling around the temporal filter. The filter runs on a
coarse pyramid level; its output is brought back to full resolution
before being added to the original frame.
"""

import numpy as np
import cv2
from typing import List, Tuple


def _check_levels(levels: int):
    if levels < 0:
        raise ValueError(f"Pyramid levels must be >= 0, got {levels}")


def build_gaussian_pyramid(image: np.ndarray, levels: int) -> List[np.ndarray]:
    """
    Build Gaussian pyramid by repeated blur-and-downsample.

    Args:
        image: Input image (H, W, C)
        levels: Number of downsampling steps

    Returns:
        List of levels + 1 images from finest to coarsest [L0, L1, ..., LN]
    """
    _check_levels(levels)

    pyramid = [image]
    current = image

    for _ in range(levels):
        # 5x5 Gaussian blur and drop every other row/column
        current = cv2.pyrDown(current)
        pyramid.append(current)

    return pyramid


def downsample(image: np.ndarray, levels: int) -> np.ndarray:
    """Coarsest level of the Gaussian pyramid."""
    return build_gaussian_pyramid(image, levels)[-1]


def upsample(image: np.ndarray, size: Tuple[int, int], levels: int) -> np.ndarray:
    """
    Bring a coarse pyramid level back to full resolution.

    Args:
        image: Coarse image (h, w, C)
        size: Target (width, height), as for cv2.resize
        levels: Number of upsampling steps taken before the final resize

    Returns:
        Image of shape (height, width, C)
    """
    _check_levels(levels)

    current = image
    for _ in range(levels):
        current = cv2.pyrUp(current)

    # pyrUp doubles exactly; odd source dimensions need a final resize
    width, height = size
    if current.shape[1] != width or current.shape[0] != height:
        current = cv2.resize(current, (width, height))

    return current
