"""
Motion Blob Extraction

Frame differencing inside a search window, followed by thresholding,
a morphological opening and contour extraction. The resulting blobs
feed both the eye-pair classifier and the blink classifier.
"""

import cv2
import numpy as np
from dataclasses import dataclass, field
from typing import List, Optional
import logging

from ..utils.geometry import Rect

logger = logging.getLogger(__name__)


@dataclass
class MotionBlobs:
    """Connected components of moved pixels for one frame."""
    count: int  # Number of contours, holes included
    blobs: List[Rect] = field(default_factory=list)  # Bounding rects of outer components
    mask: Optional[np.ndarray] = None  # Full-size debug mask


class MotionDetector:
    """
    Extracts motion blobs between two grayscale frames.
    """

    def __init__(self, threshold: int = 5, kernel_size: int = 3):
        """
        Initialize motion detector.

        Args:
            threshold: Pixel difference above which a pixel counts as moved
            kernel_size: Size of the cross-shaped opening kernel
        """
        self.threshold = threshold
        self.kernel = cv2.getStructuringElement(cv2.MORPH_CROSS, (kernel_size, kernel_size))

    def motion_mask(self, gray: np.ndarray, prev: np.ndarray, window: Rect) -> np.ndarray:
        """
        Compute the binary motion mask restricted to the search window.

        Args:
            gray: Current grayscale frame
            prev: Previous grayscale frame
            window: Search window in frame coordinates

        Returns:
            Full-size uint8 mask, zero outside the window
        """
        if gray.shape != prev.shape:
            raise ValueError(f"Frame shapes differ: {gray.shape} vs {prev.shape}")

        window = window.clamp_to_image(gray)
        rows, cols = window.as_slices()

        mask = np.zeros(gray.shape[:2], dtype=np.uint8)

        diff = cv2.absdiff(gray[rows, cols], prev[rows, cols])
        _, diff = cv2.threshold(diff, self.threshold, 255, cv2.THRESH_BINARY)
        diff = cv2.morphologyEx(diff, cv2.MORPH_OPEN, self.kernel, iterations=1)

        mask[rows, cols] = diff
        return mask

    def extract(self, gray: np.ndarray, prev: np.ndarray, window: Rect) -> MotionBlobs:
        """
        Extract connected components of moved pixels inside the window.

        Args:
            gray: Current grayscale frame
            prev: Previous grayscale frame
            window: Search window in frame coordinates

        Returns:
            MotionBlobs with the component count, outer bounding rects and mask
        """
        mask = self.motion_mask(gray, prev, window)

        contours, hierarchy = cv2.findContours(
            mask.copy(), cv2.RETR_CCOMP, cv2.CHAIN_APPROX_SIMPLE
        )

        blobs = []
        if hierarchy is not None:
            for contour, info in zip(contours, hierarchy[0]):
                # Holes have a parent, outer boundaries don't
                if info[3] == -1:
                    blobs.append(Rect.from_tuple(cv2.boundingRect(contour)))

        return MotionBlobs(count=len(contours), blobs=blobs, mask=mask)
