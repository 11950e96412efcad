"""
Eye Tracking by Template Matching

Follows a captured eye patch from frame to frame. The template is
searched only inside a small window centred on the last known eye
position, using normalized squared-difference matching.
"""

import cv2
import numpy as np
from dataclasses import dataclass
from typing import Dict, Any, Optional, Tuple
import logging

from ..utils.geometry import Rect

logger = logging.getLogger(__name__)


@dataclass
class TrackResult:
    """Outcome of a successful template search."""
    window: Rect  # Search window used for this frame
    eye: Rect  # New eye location, template-sized
    score: float  # TM_SQDIFF_NORMED score, 0 is a perfect match


class EyeTracker:
    """
    Template matcher for a single eye.
    """

    def __init__(self, template_size: Tuple[int, int] = (16, 12),
                 window_scale: int = 2, match_threshold: float = 0.4):
        """
        Initialize eye tracker.

        Args:
            template_size: Template size (width, height)
            window_scale: Search window size as a multiple of the template size
            match_threshold: Largest accepted matching score
        """
        if window_scale < 1:
            raise ValueError(f"Search window must not be smaller than the template: scale={window_scale}")

        self.template_size = template_size
        self.window_size = (template_size[0] * window_scale, template_size[1] * window_scale)
        self.match_threshold = match_threshold

    def capture_template(self, gray: np.ndarray, eye: Rect) -> Tuple[np.ndarray, Rect]:
        """
        Copy the eye patch out of a grayscale frame.

        Args:
            gray: Grayscale frame
            eye: Eye rectangle, moved inside the frame if it sticks out

        Returns:
            Tuple of (template patch, eye rectangle actually used)
        """
        eye = Rect(eye.x, eye.y, self.template_size[0], self.template_size[1]).clamp_to_image(gray)
        rows, cols = eye.as_slices()
        return gray[rows, cols].copy(), eye

    def search_window(self, gray: np.ndarray, eye: Rect) -> Rect:
        """Search window centred on the eye and kept inside the frame."""
        window = Rect.centered_at(eye.centroid, self.window_size[0], self.window_size[1])
        return window.clamp_to_image(gray)

    def locate(self, gray: np.ndarray, template: np.ndarray, eye: Rect) -> Optional[TrackResult]:
        """
        Locate the eye template near its previous position.

        Args:
            gray: Current grayscale frame
            template: Eye template patch
            eye: Previous eye rectangle

        Returns:
            TrackResult on a good match, None otherwise
        """
        window = self.search_window(gray, eye)

        tpl_height, tpl_width = template.shape[:2]
        if tpl_width > window.width or tpl_height > window.height:
            raise ValueError(
                f"Template {tpl_width}x{tpl_height} larger than search window "
                f"{window.width}x{window.height}"
            )

        rows, cols = window.as_slices()
        # Result is (W - w + 1) x (H - h + 1)
        result = cv2.matchTemplate(gray[rows, cols], template, cv2.TM_SQDIFF_NORMED)
        min_val, _, min_loc, _ = cv2.minMaxLoc(result)

        if min_val > self.match_threshold:
            logger.debug(f"Template match rejected: score={min_val:.3f}")
            return None

        new_eye = Rect(
            window.x + min_loc[0],
            window.y + min_loc[1],
            self.template_size[0],
            self.template_size[1]
        )
        return TrackResult(window=window, eye=new_eye, score=float(min_val))


def create_eye_tracker(config: Dict[str, Any]) -> EyeTracker:
    """
    Factory function to create an eye tracker from the tracking config.
    """
    return EyeTracker(
        template_size=(config.get('template_width', 16), config.get('template_height', 12)),
        window_scale=config.get('window_scale', 2),
        match_threshold=config.get('match_threshold', 0.4)
    )
