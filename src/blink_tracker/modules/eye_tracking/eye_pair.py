"""
Eye-pair classification from motion blob geometry.

When both eyes blink at once, frame differencing yields two blobs of
about the same size lying side by side. These experimentally derived
heuristics decide whether two blobs look like such a pair.
"""

from typing import Dict, Any, List, Optional, Tuple
import logging

from ..utils.geometry import Rect
from .motion import MotionBlobs

logger = logging.getLogger(__name__)

SIZE_TOLERANCE = 5
VERTICAL_TOLERANCE = 5
MIN_DISTANCE_RATIO = 2
MAX_DISTANCE_RATIO = 5


def find_eye_pair(
    blobs: List[Rect],
    count: Optional[int] = None,
    template_size: Tuple[int, int] = (16, 12),
    size_tolerance: int = SIZE_TOLERANCE,
    vertical_tolerance: int = VERTICAL_TOLERANCE,
    min_ratio: int = MIN_DISTANCE_RATIO,
    max_ratio: int = MAX_DISTANCE_RATIO
) -> Optional[Rect]:
    """
    Decide whether two blobs form a left/right eye pair.

    Args:
        blobs: Bounding rectangles of the outer components
        count: Total component count, defaults to ``len(blobs)``
        template_size: Eye rectangle size (width, height)
        size_tolerance: Maximum width/height difference (exclusive)
        vertical_tolerance: Maximum vertical offset (exclusive)
        min_ratio: Smallest accepted distance/width ratio
        max_ratio: Largest accepted distance/width ratio

    Returns:
        Eye rectangle centred on the first blob, or None
    """
    if count is None:
        count = len(blobs)
    if count != 2 or len(blobs) < 2:
        return None

    r1, r2 = blobs[0], blobs[1]

    # widths and heights are about the same
    if abs(r1.width - r2.width) >= size_tolerance:
        return None
    if abs(r1.height - r2.height) >= size_tolerance:
        return None

    # vertical distance is small
    if abs(r1.y - r2.y) >= vertical_tolerance:
        return None

    if r1.width <= 0:
        return None

    # horizontal distance relative to the blob width; integer division
    # is part of the calibration
    dist_ratio = abs(r1.x - r2.x) // r1.width
    if dist_ratio < min_ratio or dist_ratio > max_ratio:
        return None

    return Rect.centered_at(r1.centroid, template_size[0], template_size[1])


class EyePairDetector:
    """
    Eye-pair classifier bound to a tracking configuration.
    """

    def __init__(self, template_size: Tuple[int, int] = (16, 12),
                 size_tolerance: int = SIZE_TOLERANCE,
                 vertical_tolerance: int = VERTICAL_TOLERANCE,
                 min_ratio: int = MIN_DISTANCE_RATIO,
                 max_ratio: int = MAX_DISTANCE_RATIO):
        self.template_size = template_size
        self.size_tolerance = size_tolerance
        self.vertical_tolerance = vertical_tolerance
        self.min_ratio = min_ratio
        self.max_ratio = max_ratio

    def detect(self, motion: MotionBlobs) -> Optional[Rect]:
        eye = find_eye_pair(
            motion.blobs,
            count=motion.count,
            template_size=self.template_size,
            size_tolerance=self.size_tolerance,
            vertical_tolerance=self.vertical_tolerance,
            min_ratio=self.min_ratio,
            max_ratio=self.max_ratio
        )
        if eye is not None:
            logger.debug(f"Eye pair found: blobs={motion.blobs[:2]}, eye={eye}")
        return eye


def create_eye_pair_detector(config: Dict[str, Any]) -> EyePairDetector:
    """
    Factory function to create an eye-pair detector from the tracking config.
    """
    return EyePairDetector(
        template_size=(config.get('template_width', 16), config.get('template_height', 12)),
        size_tolerance=config.get('size_tolerance', SIZE_TOLERANCE),
        vertical_tolerance=config.get('vertical_tolerance', VERTICAL_TOLERANCE),
        min_ratio=config.get('min_distance_ratio', MIN_DISTANCE_RATIO),
        max_ratio=config.get('max_distance_ratio', MAX_DISTANCE_RATIO)
    )
