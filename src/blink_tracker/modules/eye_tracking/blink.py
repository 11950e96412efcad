"""
Blink classification for a tracked eye.
"""

from typing import List, Optional, Union

from ..utils.geometry import Rect
from .motion import MotionBlobs


def is_blink(motion: Union[MotionBlobs, List[Rect]], window: Rect, eye: Rect,
             count: Optional[int] = None) -> bool:
    """
    Check whether the motion in the search window is a blink of the eye.

    A blink shows up as exactly one blob that stays clear of the search
    window edges and covers the eye centroid.

    Args:
        motion: Motion blobs of the current frame, or a list of blob rects
        window: Current search window
        eye: Current eye rectangle
        count: Component count when ``motion`` is a plain list

    Returns:
        True if the motion is a blink
    """
    if isinstance(motion, MotionBlobs):
        blobs, count = motion.blobs, motion.count
    else:
        blobs = motion
        if count is None:
            count = len(blobs)

    if count != 1 or len(blobs) != 1:
        return False

    blob = blobs[0]

    if not window.strictly_contains_rect(blob):
        return False

    return blob.strictly_contains_point(eye.centroid)
