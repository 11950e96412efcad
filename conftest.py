"""
Shared fixtures: synthetic frames with controlled motion.

The background is a random texture so template matching has a unique
optimum; motion is introduced by brightening rectangles, which gives
solid blobs after thresholding.
"""

import numpy as np
import pytest

from blink_tracker.modules.utils.geometry import Rect

FRAME_SHAPE = (120, 160)
LEFT_EYE_BLOB = Rect(10, 10, 20, 30)
RIGHT_EYE_BLOB = Rect(70, 10, 20, 30)


def brighten(image: np.ndarray, rects, delta: int) -> np.ndarray:
    result = image.copy()
    for r in rects:
        rows, cols = r.as_slices()
        result[rows, cols] += np.uint8(delta)
    return result


class FakeCapture:
    """Stands in for cv2.VideoCapture with a fixed list of frames."""

    def __init__(self, frames, opened=True):
        self.frames = list(frames)
        self.opened = opened
        self.released = False
        self.properties = {}

    def isOpened(self):
        return self.opened

    def read(self):
        if not self.frames:
            return False, None
        return True, self.frames.pop(0)

    def set(self, prop, value):
        self.properties[prop] = value
        return True

    def get(self, prop):
        return self.properties.get(prop, 0)

    def release(self):
        self.released = True


@pytest.fixture
def background():
    rng = np.random.default_rng(42)
    return rng.integers(50, 170, size=FRAME_SHAPE, dtype=np.uint8)


@pytest.fixture
def eyes_frame(background):
    """Background with both eye regions brightened."""
    return brighten(background, [LEFT_EYE_BLOB, RIGHT_EYE_BLOB], 40)


@pytest.fixture
def blink_frame(eyes_frame):
    """Eye frame with a small brightened patch on each eye centre."""
    patches = [Rect.centered_at(blob.centroid, 12, 10) for blob in (LEFT_EYE_BLOB, RIGHT_EYE_BLOB)]
    return brighten(eyes_frame, patches, 20)


@pytest.fixture
def brighten_rects():
    return brighten


@pytest.fixture
def fake_capture():
    return FakeCapture
