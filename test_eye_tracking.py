"""
Tests for motion extraction, eye-pair and blink classification and
template tracking.
"""

import numpy as np
import pytest

from blink_tracker.modules.eye_tracking import (
    EyePairDetector, EyeTracker, MotionBlobs, MotionDetector,
    create_eye_tracker, find_eye_pair, is_blink
)
from blink_tracker.modules.utils.geometry import Rect

from conftest import FRAME_SHAPE, LEFT_EYE_BLOB, RIGHT_EYE_BLOB


# --- geometry -------------------------------------------------------------

def test_rect_centroid_and_centering():
    r = Rect(10, 10, 20, 30)
    assert r.centroid == (20, 25)
    assert Rect.centered_at(r.centroid, 16, 12) == Rect(12, 19, 16, 12)


def test_rect_clamp_shifts_without_resizing():
    assert Rect(-5, -3, 32, 24).clamp_to(160, 120) == Rect(0, 0, 32, 24)
    assert Rect(140, 110, 32, 24).clamp_to(160, 120) == Rect(128, 96, 32, 24)


def test_rect_clamp_rejects_oversized():
    with pytest.raises(ValueError):
        Rect(0, 0, 32, 24).clamp_to(20, 20)


# --- motion ---------------------------------------------------------------

def test_motion_finds_both_eye_blobs(background, eyes_frame):
    detector = MotionDetector()
    motion = detector.extract(eyes_frame, background, Rect.full_frame(background))

    assert motion.count == 2
    assert sorted(motion.blobs, key=lambda r: r.x) == [LEFT_EYE_BLOB, RIGHT_EYE_BLOB]
    assert motion.mask.shape == FRAME_SHAPE
    assert motion.mask[25, 20] == 255
    assert motion.mask[60, 120] == 0


def test_motion_restricted_to_window(background, eyes_frame):
    detector = MotionDetector()
    window = Rect(0, 0, 60, FRAME_SHAPE[0])
    motion = detector.extract(eyes_frame, background, window)

    assert motion.count == 1
    assert motion.blobs == [LEFT_EYE_BLOB]
    assert not motion.mask[:, 60:].any()


def test_motion_below_threshold_ignored(background, brighten_rects):
    detector = MotionDetector(threshold=5)
    faint = brighten_rects(background, [LEFT_EYE_BLOB], 5)
    motion = detector.extract(faint, background, Rect.full_frame(background))

    assert motion.count == 0
    assert motion.blobs == []


def test_motion_opening_removes_speckles(background):
    detector = MotionDetector()
    noisy = background.copy()
    noisy[50, 50] += 60
    noisy[80, 100] += 60
    motion = detector.extract(noisy, background, Rect.full_frame(background))

    assert motion.count == 0


def test_motion_counts_holes(background, brighten_rects):
    detector = MotionDetector()
    ring = brighten_rects(background, [Rect(40, 40, 30, 30)], 40)
    ring[50:60, 50:60] = background[50:60, 50:60]
    motion = detector.extract(ring, background, Rect.full_frame(background))

    assert motion.count == 2
    assert motion.blobs == [Rect(40, 40, 30, 30)]


def test_motion_rejects_mismatched_frames(background):
    with pytest.raises(ValueError):
        MotionDetector().extract(background, background[:60], Rect.full_frame(background))


# --- eye pair -------------------------------------------------------------

def test_eye_pair_reference_scenario():
    eye = find_eye_pair([Rect(10, 10, 20, 30), Rect(70, 10, 20, 30)])
    assert eye == Rect(12, 19, 16, 12)


@pytest.mark.parametrize("dx", [40, 60, 100, 119])
def test_eye_pair_accepts_ratio_between_two_and_five(dx):
    eye = find_eye_pair([Rect(10, 10, 20, 30), Rect(10 + dx, 12, 22, 27)])
    assert eye == Rect(12, 19, 16, 12)
    assert eye.size == (16, 12)


@pytest.mark.parametrize("dx", [20, 39, 120, 140])
def test_eye_pair_rejects_ratio_outside_bounds(dx):
    # 20 -> ratio 1, 120 -> ratio 6
    assert find_eye_pair([Rect(10, 10, 20, 30), Rect(10 + dx, 10, 20, 30)]) is None


def test_eye_pair_ratio_uses_left_blob_order():
    # second blob to the left of the first works the same
    eye = find_eye_pair([Rect(70, 10, 20, 30), Rect(10, 10, 20, 30)])
    assert eye == Rect(72, 19, 16, 12)


@pytest.mark.parametrize("second", [
    Rect(70, 10, 25, 30),  # width differs by 5
    Rect(70, 10, 20, 35),  # height differs by 5
    Rect(70, 15, 20, 30),  # vertical offset 5
])
def test_eye_pair_rejects_mismatched_blobs(second):
    assert find_eye_pair([Rect(10, 10, 20, 30), second]) is None


def test_eye_pair_rejects_zero_width_blobs():
    assert find_eye_pair([Rect(10, 10, 0, 30), Rect(70, 10, 0, 30)]) is None


def test_eye_pair_requires_exactly_two_components():
    blobs = [Rect(10, 10, 20, 30), Rect(70, 10, 20, 30)]
    assert find_eye_pair(blobs[:1]) is None
    assert find_eye_pair(blobs + [Rect(120, 10, 20, 30)]) is None
    # one outer blob plus its hole
    assert find_eye_pair(blobs[:1], count=2) is None


def test_eye_pair_detector_uses_template_size():
    detector = EyePairDetector(template_size=(20, 10))
    motion = MotionBlobs(count=2, blobs=[Rect(10, 10, 20, 30), Rect(70, 10, 20, 30)])
    assert detector.detect(motion) == Rect(10, 20, 20, 10)


# --- blink ----------------------------------------------------------------

WINDOW = Rect(4, 13, 32, 24)
EYE = Rect(12, 19, 16, 12)  # centroid (20, 25)


def test_blink_single_blob_over_eye():
    assert is_blink([Rect(14, 20, 12, 10)], WINDOW, EYE)


def test_blink_accepts_motion_blobs():
    motion = MotionBlobs(count=1, blobs=[Rect(14, 20, 12, 10)])
    assert is_blink(motion, WINDOW, EYE)


def test_blink_requires_exactly_one_component():
    assert not is_blink([], WINDOW, EYE)
    assert not is_blink([Rect(14, 20, 12, 10), Rect(5, 14, 3, 3)], WINDOW, EYE)
    assert not is_blink([Rect(14, 20, 12, 10)], WINDOW, EYE, count=2)


@pytest.mark.parametrize("blob", [
    Rect(4, 20, 20, 10),   # touches left edge
    Rect(14, 13, 12, 14),  # touches top edge
    Rect(14, 20, 22, 10),  # touches right edge
    Rect(14, 20, 12, 17),  # touches bottom edge
    Rect(2, 20, 22, 10),   # exceeds left edge
    Rect(14, 20, 12, 30),  # exceeds bottom edge
])
def test_blink_rejects_blob_on_window_boundary(blob):
    assert not is_blink([blob], WINDOW, EYE)


@pytest.mark.parametrize("blob", [
    Rect(20, 20, 10, 10),  # centroid on left edge
    Rect(10, 20, 10, 10),  # centroid on right edge
    Rect(14, 25, 12, 8),   # centroid on top edge
    Rect(14, 15, 12, 10),  # centroid on bottom edge
    Rect(24, 28, 6, 6),    # centroid outside
])
def test_blink_rejects_eye_centroid_not_strictly_inside(blob):
    assert not is_blink([blob], WINDOW, EYE)


# --- tracker --------------------------------------------------------------

def test_tracker_finds_exact_copy(background):
    tracker = EyeTracker()
    true_eye = Rect(50, 40, 16, 12)
    template, _ = tracker.capture_template(background, true_eye)

    result = tracker.locate(background, template, Rect(55, 43, 16, 12))

    assert result is not None
    assert result.window == Rect(47, 37, 32, 24)
    assert result.eye == true_eye
    assert result.score == pytest.approx(0.0, abs=1e-5)


def test_tracker_rejects_poor_match(background):
    tracker = EyeTracker()
    template, _ = tracker.capture_template(background, Rect(50, 40, 16, 12))
    blank = np.zeros_like(background)

    assert tracker.locate(blank, template, Rect(50, 40, 16, 12)) is None


EDGE_EYES = [
    Rect(-8, -6, 16, 12), Rect(0, 0, 16, 12),
    Rect(150, -6, 16, 12), Rect(144, 0, 16, 12),
    Rect(-8, 114, 16, 12), Rect(0, 108, 16, 12),
    Rect(150, 114, 16, 12), Rect(144, 108, 16, 12),
    Rect(70, -6, 16, 12), Rect(70, 114, 16, 12),
    Rect(-8, 50, 16, 12), Rect(150, 50, 16, 12),
]


@pytest.mark.parametrize("eye", EDGE_EYES)
def test_tracker_window_stays_in_frame(background, eye):
    tracker = EyeTracker()
    height, width = background.shape
    window = tracker.search_window(background, eye)

    assert window.size == (32, 24)
    assert Rect(0, 0, width, height).contains_rect(window)

    template, used_eye = tracker.capture_template(background, eye)
    result = tracker.locate(background, template, used_eye)
    assert result is not None
    assert Rect(0, 0, width, height).contains_rect(result.window)
    assert result.eye == used_eye


def test_tracker_frame_smaller_than_window():
    tracker = EyeTracker()
    tiny = np.zeros((20, 20), dtype=np.uint8)
    with pytest.raises(ValueError):
        tracker.locate(tiny, np.zeros((12, 16), dtype=np.uint8), Rect(0, 0, 16, 12))


def test_tracker_window_scale_below_one():
    with pytest.raises(ValueError):
        EyeTracker(window_scale=0)


def test_create_eye_tracker_from_config():
    tracker = create_eye_tracker({'template_width': 10, 'template_height': 8,
                                  'window_scale': 3, 'match_threshold': 0.2})
    assert tracker.template_size == (10, 8)
    assert tracker.window_size == (30, 24)
    assert tracker.match_threshold == 0.2
