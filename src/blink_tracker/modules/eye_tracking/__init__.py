"""
Eye Tracking and Blink Detection Module

Motion-based eye localisation: frame differencing finds the eye pair,
template matching follows one eye, and motion blob geometry tells
when it blinks.
"""

from .motion import MotionDetector, MotionBlobs
from .eye_pair import EyePairDetector, find_eye_pair, create_eye_pair_detector
from .tracker import EyeTracker, TrackResult, create_eye_tracker
from .blink import is_blink

__all__ = [
    'MotionDetector',
    'MotionBlobs',
    'EyePairDetector',
    'find_eye_pair',
    'create_eye_pair_detector',
    'EyeTracker',
    'TrackResult',
    'create_eye_tracker',
    'is_blink'
]
