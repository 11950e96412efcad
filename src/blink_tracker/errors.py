"""
Exceptions raised by the blink tracker.

Only resource failures are exceptions; a frame without an eye pair,
a lost template or a non-blink is a normal negative result.
"""


class BlinkTrackerError(Exception):
    """Base class for fatal blink tracker errors."""


class CameraError(BlinkTrackerError):
    """The capture device or video file could not be opened."""


class FrameAcquisitionError(BlinkTrackerError):
    """No frame could be read from the capture source."""
