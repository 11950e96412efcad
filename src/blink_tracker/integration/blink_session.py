"""
Blink tracking session.

Owns every per-run buffer (previous grayscale frame, eye template,
search window, eye rectangle) and drives the two-stage state machine:
INIT looks for an eye pair in the motion of the whole frame, TRACKING
follows one eye by template matching and watches it for blinks.
"""

import cv2
import json
import numpy as np
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Dict, Any, List, Optional
import logging

from ..modules.eye_tracking import (
    MotionDetector, MotionBlobs, EyePairDetector, EyeTracker,
    create_eye_pair_detector, create_eye_tracker, is_blink
)
from ..modules.utils.geometry import Rect
from .notifiers import BlinkEvent, BlinkNotifier

logger = logging.getLogger(__name__)


class Stage(Enum):
    """Tracking stages."""
    INIT = 1
    TRACKING = 2


class SessionEvent(Enum):
    """State machine events reported with each frame."""
    EYE_PAIR_FOUND = 'eye_pair_found'
    TRACKING_LOST = 'tracking_lost'
    RESTART_REQUESTED = 'restart_requested'
    BLINK = 'blink'


@dataclass
class FrameResult:
    """Per-frame output of the session."""
    stage: Stage
    gray: np.ndarray
    motion: MotionBlobs
    window: Rect
    eye: Optional[Rect] = None
    match_score: Optional[float] = None
    blink: bool = False
    show_text: bool = False
    settle_frames: int = 0  # Frames the capture loop should drop before the next call
    events: List[SessionEvent] = field(default_factory=list)


class BlinkSession:
    """
    Explicit context object for one blink tracking run.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        notifiers: Optional[List[BlinkNotifier]] = None,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize blink session.

        Args:
            config: Tracking configuration section
            notifiers: Callbacks invoked synchronously on each blink
            clock: Time source for statistics
        """
        self.config = config or {}
        self.notifiers = list(notifiers or [])
        self.clock = clock

        self.motion_detector = MotionDetector(
            threshold=self.config.get('motion_threshold', 5),
            kernel_size=self.config.get('kernel_size', 3)
        )
        self.eye_pair_detector: EyePairDetector = create_eye_pair_detector(self.config)
        self.eye_tracker: EyeTracker = create_eye_tracker(self.config)

        self.settle_frames = self.config.get('settle_frames', 5)
        self.text_frames = self.config.get('text_frames', 10)

        # Tracking state
        self.stage = Stage.INIT
        self.prev_gray: Optional[np.ndarray] = None
        self.template: Optional[np.ndarray] = None
        self.window: Optional[Rect] = None
        self.eye: Optional[Rect] = None
        self.text_countdown = 0
        self._pending_events: List[SessionEvent] = []

        # Statistics
        self.frame_count = 0
        self.blink_count = 0
        self.tracking_starts = 0
        self.tracking_losses = 0
        self.restarts = 0
        self.blink_history = []
        self.start_time = self.clock()

    def add_notifier(self, notifier: BlinkNotifier) -> None:
        self.notifiers.append(notifier)

    def process_frame(self, frame: np.ndarray) -> FrameResult:
        """
        Run one iteration of the state machine.

        Args:
            frame: BGR or grayscale frame

        Returns:
            FrameResult describing this frame
        """
        gray = cv2.cvtColor(frame, cv2.COLOR_BGR2GRAY) if frame.ndim == 3 else frame

        if self.prev_gray is None or self.prev_gray.shape != gray.shape:
            self.prev_gray = gray.copy()

        if self.stage == Stage.INIT:
            self.window = Rect.full_frame(gray)

        motion = self.motion_detector.extract(gray, self.prev_gray, self.window)

        events = self._pending_events
        self._pending_events = []
        settle = 0
        match_score = None
        blink = False

        if self.stage == Stage.INIT:
            eye = self.eye_pair_detector.detect(motion)
            if eye is not None:
                self._start_tracking(gray, eye)
                events.append(SessionEvent.EYE_PAIR_FOUND)
                settle = self.settle_frames

        if self.stage == Stage.TRACKING:
            result = self.eye_tracker.locate(gray, self.template, self.eye)

            if result is None:
                self._stop_tracking()
                events.append(SessionEvent.TRACKING_LOST)
                self.tracking_losses += 1
                logger.info("Tracking lost, searching for eye pair")
            else:
                self.window = result.window
                self.eye = result.eye
                match_score = result.score

                if is_blink(motion, self.window, self.eye):
                    blink = True
                    events.append(SessionEvent.BLINK)
                    self._on_blink()

        show_text = self.text_countdown > 0
        if self.text_countdown > 0:
            self.text_countdown -= 1

        self.prev_gray = gray.copy()
        self.frame_count += 1

        return FrameResult(
            stage=self.stage,
            gray=gray,
            motion=motion,
            window=self.window,
            eye=self.eye,
            match_score=match_score,
            blink=blink,
            show_text=show_text,
            settle_frames=settle,
            events=events
        )

    def request_restart(self) -> bool:
        """
        Drop the current eye and go back to eye-pair search.

        Returns:
            True if the session was tracking
        """
        if self.stage != Stage.TRACKING:
            return False

        self._stop_tracking()
        self.restarts += 1
        self._pending_events.append(SessionEvent.RESTART_REQUESTED)
        logger.info("Restart requested, searching for eye pair")
        return True

    def _start_tracking(self, gray: np.ndarray, eye: Rect) -> None:
        self.template, self.eye = self.eye_tracker.capture_template(gray, eye)
        self.stage = Stage.TRACKING
        self.text_countdown = self.text_frames
        self.tracking_starts += 1
        logger.info(f"Eye pair detected, tracking eye at {self.eye}")

    def _stop_tracking(self) -> None:
        self.stage = Stage.INIT
        self.template = None

    def _on_blink(self) -> None:
        self.blink_count += 1
        self.text_countdown = self.text_frames

        event = BlinkEvent(
            timestamp=self.clock(),
            frame_index=self.frame_count,
            blink_count=self.blink_count
        )
        self.blink_history.append(event.timestamp)

        for notifier in self.notifiers:
            notifier(event)

    def reset(self) -> None:
        """Return to a fresh INIT stage, keeping statistics."""
        self.stage = Stage.INIT
        self.prev_gray = None
        self.template = None
        self.window = None
        self.eye = None
        self.text_countdown = 0
        self._pending_events = []

    def reset_statistics(self) -> None:
        self.frame_count = 0
        self.blink_count = 0
        self.tracking_starts = 0
        self.tracking_losses = 0
        self.restarts = 0
        self.blink_history.clear()
        self.start_time = self.clock()

    def get_blink_rate(self, time_window: float = 60.0) -> float:
        """
        Blink rate over the most recent time window.

        Args:
            time_window: Time window in seconds

        Returns:
            Blinks per minute
        """
        current_time = self.clock()
        recent_blinks = [t for t in self.blink_history if current_time - t <= time_window]
        return (len(recent_blinks) / time_window) * 60.0

    def get_session_summary(self) -> Dict[str, Any]:
        """Get session statistics."""
        session_duration = self.clock() - self.start_time
        avg_fps = self.frame_count / session_duration if session_duration > 0 else 0.0

        return {
            'session_duration': session_duration,
            'frames_processed': self.frame_count,
            'avg_fps': avg_fps,
            'blink_count': self.blink_count,
            'blink_rate': self.get_blink_rate(),
            'tracking_starts': self.tracking_starts,
            'tracking_losses': self.tracking_losses,
            'restarts': self.restarts,
            'stage': self.stage.name
        }

    def export_session_data(self, filepath: str) -> bool:
        """
        Export session statistics and blink timestamps as JSON.

        Args:
            filepath: Output file path

        Returns:
            True if successful
        """
        data = {
            'summary': self.get_session_summary(),
            'blink_timestamps': list(self.blink_history),
            'parameters': {
                'template_size': list(self.eye_tracker.template_size),
                'window_size': list(self.eye_tracker.window_size),
                'match_threshold': self.eye_tracker.match_threshold,
                'motion_threshold': self.motion_detector.threshold
            }
        }

        try:
            with open(filepath, 'w') as f:
                json.dump(data, f, indent=2, default=str)
        except OSError as e:
            logger.error(f"Failed to export session data: {e}")
            return False

        logger.info(f"Session data exported to {filepath}")
        return True
