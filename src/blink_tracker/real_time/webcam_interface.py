"""
Webcam Interface for Real-time Blink Tracking

Handles frame capture, window display and keyboard polling. Capture is
synchronous: the tracking loop pulls one frame per iteration and blocks
only on the short key-poll wait.
"""

import cv2
import numpy as np
from typing import Optional, Callable, Dict, Any, List, Tuple, Union
import logging

from ..errors import CameraError, FrameAcquisitionError
from ..modules.utils.visualization import VisualizationManager


class WebcamInterface:
    """
    Capture and display surface for the tracking loop.
    """

    def __init__(self, source: Union[int, str] = 0, resolution: Tuple[int, int] = (240, 180),
                 window_name: str = 'video', debug_window_name: str = 'diff',
                 headless: bool = False,
                 capture_factory: Callable[[Union[int, str]], Any] = cv2.VideoCapture):
        """
        Initialize webcam interface.

        Args:
            source: Camera device ID or video file path
            resolution: Requested camera resolution (width, height)
            window_name: Window for the annotated video
            debug_window_name: Window for the motion mask
            headless: Skip all windows and key polling
            capture_factory: Callable opening the capture source
        """
        self.source = source
        self.resolution = resolution
        self.window_name = window_name
        self.debug_window_name = debug_window_name
        self.headless = headless
        self.capture_factory = capture_factory

        self.cap = None
        self.frame_count = 0

        self.logger = logging.getLogger(__name__)

    def open(self) -> None:
        """
        Open the capture source.

        Raises:
            CameraError: If the source cannot be opened
        """
        self.cap = self.capture_factory(self.source)

        if self.cap is None or not self.cap.isOpened():
            raise CameraError(f"Cannot initialize camera {self.source}!")

        # Only cameras accept a requested resolution
        if isinstance(self.source, int):
            self.cap.set(cv2.CAP_PROP_FRAME_WIDTH, self.resolution[0])
            self.cap.set(cv2.CAP_PROP_FRAME_HEIGHT, self.resolution[1])

        actual_width = int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH))
        actual_height = int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
        self.logger.info(f"Capture initialized: {self.source} at {actual_width}x{actual_height}")

        if not self.headless:
            cv2.namedWindow(self.window_name, cv2.WINDOW_AUTOSIZE)
            cv2.namedWindow(self.debug_window_name, cv2.WINDOW_AUTOSIZE)

    def read(self) -> np.ndarray:
        """
        Read the next frame.

        Raises:
            FrameAcquisitionError: If no frame is available
        """
        if self.cap is None:
            raise FrameAcquisitionError("Capture is not open")

        ret, frame = self.cap.read()
        if not ret or frame is None:
            raise FrameAcquisitionError("cannot query frame!")

        self.frame_count += 1
        return frame

    def show(self, frame: np.ndarray, debug_frame: Optional[np.ndarray] = None) -> None:
        """Display the annotated frame and, if given, the debug mask."""
        if self.headless:
            return

        cv2.imshow(self.window_name, frame)
        if debug_frame is not None:
            cv2.imshow(self.debug_window_name, debug_frame)

    def poll_key(self, wait_ms: int = 15) -> Optional[str]:
        """
        Wait briefly for a key press.

        Returns:
            Key character, or None if no key was pressed
        """
        if self.headless:
            return None

        key = cv2.waitKey(wait_ms) & 0xFF
        if key == 0xFF:
            return None
        return chr(key)

    def skip_frames(self, nframes: int, debug_frame: Optional[np.ndarray] = None,
                    wait_ms: int = 30) -> None:
        """
        Drop frames while keeping the video live.

        Args:
            nframes: Number of frames to drop
            debug_frame: Mask shown in the debug window meanwhile
            wait_ms: Display wait per frame
        """
        for _ in range(nframes):
            frame = self.read()
            self.show(frame, debug_frame)
            self.poll_key(wait_ms)

    def play_intro(self, messages: List[str], visualizer: VisualizationManager,
                   frames_per_message: int = 20, wait_ms: int = 30) -> None:
        """Show each start-up message over live video."""
        for message in messages:
            for _ in range(frames_per_message):
                frame = self.read()
                visualizer.draw_text(frame, message, use_background=False)
                self.show(frame)
                self.poll_key(wait_ms)

    def release(self) -> None:
        """Release the capture source and close the windows."""
        if self.cap is not None:
            self.cap.release()
            self.cap = None

        if not self.headless:
            cv2.destroyAllWindows()

        self.logger.info("Video capture stopped")

    def get_camera_info(self) -> Dict[str, Any]:
        """Get capture information."""
        if not self.cap:
            return {}

        return {
            'source': self.source,
            'resolution': (
                int(self.cap.get(cv2.CAP_PROP_FRAME_WIDTH)),
                int(self.cap.get(cv2.CAP_PROP_FRAME_HEIGHT))
            ),
            'fps': int(self.cap.get(cv2.CAP_PROP_FPS)),
            'frame_count': self.frame_count,
            'headless': self.headless
        }

    def __enter__(self):
        """Context manager entry."""
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.release()
