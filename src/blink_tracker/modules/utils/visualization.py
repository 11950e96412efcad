"""
Overlay drawing for the annotated video and the motion-mask debug view.
"""

import cv2
import numpy as np
from typing import List, Optional, Tuple

from .geometry import Rect

WINDOW_COLOR = (0, 0, 255)  # Red
EYE_COLOR = (0, 255, 0)  # Green
TEXT_COLOR = (0, 255, 255)  # Yellow
TEXT_BACKGROUND = (0, 0, 255)
MASK_COLOR = 255

INTRO_MESSAGES = [
    "Blink Tracker",
    "Blink with both eyes to start",
    "Press 'q' to quit...",
    "Press 'r' to restart...",
    "Have fun!"
]


class VisualizationManager:
    """
    Draws tracking rectangles and status text.
    """

    def __init__(self, font_scale: float = 0.4, thickness: int = 1):
        self.font = cv2.FONT_HERSHEY_SIMPLEX
        self.font_scale = font_scale
        self.thickness = thickness

    def draw_tracking(self, frame: np.ndarray, mask: Optional[np.ndarray],
                      window: Rect, eye: Rect) -> Tuple[np.ndarray, Optional[np.ndarray]]:
        """
        Draw the search window and the eye rectangle.

        Args:
            frame: BGR frame
            mask: Motion mask, may be None
            window: Current search window
            eye: Current eye rectangle

        Returns:
            Annotated copies of (frame, mask)
        """
        result_frame = frame.copy()
        cv2.rectangle(result_frame, window.top_left, window.bottom_right, WINDOW_COLOR, 1)
        cv2.rectangle(result_frame, eye.top_left, eye.bottom_right, EYE_COLOR, 1)

        result_mask = None
        if mask is not None:
            result_mask = mask.copy()
            cv2.rectangle(result_mask, window.top_left, window.bottom_right, MASK_COLOR, 1)
            cv2.rectangle(result_mask, eye.top_left, eye.bottom_right, MASK_COLOR, 1)

        return result_frame, result_mask

    def draw_text(self, frame: np.ndarray, text: str, use_background: bool = True) -> np.ndarray:
        """
        Put a message in the bottom-left corner of the frame.

        Args:
            frame: BGR frame, modified in place
            text: Message
            use_background: Draw a filled box behind the text

        Returns:
            The same frame
        """
        (text_width, text_height), _ = cv2.getTextSize(text, self.font, self.font_scale, self.thickness)
        height = frame.shape[0]

        if use_background:
            cv2.rectangle(frame, (0, height), (text_width + 5, height - text_height * 2),
                          TEXT_BACKGROUND, cv2.FILLED)

        cv2.putText(frame, text, (2, height - text_height // 2),
                    self.font, self.font_scale, TEXT_COLOR, self.thickness)
        return frame

    def draw_status(self, frame: np.ndarray, stage_name: str, blink_count: int) -> np.ndarray:
        """Stage name and blink count in the top-left corner."""
        cv2.putText(frame, f"{stage_name} blinks: {blink_count}", (2, 12),
                    self.font, self.font_scale, (255, 255, 255), self.thickness)
        return frame

    @staticmethod
    def intro_messages() -> List[str]:
        return list(INTRO_MESSAGES)
