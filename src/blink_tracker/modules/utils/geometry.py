"""
Rectangle helpers shared by the motion, eye-pair and tracking stages.
"""

from dataclasses import dataclass
from typing import Tuple

import numpy as np


Point = Tuple[int, int]


@dataclass(frozen=True)
class Rect:
    """Integer image rectangle in frame coordinates."""
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def from_tuple(cls, values) -> 'Rect':
        x, y, w, h = values
        return cls(int(x), int(y), int(w), int(h))

    @classmethod
    def full_frame(cls, image: np.ndarray) -> 'Rect':
        """Rectangle covering the whole image."""
        height, width = image.shape[:2]
        return cls(0, 0, width, height)

    @classmethod
    def centered_at(cls, point: Point, width: int, height: int) -> 'Rect':
        """Fixed-size rectangle whose centroid is ``point``."""
        return cls(point[0] - width // 2, point[1] - height // 2, width, height)

    @property
    def centroid(self) -> Point:
        return (self.x + self.width // 2, self.y + self.height // 2)

    @property
    def top_left(self) -> Point:
        return (self.x, self.y)

    @property
    def bottom_right(self) -> Point:
        return (self.x + self.width, self.y + self.height)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def contains_rect(self, other: 'Rect') -> bool:
        """True if ``other`` lies inside this rectangle, edges included."""
        return (other.x >= self.x and other.y >= self.y and
                other.x + other.width <= self.x + self.width and
                other.y + other.height <= self.y + self.height)

    def strictly_contains_rect(self, other: 'Rect') -> bool:
        """True if ``other`` lies inside this rectangle without sharing an edge."""
        return (other.x > self.x and other.y > self.y and
                other.x + other.width < self.x + self.width and
                other.y + other.height < self.y + self.height)

    def strictly_contains_point(self, point: Point) -> bool:
        """True if ``point`` is in the open interior of this rectangle."""
        px, py = point
        return (self.x < px < self.x + self.width and
                self.y < py < self.y + self.height)

    def clamp_to(self, width: int, height: int) -> 'Rect':
        """
        Shift the rectangle so it lies inside a ``width`` x ``height`` image.

        The rectangle keeps its size; the left and top edges are fixed
        first, then the right and bottom edges.

        Raises:
            ValueError: If the rectangle is larger than the image
        """
        if self.width > width or self.height > height:
            raise ValueError(
                f"Rectangle {self.width}x{self.height} does not fit in image {width}x{height}"
            )

        x, y = self.x, self.y
        if x < 0:
            x = 0
        if y < 0:
            y = 0
        if x + self.width > width:
            x = width - self.width
        if y + self.height > height:
            y = height - self.height

        return Rect(x, y, self.width, self.height)

    def clamp_to_image(self, image: np.ndarray) -> 'Rect':
        height, width = image.shape[:2]
        return self.clamp_to(width, height)

    def as_slices(self) -> Tuple[slice, slice]:
        """Row and column slices for numpy indexing."""
        return (slice(self.y, self.y + self.height), slice(self.x, self.x + self.width))
