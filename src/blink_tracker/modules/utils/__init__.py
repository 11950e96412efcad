"""
Shared utilities for the eye tracking modules.
"""

from .geometry import Rect
from .visualization import VisualizationManager

__all__ = [
    'Rect',
    'VisualizationManager'
]
