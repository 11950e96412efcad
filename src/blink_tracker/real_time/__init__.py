"""
Real-time Interface Module

Provides the webcam capture, display and keyboard surface.
"""

from .webcam_interface import WebcamInterface

__all__ = ['WebcamInterface']
