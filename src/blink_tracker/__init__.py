"""
Blink Tracker

Real-time eye tracking and blink detection from webcam motion.
"""

__version__ = '1.0.0'
