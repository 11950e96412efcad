"""
Analysis modules for the blink tracker.
"""
