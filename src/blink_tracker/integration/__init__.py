"""
Blink Tracking Integration

Ties motion extraction, eye-pair detection, template tracking and blink
classification into a single session, and dispatches blink
notifications.
"""

from .blink_session import BlinkSession, FrameResult, SessionEvent, Stage
from .notifiers import (
    BlinkEvent, BlinkNotifier, CommandNotifier, HttpNotifier,
    LoggingNotifier, create_notifiers
)

__all__ = [
    'BlinkSession',
    'FrameResult',
    'SessionEvent',
    'Stage',
    'BlinkEvent',
    'BlinkNotifier',
    'CommandNotifier',
    'HttpNotifier',
    'LoggingNotifier',
    'create_notifiers'
]
