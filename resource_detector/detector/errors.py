"""Error types for the detector package.

Lifecycle misuse (double start, restart after stop) and use of a closed
subscription channel are programming errors and surface as exceptions. Probe
failures never do; the detection loop absorbs them.
"""

from __future__ import annotations


class DetectorError(Exception):
    """Base error for all detector exceptions."""


class DetectorAlreadyStartedError(DetectorError):
    """Raised when ``start`` is called on a detector that is already running."""

    def __init__(self) -> None:
        super().__init__("Detector is already running")


class DetectorStoppedError(DetectorError):
    """Raised when ``start`` is called on a detector that has been stopped."""

    def __init__(self) -> None:
        super().__init__("Detector has been stopped and cannot be restarted")


class ChannelClosedError(DetectorError):
    """Raised when sending to, or receiving from a drained, closed channel."""

    def __init__(self) -> None:
        super().__init__("Subscription channel is closed")
