"""Subscription channel.

A bounded, closable FIFO used to broadcast discovered resource kinds to
subscribers that want to observe detections independently of triggers.
Triggers publish to it; only :meth:`Detector.stop` closes it, and it does so
after the detection thread has exited, so no send can race the close.
"""

from __future__ import annotations

import queue
import threading
from collections import deque
from typing import Deque, Iterator, Optional

from ..schemas.descriptor import ResourceDescriptor
from .errors import ChannelClosedError


class SubscriptionChannel:
    """Bounded channel of :class:`ResourceDescriptor` with close semantics.

    - ``send`` blocks while the channel is full.
    - ``receive`` keeps returning buffered items after ``close`` until the
      channel is drained.
    - ``close`` wakes every blocked sender and receiver.

    Example:
        for descriptor in detector.subscription_channel:
            print("discovered", descriptor)
    """

    def __init__(self, capacity: int = 1) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        self._items: Deque[ResourceDescriptor] = deque()
        self._cond = threading.Condition()
        self._closed = False

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._closed

    def send(self, item: ResourceDescriptor, timeout: Optional[float] = None) -> None:
        """Put ``item`` on the channel, waiting for a free slot.

        Raises:
            ChannelClosedError: If the channel is or becomes closed.
            queue.Full: If no slot frees up within ``timeout`` seconds.
        """
        with self._cond:
            ready = self._cond.wait_for(lambda: self._closed or len(self._items) < self._capacity, timeout)
            if self._closed:
                raise ChannelClosedError()
            if not ready:
                raise queue.Full
            self._items.append(item)
            self._cond.notify_all()

    def receive(self, timeout: Optional[float] = None) -> ResourceDescriptor:
        """Take the oldest item from the channel.

        Raises:
            ChannelClosedError: If the channel is closed and drained.
            queue.Empty: If nothing arrives within ``timeout`` seconds.
        """
        with self._cond:
            ready = self._cond.wait_for(lambda: self._closed or bool(self._items), timeout)
            if self._items:
                item = self._items.popleft()
                self._cond.notify_all()
                return item
            if self._closed:
                raise ChannelClosedError()
            raise queue.Empty

    def close(self) -> None:
        """Close the channel. Closing twice is a no-op."""
        with self._cond:
            if self._closed:
                return
            self._closed = True
            self._cond.notify_all()

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        while True:
            try:
                yield self.receive()
            except ChannelClosedError:
                return
