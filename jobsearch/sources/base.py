"""Abstract corpus and directory sources with change notification.

The session never owns jobs or users. It reads immutable snapshots from a
JobCorpusSource and a DirectorySource at rebuild time and subscribes to their
change notifications to know when to rebuild.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, List, Optional
from uuid import uuid4

from jobsearch.domain.models import DirectoryUser
from jobsearch.logging import get_logger
from jobsearch.normalization import JobRecord

logger = get_logger(__name__, component="sources")

ChangeCallback = Callable[[], None]
SubscriptionHandle = str


class ChangeNotifier:
    """Subscribe/unsubscribe registry shared by all sources.

    Callbacks run synchronously in the thread that reported the change. A
    failing callback is logged and does not prevent the others from running.
    """

    def __init__(self, name: Optional[str] = None) -> None:
        self.name = name or type(self).__name__
        self._callbacks: Dict[SubscriptionHandle, ChangeCallback] = {}
        self._callbacks_lock = threading.Lock()

    def on_change(self, callback: ChangeCallback) -> SubscriptionHandle:
        """Register ``callback`` to run after every change.

        Returns:
            Handle to pass to ``unsubscribe``
        """
        handle = uuid4().hex
        with self._callbacks_lock:
            self._callbacks[handle] = callback
        return handle

    def unsubscribe(self, handle: SubscriptionHandle) -> bool:
        """Remove a subscription.

        Returns:
            True if the handle was registered
        """
        with self._callbacks_lock:
            return self._callbacks.pop(handle, None) is not None

    @property
    def subscriber_count(self) -> int:
        with self._callbacks_lock:
            return len(self._callbacks)

    def notify_changed(self) -> None:
        """Invoke every registered callback."""
        with self._callbacks_lock:
            callbacks = list(self._callbacks.values())

        for callback in callbacks:
            try:
                callback()
            except Exception as e:
                logger.error(
                    f"Change callback failed for {self.name}: {e}",
                    extra={"event": "sources.callback.failed", "source": self.name},
                    exc_info=True,
                )


class JobCorpusSource(ChangeNotifier, ABC):
    """Read-only view of the job corpus (full Jobs and/or IndexEntries)."""

    @abstractmethod
    def snapshot(self) -> List[JobRecord]:
        """Return the current records.

        Raises:
            SourceError: If the corpus cannot be read right now
        """


class DirectorySource(ChangeNotifier, ABC):
    """Read-only view of the user directory keyed by user id."""

    @abstractmethod
    def snapshot(self) -> Dict[str, DirectoryUser]:
        """Return the current id → user mapping.

        Raises:
            SourceError: If the directory cannot be read right now
        """
