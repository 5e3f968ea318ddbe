'''
In-process change feed.

Every listener is registered against one collection and receives the full,
current snapshot of that collection each time it changes. Registration hands
back a Subscription; calling it releases the listener and may happen exactly once.
'''
from collections import defaultdict
from typing import Any, Callable

from ..common.exceptions import SubscriptionError
from ..common.logger import log

Listener = Callable[[list[Any]], None]


class Subscription:
    """
    Disposer returned by every subscribe call.
    """
    def __init__(self, feed: "ChangeFeed", collection: str, listener: Listener):
        self._feed = feed
        self.collection = collection
        self._listener = listener
        self._released = False

    @property
    def active(self) -> bool:
        return not self._released

    def __call__(self) -> None:
        if self._released:
            raise SubscriptionError(f"Subscription to '{self.collection}' was already released.")
        self._released = True
        self._feed._release(self.collection, self._listener)


class ChangeFeed:
    """
    Keeps the live listeners per collection and fans snapshots out to them.
    """
    def __init__(self):
        self._listeners: dict[str, list[Listener]] = defaultdict(list)

    def register(self, collection: str, listener: Listener) -> Subscription:
        self._listeners[collection].append(listener)
        log.info(f"Listener registered on '{collection}' ({self.listener_count(collection)} active).")
        return Subscription(self, collection, listener)

    def _release(self, collection: str, listener: Listener) -> None:
        self._listeners[collection].remove(listener)
        log.info(f"Listener released from '{collection}' ({self.listener_count(collection)} active).")

    def listener_count(self, collection: str) -> int:
        return len(self._listeners.get(collection, []))

    def has_listeners(self, collection: str) -> bool:
        return self.listener_count(collection) > 0

    def publish(self, collection: str, snapshot: list[Any]) -> None:
        """
        Delivers a snapshot to every listener of the collection.
        A failing listener is logged and does not stop the others.
        """
        # copy: a listener may release itself while being notified
        for listener in list(self._listeners.get(collection, [])):
            try:
                listener(snapshot)
            except Exception as e:
                log.error(f"Listener on '{collection}' failed: {e}", exc_info=True)
