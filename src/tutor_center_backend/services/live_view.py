'''
Base class for the stateful view services.
'''
from typing import Awaitable, Callable

from ..common.logger import log
from ..database.change_feed import Subscription
from ..database.store import TutoringStore


class LiveView:
    """
    Owns a set of store subscriptions for as long as the view is mounted.

    Use it as `async with view:` or call mount()/unmount() yourself; every
    subscription taken on mount is released exactly once on unmount, including
    when mounting fails half way.
    """
    def __init__(self, store: TutoringStore):
        self.store = store
        self._subscriptions: list[Subscription] = []

    def _subscription_requests(self) -> list[Callable[[], Awaitable[Subscription]]]:
        """Returns one zero-argument coroutine factory per subscription the view needs."""
        raise NotImplementedError

    @property
    def mounted(self) -> bool:
        return bool(self._subscriptions)

    async def mount(self):
        if self.mounted:
            return
        try:
            for request in self._subscription_requests():
                self._subscriptions.append(await request())
        except BaseException:
            log.error(f"Mounting {type(self).__name__} failed, releasing partial subscriptions.")
            self.unmount()
            raise
        log.info(f"{type(self).__name__} mounted with {len(self._subscriptions)} subscriptions.")

    def unmount(self):
        while self._subscriptions:
            subscription = self._subscriptions.pop()
            if subscription.active:
                subscription()

    async def __aenter__(self):
        await self.mount()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.unmount()
