# perfdemo/resources.py
import logging

logger = logging.getLogger(__name__)


class ResourceRegistry:
    """Tracks long-lived timers, subscriptions and data so they can be released.

    One registry per owner; tests and screens each build their own instead of
    sharing process-wide state.
    """

    def __init__(self):
        self._timers = []
        self._subscriptions = []
        self._data = {}

    def add_timer(self, timer, source: str) -> None:
        self._timers.append((timer, source))
        logger.warning("LEAK: timer added from %s (total: %d)", source, len(self._timers))

    def add_subscription(self, subscription, source: str) -> None:
        self._subscriptions.append((subscription, source))
        logger.warning("LEAK: subscription added from %s (total: %d)", source, len(self._subscriptions))

    def store_data(self, key: str, value, source: str) -> None:
        self._data[key] = value
        logger.warning("LEAK: data %r stored from %s (total: %d)", key, source, len(self._data))

    def get_data(self, key: str, default=None):
        return self._data.get(key, default)

    def get_stats(self) -> dict:
        return {
            "timers": len(self._timers),
            "subscriptions": len(self._subscriptions),
            "data": len(self._data),
        }

    @staticmethod
    def _cancel_all(items) -> int:
        for resource, _ in items:
            resource.cancel()
        count = len(items)
        items.clear()
        return count

    def cleanup_timers(self) -> int:
        count = self._cancel_all(self._timers)
        logger.info("Cancelled %d timers", count)
        return count

    def cleanup_subscriptions(self) -> int:
        count = self._cancel_all(self._subscriptions)
        logger.info("Cancelled %d subscriptions", count)
        return count

    def cleanup_data(self) -> int:
        count = len(self._data)
        self._data.clear()
        logger.info("Cleared %d stored entries", count)
        return count

    def dispose(self) -> dict:
        return {
            "timers": self.cleanup_timers(),
            "subscriptions": self.cleanup_subscriptions(),
            "data": self.cleanup_data(),
        }
