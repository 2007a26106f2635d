# perfdemo/errors.py
class DebouncerDisposedError(RuntimeError):
    """Raised when a disposed Debouncer is triggered again."""


class FetchError(Exception):
    """A simulated request failed."""

    def __init__(self, keys, message=None):
        self.keys = list(keys)
        super().__init__(message or f"request failed for: {', '.join(self.keys)}")


class FetchTimeoutError(FetchError):
    """A simulated request timed out after its latency elapsed."""
