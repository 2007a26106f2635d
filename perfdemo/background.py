# perfdemo/background.py
import asyncio
import logging
import math
from concurrent.futures import Executor, Future, ProcessPoolExecutor
from typing import List, Optional

logger = logging.getLogger(__name__)


def compute_heavy_task(iterations: int) -> List[float]:
    """CPU-bound busy work; pure so it can run in another process."""
    results = []
    for i in range(iterations):
        result = 0.0
        for j in range(1000):
            for k in range(100):
                result += float(i * j * k)
                result = result * 1.001
                result = result / 1.0001
                result += (i + j + k) * 0.5
                if k % 10 == 0:
                    result += math.sin(result * 0.1)
                    result += math.cos(result * 0.1)
                if result > 0:
                    result = math.sqrt(result)
                    result = result * result
        results.append(result)
    return results


class BackgroundRunner:
    """Hands pure functions to a worker pool so the event loop stays free."""

    def __init__(self, max_workers: Optional[int] = None, executor: Optional[Executor] = None):
        self._owns_executor = executor is None
        self._executor = executor if executor is not None else ProcessPoolExecutor(max_workers=max_workers)
        self._closed = False

    def submit(self, fn, *args) -> Future:
        if self._closed:
            raise RuntimeError("BackgroundRunner has been shut down")
        logger.info("Offloading %s to worker pool", getattr(fn, "__name__", fn))
        return self._executor.submit(fn, *args)

    async def run(self, fn, *args):
        return await asyncio.wrap_future(self.submit(fn, *args))

    def shutdown(self, wait: bool = True) -> None:
        if self._closed:
            return
        self._closed = True
        if self._owns_executor:
            self._executor.shutdown(wait=wait)

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.shutdown()
        return False
