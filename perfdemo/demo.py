# perfdemo/demo.py
import asyncio
import logging
import time
from pathlib import Path
from typing import Optional

import pandas as pd

from .background import BackgroundRunner, compute_heavy_task
from .cache import MockCacheClient, UncachedClient
from .constants import (
    BACKGROUND_TASK,
    DEBOUNCING,
    MEDIUM_LIST_ITEM_COUNT,
    NETWORK_OPTIMIZATION,
    NON_OPTIMIZED,
    OPTIMIZED,
    RESOURCE_DISPOSAL,
)
from .debounce import Debouncer
from .helpers import estimate_memory_usage
from .resources import ResourceRegistry

logger = logging.getLogger(__name__)

COLUMNS = ["technique", "variant", "requests", "cache_hits", "cached_keys", "callbacks", "ticks", "leaked", "elapsed_s"]


def _row(technique, variant, elapsed, requests=0, cache_hits=0, cached_keys=0, callbacks=0, ticks=0, leaked=0):
    return {
        "technique": technique,
        "variant": variant,
        "requests": requests,
        "cache_hits": cache_hits,
        "cached_keys": cached_keys,
        "callbacks": callbacks,
        "ticks": ticks,
        "leaked": leaked,
        "elapsed_s": round(elapsed, 4),
    }


async def compare_network(config: dict) -> list:
    clients = [
        (OPTIMIZED, MockCacheClient(latency=config["fetch_latency"], batch_latency=config["batch_latency"])),
        (NON_OPTIMIZED, UncachedClient(latency=config["fetch_latency"])),
    ]
    rows = []
    for variant, client in clients:
        start = time.perf_counter()
        for key in config["fetch_keys"]:
            await client.fetch(key)
        await client.batch_fetch(config["batch_keys"])
        m = client.get_metrics()
        rows.append(_row(
            NETWORK_OPTIMIZATION, variant, time.perf_counter() - start,
            requests=m.request_count, cache_hits=m.cache_hit_count, cached_keys=m.cached_key_count,
        ))
    return rows


async def compare_debouncing(config: dict) -> list:
    query = config["query"]
    interval = config["keystroke_interval"]
    delay = config["debounce_seconds"]
    rows = []

    # Search on every keystroke
    searches = []
    start = time.perf_counter()
    for i in range(1, len(query) + 1):
        searches.append(query[:i])
        logger.warning("Searching for %r on every keystroke (%d searches)", query[:i], len(searches))
        await asyncio.sleep(interval)
    rows.append(_row(DEBOUNCING, NON_OPTIMIZED, time.perf_counter() - start, callbacks=len(searches)))

    # Search once typing pauses
    searches = []
    debouncer = Debouncer(delay, loop=asyncio.get_running_loop())

    def search(text):
        searches.append(text)
        logger.info("Debounced search for %r (%d searches)", text, len(searches))

    start = time.perf_counter()
    for i in range(1, len(query) + 1):
        text = query[:i]
        debouncer.trigger(lambda text=text: search(text))
        await asyncio.sleep(interval)
    # Outlast the last pending search
    await asyncio.sleep(delay * 2)
    debouncer.dispose()
    rows.append(_row(DEBOUNCING, OPTIMIZED, time.perf_counter() - start, callbacks=len(searches)))
    return rows


async def _heartbeat(interval: float, ticks: list) -> None:
    while True:
        await asyncio.sleep(interval)
        ticks.append(time.perf_counter())


async def _measure_ticks(work, interval: float):
    ticks = []
    beat = asyncio.ensure_future(_heartbeat(interval, ticks))
    await asyncio.sleep(0)
    start = time.perf_counter()
    try:
        await work()
    finally:
        beat.cancel()
        try:
            await beat
        except asyncio.CancelledError:
            pass
    return time.perf_counter() - start, len(ticks)


async def compare_background(config: dict, runner: BackgroundRunner) -> list:
    iterations = config["heavy_iterations"]
    interval = config["heartbeat_interval"]

    async def inline():
        logger.warning("Running heavy task on the event loop, UI is frozen")
        compute_heavy_task(iterations)

    async def offloaded():
        results = await runner.run(compute_heavy_task, iterations)
        logger.info("Heavy task finished in background with %d results", len(results))

    rows = []
    elapsed, ticks = await _measure_ticks(inline, interval)
    rows.append(_row(BACKGROUND_TASK, NON_OPTIMIZED, elapsed, callbacks=1, ticks=ticks))
    elapsed, ticks = await _measure_ticks(offloaded, interval)
    rows.append(_row(BACKGROUND_TASK, OPTIMIZED, elapsed, callbacks=1, ticks=ticks))
    return rows


async def _poll_forever(interval: float) -> None:
    while True:
        await asyncio.sleep(interval)


async def compare_resource_disposal(config: dict) -> list:
    """Open and close a screen several times; only the optimized one releases what it started."""
    loop = asyncio.get_running_loop()
    opens = config["screen_opens"]
    interval = config["heartbeat_interval"]
    rows = []
    for variant in (NON_OPTIMIZED, OPTIMIZED):
        registry = ResourceRegistry()
        start = time.perf_counter()
        for i in range(opens):
            source = f"{variant} screen #{i + 1}"
            registry.add_timer(loop.call_later(3600, lambda: None), source)
            registry.add_subscription(asyncio.ensure_future(_poll_forever(interval)), source)
            registry.store_data(f"items_{i}", list(range(MEDIUM_LIST_ITEM_COUNT)), source)
            await asyncio.sleep(0)
            if variant == OPTIMIZED:
                registry.dispose()
        elapsed = time.perf_counter() - start

        stats = registry.get_stats()
        leaked = sum(stats.values())
        if leaked:
            logger.warning(
                "%d resources left behind after %d screen closes (%s of stored items)",
                leaked, opens, estimate_memory_usage(stats["data"] * MEDIUM_LIST_ITEM_COUNT),
            )
        else:
            logger.info("All resources released after %d screen closes", opens)
        rows.append(_row(RESOURCE_DISPOSAL, variant, elapsed, leaked=leaked))
        # Release the leaks too so the loop shuts down clean
        registry.dispose()
    return rows


async def _run_all(config: dict, runner: BackgroundRunner) -> list:
    rows = []
    steps = [
        (NETWORK_OPTIMIZATION, lambda: compare_network(config)),
        (DEBOUNCING, lambda: compare_debouncing(config)),
        (BACKGROUND_TASK, lambda: compare_background(config, runner)),
        (RESOURCE_DISPOSAL, lambda: compare_resource_disposal(config)),
    ]
    for technique, step in steps:
        try:
            rows.extend(await step())
        except Exception:
            logger.exception("%s comparison failed", technique)
            raise
    return rows


def run_comparison(config: dict, out_dir: Path, runner: Optional[BackgroundRunner] = None) -> pd.DataFrame:
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    owns_runner = runner is None
    if owns_runner:
        runner = BackgroundRunner()
    try:
        rows = asyncio.run(_run_all(config, runner))
    finally:
        if owns_runner:
            runner.shutdown()

    df = pd.DataFrame(rows, columns=COLUMNS)
    df.to_csv(out_dir / "comparison.csv", index=False)
    logger.info("Comparison complete: %d rows written to %s", len(df), out_dir / "comparison.csv")
    return df
