# perfdemo/constants.py
# Technique ids
DEBOUNCING = "debouncing"
NETWORK_OPTIMIZATION = "network_optimization"
BACKGROUND_TASK = "background_task"
RESOURCE_DISPOSAL = "resource_disposal"

OPTIMIZED = "optimized"
NON_OPTIMIZED = "non_optimized"

# Timings, in seconds
DEBOUNCE_SECONDS = 0.5
FETCH_LATENCY = 0.3
BATCH_LATENCY = 0.5

# Memory examples
MEDIUM_LIST_ITEM_COUNT = 1000
BYTES_PER_ITEM = 100

DEFAULT_CONFIG = {
    "debounce_seconds": DEBOUNCE_SECONDS,
    "fetch_latency": FETCH_LATENCY,
    "batch_latency": BATCH_LATENCY,
    "fetch_keys": ["item1", "item2", "item1", "item2", "item1"],
    "batch_keys": ["item3", "item4", "item5"],
    "query": "flutter",
    "keystroke_interval": 0.05,
    "heavy_iterations": 5,
    "heartbeat_interval": 0.01,
    "screen_opens": 3,
}
