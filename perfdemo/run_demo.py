"""
Entrypoint for the comparison demo: runs each technique in its optimized and
non-optimized form, writes outputs/comparison.csv and the SQL summary next to it.
Demo parameters come from demo_config.json at the repository root.
"""
from pathlib import Path
import logging
from perfdemo.demo import run_comparison
from perfdemo.helpers import load_config
from perfdemo.report import summarize

ROOT = Path(__file__).resolve().parents[1]
LOG = ROOT / "logs" / "demo.log"
OUT = ROOT / "outputs"
CONFIG = ROOT / "demo_config.json"


def main():
    LOG.parent.mkdir(exist_ok=True)
    OUT.mkdir(exist_ok=True)
    logging.basicConfig(level=logging.INFO, filename=LOG, filemode="w",
                        format="%(asctime)s %(levelname)s %(message)s")
    print("Logging to", LOG)

    config = load_config(CONFIG if CONFIG.exists() else None)
    df = run_comparison(config=config, out_dir=OUT)
    print(df.to_string(index=False))

    summarize(OUT / "comparison.csv", OUT)
    print("Demo finished. Outputs:", sorted(p.name for p in OUT.iterdir()))


if __name__ == "__main__":
    main()
