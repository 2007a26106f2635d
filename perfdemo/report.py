"""
SQL summary of a comparison run using DuckDB, written to sql_savings.csv:
one row per technique with optimized vs non-optimized counters side by side.
"""
import logging
from pathlib import Path

import duckdb
import pandas as pd

logger = logging.getLogger(__name__)

# elapsed_ratio < 1 means the optimized variant finished sooner
savings_sql = """
SELECT
    technique,
    MAX(CASE WHEN variant = 'optimized' THEN requests END) AS requests_optimized,
    MAX(CASE WHEN variant = 'non_optimized' THEN requests END) AS requests_non_optimized,
    MAX(CASE WHEN variant = 'optimized' THEN callbacks END) AS callbacks_optimized,
    MAX(CASE WHEN variant = 'non_optimized' THEN callbacks END) AS callbacks_non_optimized,
    MAX(CASE WHEN variant = 'optimized' THEN ticks END) AS ticks_optimized,
    MAX(CASE WHEN variant = 'non_optimized' THEN ticks END) AS ticks_non_optimized,
    MAX(CASE WHEN variant = 'optimized' THEN leaked END) AS leaked_optimized,
    MAX(CASE WHEN variant = 'non_optimized' THEN leaked END) AS leaked_non_optimized,
    ROUND(
        MAX(CASE WHEN variant = 'optimized' THEN elapsed_s END)
        / NULLIF(MAX(CASE WHEN variant = 'non_optimized' THEN elapsed_s END), 0),
        3
    ) AS elapsed_ratio
FROM comparison
GROUP BY technique
ORDER BY technique;
"""


def summarize(csv_path: Path, out_dir: Path) -> pd.DataFrame:
    out_dir = Path(out_dir)
    conn = duckdb.connect(database=":memory:")
    try:
        # Path goes through the relation API, never into SQL text
        conn.read_csv(str(csv_path), header=True).create("comparison")
        df = conn.sql(savings_sql).df()
    except duckdb.Error:
        logger.exception("Savings SQL failed for %s", csv_path)
        raise
    finally:
        conn.close()
    df.to_csv(out_dir / "sql_savings.csv", index=False)
    logger.info("Wrote %s", out_dir / "sql_savings.csv")
    return df
