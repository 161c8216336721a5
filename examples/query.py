"""Summarise an exported decode report - message mix and warnings."""
from __future__ import annotations

import sys
from pathlib import Path

import duckdb
import pandas as pd


def main() -> None:
    if len(sys.argv) < 2:
        print("Usage: python query.py <export_dir> [api_name]")
        print("Example: python query.py report/ A53LITE_LAUNCH_FUNC")
        sys.exit(1)

    export = Path(sys.argv[1])
    api_name = sys.argv[2] if len(sys.argv) > 2 else None

    con = duckdb.connect(":memory:")

    con.execute(f"CREATE VIEW messages AS SELECT * FROM '{export}/messages.parquet'")
    con.execute(f"CREATE VIEW warnings AS SELECT * FROM '{export}/warnings.parquet'")

    print("--- Message mix ---\n")
    mix = con.execute("""
    SELECT api_name, COUNT(*) AS n, SUM(payload_bytes_read) AS payload_bytes,
           AVG(duration) AS avg_duration
    FROM messages
    GROUP BY api_name
    ORDER BY n DESC
    """).fetchdf()
    for _, row in mix.iterrows():
        print(f"{row['api_name']}: {row['n']} messages, {row['payload_bytes']} payload bytes, "
              f"avg duration {row['avg_duration']:.1f}")

    sql = """
    SELECT m."index", m."offset", m.api_name, w.kind, w.message
    FROM warnings w
    LEFT JOIN messages m ON m."index" = w.message_index
    """
    params: list = []
    if api_name:
        sql += " WHERE m.api_name = ?"
        params.append(api_name)
    sql += ' ORDER BY m."index" NULLS LAST'

    print("\n--- Warnings ---\n")
    df = con.execute(sql, params).fetchdf()
    if df.empty:
        print("No structural warnings.")
    else:
        for _, row in df.iterrows():
            where = "stream" if pd.isna(row["index"]) else f"#{int(row['index']) + 1}"
            print(f"[{row['kind']}] {where}: {row['message']}")


if __name__ == "__main__":
    main()
