#!/usr/bin/env python3
"""
Generate sample fixture files for trying out warehouse_re.

Writes a Parquet file with semi-structured columns plus a fixture YAML
pointing at it, so the CLI can be run without warehouse access:

    python samples/generate_samples.py
    warehouse-re infer --fixture samples/demo.yaml
"""

import json
import random
from pathlib import Path

import numpy as np
import pandas as pd
import yaml

random.seed(42)
np.random.seed(42)

# Output directory
OUTPUT_DIR = Path(__file__).parent

EVENT_TYPES = ["click", "view", "purchase"]


def generate_events(n: int = 50) -> pd.DataFrame:
    """Events with VARIANT, ARRAY and OBJECT columns stored as JSON text."""
    rows = []
    for i in range(1, n + 1):
        event_type = random.choice(EVENT_TYPES)
        if event_type == "purchase":
            payload = {"amount": round(float(np.random.gamma(2.0, 30.0)), 2), "currency": "EUR"}
        elif event_type == "click":
            payload = random.choice([[1, 2], "button", None])
        else:
            payload = random.randint(1, 100)

        rows.append({
            "EVENT_ID": i,
            "EVENT_TYPE": event_type,
            "PAYLOAD": json.dumps(payload),
            "TAGS": json.dumps(random.sample(["web", "mobile", 1, {"ab": "b"}], k=2)),
            "CONTEXT": json.dumps({"device": random.choice(["ios", "android"]), "session": i % 7}),
        })
    return pd.DataFrame(rows)


def build_fixture(sample_file: str) -> dict:
    return {
        "tables": [
            {
                "database": "DEMO",
                "schema": "PUBLIC",
                "name": "EVENTS",
                "sample_file": sample_file,
                "row_count": 50,
                "clustering_key": "LINEAR(EVENT_TYPE, TO_DATE(SUBSTRING(PAYLOAD:ts, 1, 10)))",
                "columns": [
                    {"name": "EVENT_ID", "type": "NUMBER(38,0)"},
                    {"name": "EVENT_TYPE", "type": "VARCHAR(16)"},
                    {"name": "PAYLOAD", "type": "VARIANT"},
                    {"name": "TAGS", "type": "ARRAY"},
                    {"name": "CONTEXT", "type": "OBJECT"},
                ],
                "info": {"TABLE_TYPE": "BASE TABLE", "IS_TRANSIENT": "NO", "COMMENT": "Demo events"},
            },
        ],
        "containers": {
            "DEMO.PUBLIC": {
                "database": {"COMMENT": "Demo database"},
                "schema": {"IS_TRANSIENT": "NO", "RETENTION_TIME": 1},
            },
        },
    }


def main() -> None:
    events = generate_events()
    events.to_parquet(OUTPUT_DIR / "events.parquet", index=False)
    print(f"Generated {len(events)} rows in events.parquet")

    with open(OUTPUT_DIR / "demo.yaml", "w") as f:
        yaml.safe_dump(build_fixture("events.parquet"), f, sort_keys=False)
    print("Generated demo.yaml")


if __name__ == "__main__":
    main()
