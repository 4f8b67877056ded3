#!/usr/bin/env python3
"""Bulk-import records from CSV or parquet (columns: description, tags, path).

Tags are split on "|" or ",". Ids are assigned by the store, continuing
after the last existing record.
"""
from __future__ import annotations

import argparse
import re
from pathlib import Path

import pandas as pd

from app.core.config import settings
from app.core.logging import configure_logging
from app.db.store import RecordStore
from app.schemas import RecordCandidate

_TAG_SPLIT = re.compile(r"[|,]")


def split_tags(value, max_tags: int) -> list[str]:
    if isinstance(value, str):
        parts = _TAG_SPLIT.split(value)
    elif value is None:
        return []
    elif hasattr(value, "__iter__"):
        # parquet list columns arrive as arrays
        parts = list(value)
    elif pd.isna(value):
        return []
    else:
        parts = [value]
    return [str(t).strip() for t in parts if str(t).strip()][:max_tags]


def load_frame(path: Path) -> pd.DataFrame:
    if path.suffix == ".parquet":
        df = pd.read_parquet(path)
    else:
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
    missing = {"description", "path"} - set(df.columns)
    if missing:
        raise SystemExit(f"{path}: missing column(s) {', '.join(sorted(missing))}")
    if "tags" not in df.columns:
        df["tags"] = ""
    df["description"] = df["description"].astype(str).str.strip()
    df["path"] = df["path"].astype(str).str.strip()
    # Rows without a description or path cannot become records
    return df[(df["description"] != "") & (df["path"] != "")]


def to_candidates(df: pd.DataFrame, max_tags: int) -> list[RecordCandidate]:
    return [
        RecordCandidate(description=d, tags=split_tags(t, max_tags), path=p)
        for d, t, p in df[["description", "tags", "path"]].itertuples(index=False, name=None)
    ]


def main() -> None:
    p = argparse.ArgumentParser()
    p.add_argument("source", help="CSV or parquet file")
    p.add_argument("--data", default=settings.data_path, help="Record store JSON file")
    p.add_argument("--dry-run", action="store_true", help="Parse and report only")
    args = p.parse_args()
    configure_logging()

    df = load_frame(Path(args.source))
    candidates = to_candidates(df, settings.max_tags)
    if args.dry_run:
        print(f"Parsed {len(candidates)} records from {args.source}")
        return
    store = RecordStore(args.data)
    saved = [store.append_entry_sync(c) for c in candidates]
    if saved:
        print(f"Imported {len(saved)} records (ids {saved[0].id}-{saved[-1].id}) into {store.path}")
    else:
        print("Nothing to import")


if __name__ == "__main__":
    main()
