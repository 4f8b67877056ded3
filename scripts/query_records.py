#!/usr/bin/env python3
from __future__ import annotations

import argparse

from app.core.config import settings
from app.db.store import RecordStore
from app.services.ranker import get_ranker


def main() -> None:
    p = argparse.ArgumentParser(description="Rank stored records for a free-text query")
    p.add_argument("query")
    p.add_argument("-k", "--top-k", type=int, default=settings.default_top_k)
    p.add_argument("--data", default=settings.data_path, help="Record store JSON file")
    args = p.parse_args()

    records = RecordStore(args.data).read_all_sync()
    hits = get_ranker().rank(args.query, records, k=args.top_k)
    if not hits:
        print(f"No matches among {len(records)} records")
        return
    for rec, s in hits:
        print(f"{rec.id:>6}  {s:5.1f}  {rec.description[:70]}  [{', '.join(rec.tags)}]  {rec.path}")


if __name__ == "__main__":
    main()
