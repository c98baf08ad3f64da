#!/usr/bin/env python3
"""
Merge a support-resources CSV into public/resources.json.

Usage:
  python ingest_cli.py --csv "Support Resources.csv" [--mode append|replace] [--resources public/resources.json]
"""
import argparse
import sys
from pathlib import Path

from supportchat.config import settings
from supportchat.ingest import MODES, IngestPipeline


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--csv", required=True)
    parser.add_argument("--mode", choices=MODES, default="append")
    parser.add_argument("--resources", default=None)
    args = parser.parse_args()

    pipeline = IngestPipeline(settings)
    try:
        result = pipeline.ingest_csv(
            Path(args.csv),
            mode=args.mode,
            resources_path=Path(args.resources) if args.resources else None,
        )
    except (FileNotFoundError, ValueError) as e:
        print(e, file=sys.stderr)
        sys.exit(1)

    print(f"Ingested {result.rows} rows -> {result.unique} unique FAQ items.")
    print(f"Merged into resources.json. Total FAQ count: {result.total}.")


if __name__ == "__main__":
    main()
