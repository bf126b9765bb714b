#!/usr/bin/env python3
"""Fills an empty database with the default catalog. From the project root: python3 scripts/seed_catalog.py"""
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from sqlmodel import Session  # noqa: E402

from fiberorder.core.database import engine, init_db  # noqa: E402
from fiberorder.logging import setup_logging  # noqa: E402
from fiberorder.seed import seed_catalog  # noqa: E402


def main():
    setup_logging()
    init_db()
    with Session(engine) as db:
        created = seed_catalog(db)
    for kind, count in created.items():
        print(f"{kind}: {count} neu")


if __name__ == "__main__":
    main()
