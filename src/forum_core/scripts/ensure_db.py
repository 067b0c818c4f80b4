"""Utility script to create (or reset) the configured forum database."""
from __future__ import annotations

import argparse
import sys

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError

from forum_core.core.settings import settings
from forum_core.db.session import drop_tables, ensure_schema


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Ensure or reset the configured database")
    parser.add_argument(
        "--drop-tables",
        action="store_true",
        help="Drop every forum table before recreating the schema.",
    )
    parser.add_argument(
        "--url",
        default=None,
        help="Override database URL (defaults to effective settings URL)",
    )
    args = parser.parse_args(argv)

    url = args.url or settings.effective_database_url
    engine = create_engine(url)
    try:
        if args.drop_tables:
            drop_tables(engine)
            print("[ensure_db] dropped all tables")
        ensure_schema(engine)
        print("[ensure_db] schema ready, categories seeded")
    except SQLAlchemyError as exc:
        print(f"[ensure_db] ERROR: {exc}", file=sys.stderr)
        sys.exit(1)
    finally:
        engine.dispose()


if __name__ == "__main__":
    main()
