"""Apply Alembic migrations up to head."""
from __future__ import annotations

import os

from alembic import command
from alembic.config import Config

from forum_core.core.settings import settings

MIGRATIONS_DIR = os.path.join(os.path.dirname(__file__), "..", "..", "..", "migrations")


def run_upgrade_head(url: str | None = None) -> None:
    cfg = Config()
    cfg.set_main_option("script_location", os.path.abspath(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", url or settings.effective_database_url)
    command.upgrade(cfg, "head")


if __name__ == "__main__":
    run_upgrade_head()
