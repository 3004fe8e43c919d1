from __future__ import annotations

import logging
import os

from alembic import command
from alembic.config import Config

logger = logging.getLogger(__name__)

ALEMBIC_CONFIG = os.getenv("ALEMBIC_CONFIG", "alembic.ini")


def run_upgrade_head(config_path: str = ALEMBIC_CONFIG) -> None:
    logger.info("applying migrations from %s", config_path)
    command.upgrade(Config(config_path), "head")


if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    run_upgrade_head()
