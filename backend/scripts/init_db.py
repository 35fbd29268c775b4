"""
Create the dialysis care tables without starting the API.
Run from backend/: python -m scripts.init_db [--drop]

--drop removes every table first (local development only).
"""

import argparse
import asyncio
import logging
from dialysis_care.config import get_settings
from dialysis_care.database import engine, Base
from dialysis_care.logging_config import configure_logging
import dialysis_care.models  # noqa: F401  (registers tables on Base.metadata)

logger = logging.getLogger("scripts.init_db")


async def init(drop: bool = False):
    async with engine.begin() as conn:
        if drop:
            logger.warning("Dropping %d tables", len(Base.metadata.tables))
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Tables ready: %s", ", ".join(sorted(Base.metadata.tables)))
    await engine.dispose()


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--drop", action="store_true", help="drop existing tables first")
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(settings.log_level, settings.log_format)
    asyncio.run(init(drop=args.drop))


if __name__ == "__main__":
    main()
