"""Script to import partners or loans from a spreadsheet file."""

import argparse
import asyncio
from pathlib import Path

from components.core.config import get_settings
from components.core.init_db import db_manager, get_db
from components.core.logging import get_logger, setup_logging
from components.imports.repository import ImportRepository

logger = get_logger(__name__)


async def import_file(path: Path, kind: str) -> bool:
    """Import ``path`` as partners or loans and log every rejected row."""
    await db_manager.create_tables()

    async for db in get_db():
        repo = ImportRepository(db)
        with open(path, "rb") as f:
            if kind == "partners":
                result = await repo.import_partners(f, path.name)
            else:
                result = await repo.import_loans(f, path.name)

        logger.info(result.message)
        for error in result.errors or []:
            logger.warning("Row %d: %s", error.row, error.message)
        return result.success
    return False


def main() -> None:
    parser = argparse.ArgumentParser(description="Import partners or loans from a .csv or .xlsx file")
    parser.add_argument("kind", choices=["partners", "loans"])
    parser.add_argument("path", type=Path)
    args = parser.parse_args()

    settings = get_settings()
    setup_logging(settings.LOG_LEVEL, settings.LOG_FORMAT)
    ok = asyncio.run(import_file(args.path, args.kind))
    raise SystemExit(0 if ok else 1)


if __name__ == "__main__":
    main()
