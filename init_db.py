#!/usr/bin/env python
# init_db.py: create the schema and load the seed data
import argparse
import sys

from sqlalchemy.exc import SQLAlchemyError

from shopfront.config import Settings
from shopfront.database import Database
from shopfront.logging_config import get_logger, setup_logging
from shopfront.seed import apply_seed

log = get_logger("init_db")


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Initialize the shopfront database")
    parser.add_argument("--reset", action="store_true", help="Drop every table before creating them")
    parser.add_argument("--seed", action="store_true", help="Load roles, staff, settings and the catalog")
    parser.add_argument("--database-url", help="Overrides SHOPFRONT_DATABASE_URL")
    args = parser.parse_args(argv)

    settings = Settings()
    if args.database_url:
        settings = Settings(database_url=args.database_url)
    setup_logging(settings.log_level, settings.log_file)

    database = Database.from_settings(settings)
    try:
        if args.reset:
            log.warning("Dropping all tables")
            database.drop_all()
        database.create_all()
        log.info("Schema ready")
        if args.seed:
            with database.session() as db:
                apply_seed(db)
    except SQLAlchemyError as e:
        log.error(f"Database initialization failed: {e}")
        return 1
    finally:
        database.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
