#!/usr/bin/env python3
"""
Initialize the Lending Library database.

This script:
1. Creates all database tables
2. Optionally loads the sample catalog and members
3. Verifies the database is ready for MCP server use

Usage:
    python scripts/init_database.py [--drop-existing] [--sample-data [--members N] [--books N]]
"""

import argparse
import logging
import sys

from sqlalchemy import inspect

from lending_library_mcp.database import Base, get_db_manager, seed_library

logging.basicConfig(
    level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)


def main():
    """Main entry point for database initialization."""
    parser = argparse.ArgumentParser(
        description="Initialize the Lending Library MCP Server database"
    )
    parser.add_argument(
        "--drop-existing",
        action="store_true",
        help="Drop existing tables before creating new ones",
    )
    parser.add_argument(
        "--sample-data",
        action="store_true",
        help="Load sample items and members after creating tables",
    )
    parser.add_argument(
        "--members",
        type=int,
        default=0,
        help="Generated members to add on top of the samples (with --sample-data)",
    )
    parser.add_argument(
        "--books",
        type=int,
        default=0,
        help="Generated books to add on top of the samples (with --sample-data)",
    )
    parser.add_argument(
        "--database-url",
        help="Override default database URL",
    )

    args = parser.parse_args()

    logger.info("Initializing database manager...")
    db_manager = get_db_manager(args.database_url)

    if not db_manager.verify_connection():
        logger.error("Failed to connect to database")
        sys.exit(1)

    try:
        logger.info("Creating database schema...")
        db_manager.init_database(drop_existing=args.drop_existing)

        if args.sample_data:
            logger.info("Loading sample data...")
            with db_manager.session_scope() as session:
                seed_library(session, extra_members=args.members, extra_books=args.books)

        tables = set(inspect(db_manager.engine).get_table_names())
        logger.info("Created tables: %s", ", ".join(sorted(tables)))

        missing_tables = set(Base.metadata.tables) - tables
        if missing_tables:
            logger.error("Missing expected tables: %s", ", ".join(sorted(missing_tables)))
            sys.exit(1)

        logger.info("Database initialization complete!")

    except Exception:
        logger.exception("Database initialization failed")
        sys.exit(1)
    finally:
        db_manager.close()


if __name__ == "__main__":
    main()
