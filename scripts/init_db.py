"""
Create the schema, the default administrator and (optionally) sample data.

Usage: python scripts/init_db.py [--sample-data]
"""

import argparse
import logging
import os
import sys

# Add backend directory to path to allow importing store_ratings modules
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "backend"))

from store_ratings.database import Database
from store_ratings.seed import seed_default_admin, seed_sample_data

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def init_database(sample_data: bool = False) -> None:
    database = Database.from_settings()
    try:
        logger.info("Initializing database...")
        database.create_all()
        with database.session_scope() as db:
            admin = seed_default_admin(db)
            logger.info(f"Admin email: {admin.email}")
            if sample_data:
                counts = seed_sample_data(db)
                logger.info(f"Sample data: {counts}")
        logger.info("Database initialization completed successfully.")
    finally:
        database.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Initialize the store ratings database")
    parser.add_argument("--sample-data", action="store_true", help="Insert sample users, stores and ratings")
    args = parser.parse_args()
    init_database(sample_data=args.sample_data)
