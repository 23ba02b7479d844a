import sys
import os
import logging

# Add backend directory to path to allow importing store_ratings modules
sys.path.append(os.path.join(os.path.dirname(__file__), "..", "backend"))

from store_ratings.database import Database

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def reset_database():
    database = Database.from_settings()
    try:
        logger.info("Starting database reset...")

        logger.info("Dropping all tables...")
        database.drop_all()

        logger.info("Recreating all tables...")
        database.create_all()

        logger.info("Database reset completed successfully.")
    finally:
        database.dispose()


if __name__ == "__main__":
    reset_database()
