"""Initialize the database"""
import sys
import os

# Project root on the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from database import DatabaseManager
from config.budget_config import budget_config
from config.settings import settings
from loguru import logger


def init_database(database_url=None):
    """Create the tables and insert seed data.

    Safe to run repeatedly: templates are matched by name and the settings
    row is only filled in.
    """
    logger.info("Initializing database...")

    db = DatabaseManager(database_url)

    logger.info("Creating tables...")
    db.create_tables()

    logger.info("Inserting seed data...")

    for template in budget_config.get_default_email_templates():
        db.email_templates.get_or_create(
            name=template["name"],
            category=template["category"],
            subject=template["subject"],
            body=template["body"],
            is_default=True,
        )
        logger.info(f"Email template ready: {template['name']}")

    row = db.org_settings.get()
    logger.info(f"Organization settings ready (id={row.id})")
    if row.organization_name is None:
        db.org_settings.save({
            "timezone": settings.default_timezone,
            "language": settings.default_language,
        })

    logger.info("Database initialization completed!")
    return db


if __name__ == "__main__":
    init_database().close()
