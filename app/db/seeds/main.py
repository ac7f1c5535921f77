"""
Main seeding file that orchestrates all database seeding operations.
"""

from app.db.session import SessionLocal
from app.utils.logging import get_logger

from .students_seed import seed_students

logger = get_logger()


def seed_all_data():
    """Sync version: Seed all database tables."""

    db_session = SessionLocal()
    try:
        logger.info("Starting database seeding...")
        seed_students(db_session)
        logger.info("Database seeding completed successfully")
    except Exception as e:
        logger.error(f"Database seeding failed: {e}")
        db_session.rollback()
        raise
    finally:
        db_session.close()
