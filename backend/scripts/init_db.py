"""Initialize the database - creates all tables and the default admin account."""
import logging
import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.database import engine, Base, SessionLocal
import app.models  # noqa: F401 - registers all models
from app.services.auth_service import ensure_default_admin

logger = logging.getLogger("init_db")


def init_db():
    logger.info("Creating all database tables...")
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        admin = ensure_default_admin(db)
    finally:
        db.close()
    if admin is not None:
        logger.info("Default admin account: %s", admin.email)
    logger.info("Database initialized successfully.")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    init_db()
