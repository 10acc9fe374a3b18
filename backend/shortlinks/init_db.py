"""
Initialize database and optionally create a first user.

Run this once to set up the database:
    python -m shortlinks.init_db --email admin@example.com --password changeme1
"""
import argparse
import logging
from typing import Optional

from .config import settings
from .core.log import configure_logging
from .core.security import EmailAlreadyRegistered, create_user
from .database import engine, Base, SessionLocal
from . import models  # noqa: F401

logger = logging.getLogger(__name__)


def init_database() -> None:
    """Create all database tables"""
    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created")


def create_initial_user(email: str, password: str) -> Optional[models.User]:
    """Create a user unless the email already exists; returns the new user."""
    db = SessionLocal()
    try:
        user = create_user(db, email, password)
    except EmailAlreadyRegistered:
        logger.info("User %s already exists, skipping", email)
        return None
    finally:
        db.close()

    logger.info("Created user %s", email)
    return user


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Create tables and an optional first user")
    parser.add_argument("--email")
    parser.add_argument("--password")
    args = parser.parse_args(argv)

    if bool(args.email) != bool(args.password):
        parser.error("--email and --password must be given together")

    configure_logging(settings.LOG_LEVEL)
    init_database()

    if args.email:
        create_initial_user(args.email, args.password)


if __name__ == "__main__":
    main()
