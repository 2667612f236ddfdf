import logging
import os

from sqlalchemy import select

from app.core.logging import setup_logging
from app.core.security import hash_password
from app.db.session import SessionLocal, engine, Base
from app.db.models import _all
from app.db.models.user import User

logger = logging.getLogger(__name__)


def create_admin_user():
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()

    email = os.getenv("ADMIN_EMAIL", "admin@comunimo.it").lower()
    password = os.getenv("ADMIN_PASSWORD", "admin123")

    try:
        existing_user = db.execute(
            select(User).where(User.email == email)
        ).scalar_one_or_none()

        if existing_user:
            logger.warning("A user with email %s already exists (role: %s)", existing_user.email, existing_user.role)
            return

        admin_user = User(
            email=email,
            full_name="Amministratore",
            hashed_password=hash_password(password),
            role="super_admin",
        )

        db.add(admin_user)
        db.commit()

        logger.info("Admin user %s created, change the password as soon as possible", email)

    except Exception:
        db.rollback()
        logger.exception("Error creating the admin user")
        raise

    finally:
        db.close()


if __name__ == "__main__":
    setup_logging()
    create_admin_user()
