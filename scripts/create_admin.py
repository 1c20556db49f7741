"""
Script to create an admin account, or reset an existing admin's password.
Run: python -m scripts.create_admin admin@gym.example 'S3curePassw0rd' "Front Desk"
"""
import sys
import os

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.db.session import SessionLocal
from app.db.init_db import init_db
from app.db.models.admin_user import AdminUser
from app.core.security import hash_password
import logging

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8


def create_admin(email: str, password: str, full_name: str = "Admin") -> bool:
    """Create the admin, or update the password if the email already exists."""
    if len(password) < MIN_PASSWORD_LENGTH:
        logger.error(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        return False

    init_db()
    db = SessionLocal()
    try:
        email = email.strip().lower()
        admin = db.query(AdminUser).filter(AdminUser.email == email).first()

        if admin:
            logger.info(f"Found existing admin: {email} (ID: {admin.id}), resetting password")
            admin.password_hash = hash_password(password)
        else:
            logger.info(f"Creating new admin: {email}")
            admin = AdminUser(email=email, full_name=full_name, password_hash=hash_password(password))
            db.add(admin)

        db.commit()
        logger.info(f"Admin {email} is ready")
        return True
    except Exception:
        db.rollback()
        logger.exception(f"Failed to create admin {email}")
        return False
    finally:
        db.close()


if __name__ == "__main__":
    if len(sys.argv) < 3:
        print("Usage: python -m scripts.create_admin <email> <password> [full_name]")
        sys.exit(1)

    name = sys.argv[3] if len(sys.argv) > 3 else "Admin"
    success = create_admin(sys.argv[1], sys.argv[2], name)
    sys.exit(0 if success else 1)
