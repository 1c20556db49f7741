"""
Database models module.

Imports every model so they are registered with SQLAlchemy's Base.metadata
before table creation and Alembic autogeneration.
"""
from app.db.models.admin_user import AdminUser
from app.db.models.member import Member
from app.db.models.subscription import Subscription

__all__ = [
    "AdminUser",
    "Member",
    "Subscription",
]
