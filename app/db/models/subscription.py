from sqlalchemy import Column, Integer, Date, DateTime, ForeignKey, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base import Base


class Subscription(Base):
    """
    One paid membership term.

    Pause state is carried only by ``inactive_start_date``: present means paused.
    ``days_remaining`` holds the balance frozen at the pause and is cleared on resume.
    ``last_active_date`` is the date up to which ``active_days`` has been accounted.
    """
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    member_id = Column(Integer, ForeignKey("members.id"), nullable=False, index=True)

    payment_date = Column(Date, nullable=False)
    expiration_date = Column(Date, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    total_days = Column(Integer, nullable=False)
    active_days = Column(Integer, nullable=False, default=0)
    inactive_days = Column(Integer, nullable=False, default=0)
    inactive_start_date = Column(Date, nullable=True)
    days_remaining = Column(Integer, nullable=True)
    last_active_date = Column(Date, nullable=True)

    member = relationship("Member", back_populates="subscriptions")

    __table_args__ = (
        Index("idx_subscriptions_member_payment", "member_id", "payment_date"),
    )
