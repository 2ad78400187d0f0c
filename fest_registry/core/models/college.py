from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from fest_registry.db.session import Base


class College(Base):
    """
    Participating college.

    - is_final_approved: roster lock. Goes false -> true exactly once, in the final-approval
      transaction, together with final_approved_at and final_approved_by. Never reset.
    - max_quota: cap on approved students + accompanists.
    """

    __tablename__ = "colleges"

    id = Column(Integer, primary_key=True, autoincrement=True)
    college_code = Column(String(20), unique=True, nullable=False, index=True)
    college_name = Column(String(255), nullable=False)
    max_quota = Column(Integer, nullable=False, default=45)
    is_final_approved = Column(Boolean, nullable=False, default=False)
    final_approved_at = Column(DateTime(timezone=True), nullable=True)
    final_approved_by = Column(
        Integer,
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_colleges_final_approved_by"),
        nullable=True,
    )
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    students = relationship("Student", back_populates="college")
    accompanists = relationship("Accompanist", back_populates="college")
