from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from fest_registry.db.session import Base


class Accompanist(Base):
    """
    Non-competing adult travelling with a college's delegation (faculty or professional).

    student_id links an accompanist who is also a registered student of the college;
    final approval counts such a person once. The team manager row (is_team_manager) is
    created from the manager profile flow and cannot be deleted as a normal accompanist.
    """

    __tablename__ = "accompanists"

    id = Column(Integer, primary_key=True, autoincrement=True)
    college_id = Column(Integer, ForeignKey("colleges.id", ondelete="CASCADE"), nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=False)
    email = Column(String(255), nullable=True)
    accompanist_type = Column(String(20), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    is_team_manager = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    passport_photo_url = Column(Text, nullable=True)
    id_proof_url = Column(Text, nullable=True)
    college_id_card_url = Column(Text, nullable=True)
    created_by_user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    college = relationship("College", back_populates="accompanists")
    student = relationship("Student", foreign_keys=[student_id])
