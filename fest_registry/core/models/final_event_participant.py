"""
Final event participants: the permanent roster used for event-day verification.

Rows are inserted only by the final-approval transaction and are never updated or
deleted afterwards. Display fields are copied at approval time so later edits to the
source student/accompanist do not change what was approved.
"""

from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from fest_registry.db.session import Base


class FinalEventParticipant(Base):
    __tablename__ = "final_event_participants"
    __table_args__ = (
        UniqueConstraint("college_id", "student_id", name="uq_final_participant_college_student"),
        UniqueConstraint("college_id", "accompanist_id", name="uq_final_participant_college_accompanist"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    college_id = Column(Integer, ForeignKey("colleges.id", ondelete="RESTRICT"), nullable=False, index=True)
    # STUDENT | ACCOMPANIST
    person_type = Column(String(20), nullable=False)
    student_id = Column(Integer, ForeignKey("students.id", ondelete="RESTRICT"), nullable=True)
    accompanist_id = Column(Integer, ForeignKey("accompanists.id", ondelete="RESTRICT"), nullable=True)

    full_name = Column(String(255), nullable=False)
    phone = Column(String(20), nullable=True)
    email = Column(String(255), nullable=True)
    gender = Column(String(20), nullable=True)
    usn = Column(String(20), nullable=True)
    department = Column(String(255), nullable=True)
    year_of_study = Column(Integer, nullable=True)
    semester = Column(Integer, nullable=True)
    accompanist_type = Column(String(20), nullable=True)
    is_team_manager = Column(Boolean, nullable=False, default=False)
    passport_photo_url = Column(Text, nullable=True)
    id_proof_url = Column(Text, nullable=True)
    college_id_card_url = Column(Text, nullable=True)

    qr_code = Column(String(100), unique=True, nullable=False)
    qr_assigned_at = Column(DateTime(timezone=True), nullable=False)
    approved_by = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
